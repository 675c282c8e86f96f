"""User management operations."""
from __future__ import annotations
from typing import Optional, Tuple

from .client import AuthorizeHandle
from .exceptions import ErrorResult
from .models import (
    AddStaffUserRequest,
    AddUserRequest,
    ClearAuthRequest,
    DefaultPasswordResult,
    EditUserRequest,
    LoginUserInfo,
    MergeTelUserRequest,
    MergeUserRequest,
    UpdateUserBasicRequest,
    UserActivateInfo,
    UserUpdateInfo,
    UserVersionInfo,
)

ROUTER_PREFIX = "/api/authorize"


class UserService:
    """Service for managing users of the authorization service."""

    def __init__(self, handle: AuthorizeHandle):
        """Initialize user service.

        Args:
            handle: Authorization client handle
        """
        self.handle = handle

    def _identify(self, override: str = "") -> str:
        return override or self.handle.get_config().service_identify

    def _post(self, name: str, body: dict, result_type: Optional[type] = None):
        return self.handle.token_post(f"{ROUTER_PREFIX}/{name}", body, result_type)

    def _post_uid(self, name: str, uid: str, result_type: Optional[type] = None):
        body = {
            "ServiceIdentify": self._identify(),
            "UID": uid,
        }
        return self._post(name, body, result_type)

    def verify_login(self, username: str, password: str) -> Tuple[Optional[LoginUserInfo], Optional[ErrorResult]]:
        """Verify a user's login credentials.

        Args:
            username: User ID (unique identifier)
            password: Password

        Returns:
            (login info, None) or (None, ErrorResult)
        """
        body = {
            "ServiceIdentify": self._identify(),
            "UID": username,
            "Password": password,
        }
        return self._post("verifylogin", body, LoginUserInfo)

    def get_user(self, uid: str) -> Tuple[Optional[LoginUserInfo], Optional[ErrorResult]]:
        """Look up a user by ID."""
        return self._post_uid("getuser", uid, LoginUserInfo)

    def add_user(self, uid: str, user: AddUserRequest) -> Optional[ErrorResult]:
        body = {
            "ServiceIdentify": self._identify(user.service_identify),
            "UID": uid,
            "MobilePhone": user.mobile_phone,
            "UserCode": user.user_code,
            "IDCard": user.id_card,
            "Password": user.password,
            "DefaultPassword": user.default_password,
            "University": user.university,
        }
        _, result = self._post("adduser", body)
        return result

    def edit_user(self, uid: str, user: EditUserRequest) -> Optional[ErrorResult]:
        body = {
            "ServiceIdentify": self._identify(user.service_identify),
            "UID": uid,
            "MobilePhone": user.mobile_phone,
            "UserCode": user.user_code,
            "IDCard": user.id_card,
            "University": user.university,
        }
        _, result = self._post("edituser", body)
        return result

    def del_user(self, uid: str) -> Optional[ErrorResult]:
        _, result = self._post_uid("deluser", uid)
        return result

    def modify_pwd(self, uid: str, password: str, service: str = "") -> Optional[ErrorResult]:
        """Change a user's password, optionally within another service."""
        body = {
            "ServiceIdentify": self._identify(service),
            "UID": uid,
            "Password": password,
        }
        _, result = self._post("modifypwd", body)
        return result

    def check_default_pwd(self, uid: str) -> Tuple[bool, Optional[ErrorResult]]:
        """Check whether the user still has the default password."""
        res, result = self._post_uid("checkdefaultpwd", uid, DefaultPasswordResult)
        if result is not None:
            return False, result
        return res.is_default, None

    def merge_user(self, req: MergeUserRequest) -> Optional[ErrorResult]:
        body = {
            "ServiceIdentify": self._identify(),
            "UID": req.uid,
            "TUID": req.target_uid,
            "TUserCode": req.target_user_code,
            "TUniversity": req.target_university,
        }
        _, result = self._post("mergeuser", body)
        return result

    def merge_tel_user(self, req: MergeTelUserRequest) -> Optional[ErrorResult]:
        """Merge the account registered by mobile phone into the main account."""
        body = {
            "ServiceIdentify": self._identify(),
            "MUID": req.main_uid,
            "CUID": req.merged_uid,
        }
        _, result = self._post("mergeteluser", body)
        return result

    def clear_auth(self, req: ClearAuthRequest) -> Optional[ErrorResult]:
        """Clear a user's authentication information."""
        body = {
            "ServiceIdentify": self._identify(),
            "UID": req.uid,
            "University": req.university,
        }
        _, result = self._post("clearauth", body)
        return result

    def add_staff_user(self, req: AddStaffUserRequest) -> Optional[ErrorResult]:
        body = {
            "ServiceIdentify": self._identify(),
            "UID": req.uid,
            "MobilePhone": req.mobile_phone,
            "UserCode": req.user_code,
            "IDCard": req.id_card,
            "Password": req.password,
            "University": req.university,
            "Name": req.name,
            "Sex": req.sex,
            "DeptID": req.dept_id,
        }
        _, result = self._post("addstaffuser", body)
        return result

    def update_user_basic(self, req: UpdateUserBasicRequest) -> Optional[ErrorResult]:
        body = {
            "ServiceIdentify": self._identify(),
            "UID": req.uid,
            "Name": req.name,
            "DeptID": req.dept_id,
        }
        _, result = self._post("updateuserbasic", body)
        return result

    def get_user_version(self, uid: str) -> Tuple[Optional[UserVersionInfo], Optional[ErrorResult]]:
        return self._post_uid("getuserversion", uid, UserVersionInfo)

    def user_activate(self, uid: str) -> Tuple[Optional[UserActivateInfo], Optional[ErrorResult]]:
        return self._post_uid("useractivate", uid, UserActivateInfo)

    def get_user_update(self, uid: str) -> Tuple[Optional[UserUpdateInfo], Optional[ErrorResult]]:
        return self._post_uid("getuserupdate", uid, UserUpdateInfo)

    def del_staff_user(self, uid: str) -> Optional[ErrorResult]:
        _, result = self._post_uid("delstaffuser", uid)
        return result

    def update_auth_status(self, uid: str) -> Optional[ErrorResult]:
        _, result = self._post_uid("updateauthstatus", uid)
        return result
