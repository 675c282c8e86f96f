"""Staff and ANT user lookups.

The typed request bodies used here implement RequestReader, so repeated
lookups are answered from the router cache when caching is enabled.
"""
from __future__ import annotations
from typing import List, Optional, Tuple

from .client import AuthorizeHandle
from .exceptions import ErrorResult
from .models import AntStaffParam, AntUIDListResult, UIDResult, UserCodeResult
from .readers import (
    ROUTER_ANT_UID_BY_UNIVERSITY,
    ROUTER_STAFF_PARAM,
    ROUTER_USER_CODE,
    GetAntUIDByUniversityRequest,
    GetStaffParamRequest,
    GetUserCodeRequest,
)

ROUTER_ANT_USER = "/api/authorize/getantuser"
ANT_SERVICE = "ANT"


class StaffService:
    """Service for staff parameter and ANT user ID lookups."""

    def __init__(self, handle: AuthorizeHandle):
        self.handle = handle

    def get_staff_param(self, identify: str, uid: str) -> Tuple[str, str, Optional[ErrorResult]]:
        """Get the staff system parameters of a user.

        Returns:
            (business unit ID, staff service address, ErrorResult or None)
        """
        body = GetStaffParamRequest(service_identify=identify, uid=uid)
        # Decoded as the full shape: both lookups share one cache entry per body
        res, result = self.handle.token_post(ROUTER_STAFF_PARAM, body, AntStaffParam)
        if result is not None:
            return "", "", result
        return res.bu_id, res.addr, None

    def get_ant_staff_param(self, uid: str) -> Tuple[Optional[AntStaffParam], Optional[ErrorResult]]:
        body = GetStaffParamRequest(service_identify=ANT_SERVICE, uid=uid)
        return self.handle.token_post(ROUTER_STAFF_PARAM, body, AntStaffParam)

    def get_user_code(self, uid: str) -> Tuple[str, Optional[ErrorResult]]:
        """Get the user code of a user ID."""
        body = GetUserCodeRequest(uid=uid)
        res, result = self.handle.token_post(ROUTER_USER_CODE, body, UserCodeResult)
        if result is not None:
            return "", result
        return res.user_code, None

    def get_ant_uid_list(self, service: str, *uids: str) -> Tuple[List[str], Optional[ErrorResult]]:
        """Map user IDs of a service to ANT user IDs."""
        body = {
            "ServiceIdentify": service or self.handle.get_config().service_identify,
            "UID": list(uids),
        }
        res, result = self.handle.token_post(ROUTER_ANT_USER, body, AntUIDListResult)
        if result is not None:
            return [], result
        return list(res.ant_uids), None

    def get_ant_uid_by_university(self, user_id: str, university: str) -> Tuple[str, Optional[ErrorResult]]:
        body = GetAntUIDByUniversityRequest(
            service_identify=self.handle.get_config().service_identify,
            user_id=user_id,
            university=university,
        )
        res, result = self.handle.token_post(ROUTER_ANT_UID_BY_UNIVERSITY, body, UIDResult)
        if result is not None:
            return "", result
        return res.uid, None
