"""Token operations: service token access, token verification and user grants."""
from __future__ import annotations
import base64
import json
from typing import Any, Dict, Optional, Tuple

from .client import AuthorizeHandle
from .exceptions import ErrorResult
from .models import PasswordRequest, TokenIdentity, UserTokenInfo, VerifyTokenInfo, VerifyTokenResponse
from .token import TOKEN_ROUTER
from .transport import OutboundRequest

ROUTER_VERIFY = "/oauth2/verify"
ROUTER_VERIFY_V2 = "/oauth2/verify/v2"

# Login models of the password grant
LOGIN_MODEL_PHONE = 1
LOGIN_MODEL_UPGRADE = 9


def _encode_user_name(info: Dict[str, Any]) -> str:
    """The password grant carries login details as base64 encoded JSON in the username."""
    buf = json.dumps(info, ensure_ascii=False).encode("utf-8")
    return base64.b64encode(buf).decode("ascii")


class TokenService:
    """Service for access token operations.

    Verification results are cached per access token until a GC interval
    before the remote token expires.
    """

    def __init__(self, handle: AuthorizeHandle):
        self.handle = handle

    def get_token(self) -> Tuple[str, Optional[ErrorResult]]:
        """Return the service access token (cached or freshly obtained)."""
        return self.handle.th.get()

    def force_get_token(self) -> Tuple[str, Optional[ErrorResult]]:
        """Obtain a new service access token, bypassing the cached one."""
        token, result = self.handle.th.force_get()
        if result is not None:
            return "", result
        return token.access_token, None

    def _verify_prepare(self, token: str):
        def prepare(req: OutboundRequest) -> Optional[ErrorResult]:
            req.param("access_token", token)
            req.param("service", self.handle.get_config().service_identify)
            return None
        return prepare

    def verify_token(self, token: str) -> Tuple[str, str, Optional[ErrorResult]]:
        """Verify an access token.

        Args:
            token: Access token presented by a user

        Returns:
            (user ID, client ID, ErrorResult or None)
        """
        cached = self.handle.get_verified(token, TokenIdentity)
        if cached is not None:
            return cached.user_id, cached.client_id, None

        res, result = self.handle.request(ROUTER_VERIFY, "GET", self._verify_prepare(token), VerifyTokenResponse)
        if result is not None:
            return "", "", result

        self.handle.set_verified(
            token,
            TokenIdentity(user_id=res.user_id, client_id=res.client_id),
            res.expires_in,
        )
        return res.user_id, res.client_id, None

    def verify_token_v2(self, token: str) -> Tuple[Optional[VerifyTokenInfo], Optional[ErrorResult]]:
        """Verify an access token and return the extended token information."""
        cached = self.handle.get_verified(token, VerifyTokenInfo)
        if cached is not None:
            return cached, None

        info, result = self.handle.request(ROUTER_VERIFY_V2, "GET", self._verify_prepare(token), VerifyTokenInfo)
        if result is not None:
            return None, result

        self.handle.set_verified(token, info, info.expires_in)
        return info, None

    def get_upgrade_token(
        self, password: str, uid: str, client_id: str, client_secret: str
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ErrorResult]]:
        """Obtain an upgrade token for a user on behalf of another client."""
        cfg = self.handle.get_config()

        def prepare(req: OutboundRequest) -> Optional[ErrorResult]:
            req.basic_auth(client_id, client_secret)
            req.param("grant_type", "password")
            user_name = _encode_user_name({
                "LoginModel": LOGIN_MODEL_UPGRADE,
                "UserName": uid,
                "ClientID": cfg.client_id,
                "ClientSecret": cfg.client_secret,
            })
            req.param("username", user_name)
            req.param("password", password)
            return None

        return self.handle.request(TOKEN_ROUTER, "POST", prepare, dict)

    def user_login_token(
        self, user_name: str, password: str, service: str
    ) -> Tuple[Optional[UserTokenInfo], Optional[ErrorResult]]:
        """Log a user in with phone number or ID card and password."""
        cfg = self.handle.get_config()
        return self.get_access_token_by_password(PasswordRequest(
            client_id=cfg.client_id,
            client_secret=cfg.client_secret,
            login_model=LOGIN_MODEL_PHONE,
            user_name=user_name,
            service=service,
            password=password,
        ))

    def get_access_token_by_password(
        self, params: PasswordRequest
    ) -> Tuple[Optional[UserTokenInfo], Optional[ErrorResult]]:
        """Obtain a user access token with the password grant."""
        def prepare(req: OutboundRequest) -> Optional[ErrorResult]:
            req.basic_auth(params.client_id, params.client_secret)
            req.param("grant_type", "password")
            try:
                user_name = _encode_user_name({
                    "Service": params.service,
                    "LoginModel": params.login_model,
                    "UserName": params.user_name,
                    "University": params.university,
                })
            except (TypeError, ValueError) as e:
                return ErrorResult(str(e))
            req.param("username", user_name)
            req.param("password", params.password)
            return None

        return self.handle.request(TOKEN_ROUTER, "POST", prepare, UserTokenInfo)

    def user_refresh_token(self, rtoken: str) -> Tuple[Optional[UserTokenInfo], Optional[ErrorResult]]:
        """Exchange a user refresh token for a new access token."""
        cfg = self.handle.get_config()

        def prepare(req: OutboundRequest) -> Optional[ErrorResult]:
            req.basic_auth(cfg.client_id, cfg.client_secret)
            req.param("grant_type", "refresh_token")
            req.param("refresh_token", rtoken)
            return None

        return self.handle.request(TOKEN_ROUTER, "POST", prepare, UserTokenInfo)
