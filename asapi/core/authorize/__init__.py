"""Authorization service client library.

Architecture:
- client.py: request dispatch, router cache and verification cache
- token.py: service-principal token handle (client credentials)
- transport.py: requests-backed HTTP transport
- cache.py: thread-safe expiring cache
- readers.py: cacheable request bodies (RequestReader)
- models.py: request and response shapes
- users.py / staff.py / tokens.py: service operations
- exceptions.py: error envelope and exceptions

Usage:
    from asapi.config import load_settings
    from asapi.core.authorize import AuthorizeHandle, UserService

    handle = AuthorizeHandle(load_settings())
    info, result = UserService(handle).get_user("u-1001")
    if result is not None:
        ...  # result.status_code is None for local/transport failures
"""
from .cache import ExpiringCache, DEFAULT_GC_INTERVAL
from .client import AuthorizeHandle
from .exceptions import (
    NO_STATUS,
    AsapiError,
    ErrorResult,
    TransportError,
    ConfigurationError,
)
from .models import (
    WireModel,
    LoginUserInfo,
    DefaultPasswordResult,
    UserVersionInfo,
    UserActivateInfo,
    UserUpdateInfo,
    AddUserRequest,
    EditUserRequest,
    MergeUserRequest,
    MergeTelUserRequest,
    ClearAuthRequest,
    AddStaffUserRequest,
    UpdateUserBasicRequest,
    AntStaffParam,
    UserCodeResult,
    AntUIDListResult,
    UIDResult,
    TokenInfo,
    UserTokenInfo,
    VerifyTokenResponse,
    TokenIdentity,
    VerifyTokenInfo,
    PasswordRequest,
)
from .readers import (
    RequestReader,
    GetStaffParamRequest,
    GetUserCodeRequest,
    GetAntUIDByUniversityRequest,
)
from .staff import StaffService
from .token import TokenHandle
from .tokens import TokenService
from .transport import HTTPTransport, OutboundRequest, REQUEST_TIMEOUT
from .users import UserService

__all__ = [
    # Client
    "AuthorizeHandle",
    "TokenHandle",
    "HTTPTransport",
    "OutboundRequest",
    "ExpiringCache",
    "DEFAULT_GC_INTERVAL",
    "REQUEST_TIMEOUT",

    # Errors
    "NO_STATUS",
    "AsapiError",
    "ErrorResult",
    "TransportError",
    "ConfigurationError",

    # Services
    "UserService",
    "StaffService",
    "TokenService",

    # Request bodies
    "RequestReader",
    "GetStaffParamRequest",
    "GetUserCodeRequest",
    "GetAntUIDByUniversityRequest",
    "AddUserRequest",
    "EditUserRequest",
    "MergeUserRequest",
    "MergeTelUserRequest",
    "ClearAuthRequest",
    "AddStaffUserRequest",
    "UpdateUserBasicRequest",
    "PasswordRequest",

    # Results
    "WireModel",
    "LoginUserInfo",
    "DefaultPasswordResult",
    "UserVersionInfo",
    "UserActivateInfo",
    "UserUpdateInfo",
    "AntStaffParam",
    "UserCodeResult",
    "AntUIDListResult",
    "UIDResult",
    "TokenInfo",
    "UserTokenInfo",
    "VerifyTokenResponse",
    "TokenIdentity",
    "VerifyTokenInfo",
]
