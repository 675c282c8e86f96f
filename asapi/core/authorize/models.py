"""Request and response shapes exchanged with the authorization service.

Field names follow Python conventions; the ``wire`` metadata keeps the exact
JSON key the remote service uses. Decoding matches keys case-insensitively,
so ``{"userCode": ...}`` and ``{"UserCode": ...}`` both fill ``user_code``.
"""
from __future__ import annotations
import json
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

_WIRE_TYPES = {
    "str": str,
    "int": int,
    "bool": bool,
    "List[str]": list,
}


def wire(name: str, **kwargs):
    """Dataclass field bound to a JSON key."""
    return field(metadata={"wire": name}, **kwargs)


def _check_type(cls, f, value):
    expected = _WIRE_TYPES.get(f.type)
    if expected is None:
        return value
    if expected is int and isinstance(value, bool):
        ok = False
    elif expected is int and isinstance(value, float) and value.is_integer():
        return int(value)
    else:
        ok = isinstance(value, expected)
    if not ok:
        raise TypeError(
            f"cannot decode {type(value).__name__} into field {cls.__name__}.{f.name} of type {f.type}"
        )
    if expected is list and not all(isinstance(item, str) for item in value):
        raise TypeError(f"cannot decode non-string item into field {cls.__name__}.{f.name}")
    return value


@dataclass(frozen=True)
class WireModel:
    """Base for dataclasses that round-trip through the service's JSON."""

    @classmethod
    def from_wire(cls, data: Any):
        """Build an instance from decoded JSON.

        ``null`` yields an instance with default values. Missing keys keep
        their defaults, unknown keys are ignored.

        Raises:
            TypeError: If data is not an object or a field has the wrong type
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise TypeError(f"cannot decode {type(data).__name__} into {cls.__name__}")
        lowered = {str(key).lower(): value for key, value in data.items()}
        values = {}
        for f in fields(cls):
            name = f.metadata.get("wire", f.name)
            if name in data:
                value = data[name]
            elif name.lower() in lowered:
                value = lowered[name.lower()]
            else:
                continue
            if value is None:
                continue
            values[f.name] = _check_type(cls, f, value)
        return cls(**values)

    def to_wire(self) -> Dict[str, Any]:
        """Return the JSON object the service expects for this value."""
        return {f.metadata.get("wire", f.name): getattr(self, f.name) for f in fields(self)}


# ─────────────────────────────────────────────────────────────────────────────
# Users
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class LoginUserInfo(WireModel):
    mobile_phone: str = wire("MobilePhone", default="")
    user_code: str = wire("UserCode", default="")
    id_card: str = wire("IDCard", default="")
    password: str = wire("Password", default="")
    default_password: str = wire("DefaultPassword", default="")
    university: str = wire("University", default="")
    user_type: str = wire("UserType", default="")


@dataclass(frozen=True)
class DefaultPasswordResult(WireModel):
    is_default: bool = wire("IsDefault", default=False)


@dataclass(frozen=True)
class UserVersionInfo(WireModel):
    """User version flags (clear_auth: 1 clears auth info; activate: 0 active, 1 inactive)."""
    clear_auth: int = wire("ClearAuth", default=0)
    version: int = wire("Version", default=0)
    activate: int = wire("Activate", default=0)


@dataclass(frozen=True)
class UserActivateInfo(WireModel):
    mobile_phone: str = wire("MobilePhone", default="")
    user_code: str = wire("UserCode", default="")
    id_card: str = wire("IDCard", default="")
    university: str = wire("University", default="")
    real_name: str = wire("RealName", default="")
    sex: str = wire("Sex", default="")
    dept_id: str = wire("DeptID", default="")
    user_type: str = wire("UserType", default="")


@dataclass(frozen=True)
class UserUpdateInfo(WireModel):
    real_name: str = wire("RealName", default="")
    dept_id: str = wire("DeptID", default="")


@dataclass
class AddUserRequest:
    mobile_phone: str = ""
    user_code: str = ""
    id_card: str = ""
    password: str = ""
    default_password: str = ""
    university: str = ""
    service_identify: str = ""


@dataclass
class EditUserRequest:
    mobile_phone: str = ""
    user_code: str = ""
    id_card: str = ""
    university: str = ""
    service_identify: str = ""


@dataclass
class MergeUserRequest:
    uid: str = ""
    target_uid: str = ""
    target_user_code: str = ""
    target_university: str = ""


@dataclass
class MergeTelUserRequest:
    main_uid: str = ""
    merged_uid: str = ""


@dataclass
class ClearAuthRequest:
    uid: str = ""
    university: str = ""


@dataclass
class AddStaffUserRequest:
    uid: str = ""
    mobile_phone: str = ""
    user_code: str = ""
    id_card: str = ""
    password: str = ""
    university: str = ""
    name: str = ""
    sex: str = ""  # F or M
    dept_id: str = ""


@dataclass
class UpdateUserBasicRequest:
    uid: str = ""
    name: str = ""
    dept_id: str = ""


# ─────────────────────────────────────────────────────────────────────────────
# Staff lookups
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class AntStaffParam(WireModel):
    bu_id: str = wire("BuID", default="")
    addr: str = wire("Addr", default="")
    university: str = wire("University", default="")
    intel_user_code: str = wire("IntelUserCode", default="")


@dataclass(frozen=True)
class UserCodeResult(WireModel):
    user_code: str = wire("UserCode", default="")


@dataclass(frozen=True)
class AntUIDListResult(WireModel):
    ant_uids: List[str] = wire("ANTUID", default_factory=list)


@dataclass(frozen=True)
class UIDResult(WireModel):
    uid: str = wire("UID", default="")


# ─────────────────────────────────────────────────────────────────────────────
# Tokens
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class TokenInfo(WireModel):
    """Service-principal token issued by the client credentials grant."""
    access_token: str = wire("access_token", default="")
    token_type: str = wire("token_type", default="")
    expires_in: int = wire("expires_in", default=0)
    refresh_token: str = wire("refresh_token", default="")
    scope: str = wire("scope", default="")


@dataclass(frozen=True)
class UserTokenInfo(WireModel):
    access_token: str = wire("access_token", default="")
    token_type: str = wire("token_type", default="")
    expires_in: int = wire("expires_in", default=0)
    refresh_token: str = wire("refresh_token", default="")
    scope: str = wire("scope", default="")
    user_id: str = wire("user_id", default="")


@dataclass(frozen=True)
class VerifyTokenResponse(WireModel):
    user_id: str = wire("user_id", default="")
    client_id: str = wire("client_id", default="")
    expires_in: int = wire("expires_in", default=0)


@dataclass(frozen=True)
class TokenIdentity:
    """Identity cached for the legacy verification endpoint."""
    user_id: str = ""
    client_id: str = ""


@dataclass(frozen=True)
class VerifyTokenInfo(WireModel):
    user_id: str = wire("user_id", default="")
    business_id: str = wire("business_id", default="")
    user_code: str = wire("user_code", default="")
    client_id: str = wire("client_id", default="")
    expires_in: int = wire("expires_in", default=0)
    service_code: str = wire("service_code", default="")
    service_addr: str = wire("service_addr", default="")


@dataclass
class PasswordRequest:
    """Password grant parameters (login_model 1: phone or ID card, 2: university and user code)."""
    client_id: str = ""
    client_secret: str = ""
    login_model: int = 0
    university: str = ""
    user_name: str = ""
    service: str = ""
    password: str = ""


def zero_value(result_type: Optional[type]) -> Any:
    """Empty result for a result type, as returned after a no-payload success."""
    if result_type is None:
        return None
    return result_type()


def decode_payload(buf: bytes, result_type: Optional[type]) -> Any:
    """Decode a JSON response body into result_type.

    ``dict`` returns the decoded JSON object as-is; a WireModel subclass is
    built with ``from_wire``.

    Raises:
        ValueError: If buf is not valid JSON
        TypeError: If the document does not fit result_type
    """
    data = json.loads(buf)
    if result_type is dict:
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise TypeError(f"cannot decode {type(data).__name__} into object")
        return data
    return result_type.from_wire(data)


def encode_payload(value: Any) -> bytes:
    """Encode a decoded result or request body back to JSON bytes.

    Raises:
        TypeError: If value is not JSON serializable
        ValueError: On circular references or non-finite floats
    """
    if isinstance(value, WireModel):
        value = value.to_wire()
    return json.dumps(value, ensure_ascii=False, allow_nan=False).encode("utf-8")
