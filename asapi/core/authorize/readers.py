"""Cacheable request bodies.

A request body that implements ``RequestReader`` lets the client serve
repeated calls from the router cache. Bodies that don't (plain dicts) are
always sent to the service.
"""
from __future__ import annotations
import hashlib
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict

from .models import WireModel, wire

ROUTER_STAFF_PARAM = "/api/authorize/getstaffparam"
ROUTER_USER_CODE = "/api/authorize/usercode"
ROUTER_ANT_UID_BY_UNIVERSITY = "/api/authorize/antuidbyuniversity"


class RequestReader(ABC):
    """Capability of a request body to be cached per router."""

    @abstractmethod
    def expires(self, router: str) -> int:
        """Cache TTL in seconds for router; zero or less disables caching."""

    @abstractmethod
    def hash(self) -> str:
        """Fingerprint of the cache-relevant fields; empty disables caching."""


def fingerprint(kind: str, values: Dict[str, Any]) -> str:
    """MD5 hex digest of a type name and its identifying fields.

    Values are JSON encoded, keeping field boundaries unambiguous.
    """
    raw = json.dumps([kind, values], sort_keys=True, ensure_ascii=False)
    return hashlib.md5(raw.encode("utf-8")).hexdigest()


class _RouterExpires(RequestReader):
    """RequestReader whose TTL comes from a router table and whose key covers every field."""

    EXPIRES: Dict[str, int] = {}
    KEY_FIELD = ""

    def expires(self, router: str) -> int:
        return self.EXPIRES.get(router, 0)

    def hash(self) -> str:
        if not getattr(self, self.KEY_FIELD):
            return ""
        return fingerprint(type(self).__name__, self.to_wire())


@dataclass(frozen=True)
class GetStaffParamRequest(WireModel, _RouterExpires):
    service_identify: str = wire("ServiceIdentify", default="")
    uid: str = wire("UID", default="")

    EXPIRES = {ROUTER_STAFF_PARAM: 600}
    KEY_FIELD = "uid"


@dataclass(frozen=True)
class GetUserCodeRequest(WireModel, _RouterExpires):
    uid: str = wire("UID", default="")

    EXPIRES = {ROUTER_USER_CODE: 3600}
    KEY_FIELD = "uid"


@dataclass(frozen=True)
class GetAntUIDByUniversityRequest(WireModel, _RouterExpires):
    service_identify: str = wire("ServiceIdentify", default="")
    user_id: str = wire("UserID", default="")
    university: str = wire("University", default="")

    EXPIRES = {ROUTER_ANT_UID_BY_UNIVERSITY: 3600}
    KEY_FIELD = "user_id"
