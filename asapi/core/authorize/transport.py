"""HTTP transport for the authorization client.

Executes a fully prepared request and hands back the status code and raw
body. Interpretation of the status is left to the caller.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import requests

from .exceptions import TransportError

REQUEST_TIMEOUT = 5


@dataclass
class OutboundRequest:
    """Request under construction, filled in by a prepare callback."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)
    data: Optional[bytes] = None
    auth: Optional[Tuple[str, str]] = None

    def header(self, name: str, value: str) -> "OutboundRequest":
        self.headers[name] = value
        return self

    def param(self, name: str, value: str) -> "OutboundRequest":
        self.params[name] = value
        return self

    def basic_auth(self, username: str, password: str) -> "OutboundRequest":
        self.auth = (username, password)
        return self

    def json_body(self, payload: bytes) -> "OutboundRequest":
        """Attach an already encoded JSON document as the request body."""
        self.data = payload
        self.headers["Content-Type"] = "application/json"
        return self


class HTTPTransport:
    """requests-backed transport.

    Usage:
        transport = HTTPTransport(timeout=5)
        status, body = transport.send(OutboundRequest("GET", "http://as/oauth2/verify"))
    """

    def __init__(self, timeout: float = REQUEST_TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, req: OutboundRequest) -> Tuple[int, bytes]:
        """Execute request.

        Query parameters go to the URL for GET requests and to a form-encoded
        body for other methods without a JSON body.

        Returns:
            (status_code, raw response body)

        Raises:
            TransportError: On connection, timeout or other requests failure
        """
        params = None
        data = req.data
        if req.params:
            if req.method.upper() == "GET" or data is not None:
                params = req.params
            else:
                data = req.params
        try:
            resp = self.session.request(
                req.method,
                req.url,
                params=params,
                data=data,
                headers=req.headers or None,
                auth=req.auth,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(str(e)) from e
        return resp.status_code, resp.content

    def close(self) -> None:
        self.session.close()
