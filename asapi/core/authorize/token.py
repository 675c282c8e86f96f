"""Service-principal token handle.

Obtains the access token the client attaches to authenticated calls, using
the OAuth2 client credentials grant, and keeps it until shortly before it
expires.
"""
from __future__ import annotations
import logging
import threading
import time
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from .exceptions import ErrorResult, TransportError
from .models import TokenInfo, decode_payload
from .transport import HTTPTransport, OutboundRequest

if TYPE_CHECKING:
    from asapi.config.settings import Config

logger = logging.getLogger(__name__)

TOKEN_ROUTER = "/oauth2/token"

# Lifetime assumed for tokens issued without expires_in
FALLBACK_TOKEN_LIFETIME = 60


class TokenHandle:
    """Client credentials token source with automatic refresh.

    ``get()`` and ``force_get()`` are safe to call from many threads; only
    one refresh runs at a time.
    """

    def __init__(
        self,
        cfg: "Config",
        transport: Optional[HTTPTransport] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.cfg = cfg
        self.transport = transport or HTTPTransport(timeout=cfg.request_timeout)
        self._clock = clock or time.monotonic
        self._token: Optional[TokenInfo] = None
        self._refresh_at = 0.0
        self._lock = threading.Lock()

    def get(self) -> Tuple[str, Optional[ErrorResult]]:
        """Return a valid access token, refreshing it when close to expiry."""
        with self._lock:
            if self._token is not None and self._clock() < self._refresh_at:
                return self._token.access_token, None
            token, result = self._fetch()
        if result is not None:
            return "", result
        return token.access_token, None

    def force_get(self) -> Tuple[Optional[TokenInfo], Optional[ErrorResult]]:
        """Fetch a new token regardless of the cached one."""
        with self._lock:
            return self._fetch()

    def _fetch(self) -> Tuple[Optional[TokenInfo], Optional[ErrorResult]]:
        req = OutboundRequest("POST", self.cfg.get_url(TOKEN_ROUTER))
        req.basic_auth(self.cfg.client_id, self.cfg.client_secret)
        req.param("grant_type", "client_credentials")

        try:
            status, buf = self.transport.send(req)
        except TransportError as e:
            logger.error(f"Token request failed: {e}")
            return None, ErrorResult(str(e))

        if status != 200:
            logger.error(f"Token request rejected with status {status}")
            return None, ErrorResult(buf.decode("utf-8", "replace"), status)

        try:
            token = decode_payload(buf, TokenInfo)
        except (ValueError, TypeError) as e:
            return None, ErrorResult(str(e))
        if not token.access_token:
            return None, ErrorResult("No access_token in token response")

        lifetime = token.expires_in if token.expires_in > 0 else FALLBACK_TOKEN_LIFETIME
        # Short-lived tokens are kept for at least half their lifetime
        margin = min(self.cfg.token_expiry_margin, lifetime / 2)
        self._token = token
        self._refresh_at = self._clock() + lifetime - margin
        logger.info(f"Service token obtained for client {self.cfg.client_id} (expires in {token.expires_in}s)")
        return token, None
