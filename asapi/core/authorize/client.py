"""Request dispatch for the authorization service.

Builds outbound calls, serves cacheable requests from the router cache,
attaches the service token and classifies the outcome into an ErrorResult.
"""
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple

from .cache import DEFAULT_GC_INTERVAL, ExpiringCache
from .exceptions import ErrorResult, TransportError
from .models import decode_payload, encode_payload, zero_value
from .readers import RequestReader
from .token import TokenHandle
from .transport import HTTPTransport, OutboundRequest

if TYPE_CHECKING:
    from asapi.config.settings import Config

logger = logging.getLogger(__name__)

Prepare = Callable[[OutboundRequest], Optional[ErrorResult]]


class AuthorizeHandle:
    """Authorization service client core.

    Every operation returns ``(value, ErrorResult | None)``; errors are
    values, never raised. With ``cfg.is_enabled_cache`` two caches exist for
    the lifetime of the handle: the router cache (request fingerprint to
    response JSON) and the verification cache (access token to identity).

    Usage:
        handle = AuthorizeHandle(cfg)
        info, result = handle.token_post("/api/authorize/getuser", body, LoginUserInfo)
        if result is not None:
            print(result.status_code, result.message)
    """

    def __init__(
        self,
        cfg: "Config",
        token_handle: Optional[TokenHandle] = None,
        transport: Optional[HTTPTransport] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize handle.

        Args:
            cfg: Client configuration
            token_handle: Token source (defaults to a client credentials TokenHandle)
            transport: HTTP transport shared by all calls
            clock: Monotonic time source for both caches
        """
        self.cfg = cfg
        self.transport = transport or HTTPTransport(timeout=cfg.request_timeout)
        self.th = token_handle or TokenHandle(cfg, self.transport)
        self.cache_gc_interval = cfg.cache_gc_interval if cfg.cache_gc_interval > 0 else DEFAULT_GC_INTERVAL
        self.verify_cache: Optional[ExpiringCache] = None
        self.router_cache: Optional[ExpiringCache] = None

        if cfg.is_enabled_cache:
            self.verify_cache = ExpiringCache(self.cache_gc_interval, clock=clock)
            self.router_cache = ExpiringCache(self.cache_gc_interval, clock=clock)

    def get_config(self) -> "Config":
        return self.cfg

    def close(self) -> None:
        """Stop cache sweepers and release HTTP connections."""
        for cache in (self.verify_cache, self.router_cache):
            if cache is not None:
                cache.close()
        self.transport.close()

    # ─────────────────────────────────────────────────────────────────────────
    # Router cache
    # ─────────────────────────────────────────────────────────────────────────
    def get_from_router_cache(self, router: str, reader: RequestReader) -> Optional[bytes]:
        """Cached response bytes for reader on router, or None on a miss."""
        if not self.cfg.is_enabled_cache:
            return None
        if reader.expires(router) <= 0:
            return None
        key = reader.hash()
        if not key:
            return None
        value = self.router_cache.get(key)
        if not isinstance(value, bytes):
            return None
        return value

    def set_router_cache(self, router: str, reader: RequestReader, value: Any) -> None:
        """Store a decoded result for reader on router if it is cache-eligible."""
        if not self.cfg.is_enabled_cache:
            return
        expires = reader.expires(router)
        if expires <= 0:
            return
        key = reader.hash()
        if not key:
            return
        if value is None:
            buf = b""
        else:
            try:
                buf = encode_payload(value)
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping cache write for {router}: {e}")
                return
        self.router_cache.set(key, buf, expires)
        logger.debug(f"Cached {router} response for {expires}s")

    # ─────────────────────────────────────────────────────────────────────────
    # Verification cache
    # ─────────────────────────────────────────────────────────────────────────
    def get_verified(self, token: str, kind: type) -> Any:
        """Cached verification result of type kind for token, or None."""
        if not self.cfg.is_enabled_cache:
            return None
        value = self.verify_cache.get(token)
        if isinstance(value, kind):
            return value
        return None

    def set_verified(self, token: str, value: Any, expires_in: int) -> bool:
        """Cache a verification result so it expires a GC interval before the token.

        Returns:
            True if the value was cached
        """
        if not self.cfg.is_enabled_cache:
            return False
        margin = self.cache_gc_interval
        if expires_in <= margin:
            return False
        self.verify_cache.set(token, value, expires_in - margin)
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # Dispatch
    # ─────────────────────────────────────────────────────────────────────────
    def request(
        self,
        router: str,
        method: str,
        prepare: Optional[Prepare] = None,
        result_type: Optional[type] = None,
    ) -> Tuple[Any, Optional[ErrorResult]]:
        """Send a request to router and decode a 200 response into result_type.

        Args:
            router: Service route (e.g. "/oauth2/verify")
            method: HTTP method
            prepare: Callback adding headers, params or body; an ErrorResult it
                returns aborts the call before any network I/O
            result_type: None (ignore body), dict (raw JSON object) or a WireModel subclass

        Returns:
            (decoded result, None) on success, (None, ErrorResult) otherwise.
            Non-200 responses carry the raw body as message and the HTTP status.
        """
        req = OutboundRequest(method, self.cfg.get_url(router))

        if prepare is not None:
            result = prepare(req)
            if result is not None:
                return None, result

        try:
            status, buf = self.transport.send(req)
        except TransportError as e:
            return None, ErrorResult(str(e))

        if status != 200:
            return None, ErrorResult(buf.decode("utf-8", "replace"), status)

        if result_type is None:
            return None, None
        try:
            return decode_payload(buf, result_type), None
        except (ValueError, TypeError) as e:
            return None, ErrorResult(str(e))

    def token_post(
        self,
        router: str,
        body: Any,
        result_type: Optional[type] = None,
    ) -> Tuple[Any, Optional[ErrorResult]]:
        """POST body with the service token, serving cacheable bodies from the router cache.

        A cache hit returns before the token handle or the network is touched.
        Token acquisition errors are returned unchanged.
        """
        reader = body if isinstance(body, RequestReader) else None
        if reader is not None:
            cached = self.get_from_router_cache(router, reader)
            if cached is not None:
                logger.debug(f"Router cache hit for {router}")
                if not cached or result_type is None:
                    return zero_value(result_type), None
                try:
                    return decode_payload(cached, result_type), None
                except (ValueError, TypeError) as e:
                    return None, ErrorResult(str(e))

        def prepare(req: OutboundRequest) -> Optional[ErrorResult]:
            token, result = self.th.get()
            if result is not None:
                return result
            req.header("AccessToken", token)

            if body is not None:
                try:
                    req.json_body(encode_payload(body))
                except (TypeError, ValueError) as e:
                    return ErrorResult(str(e))
            return None

        value, result = self.request(router, "POST", prepare, result_type)
        if result is not None:
            return None, result
        if reader is not None:
            self.set_router_cache(router, reader, value)
        return value, None
