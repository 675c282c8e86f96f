"""
Flask decorators for access token verification.

Hosting services protect their views with ``require_access_token``; the token
presented by the caller is verified against the authorization service (with
the verification cache in front of it) and the result is exposed as
``flask.g.token_info``.
"""

import logging
from functools import wraps
from typing import Optional

from flask import current_app, g, jsonify, request

from asapi.core.authorize import AuthorizeHandle, ErrorResult, TokenService

logger = logging.getLogger(__name__)

EXTENSION_KEY = "asapi"


def init_app(app, handle: AuthorizeHandle) -> None:
    """Register an authorization handle with a Flask app."""
    app.extensions[EXTENSION_KEY] = handle


def get_handle() -> AuthorizeHandle:
    """Authorization handle of the current app.

    Raises:
        RuntimeError: If init_app was not called for the app
    """
    handle = current_app.extensions.get(EXTENSION_KEY)
    if handle is None:
        raise RuntimeError("asapi is not initialized; call init_app(app, handle) first")
    return handle


def extract_access_token() -> Optional[str]:
    """Access token from the Authorization header or the access_token query parameter."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header:
        if not auth_header.startswith("Bearer "):
            return None
        return auth_header[7:].strip() or None
    return request.args.get("access_token") or None


def _error_response(result: ErrorResult):
    # Remote rejection means the token is bad; anything else is our failure
    if result.is_remote:
        return jsonify({"error": "Unauthorized", "message": result.message}), 401
    return jsonify({"error": "Service Unavailable", "message": "Token verification unavailable"}), 503


def require_access_token(fn):
    """
    Decorator requiring a valid access token issued by the authorization service.

    Responses:
        401 Unauthorized: Missing or malformed token, or the service rejected it
        503 Service Unavailable: The service could not be reached

    Example:
        @app.route("/profile")
        @require_access_token
        def profile():
            return {"user_id": g.token_info.user_id}
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = extract_access_token()
        if not token:
            logger.warning("Request without a usable bearer token")
            return jsonify({
                "error": "Unauthorized",
                "message": "Authorization header required. Use 'Authorization: Bearer <token>'",
            }), 401

        info, result = TokenService(get_handle()).verify_token_v2(token)
        if result is not None:
            logger.warning(f"Access token verification failed (status={result.status_code}): {result.message}")
            return _error_response(result)

        g.token_info = info
        return fn(*args, **kwargs)

    return wrapper
