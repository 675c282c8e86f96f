"""Client library for the authorization service (AS API).

To use the client:
    from asapi.core.authorize import AuthorizeHandle, UserService

To protect Flask views with access token verification:
    from asapi.api.decorators import init_app, require_access_token
"""
# Note: flask is not imported by default so the client works without it
