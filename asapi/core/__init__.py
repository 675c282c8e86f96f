"""Core client logic, independent of any web framework.

Module Structure:
    - authorize/ : authorization service client (dispatch, caches, tokens)

Import explicitly when needed:
    from asapi.core.authorize import AuthorizeHandle, UserService, TokenService
"""
