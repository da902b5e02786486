"""
Web framework integration for authzgate.
"""

from .asgi import AuthorizationMiddleware, scope_user, scope_attributes

__all__ = [
    "AuthorizationMiddleware",
    "scope_user",
    "scope_attributes",
]
