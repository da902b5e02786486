"""
Starlette / FastAPI middleware enforcing authzgate decisions.

The middleware builds a RequestContext from the incoming request, asks the
engine for an outcome and turns it into a response:

- CONTINUE: the request is passed on to the application;
- CHALLENGE_AND_DENY: 401 with the challenge header set by the engine;
- SERVER_ERROR: a generic 500 without provider detail.

Paths with ``.`` or ``..`` segments are refused with 400 before any scope
is resolved. The scope is resolved once per request, so a concurrent
publish() cannot mix configuration generations.

Identity is taken from ``request.scope["user"]`` as populated by
Starlette's AuthenticationMiddleware, and the credential scopes in
``request.scope["auth"]`` are exposed to providers as groups. Both can be
overridden with callables.
"""

from typing import Any, Callable, Dict, Optional
import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp

from ..core.engine import AuthorizationEngine
from ..core.types import Outcome, RequestContext
from ..engine.applicability import ApplicabilityQuery
from ..scope.table import has_dot_segments


logger = logging.getLogger(__name__)


def scope_user(request: Request) -> Optional[str]:
    """Identity established by Starlette's AuthenticationMiddleware, if any."""
    user = request.scope.get("user")
    if user is None:
        return None
    if isinstance(user, str):
        return user or None
    if getattr(user, "is_authenticated", False):
        return getattr(user, "display_name", None) or None
    return None


def scope_attributes(request: Request) -> Dict[str, Any]:
    """Expose AuthCredentials scopes as groups."""
    auth = request.scope.get("auth")
    scopes = getattr(auth, "scopes", None)
    return {"groups": list(scopes)} if scopes else {}


class AuthorizationMiddleware(BaseHTTPMiddleware):
    """Authorization middleware for Starlette and FastAPI applications."""

    def __init__(self,
                 app: ASGIApp,
                 engine: AuthorizationEngine,
                 identity_getter: Callable[[Request], Optional[str]] = scope_user,
                 attributes_getter: Callable[[Request], Dict[str, Any]] = scope_attributes,
                 skip_unprotected: bool = True):
        """
        Args:
            app: The wrapped ASGI application
            engine: Engine deciding each request
            identity_getter: Returns the request's identity or None
            attributes_getter: Returns extra attributes for providers
            skip_unprotected: Pass requests through without evaluation when
                no binding of their scope applies to the request method
        """
        super().__init__(app)
        self.engine = engine
        self.identity_getter = identity_getter
        self.attributes_getter = attributes_getter
        self.skip_unprotected = skip_unprotected

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        uri = request.url.path
        if has_dot_segments(uri):
            logger.warning(f"Refusing request with dot segments in path \"{uri}\"")
            return PlainTextResponse("Bad Request", status_code=400)

        scope, bindings = self.engine.resolve(uri)
        if self.skip_unprotected and not ApplicabilityQuery(bindings).requires_auth(request.method):
            return await call_next(request)

        context = RequestContext(
            method=request.method,
            uri=uri,
            user=self.identity_getter(request),
            attributes=self.attributes_getter(request),
        )
        request_id = request.headers.get("x-request-id")
        if request_id:
            context.request_id = request_id

        outcome = await self.engine.authorize_scope(bindings, context, scope)

        if outcome == Outcome.CONTINUE:
            return await call_next(request)
        if outcome == Outcome.CHALLENGE_AND_DENY:
            return PlainTextResponse(
                "Unauthorized", status_code=outcome.http_status, headers=context.response_headers
            )
        return PlainTextResponse("Internal Server Error", status_code=outcome.http_status)
