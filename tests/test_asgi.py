"""
Tests for the Starlette authorization middleware.
"""

import pytest
from starlette.applications import Starlette
from starlette.authentication import AuthCredentials, AuthenticationBackend, SimpleUser
from starlette.middleware import Middleware
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from authzgate import AuthorizationEngine, EngineConfig, Verdict
from authzgate.integration import AuthorizationMiddleware
from authzgate.providers import ProviderRegistry, register_builtin_providers
from authzgate.scope import scope_table_from_document


class BrokenProvider:
    async def check_authorization(self, context, method_mask, requirement):
        return Verdict.ERROR


def header_user(request):
    return request.headers.get("x-user")


def header_groups(request):
    groups = request.headers.get("x-groups")
    return {"groups": groups.split(",")} if groups else {}


class HeaderBackend(AuthenticationBackend):
    async def authenticate(self, conn):
        name = conn.headers.get("x-user")
        if not name:
            return None
        scopes = [g for g in conn.headers.get("x-groups", "").split(",") if g]
        return AuthCredentials(scopes), SimpleUser(name)


async def homepage(request):
    return PlainTextResponse("ok")


def build_engine():
    registry = register_builtin_providers(ProviderRegistry())
    registry.register("ldap-group", BrokenProvider())
    return AuthorizationEngine.new(
        EngineConfig(realm="Intranet", metrics_enabled=False),
        registry=registry,
        scope_table=scope_table_from_document({
            "scopes": {
                "/private": ["valid-user"],
                "/admin": ["group admins"],
                "/ldap": ["ldap-group staff"],
                "/upload": [{"directive": "valid-user", "limit": ["POST"]}],
            }
        }, registry),
    )


@pytest.fixture
def client():
    app = Starlette(
        routes=[Route("/{path:path}", homepage, methods=["GET", "POST"])],
        middleware=[Middleware(AuthorizationMiddleware, engine=build_engine(),
                               identity_getter=header_user, attributes_getter=header_groups)],
    )
    return TestClient(app)


@pytest.fixture
def authenticated_client():
    app = Starlette(
        routes=[Route("/{path:path}", homepage, methods=["GET", "POST"])],
        middleware=[
            Middleware(AuthenticationMiddleware, backend=HeaderBackend()),
            Middleware(AuthorizationMiddleware, engine=build_engine()),
        ],
    )
    return TestClient(app)


class TestAuthorizationMiddleware:
    """Outcome to HTTP response translation."""

    def test_granted_reaches_application(self, client):
        response = client.get("/private/page", headers={"x-user": "alice"})

        assert response.status_code == 200
        assert response.text == "ok"

    def test_denied_is_401_with_challenge(self, client):
        response = client.get("/private/page")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == 'Basic realm="Intranet"'

    def test_group_membership(self, client):
        allowed = client.get("/admin", headers={"x-user": "bob", "x-groups": "staff,admins"})
        refused = client.get("/admin", headers={"x-user": "bob", "x-groups": "staff"})

        assert allowed.status_code == 200
        assert refused.status_code == 401

    def test_provider_error_is_generic_500(self, client):
        response = client.get("/ldap/report", headers={"x-user": "alice"})

        assert response.status_code == 500
        assert response.text == "Internal Server Error"
        assert "www-authenticate" not in response.headers

    def test_unprotected_method_passes_through(self, client):
        assert client.get("/upload").status_code == 200
        assert client.post("/upload").status_code == 401

    def test_unconfigured_path_passes_through(self, client):
        assert client.get("/public/index.html").status_code == 200

    @pytest.mark.parametrize("path", ["/admin/%2e%2e/x", "/private/%2e/page", "/public/%2e%2e/admin"])
    def test_dot_segments_refused(self, client, path):
        response = client.get(path, headers={"x-user": "mallory", "x-groups": "staff"})

        assert response.status_code == 400
        assert response.text == "Bad Request"

    def test_scope_resolved_once_per_request(self):
        engine = build_engine()
        stricter = scope_table_from_document({"scopes": {"/private": ["user root"]}}, engine.registry)

        def publish_then_identify(request):
            engine.publish(stricter)
            return request.headers.get("x-user")

        app = Starlette(
            routes=[Route("/{path:path}", homepage, methods=["GET", "POST"])],
            middleware=[Middleware(AuthorizationMiddleware, engine=engine,
                                   identity_getter=publish_then_identify,
                                   attributes_getter=header_groups)],
        )
        client = TestClient(app)

        # The first request keeps the generation it resolved before the publish
        assert client.get("/private/page", headers={"x-user": "alice"}).status_code == 200
        assert client.get("/private/page", headers={"x-user": "alice"}).status_code == 401


class TestStarletteAuthentication:
    """Identity and groups taken from Starlette's AuthenticationMiddleware."""

    def test_authenticated_user(self, authenticated_client):
        assert authenticated_client.get("/private/a", headers={"x-user": "alice"}).status_code == 200

    def test_unauthenticated_user_is_challenged(self, authenticated_client):
        assert authenticated_client.get("/private/a").status_code == 401

    def test_credential_scopes_are_groups(self, authenticated_client):
        allowed = authenticated_client.get("/admin", headers={"x-user": "bob", "x-groups": "admins"})
        refused = authenticated_client.get("/admin", headers={"x-user": "bob"})

        assert allowed.status_code == 200
        assert refused.status_code == 401
