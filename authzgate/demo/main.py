"""
authzgate Demo Application

Walks a handful of requests through a small scope configuration and prints
the outcome of each:
- inherited bindings
- method restricted bindings
- denial with a challenge
- a configuration fault surfacing as a server error
"""

import asyncio
import sys

from authzgate import AuthorizationEngine, EngineConfig, RequestContext
from authzgate.providers import ProviderRegistry, register_builtin_providers
from authzgate.scope import scope_table_from_document
from authzgate.util import configure_logging


DEMO_SCOPES = {
    "scopes": {
        "/": {"require": ["valid-user"]},
        "/admin": {
            "require": [
                "user alice",
                {"directive": "group admins", "limit_except": ["GET"]},
            ]
        },
        "/admin/help": {},
        "/public": {"require": [{"directive": "valid-user", "limit": ["POST"]}]},
    }
}

DEMO_REQUESTS = [
    ("GET", "/docs/index.html", "bob", []),
    ("GET", "/docs/index.html", None, []),
    ("GET", "/admin/users", "alice", []),
    ("GET", "/admin/users", "bob", ["admins"]),
    ("DELETE", "/admin/users", "bob", ["admins"]),
    ("GET", "/admin/help", "carol", []),
    ("GET", "/public/feed", None, []),
    ("POST", "/public/feed", None, []),
]


async def run_demo() -> int:
    """Run the demo requests and print their outcomes"""
    print("authzgate Demo Application")
    print("=" * 50)
    print()

    registry = register_builtin_providers(ProviderRegistry())
    engine = AuthorizationEngine.new(
        EngineConfig(realm="authzgate demo", metrics_enabled=True, log_level="WARNING"),
        registry=registry,
        scope_table=scope_table_from_document(DEMO_SCOPES, registry),
    )
    print(f"✓ Loaded scopes: {', '.join(engine.scope_table.paths())}")
    print()

    for method, uri, user, groups in DEMO_REQUESTS:
        if not engine.requires_auth(uri, method):
            print(f"  {method:6} {uri:20} user={user!s:6} -> not protected for {method}")
            continue

        context = RequestContext(method=method, uri=uri, user=user,
                                 attributes={"groups": groups})
        outcome = await engine.authorize(context)
        challenge = context.response_headers.get("WWW-Authenticate", "")
        print(f"  {method:6} {uri:20} user={user!s:6} -> {outcome.value} "
              f"({outcome.http_status}) {challenge}")

    print()
    print("Step 2: Missing default provider")
    print("-" * 40)
    broken = AuthorizationEngine.new(
        EngineConfig(default_provider="file-user", metrics_enabled=False, log_level="WARNING"),
        registry=register_builtin_providers(ProviderRegistry()),
    )
    outcome = await broken.authorize(RequestContext(method="GET", uri="/", user="alice"))
    print(f"  GET    /                    user=alice  -> {outcome.value} ({outcome.http_status})")
    print()

    if engine.metrics is not None:
        print("Metrics:")
        print(engine.metrics.export().decode("utf-8"))

    return 0


def main() -> int:
    """Console entry point"""
    configure_logging("WARNING")
    try:
        return asyncio.run(run_demo())
    except KeyboardInterrupt:
        print("\nDemo interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
