"""
Basic authzgate usage example.

This example demonstrates the fundamental operations:
- Registering providers, including a custom one
- Declaring scopes with Require directives
- Authorizing requests and reading the outcome
- Inspecting a scope without running providers
"""

import asyncio

from authzgate import (
    AuthorizationEngine,
    AuthzProvider,
    EngineConfig,
    Outcome,
    ProviderRegistry,
    RequestContext,
    Verdict,
    register_builtin_providers,
)
from authzgate.core.types import mask_includes
from authzgate.scope import scope_table_from_document


class OfficeHoursProvider(AuthzProvider):
    """Grants named users, but only through the configured methods."""

    async def check_authorization(self, context, method_mask, requirement):
        if not mask_includes(method_mask, context.method):
            return Verdict.DENIED
        return Verdict.GRANTED if context.user in requirement.split() else Verdict.DENIED


async def basic_example():
    """Demonstrate basic authzgate usage"""
    print("Basic authzgate Example")
    print("=" * 30)

    # 1. Providers are registered once, before any scope is loaded
    registry = register_builtin_providers(ProviderRegistry())
    registry.register("office-hours", OfficeHoursProvider())

    # 2. Scopes bind providers in evaluation order
    scope_table = scope_table_from_document({
        "scopes": {
            "/": ["valid-user"],
            "/payroll": [
                {"directive": "office-hours dana", "limit": ["GET"]},
                "group finance",
            ],
        }
    }, registry)

    engine = AuthorizationEngine.new(
        EngineConfig(realm="Example Corp", metrics_enabled=False),
        registry=registry,
        scope_table=scope_table,
    )
    print("✓ Created engine")

    # 3. Authorize some requests
    requests = [
        RequestContext(method="GET", uri="/payroll/2026", user="dana"),
        RequestContext(method="POST", uri="/payroll/2026", user="dana"),
        RequestContext(method="POST", uri="/payroll/2026", user="erin",
                       attributes={"groups": ["finance"]}),
        RequestContext(method="GET", uri="/wiki", user=None),
    ]
    for context in requests:
        outcome = await engine.authorize(context)
        mark = "✓" if outcome == Outcome.CONTINUE else "✗"
        print(f"{mark} {context.method} {context.uri} as {context.user}: "
              f"{outcome.value} ({outcome.http_status})")
        if "WWW-Authenticate" in context.response_headers:
            print(f"    WWW-Authenticate: {context.response_headers['WWW-Authenticate']}")

    # 4. Ask about a scope without running providers
    query = engine.applicability("/payroll")
    print(f"✓ /payroll providers: {query.raw_bindings().provider_names()}")
    print(f"✓ /payroll requires auth for DELETE: {query.requires_auth('DELETE')}")


if __name__ == "__main__":
    asyncio.run(basic_example())
