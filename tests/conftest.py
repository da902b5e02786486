"""
Shared fixtures for authzgate tests.
"""

from typing import List, Sequence

import pytest

from authzgate.core.types import ALL_METHODS, RequestContext, Verdict
from authzgate.providers.registry import ProviderRegistry
from authzgate.scope.bindings import ScopeBindings, ScopeBindingsBuilder


class ScriptedProvider:
    """Provider returning a fixed verdict and recording every call."""

    def __init__(self, name: str, verdict: Verdict, calls: List[tuple]):
        self.name = name
        self.verdict = verdict
        self.calls = calls

    async def check_authorization(self, context, method_mask, requirement):
        self.calls.append((self.name, context.active_provider, method_mask, requirement))
        return self.verdict


@pytest.fixture
def calls() -> List[tuple]:
    """Call log shared by the scripted providers of one test."""
    return []


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(method="GET", uri="/private/report.html", user="alice")


@pytest.fixture
def make_chain(calls):
    """Build a registry and frozen bindings, one scripted provider per verdict."""

    def _make(verdicts: Sequence[Verdict], registry: ProviderRegistry = None):
        registry = registry or ProviderRegistry()
        builder = ScopeBindingsBuilder(registry, scope="/private")
        for index, verdict in enumerate(verdicts):
            name = f"p{index}"
            registry.register(name, ScriptedProvider(name, verdict, calls))
            builder.bind(name, f"requirement-{index}", ALL_METHODS)
        return registry, builder.freeze()

    return _make


def called_names(calls: List[tuple]) -> List[str]:
    return [c[0] for c in calls]


def binding_names(bindings: ScopeBindings) -> List[str]:
    return [b.provider_name for b in bindings]
