"""
Tests for the authorization evaluator and decision mapping.
"""

import itertools

import pytest

from authzgate.core.types import ALL_METHODS, Method, Outcome, RequestContext, Verdict
from authzgate.engine import AuthorizationEvaluator, BasicChallengeIssuer, DecisionMapper
from authzgate.events import EventBus, EventType, RecordingEventHandler
from authzgate.providers.registry import ProviderRegistry
from authzgate.scope.bindings import EMPTY_BINDINGS, ScopeBindingsBuilder

from conftest import ScriptedProvider, called_names


G, D, E = Verdict.GRANTED, Verdict.DENIED, Verdict.ERROR


async def decide(registry, bindings, context, default_provider="valid-user"):
    verdict = await AuthorizationEvaluator(registry, default_provider).evaluate(bindings, context)
    return DecisionMapper().map(verdict, context)


class TestShortCircuit:
    """First non-deny verdict decides; denial needs the whole list."""

    @pytest.mark.asyncio
    async def test_grant_first_stops_after_one(self, make_chain, calls, context):
        registry, bindings = make_chain([G, D, D])

        outcome = await decide(registry, bindings, context)

        assert outcome == Outcome.CONTINUE
        assert called_names(calls) == ["p0"]

    @pytest.mark.asyncio
    async def test_all_deny_runs_every_provider_in_order(self, make_chain, calls, context):
        registry, bindings = make_chain([D, D, D])

        outcome = await decide(registry, bindings, context)

        assert outcome == Outcome.CHALLENGE_AND_DENY
        assert called_names(calls) == ["p0", "p1", "p2"]

    @pytest.mark.asyncio
    async def test_error_stops_before_later_grant(self, make_chain, calls, context):
        registry, bindings = make_chain([D, E, G])

        outcome = await decide(registry, bindings, context)

        assert outcome == Outcome.SERVER_ERROR
        assert called_names(calls) == ["p0", "p1"]

    @pytest.mark.asyncio
    async def test_deny_then_grant(self, make_chain, calls, context):
        registry, bindings = make_chain([D, G, E])

        outcome = await decide(registry, bindings, context)

        assert outcome == Outcome.CONTINUE
        assert called_names(calls) == ["p0", "p1"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("verdicts", list(itertools.product([G, D, E], repeat=3)))
    async def test_call_order_matches_declaration_order(self, make_chain, calls, context, verdicts):
        registry, bindings = make_chain(list(verdicts))

        verdict = await AuthorizationEvaluator(registry).evaluate(bindings, context)

        stop = next((i for i, v in enumerate(verdicts) if v != D), len(verdicts) - 1)
        assert called_names(calls) == [f"p{i}" for i in range(stop + 1)]
        assert verdict == verdicts[stop]

    @pytest.mark.asyncio
    async def test_single_denying_provider(self, make_chain, calls, context):
        registry, bindings = make_chain([D])

        verdict = await AuthorizationEvaluator(registry).evaluate(bindings, context)

        assert verdict == D
        assert called_names(calls) == ["p0"]


class TestDefaultProvider:
    """Scopes without bindings fall back to the default provider."""

    @pytest.mark.asyncio
    async def test_empty_bindings_use_granting_default(self, calls, context):
        registry = ProviderRegistry()
        registry.register("valid-user", ScriptedProvider("valid-user", G, calls))

        outcome = await decide(registry, EMPTY_BINDINGS, context)

        assert outcome == Outcome.CONTINUE
        assert called_names(calls) == ["valid-user"]
        # Default provider is consulted for every method with no requirement
        assert calls[0][2:] == (ALL_METHODS, "")

    @pytest.mark.asyncio
    async def test_empty_bindings_default_denies(self, calls, context):
        registry = ProviderRegistry()
        registry.register("valid-user", ScriptedProvider("valid-user", D, calls))

        outcome = await decide(registry, EMPTY_BINDINGS, context)

        assert outcome == Outcome.CHALLENGE_AND_DENY
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_missing_default_is_server_error(self, calls, context, caplog):
        registry = ProviderRegistry()
        registry.register("other", ScriptedProvider("other", G, calls))

        outcome = await decide(registry, EMPTY_BINDINGS, context)

        assert outcome == Outcome.SERVER_ERROR
        assert calls == []
        assert "No default authz provider configured" in caplog.text

    @pytest.mark.asyncio
    async def test_incapable_default_is_server_error(self, calls, context):
        registry = ProviderRegistry()
        registry.register("valid-user", object())

        outcome = await decide(registry, EMPTY_BINDINGS, context)

        assert outcome == Outcome.SERVER_ERROR

    @pytest.mark.asyncio
    async def test_configured_default_name(self, calls, context):
        registry = ProviderRegistry()
        registry.register("file-user", ScriptedProvider("file-user", G, calls))

        outcome = await decide(registry, EMPTY_BINDINGS, context, default_provider="file-user")

        assert outcome == Outcome.CONTINUE
        assert called_names(calls) == ["file-user"]


class TestProviderContract:
    """What the evaluator passes to providers and how it reads their answers."""

    @pytest.mark.asyncio
    async def test_mask_and_requirement_passed_uninterpreted(self, calls):
        registry = ProviderRegistry()
        registry.register("p", ScriptedProvider("p", D, calls))
        builder = ScopeBindingsBuilder(registry)
        builder.bind("p", "admins staff", int(Method.POST))
        context = RequestContext(method="GET", uri="/x", user="alice")

        await AuthorizationEvaluator(registry).evaluate(builder.freeze(), context)

        # GET is outside the POST mask, yet the provider is still consulted
        assert calls == [("p", "p", int(Method.POST), "admins staff")]

    @pytest.mark.asyncio
    async def test_active_provider_slot_cleared_after_call(self, make_chain, calls, context):
        registry, bindings = make_chain([D, G])

        await AuthorizationEvaluator(registry).evaluate(bindings, context)

        assert [c[1] for c in calls] == ["p0", "p1"]
        assert context.active_provider is None

    @pytest.mark.asyncio
    async def test_raising_provider_is_error(self, calls, context, caplog):
        class Exploding:
            async def check_authorization(self, context, method_mask, requirement):
                raise ConnectionError("directory unreachable")

        registry = ProviderRegistry()
        registry.register("ldap", Exploding())
        registry.register("p1", ScriptedProvider("p1", G, calls))
        builder = ScopeBindingsBuilder(registry)
        builder.bind("ldap")
        builder.bind("p1")

        verdict = await AuthorizationEvaluator(registry).evaluate(builder.freeze(), context)

        assert verdict == E
        assert calls == []
        assert context.active_provider is None
        assert "directory unreachable" in caplog.text

    @pytest.mark.asyncio
    async def test_non_verdict_result_is_error(self, context):
        class Sloppy:
            async def check_authorization(self, context, method_mask, requirement):
                return True

        registry = ProviderRegistry()
        registry.register("sloppy", Sloppy())
        builder = ScopeBindingsBuilder(registry)
        builder.bind("sloppy")

        verdict = await AuthorizationEvaluator(registry).evaluate(builder.freeze(), context)

        assert verdict == E

    @pytest.mark.asyncio
    async def test_synchronous_provider_supported(self, context):
        class Plain:
            def check_authorization(self, context, method_mask, requirement):
                return Verdict.GRANTED

        registry = ProviderRegistry()
        registry.register("plain", Plain())
        builder = ScopeBindingsBuilder(registry)
        builder.bind("plain")

        verdict = await AuthorizationEvaluator(registry).evaluate(builder.freeze(), context)

        assert verdict == G


class TestAttemptEvents:
    """Each provider call is published as an event, in order."""

    @pytest.mark.asyncio
    async def test_one_event_per_attempt(self, make_chain, context):
        registry, bindings = make_chain([D, E, G])
        bus = EventBus()
        recorder = RecordingEventHandler()
        bus.subscribe_all(recorder)

        await AuthorizationEvaluator(registry, event_bus=bus).evaluate(bindings, context)

        checks = recorder.of_type(EventType.PROVIDER_CHECK)
        assert [(e.provider, e.verdict) for e in checks] == [("p0", D), ("p1", E)]
        assert [e.metadata["index"] for e in checks] == [0, 1]
        assert all(e.request_id == context.request_id for e in checks)

    @pytest.mark.asyncio
    async def test_missing_default_publishes_fault(self, context):
        bus = EventBus()
        recorder = RecordingEventHandler()
        bus.subscribe_all(recorder)

        await AuthorizationEvaluator(ProviderRegistry(), event_bus=bus).evaluate(EMPTY_BINDINGS, context)

        assert len(recorder.of_type(EventType.CONFIGURATION_FAULT)) == 1
        assert recorder.of_type(EventType.PROVIDER_CHECK) == []

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_change_verdict(self, make_chain, context):
        registry, bindings = make_chain([G])
        bus = EventBus()

        def broken(event):
            raise RuntimeError("handler bug")

        bus.subscribe_function(EventType.PROVIDER_CHECK, broken)

        verdict = await AuthorizationEvaluator(registry, event_bus=bus).evaluate(bindings, context)

        assert verdict == G


class TestDecisionMapper:
    """Verdict to outcome mapping and challenge issuance."""

    def test_granted_continues_without_challenge(self, context):
        outcome = DecisionMapper().map(G, context)

        assert outcome == Outcome.CONTINUE
        assert context.response_headers == {}

    def test_denied_issues_challenge(self, context):
        outcome = DecisionMapper(BasicChallengeIssuer("Staff only")).map(D, context)

        assert outcome == Outcome.CHALLENGE_AND_DENY
        assert context.response_headers["WWW-Authenticate"] == 'Basic realm="Staff only"'

    def test_error_is_server_error_without_challenge(self, context):
        outcome = DecisionMapper().map(E, context)

        assert outcome == Outcome.SERVER_ERROR
        assert "WWW-Authenticate" not in context.response_headers

    def test_realm_quotes_escaped(self, context):
        DecisionMapper(BasicChallengeIssuer('say "hi"')).map(D, context)

        assert context.response_headers["WWW-Authenticate"] == 'Basic realm="say \\"hi\\""'

    def test_custom_challenge_issuer(self, context):
        issued = []

        class Recording(BasicChallengeIssuer):
            def issue(self, context):
                issued.append(context.uri)

        DecisionMapper(Recording()).map(D, context)

        assert issued == [context.uri]

    def test_http_status(self):
        assert Outcome.CONTINUE.http_status == 200
        assert Outcome.CHALLENGE_AND_DENY.http_status == 401
        assert Outcome.SERVER_ERROR.http_status == 500
