"""
Main authorization engine.

AuthorizationEngine ties a frozen provider registry and a scope table to the
evaluator and decision mapper. A host pipeline creates one engine per
configuration generation and calls authorize() once per request.
"""

from typing import Optional, Tuple
import logging
import time

from .config import EngineConfig
from .types import Outcome, RequestContext
from ..engine.applicability import ApplicabilityQuery
from ..engine.decision import BasicChallengeIssuer, ChallengeIssuer, DecisionMapper
from ..engine.evaluator import AuthorizationEvaluator
from ..events import EventBus, EventType, LoggingEventHandler, create_decision_event
from ..metrics.collector import MetricConfig, MetricsCollector, MetricsEventHandler
from ..providers.builtin import register_builtin_providers
from ..providers.registry import ProviderRegistry
from ..scope.bindings import ScopeBindings
from ..scope.loader import load_scope_table
from ..scope.table import ScopeTable


logger = logging.getLogger(__name__)


class AuthorizationEngine:
    """
    Authorization decision engine for protected resource scopes.
    Use AuthorizationEngine.new() to build one from configuration. The
    registry is frozen on construction; the scope table is replaced as a
    whole by publish(), never edited in place.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        scope_table: Optional[ScopeTable] = None,
        config: Optional[EngineConfig] = None,
        challenge_issuer: Optional[ChallengeIssuer] = None,
        event_bus: Optional[EventBus] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Initialize the engine.

        Args:
            registry: Providers available to bindings and the default lookup
            scope_table: Effective bindings per scope path (empty by default)
            config: Engine settings (defaults to EngineConfig())
            challenge_issuer: Challenge sent on denial (Basic with config.realm by default)
            event_bus: Bus receiving per-attempt and decision events
            metrics: Prometheus collector; created when config.metrics_enabled
        """
        self.config = config or EngineConfig()
        self.registry = registry.freeze()
        self.scope_table = scope_table or ScopeTable({})
        self.event_bus = event_bus or EventBus()
        self.event_bus.subscribe_all(LoggingEventHandler())

        self.metrics = metrics
        if self.metrics is None and self.config.metrics_enabled:
            self.metrics = MetricsCollector(MetricConfig())
        if self.metrics is not None:
            handler = MetricsEventHandler(self.metrics)
            self.event_bus.subscribe(EventType.PROVIDER_CHECK, handler)
            self.event_bus.subscribe(EventType.DECISION, handler)

        self.evaluator = AuthorizationEvaluator(
            self.registry, self.config.default_provider, self.event_bus
        )
        self.mapper = DecisionMapper(challenge_issuer or BasicChallengeIssuer(self.config.realm))

    @classmethod
    def new(
        cls,
        config: Optional[EngineConfig] = None,
        registry: Optional[ProviderRegistry] = None,
        scope_table: Optional[ScopeTable] = None,
        **kwargs,
    ) -> "AuthorizationEngine":
        """
        Create an engine from configuration.

        config.log_level is applied to the ``authzgate`` logger. Without a
        registry, the built-in providers are registered. Without a scope
        table, config.scopes_file is loaded when set.

        Raises:
            ValueError: If configuration is invalid
            ConfigurationError: If a scope binds an unknown or incapable provider

        Example:
            engine = AuthorizationEngine.new(EngineConfig(scopes_file="authz.yaml"))
        """
        config = config or EngineConfig.from_env()
        config.validate()
        logging.getLogger("authzgate").setLevel(config.log_level.upper())

        if registry is None:
            registry = register_builtin_providers(ProviderRegistry())
        if scope_table is None and config.scopes_file:
            scope_table = load_scope_table(config.scopes_file, registry)

        return cls(registry, scope_table, config, **kwargs)

    def publish(self, scope_table: ScopeTable) -> None:
        """Switch to a new configuration generation."""
        self.scope_table = scope_table
        logger.info(f"Published authz scope table with {len(scope_table)} scope(s)")

    async def authorize(self, context: RequestContext) -> Outcome:
        """
        Decide whether the request in ``context`` may proceed.

        The scope is the most specific configured path covering context.uri.
        On CHALLENGE_AND_DENY the challenge header has been added to
        context.response_headers.
        """
        scope, bindings = self.resolve(context.uri)
        return await self.authorize_scope(bindings, context, scope)

    def resolve(self, uri: str) -> Tuple[str, ScopeBindings]:
        """Scope path and bindings covering ``uri`` in the current generation."""
        return self.scope_table.resolve(uri)

    async def authorize_scope(self, bindings: ScopeBindings, context: RequestContext,
                              scope: Optional[str] = None) -> Outcome:
        """Evaluate explicit bindings and map the verdict to an outcome."""
        started = time.perf_counter()
        verdict = await self.evaluator.evaluate(bindings, context)
        outcome = self.mapper.map(verdict, context)
        duration = time.perf_counter() - started

        await self.event_bus.publish(
            create_decision_event(context, verdict, outcome, scope, duration)
        )
        return outcome

    def applicability(self, uri: str) -> ApplicabilityQuery:
        """Applicability queries for the scope covering ``uri``."""
        return ApplicabilityQuery(self.scope_table.bindings_for(uri))

    def requires_auth(self, uri: str, method: str) -> bool:
        """True if the scope covering ``uri`` has a binding for ``method``."""
        return self.applicability(uri).requires_auth(method)
