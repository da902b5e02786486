"""
Authorization evaluator.

Walks a scope's bindings in declaration order for one request:

- GRANTED or ERROR from a provider ends the walk with that verdict;
- DENIED moves on to the next binding;
- DENIED from the last binding is the final verdict.

Bindings therefore combine as a logical OR, except that a provider failure
stops the walk before a later provider gets the chance to grant. A scope
with no bindings is checked by the default provider alone.
"""

from typing import Any, Optional
import inspect
import logging
import time

from ..core.types import ALL_METHODS, DEFAULT_PROVIDER, RequestContext, Verdict
from ..events import (
    EventBus,
    create_configuration_fault_event,
    create_provider_check_event,
)
from ..providers.registry import ProviderRegistry, has_check_capability
from ..scope.bindings import ScopeBindings


logger = logging.getLogger(__name__)


class AuthorizationEvaluator:
    """
    Evaluates provider bindings against a request.

    The evaluator holds no per-request state and may be shared by any number
    of concurrent requests. Providers are awaited strictly one after another;
    timeouts and retries are the providers' own business.
    """

    def __init__(self, registry: ProviderRegistry,
                 default_provider: str = DEFAULT_PROVIDER,
                 event_bus: Optional[EventBus] = None):
        self.registry = registry
        self.default_provider = default_provider
        self.event_bus = event_bus

    async def evaluate(self, bindings: ScopeBindings, context: RequestContext) -> Verdict:
        """
        Produce the final verdict for ``context`` under ``bindings``.

        Never raises for provider faults; they surface as Verdict.ERROR.
        """
        if not bindings:
            return await self._evaluate_default(context)

        verdict = Verdict.DENIED
        for index, binding in enumerate(bindings):
            verdict = await self._check(
                binding.provider_name, binding.provider, binding.method_mask,
                binding.requirement, context, index,
            )
            if verdict != Verdict.DENIED:
                break
        return verdict

    async def _evaluate_default(self, context: RequestContext) -> Verdict:
        provider = self.registry.resolve(self.default_provider)
        if provider is None or not has_check_capability(provider):
            logger.error(
                "No default authz provider configured",
                extra={"request_id": context.request_id, "authz_provider": self.default_provider},
            )
            await self._publish(create_configuration_fault_event(
                context, f"default provider '{self.default_provider}' unavailable"
            ))
            return Verdict.ERROR

        return await self._check(self.default_provider, provider, ALL_METHODS, "", context, 0)

    async def _check(self, name: str, provider: Any, method_mask: int, requirement: str,
                     context: RequestContext, index: int) -> Verdict:
        context.active_provider = name
        started = time.perf_counter()
        try:
            result = provider.check_authorization(context, method_mask, requirement)
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            logger.exception(
                f"Authz provider '{name}' failed while checking \"{context.uri}\"",
                extra={"request_id": context.request_id, "authz_provider": name},
            )
            result = Verdict.ERROR
        finally:
            context.active_provider = None
        duration = time.perf_counter() - started

        if not isinstance(result, Verdict):
            logger.error(
                f"Authz provider '{name}' returned {result!r} instead of a verdict",
                extra={"request_id": context.request_id, "authz_provider": name},
            )
            result = Verdict.ERROR

        await self._publish(create_provider_check_event(context, name, result, index, duration))
        return result

    async def _publish(self, event) -> None:
        if self.event_bus is not None:
            await self.event_bus.publish(event)
