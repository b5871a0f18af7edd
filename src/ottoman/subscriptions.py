"""Webhook-backed subscriptions.

GraphQL subscriptions have no plain-HTTP equivalent, so a client asks us
to run one on its behalf and POST every event to a callback URL::

    POST   /webhook       {"subscription": "onBook", "variables": {...}, "url": "..."}
    POST   /webhook/:id   {"variables": {...}}
    DELETE /webhook/:id

Lifecycle per id: absent -> active -> (update)* -> absent. Transitions for
one id are serialized with a per-id ``asyncio.Lock``; distinct ids never
wait on each other. Each active subscription owns exactly one delivery
task. ``update`` opens the new source first, then cancels the old task and
closes the old source, and only then starts delivering from the new one,
so two sources never deliver for the same id at once.
"""

import asyncio
import contextlib
import logging
import uuid
from collections.abc import AsyncIterator, Callable, Collection, Mapping
from dataclasses import dataclass
from typing import Any

from graphql import GraphQLSchema, print_ast

from ottoman._internal.invoke import invoke
from ottoman.errors import ConfigurationError, SubscriptionError, SubscriptionNotFound
from ottoman.execution import default_subscribe, format_error, format_result, normalize_result
from ottoman.operation.builder import build_document, build_operation_node_for_field
from ottoman.operation.info import OperationInfo, get_operation_info
from ottoman.params import RawParam, parse_variable
from ottoman.webhooks import WebhookClient

logger = logging.getLogger("ottoman.subscriptions")


@dataclass(frozen=True, slots=True)
class StartSubscriptionEvent:
    subscription: str
    variables: Mapping[str, Any] | None
    url: str


@dataclass(frozen=True, slots=True)
class UpdateSubscriptionEvent:
    id: str
    variables: Mapping[str, Any] | None


@dataclass(frozen=True, slots=True)
class _CompiledSubscription:
    field_name: str
    source: str
    info: OperationInfo


@dataclass(slots=True)
class Subscription:
    """A live webhook subscription. Owned by ``SubscriptionManager``."""

    id: str
    url: str
    field_name: str
    variables: dict[str, Any]
    source: AsyncIterator[Any]
    task: asyncio.Task[None] | None = None
    delivered: int = 0
    failed: int = 0


class SubscriptionManager:
    """Owns every live webhook subscription.

    Subscription documents are compiled once, here, for every field of the
    schema's subscription type.
    """

    __slots__ = (
        "_locks",
        "_operations",
        "_schema",
        "_subscribe",
        "_subscriptions",
        "_webhooks",
    )

    def __init__(
        self,
        schema: GraphQLSchema,
        *,
        subscribe: Callable[..., Any] = default_subscribe,
        webhooks: WebhookClient | None = None,
        models: Collection[str] = (),
        ignore: Collection[str] = (),
        depth_limit: int = 1,
    ) -> None:
        self._schema = schema
        self._subscribe = subscribe
        self._webhooks = webhooks or WebhookClient()
        self._subscriptions: dict[str, Subscription] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._operations: dict[str, _CompiledSubscription] = {}

        subscription_type = schema.subscription_type
        if subscription_type is not None:
            for field_name in subscription_type.fields:
                node = build_operation_node_for_field(
                    kind="subscription",
                    schema=schema,
                    field=field_name,
                    models=models,
                    ignore=ignore,
                    circular_reference_depth=depth_limit,
                )
                document = build_document(node)
                info = get_operation_info(document)
                if info is None:
                    msg = f"Could not compile subscription {field_name!r}"
                    raise ConfigurationError(msg)
                self._operations[field_name] = _CompiledSubscription(
                    field_name=field_name,
                    source=print_ast(document),
                    info=info,
                )

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __contains__(self, subscription_id: object) -> bool:
        return subscription_id in self._subscriptions

    def get(self, subscription_id: str) -> Subscription | None:
        return self._subscriptions.get(subscription_id)

    # -- Lifecycle --

    async def start(self, event: StartSubscriptionEvent, context_value: Any) -> dict[str, str]:
        """Open a subscription and start delivering its events to ``event.url``."""
        compiled = self._operations.get(event.subscription)
        if compiled is None:
            msg = f"Subscription field {event.subscription!r} not found"
            raise SubscriptionError(msg)
        if not isinstance(event.url, str) or not event.url:
            msg = "A callback 'url' is required to start a subscription"
            raise SubscriptionError(msg)

        subscription_id = uuid.uuid4().hex
        lock = self._locks.setdefault(subscription_id, asyncio.Lock())
        async with lock:
            try:
                variables = self._coerce(compiled, event.variables)
                source = await self._open(compiled, variables, context_value)
            except Exception:
                self._locks.pop(subscription_id, None)
                raise
            subscription = Subscription(
                id=subscription_id,
                url=event.url,
                field_name=compiled.field_name,
                variables=variables,
                source=source,
            )
            self._subscriptions[subscription_id] = subscription
            subscription.task = self._spawn(subscription)

        logger.info("Started subscription %s (%s) -> %s", subscription_id, compiled.field_name, event.url)
        return {"id": subscription_id}

    async def update(self, event: UpdateSubscriptionEvent, context_value: Any) -> dict[str, str]:
        """Re-open subscription ``event.id`` with new variables.

        The id and callback URL are kept. If the new source cannot be
        opened, the old one keeps running.
        """
        lock = self._locks.get(event.id)
        if lock is None:
            raise SubscriptionNotFound(event.id)
        async with lock:
            subscription = self._subscriptions.get(event.id)
            if subscription is None:
                raise SubscriptionNotFound(event.id)

            compiled = self._operations[subscription.field_name]
            variables = self._coerce(compiled, event.variables)
            source = await self._open(compiled, variables, context_value)

            await self._close(subscription)
            subscription.variables = variables
            subscription.source = source
            subscription.task = self._spawn(subscription)

        logger.info("Updated subscription %s", event.id)
        return {"id": event.id}

    async def stop(self, subscription_id: str) -> dict[str, str]:
        """Cancel delivery, release the event source, and forget the id."""
        lock = self._locks.get(subscription_id)
        if lock is None:
            raise SubscriptionNotFound(subscription_id)
        async with lock:
            subscription = self._subscriptions.pop(subscription_id, None)
            if subscription is None:
                raise SubscriptionNotFound(subscription_id)
            self._locks.pop(subscription_id, None)
            await self._close(subscription)

        logger.info("Stopped subscription %s", subscription_id)
        return {"id": subscription_id}

    async def aclose(self) -> None:
        """Stop every live subscription and close the webhook client."""
        for subscription_id in list(self._subscriptions):
            with contextlib.suppress(SubscriptionNotFound):
                await self.stop(subscription_id)
        await self._webhooks.aclose()

    # -- Internal --

    def _coerce(
        self,
        compiled: _CompiledSubscription,
        variables: Mapping[str, Any] | None,
    ) -> dict[str, Any]:
        if variables is None:
            return {}
        if not isinstance(variables, Mapping):
            msg = "'variables' must be a JSON object"
            raise SubscriptionError(msg)
        coerced: dict[str, Any] = {}
        for declaration in compiled.info.variables:
            if declaration.name in variables:
                raw = RawParam(variables[declaration.name], structured=True)
                coerced[declaration.name] = parse_variable(
                    raw, declaration.type, self._schema, name=declaration.name
                )
        return coerced

    async def _open(
        self,
        compiled: _CompiledSubscription,
        variables: dict[str, Any],
        context_value: Any,
    ) -> AsyncIterator[Any]:
        result = await invoke(
            self._subscribe,
            schema=self._schema,
            source=compiled.source,
            context_value=context_value,
            variable_values=variables,
            operation_name=compiled.info.operation_name,
        )
        if hasattr(result, "__aiter__"):
            return result
        outcome = normalize_result(result)
        if outcome.errors:
            error = format_error(outcome.errors[0])
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise SubscriptionError(str(message))
        msg = f"Subscription {compiled.field_name!r} did not produce an event stream"
        raise SubscriptionError(msg)

    def _spawn(self, subscription: Subscription) -> asyncio.Task[None]:
        return asyncio.create_task(
            self._pump(subscription, subscription.source),
            name=f"ottoman-subscription-{subscription.id}",
        )

    async def _pump(self, subscription: Subscription, source: AsyncIterator[Any]) -> None:
        """Deliver events from *source* until it ends or the task is cancelled."""
        try:
            async for result in source:
                outcome = await self._webhooks.deliver(
                    subscription.url,
                    format_result(result),
                    subscription_id=subscription.id,
                )
                if outcome.success:
                    subscription.delivered += 1
                else:
                    subscription.failed += 1
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Event source for subscription %s failed", subscription.id)
        else:
            logger.debug("Event source for subscription %s ended", subscription.id)

    async def _close(self, subscription: Subscription) -> None:
        task = subscription.task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        subscription.task = None
        aclose = getattr(subscription.source, "aclose", None)
        if aclose is not None:
            await aclose()
