"""Executor and live-event-source interfaces, with graphql-core defaults.

An executor receives keyword arguments::

    execute(schema=..., source=..., context_value=..., variable_values=...,
            operation_name=...)

and returns either a graphql-core ``ExecutionResult`` or a mapping with
``data`` and/or ``errors`` keys. It may be sync or async.

A subscriber receives the same keywords and returns an async iterator of
results (the live event source) or, if the subscription could not be
set up, a single result carrying errors.
"""

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from graphql import ExecutionResult, GraphQLError, GraphQLSchema, graphql, parse, subscribe

from ottoman._internal.invoke import invoke


class Executor(Protocol):
    def __call__(
        self,
        *,
        schema: GraphQLSchema,
        source: str,
        context_value: Any,
        variable_values: dict[str, Any],
        operation_name: str | None,
    ) -> Any: ...


class Subscriber(Protocol):
    def __call__(
        self,
        *,
        schema: GraphQLSchema,
        source: str,
        context_value: Any,
        variable_values: dict[str, Any],
        operation_name: str | None,
    ) -> Any: ...


@dataclass(frozen=True, slots=True)
class Outcome:
    """Executor result normalized to data plus an optional error list."""

    data: Any
    errors: tuple[Any, ...] | None


def normalize_result(result: Any) -> Outcome:
    """Accept an ``ExecutionResult`` or a ``{"data", "errors"}`` mapping."""
    if isinstance(result, Mapping):
        data = result.get("data")
        errors = result.get("errors")
    else:
        data = getattr(result, "data", None)
        errors = getattr(result, "errors", None)
    return Outcome(data=data, errors=tuple(errors) if errors else None)


def format_error(error: Any) -> Any:
    """Turn an executor error into a JSON-serializable payload."""
    if isinstance(error, GraphQLError):
        return error.formatted
    if isinstance(error, Mapping):
        return dict(error)
    if isinstance(error, BaseException):
        return {"message": str(error)}
    return error


def format_result(result: Any) -> dict[str, Any]:
    """Serialize a subscription event for webhook delivery."""
    outcome = normalize_result(result)
    payload: dict[str, Any] = {"data": outcome.data}
    if outcome.errors:
        payload["errors"] = [format_error(e) for e in outcome.errors]
    return payload


async def default_execute(
    *,
    schema: GraphQLSchema,
    source: str,
    context_value: Any,
    variable_values: dict[str, Any],
    operation_name: str | None,
) -> ExecutionResult:
    """Run *source* with graphql-core (async resolvers supported)."""
    return await graphql(
        schema,
        source,
        context_value=context_value,
        variable_values=variable_values,
        operation_name=operation_name,
    )


async def default_subscribe(
    *,
    schema: GraphQLSchema,
    source: str,
    context_value: Any,
    variable_values: dict[str, Any],
    operation_name: str | None,
) -> AsyncIterator[ExecutionResult] | ExecutionResult:
    """Open a graphql-core subscription for *source*."""
    return await invoke(
        subscribe,
        schema,
        parse(source),
        context_value=context_value,
        variable_values=variable_values,
        operation_name=operation_name,
    )
