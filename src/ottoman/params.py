"""Resolve HTTP parameters into typed operation variables.

Each declared variable is looked up, in order, in:

1. the matched path parameters,
2. the query string,
3. the parsed JSON body.

The first source that *has* the key wins, even if the value is empty.
Variables found nowhere are left out entirely; whether they were required
is for the executor to decide.

Path and query values are strings and get coerced to the declared type.
Body values are already JSON-shaped and are validated instead.
"""

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from graphql import (
    GRAPHQL_MAX_INT,
    GRAPHQL_MIN_INT,
    GraphQLBoolean,
    GraphQLError,
    GraphQLFloat,
    GraphQLID,
    GraphQLInputType,
    GraphQLInt,
    GraphQLSchema,
    GraphQLString,
    TypeNode,
    is_enum_type,
    is_input_object_type,
    is_list_type,
    is_non_null_type,
    is_scalar_type,
    type_from_ast,
)

from ottoman.errors import ParameterError
from ottoman.http.request import Request
from ottoman.operation.info import OperationInfo

LIST_DELIMITER = ","

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


@dataclass(frozen=True, slots=True)
class RawParam:
    """A value found for a variable, plus whether it came from the JSON body."""

    value: Any
    structured: bool


async def read_body(request: Request) -> Mapping[str, Any]:
    """Parse the request body as a JSON object.

    An empty body, or a JSON value that is not an object, has no keys.
    Raises ``ParameterError`` for malformed JSON.
    """
    try:
        data = await request.json()
    except ValueError as exc:
        msg = f"Request body is not valid JSON: {exc}"
        raise ParameterError(msg) from exc
    return data if isinstance(data, dict) else {}


def pick_param(
    request: Request,
    params: Mapping[str, str],
    body: Mapping[str, Any],
    name: str,
) -> RawParam | None:
    """Find the raw value for *name*. Returns ``None`` if no source has it."""
    if name in params:
        return RawParam(params[name], structured=False)
    if name in request.query:
        values = request.query.get_list(name)
        return RawParam(values if len(values) > 1 else values[0], structured=False)
    if name in body:
        return RawParam(body[name], structured=True)
    return None


def parse_variable(
    raw: RawParam,
    type_node: TypeNode,
    schema: GraphQLSchema,
    *,
    name: str = "",
) -> Any:
    """Coerce *raw* to the type declared by *type_node*.

    Raises ``ParameterError`` when the value does not fit.
    """
    type_ = type_from_ast(schema, type_node)
    if type_ is None:
        msg = f"Variable {name!r} has unknown type {type_node}"
        raise ParameterError(msg)
    return coerce_value(raw.value, type_, structured=raw.structured, name=name)


def coerce_value(value: Any, type_: GraphQLInputType, *, structured: bool, name: str) -> Any:
    if is_non_null_type(type_):
        return coerce_value(value, type_.of_type, structured=structured, name=name)

    # JSON null; nullability is checked by the executor
    if value is None:
        return None

    if is_list_type(type_):
        if isinstance(value, list):
            items = value
        elif isinstance(value, str) and not structured:
            items = value.split(LIST_DELIMITER) if value else []
        else:
            items = [value]
        return [
            coerce_value(item, type_.of_type, structured=structured, name=f"{name}[{i}]")
            for i, item in enumerate(items)
        ]

    if isinstance(value, list):
        if structured:
            msg = f"Variable {name!r} expects a single {type_}, got a list"
            raise ParameterError(msg)
        # Repeated query key for a non-list variable: first one wins
        value = value[0]

    if is_input_object_type(type_):
        if not structured or not isinstance(value, dict):
            msg = f"Variable {name!r} of input type {type_.name} must be a JSON object in the request body"
            raise ParameterError(msg)
        result: dict[str, Any] = {}
        for key, item in value.items():
            field = type_.fields.get(key)
            if field is None:
                msg = f"Field {key!r} is not defined by input type {type_.name}"
                raise ParameterError(msg)
            result[key] = coerce_value(item, field.type, structured=True, name=f"{name}.{key}")
        return result

    if is_enum_type(type_):
        if not isinstance(value, str) or value not in type_.values:
            allowed = ", ".join(type_.values)
            msg = f"Variable {name!r} must be one of {allowed}, got {value!r}"
            raise ParameterError(msg)
        return value

    if is_scalar_type(type_):
        return _coerce_scalar(value, type_, structured=structured, name=name)

    msg = f"Variable {name!r} has unsupported type {type_}"
    raise ParameterError(msg)


def _coerce_scalar(value: Any, type_: Any, *, structured: bool, name: str) -> Any:
    if type_ is GraphQLInt:
        if isinstance(value, str):
            if not _INT_PATTERN.fullmatch(value):
                msg = f"Variable {name!r} expects an Int, got {value!r}"
                raise ParameterError(msg)
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            msg = f"Variable {name!r} expects an Int, got {value!r}"
            raise ParameterError(msg)
        if isinstance(value, float) and not value.is_integer():
            msg = f"Variable {name!r} expects an Int, got {value!r}"
            raise ParameterError(msg)
        number = int(value)
        # GraphQL Int is a signed 32-bit integer
        if not GRAPHQL_MIN_INT <= number <= GRAPHQL_MAX_INT:
            msg = f"Variable {name!r} is outside the Int range, got {value!r}"
            raise ParameterError(msg)
        return number

    if type_ is GraphQLFloat:
        if isinstance(value, str):
            if not _FLOAT_PATTERN.fullmatch(value):
                msg = f"Variable {name!r} expects a Float, got {value!r}"
                raise ParameterError(msg)
            number = float(value)
        elif structured and isinstance(value, (int, float)) and not isinstance(value, bool):
            number = value
        else:
            msg = f"Variable {name!r} expects a Float, got {value!r}"
            raise ParameterError(msg)
        if not math.isfinite(number):
            msg = f"Variable {name!r} expects a finite Float, got {value!r}"
            raise ParameterError(msg)
        return number

    if type_ is GraphQLBoolean:
        if structured and isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        msg = f"Variable {name!r} expects true or false, got {value!r}"
        raise ParameterError(msg)

    if type_ is GraphQLString or type_ is GraphQLID:
        return value

    # Custom scalar: validate with its parser, let the executor convert
    try:
        type_.parse_value(value)
    except (GraphQLError, TypeError, ValueError) as exc:
        msg = f"Variable {name!r} is not a valid {type_.name}: {exc}"
        raise ParameterError(msg) from exc
    return value


async def resolve_variables(
    request: Request,
    params: Mapping[str, str],
    info: OperationInfo,
    schema: GraphQLSchema,
) -> dict[str, Any]:
    """Resolve every declared variable of *info* from *request*.

    The body is only read if a variable is missing from path and query.
    """
    variables: dict[str, Any] = {}
    body: Mapping[str, Any] | None = None
    for declaration in info.variables:
        name = declaration.name
        raw = pick_param(request, params, {}, name)
        if raw is None:
            if body is None:
                body = await read_body(request)
            raw = pick_param(request, params, body, name)
        if raw is None:
            continue
        variables[name] = parse_variable(raw, declaration.type, schema, name=name)
    return variables
