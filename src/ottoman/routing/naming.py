"""Method and path derivation for operation fields.

Pure functions of (type name, field name, field shape, method map), so
compiling the same schema twice yields the same routes.
"""

import re
from collections.abc import Mapping

from graphql import GraphQLField, GraphQLNonNull, is_object_type

from ottoman.routing.route import Method

_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_WORD = re.compile(r"([A-Z]+)([A-Z][a-z])")
_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")


def convert_name(name: str) -> str:
    """Convert a schema field name to a kebab-case URL segment.

    ``userById`` -> ``user-by-id``, ``HTTPStatus`` -> ``http-status``,
    ``user_name`` -> ``user-name``.
    """
    name = _ACRONYM_WORD.sub(r"\1-\2", name)
    name = _LOWER_UPPER.sub(r"\1-\2", name)
    return _SEPARATORS.sub("-", name).strip("-").lower()


def get_path(field_name: str, has_id: bool = False) -> str:
    """Return the route path for *field_name*, with ``/:id`` for single lookups."""
    return f"/{convert_name(field_name)}{'/:id' if has_id else ''}"


def is_single_with_id(field: GraphQLField) -> bool:
    """True when *field* fetches one object by an ``id`` argument.

    The return type may be wrapped in a single NonNull; lists never count.
    """
    field_type = field.type
    if isinstance(field_type, GraphQLNonNull):
        field_type = field_type.of_type
    return is_object_type(field_type) and "id" in field.args


def produce_method(
    type_name: str,
    field_name: str,
    method_map: Mapping[str, Method] | None,
    default: Method,
) -> Method:
    """Look up ``"Type.field"`` in *method_map*, falling back to *default*."""
    if method_map:
        override = method_map.get(f"{type_name}.{field_name}")
        if override:
            return override
    return default
