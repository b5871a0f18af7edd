"""Build a single-field GraphQL operation for a root field.

Given ``Query.user(id: ID!): User`` this produces::

    query user_query($id: ID!) {
      user(id: $id) {
        id
        name
        friends { id name }
      }
    }

Every root argument becomes a variable of the same name. Object results
are expanded down to leaf fields, bounded by ``circular_reference_depth``
so cyclic schemas terminate.
"""

from collections.abc import Collection
from typing import Literal, TypeAlias

from graphql import (
    ArgumentNode,
    DocumentNode,
    FieldNode,
    GraphQLField,
    GraphQLInputType,
    GraphQLObjectType,
    GraphQLOutputType,
    GraphQLSchema,
    InlineFragmentNode,
    ListTypeNode,
    NamedTypeNode,
    NameNode,
    NonNullTypeNode,
    OperationDefinitionNode,
    OperationType,
    SelectionSetNode,
    TypeNode,
    VariableDefinitionNode,
    VariableNode,
    get_named_type,
    is_abstract_type,
    is_leaf_type,
    is_list_type,
    is_non_null_type,
    is_required_argument,
)

from ottoman.errors import ConfigurationError

OperationKind: TypeAlias = Literal["query", "mutation", "subscription"]


def _name(value: str) -> NameNode:
    return NameNode(value=value)


def _leaf(name: str) -> FieldNode:
    return FieldNode(alias=None, name=_name(name), arguments=(), directives=(), selection_set=None)


def type_to_node(type_: GraphQLInputType) -> TypeNode:
    """Render a schema input type as its AST type reference."""
    if is_non_null_type(type_):
        return NonNullTypeNode(type=type_to_node(type_.of_type))
    if is_list_type(type_):
        return ListTypeNode(type=type_to_node(type_.of_type))
    return NamedTypeNode(name=_name(type_.name))


def root_type(schema: GraphQLSchema, kind: OperationKind) -> GraphQLObjectType | None:
    if kind == "query":
        return schema.query_type
    if kind == "mutation":
        return schema.mutation_type
    return schema.subscription_type


class _SelectionBuilder:
    """Walks output types and emits selection sets."""

    __slots__ = ("_depth", "_ignore", "_models", "_schema")

    def __init__(
        self,
        schema: GraphQLSchema,
        models: Collection[str],
        ignore: Collection[str],
        depth: int,
    ) -> None:
        self._schema = schema
        self._models = frozenset(models)
        self._ignore = frozenset(ignore)
        self._depth = depth

    def selection_set(
        self,
        type_: GraphQLOutputType,
        ancestors: tuple[str, ...],
        is_root: bool,
    ) -> SelectionSetNode | None:
        named = get_named_type(type_)
        if is_leaf_type(named):
            return None

        if is_abstract_type(named):
            selections: list[FieldNode | InlineFragmentNode] = [_leaf("__typename")]
            for possible in self._schema.get_possible_types(named):
                inner = self._object_selections(possible, ancestors, is_root)
                if inner:
                    selections.append(
                        InlineFragmentNode(
                            type_condition=NamedTypeNode(name=_name(possible.name)),
                            directives=(),
                            selection_set=SelectionSetNode(selections=tuple(inner)),
                        )
                    )
            return SelectionSetNode(selections=tuple(selections))

        selections = self._object_selections(named, ancestors, is_root)
        if not selections:
            return None
        return SelectionSetNode(selections=tuple(selections))

    def _object_selections(
        self,
        object_type: GraphQLObjectType,
        ancestors: tuple[str, ...],
        is_root: bool,
    ) -> list[FieldNode]:
        # Models nested below the root collapse to their identifier
        if not is_root and object_type.name in self._models and "id" in object_type.fields:
            return [_leaf("id")]

        path = (*ancestors, object_type.name)
        selections: list[FieldNode] = []
        for field_name, field in object_type.fields.items():
            if self._is_ignored(object_type.name, field_name):
                continue
            # No value is available for required nested arguments
            if any(is_required_argument(arg) for arg in field.args.values()):
                continue

            named = get_named_type(field.type)
            if is_leaf_type(named):
                selections.append(_leaf(field_name))
                continue
            if self._too_deep(named, path):
                continue
            sub = self.selection_set(field.type, path, is_root=False)
            if sub is None:
                continue
            selections.append(
                FieldNode(
                    alias=None,
                    name=_name(field_name),
                    arguments=(),
                    directives=(),
                    selection_set=sub,
                )
            )
        return selections

    def _is_ignored(self, type_name: str, field_name: str) -> bool:
        return f"{type_name}.{field_name}" in self._ignore or field_name in self._ignore

    def _too_deep(self, named: object, path: tuple[str, ...]) -> bool:
        if is_abstract_type(named):
            names = [t.name for t in self._schema.get_possible_types(named)]
        else:
            names = [named.name]  # type: ignore[attr-defined]
        return any(path.count(name) > self._depth for name in names)


def build_operation_node_for_field(
    *,
    kind: OperationKind,
    schema: GraphQLSchema,
    field: str,
    models: Collection[str] = (),
    ignore: Collection[str] = (),
    circular_reference_depth: int = 1,
) -> OperationDefinitionNode:
    """Build the operation selecting exactly *field* on the *kind* root type.

    Raises ``ConfigurationError`` if the schema has no such root type or
    the root type has no such field.
    """
    root = root_type(schema, kind)
    if root is None:
        msg = f"Schema has no {kind} type"
        raise ConfigurationError(msg)
    gql_field: GraphQLField | None = root.fields.get(field)
    if gql_field is None:
        msg = f"Field {field!r} not found on {root.name}"
        raise ConfigurationError(msg)

    builder = _SelectionBuilder(schema, models, ignore, circular_reference_depth)
    selection_set = builder.selection_set(gql_field.type, (), is_root=True)
    if selection_set is None and not is_leaf_type(get_named_type(gql_field.type)):
        # Everything below was ignored; still a valid document
        selection_set = SelectionSetNode(selections=(_leaf("__typename"),))

    field_node = FieldNode(
        alias=None,
        name=_name(field),
        arguments=tuple(
            ArgumentNode(name=_name(arg_name), value=VariableNode(name=_name(arg_name)))
            for arg_name in gql_field.args
        ),
        directives=(),
        selection_set=selection_set,
    )
    return OperationDefinitionNode(
        operation=OperationType(kind),
        name=_name(f"{field}_{kind}"),
        variable_definitions=tuple(
            VariableDefinitionNode(
                variable=VariableNode(name=_name(arg_name)),
                type=type_to_node(arg.type),
                default_value=None,
                directives=(),
            )
            for arg_name, arg in gql_field.args.items()
        ),
        directives=(),
        selection_set=SelectionSetNode(selections=(field_node,)),
    )


def build_document(operation: OperationDefinitionNode) -> DocumentNode:
    """Wrap a single operation in a document."""
    return DocumentNode(definitions=(operation,))
