"""Variable declarations extracted from a compiled operation."""

from dataclasses import dataclass

from graphql import DocumentNode, OperationDefinitionNode, TypeNode


@dataclass(frozen=True, slots=True)
class VariableDeclaration:
    """A declared operation variable: ``$name: Type``.

    ``type`` keeps the full AST wrapping (NonNull / List / Named) so the
    parameter resolver can coerce raw values to the declared shape.
    """

    name: str
    type: TypeNode


@dataclass(frozen=True, slots=True)
class OperationInfo:
    operation_name: str | None
    variables: tuple[VariableDeclaration, ...]


def get_operation_info(document: DocumentNode) -> OperationInfo | None:
    """Return name and variables of the first operation in *document*."""
    for definition in document.definitions:
        if isinstance(definition, OperationDefinitionNode):
            return OperationInfo(
                operation_name=definition.name.value if definition.name else None,
                variables=tuple(
                    VariableDeclaration(name=var.variable.name.value, type=var.type)
                    for var in definition.variable_definitions or ()
                ),
            )
    return None
