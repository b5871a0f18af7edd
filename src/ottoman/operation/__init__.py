"""Operation compilation: one executable document per root field."""

from ottoman.operation.builder import build_document, build_operation_node_for_field
from ottoman.operation.info import OperationInfo, VariableDeclaration, get_operation_info

__all__ = [
    "OperationInfo",
    "VariableDeclaration",
    "build_document",
    "build_operation_node_for_field",
    "get_operation_info",
]
