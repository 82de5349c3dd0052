"""Tool schema generation and validation."""

from .schema_validator import SchemaArguments, SchemaValidator
from .tool_param_factory import ToolParameterFactory, FieldTuple

__all__ = ["SchemaArguments", "SchemaValidator", "ToolParameterFactory", "FieldTuple"]
