import keyword
from typing import Any, Dict, List, Literal, Optional, Set, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, PydanticUserError, create_model

from ...exceptions import ToolValidationError
from ...logger import get_logger

logger = get_logger(__name__)

JSON_TYPE_MAPPING: Dict[str, Any] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
    "array": list,
    "object": dict,
    "null": type(None),
}


class SchemaArguments(BaseModel):
    """Base of the argument models compiled from an explicit JSON schema."""

    model_config = ConfigDict(strict=True, extra="ignore")

    def to_kwargs(self) -> Dict[str, Any]:
        """Returns the supplied arguments keyed by their JSON property names."""
        model_fields = type(self).model_fields
        return {model_fields[field].alias or field: getattr(self, field) for field in self.model_fields_set}


class ClosedSchemaArguments(SchemaArguments):
    """Argument model for schemas with ``additionalProperties: false``."""

    model_config = ConfigDict(extra="forbid")


class SchemaValidator:
    """
    Helper class for validating, sanitizing and compiling JSON schemas for tools.
    """

    @staticmethod
    def assert_no_recursive_refs(schema: Dict[str, Any]) -> None:
        """
        Checks if the schema contains recursive references by traversing the graph.
        Raises ToolValidationError if a cycle is detected.

        Args:
            schema: The JSON schema to check.

        Raises:
            ToolValidationError: If a recursive reference is found.
        """
        defs = schema.get("$defs", {}) or schema.get("definitions", {})

        def check(node: Any, path: Set[str]) -> None:
            if isinstance(node, dict):
                if "$ref" in node:
                    ref = node["$ref"]
                    if ref in path:
                        msg = (
                            f"Recursive structure detected: {ref}. "
                            "Recursive structures are not allowed in tool inputs."
                        )
                        logger.error(msg)
                        raise ToolValidationError(msg)

                    # e.g. #/$defs/MyModel
                    if ref.startswith("#"):
                        parts = ref.split("/")
                        if len(parts) >= 3 and parts[-1] in defs:
                            check(defs[parts[-1]], path | {ref})
                    return

                for v in node.values():
                    check(v, path)
            elif isinstance(node, list):
                for item in node:
                    check(item, path)

        check(schema, set())

    @staticmethod
    def sanitize_schema(schema: Any) -> Any:
        """
        Cleans up a generated schema before it is sent to the model.
        Removes $defs, $schema, $id and title, and simplifies Optional fields (anyOf with null).

        Args:
            schema: The JSON schema to sanitize.

        Returns:
            The sanitized schema.
        """
        if not isinstance(schema, dict):
            return schema

        new_schema = schema.copy()

        for key in ["$defs", "$schema", "$id", "title", "definitions"]:
            new_schema.pop(key, None)

        if "anyOf" in new_schema:
            non_null = [x for x in new_schema["anyOf"] if x.get("type") != "null"]

            if len(non_null) == 1 and isinstance(non_null[0], dict):
                # The parent's description wins over the branch's
                merged = non_null[0].copy()
                for key in ("description", "default"):
                    if key in new_schema:
                        merged[key] = new_schema[key]
                return SchemaValidator.sanitize_schema(merged)

        for key, value in new_schema.items():
            if key == "properties" and isinstance(value, dict):
                # Property names are data, not schema keywords; only sanitize their values
                new_schema[key] = {name: SchemaValidator.sanitize_schema(prop) for name, prop in value.items()}
            elif isinstance(value, dict):
                new_schema[key] = SchemaValidator.sanitize_schema(value)
            elif isinstance(value, list):
                new_schema[key] = [
                    SchemaValidator.sanitize_schema(item) if isinstance(item, dict) else item for item in value
                ]

        return new_schema

    @classmethod
    def build_args_model(cls, tool_name: str, schema: Dict[str, Any]) -> Type[SchemaArguments]:
        """
        Compiles an object JSON schema into a Pydantic model used to validate tool arguments.

        Only the subset of JSON schema that tool inputs use is understood: primitive
        types, arrays, nested objects, ``enum`` and the ``required`` list. Validation is
        strict: ``"5"`` is not an integer and ``"yes"`` is not a boolean. A property
        accepts ``null`` only when its schema allows it, whether it is required or not.
        Property names that cannot be Python field names are kept as aliases.

        Args:
            tool_name: Name of the tool, used for the model name and error messages.
            schema: The tool's input schema.

        Returns:
            A Pydantic model class for the tool's arguments.

        Raises:
            ToolValidationError: If the schema is not an object schema or cannot be compiled.
        """
        if not isinstance(schema, dict) or schema.get("type", "object") != "object":
            msg = f"Input schema of tool '{tool_name}' must be a JSON object schema."
            logger.error(msg)
            raise ToolValidationError(msg)

        properties: Dict[str, Any] = schema.get("properties") or {}
        required: List[str] = list(schema.get("required") or [])

        unknown = [name for name in required if name not in properties]
        if unknown:
            msg = f"Tool '{tool_name}' lists required fields without properties: {unknown}"
            logger.error(msg)
            raise ToolValidationError(msg)

        fields: Dict[str, Tuple[Any, Any]] = {}
        for index, (prop_name, prop_schema) in enumerate(properties.items()):
            annotation = cls._annotation_for(prop_schema)
            description = prop_schema.get("description") if isinstance(prop_schema, dict) else None
            field_name = cls._field_name(prop_name, index, properties)
            alias = prop_name if field_name != prop_name else None
            if prop_name in required:
                fields[field_name] = (annotation, Field(..., alias=alias, description=description))
            else:
                fields[field_name] = (annotation, Field(default=None, alias=alias, description=description))

        base = ClosedSchemaArguments if schema.get("additionalProperties") is False else SchemaArguments
        try:
            return create_model(  # type: ignore[call-overload, no-any-return]
                f"{tool_name}Params",
                __base__=base,
                **fields,
            )
        except (PydanticUserError, NameError, TypeError, ValueError) as exc:
            msg = f"Input schema of tool '{tool_name}' cannot be compiled: {exc}"
            logger.error(msg)
            raise ToolValidationError(msg) from exc

    @staticmethod
    def _field_name(prop_name: str, index: int, properties: Dict[str, Any]) -> str:
        if (
            prop_name.isidentifier()
            and not keyword.iskeyword(prop_name)
            and not prop_name.startswith(("_", "model_"))
            and not hasattr(SchemaArguments, prop_name)
        ):
            return prop_name

        field_name = f"field_{index}"
        while field_name in properties:
            field_name += "_"
        return field_name

    @staticmethod
    def _is_nullable(prop_schema: Dict[str, Any]) -> bool:
        json_type = prop_schema.get("type")
        if json_type == "null" or (isinstance(json_type, list) and "null" in json_type):
            return True
        return None in (prop_schema.get("enum") or [])

    @classmethod
    def _annotation_for(cls, prop_schema: Any) -> Any:
        if not isinstance(prop_schema, dict):
            return Any

        if "enum" in prop_schema and prop_schema["enum"]:
            return Literal[tuple(prop_schema["enum"])]  # type: ignore[misc]

        annotation = cls._base_annotation_for(prop_schema)
        if annotation is not Any and cls._is_nullable(prop_schema):
            return Optional[annotation]
        return annotation

    @classmethod
    def _base_annotation_for(cls, prop_schema: Dict[str, Any]) -> Any:
        json_type = prop_schema.get("type")
        if isinstance(json_type, list):
            non_null = [t for t in json_type if t != "null"]
            if not non_null:
                return type(None)
            json_type = non_null[0] if len(non_null) == 1 else None

        if json_type == "array":
            return List[cls._annotation_for(prop_schema.get("items"))]  # type: ignore[misc]
        if json_type == "object":
            return Dict[str, Any]
        return JSON_TYPE_MAPPING.get(json_type, Any) if isinstance(json_type, str) else Any
