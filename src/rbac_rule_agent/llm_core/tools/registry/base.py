"""Tool registry and helper utilities."""

import asyncio
import inspect
import json
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union, cast

import jsonref  # type: ignore
from pydantic import BaseModel, ValidationError, create_model

from ..models import ToolDefinition, ToolDescriptor
from ..schema import SchemaArguments, SchemaValidator, ToolParameterFactory
from ...exceptions import (
    ToolExecutionError,
    ToolRegistrationError,
    ToolValidationError,
    UnknownToolError,
)
from ...logger import get_logger

logger = get_logger(__name__)


class ToolRegistry:
    """
    A central registry to manage, describe and execute the tools of an agent.

    This class holds the tool descriptors sent to the model and maps tool
    names to their actual Python implementations.
    """

    def __init__(self, tool_timeout: float = 180.0) -> None:
        """Initialize the ToolRegistry.

        Args:
            tool_timeout: Timeout in seconds for a single tool execution.
        """
        self.tools: Dict[str, ToolDefinition] = {}
        self.tool_timeout = tool_timeout

    @classmethod
    def from_pairs(
        cls, pairs: Iterable[Tuple[ToolDescriptor, Callable]], tool_timeout: float = 180.0
    ) -> "ToolRegistry":
        """Build a registry from ``(descriptor, executor)`` pairs.

        Args:
            pairs: Tool descriptors with the callables that implement them.
            tool_timeout: Timeout in seconds for a single tool execution.

        Returns:
            A registry containing every pair, in order.
        """
        registry = cls(tool_timeout=tool_timeout)
        for descriptor, func in pairs:
            registry.register(descriptor.name, descriptor.description, func, descriptor.input_schema)
        return registry

    def register(
        self,
        name_or_tool: Union[str, ToolDefinition, Callable],
        description: Optional[str] = None,
        func: Optional[Callable] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Register a new tool.

        A tool can be registered from a `ToolDefinition`, from its individual parts
        (name, description, function, JSON schema), or from a plain callable whose
        signature and docstring are turned into the definition.

        Args:
            name_or_tool: Either a `ToolDefinition` object, the name of the tool (str), or a Callable.
            description: What the tool does. Required if `name_or_tool` is a string and parameters are provided.
            func: The callable implementing the tool's logic. Required if `name_or_tool` is a string.
            parameters: JSON schema of the tool's input. If None, it is inferred from `func`.

        Raises:
            ToolRegistrationError: If arguments are missing or the tool already exists.
            ToolValidationError: If the tool's schema or signature is invalid.
        """
        if isinstance(name_or_tool, ToolDefinition):
            tool = name_or_tool
        elif callable(name_or_tool):
            tool = self._generate_tool_definition(name_or_tool, description=description)
        else:
            if func is None:
                raise ToolRegistrationError("If passing name as string, func is required.")

            if parameters is None:
                tool = self._generate_tool_definition(func, name=name_or_tool, description=description)
            else:
                if description is None:
                    raise ToolRegistrationError("If passing name and parameters, description is required.")
                tool = ToolDefinition(name=name_or_tool, description=description, func=func, parameters=parameters)

        if tool.parameters is not None and tool.args_model is None:
            SchemaValidator.assert_no_recursive_refs(tool.parameters)
            tool = tool.model_copy(
                update={"args_model": SchemaValidator.build_args_model(tool.name, tool.parameters)}
            )

        if tool.name in self.tools:
            msg = f"Tool '{tool.name}' is already registered."
            logger.error(msg)
            raise ToolRegistrationError(msg)

        self.tools[tool.name] = tool
        logger.info(f"Successfully registered tool: '{tool.name}'")

    def unregister(self, tool_name: str) -> None:
        """Unregister a tool from the registry.

        Raises:
            UnknownToolError: If the tool does not exist in the registry.
        """
        if tool_name not in self.tools:
            raise UnknownToolError(tool_name)
        del self.tools[tool_name]
        logger.info(f"Successfully unregistered tool: '{tool_name}'")

    def tool(self, func: Callable) -> Callable:
        """A decorator to turn a function into a tool.

        Args:
            func: The function to decorate.

        Returns:
            The original function, after registering it as a tool.
        """
        self.register(func)
        return func

    def describe(self) -> List[ToolDescriptor]:
        """Returns the descriptors of all registered tools, in registration order."""
        return [tool.descriptor for tool in self.tools.values()]

    @property
    def implementations(self) -> Dict[str, Callable]:
        """Returns a dictionary mapping tool names to their callables."""
        return {name: tool.func for name, tool in self.tools.items()}

    def __contains__(self, name: object) -> bool:
        return name in self.tools

    def __len__(self) -> int:
        return len(self.tools)

    async def execute(self, name: str, arguments: Any) -> str:
        """Validate arguments against the tool's schema and run the tool.

        Args:
            name: Name of the registered tool.
            arguments: Arguments supplied by the model; must be a mapping.

        Returns:
            The tool's result as a string. Non-string results are serialized to JSON.

        Raises:
            UnknownToolError: If no tool with that name is registered.
            ToolExecutionError: If the arguments do not match the schema, the tool raises,
                or the tool exceeds its timeout.
        """
        tool = self.tools.get(name)
        if tool is None:
            logger.warning(f"Tool '{name}' not found in registry.")
            raise UnknownToolError(name)

        function_args = self._validate_arguments(tool, arguments)

        try:
            logger.info(f"Executing tool '{name}'...")
            result = await self._invoke(tool.func, function_args)
        except asyncio.TimeoutError as exc:
            msg = f"Tool execution timed out after {self.tool_timeout} seconds."
            logger.warning(f"Tool '{name}': {msg}")
            raise ToolExecutionError(name, TimeoutError(msg)) from exc
        except Exception as exc:
            logger.warning(f"Error in tool '{name}': {exc} ({type(exc).__name__})")
            raise ToolExecutionError(name, exc) from exc

        logger.info(f"Tool '{name}' executed successfully.")
        return self._stringify(result)

    @staticmethod
    def _validate_arguments(tool: ToolDefinition, arguments: Any) -> Dict[str, Any]:
        if arguments is None:
            arguments = {}

        if not isinstance(arguments, Mapping):
            exc = TypeError(f"Tool arguments must be a JSON object, got {type(arguments).__name__}.")
            logger.warning(f"Validation error for '{tool.name}': {exc}")
            raise ToolExecutionError(tool.name, exc)

        if tool.args_model is None:
            return dict(arguments)

        try:
            validated = tool.args_model.model_validate(dict(arguments))
        except ValidationError as exc:
            logger.warning(f"Validation error for '{tool.name}': {exc}")
            raise ToolExecutionError(tool.name, exc) from exc

        if isinstance(validated, SchemaArguments):
            return validated.to_kwargs()

        # Only pass what the model supplied, so function defaults still apply
        return {field: getattr(validated, field) for field in validated.model_fields_set}

    async def _invoke(self, func: Callable, function_args: Dict[str, Any]) -> Any:
        if inspect.iscoroutinefunction(func):
            return await asyncio.wait_for(func(**function_args), timeout=self.tool_timeout)

        return await asyncio.wait_for(asyncio.to_thread(func, **function_args), timeout=self.tool_timeout)

    @staticmethod
    def _stringify(result: Any) -> str:
        if isinstance(result, str):
            return result
        if isinstance(result, BaseModel):
            return result.model_dump_json()
        return json.dumps(result, default=str)

    def _generate_tool_definition(
        self, func: Callable, name: Optional[str] = None, description: Optional[str] = None
    ) -> ToolDefinition:
        """Generate a ToolDefinition from a callable function.

        Args:
            func: The function to generate a definition for.
            name: Optional name override for the tool.
            description: Optional description override for the tool.

        Returns:
            A ToolDefinition object containing the tool's metadata and schema.

        Raises:
            ToolValidationError: If the function is missing a docstring or parameter descriptions.
        """
        tool_name = name or func.__name__
        if description is None:
            description = self._get_docstring_from_func(func, tool_name)

        signature = inspect.signature(func)
        fields = self._build_fields(signature, tool_name)

        dynamic_params_model = create_model(f"{tool_name}Params", **cast(Dict[str, Any], fields))
        raw_schema = dynamic_params_model.model_json_schema()
        SchemaValidator.assert_no_recursive_refs(raw_schema)

        # proxies=False ensures we get a plain dict back, not JsonRef objects
        parameters_schema = jsonref.replace_refs(raw_schema, proxies=False)
        parameters_schema = SchemaValidator.sanitize_schema(parameters_schema)
        parameters_schema.setdefault("required", [])

        return ToolDefinition(
            name=tool_name,
            description=description,
            func=func,
            parameters=parameters_schema,
            args_model=dynamic_params_model,
        )

    @staticmethod
    def _get_docstring_from_func(func: Callable, tool_name: str) -> str:
        doc = inspect.getdoc(func)
        if not doc:
            msg = f"Tool '{tool_name}' missing docstring. LLMs need a description of what the tool does."
            logger.error(msg)
            raise ToolValidationError(msg)
        return doc

    @staticmethod
    def _build_fields(signature: inspect.Signature, tool_name: str) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        for param_name, param in signature.parameters.items():
            if param_name == "self":
                continue
            ft = ToolParameterFactory.build_field_tuple(param_name=param_name, param=param, tool_name=tool_name)
            fields[param_name] = (ft.annotation, ft.field)
        return fields
