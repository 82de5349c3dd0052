from typing import Optional, Any, Callable, Dict, Type
from pydantic import BaseModel, ConfigDict, Field


def _empty_object_schema() -> Dict[str, Any]:
    return {"type": "object", "properties": {}, "required": []}


class ToolDescriptor(BaseModel):
    """
    Describes a tool to the model.

    Attributes:
        name: The unique name of the tool.
        description: What the tool does, written for the model.
        input_schema: JSON schema of the tool's arguments, an object schema with
                      ``properties`` and a ``required`` list.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str
    input_schema: Dict[str, Any] = Field(default_factory=_empty_object_schema)


class ToolDefinition(BaseModel):
    """
    Represents the definition of a tool that can be registered with the agent.

    Attributes:
        name: The unique name of the tool.
        description: A brief description of what the tool does.
        func: The callable (sync or async) that implements the tool's logic.
        parameters: A JSON schema defining the input parameters for the tool's function.
        args_model: Optional Pydantic model used for validating and coercing arguments.
    """

    name: str
    description: str
    func: Callable
    parameters: Optional[Dict[str, Any]] = None
    args_model: Optional[Type[BaseModel]] = None

    @property
    def descriptor(self) -> ToolDescriptor:
        """The model-facing description of this tool."""
        schema = dict(self.parameters) if self.parameters else _empty_object_schema()
        schema.setdefault("type", "object")
        schema.setdefault("properties", {})
        schema.setdefault("required", [])
        return ToolDescriptor(name=self.name, description=self.description, input_schema=schema)
