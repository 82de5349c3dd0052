"""Result model of an agent run."""

from typing import List

from pydantic import BaseModel, Field

from ..base import Usage
from ..messages import Message


class AgentRunResult(BaseModel):
    """Outcome of one complete agent run.

    Attributes:
        final_text: Text of the last model response.
        iterations_used: Number of model calls made during the run.
        history: Full conversation of the run, starting with the user message.
        usage: Token usage summed over all model calls.
        stopped_by_limit: True if the run ended because the iteration cap was reached.
    """

    final_text: str
    iterations_used: int
    history: List[Message] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)
    stopped_by_limit: bool = False
