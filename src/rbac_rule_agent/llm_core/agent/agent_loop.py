"""The agent loop: alternate model calls and tool execution until the model answers."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple, TypeVar

from ..base import ChatRequest, ChatResponse, ChatTransport, Usage
from ..exceptions import AgentCancelledError, IterationLimitExceeded, LLMToolError, UnknownToolError
from ..logger import get_logger
from ..messages import AssistantMessage, BaseMessage, ToolResultMessage, UserMessage
from ..tools import ToolCallRequest, ToolCallResult, ToolDescriptor, ToolRegistry
from .models import AgentRunResult

logger = get_logger(__name__)

T = TypeVar("T")


class AgentLoop:
    """Drives one conversation between the model and the registered tools.

    Each call to ``run`` owns its own history, so one loop instance can serve
    concurrent runs as long as its transport and registry can.

    When the iteration cap is reached while the model still asks for tools, the
    run ends with the last text the model produced and ``stopped_by_limit=True``.
    Pass ``raise_on_limit=True`` to get ``IterationLimitExceeded`` instead.
    """

    def __init__(
        self,
        transport: ChatTransport,
        registry: Optional[ToolRegistry] = None,
        *,
        max_iterations: int = 5,
        parallel_tool_calls: bool = True,
        raise_on_limit: bool = False,
    ) -> None:
        """Initialize the agent loop.

        Args:
            transport: Transport used for every model call.
            registry: Tools available to the model. None or an empty registry means plain chat.
            max_iterations: Maximum number of model calls per run.
            parallel_tool_calls: Run the tool calls of one turn concurrently. Results are
                appended in call order either way.
            raise_on_limit: Raise ``IterationLimitExceeded`` instead of returning partial text.
        """
        if max_iterations < 1:
            raise ValueError("max_iterations must be a positive integer.")

        self._transport = transport
        self._registry = registry
        self._max_iterations = max_iterations
        self._parallel_tool_calls = parallel_tool_calls
        self._raise_on_limit = raise_on_limit

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    @property
    def tool_descriptors(self) -> List[ToolDescriptor]:
        if self._registry is None:
            return []
        return self._registry.describe()

    async def run(
        self,
        user_input: str,
        system_prompt: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AgentRunResult:
        """Run the loop for a single user input.

        Args:
            user_input: The user's request.
            system_prompt: Optional system instruction sent with every model call.
            cancel_event: Optional signal; once set, the in-flight call is aborted.

        Returns:
            The final text together with the run's history and usage.

        Raises:
            TransportError: If a model call fails. The run is aborted.
            ProtocolError: If a model response is malformed. The run is aborted.
            IterationLimitExceeded: If the cap is reached and ``raise_on_limit`` is set.
            AgentCancelledError: If ``cancel_event`` is set during the run.
        """
        history: List[BaseMessage] = [UserMessage(content=user_input)]
        tools = self.tool_descriptors
        usage = Usage()
        model_calls = 0

        while True:
            request = ChatRequest(system_prompt=system_prompt, messages=history, tools=tools)
            logger.debug(f"Dispatch {model_calls + 1}: {len(history)} message(s), {len(tools)} tool(s).")

            response: ChatResponse = await self._cancellable(self._transport.send(request), cancel_event)
            model_calls += 1
            usage = usage + response.usage

            if not response.wants_tools:
                logger.debug("No tool calls found in response. Loop finished.")
                history.append(AssistantMessage(content=response.text))
                return self._result(response.text, model_calls, history, usage)

            logger.info(
                f"Loop {model_calls}/{self._max_iterations}: Processing {len(response.tool_calls)} tool call(s)."
            )
            history.append(AssistantMessage(content=response.text, tool_calls=response.tool_calls))

            results = await self._cancellable(self._execute_tool_calls(response.tool_calls), cancel_event)
            history.extend(
                ToolResultMessage(tool_call_id=r.call_id, name=r.name, content=r.content, is_error=r.is_error)
                for r in results
            )

            if model_calls >= self._max_iterations:
                logger.warning(f"Max tool loops ({self._max_iterations}) reached. Stopping execution.")
                if self._raise_on_limit:
                    raise IterationLimitExceeded(response, self._max_iterations)
                return self._result(response.text, model_calls, history, usage, stopped_by_limit=True)

    async def _execute_tool_calls(self, tool_calls: Sequence[ToolCallRequest]) -> List[ToolCallResult]:
        if self._parallel_tool_calls and len(tool_calls) > 1:
            # gather preserves argument order in its result
            return list(await asyncio.gather(*(self._handle_tool_call(tc) for tc in tool_calls)))
        return [await self._handle_tool_call(tc) for tc in tool_calls]

    async def _handle_tool_call(self, tool_call: ToolCallRequest) -> ToolCallResult:
        """Execute one tool call, turning tool failures into an error payload for the model."""
        logger.debug(f"Handling tool call: {tool_call.name} (ID: {tool_call.id})")
        try:
            if self._registry is None:
                raise UnknownToolError(tool_call.name)
            content = await self._registry.execute(tool_call.name, tool_call.arguments)
        except LLMToolError as exc:
            msg = str(exc)
            logger.warning(f"Tool call '{tool_call.name}' ({tool_call.id}) failed: {msg}")
            return ToolCallResult(
                call_id=tool_call.id,
                name=tool_call.name,
                content=json.dumps({"error": msg}),
                is_error=True,
                error=msg,
            )

        return ToolCallResult(call_id=tool_call.id, name=tool_call.name, content=content)

    @staticmethod
    async def _cancellable(awaitable: Awaitable[T], cancel_event: Optional[asyncio.Event]) -> T:
        """Await ``awaitable`` unless ``cancel_event`` fires first.

        Raises:
            AgentCancelledError: If the event is (or becomes) set before the awaitable finishes.
        """
        if cancel_event is None:
            return await awaitable

        task = asyncio.ensure_future(awaitable)
        if cancel_event.is_set():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            raise AgentCancelledError("Agent run cancelled.")

        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            waiter.cancel()
            raise

        if task.done():
            waiter.cancel()
            return task.result()

        logger.info("Cancellation requested. Aborting in-flight call.")
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise AgentCancelledError("Agent run cancelled.")

    @staticmethod
    def _result(
        text: str,
        model_calls: int,
        history: List[BaseMessage],
        usage: Usage,
        stopped_by_limit: bool = False,
    ) -> AgentRunResult:
        return AgentRunResult(
            final_text=text,
            iterations_used=model_calls,
            history=history,
            usage=usage,
            stopped_by_limit=stopped_by_limit,
        )


async def run_agent(
    transport: ChatTransport,
    user_input: str,
    system_prompt: Optional[str] = None,
    tools: Sequence[Tuple[ToolDescriptor, Callable[..., Any]]] = (),
    max_iterations: int = 5,
    cancel_event: Optional[asyncio.Event] = None,
) -> AgentRunResult:
    """Run a single agent conversation.

    Args:
        transport: Transport used for every model call.
        user_input: The user's request.
        system_prompt: Optional system instruction.
        tools: ``(descriptor, executor)`` pairs available to the model.
        max_iterations: Maximum number of model calls.
        cancel_event: Optional cancellation signal.

    Returns:
        The result of the run.
    """
    registry = ToolRegistry.from_pairs(tools) if tools else None
    loop = AgentLoop(transport, registry, max_iterations=max_iterations)
    return await loop.run(user_input, system_prompt=system_prompt, cancel_event=cancel_event)
