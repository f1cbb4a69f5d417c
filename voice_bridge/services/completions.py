"""OpenAI-compatible chat completions on top of Claude.

The voice provider's custom-LLM mode speaks the OpenAI chat completions
protocol. This module translates those requests into Anthropic messages and
translates the replies, streamed or not, back into OpenAI shapes.
"""

import json
import time
from collections.abc import AsyncIterator

from cuid2 import cuid_wrapper

from voice_bridge.clients.anthropic import AnthropicClient
from voice_bridge.models.llm import (
    BlockStart,
    BlockStop,
    LLMMessage,
    LLMResponse,
    MessageStop,
    StreamEvent,
    TextDelta,
    ToolArgumentsDelta,
)
from voice_bridge.models.openai import (
    AssistantMessage,
    ChatCompletion,
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatMessage,
    ChunkChoice,
    ChunkDelta,
    CompletionChoice,
    CompletionUsage,
    FunctionCall,
    ToolCall,
)
from voice_bridge.tools.registry import ToolsRegistry, get_tools_registry
from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)

cuid = cuid_wrapper()

VOICE_ASSISTANT_PREAMBLE = """You are a helpful voice assistant integrated with a visual interface.
You can change the color of a box on screen using the change_box_color tool.
Keep responses concise and conversational since they will be spoken aloud.
When the user asks to change the box color, use the tool and confirm briefly."""

# Claude rejects an empty conversation
EMPTY_CONVERSATION_PLACEHOLDER = "Hello"

SSE_DONE = "data: [DONE]\n\n"


def new_response_id() -> str:
    return f"chatcmpl-{cuid()}"


def compose_system_prompt(messages: list[ChatMessage]) -> str:
    """Preamble followed by every system message's content."""
    system = "".join(f"{message.text}\n" for message in messages if message.role == "system")
    return f"{VOICE_ASSISTANT_PREAMBLE}\n\n{system}".strip()


def convert_messages(messages: list[ChatMessage]) -> tuple[str, list[LLMMessage]]:
    """Translate OpenAI chat messages into a system prompt and Claude messages.

    User and assistant messages keep their order and role; anything else is
    dropped. An empty conversation becomes a single "Hello" from the user,
    which yields a greeting rather than an upstream rejection.
    """
    llm_messages = [
        LLMMessage(role=message.role, content=message.text)
        for message in messages
        if message.role in ("user", "assistant")
    ]

    if not llm_messages:
        logger.info("Request carried no user or assistant messages, substituting a greeting")
        llm_messages.append(LLMMessage(role="user", content=EMPTY_CONVERSATION_PLACEHOLDER))

    return compose_system_prompt(messages), llm_messages


def to_chat_completion(response: LLMResponse, response_id: str, model: str) -> ChatCompletion:
    """Translate a complete Claude reply into an OpenAI chat completion."""
    tool_calls = [
        ToolCall(
            index=index,
            id=block.id,
            function=FunctionCall(name=block.name, arguments=json.dumps(block.input)),
        )
        for index, block in enumerate(response.tool_uses)
    ]

    return ChatCompletion(
        id=response_id,
        created=int(time.time()),
        model=model,
        choices=[
            CompletionChoice(
                message=AssistantMessage(content=response.text, tool_calls=tool_calls or None),
                finish_reason="tool_calls" if response.stop_reason == "tool_use" else "stop",
            )
        ],
        usage=CompletionUsage(
            prompt_tokens=response.usage.input_tokens,
            completion_tokens=response.usage.output_tokens,
            total_tokens=response.usage.input_tokens + response.usage.output_tokens,
        ),
    )


class StreamTranslator:
    """Turns Claude stream events into OpenAI chunk frames for one response.

    Tool arguments arrive as partial JSON; they are buffered until the tool
    block closes and only then emitted, as a single tool call chunk.
    """

    def __init__(self, response_id: str, model: str):
        self.response_id = response_id
        self.model = model
        self.finished = False
        self._tool_id: str | None = None
        self._tool_name: str | None = None
        self._tool_arguments = ""

    def _frame(self, delta: ChunkDelta | None = None, finish_reason: str | None = None) -> str:
        chunk = ChatCompletionChunk(
            id=self.response_id,
            created=int(time.time()),
            model=self.model,
            choices=[ChunkChoice(delta=delta or ChunkDelta(), finish_reason=finish_reason)],
        )
        return chunk.to_sse()

    def feed(self, event: StreamEvent) -> list[str]:
        """Consume one event and return the frames it produces."""
        if self.finished:
            return []

        if isinstance(event, TextDelta):
            return [self._frame(ChunkDelta(content=event.text))]

        if isinstance(event, BlockStart):
            if event.block_type == "tool_use":
                self._tool_id = event.id
                self._tool_name = event.name
                self._tool_arguments = ""
            return []

        if isinstance(event, ToolArgumentsDelta):
            self._tool_arguments += event.partial_json
            return []

        if isinstance(event, BlockStop):
            return self._close_tool_block()

        if isinstance(event, MessageStop):
            return self.finish()

        return []

    def _close_tool_block(self) -> list[str]:
        if not (self._tool_id and self._tool_name):
            return []

        tool_id, name, raw_arguments = self._tool_id, self._tool_name, self._tool_arguments
        self._tool_id = None
        self._tool_name = None
        self._tool_arguments = ""

        try:
            arguments = json.loads(raw_arguments or "{}")
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse arguments for tool {name} ({tool_id}): {e}; dropping tool call")
            return []

        tool_call = ToolCall(index=0, id=tool_id, function=FunctionCall(name=name, arguments=json.dumps(arguments)))
        return [self._frame(ChunkDelta(tool_calls=[tool_call]))]

    def finish(self) -> list[str]:
        """Terminal stop chunk plus the [DONE] marker, emitted once."""
        if self.finished:
            return []
        self.finished = True
        return [self._frame(finish_reason="stop"), SSE_DONE]


async def translate_stream(events: AsyncIterator[StreamEvent], response_id: str, model: str) -> AsyncIterator[str]:
    """Translate a stream of Claude events into SSE frames ending in [DONE].

    An upstream failure part way through is logged and the stream is still
    terminated normally, since response headers are already committed.
    """
    translator = StreamTranslator(response_id, model)
    try:
        async for event in events:
            for frame in translator.feed(event):
                yield frame
    except Exception as e:
        logger.error(f"Upstream stream for {response_id} failed mid-response: {e}", exc_info=True)
    for frame in translator.finish():
        yield frame


async def _prepend(first: StreamEvent | None, rest: AsyncIterator[StreamEvent]) -> AsyncIterator[StreamEvent]:
    if first is not None:
        yield first
    async for event in rest:
        yield event


class CompletionsService:
    """Runs OpenAI-style completion requests against Claude."""

    def __init__(self, client: AnthropicClient, tools_registry: ToolsRegistry | None = None):
        self.client = client
        self.tools_registry = tools_registry or get_tools_registry()

    @property
    def model(self) -> str:
        return self.client.config.model

    async def create_completion(self, request: ChatCompletionRequest) -> ChatCompletion:
        """Single-shot completion."""
        system_prompt, messages = convert_messages(request.messages)

        response = await self.client.create_message(
            messages=messages,
            system_prompt=system_prompt,
            tools=self.tools_registry.get_llm_tools(),
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )
        logger.info(
            f"Claude replied with stop reason {response.stop_reason}, "
            f"{len(response.tool_uses)} tool calls, {response.usage.total_tokens} tokens"
        )

        return to_chat_completion(response, new_response_id(), self.model)

    async def stream_completion(self, request: ChatCompletionRequest) -> AsyncIterator[str]:
        """Open the upstream stream and return the SSE frames to send.

        The first upstream event is awaited here, so a request Claude refuses
        fails before any response bytes are committed.
        """
        system_prompt, messages = convert_messages(request.messages)

        events = self.client.stream_message(
            messages=messages,
            system_prompt=system_prompt,
            tools=self.tools_registry.get_llm_tools(),
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )
        first_event = await anext(events, None)

        return translate_stream(_prepend(first_event, events), new_response_id(), self.model)
