"""Chat completion models."""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """Role of a message's author."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """A single message in a chat conversation."""

    role: MessageRole = Field(description="The role of the message's author")
    content: str = Field(description="The contents of the message")

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.ASSISTANT, content=content)


class ChatCompletionRequest(BaseModel):
    """Request to create a chat completion.

    Optional fields left as ``None`` are not sent.
    """

    model: str = Field(description="ID of the model to use, e.g. gpt-4o")
    messages: List[ChatMessage] = Field(
        description="A list of messages comprising the conversation so far"
    )
    temperature: Optional[float] = Field(
        None, ge=0.0, le=2.0, description="Sampling temperature between 0 and 2"
    )
    max_tokens: Optional[int] = Field(
        None, gt=0, description="Maximum number of tokens to generate"
    )
    top_p: Optional[float] = Field(
        None, ge=0.0, le=1.0, description="Nucleus sampling probability mass"
    )
    frequency_penalty: Optional[float] = Field(
        None, ge=-2.0, le=2.0, description="Penalty for frequent tokens"
    )
    presence_penalty: Optional[float] = Field(
        None, ge=-2.0, le=2.0, description="Penalty for tokens already present"
    )
    stop: Optional[List[str]] = Field(
        None, description="Sequences where the API will stop generating"
    )
    user: Optional[str] = Field(
        None, description="Unique identifier representing the end-user"
    )
    provider: Optional[str] = Field(
        None, description="Hint to the router about which provider to use"
    )
    stream: Optional[bool] = Field(
        None, description="If set, partial message deltas are sent as SSE events"
    )
    n: Optional[int] = Field(
        None, gt=0, description="How many completion choices to generate"
    )
    response_format: Optional[Dict[str, Any]] = Field(
        None, description='Output format, e.g. {"type": "json_object"}'
    )
    tools: Optional[List[Dict[str, Any]]] = Field(
        None, description="Tools the model may call"
    )
    tool_choice: Optional[Any] = Field(
        None, description="Controls which (if any) tool is called"
    )

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for the wire, dropping unset fields."""
        return self.model_dump(mode="json", exclude_none=True)


class Usage(BaseModel):
    """Token usage for a completion."""

    prompt_tokens: int = Field(description="Number of tokens in the prompt")
    completion_tokens: int = Field(description="Number of tokens in the completion")
    total_tokens: int = Field(description="Total number of tokens used")


class ChatChoice(BaseModel):
    """A completion choice."""

    index: int = Field(description="Index of the choice in the list")
    message: ChatMessage = Field(description="The generated message")
    finish_reason: Optional[str] = Field(
        None, description="Why the model stopped generating tokens"
    )


class ChatCompletionResponse(BaseModel):
    """Response for a non-streaming chat completion."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Unique identifier for the completion")
    object: str = Field("chat.completion", description="Object type")
    created: int = Field(description="Unix timestamp of creation")
    model: str = Field(description="Model used for the completion")
    choices: List[ChatChoice] = Field(description="List of completion choices")
    usage: Optional[Usage] = Field(None, description="Token usage statistics")


class ToolCallFunction(BaseModel):
    """Function part of a streamed tool call."""

    name: Optional[str] = None
    arguments: Optional[str] = None


class ToolCall(BaseModel):
    """Tool call fragment in a streamed delta."""

    index: int
    id: Optional[str] = None
    type: Optional[str] = None
    function: Optional[ToolCallFunction] = None


class ChatCompletionDelta(BaseModel):
    """Incremental message content."""

    role: Optional[str] = Field(None, description="Present in the first chunk only")
    content: Optional[str] = Field(None, description="New content for this chunk")
    tool_calls: Optional[List[ToolCall]] = None


class ChatCompletionChunkChoice(BaseModel):
    """A choice within a streamed chunk."""

    index: int
    delta: ChatCompletionDelta
    finish_reason: Optional[str] = None


class ChatCompletionChunk(BaseModel):
    """One event of a streaming chat completion."""

    model_config = ConfigDict(extra="allow")

    id: str
    object: str = "chat.completion.chunk"
    created: int
    model: str
    choices: List[ChatCompletionChunkChoice] = Field(default_factory=list)
    usage: Optional[Usage] = Field(None, description="Present in the final chunk only")

    @property
    def content(self) -> str:
        """Concatenated delta content of all choices."""
        return "".join(choice.delta.content or "" for choice in self.choices)
