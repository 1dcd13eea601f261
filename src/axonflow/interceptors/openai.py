"""OpenAI chat-completions interceptor"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from axonflow.domain.models import TokenUsage
from axonflow.interceptors.base import SUMMARY_LENGTH, BaseInterceptor


@dataclass
class ChatMessage:
    role: str
    content: Optional[str] = None


@dataclass
class ChatCompletionRequest:
    model: str
    messages: List[ChatMessage] = field(default_factory=list)
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None

    def __post_init__(self):
        if not self.model:
            raise ValueError("model is required")

    def extract_prompt(self) -> str:
        """Join non-empty message contents with spaces"""
        return " ".join(m.content for m in self.messages if m.content)


@dataclass
class ChatCompletionChoice:
    index: int = 0
    message: Optional[ChatMessage] = None
    finish_reason: Optional[str] = None


@dataclass
class ChatCompletionUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class ChatCompletionResponse:
    id: Optional[str] = None
    model: Optional[str] = None
    choices: List[ChatCompletionChoice] = field(default_factory=list)
    usage: Optional[ChatCompletionUsage] = None

    @property
    def content(self) -> str:
        """Content of the first choice (empty if none)"""
        if not self.choices or self.choices[0].message is None:
            return ""
        return self.choices[0].message.content or ""

    @property
    def summary(self) -> str:
        return self.content[:SUMMARY_LENGTH]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatCompletionResponse":
        choices = [
            ChatCompletionChoice(
                index=c.get("index", 0),
                message=ChatMessage(role=c["message"].get("role", "assistant"), content=c["message"].get("content"))
                if c.get("message")
                else None,
                finish_reason=c.get("finish_reason"),
            )
            for c in data.get("choices") or []
        ]
        usage = data.get("usage")
        return cls(
            id=data.get("id"),
            model=data.get("model"),
            choices=choices,
            usage=ChatCompletionUsage(
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
            )
            if usage
            else None,
        )


class OpenAIInterceptor(BaseInterceptor[ChatCompletionRequest, ChatCompletionResponse]):
    provider = "openai"

    def extract_prompt(self, request: ChatCompletionRequest) -> str:
        return request.extract_prompt()

    def model_of(self, request: ChatCompletionRequest) -> str:
        return request.model

    def build_context(self, request: ChatCompletionRequest) -> Dict[str, Any]:
        context = super().build_context(request)
        if request.temperature is not None:
            context["temperature"] = request.temperature
        if request.max_tokens is not None:
            context["max_tokens"] = request.max_tokens
        return context

    def token_usage(self, response: ChatCompletionResponse) -> TokenUsage:
        if response.usage is None:
            return TokenUsage.of(0, 0)
        return TokenUsage.of(response.usage.prompt_tokens, response.usage.completion_tokens)

    def summarize(self, response: ChatCompletionResponse) -> str:
        return response.summary
