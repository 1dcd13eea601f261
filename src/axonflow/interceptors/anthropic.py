"""Anthropic messages interceptor"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from axonflow.domain.models import TokenUsage
from axonflow.interceptors.base import SUMMARY_LENGTH, BaseInterceptor


@dataclass
class AnthropicContentBlock:
    type: str = "text"
    text: Optional[str] = None


@dataclass
class AnthropicMessage:
    role: str
    content: List[AnthropicContentBlock] = field(default_factory=list)

    @classmethod
    def text(cls, role: str, text: str) -> "AnthropicMessage":
        return cls(role=role, content=[AnthropicContentBlock(text=text)])


@dataclass
class AnthropicRequest:
    model: str
    max_tokens: int
    messages: List[AnthropicMessage] = field(default_factory=list)
    system: Optional[str] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None

    def __post_init__(self):
        if not self.model:
            raise ValueError("model is required")
        if self.max_tokens < 1:
            raise ValueError("max_tokens must be positive")

    def extract_prompt(self) -> str:
        """System prompt followed by all text blocks, space separated"""
        parts = [self.system] if self.system else []
        for message in self.messages:
            parts.extend(b.text for b in message.content if b.type == "text" and b.text)
        return " ".join(parts)


@dataclass
class AnthropicUsage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class AnthropicResponse:
    id: Optional[str] = None
    model: Optional[str] = None
    role: str = "assistant"
    content: List[AnthropicContentBlock] = field(default_factory=list)
    stop_reason: Optional[str] = None
    usage: Optional[AnthropicUsage] = None

    @property
    def text(self) -> str:
        return "".join(b.text or "" for b in self.content if b.type == "text")

    @property
    def summary(self) -> str:
        return self.text[:SUMMARY_LENGTH]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnthropicResponse":
        usage = data.get("usage")
        return cls(
            id=data.get("id"),
            model=data.get("model"),
            role=data.get("role", "assistant"),
            content=[AnthropicContentBlock(type=b.get("type", "text"), text=b.get("text")) for b in data.get("content") or []],
            stop_reason=data.get("stop_reason"),
            usage=AnthropicUsage(input_tokens=usage.get("input_tokens", 0), output_tokens=usage.get("output_tokens", 0))
            if usage
            else None,
        )


class AnthropicInterceptor(BaseInterceptor[AnthropicRequest, AnthropicResponse]):
    provider = "anthropic"

    def extract_prompt(self, request: AnthropicRequest) -> str:
        return request.extract_prompt()

    def model_of(self, request: AnthropicRequest) -> str:
        return request.model

    def build_context(self, request: AnthropicRequest) -> Dict[str, Any]:
        context = super().build_context(request)
        if request.temperature is not None:
            context["temperature"] = request.temperature
        context["max_tokens"] = request.max_tokens
        return context

    def token_usage(self, response: AnthropicResponse) -> TokenUsage:
        if response.usage is None:
            return TokenUsage.of(0, 0)
        return TokenUsage.of(response.usage.input_tokens, response.usage.output_tokens)

    def summarize(self, response: AnthropicResponse) -> str:
        return response.summary
