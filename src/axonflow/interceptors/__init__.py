"""LLM provider interceptors"""

from axonflow.interceptors.anthropic import AnthropicInterceptor, AnthropicMessage, AnthropicRequest, AnthropicResponse
from axonflow.interceptors.base import BaseInterceptor
from axonflow.interceptors.openai import ChatCompletionRequest, ChatCompletionResponse, ChatMessage, OpenAIInterceptor

__all__ = [
    "AnthropicInterceptor",
    "AnthropicMessage",
    "AnthropicRequest",
    "AnthropicResponse",
    "BaseInterceptor",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "OpenAIInterceptor",
]
