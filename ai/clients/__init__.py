"""
AI API Clients
==============

HTTP clients for the LLM providers and for the proxy itself:
- Groq client (chat completions)
- Gemini client (model discovery + generateContent)
- Assistant client (UI-side dispatcher calling the proxy routes)
"""

from .upstream import ChatResult
from .groq_client import GroqClient
from .gemini_client import GeminiClient
from .assistant_client import (
    AIReplyError,
    AssistantClient,
    AssistantReply,
    Provider,
)

__all__ = [
    "ChatResult",
    # Providers
    "GroqClient",
    "GeminiClient",
    # Dispatcher
    "AIReplyError",
    "AssistantClient",
    "AssistantReply",
    "Provider",
]
