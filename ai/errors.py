"""
Proxy Errors
============

Every failure inside the proxy is a ProviderError tagged with an ErrorKind.
Route handlers turn it into the `{error, kind}` envelope with its status code.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from ai.services.model_discovery import ModelListing


class ErrorKind(str, Enum):
    """Failure categories carried across the HTTP boundary"""
    REQUEST_VALIDATION = "request_validation"
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    UPSTREAM_PROTOCOL = "upstream_protocol"
    UPSTREAM_APPLICATION = "upstream_application"
    EMPTY_CONTENT = "empty_content"
    DISCOVERY_EXHAUSTED = "discovery_exhausted"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


class ProviderError(Exception):
    """Normalized failure raised by provider adapters"""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: int = 502,
        provider: Optional[str] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.provider = provider
        self.body = body

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "kind": self.kind.value}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind.value!r}, "
            f"status_code={self.status_code}, message={self.message!r})"
        )


class DiscoveryExhaustedError(ProviderError):
    """No listed Gemini model supports content generation in either API version"""

    def __init__(
        self,
        message: str,
        v1: Optional["ModelListing"] = None,
        v1beta: Optional["ModelListing"] = None,
    ):
        super().__init__(
            ErrorKind.DISCOVERY_EXHAUSTED,
            message,
            status_code=502,
            provider="gemini",
        )
        self.v1 = v1
        self.v1beta = v1beta
