"""Re-export the transport interface and the normalized request/response models used by all providers."""

from .base import ChatTransport
from .models import ChatRequest, ChatResponse, StopReason, Usage

__all__ = [
    "ChatTransport",
    "ChatRequest",
    "ChatResponse",
    "StopReason",
    "Usage",
]
