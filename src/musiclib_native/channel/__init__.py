"""
Summary: Request/response transport and the dispatcher built on it.
Why: Expose the native components to the application through named channels.
"""

from .bridge import NATIVE_METADATA_CHANNEL, PLAYBACK_CHANNEL, READ_METHOD, NativeBridge
from .messenger import (
    NOT_IMPLEMENTED,
    BinaryMessenger,
    ChannelError,
    MethodCall,
    MethodChannel,
    MethodResult,
    OnceGuard,
)

__all__ = [
    "NATIVE_METADATA_CHANNEL",
    "NOT_IMPLEMENTED",
    "PLAYBACK_CHANNEL",
    "READ_METHOD",
    "BinaryMessenger",
    "ChannelError",
    "MethodCall",
    "MethodChannel",
    "MethodResult",
    "NativeBridge",
    "OnceGuard",
]
