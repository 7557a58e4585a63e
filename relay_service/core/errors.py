from __future__ import annotations


class RelayError(Exception):
    """Base error type for all relay failures."""


class MalformedRequestError(RelayError):
    """Request body does not parse as a chat request."""


class UnsupportedFeatureError(RelayError):
    """Request is well formed but asks for something the backend cannot honor."""

    def __init__(self, features: list[str] | None = None):
        self.features = list(features or [])
        super().__init__("request contains unsupported features")


class BackendError(RelayError):
    """The completion backend failed to produce an answer."""


class StreamWriteError(RelayError):
    """Writing an event to the peer failed; the rest of the stream is abandoned."""


class StreamStateError(RelayError):
    """Emitter methods were called out of order."""


__all__ = [
    "RelayError",
    "MalformedRequestError",
    "UnsupportedFeatureError",
    "BackendError",
    "StreamWriteError",
    "StreamStateError",
]
