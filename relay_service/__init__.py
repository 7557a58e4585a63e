"""Relay: a streaming chat-protocol adapter for flat-prompt completion backends."""

__version__ = "0.1.0"
