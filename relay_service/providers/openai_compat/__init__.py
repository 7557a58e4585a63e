from relay_service.providers.openai_compat.provider import OpenAICompatBackend

__all__ = ["OpenAICompatBackend"]
