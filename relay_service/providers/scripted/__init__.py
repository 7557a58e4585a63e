from relay_service.providers.scripted.provider import ScriptedBackend

__all__ = ["ScriptedBackend"]
