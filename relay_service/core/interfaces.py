from abc import ABC, abstractmethod
from typing import Callable, List

from relay_service.core.types import ToolInvocation

FragmentCallback = Callable[[str], None]


class CompletionBackend(ABC):
    @abstractmethod
    def complete(self, model_name: str, prompt: str, on_fragment: FragmentCallback) -> str:
        """Run one completion for a flat prompt and return the full answer.

        `on_fragment` is called with each partial piece of text as it arrives,
        any number of times (including zero) before returning. Raises
        BackendError when no answer could be produced.
        """
        ...

    def ready(self) -> bool:
        """Whether the backend believes it can serve a request right now."""
        return True


class ToolExtractor(ABC):
    @abstractmethod
    def extract(self, answer: str) -> List[ToolInvocation]:
        """Return the tool invocations embedded in a finished answer, in order"""
        ...


class EventSink(ABC):
    @abstractmethod
    def write(self, data: bytes) -> None:
        """Append bytes to the peer stream. Raises StreamWriteError on failure."""
        ...

    def flush(self) -> None:
        ...
