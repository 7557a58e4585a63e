import time
from typing import List, Optional

from relay_service.core.errors import BackendError
from relay_service.core.interfaces import CompletionBackend, FragmentCallback


class ScriptedBackend(CompletionBackend):
    """Replays a canned answer as fragments. For tests, demos and local wiring checks."""

    def __init__(
        self,
        fragments: Optional[List[str]] = None,
        answer: str = "",
        chunk_size: int = 16,
        delay: float = 0.0,
        error: Optional[str] = None,
    ):
        if fragments is None:
            fragments = [answer[i : i + chunk_size] for i in range(0, len(answer), chunk_size)]
        self.fragments = list(fragments)
        self.delay = delay
        self.error = error
        # (model_name, prompt) for every call, newest last
        self.calls: List[tuple] = []

    def complete(self, model_name: str, prompt: str, on_fragment: FragmentCallback) -> str:
        self.calls.append((model_name, prompt))
        for fragment in self.fragments:
            if self.delay:
                time.sleep(self.delay)
            on_fragment(fragment)
        if self.error:
            raise BackendError(self.error)
        return "".join(self.fragments)
