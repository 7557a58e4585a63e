import pytest

from relay_service.core.errors import BackendError
from relay_service.providers.scripted.provider import ScriptedBackend


def test_replays_fragments():
    backend = ScriptedBackend(["a", "b"])
    seen = []
    assert backend.complete("m", "prompt", seen.append) == "ab"
    assert seen == ["a", "b"]
    assert backend.calls == [("m", "prompt")]


def test_answer_is_chunked():
    backend = ScriptedBackend(answer="abcdefg", chunk_size=3)
    seen = []
    backend.complete("m", "p", seen.append)
    assert seen == ["abc", "def", "g"]


def test_error_after_fragments():
    backend = ScriptedBackend(["a"], error="boom")
    seen = []
    with pytest.raises(BackendError, match="boom"):
        backend.complete("m", "p", seen.append)
    assert seen == ["a"]
