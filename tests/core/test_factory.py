import pytest

from relay_service.core.factory import ServiceFactory, load
from relay_service.protocol.parsers.use_tags import UseTagExtractor
from relay_service.protocol.schemas import ChatRequest
from relay_service.providers.scripted.provider import ScriptedBackend

SCRIPTED = "relay_service.providers.scripted.provider.ScriptedBackend"


def test_load_filters_unknown_kwargs():
    backend = load(SCRIPTED, fragments=["a"], not_a_param=1)
    assert isinstance(backend, ScriptedBackend)
    assert backend.fragments == ["a"]


def test_load_returns_non_class_attribute():
    assert load("relay_service.protocol.prompts.render_section").__name__ == "render_section"


def test_load_rejects_bare_name():
    with pytest.raises(ValueError):
        load("ScriptedBackend")


@pytest.fixture
def config():
    return {
        "providers": {
            "backend": {"impl": SCRIPTED, "args": {"fragments": ["hi"]}},
        },
        "tools": {"disabled": {"Task": True}},
        "stream": {"usage": {"input_tokens": 1, "output_tokens": 2}},
    }


def test_factory_builds_configured_service(config):
    factory = ServiceFactory(config)
    svc = factory.get_adapter_service()
    assert isinstance(svc.backend, ScriptedBackend)
    assert svc.backend is factory.get_backend()
    assert isinstance(svc.extractor, UseTagExtractor)
    assert svc.encoder.usage == {"input_tokens": 1, "output_tokens": 2}


def test_factory_deny_list_reaches_composer(config):
    composer = ServiceFactory(config).get_composer()
    request = ChatRequest.model_validate({
        "model": "x",
        "messages": [],
        "tools": [{"name": "Task", "input_schema": {}}, {"name": "Read", "input_schema": {}}],
    })
    assert [t.name for t in composer.filter_tools(request.tools)] == ["Read"]


def test_factory_custom_contract(config):
    config["prompt"] = {"tool_contract": "Call one of:\n{tools}"}
    composer = ServiceFactory(config).get_composer()
    request = ChatRequest.model_validate({"model": "x", "messages": [], "tools": [{"name": "Read", "input_schema": {}}]})
    assert composer.compose(request).startswith("<tools>\n  Call one of:\n")
