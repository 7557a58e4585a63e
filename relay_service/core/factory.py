from importlib import import_module
from typing import Any, Dict, Optional, cast
import inspect

from relay_service.core.config import load_settings
from relay_service.core.interfaces import CompletionBackend, ToolExtractor
from relay_service.protocol.orchestration.emitter import SseEncoder
from relay_service.protocol.prompts import PromptComposer
from relay_service.protocol.service.adapter_service import AdapterService


def load(dotted: str, **kwargs: Any) -> Any:
    """Import a dotted path and instantiate the class if callable.
    Filters kwargs to match the constructor signature (unless **kwargs is accepted)."""
    if not dotted or "." not in dotted:
        raise ValueError(f"not a dotted import path: {dotted!r}")
    module, cls = dotted.rsplit(".", 1)
    mod = import_module(module)
    obj = getattr(mod, cls)

    if isinstance(obj, type):
        sig = inspect.signature(obj.__init__)
        params = list(sig.parameters.values())
        accepts_kwargs = any(p.kind == p.VAR_KEYWORD for p in params)
        if accepts_kwargs:
            return obj(**kwargs)
        allowed = {p.name for p in params if p.kind in (p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY) and p.name != "self"}
        filtered = {k: v for k, v in kwargs.items() if k in allowed}
        return obj(**filtered)

    return obj


class ServiceFactory:
    """Builds the adapter service and its collaborators from settings."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else load_settings()
        self._backend: CompletionBackend | None = None
        self._extractor: ToolExtractor | None = None

    def _provider_cfg(self, name: str) -> Dict[str, Any]:
        return self.config.get("providers", {}).get(name, {}) or {}

    def get_backend(self) -> CompletionBackend:
        if not self._backend:
            backend_cfg = self._provider_cfg("backend")
            impl = backend_cfg.get("impl")
            args = backend_cfg.get("args", {}) or {}
            self._backend = cast(CompletionBackend, load(impl, **args))
        return self._backend

    def get_extractor(self) -> ToolExtractor:
        if not self._extractor:
            extractor_cfg = self._provider_cfg("extractor")
            impl = extractor_cfg.get("impl", "relay_service.protocol.parsers.use_tags.UseTagExtractor")
            args = extractor_cfg.get("args", {}) or {}
            self._extractor = cast(ToolExtractor, load(impl, **args))
        return self._extractor

    def get_composer(self) -> PromptComposer:
        disabled = self.config.get("tools", {}).get("disabled", {}) or {}
        contract = self.config.get("prompt", {}).get("tool_contract") or None
        return PromptComposer(disabled_tools=disabled, tool_contract=contract)

    def get_encoder(self) -> SseEncoder:
        usage = self.config.get("stream", {}).get("usage") or None
        return SseEncoder(usage=usage)

    def get_adapter_service(self) -> AdapterService:
        return AdapterService(
            backend=self.get_backend(),
            extractor=self.get_extractor(),
            composer=self.get_composer(),
            encoder=self.get_encoder(),
        )
