"""
OpenAI-compatible completion backend.

Sends the flat prompt as a single user message to a `/chat/completions`
endpoint with streaming enabled and forwards each content delta to the
caller's callback. No timeout is applied to the read side by default: a
completion may legitimately take minutes.
"""
import json
from typing import Any, Dict, Optional

import httpx

from relay_service.core.errors import BackendError
from relay_service.core.interfaces import CompletionBackend, FragmentCallback
from relay_service.core.logging import logger


class OpenAICompatBackend(CompletionBackend):
    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        connect_timeout: float = 10.0,
        read_timeout: Optional[float] = None,
        model_override: str = "",
        extra_body: Optional[Dict[str, Any]] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            base_url: API root, e.g. http://127.0.0.1:8000/v1
            api_key: Bearer token, sent only when non-empty
            connect_timeout: Socket connect timeout in seconds
            read_timeout: Socket read timeout in seconds, None for no limit
            model_override: Send this model name instead of the client's
            extra_body: Extra fields merged into every request body
            client: Preconfigured httpx.Client (tests pass a MockTransport here)
        """
        if not base_url:
            raise ValueError("base_url cannot be empty")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model_override = model_override
        self.extra_body = dict(extra_body or {})
        self.timeout = httpx.Timeout(connect=connect_timeout, read=read_timeout, write=10.0, pool=10.0)
        self.client = client or httpx.Client(timeout=self.timeout)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "text/event-stream"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _body(self, model_name: str, prompt: str) -> Dict[str, Any]:
        return {
            **self.extra_body,
            "model": self.model_override or model_name,
            "messages": [{"role": "user", "content": prompt}],
            "stream": True,
        }

    @staticmethod
    def _delta_text(payload: str) -> str:
        """Content delta of one streamed chunk; empty for chunks without text."""
        try:
            obj = json.loads(payload)
        except json.JSONDecodeError:
            logger.warning(f"Backend: skipping undecodable chunk: {payload[:100]!r}")
            return ""
        if not isinstance(obj, dict):
            return ""
        if obj.get("error"):
            raise BackendError(f"backend reported an error: {obj['error']}")
        choices = obj.get("choices") or []
        if not choices:
            return ""
        delta = choices[0].get("delta") or {}
        return delta.get("content") or ""

    def complete(self, model_name: str, prompt: str, on_fragment: FragmentCallback) -> str:
        url = f"{self.base_url}/chat/completions"
        parts = []
        try:
            with self.client.stream("POST", url, json=self._body(model_name, prompt), headers=self._headers()) as resp:
                if resp.status_code >= 400:
                    resp.read()
                    raise BackendError(f"backend returned HTTP {resp.status_code}: {resp.text[:500]}")
                for line in resp.iter_lines():
                    if not line.startswith("data:"):
                        continue
                    payload = line[len("data:") :].strip()
                    if payload == "[DONE]":
                        break
                    text = self._delta_text(payload)
                    if text:
                        parts.append(text)
                        on_fragment(text)
        except httpx.HTTPError as e:
            raise BackendError(f"backend request failed: {e}") from e
        return "".join(parts)

    def ready(self) -> bool:
        try:
            resp = self.client.get(f"{self.base_url}/models", headers=self._headers(), timeout=2.0)
        except httpx.HTTPError as e:
            logger.info(f"Backend readiness probe failed: {e}")
            return False
        return resp.status_code < 400
