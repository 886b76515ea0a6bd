from __future__ import annotations

from ..errors import BackendError
from ..parsing import parse_narrative
from ..prompts import HEALTH_PROMPT, narrative_prompt
from ..schemas import ImageRequest, ImageResult, NarrativeRequest, NarrativeResult
from .base import HTTPGenerationBackend

_API_VERSION = "2023-06-01"


class AnthropicBackend(HTTPGenerationBackend):
    name = "anthropic"
    default_base_url = "https://api.anthropic.com"
    model = "claude-sonnet-4-5"
    probe_model = "claude-3-haiku-20240307"

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": _API_VERSION,
        }

    def _message(self, model: str, prompt: str, max_tokens: int, retries: int | None = None) -> str:
        data = self._post_json(
            "/v1/messages",
            {"model": model, "max_tokens": max_tokens, "messages": [{"role": "user", "content": prompt}]},
            retries=retries,
        )
        blocks = data.get("content") or []
        first = blocks[0] if blocks and isinstance(blocks[0], dict) else {}
        if first.get("type") != "text":
            raise BackendError(self.name, "unexpected response content type")
        return str(first.get("text") or "")

    def generate_narrative(self, request: NarrativeRequest) -> NarrativeResult:
        text = self._message(self.model, narrative_prompt(request), max_tokens=1024)
        return parse_narrative(self.name, text)

    def generate_image(self, request: ImageRequest) -> ImageResult | None:
        return None

    def probe(self) -> None:
        self._message(self.probe_model, HEALTH_PROMPT, max_tokens=10, retries=0)
