from __future__ import annotations

from ..parsing import parse_narrative
from ..prompts import HEALTH_PROMPT, narrative_prompt
from ..schemas import ImageRequest, ImageResult, NarrativeRequest, NarrativeResult
from .base import HTTPGenerationBackend


class PerplexityBackend(HTTPGenerationBackend):
    name = "perplexity"
    default_base_url = "https://api.perplexity.ai"
    model = "sonar"

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}

    def _chat(self, prompt: str, max_tokens: int, retries: int | None = None) -> str:
        data = self._post_json(
            "/chat/completions",
            {"model": self.model, "messages": [{"role": "user", "content": prompt}], "max_tokens": max_tokens},
            retries=retries,
        )
        choices = data.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return str(message.get("content") or "")

    def generate_narrative(self, request: NarrativeRequest) -> NarrativeResult:
        return parse_narrative(self.name, self._chat(narrative_prompt(request), max_tokens=1024))

    def generate_image(self, request: ImageRequest) -> ImageResult | None:
        self.logger.info("image_unsupported", extra={"extra_fields": {"backend": self.name}})
        return None

    def probe(self) -> None:
        self._chat(HEALTH_PROMPT, max_tokens=10, retries=0)
