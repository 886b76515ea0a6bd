from __future__ import annotations

from typing import Any

from ..errors import BackendError
from ..parsing import parse_narrative
from ..prompts import HEALTH_PROMPT, narrative_prompt, poster_prompt
from ..schemas import ImageRequest, ImageResult, NarrativeRequest, NarrativeResult
from .base import HTTPGenerationBackend


class GeminiBackend(HTTPGenerationBackend):
    name = "gemini"
    default_base_url = "https://generativelanguage.googleapis.com"
    text_model = "gemini-2.5-flash"
    image_model = "gemini-2.5-flash-image"

    def _generate(self, model: str, prompt: str, retries: int | None = None) -> list[dict[str, Any]]:
        data = self._post_json(
            f"/v1beta/models/{model}:generateContent",
            {"contents": [{"role": "user", "parts": [{"text": prompt}]}]},
            params={"key": self.api_key},
            retries=retries,
        )
        candidates = data.get("candidates") or []
        if not candidates or not isinstance(candidates[0], dict):
            return []
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return [part for part in parts if isinstance(part, dict)]

    def generate_narrative(self, request: NarrativeRequest) -> NarrativeResult:
        parts = self._generate(self.text_model, narrative_prompt(request))
        text = "".join(str(part.get("text") or "") for part in parts)
        if not text:
            raise BackendError(self.name, "empty response")
        return parse_narrative(self.name, text)

    def generate_image(self, request: ImageRequest) -> ImageResult | None:
        parts = self._generate(self.image_model, poster_prompt(request))
        for part in parts:
            inline = part.get("inlineData") or {}
            if inline.get("data") and inline.get("mimeType"):
                return ImageResult(image_url=f"data:{inline['mimeType']};base64,{inline['data']}")
        self.logger.warning("image_missing", extra={"extra_fields": {"backend": self.name, "parts": len(parts)}})
        return None

    def probe(self) -> None:
        self._generate(self.text_model, HEALTH_PROMPT, retries=0)
