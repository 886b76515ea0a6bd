from __future__ import annotations

import logging
from typing import Any

from storyarcade.core.http import StoryArcadeHTTPError, request_with_retry

from ..contract import GenerationBackend
from ..errors import BackendConfigError, BackendError
from ..settings import BackendCredentials


class HTTPGenerationBackend(GenerationBackend):
    """Shared transport for backends that speak JSON over HTTPS."""

    default_base_url: str = ""

    def __init__(self, credentials: BackendCredentials, timeout_s: float = 45.0) -> None:
        if not credentials.api_key:
            raise BackendConfigError(self.name, "api_key")
        self.api_key = credentials.api_key
        self.base_url = (credentials.base_url or self.default_base_url).rstrip("/")
        self.timeout_s = timeout_s
        self.logger = logging.getLogger(f"storyarcade.generation.backends.{self.name}")

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    def _post_json(
        self,
        path: str,
        payload: dict[str, Any],
        *,
        params: dict[str, str] | None = None,
        retries: int | None = None,
    ) -> dict[str, Any]:
        try:
            response = request_with_retry(
                "POST",
                f"{self.base_url}{path}",
                headers=self._headers(),
                json=payload,
                params=params,
                timeout_override=self.timeout_s,
                retries=retries,
                redact_url=True,
            )
        except StoryArcadeHTTPError as exc:
            raise BackendError(self.name, str(exc)) from exc
        try:
            data = response.json()
        except ValueError as exc:
            raise BackendError(self.name, "response body is not JSON") from exc
        if not isinstance(data, dict):
            raise BackendError(self.name, "response body is not a JSON object")
        return data
