from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

QUESTION_IDS = ("hook", "sensory", "challenge", "reflection", "resolution")
TITLE_MIN_WORDS = 3
TITLE_MAX_WORDS = 6

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_title(raw: str) -> str:
    words = _WHITESPACE_RE.sub(" ", raw).strip().strip('"').split()
    return " ".join(words[:TITLE_MAX_WORDS])


class NarrativeRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    track_id: str
    track_title: str
    answers: dict[str, str] = Field(default_factory=dict)

    def answer(self, question_id: str) -> str:
        value = (self.answers.get(question_id) or "").strip()
        return value or "Not provided"


class NarrativeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    logline: str
    themes: list[str]
    insight: str
    p1: str
    p2: str
    p3: str

    @field_validator("title", mode="before")
    @classmethod
    def _normalize_title(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        title = normalize_title(value)
        if len(title.split()) < TITLE_MIN_WORDS:
            raise ValueError(f"title must have {TITLE_MIN_WORDS}-{TITLE_MAX_WORDS} words")
        return title

    @field_validator("logline", "insight", "p1", "p2", "p3")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be empty")
        return stripped

    @field_validator("themes")
    @classmethod
    def _themes_non_empty(cls, value: list[str]) -> list[str]:
        themes = [theme.strip() for theme in value]
        if not themes or any(not theme for theme in themes):
            raise ValueError("themes must be a non-empty list of non-empty strings")
        return themes


class ImageRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    logline: str
    track_id: str
    track_title: str
    themes: list[str] = Field(default_factory=list)
    p1: str
    p2: str | None = None
    p3: str | None = None

    def paragraphs(self) -> list[str]:
        return [part for part in (self.p1, self.p2, self.p3) if part]


class ImageResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    image_url: str

    @field_validator("image_url")
    @classmethod
    def _reference(cls, value: str) -> str:
        if not value.startswith(("data:", "http://", "https://")):
            raise ValueError("image_url must be a data URI or an http(s) URL")
        return value
