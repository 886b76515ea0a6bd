from __future__ import annotations

from .schemas import ImageRequest, NarrativeRequest

_TRACK_CONTEXT = {
    "origin": (
        "Origin Story - A personal tale of transformation. Write about a defining moment that shaped "
        "someone's identity. Focus on growth, courage, and finding one's authentic voice."
    ),
    "future": (
        "Future City (2036) - An optimistic vision of tomorrow. Write about a neighborhood transformed "
        "by hope and innovation. Focus on community triumph and positive change."
    ),
    "legend": (
        "Neighborhood Legend - Urban mythology and street magic. Write about something strange and "
        "wonderful happening on the block. Think magical realism."
    ),
}
_DEFAULT_TRACK_CONTEXT = "A story of community and personal transformation with cinematic flair."

_POSTER_STYLES = {
    "origin": {
        "visual": "intimate portrait style, single figure silhouette, dramatic shadows",
        "mood": "introspective, transformative, deeply personal",
        "colors": "warm amber tones, deep shadows, golden hour lighting",
    },
    "future": {
        "visual": "futuristic cityscape, neon-lit streets, holographic elements",
        "mood": "hopeful, innovative, community-focused",
        "colors": "cyan and magenta neon, deep blues, electric highlights",
    },
    "legend": {
        "visual": "urban street scene, magical elements emerging, neighborhood setting",
        "mood": "mysterious, whimsical, folkloric magic",
        "colors": "twilight purples, street lamp gold, ethereal glows",
    },
}

_ANSWER_LABELS = (
    ("hook", "Setting/Hook"),
    ("sensory", "Sensory Detail"),
    ("challenge", "Challenge/Drama"),
    ("reflection", "Hero/Reflection"),
    ("resolution", "Resolution/New Reality"),
)

_STORY_JSON_SHAPE = """{
  "title": "A Creative Movie-Style Title",
  "logline": "A compelling one-sentence hook.",
  "themes": ["Theme1", "Theme2", "Theme3"],
  "insight": "A brief reflection on what makes this story meaningful.",
  "p1": "The atmospheric opening paragraph.",
  "p2": "The dramatic middle paragraph.",
  "p3": "The transformative closing paragraph."
}"""

HEALTH_PROMPT = "Say 'health check'"


def track_context(track_id: str) -> str:
    return _TRACK_CONTEXT.get(track_id, _DEFAULT_TRACK_CONTEXT)


def narrative_prompt(request: NarrativeRequest) -> str:
    answers = "\n".join(f"- {label}: {request.answer(key)}" for key, label in _ANSWER_LABELS)
    return (
        "You are a storyteller for Story Arcade. Turn the player's answers into a new cinematic "
        "micro-narrative in third person. Do not quote the answers verbatim.\n\n"
        f"TRACK: {request.track_title}\n"
        f"NARRATIVE STYLE: {track_context(request.track_id)}\n\n"
        f"PLAYER ANSWERS:\n{answers}\n\n"
        "The title must be 3-6 words in Title Case. Write three paragraphs of 2-3 sentences each: "
        "p1 sets the scene, p2 is the challenge, p3 is the transformation.\n\n"
        f"Respond with ONLY valid JSON in this exact format:\n{_STORY_JSON_SHAPE}"
    )


def poster_prompt(request: ImageRequest) -> str:
    style = _POSTER_STYLES.get(request.track_id, _POSTER_STYLES["origin"])
    excerpt = " ".join(request.paragraphs())[:300]
    themes = ", ".join(request.themes[:3])
    return (
        "Create a cinematic movie poster for this story.\n\n"
        f'STORY: "{request.title}"\n"{request.logline}"\n\n'
        f"NARRATIVE ESSENCE:\n{excerpt}\n\n"
        f"KEY THEMES: {themes}\n\n"
        f"VISUAL DIRECTION:\n- Style: {style['visual']}\n- Mood: {style['mood']}\n- Color palette: {style['colors']}\n\n"
        "Portrait orientation, dramatic lighting, no text or words in the image."
    )
