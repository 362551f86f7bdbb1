"""
Clip segment type, normalization of model output, and the fallback generator.
"""
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

FALLBACK_WINDOW_SECONDS = 30
FALLBACK_MAX_SEGMENTS = 3
FALLBACK_TOP_SCORE = 80
FALLBACK_SCORE_STEP = 5

DEFAULT_START = 0.0
DEFAULT_END = 30.0
DEFAULT_TITLE = "Viral Moment"
DEFAULT_SCORE = 80.0

# clips.title column width
TITLE_MAX_LENGTH = 255


@dataclass(frozen=True)
class Segment:
    """A proposed time range of the source, in seconds"""
    start_time: float
    end_time: float
    title: str
    hook: str
    description: str = ""
    virality_score: float = DEFAULT_SCORE
    transcript_snippet: str = ""

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


def _first(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def normalize_segment(raw: Dict[str, Any], duration: float) -> Optional[Segment]:
    """
    Turn one loosely-typed clip dict from the model into a Segment.

    Accepts camelCase and snake_case keys. Times are clamped to
    [0, duration]; returns None when nothing of the range survives.
    """
    if not isinstance(raw, dict):
        return None

    start = _number(_first(raw, "startTime", "start_time"), DEFAULT_START)
    end = _number(_first(raw, "endTime", "end_time"), DEFAULT_END)
    start = min(max(start, 0.0), duration)
    end = min(max(end, 0.0), duration)
    if start >= end:
        return None

    title = _text(raw.get("title"), DEFAULT_TITLE)[:TITLE_MAX_LENGTH].rstrip()
    score = _number(_first(raw, "viralityScore", "virality_score"), DEFAULT_SCORE)

    return Segment(
        start_time=start,
        end_time=end,
        title=title,
        hook=_text(raw.get("hook"), title),
        description=_text(raw.get("description")),
        virality_score=min(max(score, 0.0), 100.0),
        transcript_snippet=_text(_first(raw, "transcriptSnippet", "transcript_snippet")),
    )


def normalize_segments(raw_clips: Iterable[Any], duration: float) -> List[Segment]:
    """Normalize every clip the model returned, keeping its order and dropping unusable ones."""
    segments = []
    for raw in raw_clips:
        segment = normalize_segment(raw, duration)
        if segment is not None:
            segments.append(segment)
    return segments


def fallback_segments(duration: float) -> List[Segment]:
    """
    Deterministic segments used when the model is unavailable.

    Up to three 30 second windows, spaced floor(duration / count) apart
    from t=0. Sources shorter than one window get no segments.
    """
    if not duration or duration <= 0:
        return []

    count = min(FALLBACK_MAX_SEGMENTS, math.floor(duration / FALLBACK_WINDOW_SECONDS))
    if count <= 0:
        return []

    spacing = math.floor(duration / count)
    segments = []
    for i in range(count):
        start = float(i * spacing)
        segments.append(Segment(
            start_time=start,
            end_time=float(min(start + FALLBACK_WINDOW_SECONDS, duration)),
            title=f"Highlight {i + 1}",
            hook="Check this out!",
            description="Auto-detected segment",
            virality_score=float(FALLBACK_TOP_SCORE - i * FALLBACK_SCORE_STEP),
        ))
    return segments


def format_seconds(value: float) -> str:
    """Render seconds exactly, without a trailing .0 or exponent (30.0 -> "30", 12.3456 -> "12.3456")."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")
