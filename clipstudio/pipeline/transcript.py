"""
Transcript step: reuse what ingestion stored, otherwise ask a transcriber.
"""
import json
from typing import Callable, Optional

from ..logging_config import get_logger
from ..models.media import SourceMedia

logger = get_logger("pipeline.transcript")

Transcriber = Callable[[str, float], str]


def no_transcriber(url: str, duration: float) -> str:
    """Default transcriber: no transcription backend is wired up, so return no text."""
    logger.warning("transcriber_not_configured", url=url, duration=duration)
    return ""


def obtain_transcript(media: SourceMedia, transcriber: Optional[Transcriber] = None) -> str:
    """Return the media's stored transcript, or whatever the transcriber produces."""
    stored = media.transcript
    if stored:
        if not isinstance(stored, str):
            stored = json.dumps(stored)
        logger.info("transcript_reused", media_id=media.id, chars=len(stored))
        return stored

    transcriber = transcriber or no_transcriber
    return transcriber(media.playable_url, float(media.duration_seconds or 0)) or ""
