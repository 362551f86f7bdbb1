"""
Segment Proposer
================
Asks the LLM gateway for viral-worthy segments of a source and falls back
to fixed windows whenever the model can't be used.
"""
from typing import TYPE_CHECKING, List, Optional

from ..ai_gateway import AIGateway, AIGatewayError
from ..logging_config import get_logger, timed
from .segments import Segment, fallback_segments, format_seconds, normalize_segments

if TYPE_CHECKING:
    from .job import GenerationOptions

logger = get_logger("pipeline.proposer")

SYSTEM_PROMPT = """You are an expert at finding viral-worthy moments in video content for TikTok, Instagram Reels, and YouTube Shorts.

You identify clips that:
- Have a strong hook in the first 3 seconds
- Tell a complete micro-story (15-60 seconds)
- Have emotional impact or surprising moments
- Are self-contained and don't need context
- Have natural start/end points
{toggles}
Return clips ordered by virality potential."""

HOOK_INSTRUCTION = "Focus on attention-grabbing openers."
SPEAKER_INSTRUCTION = "Look for speaker changes as natural cut points."
ENERGY_INSTRUCTION = "Prioritize high-energy, dynamic moments."

IDENTIFY_CLIPS_TOOL = {
    "type": "function",
    "function": {
        "name": "identify_clips",
        "description": "Identify viral-worthy video clips",
        "parameters": {
            "type": "object",
            "properties": {
                "clips": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "startTime": {"type": "number", "description": "Start time in seconds"},
                            "endTime": {"type": "number", "description": "End time in seconds"},
                            "title": {"type": "string", "description": "Catchy 5-8 word title"},
                            "description": {"type": "string", "description": "Why this is viral-worthy"},
                            "viralityScore": {"type": "number", "description": "Score 0-100"},
                            "hook": {"type": "string", "description": "Attention-grabbing opening"},
                            "transcriptSnippet": {"type": "string", "description": "Key quote from segment"},
                        },
                        "required": ["startTime", "endTime", "title", "viralityScore", "hook"],
                    },
                },
            },
            "required": ["clips"],
        },
    },
}


def build_system_prompt(options: "GenerationOptions") -> str:
    toggles = []
    if options.auto_hook_detection:
        toggles.append(HOOK_INSTRUCTION)
    if options.speaker_detection:
        toggles.append(SPEAKER_INSTRUCTION)
    if options.high_energy_moments:
        toggles.append(ENERGY_INSTRUCTION)
    block = "\n" + "\n".join(toggles) + "\n" if toggles else ""
    return SYSTEM_PROMPT.format(toggles=block)


def build_user_prompt(transcript: str, duration: float) -> str:
    if transcript:
        return f"Analyze this video transcript and identify 3-5 viral-worthy clips:\n\n{transcript}"
    return f"Suggest 3-5 clip segments for a {format_seconds(duration)}-second video."


class SegmentProposer:
    """Propose clip segments for one source; never raises"""

    def __init__(self, gateway: Optional[AIGateway] = None):
        self.gateway = gateway

    @classmethod
    def from_settings(cls) -> "SegmentProposer":
        return cls(AIGateway.from_settings())

    @timed(logger)
    def propose(self, transcript: str, duration: float, options: "GenerationOptions") -> List[Segment]:
        duration = float(duration or 0)

        if self.gateway is None:
            logger.info("proposer_fallback", reason="no_api_key", duration=duration)
            return fallback_segments(duration)

        try:
            result = self.gateway.call_tool(
                build_system_prompt(options),
                build_user_prompt(transcript, duration),
                IDENTIFY_CLIPS_TOOL,
            )
        except AIGatewayError as e:
            logger.warning("proposer_fallback", reason=str(e), status_code=e.status_code)
            return fallback_segments(duration)
        except Exception as e:
            logger.error("proposer_fallback", error=e, reason="unexpected_error")
            return fallback_segments(duration)

        raw_clips = result.get("clips")
        if not isinstance(raw_clips, list):
            logger.warning("proposer_fallback", reason="missing_clips_array")
            return fallback_segments(duration)

        segments = normalize_segments(raw_clips, duration)
        if not segments:
            logger.warning("proposer_fallback", reason="no_usable_segments", returned=len(raw_clips))
            return fallback_segments(duration)

        logger.info("segments_proposed", count=len(segments), returned=len(raw_clips))
        return segments
