"""
Render Strategy
===============
Turns a clip's time range into a playable asset.

1. Cloudflare Stream clip API (server-side trim), when credentials and the
   source's Stream UID are available
2. Time-fragment URL on the full source asset (no transcoding)
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

import requests

from ..config import get_settings
from ..logging_config import get_logger, timed
from ..models.clip import Clip
from ..models.media import SourceMedia
from .segments import format_seconds

if TYPE_CHECKING:
    from .store import ClipStore

logger = get_logger("pipeline.render")

ASPECT_DIMENSIONS = {
    "9:16": (1080, 1920),
    "1:1": (1080, 1080),
    "16:9": (1920, 1080),
    "4:5": (1080, 1350),
}
DEFAULT_ASPECT = "9:16"

METHOD_STREAM = "stream"
METHOD_FRAGMENT = "fragment"


def dimensions_for(aspect_ratio: str) -> Tuple[int, int]:
    """Target (width, height); unknown ratios get 9:16."""
    return ASPECT_DIMENSIONS.get(aspect_ratio, ASPECT_DIMENSIONS[DEFAULT_ASPECT])


def fragment_url(base_url: str, start: float, end: float) -> str:
    return f"{base_url}#t={format_seconds(start)},{format_seconds(end)}"


@dataclass
class RenderOutcome:
    playback_url: str
    thumbnail_url: Optional[str]
    method: str
    stream_url: Optional[str] = None


class RenderError(Exception):
    """The remote clip request did not produce a clip"""


class RenderStrategy:
    def __init__(
        self,
        account_id: Optional[str] = None,
        api_token: Optional[str] = None,
        api_url: str = "https://api.cloudflare.com/client/v4",
        customer_subdomain: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.account_id = account_id
        self.api_token = api_token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        if customer_subdomain is None and account_id:
            customer_subdomain = f"customer-{account_id[:12]}"
        self.customer_subdomain = customer_subdomain

    @classmethod
    def from_settings(cls) -> "RenderStrategy":
        settings = get_settings()
        return cls(
            account_id=settings.cloudflare_account_id,
            api_token=settings.cloudflare_stream_api_token,
            api_url=settings.cloudflare_api_url,
            customer_subdomain=settings.cloudflare_customer_subdomain,
            timeout=settings.render_timeout_seconds,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.account_id and self.api_token)

    def _stream_base(self, uid: str) -> str:
        return f"https://{self.customer_subdomain}.cloudflarestream.com/{uid}"

    def _thumbnail(self, uid: str, start: float) -> str:
        return f"{self._stream_base(uid)}/thumbnails/thumbnail.jpg?time={format_seconds(start + 1)}s"

    @timed(logger)
    def render(self, store: "ClipStore", media: SourceMedia, clip: Clip) -> RenderOutcome:
        """
        Render one clip and persist the result through the store.

        Any problem with the remote clip request drops to the time-fragment
        fallback. Errors raised by the fallback itself propagate.
        """
        if self.has_credentials and media.stream_uid:
            try:
                outcome = self.request_stream_clip(media, clip)
                store.mark_clip_ready(clip, outcome)
                logger.info("clip_rendered", clip_id=clip.id, method=METHOD_STREAM)
                return outcome
            except Exception as e:
                logger.warning("stream_render_failed", clip_id=clip.id, error_message=str(e))
        else:
            logger.debug(
                "stream_render_skipped",
                clip_id=clip.id,
                has_credentials=self.has_credentials,
                has_stream_uid=bool(media.stream_uid),
            )

        outcome = self.time_fragment(media, clip)
        store.mark_clip_ready(clip, outcome)
        logger.info("clip_rendered", clip_id=clip.id, method=METHOD_FRAGMENT)
        return outcome

    def request_stream_clip(self, media: SourceMedia, clip: Clip) -> RenderOutcome:
        width, height = dimensions_for(clip.aspect_ratio)
        response = requests.post(
            f"{self.api_url}/accounts/{self.account_id}/stream/clip",
            headers={
                "Authorization": f"Bearer {self.api_token}",
                "Content-Type": "application/json",
            },
            json={
                "clippedFromVideoUID": media.stream_uid,
                "startTimeSeconds": clip.start_seconds,
                "endTimeSeconds": clip.end_seconds,
                "allowedOrigins": ["*"],
                "requireSignedURLs": False,
                "meta": {
                    "name": clip.title or f"Clip {clip.id}",
                    "aspectRatio": clip.aspect_ratio,
                    "width": width,
                    "height": height,
                    "sourceClipId": clip.id,
                },
            },
            timeout=self.timeout,
        )

        try:
            data = response.json()
        except ValueError:
            raise RenderError(f"Clip API returned non-JSON response (HTTP {response.status_code})")

        if not isinstance(data, dict):
            raise RenderError(f"Clip API returned unexpected body (HTTP {response.status_code})")

        result = data.get("result")
        if not response.ok or not data.get("success") or not isinstance(result, dict) or not result.get("uid"):
            raise RenderError(f"Clip API request failed (HTTP {response.status_code}): {data.get('errors')}")

        base = self._stream_base(result["uid"])
        return RenderOutcome(
            playback_url=f"{base}/downloads/default.mp4",
            thumbnail_url=self._thumbnail(result["uid"], clip.start_seconds),
            method=METHOD_STREAM,
            stream_url=f"{base}/watch",
        )

    def time_fragment(self, media: SourceMedia, clip: Clip) -> RenderOutcome:
        """Playback hint on the full source; the media is not trimmed."""
        thumbnail = media.thumbnail_url
        if not thumbnail and media.stream_uid and self.customer_subdomain:
            thumbnail = self._thumbnail(media.stream_uid, clip.start_seconds)
        return RenderOutcome(
            playback_url=fragment_url(media.playable_url, clip.start_seconds, clip.end_seconds),
            thumbnail_url=thumbnail,
            method=METHOD_FRAGMENT,
        )
