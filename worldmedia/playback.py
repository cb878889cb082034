"""Decide how the player should open a channel."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

from .models import Channel, ChannelType

YOUTUBE_EMBED_BASE = "https://www.youtube-nocookie.com/embed/"
WINDY_EMBED_BASE = "https://embed.windy.com/"

HLS_RE = re.compile(r'\.m3u8(\?|$)', re.I)
WINDY_RE = re.compile(r'windy\.com', re.I)

NO_URL_MESSAGE = "No stream URL for this channel."
WEBCAM_FAILED_MESSAGE = "Could not load webcam stream. It may be unavailable or blocked."
AUDIO_FAILED_MESSAGE = "Could not play stream. It may be unavailable or blocked."
HLS_FAILED_MESSAGE = "Stream error. The source may be unavailable or blocked."
VIDEO_FAILED_MESSAGE = "Could not play stream. It may be unavailable or in an unsupported format."


class PlayerKind(str, Enum):
    HLS = "hls"
    VIDEO = "video"
    AUDIO = "audio"
    YOUTUBE = "youtube"
    WEBCAM_EMBED = "webcam_embed"
    WEBCAM_IMAGE = "webcam_image"


@dataclass(frozen=True)
class PlaybackPlan:
    kind: PlayerKind
    src: str = ""
    error: Optional[str] = None  # shown immediately (nothing to play)
    failure_message: str = VIDEO_FAILED_MESSAGE  # shown if playback fails

    @property
    def playable(self) -> bool:
        return bool(self.src) and self.error is None


def is_hls_url(url: str) -> bool:
    return bool(HLS_RE.search(url)) or "m3u8" in url


def _kind_for(channel: Channel, url: str) -> PlayerKind:
    if channel.type == ChannelType.RADIO:
        return PlayerKind.AUDIO
    if channel.type == ChannelType.YOUTUBE:
        return PlayerKind.YOUTUBE
    if channel.type == ChannelType.WEBCAM:
        return PlayerKind.WEBCAM_EMBED if WINDY_RE.search(url) else PlayerKind.WEBCAM_IMAGE
    return PlayerKind.HLS if is_hls_url(url) else PlayerKind.VIDEO


FAILURE_MESSAGES = {
    PlayerKind.HLS: HLS_FAILED_MESSAGE,
    PlayerKind.VIDEO: VIDEO_FAILED_MESSAGE,
    PlayerKind.AUDIO: AUDIO_FAILED_MESSAGE,
    PlayerKind.YOUTUBE: VIDEO_FAILED_MESSAGE,
    PlayerKind.WEBCAM_EMBED: WEBCAM_FAILED_MESSAGE,
    PlayerKind.WEBCAM_IMAGE: WEBCAM_FAILED_MESSAGE,
}


def plan_playback(channel: Channel) -> PlaybackPlan:
    """
    Player element and source for a channel.

    YouTube entries and Windy webcams may carry a bare video id / embed
    path instead of a full URL; those are expanded to the embed endpoint.
    """
    url = channel.url
    kind = _kind_for(channel, url)
    failure = FAILURE_MESSAGES[kind]
    if not url:
        return PlaybackPlan(kind=kind, error=NO_URL_MESSAGE, failure_message=failure)

    src = url
    if kind == PlayerKind.YOUTUBE and not url.startswith("http"):
        src = YOUTUBE_EMBED_BASE + url
    elif kind == PlayerKind.WEBCAM_EMBED and not url.startswith("http"):
        src = WINDY_EMBED_BASE + url
    return PlaybackPlan(kind=kind, src=src, failure_message=failure)


def source_label(channel: Channel) -> str:
    """Attribution text: source name, else the source URL's host, else the raw source."""
    if channel.source_name:
        return channel.source_name
    source = channel.source or ""
    if source.startswith("http"):
        return urlparse(source).hostname or source
    return source


def source_link(channel: Channel) -> Optional[str]:
    """Attribution link target, only for http(s) sources."""
    source = channel.source or ""
    return source if source.startswith("http") else None
