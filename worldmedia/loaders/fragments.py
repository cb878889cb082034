"""Fragment sources for the data/ file layout (HTTP or local directory)."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional, Protocol
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from ..errors import FragmentError
from ..models import Channel

logger = logging.getLogger(__name__)

FragmentPath = tuple[str, ...]

CATALOG_PATH: FragmentPath = ("channels.json",)
CATEGORIES_PATH: FragmentPath = ("cat_channels", "categories.json")


def country_fragment_path(code: str, source_name: str) -> FragmentPath:
    """data/channels/<CODE>/<source-name>.json"""
    return ("channels", code.strip().upper(), f"{source_name}.json")


def category_fragment_path(category: str, source_name: str) -> FragmentPath:
    """data/cat_channels/<category-name>/<source-name>.json"""
    return ("cat_channels", category, f"{source_name}.json")


def format_path(path: FragmentPath) -> str:
    return "/".join(path)


def parse_fragment(data: Any) -> list[Channel]:
    """Channels of one fragment document; a missing or malformed list is empty."""
    if not isinstance(data, dict):
        return []
    items = data.get("channels")
    if not isinstance(items, list):
        return []

    channels = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            channels.append(Channel.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Skipping malformed channel entry: {e}")
    return channels


class FragmentSource(Protocol):
    """Reads one JSON document of the data layout.

    Returns None when the document does not exist, raises FragmentError
    when it exists but cannot be read or decoded.
    """

    async def fetch_json(self, path: FragmentPath) -> Optional[Any]:
        ...


class HttpFragmentSource:
    """Fetch fragments from a static file server (the deployed data/ dir)."""

    def __init__(self, base_url: str, timeout_seconds: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> HttpFragmentSource:
        self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    def url_for(self, path: FragmentPath) -> str:
        return self.base_url + "/" + "/".join(quote(part, safe="") for part in path)

    async def fetch_json(self, path: FragmentPath) -> Optional[Any]:
        url = self.url_for(path)
        try:
            if self._session is not None:
                return await self._get(self._session, url, path)
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                return await self._get(session, url, path)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FragmentError(format_path(path), str(e) or type(e).__name__) from e

    async def _get(self, session: aiohttp.ClientSession, url: str, path: FragmentPath) -> Optional[Any]:
        async with session.get(url) as resp:
            if resp.status != 200:
                logger.debug(f"HTTP {resp.status} for {url}")
                return None
            try:
                return await resp.json(content_type=None)
            except ValueError as e:
                raise FragmentError(format_path(path), f"invalid JSON: {e}") from e


class FileFragmentSource:
    """Read fragments straight from a local data/ directory."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def path_for(self, path: FragmentPath) -> Optional[Path]:
        # Category names come from user input; never leave the data root
        for part in path:
            if part in ("", ".", "..") or "/" in part or "\\" in part:
                return None
        return self.root.joinpath(*path)

    async def fetch_json(self, path: FragmentPath) -> Optional[Any]:
        file_path = self.path_for(path)
        if file_path is None or not file_path.is_file():
            return None
        try:
            return json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            raise FragmentError(format_path(path), str(e)) from e


def open_source(data_root: str, timeout_seconds: float = 30.0) -> FragmentSource:
    """HTTP source for http(s) roots, filesystem source otherwise."""
    if data_root.startswith(("http://", "https://")):
        return HttpFragmentSource(data_root, timeout_seconds=timeout_seconds)
    return FileFragmentSource(data_root)
