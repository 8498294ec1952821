"""
JSON file store for console settings.

Settings live in a single JSON document (``{"playback_restriction": {...}}``).
Writes preserve unrelated keys and are atomic: the document is written to a
temporary file with aiofiles, then renamed over the original.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from mux_console.domain.exceptions import StorageError
from mux_console.domain.models import PlaybackRestrictionSettings

logger = logging.getLogger(__name__)

PLAYBACK_RESTRICTION_KEY = "playback_restriction"


class JsonSettingsStore:
    """
    Settings store backed by a JSON file.

    A missing or unreadable file yields the default settings on read; the
    directory is created on first write.

    Attributes:
        path: Location of the settings document
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()
        logger.info(f"Initialized JsonSettingsStore: {self.path}")

    async def get_playback_restriction(self) -> PlaybackRestrictionSettings:
        document = await self._read_document()
        stored = document.get(PLAYBACK_RESTRICTION_KEY) or {}
        try:
            return PlaybackRestrictionSettings.model_validate(stored)
        except ValueError as e:
            logger.warning(f"Ignoring malformed playback restriction settings: {e}")
            return PlaybackRestrictionSettings()

    async def set_playback_restriction(self, value: PlaybackRestrictionSettings) -> None:
        """Persist playback restriction settings.

        Raises:
            StorageError: If the document cannot be written
        """
        async with self._lock:
            document = await self._read_document()
            document[PLAYBACK_RESTRICTION_KEY] = value.model_dump(exclude_none=True)
            await self._atomic_write(json.dumps(document, indent=2))

    async def _read_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
            document = json.loads(raw)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read settings file {self.path}: {e}")
            return {}
        return document if isinstance(document, dict) else {}

    async def _atomic_write(self, text: str) -> None:
        temp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                await f.write(text)
            await aiofiles.os.replace(str(temp_path), str(self.path))
        except OSError as e:
            if temp_path.exists():
                try:
                    await aiofiles.os.remove(str(temp_path))
                except OSError:
                    logger.debug(f"Could not remove temp file {temp_path}")
            raise StorageError(f"Failed to write settings file {self.path}: {e}") from e
