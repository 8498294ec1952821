"""
In-memory record stores.

``InMemoryStore`` implements the asset-metadata, library, upload-token and
usage protocols over plain dicts guarded by an asyncio lock.
``InMemorySessionStore`` keeps server-side sessions with expiry.
``RecentIdSet`` is a size-capped set of ids that forgets the oldest first.

Ordering follows what the dashboard expects: libraries and upload tokens newest
first, library assets by position, daily usage by day ascending.
"""

import asyncio
import logging
import secrets
import uuid
from collections import OrderedDict
from collections.abc import Iterator
from datetime import date, datetime, timedelta, timezone
from typing import Any

from mux_console.domain.exceptions import ConflictError, NotFoundError
from mux_console.domain.models import (
    AssetMetadata,
    DailyUsage,
    Library,
    LibraryAsset,
    SessionRecord,
    UploadToken,
    UsageTotals,
)

logger = logging.getLogger(__name__)

_METADATA_FIELDS = frozenset({"title", "description", "tags", "duration", "aspect_ratio"})
_USAGE_FIELDS = frozenset({"streamed_minutes", "storage_gb", "encoded_minutes"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryStore:
    """Dict-backed implementation of the record store protocols."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._metadata: dict[str, AssetMetadata] = {}
        self._libraries: dict[str, Library] = {}
        self._tokens: dict[str, UploadToken] = {}
        self._usage: dict[date, DailyUsage] = {}

    # ========================================================================
    # Asset metadata
    # ========================================================================

    async def get_asset_metadata(self, asset_id: str) -> AssetMetadata | None:
        return self._metadata.get(asset_id)

    async def get_asset_metadata_many(self, asset_ids: list[str]) -> dict[str, AssetMetadata]:
        return {
            asset_id: self._metadata[asset_id]
            for asset_id in asset_ids
            if asset_id in self._metadata
        }

    async def upsert_asset_metadata(self, asset_id: str, **fields: Any) -> AssetMetadata:
        unknown = set(fields) - _METADATA_FIELDS
        if unknown:
            raise ValueError(f"Unknown metadata fields: {sorted(unknown)}")

        async with self._lock:
            now = _utcnow()
            current = self._metadata.get(asset_id)
            if current is None:
                record = AssetMetadata(asset_id=asset_id, created_at=now, updated_at=now, **fields)
            else:
                record = current.model_copy(update={**fields, "updated_at": now})
            self._metadata[asset_id] = record
            return record

    async def delete_asset_metadata(self, asset_id: str) -> None:
        """Delete metadata for an asset.

        Raises:
            NotFoundError: If the asset has no stored metadata
        """
        async with self._lock:
            if self._metadata.pop(asset_id, None) is None:
                raise NotFoundError(f"No metadata for asset {asset_id}")

    async def search_assets_by_metadata(self, query: str) -> list[str]:
        """Asset ids whose title or description contains ``query`` (case-insensitive),
        or whose tags include it exactly."""
        needle = query.lower()
        return [
            record.asset_id
            for record in self._metadata.values()
            if needle in (record.title or "").lower()
            or needle in (record.description or "").lower()
            or query in record.tags
        ]

    # ========================================================================
    # Libraries
    # ========================================================================

    async def get_libraries(self) -> list[Library]:
        return sorted(self._libraries.values(), key=lambda lib: lib.created_at, reverse=True)

    async def get_library_by_slug(self, slug: str) -> Library | None:
        for library in self._libraries.values():
            if library.slug == slug:
                return library
        return None

    async def create_library(
        self, name: str, slug: str, description: str | None = None
    ) -> Library:
        """Create a library.

        Raises:
            ConflictError: If the slug is already used by another library
        """
        async with self._lock:
            if any(lib.slug == slug for lib in self._libraries.values()):
                raise ConflictError(f"Library slug already exists: {slug}")
            library = Library(
                id=str(uuid.uuid4()),
                name=name,
                slug=slug,
                description=description,
                created_at=_utcnow(),
            )
            self._libraries[library.id] = library
            logger.debug(f"Created library {library.id} ({slug})")
            return library

    async def add_asset_to_library(self, library_id: str, asset_id: str) -> LibraryAsset:
        """Append an asset at the next position of a library."""
        async with self._lock:
            library = self._require_library(library_id)
            if any(entry.asset_id == asset_id for entry in library.assets):
                raise ConflictError(f"Asset {asset_id} already in library {library_id}")
            position = max((entry.position for entry in library.assets), default=0) + 1
            entry = LibraryAsset(library_id=library_id, asset_id=asset_id, position=position)
            library.assets.append(entry)
            return entry

    async def remove_asset_from_library(self, library_id: str, asset_id: str) -> None:
        async with self._lock:
            library = self._require_library(library_id)
            remaining = [entry for entry in library.assets if entry.asset_id != asset_id]
            if len(remaining) == len(library.assets):
                raise NotFoundError(f"Asset {asset_id} not in library {library_id}")
            library.assets[:] = remaining

    async def reorder_library_assets(self, library_id: str, asset_ids: list[str]) -> None:
        """Assign positions 1..n in the given order; all ids must already be members."""
        async with self._lock:
            library = self._require_library(library_id)
            by_asset = {entry.asset_id: entry for entry in library.assets}
            missing = [asset_id for asset_id in asset_ids if asset_id not in by_asset]
            if missing:
                raise NotFoundError(f"Assets not in library {library_id}: {missing}")
            for index, asset_id in enumerate(asset_ids, start=1):
                by_asset[asset_id].position = index
            library.assets.sort(key=lambda entry: entry.position)

    def _require_library(self, library_id: str) -> Library:
        library = self._libraries.get(library_id)
        if library is None:
            raise NotFoundError(f"Library not found: {library_id}")
        return library

    # ========================================================================
    # Upload tokens
    # ========================================================================

    async def create_upload_token(self, token: str, url: str, expires_at: datetime) -> UploadToken:
        async with self._lock:
            record = UploadToken(
                id=str(uuid.uuid4()),
                token=token,
                url=url,
                expires_at=expires_at,
                created_at=_utcnow(),
            )
            self._tokens[record.id] = record
            return record

    async def get_upload_tokens(self) -> list[UploadToken]:
        return sorted(self._tokens.values(), key=lambda t: t.created_at, reverse=True)

    async def get_active_upload_tokens(self) -> list[UploadToken]:
        now = _utcnow()
        return [t for t in await self.get_upload_tokens() if not t.used and t.expires_at > now]

    async def mark_token_used_by_value(self, token: str) -> UploadToken | None:
        """Mark the record holding ``token`` as used; returns None if no record matches.

        Marking an already used token leaves its ``used_at`` untouched.
        """
        async with self._lock:
            for record_id, record in self._tokens.items():
                if record.token != token:
                    continue
                if not record.used:
                    record = record.model_copy(update={"used": True, "used_at": _utcnow()})
                    self._tokens[record_id] = record
                return record
        return None

    async def cleanup_expired_tokens(self) -> int:
        async with self._lock:
            now = _utcnow()
            expired = [key for key, t in self._tokens.items() if t.expires_at < now]
            for key in expired:
                del self._tokens[key]
            if expired:
                logger.info(f"Removed {len(expired)} expired upload tokens")
            return len(expired)

    # ========================================================================
    # Usage
    # ========================================================================

    async def get_daily_usage(self, start: date, end: date) -> list[DailyUsage]:
        rows = [row for day, row in self._usage.items() if start <= day <= end]
        return sorted(rows, key=lambda row: row.day)

    async def upsert_daily_usage(self, day: date, **fields: Any) -> DailyUsage:
        unknown = set(fields) - _USAGE_FIELDS
        if unknown:
            raise ValueError(f"Unknown usage fields: {sorted(unknown)}")

        async with self._lock:
            current = self._usage.get(day)
            if current is None:
                row = DailyUsage(day=day, **fields)
            else:
                row = DailyUsage.model_validate({**current.model_dump(), **fields})
            self._usage[day] = row
            return row

    async def get_total_usage(self) -> UsageTotals:
        return UsageTotals(
            total_streamed_minutes=sum(row.streamed_minutes for row in self._usage.values()),
            total_storage_gb=sum(row.storage_gb for row in self._usage.values()),
        )


class InMemorySessionStore:
    """Server-side sessions keyed by random URL-safe tokens."""

    def __init__(self, ttl: timedelta = timedelta(days=7)) -> None:
        self._ttl = ttl
        self._sessions: dict[str, SessionRecord] = {}

    async def create_session(self, user_id: str, email: str) -> SessionRecord:
        now = _utcnow()
        record = SessionRecord(
            token=secrets.token_urlsafe(48),
            user_id=user_id,
            email=email,
            created_at=now,
            expires_at=now + self._ttl,
        )
        self._sessions[record.token] = record
        logger.info(f"Session created for {email} (expires {record.expires_at.isoformat()})")
        return record

    async def get_session(self, token: str) -> SessionRecord | None:
        """Return a live session; expired sessions are dropped on lookup."""
        record = self._sessions.get(token)
        if record is None:
            return None
        if record.expires_at <= _utcnow():
            del self._sessions[token]
            return None
        return record

    async def delete_session(self, token: str) -> None:
        self._sessions.pop(token, None)

    async def cleanup_expired_sessions(self) -> int:
        now = _utcnow()
        expired = [token for token, record in self._sessions.items() if record.expires_at <= now]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.info(f"Removed {len(expired)} expired sessions")
        return len(expired)


class RecentIdSet:
    """Insertion-ordered set of ids holding at most ``max_size`` entries."""

    def __init__(self, max_size: int = 10_000):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._ids: OrderedDict[str, None] = OrderedDict()

    def __contains__(self, item: object) -> bool:
        return item in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def add(self, item: str) -> None:
        self._ids[item] = None
        self._ids.move_to_end(item)
        while len(self._ids) > self.max_size:
            self._ids.popitem(last=False)
