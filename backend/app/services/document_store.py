"""
DoctorWeb Backend - Document Store
====================================

What:  Generic CRUD over named JSON collections, one file per collection.
How:   Every operation reads the whole file. Mutations apply the change in
       memory and write the whole collection back as one unit (temp file +
       os.replace, so readers see either the old or the new content).
Who:   Owned by the app (app.state.store); used by ContentService and the
       snapshot route. Nothing else touches the data directory.

Record lifecycle:
    create  → fresh id, created/updated timestamps, appended at the end
    update  → shallow merge (update wins), id and creation timestamp pinned,
              updated timestamp refreshed, position unchanged
    delete  → removed from the sequence; no cascade into other collections

Concurrency:
    Reads take no lock and may observe the state before or after a concurrent
    write. Mutations hold a per-collection asyncio.Lock for the whole
    read-modify-write cycle, so two requests editing the same collection in one
    process cannot lose each other's changes. Separate processes pointed at the
    same directory are not coordinated: last writer wins.

Failure model:
    StorageUnavailableError  file missing / unreadable / bad JSON / wrong shape
    StorageWriteError        replacement failed; previous content untouched
    Absent ids and slugs are normal results (None / False), never exceptions.
"""

import asyncio
import json
import logging
import os
import secrets
import string
import time
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import aiofiles
import aiofiles.os

from app.exceptions import (
    DuplicateSlugError,
    StorageUnavailableError,
    StorageWriteError,
    UnknownCollectionError,
)
from app.models.collection import COLLECTIONS, CollectionSpec

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Clock = Callable[[], datetime]

_BASE36 = string.digits + string.ascii_lowercase
_ID_RANDOM_CHARS = 11


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id(now_ms: Optional[int] = None) -> str:
    """
    Short, low-collision record id: base36(epoch millis) + 11 random base36 chars.

    Same shape as the ids already present in the content files
    (e.g. "lq2x8k1m4f0a9z3c7b2d").
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(_ID_RANDOM_CHARS))
    return _to_base36(now_ms) + suffix


def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStore:
    """
    File-backed document store for the registered content collections.

    Args:
        data_dir:             Directory holding <collection>.json files
        collections:          Registry to serve (defaults to COLLECTIONS)
        enforce_unique_slugs: Reject writes that would duplicate a slug
        clock:                Source of "now" for timestamps (tests inject one)
    """

    def __init__(
        self,
        data_dir: str,
        collections: Optional[Mapping[str, CollectionSpec]] = None,
        enforce_unique_slugs: bool = True,
        clock: Optional[Clock] = None,
    ):
        self.data_dir = Path(data_dir).resolve()
        self.collections: Dict[str, CollectionSpec] = dict(collections or COLLECTIONS)
        self.enforce_unique_slugs = enforce_unique_slugs
        self._clock = clock or utc_now
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    # ── Registry ──────────────────────────────────────────────────────────

    def spec(self, collection: str) -> CollectionSpec:
        try:
            return self.collections[collection]
        except KeyError:
            raise UnknownCollectionError(collection) from None

    def _list_spec(self, collection: str) -> CollectionSpec:
        spec = self.spec(collection)
        if spec.is_singleton:
            raise UnknownCollectionError(
                collection, context={"reason": "singleton document, not a list collection"}
            )
        return spec

    def _singleton_spec(self, collection: str) -> CollectionSpec:
        spec = self.spec(collection)
        if not spec.is_singleton:
            raise UnknownCollectionError(
                collection, context={"reason": "list collection, not a singleton document"}
            )
        return spec

    # ── Raw file I/O ──────────────────────────────────────────────────────

    async def _read_unit(self, spec: CollectionSpec) -> Any:
        path = self.data_dir / spec.filename
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            logger.error("Error reading %s: %s", path, e)
            raise StorageUnavailableError(
                message=f"Failed to read {spec.filename}",
                collection=spec.name,
                context={"path": str(path), "os_error": str(e)},
            ) from e
        except UnicodeDecodeError as e:
            logger.error("Error decoding %s: %s", path, e)
            raise StorageUnavailableError(
                message=f"Failed to read {spec.filename}",
                collection=spec.name,
                context={"path": str(path), "error": str(e)},
            ) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Error parsing %s: %s", path, e)
            raise StorageUnavailableError(
                message=f"Failed to parse {spec.filename}",
                collection=spec.name,
                context={"path": str(path), "error": str(e)},
            ) from e

        if spec.is_singleton:
            if not isinstance(data, dict):
                raise self._shape_error(spec, path, "a JSON object")
        elif not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise self._shape_error(spec, path, "a JSON array of objects")
        return data

    @staticmethod
    def _shape_error(spec: CollectionSpec, path: Path, expected: str) -> StorageUnavailableError:
        logger.error("Unexpected structure in %s: expected %s", path, expected)
        return StorageUnavailableError(
            message=f"{spec.filename} does not contain {expected}",
            collection=spec.name,
            context={"path": str(path)},
        )

    async def _write_unit(self, spec: CollectionSpec, data: Any) -> None:
        """Replace the collection file in one step: temp sibling, then os.replace."""
        path = self.data_dir / spec.filename
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            logger.error("Error writing %s: %s", path, e)
            await self._discard(tmp_path)
            raise StorageWriteError(
                message=f"Failed to write {spec.filename}",
                collection=spec.name,
                context={"path": str(path), "os_error": str(e)},
            ) from e

    @staticmethod
    async def _discard(tmp_path: Path) -> None:
        try:
            await aiofiles.os.remove(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to remove temp file %s: %s", tmp_path, e)

    # ── Helpers ───────────────────────────────────────────────────────────

    def _now(self) -> str:
        return format_timestamp(self._clock())

    @staticmethod
    def _fresh_id(existing: Iterable[Record]) -> str:
        taken = {r.get("id") for r in existing}
        new_id = generate_id()
        while new_id in taken:
            new_id = generate_id()
        return new_id

    def _check_slug(
        self,
        spec: CollectionSpec,
        records: List[Record],
        slug: Any,
        exclude_id: Optional[str] = None,
    ) -> None:
        if not self.enforce_unique_slugs or slug is None:
            return
        for record in records:
            if record.get("slug") == slug and record.get("id") != exclude_id:
                raise DuplicateSlugError(spec.name, str(slug))

    # ── List collections ──────────────────────────────────────────────────

    async def list(self, collection: str) -> List[Record]:
        """Return every record of the collection in stored order."""
        spec = self._list_spec(collection)
        return await self._read_unit(spec)

    async def get_by_id(self, collection: str, record_id: str) -> Optional[Record]:
        return await self._find(collection, "id", record_id)

    async def get_by_slug(self, collection: str, slug: str) -> Optional[Record]:
        """First record with a matching slug; duplicates resolve to stored order."""
        return await self._find(collection, "slug", slug)

    async def _find(self, collection: str, field: str, value: Any) -> Optional[Record]:
        for record in await self.list(collection):
            if record.get(field) == value:
                return record
        return None

    async def create(self, collection: str, data: Mapping[str, Any]) -> Record:
        """
        Append a new record built from `data` and persist the collection.

        Caller fields are copied as given; id, timestamps and the collection's
        create defaults are then applied on top.
        """
        spec = self._list_spec(collection)
        async with self._locks[spec.name]:
            records = await self._read_unit(spec)
            self._check_slug(spec, records, data.get("slug"))

            now = self._now()
            record: Record = dict(data)
            record["id"] = self._fresh_id(records)
            if spec.created_field:
                record[spec.created_field] = now
            if spec.updated_field:
                record[spec.updated_field] = now
            record.update(spec.create_defaults)

            records.append(record)
            await self._write_unit(spec, records)

        logger.info("Created %s record %s", spec.name, record["id"])
        return record

    async def update(
        self, collection: str, record_id: str, changes: Mapping[str, Any]
    ) -> Optional[Record]:
        """
        Merge `changes` onto the record with `record_id`.

        Returns None (and writes nothing) when the id is absent.
        """
        spec = self._list_spec(collection)
        async with self._locks[spec.name]:
            records = await self._read_unit(spec)
            index = next(
                (i for i, r in enumerate(records) if r.get("id") == record_id), None
            )
            if index is None:
                return None

            current = records[index]
            if "slug" in changes:
                self._check_slug(spec, records, changes["slug"], exclude_id=record_id)

            merged: Record = {**current, **changes}
            merged["id"] = current.get("id")
            if spec.created_field:
                if spec.created_field in current:
                    merged[spec.created_field] = current[spec.created_field]
                else:
                    merged.pop(spec.created_field, None)
            if spec.updated_field:
                merged[spec.updated_field] = self._now()

            records[index] = merged
            await self._write_unit(spec, records)

        logger.info("Updated %s record %s", spec.name, record_id)
        return merged

    async def delete(self, collection: str, record_id: str) -> bool:
        """Remove the record; False (no write) when the id is absent."""
        spec = self._list_spec(collection)
        async with self._locks[spec.name]:
            records = await self._read_unit(spec)
            remaining = [r for r in records if r.get("id") != record_id]
            if len(remaining) == len(records):
                return False
            await self._write_unit(spec, remaining)

        logger.info("Deleted %s record %s", spec.name, record_id)
        return True

    # ── Singleton documents ───────────────────────────────────────────────

    async def get_document(self, collection: str) -> Record:
        spec = self._singleton_spec(collection)
        return await self._read_unit(spec)

    async def update_document(self, collection: str, changes: Mapping[str, Any]) -> Record:
        """Shallow-merge `changes` into the singleton document and persist it."""
        spec = self._singleton_spec(collection)
        async with self._locks[spec.name]:
            document = await self._read_unit(spec)
            merged: Record = {**document, **changes}
            if spec.updated_field:
                merged[spec.updated_field] = self._now()
            await self._write_unit(spec, merged)

        logger.info("Updated %s document", spec.name)
        return merged

    # ── Aggregate ─────────────────────────────────────────────────────────

    async def _read_any(self, collection: str) -> Any:
        return await self._read_unit(self.spec(collection))

    async def snapshot_all(self) -> Dict[str, Any]:
        """
        Read every registered collection into one mapping for bulk export.

        All-or-nothing: the first failing read aborts the whole snapshot.
        """
        names = list(self.collections)
        contents = await asyncio.gather(*(self._read_any(name) for name in names))
        return dict(zip(names, contents))

    # ── Maintenance ───────────────────────────────────────────────────────

    async def ensure_collections(self) -> List[str]:
        """
        Create the data directory and seed an empty unit for missing files.

        Returns the names of the collections that were seeded.
        """
        try:
            await aiofiles.os.makedirs(self.data_dir, exist_ok=True)
        except OSError as e:
            raise StorageWriteError(
                message="Failed to create data directory",
                context={"path": str(self.data_dir), "os_error": str(e)},
            ) from e

        seeded = []
        for spec in self.collections.values():
            if not await aiofiles.os.path.exists(self.data_dir / spec.filename):
                await self._write_unit(spec, spec.empty_unit())
                seeded.append(spec.name)
        if seeded:
            logger.info("Seeded empty collections: %s", ", ".join(seeded))
        return seeded

    async def is_available(self) -> bool:
        """The data directory exists and this process can list and read it."""
        if not await aiofiles.os.path.isdir(self.data_dir):
            return False
        return await aiofiles.os.access(self.data_dir, os.R_OK | os.X_OK)
