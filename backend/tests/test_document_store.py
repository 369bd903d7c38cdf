"""
DoctorWeb Backend - Document Store Unit Tests
===============================================

What:  Tests for DocumentStore CRUD, singleton documents, snapshot and upkeep.
How:   Runs against a real temporary data directory (see conftest.data_dir)
       with a fake clock, so timestamps are exact.

What we test:
    ✅ Create/read round-trip, id uniqueness, store-managed fields
    ✅ Merge-not-replace updates with pinned id and creation timestamp
    ✅ Absent ids/slugs are normal results, not errors
    ✅ Missing or malformed files raise StorageUnavailableError
    ✅ Failed writes leave the previous content in place
    ✅ Slug uniqueness on write, first match on read
    ✅ Snapshot is all-or-nothing
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from app.exceptions import (
    DuplicateSlugError,
    StorageUnavailableError,
    StorageWriteError,
    UnknownCollectionError,
)
from app.models.collection import COLLECTIONS
from app.services.document_store import DocumentStore, format_timestamp, generate_id
from conftest import read_collection, write_collection

NOW = "2024-05-01T12:00:00.123Z"


class TestHelpers:
    """Tests for id and timestamp helpers."""

    def test_generate_id_shape(self):
        new_id = generate_id(now_ms=1_700_000_000_000)
        # base36 millis followed by 11 random base36 chars
        assert int(new_id[:-11], 36) == 1_700_000_000_000
        assert new_id.isalnum() and new_id == new_id.lower()

    def test_generate_id_zero_timestamp(self):
        assert len(generate_id(now_ms=0)) == 12

    def test_generate_id_varies(self):
        ids = {generate_id(now_ms=1_700_000_000_000) for _ in range(200)}
        assert len(ids) == 200

    def test_format_timestamp_converts_to_utc(self):
        from datetime import datetime, timedelta, timezone

        ist = timezone(timedelta(hours=5, minutes=30))
        moment = datetime(2024, 5, 1, 17, 30, 0, 5000, tzinfo=ist)
        assert format_timestamp(moment) == "2024-05-01T12:00:00.005Z"


class TestCreateAndRead:
    """Tests for create, list, get_by_id and get_by_slug."""

    @pytest.mark.asyncio
    async def test_create_round_trip(self, store):
        """Creation output is exactly what is stored."""
        created = await store.create("pages", {"title": "About", "slug": "about"})

        assert created["id"]
        assert created["createdAt"] == NOW
        assert created["updatedAt"] == NOW
        assert await store.get_by_id("pages", created["id"]) == created

    @pytest.mark.asyncio
    async def test_create_keeps_unknown_fields(self, store, data_dir):
        created = await store.create("services", {"title": "X-Ray", "legacyCode": 42})

        on_disk = read_collection(data_dir, "services")
        assert on_disk == [created]
        assert on_disk[0]["legacyCode"] == 42

    @pytest.mark.asyncio
    async def test_create_overrides_caller_id_and_timestamps(self, store):
        created = await store.create(
            "pages", {"id": "mine", "createdAt": "1999-01-01T00:00:00.000Z"}
        )
        assert created["id"] != "mine"
        assert created["createdAt"] == NOW

    @pytest.mark.asyncio
    async def test_create_does_not_mutate_input(self, store):
        data = {"title": "Home"}
        await store.create("pages", data)
        assert data == {"title": "Home"}

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, store):
        records = [await store.create("categories", {"name": f"c{i}"}) for i in range(25)]
        assert len({r["id"] for r in records}) == 25

    @pytest.mark.asyncio
    async def test_create_appends_in_order(self, store):
        for name in ("first", "second", "third"):
            await store.create("categories", {"name": name})
        assert [r["name"] for r in await store.list("categories")] == ["first", "second", "third"]

    @pytest.mark.asyncio
    async def test_blog_post_timestamps_and_counters(self, store):
        post = await store.create("blog-posts", {"title": "Hello", "views": 999})

        assert post["publishedDate"] == NOW
        assert post["updatedDate"] == NOW
        assert "createdAt" not in post
        assert post["views"] == 0
        assert post["likes"] == 0

    @pytest.mark.asyncio
    async def test_absent_keys_return_none(self, store):
        await store.create("doctors", {"name": "Dr. A", "slug": "dr-a"})
        assert await store.get_by_id("doctors", "missing") is None
        assert await store.get_by_slug("doctors", "missing") is None

    @pytest.mark.asyncio
    async def test_concurrent_creates_are_all_kept(self, store):
        await asyncio.gather(
            *(store.create("appointments", {"patientName": f"p{i}"}) for i in range(20))
        )
        records = await store.list("appointments")
        assert len(records) == 20
        assert len({r["id"] for r in records}) == 20


class TestUpdate:
    """Tests for merge updates."""

    @pytest.mark.asyncio
    async def test_merge_not_replace(self, store, clock):
        created = await store.create("services", {"a": 1, "b": 2})
        clock.advance(seconds=5)

        updated = await store.update("services", created["id"], {"b": 3})

        assert updated["a"] == 1
        assert updated["b"] == 3
        assert updated["id"] == created["id"]
        assert updated["createdAt"] == created["createdAt"]
        assert updated["updatedAt"] == "2024-05-01T12:00:05.123Z"
        assert await store.get_by_id("services", created["id"]) == updated

    @pytest.mark.asyncio
    async def test_update_pins_id_and_created(self, store, clock):
        created = await store.create("pages", {"title": "Home"})
        clock.advance(minutes=1)

        updated = await store.update(
            "pages", created["id"], {"id": "hijack", "createdAt": "2000-01-01T00:00:00.000Z"}
        )

        assert updated["id"] == created["id"]
        assert updated["createdAt"] == NOW
        assert await store.get_by_id("pages", "hijack") is None

    @pytest.mark.asyncio
    async def test_update_keeps_position(self, store):
        first = await store.create("categories", {"name": "one"})
        await store.create("categories", {"name": "two"})

        await store.update("categories", first["id"], {"name": "uno"})

        assert [r["name"] for r in await store.list("categories")] == ["uno", "two"]

    @pytest.mark.asyncio
    async def test_update_absent_returns_none_without_write(self, store, data_dir):
        await store.create("pages", {"title": "Home"})
        before = (data_dir / "pages.json").read_text(encoding="utf-8")

        assert await store.update("pages", "missing", {"title": "x"}) is None
        assert (data_dir / "pages.json").read_text(encoding="utf-8") == before

    @pytest.mark.asyncio
    async def test_blog_post_update_refreshes_updated_date(self, store, clock):
        post = await store.create("blog-posts", {"title": "Hello"})
        clock.advance(hours=1)

        updated = await store.update("blog-posts", post["id"], {"likes": 3})

        assert updated["publishedDate"] == NOW
        assert updated["updatedDate"] == "2024-05-01T13:00:00.123Z"
        assert updated["likes"] == 3


class TestDelete:
    """Tests for delete."""

    @pytest.mark.asyncio
    async def test_delete_twice(self, store):
        created = await store.create("testimonials", {"name": "Priya"})

        assert await store.delete("testimonials", created["id"]) is True
        assert await store.delete("testimonials", created["id"]) is False
        assert await store.list("testimonials") == []

    @pytest.mark.asyncio
    async def test_delete_only_removes_target(self, store):
        keep = await store.create("skills", {"name": "keep"})
        drop = await store.create("skills", {"name": "drop"})

        await store.delete("skills", drop["id"])

        assert await store.list("skills") == [keep]


class TestDoctorsScenario:
    """End-to-end lifecycle of one record."""

    @pytest.mark.asyncio
    async def test_doctor_lifecycle(self, store, clock):
        assert await store.list("doctors") == []

        created = await store.create("doctors", {"name": "Dr. A", "slug": "dr-a"})
        assert created["id"]

        listed = await store.list("doctors")
        assert len(listed) == 1
        assert listed[0]["slug"] == "dr-a"
        assert await store.get_by_slug("doctors", "dr-a") == created

        clock.advance(seconds=30)
        updated = await store.update("doctors", created["id"], {"name": "Dr. A Jr."})
        changed = {k for k in updated if updated[k] != created.get(k)}
        assert changed == {"name", "updatedAt"}
        assert updated["slug"] == "dr-a"
        assert updated["id"] == created["id"]

        assert await store.delete("doctors", created["id"]) is True
        assert await store.list("doctors") == []


class TestSlugUniqueness:
    """Tests for duplicate slug handling."""

    @pytest.mark.asyncio
    async def test_create_rejects_duplicate_slug(self, store):
        await store.create("articles", {"title": "One", "slug": "fever"})

        with pytest.raises(DuplicateSlugError) as exc_info:
            await store.create("articles", {"title": "Two", "slug": "fever"})

        assert exc_info.value.slug == "fever"
        assert len(await store.list("articles")) == 1

    @pytest.mark.asyncio
    async def test_update_rejects_taken_slug(self, store):
        await store.create("pages", {"slug": "home"})
        about = await store.create("pages", {"slug": "about"})

        with pytest.raises(DuplicateSlugError):
            await store.update("pages", about["id"], {"slug": "home"})

    @pytest.mark.asyncio
    async def test_update_with_own_slug_is_allowed(self, store):
        about = await store.create("pages", {"slug": "about"})
        updated = await store.update("pages", about["id"], {"slug": "about", "title": "About"})
        assert updated["title"] == "About"

    @pytest.mark.asyncio
    async def test_same_slug_in_other_collection_is_allowed(self, store):
        await store.create("pages", {"slug": "diabetes"})
        await store.create("skills", {"slug": "diabetes"})

    @pytest.mark.asyncio
    async def test_duplicates_allowed_when_not_enforced(self, data_dir, clock):
        store = DocumentStore(str(data_dir), enforce_unique_slugs=False, clock=clock)
        first = await store.create("cases", {"title": "First", "slug": "same"})
        await store.create("cases", {"title": "Second", "slug": "same"})

        assert len(await store.list("cases")) == 2
        assert await store.get_by_slug("cases", "same") == first

    @pytest.mark.asyncio
    async def test_existing_duplicates_resolve_to_first(self, store, data_dir):
        write_collection(
            data_dir,
            "doctors",
            [{"id": "a", "slug": "dup", "name": "A"}, {"id": "b", "slug": "dup", "name": "B"}],
        )
        assert (await store.get_by_slug("doctors", "dup"))["id"] == "a"


class TestStorageFailures:
    """Tests for unreadable units and failed writes."""

    @pytest.mark.asyncio
    async def test_missing_file(self, store, data_dir):
        (data_dir / "cases.json").unlink()

        with pytest.raises(StorageUnavailableError) as exc_info:
            await store.list("cases")
        assert exc_info.value.collection == "cases"

    @pytest.mark.asyncio
    async def test_malformed_json(self, store, data_dir):
        (data_dir / "pages.json").write_text("[{not json", encoding="utf-8")

        with pytest.raises(StorageUnavailableError):
            await store.get_by_id("pages", "anything")

    @pytest.mark.asyncio
    async def test_wrong_shape(self, store, data_dir):
        write_collection(data_dir, "pages", {"id": "not-a-list"})
        write_collection(data_dir, "contact", [])

        with pytest.raises(StorageUnavailableError):
            await store.list("pages")
        with pytest.raises(StorageUnavailableError):
            await store.get_document("contact")

    @pytest.mark.asyncio
    async def test_non_object_records(self, store, data_dir):
        write_collection(data_dir, "services", [1, 2, 3])

        with pytest.raises(StorageUnavailableError):
            await store.list("services")

    @pytest.mark.asyncio
    async def test_mutation_on_unreadable_file_writes_nothing(self, store, data_dir):
        (data_dir / "pages.json").write_text("garbage", encoding="utf-8")

        with pytest.raises(StorageUnavailableError):
            await store.create("pages", {"title": "x"})
        assert (data_dir / "pages.json").read_text(encoding="utf-8") == "garbage"

    @pytest.mark.asyncio
    async def test_failed_write_keeps_previous_content(self, store, data_dir):
        existing = await store.create("doctors", {"name": "Dr. A"})

        with patch("aiofiles.os.replace", AsyncMock(side_effect=OSError("disk full"))):
            with pytest.raises(StorageWriteError) as exc_info:
                await store.create("doctors", {"name": "Dr. B"})

        assert exc_info.value.collection == "doctors"
        assert read_collection(data_dir, "doctors") == [existing]
        assert not list(data_dir.glob("*.tmp"))


class TestSingletonDocuments:
    """Tests for get_document and update_document."""

    @pytest.mark.asyncio
    async def test_update_document_merges(self, store, data_dir):
        write_collection(data_dir, "contact", {"phone": "111", "email": "a@b.c"})

        merged = await store.update_document("contact", {"phone": "222"})

        assert merged == {"phone": "222", "email": "a@b.c"}
        assert await store.get_document("contact") == merged

    @pytest.mark.asyncio
    async def test_singletons_have_no_timestamps(self, store):
        merged = await store.update_document("settings", {"siteName": "Clinic"})
        assert merged == {"siteName": "Clinic"}


class TestRegistry:
    """Tests for unknown collection names and kind mismatches."""

    @pytest.mark.asyncio
    async def test_unknown_collection(self, store):
        with pytest.raises(UnknownCollectionError):
            await store.list("patients")

    @pytest.mark.asyncio
    async def test_singleton_is_not_a_list(self, store):
        with pytest.raises(UnknownCollectionError):
            await store.list("seo-settings")

    @pytest.mark.asyncio
    async def test_list_is_not_a_singleton(self, store):
        with pytest.raises(UnknownCollectionError):
            await store.get_document("pages")


class TestSnapshot:
    """Tests for snapshot_all."""

    @pytest.mark.asyncio
    async def test_snapshot_contains_every_collection(self, store):
        doctor = await store.create("doctors", {"name": "Dr. A"})
        await store.update_document("contact", {"phone": "111"})

        snapshot = await store.snapshot_all()

        assert set(snapshot) == set(COLLECTIONS)
        assert snapshot["doctors"] == [doctor]
        assert snapshot["contact"] == {"phone": "111"}
        assert snapshot["pages"] == []

    @pytest.mark.asyncio
    async def test_snapshot_fails_fast(self, store, data_dir):
        (data_dir / "testimonials.json").write_text("{", encoding="utf-8")

        with pytest.raises(StorageUnavailableError):
            await store.snapshot_all()


class TestMaintenance:
    """Tests for ensure_collections and is_available."""

    @pytest.mark.asyncio
    async def test_ensure_collections_seeds_missing(self, tmp_path):
        store = DocumentStore(str(tmp_path / "fresh"))

        seeded = await store.ensure_collections()

        assert sorted(seeded) == sorted(COLLECTIONS)
        assert read_collection(tmp_path / "fresh", "pages") == []
        assert read_collection(tmp_path / "fresh", "seo-settings") == {}
        assert await store.ensure_collections() == []

    @pytest.mark.asyncio
    async def test_ensure_collections_keeps_existing(self, store, data_dir):
        created = await store.create("pages", {"title": "Home"})
        (data_dir / "skills.json").unlink()

        assert await store.ensure_collections() == ["skills"]
        assert await store.list("pages") == [created]

    @pytest.mark.asyncio
    async def test_is_available(self, store, tmp_path):
        assert await store.is_available() is True
        assert await DocumentStore(str(tmp_path / "nowhere")).is_available() is False
