"""Tests for media previews: temp reference balance, commit and cancel."""

import pytest

from app.schemas.training_session import SessionStatus, VideoSource
from app.training.errors import NetworkError, SessionNotFound, UploadFailed, ValidationError
from app.training.media import MediaPreviewManager, TempFileAllocator, TempRefAllocator
from app.training.store import SelectedFile
from tests.factories import make_session, photo_file, video_file


class FlakyAllocator(TempRefAllocator):
    """In-memory allocator that fails on the n-th allocation."""

    def __init__(self, fail_on: int):
        super().__init__()
        self.fail_on = fail_on
        self.live: set[str] = set()
        self._attempts = 0

    def _create(self, file: SelectedFile) -> str:
        self._attempts += 1
        if self._attempts == self.fail_on:
            raise OSError("disk full")
        ref = f"mem://{self._attempts}/{file.name}"
        self.live.add(ref)
        return ref

    def _destroy(self, ref: str) -> None:
        self.live.discard(ref)


@pytest.fixture
def allocator(tmp_path) -> TempFileAllocator:
    return TempFileAllocator(tmp_path / "previews")


@pytest.fixture
def manager(store, allocator) -> MediaPreviewManager:
    store.add(make_session(status=SessionStatus.IN_PROGRESS))
    return MediaPreviewManager(store, 1, allocator=allocator, max_photos=3)


def _preview_files(allocator: TempFileAllocator) -> list:
    if not allocator.directory.exists():
        return []
    return list(allocator.directory.iterdir())


# ======================================================================
# Allocator
# ======================================================================


class TestTempFileAllocator:
    def test_allocate_writes_file(self, allocator):
        handle = allocator.allocate(photo_file())
        assert handle.ref.startswith("file://")
        assert handle.ref.endswith(".jpg")
        (path,) = _preview_files(allocator)
        assert path.read_bytes() == photo_file().data
        assert allocator.open_count == 1

    def test_release_removes_file(self, allocator):
        handle = allocator.allocate(photo_file())
        assert handle.release() is True
        assert _preview_files(allocator) == []
        assert allocator.open_count == 0

    def test_second_release_is_noop(self, allocator):
        handle = allocator.allocate(photo_file())
        handle.release()
        assert handle.release() is False
        assert allocator.released == 1
        assert allocator.open_count == 0


# ======================================================================
# Photo batch
# ======================================================================


class TestSelectPhotos:
    def test_select_allocates_previews(self, manager, allocator):
        entries = manager.select_photos([photo_file("a.jpg"), photo_file("b.jpg")])
        assert [e.name for e in entries] == ["a.jpg", "b.jpg"]
        assert all(e.temp_ref.startswith("file://") for e in entries)
        assert allocator.open_count == 2
        assert manager.has_pending

    def test_new_selection_replaces_batch(self, manager, allocator):
        first = manager.select_photos([photo_file("a.jpg"), photo_file("b.jpg")])
        second = manager.select_photos([photo_file("c.jpg")])
        assert all(e.released for e in first)
        assert manager.photo_batch == second
        assert allocator.allocated == 3
        assert allocator.released == 2
        assert len(_preview_files(allocator)) == 1

    def test_empty_selection_keeps_batch(self, manager, allocator):
        batch = manager.select_photos([photo_file()])
        assert manager.select_photos([]) == batch
        assert allocator.open_count == 1

    def test_too_many_photos(self, manager, allocator):
        with pytest.raises(ValidationError):
            manager.select_photos([photo_file(f"{i}.jpg") for i in range(4)])
        assert allocator.allocated == 0

    def test_non_image_rejected(self, manager, allocator):
        manager.select_photos([photo_file("keep.jpg")])
        with pytest.raises(ValidationError):
            manager.select_photos([photo_file("a.jpg"), video_file("b.mp4")])
        assert [e.name for e in manager.photo_batch] == ["keep.jpg"]
        assert allocator.open_count == 1

    def test_allocation_failure_releases_partial_batch(self, store):
        store.add(make_session())
        flaky = FlakyAllocator(fail_on=2)
        manager = MediaPreviewManager(store, 1, allocator=flaky)
        with pytest.raises(OSError):
            manager.select_photos([photo_file("a.jpg"), photo_file("b.jpg")])
        assert flaky.open_count == 0
        assert flaky.live == set()
        assert manager.photo_batch == []


@pytest.mark.anyio
class TestCommitPhotos:
    async def test_commit_releases_and_persists(self, store, manager, allocator):
        manager.select_photos([photo_file("a.jpg"), photo_file("b.jpg")])
        persisted = await manager.commit_photos()

        assert [p.url for p in persisted] == ["https://cdn.test/photos/a.jpg", "https://cdn.test/photos/b.jpg"]
        assert len(store.sessions[1].photos) == 2
        assert manager.photo_batch == []
        assert allocator.open_count == 0
        assert _preview_files(allocator) == []

    async def test_cancel_discards_without_upload(self, store, manager, allocator):
        manager.select_photos([photo_file("a.jpg"), photo_file("b.jpg")])
        manager.cancel()

        assert store.sessions[1].photos == []
        assert store.count("upload_photos") == 0
        assert allocator.open_count == 0
        assert _preview_files(allocator) == []
        assert not manager.has_pending

    async def test_failure_keeps_batch_for_retry(self, store, manager, allocator):
        batch = manager.select_photos([photo_file("a.jpg"), photo_file("b.jpg")])
        store.fail["upload_photos"] = NetworkError("Connection refused")

        with pytest.raises(UploadFailed):
            await manager.commit_photos()
        assert manager.photo_batch == batch
        assert allocator.open_count == 2
        assert store.sessions[1].photos == []

        await manager.commit_photos()
        assert len(store.sessions[1].photos) == 2
        assert allocator.open_count == 0

    async def test_store_errors_surface_as_upload_failed(self, store, manager):
        manager.select_photos([photo_file()])
        store.fail["upload_photos"] = SessionNotFound("gone")
        with pytest.raises(UploadFailed) as exc_info:
            await manager.commit_photos()
        assert isinstance(exc_info.value.__cause__, SessionNotFound)

    async def test_unexpected_errors_surface_as_upload_failed(self, store, manager, allocator):
        batch = manager.select_photos([photo_file()])
        store.fail["upload_photos"] = OSError("disk full")
        with pytest.raises(UploadFailed) as exc_info:
            await manager.commit_photos()
        assert isinstance(exc_info.value.__cause__, OSError)
        assert manager.photo_batch == batch
        assert allocator.open_count == 1

    async def test_commit_subset(self, manager, allocator):
        entries = manager.select_photos([photo_file("a.jpg"), photo_file("b.jpg")])
        await manager.commit_photos(entries[:1])
        assert manager.photo_batch == entries[1:]
        assert allocator.open_count == 1

    async def test_replaced_while_uploading(self, store, manager, allocator):
        manager.select_photos([photo_file("a.jpg")])
        replacement = []
        upload = store.upload_photos

        async def upload_and_reselect(session_id, files):
            replacement.extend(manager.select_photos([photo_file("b.jpg")]))
            return await upload(session_id, files)

        store.upload_photos = upload_and_reselect
        await manager.commit_photos()

        assert manager.photo_batch == replacement
        assert allocator.released == 1
        assert allocator.open_count == 1

    async def test_commit_nothing(self, store, manager):
        assert await manager.commit_photos() == []
        assert store.count("upload_photos") == 0

    async def test_released_entries_cannot_commit(self, store, manager):
        entries = manager.select_photos([photo_file("a.jpg")])
        manager.cancel_photos()
        with pytest.raises(ValidationError):
            await manager.commit_photos(entries)
        assert store.count("upload_photos") == 0


# ======================================================================
# Video
# ======================================================================


@pytest.mark.anyio
class TestVideoPreview:
    async def test_select_and_commit(self, store, manager, allocator):
        manager.select_video(video_file())
        video = await manager.commit_video()
        assert video.source_type == VideoSource.UPLOADED
        assert store.sessions[1].videos == [video]
        assert manager.video_preview is None
        assert allocator.open_count == 0

    async def test_replacement_releases_previous(self, manager, allocator):
        first = manager.select_video(video_file("a.mp4"))
        second = manager.select_video(video_file("b.mp4"))
        assert first.released
        assert manager.video_preview is second
        assert allocator.open_count == 1

    async def test_non_video_rejected(self, manager, allocator):
        with pytest.raises(ValidationError):
            manager.select_video(photo_file())
        assert allocator.allocated == 0

    async def test_unexpected_error_on_video(self, store, manager):
        manager.select_video(video_file())
        store.fail["upload_video"] = OSError("connection reset")
        with pytest.raises(UploadFailed):
            await manager.commit_video()
        assert manager.video_preview is not None

    async def test_failure_keeps_selection(self, store, manager, allocator):
        entry = manager.select_video(video_file())
        store.fail["upload_video"] = UploadFailed("HTTP 502")
        with pytest.raises(UploadFailed):
            await manager.commit_video()
        assert manager.video_preview is entry
        assert allocator.open_count == 1

    async def test_commit_without_selection(self, store, manager):
        assert await manager.commit_video() is None
        assert store.count("upload_video") == 0


# ======================================================================
# Teardown
# ======================================================================


class TestTeardown:
    def test_close_releases_everything(self, manager, allocator):
        manager.select_photos([photo_file("a.jpg"), photo_file("b.jpg")])
        manager.select_video(video_file())
        manager.close()
        assert allocator.open_count == 0
        assert _preview_files(allocator) == []

    def test_context_manager(self, store, allocator):
        store.add(make_session())
        with MediaPreviewManager(store, 1, allocator=allocator) as manager:
            manager.select_photos([photo_file()])
            manager.select_video(video_file())
        assert allocator.open_count == 0

    def test_close_twice(self, manager, allocator):
        manager.select_photos([photo_file()])
        manager.close()
        manager.close()
        assert allocator.released == 1
