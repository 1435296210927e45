"""
Local previews of photos and videos selected but not yet uploaded.

Each selected file gets a *temp reference*: a locally resolvable handle
(by default a file under the preview directory) used to show the file
before it is uploaded.  A handle is released exactly once, by whichever
comes first of:

- a successful commit of the batch it belongs to,
- :meth:`MediaPreviewManager.cancel`,
- being replaced by a new selection,
- :meth:`MediaPreviewManager.close` (teardown of the owning view).

Allocators count allocations and releases so the balance can be
checked: after any selection followed by commit or cancel,
``allocator.open_count == 0``.

Nothing here waits on the network except the two ``commit_*`` methods.
"""

from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from app.core.config import settings
from app.schemas.training_session import PhotoEntry, VideoEntry
from app.training.errors import UploadFailed, ValidationError
from app.training.store import SelectedFile, TrainingSessionStore

logger = logging.getLogger(__name__)


# ======================================================================
# Temp references
# ======================================================================


class TempRefAllocator(ABC):
    """Creates and destroys temp references, keeping a running balance."""

    def __init__(self):
        self.allocated = 0
        self.released = 0

    @property
    def open_count(self) -> int:
        return self.allocated - self.released

    def allocate(self, file: SelectedFile) -> PreviewHandle:
        ref = self._create(file)
        self.allocated += 1
        logger.debug("Allocated preview %s for %s", ref, file.name)
        return PreviewHandle(self, ref)

    def _release(self, ref: str) -> None:
        try:
            self._destroy(ref)
        finally:
            self.released += 1
            logger.debug("Released preview %s", ref)

    @abstractmethod
    def _create(self, file: SelectedFile) -> str:
        ...

    @abstractmethod
    def _destroy(self, ref: str) -> None:
        ...


class TempFileAllocator(TempRefAllocator):
    """Temp references backed by files, addressed by ``file://`` URI."""

    def __init__(self, directory: Optional[str | os.PathLike] = None):
        super().__init__()
        self.directory = Path(directory or settings.PREVIEW_DIR or tempfile.gettempdir())
        self._paths: dict[str, Path] = {}

    def _create(self, file: SelectedFile) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix="preview-", suffix=Path(file.name).suffix, dir=self.directory)
        with os.fdopen(fd, "wb") as fh:
            fh.write(file.data)
        path = Path(name)
        ref = path.resolve().as_uri()
        self._paths[ref] = path
        return ref

    def _destroy(self, ref: str) -> None:
        path = self._paths.pop(ref, None)
        if path is not None:
            path.unlink(missing_ok=True)


class PreviewHandle:
    """Scoped temp reference.  :meth:`release` is effective only once."""

    def __init__(self, allocator: TempRefAllocator, ref: str):
        self._allocator = allocator
        self.ref = ref
        self.released = False

    def release(self) -> bool:
        if self.released:
            return False
        self.released = True
        self._allocator._release(self.ref)
        return True

    def __repr__(self) -> str:
        state = "released" if self.released else "open"
        return f"<PreviewHandle {self.ref} {state}>"


@dataclass(frozen=True, eq=False)
class PreviewEntry:
    """A selected file together with its preview handle."""

    file: SelectedFile
    handle: PreviewHandle

    @property
    def name(self) -> str:
        return self.file.name

    @property
    def temp_ref(self) -> str:
        return self.handle.ref

    @property
    def released(self) -> bool:
        return self.handle.released


# ======================================================================
# Manager
# ======================================================================


def _release_all(entries: Iterable[PreviewEntry]) -> None:
    for entry in entries:
        entry.handle.release()


def _check_type(file: SelectedFile, prefix: str, label: str) -> None:
    if not file.content_type.startswith(prefix):
        raise ValidationError(f"'{file.name}' is not {label} ({file.content_type})")


class MediaPreviewManager:
    """Working photo batch and video selection for one training session."""

    def __init__(self, store: TrainingSessionStore, session_id: int, allocator: Optional[TempRefAllocator] = None,
                 max_photos: Optional[int] = None, ):
        self.store = store
        self.session_id = session_id
        self.allocator = allocator or TempFileAllocator()
        self.max_photos = max_photos or settings.MAX_PHOTOS_PER_UPLOAD
        self._photos: list[PreviewEntry] = []
        self._video: Optional[PreviewEntry] = None

    # ------------------------------------------------------------------
    # State for rendering
    # ------------------------------------------------------------------

    @property
    def photo_batch(self) -> list[PreviewEntry]:
        return list(self._photos)

    @property
    def video_preview(self) -> Optional[PreviewEntry]:
        return self._video

    @property
    def has_pending(self) -> bool:
        return bool(self._photos) or self._video is not None

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_photos(self, files: Iterable[SelectedFile]) -> list[PreviewEntry]:
        """Replace the working batch with *files*.

        An empty selection keeps the current batch.  Validation happens
        before anything is allocated.
        """
        files = list(files)
        if not files:
            return self.photo_batch
        if len(files) > self.max_photos:
            raise ValidationError(f"At most {self.max_photos} photos can be uploaded at once")
        for file in files:
            _check_type(file, "image/", "an image")

        entries: list[PreviewEntry] = []
        try:
            for file in files:
                entries.append(PreviewEntry(file, self.allocator.allocate(file)))
        except Exception:
            _release_all(entries)
            raise

        previous, self._photos = self._photos, entries
        _release_all(previous)
        return list(entries)

    def select_video(self, file: SelectedFile) -> PreviewEntry:
        _check_type(file, "video/", "a video")
        entry = PreviewEntry(file, self.allocator.allocate(file))
        previous, self._video = self._video, entry
        if previous is not None:
            previous.handle.release()
        return entry

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    async def commit_photos(self, entries: Optional[Sequence[PreviewEntry]] = None) -> list[PhotoEntry]:
        """Upload *entries* (default: the working batch) in one request.

        On success their handles are released and they leave the working
        batch.  On failure :class:`UploadFailed` is raised and the batch
        is kept for a retry.
        """
        entries = list(self._photos if entries is None else entries)
        if not entries:
            return []
        if any(e.released for e in entries):
            raise ValidationError("Some selected photos were discarded before upload")

        try:
            persisted = await self.store.upload_photos(self.session_id, [e.file for e in entries])
        except UploadFailed:
            raise
        except Exception as e:
            raise UploadFailed(f"Photo upload failed: {e}", session_id=self.session_id) from e

        _release_all(entries)
        self._photos = [p for p in self._photos if all(p is not e for e in entries)]
        logger.info("Uploaded %d photos to training session %s", len(entries), self.session_id)
        return persisted

    async def commit_video(self, entry: Optional[PreviewEntry] = None) -> Optional[VideoEntry]:
        entry = self._video if entry is None else entry
        if entry is None:
            return None
        if entry.released:
            raise ValidationError("The selected video was discarded before upload")

        try:
            persisted = await self.store.upload_video(self.session_id, entry.file)
        except UploadFailed:
            raise
        except Exception as e:
            raise UploadFailed(f"Video upload failed: {e}", session_id=self.session_id) from e

        entry.handle.release()
        if self._video is entry:
            self._video = None
        logger.info("Uploaded video %s to training session %s", entry.name, self.session_id)
        return persisted

    # ------------------------------------------------------------------
    # Discard
    # ------------------------------------------------------------------

    def cancel_photos(self) -> None:
        previous, self._photos = self._photos, []
        _release_all(previous)

    def cancel_video(self) -> None:
        previous, self._video = self._video, None
        if previous is not None:
            previous.handle.release()

    def cancel(self) -> None:
        """Drop every pending selection without uploading."""
        self.cancel_photos()
        self.cancel_video()

    def close(self) -> None:
        self.cancel()

    def __enter__(self) -> MediaPreviewManager:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
