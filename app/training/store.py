"""
Training session store: the persistence collaborator of the editor.

:class:`TrainingSessionStore` is the surface the editing core needs.
:class:`HttpTrainingSessionStore` implements it against this service's
``/api/v1`` routes.  ``requests`` is blocking, so each call runs in a
worker thread and the coroutine API never blocks the caller's loop.

Nothing is retried here.  Retrying is up to the caller.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Optional, Protocol, Sequence

import anyio
import requests
from pydantic import BaseModel, ConfigDict

from app.core.config import settings
from app.schemas.player import PlayerSummary
from app.schemas.training_session import (AttendanceRecord, AttendanceUpdate, CompletionRequest, DocumentRef,
                                          PhotoEntry, TrainingSessionResponse, TrainingSessionUpdate, VideoEntry, )
from app.training.errors import (ERRORS_BY_CODE, NetworkError, SessionNotFound, TrainingSessionError, UploadFailed,
                                 ValidationError, )

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class SelectedFile(BaseModel):
    """A file picked locally, not yet uploaded."""

    model_config = ConfigDict(frozen=True)

    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def as_multipart(self, field: str) -> tuple[str, tuple[str, bytes, str]]:
        return field, (self.name, self.data, self.content_type)


class TrainingSessionStore(Protocol):
    async def get_roster(self, team_id: int) -> list[PlayerSummary]: ...

    async def get_session(self, session_id: int) -> TrainingSessionResponse: ...

    async def update_attendance(self, session_id: int,
                                records: Sequence[AttendanceRecord]) -> TrainingSessionResponse: ...

    async def update_session(self, session_id: int, patch: TrainingSessionUpdate) -> TrainingSessionResponse: ...

    async def complete_session(self, session_id: int, request: CompletionRequest) -> TrainingSessionResponse: ...

    async def upload_photos(self, session_id: int, files: Sequence[SelectedFile]) -> list[PhotoEntry]: ...

    async def upload_video(self, session_id: int, file: SelectedFile) -> VideoEntry: ...

    async def upload_plan_document(self, session_id: int, file: SelectedFile) -> DocumentRef: ...

    async def append_video(self, session_id: int, entry: VideoEntry) -> VideoEntry: ...


class HttpTrainingSessionStore:
    """:class:`TrainingSessionStore` over HTTP.

    *http* is anything with a ``requests.Session``-style ``request``
    method; a fresh :class:`requests.Session` is used by default.
    """

    def __init__(self, base_url: Optional[str] = None, http: Any = None, timeout: Optional[float] = None):
        self.base_url = (settings.API_BASE_URL if base_url is None else base_url).rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    # ------------------------------------------------------------------
    # Store API
    # ------------------------------------------------------------------

    async def get_roster(self, team_id: int) -> list[PlayerSummary]:
        payload = await self._call("GET", f"/teams/{team_id}/roster")
        return [PlayerSummary.model_validate(p) for p in payload]

    async def get_session(self, session_id: int) -> TrainingSessionResponse:
        payload = await self._call("GET", f"/training/sessions/{session_id}")
        return TrainingSessionResponse.model_validate(payload)

    async def update_attendance(self, session_id: int,
                                records: Sequence[AttendanceRecord]) -> TrainingSessionResponse:
        body = AttendanceUpdate(attendance=list(records)).model_dump(mode="json")
        payload = await self._call("PUT", f"/training/sessions/{session_id}/attendance", json=body)
        return TrainingSessionResponse.model_validate(payload)

    async def update_session(self, session_id: int, patch: TrainingSessionUpdate) -> TrainingSessionResponse:
        body = patch.model_dump(mode="json", exclude_none=True)
        payload = await self._call("PATCH", f"/training/sessions/{session_id}", json=body)
        return TrainingSessionResponse.model_validate(payload)

    async def complete_session(self, session_id: int, request: CompletionRequest) -> TrainingSessionResponse:
        payload = await self._call("POST", f"/training/sessions/{session_id}/complete",
                                   json=request.model_dump(mode="json"))
        return TrainingSessionResponse.model_validate(payload)

    async def upload_photos(self, session_id: int, files: Sequence[SelectedFile]) -> list[PhotoEntry]:
        payload = await self._call("POST", f"/training/sessions/{session_id}/photos", upload=True,
                                   files=[f.as_multipart("photos") for f in files])
        return [PhotoEntry.model_validate(p) for p in payload]

    async def upload_video(self, session_id: int, file: SelectedFile) -> VideoEntry:
        payload = await self._call("POST", f"/training/sessions/{session_id}/video", upload=True,
                                   files=[file.as_multipart("video")])
        return VideoEntry.model_validate(payload)

    async def upload_plan_document(self, session_id: int, file: SelectedFile) -> DocumentRef:
        payload = await self._call("POST", f"/training/sessions/{session_id}/plan", upload=True,
                                   files=[file.as_multipart("document")])
        return DocumentRef.model_validate(payload)

    async def append_video(self, session_id: int, entry: VideoEntry) -> VideoEntry:
        body = {"url": entry.url, "caption": entry.caption}
        payload = await self._call("POST", f"/training/sessions/{session_id}/videos", json=body)
        return VideoEntry.model_validate(payload)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _call(self, method: str, path: str, **kwargs) -> Any:
        return await anyio.to_thread.run_sync(functools.partial(self._request, method, path, **kwargs))

    def _request(self, method: str, path: str, *, upload: bool = False, **kwargs) -> Any:
        url = f"{self.base_url}{API_PREFIX}{path}"
        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            error_cls = UploadFailed if upload else NetworkError
            raise error_cls(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            raise self._error_from(response, upload)
        return response.json()

    @staticmethod
    def _error_from(response: Any, upload: bool) -> TrainingSessionError:
        """Map an error response back onto the error taxonomy."""
        try:
            body = response.json()
        except ValueError:
            body = None
        detail = body.get("detail") if isinstance(body, dict) else None

        code = message = None
        if isinstance(detail, dict):
            code, message = detail.get("code"), detail.get("message")
        elif detail:
            message = str(detail)
        message = message or f"HTTP {response.status_code}"

        if code in ERRORS_BY_CODE:
            return ERRORS_BY_CODE[code](message)
        if response.status_code == 404:
            return SessionNotFound(message)
        if response.status_code == 422:
            return ValidationError(message)
        return (UploadFailed if upload else NetworkError)(message)
