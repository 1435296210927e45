"""
Training session endpoints.

Reads, attendance and detail edits, the transactional completion, and
media uploads for a single training session.
"""

import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlmodel import Session

from app.api.dependencies import get_media_storage
from app.db.session import get_db
from app.schemas.training_session import (AttendanceUpdate, CompletionRequest, DocumentRef, PhotoEntry, SessionStatus,
                                          TrainingSessionResponse, TrainingSessionUpdate, VideoEntry,
                                          VideoLinkCreate, )
from app.services.media_storage import MediaStorage
from app.services.training_session_service import TrainingSessionService

router = APIRouter()


@router.get("", summary="List a team's training sessions.", response_model=list[TrainingSessionResponse], )
def list_sessions(team_id: int = Query(..., description="Team whose sessions to list"),
                  session_status: Optional[SessionStatus] = Query(None, alias="status"),
                  start: Optional[datetime.date] = Query(None, description="Range start (inclusive)"),
                  end: Optional[datetime.date] = Query(None, description="Range end (inclusive)"),
                  db: Session = Depends(get_db), ):
    service = TrainingSessionService(db)
    return service.list_for_team(team_id, session_status, start, end)


@router.get("/{session_id}", summary="Get a training session.", response_model=TrainingSessionResponse, )
def get_session(session_id: int, db: Session = Depends(get_db)):
    service = TrainingSessionService(db)
    return service.get(session_id)


@router.put("/{session_id}/attendance", summary="Replace the session's attendance (draft save).",
            response_model=TrainingSessionResponse, )
def update_attendance(session_id: int, data: AttendanceUpdate, db: Session = Depends(get_db)):
    service = TrainingSessionService(db)
    return service.update_attendance(session_id, data)


@router.patch("/{session_id}", summary="Update notes, rating or status.", response_model=TrainingSessionResponse, )
def update_session(session_id: int, data: TrainingSessionUpdate, db: Session = Depends(get_db)):
    service = TrainingSessionService(db)
    return service.update_session(session_id, data)


@router.post("/{session_id}/complete", summary="Complete the session with attendance, notes and rating.",
             response_model=TrainingSessionResponse, )
def complete_session(session_id: int, data: CompletionRequest, db: Session = Depends(get_db)):
    service = TrainingSessionService(db)
    return service.complete(session_id, data)


@router.post("/{session_id}/photos", summary="Upload photos in one batch.", response_model=list[PhotoEntry],
             status_code=status.HTTP_201_CREATED, )
def upload_photos(session_id: int, photos: list[UploadFile] = File(...), db: Session = Depends(get_db),
                  storage: MediaStorage = Depends(get_media_storage), ):
    service = TrainingSessionService(db, storage)
    return service.upload_photos(session_id, photos)


@router.post("/{session_id}/video", summary="Upload a video file.", response_model=VideoEntry,
             status_code=status.HTTP_201_CREATED, )
def upload_video(session_id: int, video: UploadFile = File(...), caption: Optional[str] = Form(None),
                 db: Session = Depends(get_db), storage: MediaStorage = Depends(get_media_storage), ):
    service = TrainingSessionService(db, storage)
    return service.upload_video(session_id, video, caption)


@router.post("/{session_id}/videos", summary="Link an externally hosted video.", response_model=VideoEntry,
             status_code=status.HTTP_201_CREATED, )
def add_video_link(session_id: int, data: VideoLinkCreate, db: Session = Depends(get_db)):
    service = TrainingSessionService(db)
    return service.add_video_link(session_id, data)


@router.post("/{session_id}/plan", summary="Upload the training plan document (PDF/DOC/DOCX).",
             response_model=DocumentRef, status_code=status.HTTP_201_CREATED, )
def upload_plan(session_id: int, document: UploadFile = File(...), db: Session = Depends(get_db),
                storage: MediaStorage = Depends(get_media_storage), ):
    service = TrainingSessionService(db, storage)
    return service.upload_plan(session_id, document)
