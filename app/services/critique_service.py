from __future__ import annotations

import base64
import binascii
import logging
import secrets
import threading
import time

from pydantic import ValidationError

from app.core.config import settings
from app.critique.aggregate import ResultSet
from app.critique.pipeline import CritiqueThresholds
from app.critique.session import AnalysisSession, CritiqueInputError
from app.layout.models import DocumentLayout, PageRaster
from app.schemas.critique import AnalyzeRequest, DocumentPayload, RasterPayload, SelectionPayload

logger = logging.getLogger(__name__)

_sessions: dict[str, tuple[AnalysisSession, float]] = {}
_sessions_lock = threading.Lock()


class SessionNotFoundError(KeyError):
    pass


def decode_raster(payload: RasterPayload | None) -> PageRaster | None:
    """Decode a base64 RGBA buffer; an unreadable buffer means no raster for this pass."""
    if payload is None:
        return None
    try:
        data = base64.b64decode(payload.rgba_base64, validate=True)
    except (binascii.Error, ValueError) as exc:
        logger.warning("critique_raster_decode_failed width=%s height=%s: %s", payload.width, payload.height, exc)
        return None
    return PageRaster(width=payload.width, height=payload.height, data=data, pixel_ratio=payload.pixel_ratio)


def build_document(payload: DocumentPayload) -> DocumentLayout:
    try:
        return DocumentLayout(pages=tuple(payload.pages))
    except ValidationError as exc:
        raise CritiqueInputError(str(exc)) from exc


def _new_session(payload: DocumentPayload) -> AnalysisSession:
    document = build_document(payload)
    return AnalysisSession(document, payload.thresholds or CritiqueThresholds())


async def analyze_document(payload: AnalyzeRequest) -> ResultSet:
    """One-shot analysis: document-level detectors plus an optional page selection."""
    session = _new_session(payload)
    result = await session.load()
    if payload.selection is not None:
        selection = payload.selection
        committed = await session.select(selection.page, selection.zoom, decode_raster(selection.raster))
        result = committed or session.result_set
    return result


def purge_expired_sessions() -> int:
    cutoff = time.monotonic() - max(1, settings.session_ttl_seconds)
    with _sessions_lock:
        expired = [session_id for session_id, (_, touched) in _sessions.items() if touched < cutoff]
        for session_id in expired:
            del _sessions[session_id]
    return len(expired)


def _store_session(session: AnalysisSession) -> str:
    session_id = secrets.token_urlsafe(12)
    with _sessions_lock:
        if len(_sessions) >= max(1, settings.max_sessions):
            oldest = min(_sessions.items(), key=lambda item: item[1][1])[0]
            del _sessions[oldest]
        _sessions[session_id] = (session, time.monotonic())
    return session_id


def get_session(session_id: str) -> AnalysisSession:
    with _sessions_lock:
        entry = _sessions.get(session_id)
        if entry is None:
            raise SessionNotFoundError(session_id)
        _sessions[session_id] = (entry[0], time.monotonic())
        return entry[0]


def delete_session(session_id: str) -> bool:
    with _sessions_lock:
        return _sessions.pop(session_id, None) is not None


def clear_sessions() -> None:
    with _sessions_lock:
        _sessions.clear()


async def create_session(payload: DocumentPayload) -> tuple[str, AnalysisSession]:
    session = _new_session(payload)
    await session.load()
    session_id = _store_session(session)
    logger.info("critique_session_created pages=%s", session.document.page_count)
    return session_id, session


async def select_page(session_id: str, payload: SelectionPayload) -> ResultSet | None:
    session = get_session(session_id)
    return await session.select(payload.page, payload.zoom, decode_raster(payload.raster))
