from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from app.core.rate_limit import rate_limit
from app.critique.aggregate import ResultSet
from app.critique.session import CritiqueInputError
from app.schemas.critique import (
    AnalyzeRequest,
    DocumentPayload,
    SelectionPayload,
    SelectionResponse,
    SessionResponse,
)
from app.services.critique_service import (
    SessionNotFoundError,
    analyze_document,
    create_session,
    delete_session,
    get_session,
    select_page,
)

router = APIRouter()


def _raise_input_error(exc: CritiqueInputError) -> None:
    raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


def _raise_not_found(exc: SessionNotFoundError) -> None:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Critique session not found.") from exc


@router.post("/critique/analyze", response_model=ResultSet)
@rate_limit()
async def critique_analyze(request: Request, payload: AnalyzeRequest):
    _ = request
    try:
        return await analyze_document(payload)
    except CritiqueInputError as exc:
        _raise_input_error(exc)


@router.post("/critique/sessions", response_model=SessionResponse)
@rate_limit()
async def critique_create_session(request: Request, payload: DocumentPayload):
    _ = request
    try:
        session_id, session = await create_session(payload)
    except CritiqueInputError as exc:
        _raise_input_error(exc)
    return SessionResponse(session_id=session_id, page_count=session.document.page_count, result=session.result_set)


@router.post("/critique/sessions/{session_id}/selection", response_model=SelectionResponse)
@rate_limit()
async def critique_select(request: Request, session_id: str, payload: SelectionPayload):
    _ = request
    try:
        result = await select_page(session_id, payload)
    except SessionNotFoundError as exc:
        _raise_not_found(exc)
    except CritiqueInputError as exc:
        _raise_input_error(exc)
    return SelectionResponse(committed=result is not None, result=result)


@router.get("/critique/sessions/{session_id}", response_model=ResultSet)
async def critique_get_session(session_id: str):
    try:
        return get_session(session_id).result_set
    except SessionNotFoundError as exc:
        _raise_not_found(exc)


@router.delete("/critique/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def critique_delete_session(session_id: str):
    if not delete_session(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Critique session not found.")
