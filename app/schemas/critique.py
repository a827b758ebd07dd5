from __future__ import annotations

from pydantic import BaseModel, Field

from app.critique.aggregate import ResultSet
from app.critique.pipeline import CritiqueThresholds
from app.layout.models import PageLayout


class RasterPayload(BaseModel):
    width: int = Field(ge=1, le=20000)
    height: int = Field(ge=1, le=20000)
    pixel_ratio: float = Field(default=1.0, gt=0.0, le=8.0)
    rgba_base64: str = Field(min_length=1)


class DocumentPayload(BaseModel):
    pages: list[PageLayout] = Field(min_length=1, max_length=50)
    thresholds: CritiqueThresholds | None = None


class SelectionPayload(BaseModel):
    page: int = Field(default=1, ge=1)
    zoom: float = 1.0
    raster: RasterPayload | None = None


class AnalyzeRequest(DocumentPayload):
    selection: SelectionPayload | None = None


class SessionResponse(BaseModel):
    session_id: str
    page_count: int
    result: ResultSet


class SelectionResponse(BaseModel):
    committed: bool
    result: ResultSet | None = None
