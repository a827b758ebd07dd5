from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from app.core.config import settings
from app.layout.lines import PageLines, build_page_lines
from app.layout.models import DocumentLayout, PageLayout, PageRaster
from app.layout.raster import scan_margins

from .aggregate import SectionSummary, summarize_sections
from .issues import Issue
from .margins import margin_issues
from .patterns import detect_degree_abbreviations, detect_season_dates
from .sections import check_section_order, check_section_spacing, check_section_title_sizes, segment_sections
from .utilization import analyze_line_utilization

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CritiqueThresholds(BaseModel):
    """Host-overridable constants; defaults come from the environment."""

    model_config = ConfigDict(frozen=True)

    near_white_threshold: int = Field(default_factory=lambda: settings.near_white_threshold, ge=0, le=255)
    margin_threshold_inches: float = Field(default_factory=lambda: settings.margin_threshold_inches, gt=0.0)
    line_whitespace_threshold: float = Field(
        default_factory=lambda: settings.line_whitespace_threshold, gt=0.0, lt=1.0
    )
    section_spacing_inches: float = Field(default_factory=lambda: settings.section_spacing_inches, ge=0.0)
    line_tolerance_pts: float = Field(default_factory=lambda: settings.line_tolerance_pts, ge=0.0)
    season_lookahead: int = Field(default_factory=lambda: settings.season_lookahead, ge=1, le=20)


@dataclass(frozen=True)
class DocumentFindings:
    issues: tuple[Issue, ...]
    sections: tuple[SectionSummary, ...]


def _run_detector(name: str, detector: Callable[[], list[T]]) -> list[T]:
    started_at = time.perf_counter()
    try:
        found = detector()
    except Exception as exc:
        logger.warning("critique_detector_failed detector=%s: %s", name, exc, exc_info=True)
        return []
    logger.debug(
        "critique_detector_done detector=%s issues=%s duration_ms=%s",
        name,
        len(found),
        int((time.perf_counter() - started_at) * 1000),
    )
    return found


def run_document_detectors(document: DocumentLayout, thresholds: CritiqueThresholds) -> DocumentFindings:
    """Zoom-independent detectors, run once per document load."""
    pages: list[PageLines] = [build_page_lines(page, thresholds.line_tolerance_pts) for page in document.pages]

    issues: list[Issue] = []
    issues += _run_detector(
        "season_dates",
        lambda: detect_season_dates(document.pages, lookahead=thresholds.season_lookahead),
    )
    issues += _run_detector(
        "degree_abbreviations",
        lambda: detect_degree_abbreviations(document.pages, tolerance=thresholds.line_tolerance_pts),
    )
    issues += _run_detector("section_order", lambda: check_section_order(pages))
    issues += _run_detector(
        "section_spacing",
        lambda: check_section_spacing(pages, threshold_inches=thresholds.section_spacing_inches),
    )
    issues += _run_detector("section_title_size", lambda: check_section_title_sizes(pages))
    sections = _run_detector("segment_sections", lambda: segment_sections(pages))

    logger.info("critique_document_pass pages=%s issues=%s", document.page_count, len(issues))
    return DocumentFindings(issues=tuple(issues), sections=summarize_sections(sections))


def run_page_detectors(
    layout: PageLayout | None,
    raster: PageRaster | None,
    *,
    zoom: float,
    thresholds: CritiqueThresholds,
) -> tuple[Issue, ...]:
    """Detectors tied to the selected page and zoom. Missing inputs skip only their detector."""
    issues: list[Issue] = []

    if raster is not None and layout is not None:
        def margins() -> list[Issue]:
            scanned = scan_margins(raster, thresholds.near_white_threshold)
            if scanned is None:
                return []
            return margin_issues(
                layout.page,
                raster,
                scanned,
                zoom=zoom,
                threshold_inches=thresholds.margin_threshold_inches,
            )

        issues += _run_detector("margins", margins)

    if layout is not None:
        issues += _run_detector(
            "line_utilization",
            lambda: analyze_line_utilization(
                build_page_lines(layout, thresholds.line_tolerance_pts),
                threshold=thresholds.line_whitespace_threshold,
            ),
        )

    logger.info(
        "critique_page_pass page=%s zoom=%s raster=%s issues=%s",
        layout.page if layout is not None else None,
        zoom,
        raster is not None,
        len(issues),
    )
    return tuple(issues)
