from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from app.core.config.heuristics import zoom_levels
from app.layout.models import DocumentLayout, PageRaster

from .aggregate import ResultSet, SectionSummary, build_result_set
from .issues import Issue
from .pipeline import CritiqueThresholds, run_document_detectors, run_page_detectors

logger = logging.getLogger(__name__)

RasterSource = Callable[[int, float], Awaitable[PageRaster | None]]


class CritiqueInputError(ValueError):
    pass


@dataclass(frozen=True)
class Selection:
    """The (page, zoom) a pass targets, tagged with the generation that started it."""

    page: int
    zoom: float
    generation: int


def validate_zoom(zoom: float) -> float:
    levels = zoom_levels()
    for level in levels:
        if abs(level - zoom) < 1e-9:
            return level
    raise CritiqueInputError(f"zoom {zoom} is not one of {', '.join(f'{level:g}' for level in levels)}")


def zoom_in(zoom: float) -> float:
    levels = zoom_levels()
    higher = [level for level in levels if level > zoom + 1e-9]
    return higher[0] if higher else levels[-1]


def zoom_out(zoom: float) -> float:
    levels = zoom_levels()
    lower = [level for level in levels if level < zoom - 1e-9]
    return lower[-1] if lower else levels[0]


class AnalysisSession:
    """Owns the current result set for one loaded document.

    Every trigger bumps a generation counter. A pass keeps the generation it
    started with and commits only if that generation is still current, so a
    pass overtaken by newer navigation is dropped instead of merged.
    """

    def __init__(self, document: DocumentLayout, thresholds: CritiqueThresholds | None = None) -> None:
        self.document = document
        self.thresholds = thresholds or CritiqueThresholds()
        self._generation = 0
        self._document_generation = 0
        self._document_issues: tuple[Issue, ...] = ()
        self._sections: tuple[SectionSummary, ...] = ()
        self._selection: Selection | None = None
        self._page_issues: tuple[Issue, ...] = ()
        self._result = ResultSet()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def selection(self) -> Selection | None:
        return self._selection

    @property
    def result_set(self) -> ResultSet:
        return self._result

    def _publish(self) -> ResultSet:
        selection = self._selection
        self._result = build_result_set(
            self._document_issues,
            self._page_issues,
            generation=self._generation,
            page=selection.page if selection else None,
            zoom=selection.zoom if selection else None,
            sections=self._sections,
        )
        return self._result

    async def load(self) -> ResultSet:
        """Run the zoom-independent detectors for the whole document."""
        self._document_generation += 1
        document_generation = self._document_generation
        findings = await asyncio.to_thread(run_document_detectors, self.document, self.thresholds)
        if document_generation != self._document_generation:
            logger.info("critique_stale_document_pass generation=%s", document_generation)
            return self._result
        self._document_issues = findings.issues
        self._sections = findings.sections
        return self._publish()

    def begin_selection(self, page: int, zoom: float) -> Selection:
        """Start a new (page, zoom) pass and drop page-level issues from the visible result."""
        if page < 1 or page > self.document.page_count:
            raise CritiqueInputError(f"page {page} out of range 1..{self.document.page_count}")
        level = validate_zoom(zoom)
        self._generation += 1
        self._selection = Selection(page=page, zoom=level, generation=self._generation)
        self._page_issues = ()
        self._publish()
        return self._selection

    def is_current(self, selection: Selection) -> bool:
        return selection.generation == self._generation

    async def analyze_selection(self, selection: Selection, raster: PageRaster | None) -> ResultSet | None:
        """Run the page-level detectors for ``selection``; ``None`` means the pass went stale."""
        layout = self.document.get_page(selection.page)
        issues = await asyncio.to_thread(
            run_page_detectors,
            layout,
            raster,
            zoom=selection.zoom,
            thresholds=self.thresholds,
        )
        if not self.is_current(selection):
            logger.info(
                "critique_stale_page_pass page=%s zoom=%s generation=%s current=%s",
                selection.page,
                selection.zoom,
                selection.generation,
                self._generation,
            )
            return None
        self._page_issues = issues
        return self._publish()

    async def select(
        self,
        page: int,
        zoom: float,
        raster: PageRaster | None = None,
        *,
        raster_source: RasterSource | None = None,
    ) -> ResultSet | None:
        selection = self.begin_selection(page, zoom)
        if raster is None and raster_source is not None:
            try:
                raster = await raster_source(selection.page, selection.zoom)
            except Exception as exc:
                logger.warning("critique_raster_unavailable page=%s zoom=%s: %s", page, zoom, exc)
                raster = None
        return await self.analyze_selection(selection, raster)
