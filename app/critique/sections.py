from __future__ import annotations

import logging
from statistics import median
from typing import Iterable, Literal, Sequence

from pydantic import BaseModel, ConfigDict

from app.core.config.heuristics import (
    SectionKeyword,
    canonical_section_order,
    header_max_chars,
    section_keywords,
    title_size_limits,
)
from app.layout.lines import PageLines
from app.layout.models import Line

from .geometry import line_box
from .issues import BoundingBox, SectionOrderIssue, SectionSpacingIssue, SectionTitleSizeIssue, section_label

logger = logging.getLogger(__name__)

HeaderMode = Literal["prefix", "contains"]

POINTS_PER_INCH = 72.0


class Section(BaseModel):
    model_config = ConfigDict(frozen=True)

    section: str
    page: int
    header: Line
    content: tuple[Line, ...] = ()


def match_header(
    line: Line,
    *,
    mode: HeaderMode = "prefix",
    keywords: Sequence[SectionKeyword] | None = None,
    max_chars: int | None = None,
) -> str | None:
    """Return the canonical section a header line names, or ``None`` for body lines."""
    text = line.text.lower().strip()
    limit = header_max_chars() if max_chars is None else max_chars
    if not text or len(text) >= limit:
        return None
    table = section_keywords() if keywords is None else keywords
    for entry in table:
        if mode == "prefix" and text.startswith(entry.keyword):
            return entry.section
        if mode == "contains" and entry.keyword in text:
            return entry.section
    return None


def _iter_document_lines(pages: Iterable[PageLines]) -> Iterable[tuple[PageLines, Line]]:
    for page in pages:
        for line in page.lines:
            yield page, line


def segment_sections(pages: Sequence[PageLines], *, keywords: Sequence[SectionKeyword] | None = None) -> list[Section]:
    """Bind each canonical section's first header to the lines up to the next header."""
    table = section_keywords() if keywords is None else keywords
    sections: list[Section] = []
    seen: set[str] = set()
    current: dict | None = None

    def flush() -> None:
        nonlocal current
        if current is not None:
            sections.append(Section(**current))
        current = None

    for page, line in _iter_document_lines(pages):
        name = match_header(line, keywords=table)
        if name is not None:
            flush()
            if name not in seen:
                seen.add(name)
                current = {"section": name, "page": page.page, "header": line, "content": ()}
            continue
        if current is not None:
            current["content"] = current["content"] + (line,)

    flush()
    return sections


def check_section_order(
    pages: Sequence[PageLines],
    *,
    keywords: Sequence[SectionKeyword] | None = None,
    canonical_order: Sequence[str] | None = None,
) -> list[SectionOrderIssue]:
    order = list(canonical_section_order() if canonical_order is None else canonical_order)
    table = section_keywords() if keywords is None else keywords

    found: list[tuple[str, PageLines, Line]] = []
    seen: set[str] = set()
    for page, line in _iter_document_lines(pages):
        name = match_header(line, mode="contains", keywords=table)
        if name is None or name in seen or name not in order:
            continue
        seen.add(name)
        found.append((name, page, line))

    if len(found) < 2:
        return []

    found_order = tuple(name for name, _, _ in found)
    expected_order = tuple(name for name in order if name in seen)
    for index, (actual, expected) in enumerate(zip(found_order, expected_order)):
        if actual == expected:
            continue
        name, page, header = found[index]
        found_text = " > ".join(section_label(item) for item in found_order)
        expected_text = " > ".join(section_label(item) for item in expected_order)
        return [
            SectionOrderIssue(
                page=page.page,
                bbox=line_box(page.layout.viewport, header),
                finding=f"Sections appear as {found_text}.",
                suggestion=f"Reorder sections as {expected_text}.",
                found_order=found_order,
                expected_order=expected_order,
                misplaced_section=name,
                mismatch_index=index,
            )
        ]
    return []


def check_section_spacing(
    pages: Sequence[PageLines],
    *,
    threshold_inches: float = 0.125,
    keywords: Sequence[SectionKeyword] | None = None,
) -> list[SectionSpacingIssue]:
    table = section_keywords() if keywords is None else keywords
    threshold_points = threshold_inches * POINTS_PER_INCH
    issues: list[SectionSpacingIssue] = []

    for page in pages:
        header_indexes: list[tuple[int, str]] = []
        for index, line in enumerate(page.lines):
            name = match_header(line, keywords=table)
            if name is not None:
                header_indexes.append((index, name))

        for (above_index, above_name), (below_index, below_name) in zip(header_indexes, header_indexes[1:]):
            content = page.lines[above_index + 1 : below_index]
            if not content:
                continue
            header = page.lines[below_index]
            last_line = content[-1]
            header_top = header.baseline_y + header.height
            gap = last_line.baseline_y - header_top
            if gap >= threshold_points:
                continue

            viewport = page.layout.viewport
            left = min([header.left] + [line.left for line in content])
            right = max([header.right] + [line.right for line in content])
            left_x, gap_top = viewport.to_viewport(left, last_line.baseline_y)
            right_x, _ = viewport.to_viewport(right, last_line.baseline_y)
            issues.append(
                SectionSpacingIssue(
                    page=page.page,
                    bbox=BoundingBox(x=left_x, y=gap_top, width=right_x - left_x, height=max(gap, 0.0)),
                    finding=(
                        f"Only {max(gap, 0.0):.1f}pt of space separates {section_label(above_name)} "
                        f"from {section_label(below_name)}."
                    ),
                    suggestion=(
                        f"Add at least {threshold_inches:g} inch of space above the "
                        f"{section_label(below_name)} header."
                    ),
                    above_section=above_name,
                    below_section=below_name,
                    gap_points=round(gap, 2),
                    threshold_points=threshold_points,
                )
            )
    return issues


def check_section_title_sizes(
    pages: Sequence[PageLines],
    *,
    keywords: Sequence[SectionKeyword] | None = None,
) -> list[SectionTitleSizeIssue]:
    table = section_keywords() if keywords is None else keywords
    limits = title_size_limits()
    min_body, max_body, min_contrast = limits.min_body_pts, limits.max_body_pts, limits.min_contrast_pts
    issues: list[SectionTitleSizeIssue] = []

    for page in pages:
        headers: list[tuple[Line, str]] = []
        body_heights: list[float] = []
        for line in page.lines:
            name = match_header(line, keywords=table)
            if name is not None:
                headers.append((line, name))
                continue
            body_heights.extend(
                fragment.box_height for fragment in line.fragments if min_body <= fragment.box_height <= max_body
            )

        if not headers or not body_heights:
            continue

        body_median = float(median(body_heights))
        for header, name in headers:
            if header.max_height - body_median > min_contrast:
                continue
            issues.append(
                SectionTitleSizeIssue(
                    page=page.page,
                    bbox=line_box(page.layout.viewport, header),
                    finding=(
                        f"The {section_label(name)} header ({header.max_height:g}pt) is about the same size "
                        f"as body text ({body_median:g}pt)."
                    ),
                    suggestion="Make section headers visibly larger or bolder than body text.",
                    section=name,
                    header_height=header.max_height,
                    body_median_height=body_median,
                )
            )
    logger.debug("title_size_check pages=%s issues=%s", len(pages), len(issues))
    return issues
