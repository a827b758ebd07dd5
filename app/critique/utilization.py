from __future__ import annotations

from typing import Iterable, Sequence

from app.core.config.heuristics import SectionKeyword, section_keywords, utilization_sections
from app.layout.lines import PageLines
from app.layout.models import Line

from .issues import BoundingBox, LineChoice, LineWhitespaceIssue
from .sections import match_header

DEFAULT_WHITESPACE_THRESHOLD = 0.25
EXPAND_UTILIZATION_CEILING = 0.5
MARKER_HEIGHT = 2.0


def _line_choices(recommendation: str, threshold: float) -> tuple[LineChoice, ...]:
    target = int(round((1.0 - threshold) * 100))
    return (
        LineChoice(
            key="expand",
            label="Expand",
            description=f"Add more detail to bring this line past the {target}% threshold.",
            recommended=recommendation == "expand",
        ),
        LineChoice(
            key="shorten",
            label="Shorten",
            description="Try condensing this to one line by reducing word count.",
            recommended=recommendation == "shorten",
        ),
    )


def _anchor_header(
    lines: Iterable[Line],
    keywords: Sequence[SectionKeyword],
    anchor_sections: frozenset[str],
) -> tuple[Line | None, set[float]]:
    anchor: Line | None = None
    header_ys: set[float] = set()
    for line in lines:
        name = match_header(line, mode="contains", keywords=keywords)
        if name is None:
            continue
        header_ys.add(line.baseline_y)
        if name not in anchor_sections:
            continue
        if anchor is None or line.baseline_y > anchor.baseline_y:
            anchor = line
    return anchor, header_ys


def analyze_line_utilization(
    page: PageLines,
    *,
    threshold: float = DEFAULT_WHITESPACE_THRESHOLD,
    keywords: Sequence[SectionKeyword] | None = None,
    anchor_sections: frozenset[str] | None = None,
) -> list[LineWhitespaceIssue]:
    """Flag section content lines that leave more than ``threshold`` of the block width unused.

    Content is every non-header line below the topmost section header. The widest
    content line sets the reference bounds.
    """
    table = section_keywords() if keywords is None else keywords
    sections = utilization_sections() if anchor_sections is None else anchor_sections

    anchor, header_ys = _anchor_header(page.lines, table, sections)
    if anchor is None:
        return []

    content = [
        line
        for line in page.lines
        if line.baseline_y < anchor.baseline_y and line.baseline_y not in header_ys
    ]
    if not content:
        return []

    ref_left = min(line.left for line in content)
    ref_right = max(line.right for line in content)
    ref_width = ref_right - ref_left
    if ref_width <= 0:
        return []

    viewport = page.layout.viewport
    issues: list[LineWhitespaceIssue] = []
    for line in content:
        unused = ref_right - line.right
        unused_ratio = unused / ref_width
        if unused_ratio <= threshold:
            continue
        utilization = (line.right - ref_left) / ref_width
        recommendation = "expand" if utilization <= EXPAND_UTILIZATION_CEILING else "shorten"
        x, baseline = viewport.to_viewport(line.right, line.baseline_y)
        issues.append(
            LineWhitespaceIssue(
                page=page.page,
                bbox=BoundingBox(x=x, y=baseline - 1.0, width=unused, height=MARKER_HEIGHT),
                finding=f"This line leaves {unused_ratio:.0%} of the line width unused.",
                suggestion=(
                    "Expand this line with more detail."
                    if recommendation == "expand"
                    else "Shorten this line so it does not wrap onto a mostly empty line."
                ),
                line_text=line.text,
                utilization=round(utilization, 4),
                unused_ratio=round(unused_ratio, 4),
                recommendation=recommendation,
                choices=_line_choices(recommendation, threshold),
            )
        )
    return issues
