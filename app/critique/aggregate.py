from __future__ import annotations

from collections import Counter, defaultdict
from typing import Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .issues import ISSUE_KINDS, Issue, section_label
from .sections import Section


class SectionSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    section: str
    label: str
    page: int
    content_lines: int


class LegendEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str
    count: int
    message: str


class ResultSet(BaseModel):
    """Every current issue for one (page, zoom) snapshot, top of page first."""

    model_config = ConfigDict(frozen=True)

    generation: int = 0
    page: int | None = None
    zoom: float | None = None
    issues: tuple[Issue, ...] = ()
    sections: tuple[SectionSummary, ...] = ()
    legend: tuple[LegendEntry, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return len(self.issues)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def empty_message(self) -> str | None:
        if self.issues:
            return None
        if self.page is None:
            return "No issues found in this document."
        return "No issues found on this page."

    def get(self, key: str) -> Issue | None:
        for issue in self.issues:
            if issue.key == key:
                return issue
        return None


def _assign_ordinals(issues: Iterable[Issue]) -> list[Issue]:
    counters: dict[str, int] = defaultdict(int)
    keyed: list[Issue] = []
    for issue in issues:
        ordinal = counters[issue.kind]
        counters[issue.kind] += 1
        keyed.append(issue.model_copy(update={"ordinal": ordinal}))
    return keyed


def _sort_key(issue: Issue) -> tuple:
    return (
        issue.page,
        round(issue.bbox.y, 6),
        round(issue.bbox.x, 6),
        ISSUE_KINDS.index(issue.kind),
        issue.ordinal,
    )


def _legend_message(kind: str, items: Sequence[Issue]) -> str:
    count = len(items)
    first = items[0]
    if kind == "margin":
        return f"Margins exceed {first.threshold_inches:g}\" - consider reducing to reclaim content space"  # type: ignore[union-attr]
    if kind == "line-whitespace":
        return "Lines with unused space detected - consider expanding these bullet points"
    if kind == "season-date":
        if count == 1:
            return (
                f"Date uses “{first.season} {first.year}” - "  # type: ignore[union-attr]
                f"consider “{first.suggested_month} {first.year}”"  # type: ignore[union-attr]
            )
        return f"{count} season-formatted dates found - consider using month names for consistency"
    if kind == "degree-abbreviation":
        if count == 1:
            return (
                f"Degree “{first.abbreviated}” is abbreviated - "  # type: ignore[union-attr]
                f"consider writing “{first.suggested}”"  # type: ignore[union-attr]
            )
        return f"{count} abbreviated degree names found - consider using the full formal name"
    if kind == "section-spacing":
        noun = "section has" if count == 1 else "sections have"
        return f"{count} {noun} too little space above the header"
    if kind == "section-order":
        return first.finding
    noun = "header is" if count == 1 else "headers are"
    return f"{count} section {noun} not larger than body text"


def build_legend(issues: Sequence[Issue]) -> tuple[LegendEntry, ...]:
    grouped: dict[str, list[Issue]] = defaultdict(list)
    for issue in issues:
        grouped[issue.kind].append(issue)
    counts = Counter(issue.kind for issue in issues)
    return tuple(
        LegendEntry(kind=kind, count=counts[kind], message=_legend_message(kind, grouped[kind]))
        for kind in ISSUE_KINDS
        if grouped.get(kind)
    )


def summarize_sections(sections: Iterable[Section]) -> tuple[SectionSummary, ...]:
    return tuple(
        SectionSummary(
            section=item.section,
            label=section_label(item.section),
            page=item.page,
            content_lines=len(item.content),
        )
        for item in sections
    )


def build_result_set(
    document_issues: Sequence[Issue],
    page_issues: Sequence[Issue] = (),
    *,
    generation: int = 0,
    page: int | None = None,
    zoom: float | None = None,
    sections: Sequence[SectionSummary] = (),
) -> ResultSet:
    """Merge detector outputs into one ordered result set.

    Ordinals are assigned per variant in input order, then issues are sorted by
    page and top-of-page position, so identical inputs give identical output.
    """
    keyed = _assign_ordinals([*document_issues, *page_issues])
    ordered = tuple(sorted(keyed, key=_sort_key))
    return ResultSet(
        generation=generation,
        page=page,
        zoom=zoom,
        issues=ordered,
        sections=tuple(sections),
        legend=build_legend(ordered),
    )
