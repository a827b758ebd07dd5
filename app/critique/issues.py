from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

IssueKind = Literal[
    "margin",
    "line-whitespace",
    "season-date",
    "degree-abbreviation",
    "section-spacing",
    "section-order",
    "section-title-size",
]
MarginEdge = Literal["top", "bottom", "left", "right"]
LineRecommendation = Literal["expand", "shorten"]


class BoundingBox(BaseModel):
    """Viewport rectangle at scale 1; the presentation layer multiplies by the live zoom."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float


class IssueBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=1)
    bbox: BoundingBox
    finding: str
    suggestion: str
    ordinal: int = Field(default=0, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def key(self) -> str:
        return f"{self.kind}-{self.ordinal}"  # type: ignore[attr-defined]


class MarginIssue(IssueBase):
    kind: Literal["margin"] = "margin"
    edge: MarginEdge
    size_inches: float
    threshold_inches: float


class LineChoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: LineRecommendation
    label: str
    description: str
    recommended: bool


class LineWhitespaceIssue(IssueBase):
    kind: Literal["line-whitespace"] = "line-whitespace"
    line_text: str
    utilization: float
    unused_ratio: float
    recommendation: LineRecommendation
    choices: tuple[LineChoice, ...] = ()


class SeasonDateIssue(IssueBase):
    kind: Literal["season-date"] = "season-date"
    season: str
    year: str
    suggested_month: str


class DegreeAbbreviationIssue(IssueBase):
    kind: Literal["degree-abbreviation"] = "degree-abbreviation"
    abbreviated: str
    suggested: str


class SectionSpacingIssue(IssueBase):
    kind: Literal["section-spacing"] = "section-spacing"
    above_section: str
    below_section: str
    gap_points: float
    threshold_points: float


class SectionOrderIssue(IssueBase):
    kind: Literal["section-order"] = "section-order"
    found_order: tuple[str, ...]
    expected_order: tuple[str, ...]
    misplaced_section: str
    mismatch_index: int


class SectionTitleSizeIssue(IssueBase):
    kind: Literal["section-title-size"] = "section-title-size"
    section: str
    header_height: float
    body_median_height: float


Issue = Annotated[
    Union[
        MarginIssue,
        LineWhitespaceIssue,
        SeasonDateIssue,
        DegreeAbbreviationIssue,
        SectionSpacingIssue,
        SectionOrderIssue,
        SectionTitleSizeIssue,
    ],
    Field(discriminator="kind"),
]

ISSUE_KINDS: tuple[str, ...] = (
    "margin",
    "line-whitespace",
    "season-date",
    "degree-abbreviation",
    "section-spacing",
    "section-order",
    "section-title-size",
)


def section_label(section: str) -> str:
    return section.replace("_", " ").title()
