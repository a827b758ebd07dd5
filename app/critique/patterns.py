from __future__ import annotations

import re
from typing import Mapping, Sequence

from app.core.config.heuristics import DegreeCheck, degree_checks, season_months
from app.layout.models import PageLayout, TextFragment

from .geometry import span_box
from .issues import DegreeAbbreviationIssue, SeasonDateIssue

DEFAULT_SEASON_LOOKAHEAD = 3

_SEASON_YEAR_RE = re.compile(r"\b(Spring|Summer|Fall|Winter)\s+(\d{4})\b", re.IGNORECASE)
_TRAILING_SEASON_RE = re.compile(r"\b(Spring|Summer|Fall|Winter)\s*$", re.IGNORECASE)
_LEADING_YEAR_RE = re.compile(r"^\s*(\d{4})\b")
_FIELD_CUTOFF_RE = re.compile(r"(Graduating|Graduation|Expected|GPA|University|College|\b\d{4}\b).*$", re.IGNORECASE)
_LEADING_FILLER_RE = re.compile(r"^(?:[,;:|\s]+|(?:in|of)\s+)+", re.IGNORECASE)
_TRAILING_PUNCT_RE = re.compile(r"[,;:|\-–—\s]+$")


def _season_issue(
    page: PageLayout,
    season: str,
    year: str,
    start: TextFragment,
    end: TextFragment,
    months: Mapping[str, str],
) -> SeasonDateIssue:
    month = months.get(season.lower(), "")
    return SeasonDateIssue(
        page=page.page,
        bbox=span_box(page.viewport, start, end),
        finding=f"Date uses “{season} {year}”.",
        suggestion=(
            f"Change “{season} {year}” to “{month} {year}” "
            "to match the month format used elsewhere on your resume."
        ),
        season=season,
        year=year,
        suggested_month=month,
    )


def detect_season_dates(
    pages: Sequence[PageLayout],
    *,
    lookahead: int = DEFAULT_SEASON_LOOKAHEAD,
    months: Mapping[str, str] | None = None,
) -> list[SeasonDateIssue]:
    """Find ``Season YYYY`` dates, including a season and year split across fragments."""
    month_map = season_months() if months is None else months
    issues: list[SeasonDateIssue] = []

    for page in pages:
        fragments = page.text_fragments()
        consumed: set[int] = set()
        for index, fragment in enumerate(fragments):
            if index in consumed:
                continue

            matches = list(_SEASON_YEAR_RE.finditer(fragment.text))
            if matches:
                for match in matches:
                    issues.append(_season_issue(page, match.group(1), match.group(2), fragment, fragment, month_map))
                consumed.add(index)
                continue

            trailing = _TRAILING_SEASON_RE.search(fragment.text)
            if not trailing:
                continue
            for follower in range(index + 1, min(index + 1 + lookahead, len(fragments))):
                year_match = _LEADING_YEAR_RE.match(fragments[follower].text)
                if not year_match:
                    continue
                issues.append(
                    _season_issue(page, trailing.group(1), year_match.group(1), fragment, fragments[follower], month_map)
                )
                consumed.update((index, follower))
                break

    return issues


def extract_degree_field(line_text: str, abbreviated: str) -> str:
    """Strip the abbreviation and trailing date/GPA/institution text to leave the major."""
    field = re.sub(re.escape(abbreviated) + r"[.,\s]*", "", line_text, count=1)
    field = _FIELD_CUTOFF_RE.sub("", field)
    field = _LEADING_FILLER_RE.sub("", field)
    return _TRAILING_PUNCT_RE.sub("", field).strip()


def detect_degree_abbreviations(
    pages: Sequence[PageLayout],
    *,
    tolerance: float = 2.0,
    checks: Sequence[DegreeCheck] | None = None,
) -> list[DegreeAbbreviationIssue]:
    table = degree_checks() if checks is None else checks
    issues: list[DegreeAbbreviationIssue] = []

    for page in pages:
        fragments = page.text_fragments()
        full_text = page.full_text()
        for check in table:
            if check.formal.search(full_text):
                continue
            for fragment in fragments:
                match = check.abbreviation.search(fragment.text)
                if not match:
                    continue
                abbreviated = match.group(0)
                same_line = sorted(
                    (other for other in fragments if abs(other.y - fragment.y) <= tolerance),
                    key=lambda item: item.x,
                )
                line_text = " ".join(item.text for item in same_line).strip()
                field = extract_degree_field(line_text, abbreviated)
                suggested = f"{check.label} in {field}" if field else check.label
                issues.append(
                    DegreeAbbreviationIssue(
                        page=page.page,
                        bbox=span_box(page.viewport, fragment, fragment),
                        finding=f"Degree “{abbreviated}” is abbreviated.",
                        suggestion=f"Change “{abbreviated}” to “{suggested}” for formality.",
                        abbreviated=abbreviated,
                        suggested=suggested,
                    )
                )
                break

    return issues
