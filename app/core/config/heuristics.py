from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

HEURISTICS_PATH = Path(__file__).resolve().parents[3] / "config" / "heuristics.yaml"


@dataclass(frozen=True)
class SectionKeyword:
    keyword: str
    section: str


@dataclass(frozen=True)
class DegreeCheck:
    abbreviation: re.Pattern[str]
    formal: re.Pattern[str]
    label: str


@dataclass(frozen=True)
class TitleSizeLimits:
    min_body_pts: float
    max_body_pts: float
    min_contrast_pts: float


@dataclass(frozen=True)
class Heuristics:
    """Validated view of ``config/heuristics.yaml``."""

    keywords: tuple[SectionKeyword, ...]
    canonical_order: tuple[str, ...]
    utilization_sections: frozenset[str]
    header_max_chars: int
    title_size: TitleSizeLimits
    season_months: dict[str, str]
    degrees: tuple[DegreeCheck, ...]
    zoom_levels: tuple[float, ...]


class _Reader:
    """Walks the parsed YAML tree and turns shape errors into one RuntimeError per file."""

    def __init__(self, source: Path, tree: dict[str, Any]) -> None:
        self.source = source
        self.tree = tree

    def fail(self, path: str, problem: str) -> RuntimeError:
        return RuntimeError(f"Invalid heuristics config '{self.source}' at '{path}': {problem}")

    def get(self, path: str, kind: type | tuple[type, ...]) -> Any:
        node: Any = self.tree
        for key in path.split("."):
            if not isinstance(node, dict) or key not in node:
                raise self.fail(path, "missing")
            node = node[key]
        if not isinstance(node, kind):
            raise self.fail(path, f"expected {getattr(kind, '__name__', kind)}, got {type(node).__name__}")
        return node

    def names(self, path: str) -> tuple[str, ...]:
        return tuple(str(name).strip().lower() for name in self.get(path, list))


def _keywords(reader: _Reader, canonical: tuple[str, ...]) -> tuple[SectionKeyword, ...]:
    entries: list[SectionKeyword] = []
    for index, item in enumerate(reader.get("sections.keywords", list)):
        if not isinstance(item, dict) or not item.get("keyword") or not item.get("section"):
            raise reader.fail(f"sections.keywords[{index}]", "needs 'keyword' and 'section'")
        entry = SectionKeyword(keyword=str(item["keyword"]).strip().lower(), section=str(item["section"]).strip().lower())
        if entry.section not in canonical:
            raise reader.fail(f"sections.keywords[{index}]", f"unknown section '{entry.section}'")
        entries.append(entry)
    # Stable sort keeps file order among keywords of equal length.
    return tuple(sorted(entries, key=lambda entry: -len(entry.keyword)))


def _degrees(reader: _Reader) -> tuple[DegreeCheck, ...]:
    checks: list[DegreeCheck] = []
    for index, item in enumerate(reader.get("degrees", list)):
        try:
            checks.append(
                DegreeCheck(
                    abbreviation=re.compile(item["abbreviation"]),
                    formal=re.compile(item["formal"], re.IGNORECASE),
                    label=str(item["label"]),
                )
            )
        except (KeyError, TypeError, re.error) as exc:
            raise reader.fail(f"degrees[{index}]", str(exc)) from exc
    return tuple(checks)


def load_heuristics(path: Path = HEURISTICS_PATH) -> Heuristics:
    """Parse and validate a heuristics file; any problem raises ``RuntimeError``."""
    try:
        parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RuntimeError(f"Failed to read heuristics config '{path}': {exc}") from exc
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Invalid YAML in heuristics config '{path}': {exc}") from exc
    if not isinstance(parsed, dict):
        raise RuntimeError(f"Invalid heuristics config '{path}': expected a top-level mapping.")

    reader = _Reader(path, parsed)
    canonical = reader.names("sections.canonical_order")
    utilization = frozenset(reader.names("sections.utilization_sections"))
    if not utilization <= set(canonical):
        raise reader.fail("sections.utilization_sections", "must be a subset of canonical_order")

    header_max_chars = reader.get("sections.header_max_chars", int)
    if header_max_chars < 1:
        raise reader.fail("sections.header_max_chars", "must be positive")

    title_size = TitleSizeLimits(
        min_body_pts=float(reader.get("title_size.min_body_height_pts", (int, float))),
        max_body_pts=float(reader.get("title_size.max_body_height_pts", (int, float))),
        min_contrast_pts=float(reader.get("title_size.min_contrast_pts", (int, float))),
    )
    if title_size.min_body_pts >= title_size.max_body_pts:
        raise reader.fail("title_size", "min_body_height_pts must be below max_body_height_pts")

    months = reader.get("dates.season_months", dict)
    levels = tuple(sorted(float(level) for level in reader.get("viewer.zoom_levels", list)))
    if not levels or levels[0] <= 0:
        raise reader.fail("viewer.zoom_levels", "needs at least one positive level")

    return Heuristics(
        keywords=_keywords(reader, canonical),
        canonical_order=canonical,
        utilization_sections=utilization,
        header_max_chars=header_max_chars,
        title_size=title_size,
        season_months={str(season).lower(): str(month) for season, month in months.items()},
        degrees=_degrees(reader),
        zoom_levels=levels,
    )


@lru_cache(maxsize=1)
def get_heuristics() -> Heuristics:
    return load_heuristics()


def section_keywords() -> list[SectionKeyword]:
    """Keyword table ordered longest keyword first."""
    return list(get_heuristics().keywords)


def canonical_section_order() -> list[str]:
    return list(get_heuristics().canonical_order)


def utilization_sections() -> frozenset[str]:
    return get_heuristics().utilization_sections


def header_max_chars() -> int:
    return get_heuristics().header_max_chars


def title_size_limits() -> TitleSizeLimits:
    return get_heuristics().title_size


def season_months() -> dict[str, str]:
    return dict(get_heuristics().season_months)


def degree_checks() -> list[DegreeCheck]:
    return list(get_heuristics().degrees)


def zoom_levels() -> tuple[float, ...]:
    return get_heuristics().zoom_levels
