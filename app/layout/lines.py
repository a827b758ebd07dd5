from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .models import Line, PageLayout, TextFragment

DEFAULT_LINE_TOLERANCE_PTS = 2.0


def cluster_lines(fragments: Iterable[TextFragment], tolerance: float = DEFAULT_LINE_TOLERANCE_PTS) -> list[Line]:
    """Group fragments into lines by baseline.

    Each fragment joins the first bucket (in creation order) whose key lies within
    ``tolerance`` of its baseline, not the nearest one; otherwise it opens a bucket
    keyed by its own baseline. Lines come back in bucket creation order.
    """
    if tolerance < 0:
        raise ValueError("tolerance must be non-negative")

    keys: list[float] = []
    buckets: dict[float, list[TextFragment]] = {}
    for fragment in fragments:
        if not fragment.text.strip():
            continue
        bucket_key: float | None = None
        for key in keys:
            if abs(key - fragment.y) <= tolerance:
                bucket_key = key
                break
        if bucket_key is None:
            keys.append(fragment.y)
            buckets[fragment.y] = [fragment]
        else:
            buckets[bucket_key].append(fragment)

    return [
        Line(fragments=tuple(sorted(buckets[key], key=lambda item: item.x)), baseline_y=key)
        for key in keys
    ]


def lines_top_to_bottom(lines: Iterable[Line]) -> list[Line]:
    return sorted(lines, key=lambda line: (-line.baseline_y, line.left))


@dataclass(frozen=True)
class PageLines:
    """A page snapshot with its fragments clustered into lines, top of page first."""

    layout: PageLayout
    lines: tuple[Line, ...]

    @property
    def page(self) -> int:
        return self.layout.page


def build_page_lines(layout: PageLayout, tolerance: float = DEFAULT_LINE_TOLERANCE_PTS) -> PageLines:
    return PageLines(layout=layout, lines=tuple(lines_top_to_bottom(cluster_lines(layout.fragments, tolerance))))
