from __future__ import annotations

from app.layout.models import Line, TextFragment, Viewport

from .issues import BoundingBox


def span_box(viewport: Viewport, start: TextFragment, end: TextFragment) -> BoundingBox:
    """Scale-1 box from the left edge of ``start`` to the right edge of ``end``, sized by ``start``."""
    base_x, baseline = viewport.to_viewport(start.x, start.y)
    right_x, _ = viewport.to_viewport(end.right, end.y)
    height = start.box_height
    return BoundingBox(x=base_x, y=baseline - height, width=right_x - base_x, height=height)


def line_box(viewport: Viewport, line: Line) -> BoundingBox:
    left_x, baseline = viewport.to_viewport(line.left, line.baseline_y)
    right_x, _ = viewport.to_viewport(line.right, line.baseline_y)
    height = line.height
    return BoundingBox(x=left_x, y=baseline - height, width=right_x - left_x, height=height)
