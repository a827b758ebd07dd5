from __future__ import annotations

from app.layout.models import PageRaster
from app.layout.raster import EdgeMargins

from .issues import BoundingBox, MarginIssue

POINTS_PER_INCH = 72.0
DEFAULT_MARGIN_THRESHOLD_INCHES = 0.7


def margin_issues(
    page: int,
    raster: PageRaster,
    margins: EdgeMargins,
    *,
    zoom: float,
    threshold_inches: float = DEFAULT_MARGIN_THRESHOLD_INCHES,
) -> list[MarginIssue]:
    """Turn physical-pixel edge margins into issues for edges wider than the threshold.

    Physical pixels become logical pixels through the raster's pixel ratio; logical
    pixels at ``zoom`` cover ``72 * zoom`` per inch. Boxes are reported at scale 1.
    """
    if zoom <= 0 or raster.pixel_ratio <= 0:
        raise ValueError("zoom and pixel ratio must be positive")

    threshold_px = threshold_inches * POINTS_PER_INCH * zoom
    page_width = raster.width / raster.pixel_ratio / zoom
    page_height = raster.height / raster.pixel_ratio / zoom

    issues: list[MarginIssue] = []
    for edge in ("top", "bottom", "left", "right"):
        logical_px = getattr(margins, edge) / raster.pixel_ratio
        if logical_px <= threshold_px:
            continue
        base = logical_px / zoom
        if edge == "top":
            bbox = BoundingBox(x=0.0, y=0.0, width=page_width, height=base)
        elif edge == "bottom":
            bbox = BoundingBox(x=0.0, y=page_height - base, width=page_width, height=base)
        elif edge == "left":
            bbox = BoundingBox(x=0.0, y=0.0, width=base, height=page_height)
        else:
            bbox = BoundingBox(x=page_width - base, y=0.0, width=base, height=page_height)
        size_inches = logical_px / (POINTS_PER_INCH * zoom)
        issues.append(
            MarginIssue(
                page=page,
                bbox=bbox,
                finding=f"The {edge} margin is {size_inches:.2f}\", wider than {threshold_inches:g}\".",
                suggestion="Reduce the margin to reclaim content space.",
                edge=edge,
                size_inches=round(size_inches, 4),
                threshold_inches=threshold_inches,
            )
        )
    return issues
