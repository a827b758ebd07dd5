from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from .models import PageRaster

logger = logging.getLogger(__name__)

DEFAULT_NEAR_WHITE_THRESHOLD = 230


@dataclass(frozen=True)
class EdgeMargins:
    """Whitespace distance from each page edge, in physical pixels."""

    top: int
    bottom: int
    left: int
    right: int


def _first_ink(mask: np.ndarray) -> int | None:
    hits = np.flatnonzero(mask)
    if hits.size == 0:
        return None
    return int(hits[0])


def scan_margins(raster: PageRaster, threshold: int = DEFAULT_NEAR_WHITE_THRESHOLD) -> EdgeMargins | None:
    """Measure edge whitespace, or return ``None`` when the buffer cannot be read.

    A pixel is whitespace when its red, green and blue channels all exceed
    ``threshold``. Every row/column is inspected in full.
    """
    try:
        pixels = raster.as_array()
    except ValueError as exc:
        logger.warning("raster_unreadable width=%s height=%s: %s", raster.width, raster.height, exc)
        return None

    height, width = pixels.shape[:2]
    ink = ~np.all(pixels[:, :, :3] > threshold, axis=2)
    ink_rows = ink.any(axis=1)
    ink_cols = ink.any(axis=0)

    top = _first_ink(ink_rows)
    if top is None:
        return EdgeMargins(top=height, bottom=height, left=width, right=width)

    bottom = _first_ink(ink_rows[::-1])
    left = _first_ink(ink_cols)
    right = _first_ink(ink_cols[::-1])
    return EdgeMargins(top=top, bottom=int(bottom or 0), left=int(left or 0), right=int(right or 0))
