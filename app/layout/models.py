from __future__ import annotations

import re
from dataclasses import dataclass

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_FRAGMENT_HEIGHT = 12.0

_WS_RE = re.compile(r"\s+")


class TextFragment(BaseModel):
    """One positioned text run. ``y`` is the baseline in document points, growing upward."""

    model_config = ConfigDict(frozen=True)

    text: str
    x: float
    y: float
    width: float = Field(default=0.0, ge=0.0)
    height: float = Field(default=0.0, ge=0.0)

    @property
    def box_height(self) -> float:
        return self.height or DEFAULT_FRAGMENT_HEIGHT

    @property
    def right(self) -> float:
        return self.x + self.width


class Viewport(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: float = Field(gt=0.0)
    height: float = Field(gt=0.0)
    origin_x: float = 0.0
    origin_y: float = 0.0

    def to_viewport(self, x: float, y: float, scale: float = 1.0) -> tuple[float, float]:
        return (x - self.origin_x) * scale, (self.origin_y + self.height - y) * scale


class PageLayout(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=1)
    viewport: Viewport
    fragments: tuple[TextFragment, ...] = ()

    def text_fragments(self) -> list[TextFragment]:
        return [fragment for fragment in self.fragments if fragment.text.strip()]

    def full_text(self) -> str:
        return " ".join(fragment.text for fragment in self.text_fragments())


class DocumentLayout(BaseModel):
    model_config = ConfigDict(frozen=True)

    pages: tuple[PageLayout, ...]

    @field_validator("pages")
    @classmethod
    def _validate_pages(cls, value: tuple[PageLayout, ...]) -> tuple[PageLayout, ...]:
        numbers = [page.page for page in value]
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValueError("pages must be numbered consecutively from 1")
        return value

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def get_page(self, page: int) -> PageLayout:
        if page < 1 or page > len(self.pages):
            raise IndexError(f"page {page} out of range 1..{len(self.pages)}")
        return self.pages[page - 1]


@dataclass(frozen=True)
class PageRaster:
    """Rendered page pixels: RGBA bytes in row-major order at physical resolution."""

    width: int
    height: int
    data: bytes
    pixel_ratio: float = 1.0

    def as_array(self) -> np.ndarray:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("raster dimensions must be positive")
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(f"raster buffer has {len(self.data)} bytes, expected {expected}")
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 4)

    @classmethod
    def from_array(cls, pixels: np.ndarray, pixel_ratio: float = 1.0) -> "PageRaster":
        array = np.ascontiguousarray(pixels, dtype=np.uint8)
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValueError("expected an (height, width, 4) RGBA array")
        return cls(width=int(array.shape[1]), height=int(array.shape[0]), data=array.tobytes(), pixel_ratio=pixel_ratio)


class Line(BaseModel):
    model_config = ConfigDict(frozen=True)

    fragments: tuple[TextFragment, ...]
    baseline_y: float

    @property
    def text(self) -> str:
        return _WS_RE.sub(" ", " ".join(fragment.text for fragment in self.fragments)).strip()

    @property
    def left(self) -> float:
        return min(fragment.x for fragment in self.fragments)

    @property
    def right(self) -> float:
        return max(fragment.right for fragment in self.fragments)

    @property
    def height(self) -> float:
        return max(fragment.box_height for fragment in self.fragments)

    @property
    def max_height(self) -> float:
        return self.height

    @property
    def average_height(self) -> float:
        return sum(fragment.box_height for fragment in self.fragments) / len(self.fragments)
