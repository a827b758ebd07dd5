from .lines import PageLines, build_page_lines, cluster_lines, lines_top_to_bottom
from .models import DocumentLayout, Line, PageLayout, PageRaster, TextFragment, Viewport
from .raster import EdgeMargins, scan_margins

__all__ = [
    "TextFragment",
    "Viewport",
    "PageLayout",
    "DocumentLayout",
    "PageRaster",
    "Line",
    "cluster_lines",
    "lines_top_to_bottom",
    "PageLines",
    "build_page_lines",
    "EdgeMargins",
    "scan_margins",
]
