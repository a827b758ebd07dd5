import asyncio
import sys
import unittest
from pathlib import Path

import numpy as np

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.critique.session import AnalysisSession, CritiqueInputError, zoom_in, zoom_out  # noqa: E402
from app.layout.models import DocumentLayout, PageLayout, PageRaster, TextFragment, Viewport  # noqa: E402

VIEWPORT = Viewport(width=612, height=792)


def frag(text, y, x=72.0, width=200.0, height=10.0):
    return TextFragment(text=text, x=x, y=y, width=width, height=height)


def two_page_document():
    first = PageLayout(
        page=1,
        viewport=VIEWPORT,
        fragments=(
            frag("Experience", 700, width=80, height=14),
            frag("Backend Engineer, Fall 2021 - Present", 680, width=468),
            frag("Wrote docs", 665, width=90),
        ),
    )
    second = PageLayout(
        page=2,
        viewport=VIEWPORT,
        fragments=(
            frag("Skills", 700, width=50, height=14),
            frag("Python, Go, SQL, Terraform, Kubernetes and more", 680, width=468),
        ),
    )
    return DocumentLayout(pages=(first, second))


def wide_left_margin_raster():
    pixels = np.full((120, 100, 4), 255, dtype=np.uint8)
    pixels[10:110, 60:90, :3] = 0
    return PageRaster.from_array(pixels)


class ZoomStepTests(unittest.TestCase):
    def test_zoom_steps_clamp_at_the_ends(self):
        self.assertEqual(zoom_in(1.0), 1.25)
        self.assertEqual(zoom_out(1.0), 0.75)
        self.assertEqual(zoom_in(2.0), 2.0)
        self.assertEqual(zoom_out(0.5), 0.5)


class AnalysisSessionTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.session = AnalysisSession(two_page_document())

    async def test_load_publishes_document_issues(self):
        result = await self.session.load()
        kinds = [issue.kind for issue in result.issues]
        self.assertEqual(kinds, ["season-date"])
        self.assertIsNone(result.page)

    async def test_select_adds_page_level_issues(self):
        await self.session.load()
        result = await self.session.select(1, 1.0, wide_left_margin_raster())
        self.assertIsNotNone(result)
        kinds = {issue.kind for issue in result.issues}
        self.assertEqual(kinds, {"season-date", "margin", "line-whitespace"})
        self.assertEqual(result.page, 1)
        self.assertEqual(result.generation, self.session.generation)

    async def test_begin_selection_clears_page_issues_immediately(self):
        await self.session.load()
        await self.session.select(1, 1.0, wide_left_margin_raster())
        self.session.begin_selection(2, 1.0)
        kinds = {issue.kind for issue in self.session.result_set.issues}
        self.assertEqual(kinds, {"season-date"})

    async def test_stale_pass_is_dropped(self):
        await self.session.load()
        first = self.session.begin_selection(1, 1.0)
        second = self.session.begin_selection(2, 1.5)
        with self.assertLogs("app.critique.session", level="INFO"):
            stale = await self.session.analyze_selection(first, wide_left_margin_raster())
        self.assertIsNone(stale)
        self.assertFalse(self.session.is_current(first))

        current = await self.session.analyze_selection(second, None)
        self.assertIsNotNone(current)
        self.assertEqual(current.page, 2)
        self.assertTrue(all(issue.kind != "margin" for issue in current.issues))

    async def test_overlapping_selects_keep_only_latest(self):
        await self.session.load()
        release = asyncio.Event()

        async def slow_source(page, zoom):
            await release.wait()
            return wide_left_margin_raster()

        slow = asyncio.create_task(self.session.select(1, 1.0, raster_source=slow_source))
        await asyncio.sleep(0)
        fast = await self.session.select(2, 1.0)
        release.set()
        stale = await slow

        self.assertIsNone(stale)
        self.assertIsNotNone(fast)
        self.assertEqual(self.session.result_set.page, 2)
        self.assertTrue(all(issue.kind != "margin" for issue in self.session.result_set.issues))

    async def test_failing_raster_source_skips_margins(self):
        async def broken_source(page, zoom):
            raise OSError("renderer offline")

        result = await self.session.select(1, 1.0, raster_source=broken_source)
        self.assertIsNotNone(result)
        self.assertTrue(all(issue.kind != "margin" for issue in result.issues))

    async def test_invalid_selection_is_rejected(self):
        with self.assertRaises(CritiqueInputError):
            self.session.begin_selection(3, 1.0)
        with self.assertRaises(CritiqueInputError):
            self.session.begin_selection(1, 1.1)
        self.assertEqual(self.session.generation, 0)


if __name__ == "__main__":
    unittest.main()
