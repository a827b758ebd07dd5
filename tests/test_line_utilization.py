import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.critique.utilization import analyze_line_utilization  # noqa: E402
from app.layout.lines import build_page_lines  # noqa: E402
from app.layout.models import PageLayout, TextFragment, Viewport  # noqa: E402

VIEWPORT = Viewport(width=612, height=792)


def frag(text, y, width, x=72.0, height=10.0):
    return TextFragment(text=text, x=x, y=y, width=width, height=height)


def page_lines(*fragments):
    return build_page_lines(PageLayout(page=1, viewport=VIEWPORT, fragments=tuple(fragments)))


class LineUtilizationTests(unittest.TestCase):
    def test_only_short_line_is_flagged(self):
        page = page_lines(
            frag("Jane Doe", 760, 100, height=18),
            frag("Experience", 700, 80, height=14),
            frag("Designed and shipped the billing platform for enterprise customers", 680, 468),
            frag("Migrated legacy services to containers with zero downtime deploys", 665, 468),
            frag("Cut cloud spend by a third", 650, 280.8),
        )
        issues = analyze_line_utilization(page)
        self.assertEqual(len(issues), 1)
        issue = issues[0]
        self.assertEqual(issue.line_text, "Cut cloud spend by a third")
        self.assertAlmostEqual(issue.utilization, 0.6, places=3)
        self.assertAlmostEqual(issue.unused_ratio, 0.4, places=3)
        self.assertEqual(issue.recommendation, "shorten")
        self.assertAlmostEqual(issue.bbox.x, 352.8)
        self.assertAlmostEqual(issue.bbox.y, 792 - 650 - 1)
        self.assertAlmostEqual(issue.bbox.width, 187.2)
        self.assertEqual(issue.bbox.height, 2.0)
        recommended = [choice.key for choice in issue.choices if choice.recommended]
        self.assertEqual(recommended, ["shorten"])

    def test_half_empty_line_recommends_expand(self):
        page = page_lines(
            frag("Projects", 700, 80, height=14),
            frag("Built a compiler for a toy language with an optimizing backend", 680, 400),
            frag("In Rust", 665, 120),
        )
        issues = analyze_line_utilization(page)
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].recommendation, "expand")
        self.assertAlmostEqual(issues[0].utilization, 0.3)

    def test_lines_above_the_first_section_header_are_ignored(self):
        page = page_lines(
            frag("Education", 740, 80, height=14),
            frag("State University", 725, 100),
            frag("Experience", 700, 80, height=14),
            frag("Designed and shipped the billing platform for enterprise customers", 680, 468),
            frag("Led a team of four engineers across two time zones and releases", 665, 468),
        )
        self.assertEqual(analyze_line_utilization(page), [])

    def test_headers_inside_content_are_not_measured(self):
        page = page_lines(
            frag("Experience", 700, 80, height=14),
            frag("Designed and shipped the billing platform for enterprise customers", 680, 468),
            frag("Skills", 660, 50, height=14),
            frag("Python, Go, SQL, Terraform, Kubernetes, React, TypeScript, GraphQL", 640, 468),
        )
        self.assertEqual(analyze_line_utilization(page), [])

    def test_page_without_header_has_no_findings(self):
        page = page_lines(frag("Long line of text", 700, 468), frag("Short", 680, 50))
        self.assertEqual(analyze_line_utilization(page), [])

    def test_threshold_is_configurable(self):
        page = page_lines(
            frag("Experience", 700, 80, height=14),
            frag("Designed and shipped the billing platform for enterprise customers", 680, 400),
            frag("Mostly full line of text here", 665, 320),
        )
        self.assertEqual(analyze_line_utilization(page, threshold=0.25), [])
        self.assertEqual(len(analyze_line_utilization(page, threshold=0.1)), 1)


if __name__ == "__main__":
    unittest.main()
