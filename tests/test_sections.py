import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.critique.sections import (  # noqa: E402
    check_section_order,
    check_section_spacing,
    check_section_title_sizes,
    match_header,
    segment_sections,
)
from app.layout.lines import build_page_lines, cluster_lines  # noqa: E402
from app.layout.models import PageLayout, TextFragment, Viewport  # noqa: E402

VIEWPORT = Viewport(width=612, height=792)


def frag(text, y, x=72.0, width=200.0, height=10.0):
    return TextFragment(text=text, x=x, y=y, width=width, height=height)


def page_lines(*fragments, page=1):
    return build_page_lines(PageLayout(page=page, viewport=VIEWPORT, fragments=tuple(fragments)))


def line(text):
    return cluster_lines([frag(text, 500.0)])[0]


class HeaderDetectionTests(unittest.TestCase):
    def test_prefix_and_contains_modes(self):
        self.assertEqual(match_header(line("Education")), "education")
        self.assertEqual(match_header(line("TECHNICAL SKILLS")), "skills")
        self.assertIsNone(match_header(line("Relevant Experience")))
        self.assertEqual(match_header(line("Relevant Experience"), mode="contains"), "experience")

    def test_longest_keyword_wins(self):
        self.assertEqual(match_header(line("Leadership Experience")), "leadership")
        self.assertEqual(match_header(line("Leadership Experience"), mode="contains"), "leadership")
        self.assertEqual(match_header(line("Extracurricular Activities")), "leadership")

    def test_long_lines_are_never_headers(self):
        sentence = "Experience building distributed systems for payments at a large scale company"
        self.assertGreaterEqual(len(sentence), 60)
        self.assertIsNone(match_header(line(sentence)))
        self.assertIsNone(match_header(line(sentence), mode="contains"))


class SectionOrderTests(unittest.TestCase):
    def test_out_of_order_sections_flag_first_mismatch(self):
        pages = [
            page_lines(
                frag("Experience", 700, height=14),
                frag("Software Engineer at Acme", 680),
                frag("Education", 600, height=14),
                frag("State University", 580),
                frag("Skills", 500, height=14),
                frag("Python, SQL", 480),
            )
        ]
        issues = check_section_order(pages)
        self.assertEqual(len(issues), 1)
        issue = issues[0]
        self.assertEqual(issue.found_order, ("experience", "education", "skills"))
        self.assertEqual(issue.expected_order, ("education", "experience", "skills"))
        self.assertEqual(issue.mismatch_index, 0)
        self.assertEqual(issue.misplaced_section, "experience")
        self.assertAlmostEqual(issue.bbox.y, 792 - 700 - 14)
        self.assertAlmostEqual(issue.bbox.x, 72.0)

    def test_order_is_read_across_pages(self):
        pages = [
            page_lines(frag("Education", 700, height=14), frag("Skills", 600, height=14)),
            page_lines(frag("Projects", 700, height=14), page=2),
        ]
        issues = check_section_order(pages)
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].page, 1)
        self.assertEqual(issues[0].misplaced_section, "skills")
        self.assertEqual(issues[0].mismatch_index, 1)

    def test_single_section_is_not_checked(self):
        pages = [page_lines(frag("Skills", 700, height=14), frag("Python", 680))]
        self.assertEqual(check_section_order(pages), [])

    def test_canonical_order_passes(self):
        pages = [
            page_lines(
                frag("Education", 700, height=14),
                frag("Experience", 600, height=14),
                frag("Skills", 500, height=14),
            )
        ]
        self.assertEqual(check_section_order(pages), [])


class SectionSpacingTests(unittest.TestCase):
    def test_cramped_gap_above_next_header(self):
        pages = [
            page_lines(
                frag("Education", 700, height=14),
                frag("State University", 680),
                frag("Experience", 662, height=14),
                frag("Engineer at Acme", 640),
                frag("Skills", 600, height=14),
                frag("Python", 580),
            )
        ]
        issues = check_section_spacing(pages, threshold_inches=0.125)
        self.assertEqual(len(issues), 1)
        issue = issues[0]
        self.assertEqual(issue.above_section, "education")
        self.assertEqual(issue.below_section, "experience")
        self.assertAlmostEqual(issue.gap_points, 4.0)
        self.assertAlmostEqual(issue.threshold_points, 9.0)
        self.assertAlmostEqual(issue.bbox.y, 792 - 680)
        self.assertAlmostEqual(issue.bbox.height, 4.0)

    def test_adjacent_headers_without_content_are_skipped(self):
        pages = [page_lines(frag("Education", 700, height=14), frag("Experience", 684, height=14))]
        self.assertEqual(check_section_spacing(pages), [])


class SectionTitleSizeTests(unittest.TestCase):
    def test_header_not_larger_than_body_is_flagged(self):
        pages = [
            page_lines(
                frag("Education", 700, height=10.5),
                frag("State University", 680),
                frag("B.S. Computer Science", 665),
                frag("Experience", 640, height=14),
                frag("Engineer at Acme", 620),
            )
        ]
        issues = check_section_title_sizes(pages)
        self.assertEqual([issue.section for issue in issues], ["education"])
        self.assertEqual(issues[0].body_median_height, 10.0)
        self.assertEqual(issues[0].header_height, 10.5)

    def test_page_without_headers_is_skipped(self):
        pages = [page_lines(frag("Just text", 700), frag("More text", 680))]
        self.assertEqual(check_section_title_sizes(pages), [])


class SegmentSectionsTests(unittest.TestCase):
    def test_first_occurrence_wins_and_content_stops_at_next_header(self):
        pages = [
            page_lines(
                frag("Education", 700, height=14),
                frag("State University", 680),
                frag("Experience", 640, height=14),
                frag("Engineer at Acme", 620),
                frag("Built things", 605),
                frag("Education", 580, height=14),
                frag("Online course", 560),
            ),
            page_lines(frag("Skills", 700, height=14), frag("Python", 680), page=2),
        ]
        sections = segment_sections(pages)
        self.assertEqual([item.section for item in sections], ["education", "experience", "skills"])
        self.assertEqual([len(item.content) for item in sections], [1, 2, 1])
        self.assertEqual(sections[2].page, 2)


if __name__ == "__main__":
    unittest.main()
