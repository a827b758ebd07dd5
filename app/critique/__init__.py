from .aggregate import LegendEntry, ResultSet, SectionSummary, build_result_set
from .issues import (
    BoundingBox,
    DegreeAbbreviationIssue,
    Issue,
    LineWhitespaceIssue,
    MarginIssue,
    SeasonDateIssue,
    SectionOrderIssue,
    SectionSpacingIssue,
    SectionTitleSizeIssue,
)
from .pipeline import CritiqueThresholds, run_document_detectors, run_page_detectors
from .session import AnalysisSession, CritiqueInputError, Selection

__all__ = [
    "BoundingBox",
    "Issue",
    "MarginIssue",
    "LineWhitespaceIssue",
    "SeasonDateIssue",
    "DegreeAbbreviationIssue",
    "SectionSpacingIssue",
    "SectionOrderIssue",
    "SectionTitleSizeIssue",
    "ResultSet",
    "SectionSummary",
    "LegendEntry",
    "build_result_set",
    "CritiqueThresholds",
    "run_document_detectors",
    "run_page_detectors",
    "AnalysisSession",
    "CritiqueInputError",
    "Selection",
]
