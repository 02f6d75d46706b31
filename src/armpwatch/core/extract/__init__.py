"""Extraction strategies turning list items into notices."""

from .base import NOTICE_FIELDS, ExtractionError, ItemHandle, Notice, NoticeExtractor
from .cells import CellWalkExtractor
from .fragments import FragmentSource, LxmlFragmentSource, RegexFragmentSource
from .labels import LabelProbeExtractor, detect_page_language
from .markup import (
    DEFAULT_MARKUP_PATTERNS,
    MarkupExtractor,
    MarkupPatternTable,
    build_markup_patterns,
    detect_markup_language,
    label_pattern,
)
from .pipeline import build_extractor, extract_notices

__all__ = [
    "NOTICE_FIELDS",
    "ExtractionError",
    "ItemHandle",
    "Notice",
    "NoticeExtractor",
    "CellWalkExtractor",
    "LabelProbeExtractor",
    "MarkupExtractor",
    "MarkupPatternTable",
    "DEFAULT_MARKUP_PATTERNS",
    "label_pattern",
    "build_markup_patterns",
    "detect_markup_language",
    "detect_page_language",
    "FragmentSource",
    "LxmlFragmentSource",
    "RegexFragmentSource",
    "build_extractor",
    "extract_notices",
]
