"""Normalization of label text and language tags."""

from .labels import (
    ACCENT_FOLDS,
    is_french,
    normalize_label,
    normalize_lang_tag,
    normalize_whitespace,
)

__all__ = [
    "ACCENT_FOLDS",
    "is_french",
    "normalize_label",
    "normalize_lang_tag",
    "normalize_whitespace",
]
