"""
Label text canonicalization.

Folds case, accents and punctuation so that label cells rendered in
French or English can be looked up in a synonym table by exact match.
"""

from __future__ import annotations


# Accented Latin characters folded to their ASCII base. Only lower-case
# forms are listed: input is lower-cased before translation.
ACCENT_FOLDS: dict[str, str] = {
    "é": "e", "è": "e", "ê": "e", "ë": "e",
    "à": "a", "â": "a", "ä": "a",
    "î": "i", "ï": "i",
    "ô": "o", "ö": "o",
    "ù": "u", "û": "u", "ü": "u",
    "ç": "c",
    "’": "'",
}

_LABEL_TRANSLATION = str.maketrans({**ACCENT_FOLDS, ":": ""})


def normalize_whitespace(text: str | None) -> str:
    """Normalize whitespace in text."""
    if text is None:
        return ""
    return " ".join(text.split())


def normalize_label(text: str | None) -> str:
    """Canonicalize a label for synonym lookup.

    Lower-cases, folds accents, drops colons and collapses whitespace.
    ``"Région:"``, ``"region"`` and ``"RÉGION :"`` all become ``"region"``.

    Args:
        text: Raw label text from a label cell

    Returns:
        Normalized label (empty string for None)
    """
    if text is None:
        return ""
    folded = text.strip().lower().translate(_LABEL_TRANSLATION)
    return normalize_whitespace(folded)


def normalize_lang_tag(lang: str | None) -> str:
    """Lower-case and trim a document ``lang`` attribute."""
    if not lang:
        return ""
    return lang.strip().lower()


def is_french(lang: str | None) -> bool:
    """Check whether a language tag prefers French labels."""
    return normalize_lang_tag(lang).startswith("fr")
