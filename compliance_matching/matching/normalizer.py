"""
Title normalization for document matching and duplicate detection.

Uploaded filenames rarely match canonical requirement titles, e.g.
"SOA-15-Jul-2026-V2" has to compare equal to "SoA".  normalize_title()
reduces a free-text title to its comparable core:

  - lower-case
  - drop day-month-year tokens: 15-Jul-2026, 3/sep/26
  - drop version tokens: v2, V1.0, and ones glued to a word (SOAv2, PolicyV1.2)
  - turn separators (_ - . and optionally &) into spaces
  - collapse whitespace and trim
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping

_MONTHS = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)"
_DATE_TOKEN = re.compile(rf"(?<!\d)\d{{1,2}}[-/_. ]{_MONTHS}[-/_. ]\d{{2,4}}(?!\d)")
_VERSION_TOKEN = re.compile(r"(?<![a-z0-9])v\d+(?:\.\d+)?(?![a-z0-9])")
# Matched against the original casing: a v after a capital ("SOAv2") or a capital V
# after any letter ("PolicyV1.2"). "Dev2" keeps its v.
GLUED_VERSION_TOKEN = re.compile(r"(?:(?<=[A-Z])[vV]|(?<=[a-z])V)(\d+(?:\.\d+)?)(?![A-Za-z0-9])")
_SEPARATORS = re.compile(r"[_\-.]")
_SEPARATORS_WITH_AMPERSAND = re.compile(r"[_\-.&]")
_WHITESPACE = re.compile(r"\s+")

_FILE_EXTENSION = re.compile(
    r"\.(?:docx?|xlsx?|xlsm|pptx?|pdf|txt|csv|md|odt|ods|rtf)$", re.IGNORECASE
)
_PARENTHETICAL = re.compile(r"\(([^)]*)\)")
_WORD = re.compile(r"[a-z0-9]+")


def normalize_title(title: str, split_ampersand: bool = False) -> str:
    """Canonical comparison form of a document title.

    Date and version tokens are removed before separators are replaced,
    so hyphenated dates such as ``15-Jul-2026`` are still recognised.
    ``split_ampersand`` additionally treats ``&`` as a separator
    ("Quality & ISMS Manual"), used by relationship matching.
    """
    if not title:
        return ""

    result = GLUED_VERSION_TOKEN.sub(" ", title).lower()
    result = _DATE_TOKEN.sub(" ", result)
    result = _VERSION_TOKEN.sub(" ", result)
    separators = _SEPARATORS_WITH_AMPERSAND if split_ampersand else _SEPARATORS
    result = separators.sub(" ", result)
    return _WHITESPACE.sub(" ", result).strip()


def titles_equal(title_a: str, title_b: str) -> bool:
    """True when two titles share the same normalized form."""
    return normalize_title(title_a) == normalize_title(title_b)


def strip_extension(title: str) -> str:
    """Drop a trailing office/document file extension ("policy.docx" → "policy")."""
    return _FILE_EXTENSION.sub("", title or "")


def title_words(title: str) -> list[str]:
    """Alphanumeric words of an already-normalized title."""
    return _WORD.findall(title)


def contains_phrase(haystack: str, phrase: str) -> bool:
    """Whole-word containment of ``phrase`` in ``haystack``."""
    if not phrase or not haystack:
        return False
    pattern = rf"(?<![a-z0-9]){re.escape(phrase)}(?![a-z0-9])"
    return re.search(pattern, haystack) is not None


def title_initials(title: str) -> str:
    """Initials of a multi-word title, ignoring parenthesised asides.

    "Statement of Applicability (SoA)" → "soa". Single-word titles
    have no meaningful initials and yield "".
    """
    norm = normalize_title(strip_extension(title))
    words = title_words(_PARENTHETICAL.sub(" ", norm))
    if len(words) < 2:
        return ""
    return "".join(w[0] for w in words)


def abbreviation_candidates(
    title: str,
    known_abbreviations: Mapping[str, Iterable[str]] | None = None,
) -> list[str]:
    """Short forms a document for ``title`` might be filed under.

    Initials, any parenthesised short form, and the known abbreviations
    of every full form the title contains.  Order is stable, no duplicates.
    """
    norm = normalize_title(strip_extension(title))
    bare = _WHITESPACE.sub(" ", _PARENTHETICAL.sub(" ", norm)).strip()

    candidates: list[str] = []
    initials = title_initials(title)
    if initials:
        candidates.append(initials)
    for inner in _PARENTHETICAL.findall(norm):
        inner = _WHITESPACE.sub(" ", inner).strip()
        if inner:
            candidates.append(inner)
    for full_form, abbreviations in (known_abbreviations or {}).items():
        if contains_phrase(bare, full_form):
            candidates.extend(abbreviations)

    seen: set[str] = set()
    ordered: list[str] = []
    for cand in candidates:
        if len(cand) < 2 or cand in seen:
            continue
        seen.add(cand)
        ordered.append(cand)
    return ordered


def is_abbreviation_of(
    short: str,
    full: str,
    known_abbreviations: Mapping[str, Iterable[str]] | None = None,
) -> bool:
    """True when normalized ``short`` abbreviates normalized ``full``.

    Either its initials ("soa" / "statement of applicability") or a
    known abbreviation of exactly that full form.
    """
    if not short or not full or " " in short or len(short) < 2:
        return False
    if short == title_initials(full):
        return True
    for full_form, abbreviations in (known_abbreviations or {}).items():
        if full_form == full and short in abbreviations:
            return True
    return False
