"""
Courses feature: course-code extraction from Canvas assignment titles.

Canvas prefixes every calendar item with the course's SIS identifier in
brackets, in one of two shapes depending on the school:

    [2025FA-PSY-100-007] Essay 2           term first, then subject-number-section
    [MAC2311C_CMB-25Fall 00279] Quiz 4     subject+number first, then YY+season

Extraction is a pure function of (title, is_canvas) so that grouping is
stable across reloads. A title that matches nothing is simply unclassified.
"""

import re
from typing import NamedTuple


CANVAS_PROVIDER = "canvas"


class CourseMatch(NamedTuple):
    code: str
    term: str | None = None


# [2025FA-PSY-100-007], [2025FA-LIFE-102-L16]
_TERM_PREFIXED = re.compile(
    r"^\s*(?P<term>\d{4}[A-Z]{2})-(?P<code>[A-Z]{2,4}-?\d{3,4}[A-Z]?(?:-[A-Z]?\d+)?)",
    re.IGNORECASE,
)

# [MAC2311C_CMB-25Fall 00279], [CHS1440C-25Fall 0021]
_TERM_SUFFIXED = re.compile(
    r"^\s*(?P<code>[A-Z]{2,4}\d{3,4}[A-Z]?)(?:_[A-Z0-9]+)?-(?P<term>\d{2}[A-Z]+)\b",
    re.IGNORECASE,
)

# Bare PSY-100 / MATH118 anywhere in the title. Uppercase only.
_BARE_CODE = re.compile(r"\b([A-Z]{2,4}-?\d{3,4}[A-Z]?)\b")

_BRACKETS = re.compile(r"\[([^\[\]]+)\]")
_EMBEDDED_TERM = re.compile(r"(?<![0-9])\d{4}(?:FA|SP|SU|WI)(?![A-Z0-9])")
_SECTION = re.compile(r"^(?P<base>[A-Z]{2,4}-?\d{3,4}[A-Z]?)-(?P<lab>L)?\d+$")
_LEADING_TERM = re.compile(r"^\d{4}[A-Z]{2}-", re.IGNORECASE)
_CANONICAL_TERM = re.compile(r"^\d{4}[A-Z]{2}$", re.IGNORECASE)
_SHORT_TERM = re.compile(r"^(\d{2})([A-Z]+)$", re.IGNORECASE)

_SEASON_CODES = {"fall": "FA", "spring": "SP", "summer": "SU"}


def normalize_term(raw: str) -> str | None:
    """Canonical term tag: '2025FA' stays, '25Fall' -> '2025FA', '25Spring' -> '2025SP'.

    Unknown seasons keep their first two letters ('25Winter' -> '2025WI').
    """
    value = raw.strip()
    if _CANONICAL_TERM.match(value):
        return value.upper()

    m = _SHORT_TERM.match(value)
    if not m:
        return None
    year_suffix, season = m.groups()
    lowered = season.lower()
    term_code = next(
        (code for name, code in _SEASON_CODES.items() if name in lowered),
        season[:2].upper(),
    )
    return f"20{year_suffix}{term_code}"


def normalize_code(raw: str) -> str:
    """Uppercase, drop misplaced term tags and stray hyphens, collapse sections.

    'psy-100-007' -> 'PSY-100', 'LIFE-102-L16' -> 'LIFE-102-L'.
    """
    code = raw.strip().upper()
    code = _EMBEDDED_TERM.sub("", code)
    code = re.sub(r"-{2,}", "-", code).strip("-")

    m = _SECTION.match(code)
    if m:
        code = m.group("base") + ("-L" if m.group("lab") else "")
    return code


def _match_bracket(content: str) -> CourseMatch | None:
    m = _TERM_PREFIXED.match(content)
    if m:
        code = normalize_code(m.group("code"))
        if code:
            return CourseMatch(code, normalize_term(m.group("term")))

    m = _TERM_SUFFIXED.match(content)
    if m:
        code = normalize_code(m.group("code"))
        if code:
            return CourseMatch(code, normalize_term(m.group("term")))

    return None


def extract_course_code(title: str | None, is_canvas: bool) -> CourseMatch | None:
    """Extract the course code (and term, when present) from an item title.

    Only Canvas-sourced items are classified; manual events that happen to
    mention "MATH-101 review" never join a course.
    """
    if not is_canvas or not title:
        return None

    for content in _BRACKETS.findall(title):
        match = _match_bracket(content)
        if match:
            return match

    m = _BARE_CODE.search(title)
    if m:
        code = normalize_code(m.group(1))
        if code:
            return CourseMatch(code, None)

    return None


def pseudo_title(course_name: str, default_term: str) -> str:
    """Bracketed title for a task's explicit course name, so it takes the same path.

    Names that already carry a term (leading "2025FA-" or trailing "-25Fall")
    are wrapped as-is.
    """
    name = course_name.strip()
    if _LEADING_TERM.match(name) or _TERM_SUFFIXED.match(name):
        return f"[{name}]"
    return f"[{default_term}-{name}]"
