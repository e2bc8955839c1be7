"""
Courses feature: display color and icon resolution.

Resolution order for both: the user's saved override, then a static
subject table, then a deterministic fallback (palette hash for colors,
keyword match for icons). No state is kept between calls.
"""

import re
from enum import Enum

from pydantic import BaseModel


# ── Colors ───────────────────────────────────────────────

SUBJECT_COLORS: dict[str, str] = {
    "HES": "#ef4444",       # red-500
    "HES-145": "#ef4444",
    "PSY": "#f59e0b",       # amber-500
    "PSY-100": "#f59e0b",
    "LIFE": "#10b981",      # emerald-500
    "LIFE-102": "#10b981",
    "LIFE-102-L": "#10b981",
    "MU": "#8b5cf6",        # violet-500
    "MU-100": "#8b5cf6",
    "MATH": "#06b6d4",      # cyan-500
    "MATH-118": "#06b6d4",
}

FALLBACK_PALETTE: tuple[str, ...] = (
    "#3b82f6",  # blue-500
    "#8b5cf6",  # violet-500
    "#06b6d4",  # cyan-500
    "#f97316",  # orange-500
    "#10b981",  # emerald-500
    "#ec4899",  # pink-500
)

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_SUBJECT_PREFIX = re.compile(r"^[A-Z]+")


def is_hex_color(value: str) -> bool:
    return bool(_HEX_COLOR.match(value or ""))


def subject_of(code: str) -> str:
    """Leading subject letters: 'PSY-100' -> 'PSY', 'MAC2311C' -> 'MAC'."""
    m = _SUBJECT_PREFIX.match(code.upper())
    return m.group(0) if m else ""


def code_hash(text: str) -> int:
    """Signed 32-bit rolling hash, h = h * 31 + unit over UTF-16 code units.

    Pure integer arithmetic so every client computes the same value.
    """
    data = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
        if h >= 0x80000000:
            h -= 0x100000000
    return h


def fallback_color(code: str) -> str:
    return FALLBACK_PALETTE[abs(code_hash(code)) % len(FALLBACK_PALETTE)]


def resolve_color(code: str, overrides: dict[str, str] | None = None) -> str:
    """Display color for a course code."""
    if overrides and overrides.get(code):
        return overrides[code]

    if code in SUBJECT_COLORS:
        return SUBJECT_COLORS[code]

    base = code.split("-")[0]
    if base in SUBJECT_COLORS:
        return SUBJECT_COLORS[base]

    subject = subject_of(code)
    if subject in SUBJECT_COLORS:
        return SUBJECT_COLORS[subject]

    return fallback_color(code)


# ── Icons ────────────────────────────────────────────────

class IconId(str, Enum):
    BOOK_OPEN = "book-open"
    BRAIN = "brain"
    LIGHTBULB = "lightbulb"
    AWARD = "award"
    TROPHY = "trophy"
    GRADUATION_CAP = "graduation-cap"
    FILE_TEXT = "file-text"
    ALERT_CIRCLE = "alert-circle"
    CALCULATOR = "calculator"
    CPU = "cpu"
    ZAP = "zap"
    TARGET = "target"
    CROSSHAIR = "crosshair"
    MICROSCOPE = "microscope"
    BEAKER = "beaker"
    TEST_TUBE = "test-tube"
    ATOM = "atom"
    HEART = "heart"
    STETHOSCOPE = "stethoscope"
    DUMBBELL = "dumbbell"
    MUSIC = "music"
    PALETTE = "palette"
    BRUSH = "brush"
    DRAMA = "drama"
    THEATRE = "theatre"
    MICROPHONE = "microphone"
    CAMERA = "camera"
    APERTURE = "aperture"
    LAPTOP = "laptop"
    CODE = "code"
    GAMEPAD = "gamepad"
    GLOBE = "globe"
    MAP = "map"
    PEN_TOOL = "pen-tool"
    EDIT = "edit"


class IconInfo(BaseModel):
    id: IconId
    name: str
    category: str


ICON_CATALOG: list[IconInfo] = [
    IconInfo(id=IconId.BOOK_OPEN, name="Book", category="Academic"),
    IconInfo(id=IconId.BRAIN, name="Brain", category="Academic"),
    IconInfo(id=IconId.LIGHTBULB, name="Lightbulb", category="Academic"),
    IconInfo(id=IconId.AWARD, name="Award", category="Academic"),
    IconInfo(id=IconId.TROPHY, name="Trophy", category="Academic"),
    IconInfo(id=IconId.GRADUATION_CAP, name="Graduation Cap", category="Academic"),
    IconInfo(id=IconId.FILE_TEXT, name="Document", category="Academic"),
    IconInfo(id=IconId.ALERT_CIRCLE, name="Alert", category="Academic"),
    IconInfo(id=IconId.CALCULATOR, name="Calculator", category="Mathematics"),
    IconInfo(id=IconId.CPU, name="CPU", category="Mathematics"),
    IconInfo(id=IconId.ZAP, name="Electric", category="Mathematics"),
    IconInfo(id=IconId.TARGET, name="Target", category="Mathematics"),
    IconInfo(id=IconId.CROSSHAIR, name="Crosshair", category="Mathematics"),
    IconInfo(id=IconId.MICROSCOPE, name="Microscope", category="Science"),
    IconInfo(id=IconId.BEAKER, name="Beaker", category="Science"),
    IconInfo(id=IconId.TEST_TUBE, name="Test Tube", category="Science"),
    IconInfo(id=IconId.ATOM, name="Atom", category="Science"),
    IconInfo(id=IconId.HEART, name="Heart", category="Health"),
    IconInfo(id=IconId.STETHOSCOPE, name="Stethoscope", category="Health"),
    IconInfo(id=IconId.DUMBBELL, name="Fitness", category="Health"),
    IconInfo(id=IconId.MUSIC, name="Music", category="Arts"),
    IconInfo(id=IconId.PALETTE, name="Palette", category="Arts"),
    IconInfo(id=IconId.BRUSH, name="Brush", category="Arts"),
    IconInfo(id=IconId.DRAMA, name="Drama", category="Arts"),
    IconInfo(id=IconId.THEATRE, name="Theater", category="Arts"),
    IconInfo(id=IconId.MICROPHONE, name="Microphone", category="Arts"),
    IconInfo(id=IconId.CAMERA, name="Camera", category="Arts"),
    IconInfo(id=IconId.APERTURE, name="Aperture", category="Arts"),
    IconInfo(id=IconId.LAPTOP, name="Laptop", category="Technology"),
    IconInfo(id=IconId.CODE, name="Code", category="Technology"),
    IconInfo(id=IconId.GAMEPAD, name="Gaming", category="Technology"),
    IconInfo(id=IconId.GLOBE, name="Globe", category="Geography"),
    IconInfo(id=IconId.MAP, name="Map", category="Geography"),
    IconInfo(id=IconId.PEN_TOOL, name="Pen", category="Writing"),
    IconInfo(id=IconId.EDIT, name="Edit", category="Writing"),
]

SUBJECT_ICONS: dict[str, IconId] = {
    "CHM": IconId.BEAKER,
    "CHEM": IconId.BEAKER,
    "PHY": IconId.ATOM,
    "PHYS": IconId.ATOM,
    "COP": IconId.CODE,
    "CS": IconId.CODE,
    "CSC": IconId.CODE,
    "CIS": IconId.LAPTOP,
    "ART": IconId.PALETTE,
    "ENC": IconId.PEN_TOOL,
    "ENG": IconId.PEN_TOOL,
    "GEO": IconId.GLOBE,
    "HIST": IconId.MAP,
}

# Checked in order against the lowercased code
ICON_KEYWORDS: list[tuple[tuple[str, ...], IconId]] = [
    (("math", "calc", "algebra"), IconId.GRADUATION_CAP),
    (("psy", "psychology"), IconId.BOOK_OPEN),
    (("life", "bio", "science"), IconId.FILE_TEXT),
    (("hes", "health"), IconId.ALERT_CIRCLE),
    (("mu", "music"), IconId.BOOK_OPEN),
]


def parse_icon_id(value: str | None) -> IconId | None:
    try:
        return IconId(value) if value else None
    except ValueError:
        return None


def resolve_icon(code: str, overrides: dict[str, str] | None = None) -> IconId:
    """Icon for a course code. Saved ids that are no longer in the catalog are ignored."""
    if overrides:
        saved = parse_icon_id(overrides.get(code))
        if saved is not None:
            return saved

    subject = subject_of(code)
    if subject in SUBJECT_ICONS:
        return SUBJECT_ICONS[subject]

    lowered = code.lower()
    for keywords, icon in ICON_KEYWORDS:
        if any(k in lowered for k in keywords):
            return icon

    return IconId.BOOK_OPEN


def icon_categories() -> list[str]:
    """Catalog categories in first-seen order."""
    return list(dict.fromkeys(icon.category for icon in ICON_CATALOG))
