"""Color parsing helpers shared by the brand-color and design-token extractors."""

import math
import re

HEX_RE = re.compile(r"#(?:[0-9a-f]{6}|[0-9a-f]{3})\b", re.IGNORECASE)
RGB_RE = re.compile(
    r"rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})(?:\s*,\s*(?:0|0?\.\d+|1(?:\.0)?))?\s*\)",
    re.IGNORECASE,
)
HSL_RE = re.compile(
    r"hsla?\(\s*(\d{1,3})\s*,\s*(\d{1,3})%\s*,\s*(\d{1,3})%(?:\s*,\s*(?:0|0?\.\d+|1(?:\.0)?))?\s*\)",
    re.IGNORECASE,
)

_HEX3_RE = re.compile(r"^#([0-9a-f]{3})$")
_HEX6_RE = re.compile(r"^#([0-9a-f]{6})$")

# Channel spread at or below this is treated as gray.
GRAYSCALE_SPREAD = 15
# RGB distance under which two colors are the same brand color.
CLUSTER_DISTANCE = 30.0


def _clamp(n: int) -> int:
    return max(0, min(255, n))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{_clamp(r):02x}{_clamp(g):02x}{_clamp(b):02x}"


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    h = hex_color.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def hsl_to_rgb(h: int, s: int, l: int) -> tuple[int, int, int]:
    h = (h % 360 + 360) % 360
    s_f = s / 100
    l_f = l / 100
    c = (1 - abs(2 * l_f - 1)) * s_f
    x = c * (1 - abs((h / 60) % 2 - 1))
    m = l_f - c / 2
    if h < 60:
        r, g, b = c, x, 0.0
    elif h < 120:
        r, g, b = x, c, 0.0
    elif h < 180:
        r, g, b = 0.0, c, x
    elif h < 240:
        r, g, b = 0.0, x, c
    elif h < 300:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x
    return round((r + m) * 255), round((g + m) * 255), round((b + m) * 255)


def normalize_color(raw: str | None) -> str | None:
    """Return a color as lowercase ``#rrggbb``, or None if it isn't one."""
    if not raw:
        return None
    c = raw.strip().lower()
    if c in ("transparent", "inherit", "currentcolor", "initial", "none"):
        return None
    if _HEX6_RE.match(c):
        return c
    m = _HEX3_RE.match(c)
    if m:
        r, g, b = m.group(1)
        return f"#{r}{r}{g}{g}{b}{b}"
    if c.startswith("rgb"):
        m = RGB_RE.match(c)
        if m:
            return rgb_to_hex(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    if c.startswith("hsl"):
        m = HSL_RE.match(c)
        if m:
            return rgb_to_hex(*hsl_to_rgb(int(m.group(1)), int(m.group(2)), int(m.group(3))))
    return None


def is_grayscale(hex_color: str) -> bool:
    r, g, b = hex_to_rgb(hex_color)
    return max(r, g, b) - min(r, g, b) <= GRAYSCALE_SPREAD


def color_distance(a: str, b: str) -> float:
    ra, ga, ba = hex_to_rgb(a)
    rb, gb, bb = hex_to_rgb(b)
    return math.sqrt((ra - rb) ** 2 + (ga - gb) ** 2 + (ba - bb) ** 2)


def iter_colors(text: str, max_matches: int):
    """Yield every hex/rgb/hsl literal in ``text``, at most ``max_matches`` per syntax."""
    for pattern in (HEX_RE, RGB_RE, HSL_RE):
        for count, match in enumerate(pattern.finditer(text)):
            if count >= max_matches:
                break
            yield match.group(0)


def cluster_colors(ranked: list[str], threshold: float = CLUSTER_DISTANCE) -> list[str]:
    """Keep the first (highest-weighted) color of every near-duplicate group."""
    kept: list[str] = []
    for color in ranked:
        if all(color_distance(color, other) >= threshold for other in kept):
            kept.append(color)
    return kept
