import re
from collections import Counter
from dataclasses import dataclass

from bs4 import BeautifulSoup

from profile_extractor.extractors.branding import (
    CSS_RULE_RE,
    CSS_VARIABLE_RE,
    MAX_INLINE_ELEMENTS,
    MAX_MATCHES_PER_BLOCK,
    important_ids,
    in_important_container,
    inline_styled,
    parse_declarations,
    style_blocks,
)
from profile_extractor.schemas.business_info import (
    MAX_RADIUS_VALUES,
    MAX_SHADOWS,
    MAX_SPACING_VALUES,
    DesignTokens,
    RadiusTokens,
    SpacingTokens,
)

VARIABLE_WEIGHT = 5
IMPORTANT_INLINE_WEIGHT = 3
TAILWIND_WEIGHT = 2
DECLARATION_WEIGHT = 1

SPACING_CLUSTER_PX = 2.0
RADIUS_CLUSTER_PX = 1.0
ROOT_FONT_SIZE_PX = 16.0

_LENGTH_RE = re.compile(r"^(\d*\.?\d+)(px|rem|em)$")
_SPACING_VAR_RE = re.compile(r"spacing|space|gap|gutter")
_RADIUS_VAR_RE = re.compile(r"radius|rounded|corner")
_SHADOW_VAR_RE = re.compile(r"shadow|elevation")
_SPACING_PROPS_RE = re.compile(r"^(?:margin|padding)(?:-(?:top|right|bottom|left|inline|block))?$|^(?:row-|column-)?gap$")
_RADIUS_PROPS_RE = re.compile(r"^border(?:-[a-z]+)*-radius$")

_TW_SPACING_RE = re.compile(r"^-?(?:p|px|py|pt|pr|pb|pl|m|mx|my|mt|mr|mb|ml|gap|gap-x|gap-y|space-x|space-y)-(\d+(?:\.5)?)$")
_TW_RADIUS = {
    "rounded-sm": "0.125rem",
    "rounded": "0.25rem",
    "rounded-md": "0.375rem",
    "rounded-lg": "0.5rem",
    "rounded-xl": "0.75rem",
    "rounded-2xl": "1rem",
    "rounded-3xl": "1.5rem",
    "rounded-full": "9999px",
}
_TW_SHADOWS = {
    "shadow-sm": "0 1px 2px 0 rgb(0 0 0 / 0.05)",
    "shadow": "0 1px 3px 0 rgb(0 0 0 / 0.1), 0 1px 2px -1px rgb(0 0 0 / 0.1)",
    "shadow-md": "0 4px 6px -1px rgb(0 0 0 / 0.1), 0 2px 4px -2px rgb(0 0 0 / 0.1)",
    "shadow-lg": "0 10px 15px -3px rgb(0 0 0 / 0.1), 0 4px 6px -4px rgb(0 0 0 / 0.1)",
    "shadow-xl": "0 20px 25px -5px rgb(0 0 0 / 0.1), 0 8px 10px -6px rgb(0 0 0 / 0.1)",
    "shadow-2xl": "0 25px 50px -12px rgb(0 0 0 / 0.25)",
}


@dataclass
class _Length:
    text: str
    unit: str
    px: float


def parse_length(raw: str) -> _Length | None:
    """A positive px/rem/em length, formatted canonically; None for anything else."""
    m = _LENGTH_RE.match(raw.strip().lower())
    if not m:
        return None
    number, unit = float(m.group(1)), m.group(2)
    if number <= 0:
        return None
    px = number if unit == "px" else number * ROOT_FONT_SIZE_PX
    return _Length(text=f"{number:g}{unit}", unit=unit, px=px)


def normalize_shadow(raw: str) -> str | None:
    value = " ".join(raw.split("!important")[0].lower().split())
    value = re.sub(r"\s*,\s*", ", ", value)
    if not value or value in ("none", "0", "inherit", "initial", "unset"):
        return None
    return value


class _Votes:
    """Weighted votes keyed by canonical value, remembering first-seen order."""

    def __init__(self) -> None:
        self.weights: Counter[str] = Counter()
        self.lengths: dict[str, _Length] = {}

    def add_length(self, raw: str, weight: int) -> None:
        for part in raw.split():
            length = parse_length(part)
            if length is not None:
                self.lengths.setdefault(length.text, length)
                self.weights[length.text] += weight

    def add(self, value: str | None, weight: int) -> None:
        if value:
            self.weights[value] += weight

    def ranked(self) -> list[str]:
        return sorted(self.weights, key=lambda key: -self.weights[key])

    def clustered(self, threshold_px: float) -> list[_Length]:
        kept: list[_Length] = []
        for key in self.ranked():
            length = self.lengths[key]
            if all(abs(length.px - other.px) > threshold_px for other in kept):
                kept.append(length)
        return kept

    def dominant_unit(self) -> str:
        units: Counter[str] = Counter()
        for key, weight in self.weights.items():
            units[self.lengths[key].unit] += weight
        return units.most_common(1)[0][0] if units else "px"


def _vote_declarations(decls: dict[str, str], weight: int, spacing: _Votes, radius: _Votes, shadows: _Votes) -> None:
    for prop, value in decls.items():
        if _SPACING_PROPS_RE.match(prop):
            spacing.add_length(value, weight)
        elif _RADIUS_PROPS_RE.match(prop):
            radius.add_length(value, weight)
        elif prop == "box-shadow":
            shadows.add(normalize_shadow(value), weight)


def _vote_tailwind(classes: list[str], spacing: _Votes, radius: _Votes, shadows: _Votes) -> None:
    for cls in classes:
        m = _TW_SPACING_RE.match(cls)
        if m:
            step = float(m.group(1))
            if step > 0:
                spacing.add_length(f"{step * 0.25:g}rem", TAILWIND_WEIGHT)
        elif cls in _TW_RADIUS:
            radius.add_length(_TW_RADIUS[cls], TAILWIND_WEIGHT)
        elif cls in _TW_SHADOWS:
            shadows.add(normalize_shadow(_TW_SHADOWS[cls]), TAILWIND_WEIGHT)


def extract_design_tokens(soup: BeautifulSoup) -> DesignTokens | None:
    """Spacing scale, corner radii and shadows, most-used first.

    Sources in decreasing weight: CSS custom properties, inline styles on
    header/nav/hero elements, Tailwind utility classes, then every other
    declaration. Values within a few pixels of a stronger one are dropped.
    """
    spacing, radius, shadows = _Votes(), _Votes(), _Votes()

    for css in style_blocks(soup):
        for count, match in enumerate(CSS_VARIABLE_RE.finditer(css)):
            if count >= MAX_MATCHES_PER_BLOCK:
                break
            name, value = match.group(1).lower(), match.group(2)
            if _SHADOW_VAR_RE.search(name):
                shadows.add(normalize_shadow(value), VARIABLE_WEIGHT)
            elif _RADIUS_VAR_RE.search(name):
                radius.add_length(value, VARIABLE_WEIGHT)
            elif _SPACING_VAR_RE.search(name):
                spacing.add_length(value, VARIABLE_WEIGHT)
        for count, match in enumerate(CSS_RULE_RE.finditer(css)):
            if count >= MAX_MATCHES_PER_BLOCK:
                break
            _vote_declarations(parse_declarations(match.group(2)), DECLARATION_WEIGHT, spacing, radius, shadows)

    important = important_ids(soup)
    for el in inline_styled(soup):
        weight = IMPORTANT_INLINE_WEIGHT if in_important_container(el, important) else DECLARATION_WEIGHT
        _vote_declarations(parse_declarations(str(el.get("style", ""))), weight, spacing, radius, shadows)

    for el in soup.find_all(class_=True, limit=MAX_INLINE_ELEMENTS):
        _vote_tailwind(el.get("class", []), spacing, radius, shadows)

    spacing_values = spacing.clustered(SPACING_CLUSTER_PX)[:MAX_SPACING_VALUES]
    radius_values = radius.clustered(RADIUS_CLUSTER_PX)[:MAX_RADIUS_VALUES]

    tokens = DesignTokens(
        spacing=SpacingTokens(
            values=[v.text for v in spacing_values], unit=spacing.dominant_unit(),
        ) if spacing_values else None,
        border_radius=RadiusTokens(values=[v.text for v in radius_values]) if radius_values else None,
        shadows=shadows.ranked()[:MAX_SHADOWS],
    )
    return None if tokens.is_empty() else tokens
