from profile_extractor.extractors.chain import parse_html
from profile_extractor.extractors.design_tokens import (
    extract_design_tokens,
    normalize_shadow,
    parse_length,
)


def _soup(body: str = "", css: str = ""):
    return parse_html(f"<html><head><style>{css}</style></head><body>{body}</body></html>")


def test_parse_length_canonical_form():
    assert parse_length("16.0px").text == "16px"
    assert parse_length("1.50rem").px == 24.0
    assert parse_length("0px") is None
    assert parse_length("auto") is None
    assert parse_length("10%") is None


def test_normalize_shadow_collapses_whitespace():
    assert normalize_shadow("0  2px 4px  rgba(0,0,0,.2) !important") == "0 2px 4px rgba(0, 0, 0, .2)"
    assert normalize_shadow("none") is None


def test_repeated_radius_declaration_same_as_once():
    once = extract_design_tokens(_soup(css=".card { border-radius: 8px; }"))
    repeated = extract_design_tokens(_soup(css=".card { border-radius: 8px; }" * 50))
    assert repeated.border_radius.values == ["8px"]
    assert repeated == once


def test_frequency_affects_ranking():
    css = ".a { border-radius: 4px; } .b { border-radius: 12px; } .c { border-radius: 12px; }"
    tokens = extract_design_tokens(_soup(css=css))
    assert tokens.border_radius.values == ["12px", "4px"]


def test_css_variables_outweigh_declarations():
    css = ":root { --radius-card: 12px; } .a { border-radius: 4px; } .b { border-radius: 4px; }"
    tokens = extract_design_tokens(_soup(css=css))
    assert tokens.border_radius.values[0] == "12px"


def test_near_duplicate_spacing_is_clustered():
    css = ".a { margin: 16px; } .b { margin: 16px; } .c { padding: 17px; } .d { padding: 32px; }"
    tokens = extract_design_tokens(_soup(css=css))
    assert tokens.spacing.values == ["16px", "32px"]
    assert tokens.spacing.unit == "px"


def test_shorthand_spacing_contributes_each_length():
    tokens = extract_design_tokens(_soup(css=".a { padding: 8px 24px; }"))
    assert tokens.spacing.values == ["8px", "24px"]


def test_tailwind_classes():
    tokens = extract_design_tokens(_soup(body='<div class="p-4 rounded-lg shadow-md">x</div>'))
    assert tokens.spacing.values == ["1rem"]
    assert tokens.spacing.unit == "rem"
    assert tokens.border_radius.values == ["0.5rem"]
    assert tokens.shadows == ["0 4px 6px -1px rgb(0 0 0 / 0.1), 0 2px 4px -2px rgb(0 0 0 / 0.1)"]


def test_shadows_ranked_and_deduplicated():
    css = (
        ".a { box-shadow: 0 1px 2px #000; } .b { box-shadow: 0  1px 2px #000; }"
        ".c { box-shadow: 0 8px 16px #333; }"
    )
    tokens = extract_design_tokens(_soup(css=css))
    assert tokens.shadows == ["0 1px 2px #000", "0 8px 16px #333"]


def test_spacing_capped_at_eight():
    css = " ".join(f".c{i} {{ margin: {i * 10}px; }}" for i in range(1, 12))
    tokens = extract_design_tokens(_soup(css=css))
    assert len(tokens.spacing.values) == 8


def test_no_tokens_returns_none():
    assert extract_design_tokens(_soup(body="<p>plain</p>")) is None
