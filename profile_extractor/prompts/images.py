SYSTEM_PROMPT = (
    "You identify the meaningful images of a business website from fragments of its HTML. "
    "Images may appear as <img> or <picture> elements, inline background-image styles, "
    "CSS rules and custom properties, or data attributes used by site builders "
    "(WordPress cover blocks, Elementor backgrounds, Squarespace sections, Wix bgMedia).\n"
    "For each image report:\n"
    "- url: absolute URL (resolve relative paths against the website URL)\n"
    "- type: hero | gallery | product | feature | team | logo | other\n"
    "- context: background-image | css-variable | img-tag | picture-element | data-attribute\n"
    "- selector: a CSS selector for the element\n"
    "- alt, dimensions {width, height} when known\n"
    "- confidence: 0 to 1\n"
    "Ignore tracking pixels, icons, spinners and placeholders. "
    "Add an overall confidence between 0 and 1.\n\n"
    "Respond ONLY with valid JSON, no markdown or extra explanation. Example: "
    '{"images": [{"url": "https://example.com/hero.jpg", "type": "hero", '
    '"context": "background-image", "selector": ".hero", "alt": null, '
    '"dimensions": {"width": 1920, "height": 1080}, "confidence": 0.9}], "confidence": 0.85}'
)


def build_prompt(html: str, base_url: str) -> str:
    return f"Website: {base_url}\n\nImage-related HTML:\n{html}"
