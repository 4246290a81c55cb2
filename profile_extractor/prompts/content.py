SYSTEM_PROMPT = (
    "You extract the core marketing content of a business website from its text. "
    "The most prominent heading is marked [PROMINENT] and hero areas are wrapped in "
    "[HERO]...[/HERO]. Extract:\n"
    "1. siteTitle and siteDescription: the business name and a one-sentence summary.\n"
    "2. businessDescription: two or three sentences describing what the business does.\n"
    "3. tagline: the slogan, if any.\n"
    "4. keyFeatures: up to 15 short selling points.\n"
    "5. heroSection: {headline, subheadline, ctaText, ctaLink, backgroundImage} from the hero area.\n"
    "6. galleries: [] unless the text clearly lists gallery images.\n"
    "7. pageContent: {mainContent, footerText, sidebarContent} as short plain-text digests.\n"
    "8. favicon: null unless stated.\n"
    "9. confidence: 0 to 1.\n\n"
    "Respond ONLY with valid JSON, no markdown or extra explanation. Example: "
    '{"siteTitle": "Acme Bakery", "siteDescription": "Family bakery in Springfield.", '
    '"businessDescription": "Acme Bakery bakes bread and pastries daily from local flour.", '
    '"tagline": "Fresh every morning", "keyFeatures": ["Organic flour", "Same-day delivery"], '
    '"heroSection": {"headline": "Fresh bread every morning", "subheadline": "Baked in Springfield since 1990", '
    '"ctaText": "Order now", "ctaLink": "https://example.com/order", "backgroundImage": null}, '
    '"galleries": [], "pageContent": {"mainContent": "...", "footerText": "...", "sidebarContent": null}, '
    '"favicon": null, "confidence": 0.85}'
)


def build_prompt(text: str, base_url: str) -> str:
    return (
        f"Website: {base_url}\n"
        "Resolve relative links against the website URL.\n\n"
        f"Page text:\n{text}"
    )
