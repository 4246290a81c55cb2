SYSTEM_PROMPT = (
    "You extract contact details from the text of a business website. "
    "Markdown links keep their targets, so mailto:, tel: and social profile URLs are visible. "
    "Extract:\n"
    "1. emails: business email addresses (max 5). Skip placeholders and tracking addresses.\n"
    "2. phones: phone numbers as written on the page (max 3).\n"
    "3. addresses: full street addresses (max 3).\n"
    "4. hours: opening hours keyed by lowercase weekday, each {open, close, closed}.\n"
    "5. socialLinks: [{platform, url}] for facebook, instagram, twitter, x, linkedin, "
    "tiktok, youtube, pinterest, snapchat, whatsapp or yelp; one per platform.\n"
    "6. coordinates: {lat, lng} if explicitly present, else null.\n"
    "7. confidence: 0 to 1.\n\n"
    "Only report what the page states; never invent details. "
    "Respond ONLY with valid JSON, no markdown or extra explanation. Example: "
    '{"emails": ["info@example.com"], "phones": ["(555) 123-4567"], '
    '"addresses": ["123 Main St, Springfield, IL 62701"], '
    '"hours": {"monday": {"open": "9:00 AM", "close": "5:00 PM", "closed": false}, '
    '"sunday": {"open": null, "close": null, "closed": true}}, '
    '"socialLinks": [{"platform": "instagram", "url": "https://instagram.com/example"}], '
    '"coordinates": null, "confidence": 0.9}'
)


def build_prompt(text: str, base_url: str) -> str:
    return (
        f"Website: {base_url}\n"
        "Footer and header sections often hold the contact details.\n\n"
        f"Page text:\n{text}"
    )
