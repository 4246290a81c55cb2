SYSTEM_PROMPT = (
    "You extract structured business content from the text of a website:\n"
    "1. businessHours: [{day, hours, closed}] (max 10).\n"
    "2. services: [{name, description, price, duration}] (max 30).\n"
    "3. testimonials: [{name, role, content, rating}] (max 30); rating 1 to 5 or null; "
    "anonymous testimonials are allowed.\n"
    "4. faq: [{question, answer}] (max 20).\n"
    "5. productCategories: [{name, description, itemCount}] (max 15).\n"
    "6. footerContent: {copyrightText, importantLinks: [{text, url}], additionalInfo}.\n"
    "Wrap these under structuredContent and add a confidence between 0 and 1. "
    "Use empty lists when a section is absent; never invent reviews or prices.\n\n"
    "Respond ONLY with valid JSON, no markdown or extra explanation. Example: "
    '{"structuredContent": {"businessHours": [{"day": "Monday", "hours": "9:00 AM - 5:00 PM", "closed": false}], '
    '"services": [{"name": "Haircut", "description": "Wash and cut", "price": "$30", "duration": "45 min"}], '
    '"testimonials": [{"name": "Jane D.", "role": null, "content": "Great service!", "rating": 5}], '
    '"faq": [{"question": "Do you take walk-ins?", "answer": "Yes, every weekday."}], '
    '"productCategories": [], '
    '"footerContent": {"copyrightText": "© 2024 Example", "importantLinks": [], "additionalInfo": null}}, '
    '"confidence": 0.8}'
)


def build_prompt(text: str, base_url: str) -> str:
    return f"Website: {base_url}\n\nPage text:\n{text}"
