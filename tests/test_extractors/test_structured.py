from profile_extractor.extractors.chain import parse_html
from profile_extractor.extractors.structured import (
    extract_business_hours,
    extract_faq,
    extract_footer_content,
    extract_product_categories,
    extract_services,
    extract_structured_content,
    extract_testimonials,
    hours_by_day,
)
from profile_extractor.schemas.business_info import BusinessHours

BASE = "https://example.com"


def _soup(body: str):
    return parse_html(f"<html><body>{body}</body></html>")


# --- Hours ---


def test_hours_from_schema_markup():
    soup = _soup(
        '<div itemscope itemtype="https://schema.org/OpeningHoursSpecification">'
        '<span itemprop="dayOfWeek">Monday</span>'
        '<meta itemprop="opens" content="09:00"><meta itemprop="closes" content="17:00"></div>'
    )
    assert extract_business_hours(soup) == [BusinessHours(day="Monday", hours="09:00 - 17:00")]


def test_hours_from_table_container():
    soup = _soup(
        '<table class="opening-hours">'
        "<tr><td>Monday</td><td>9am - 5pm</td></tr>"
        "<tr><td>Tuesday</td><td>10am - 6pm</td></tr>"
        "<tr><td>Sunday</td><td>Closed</td></tr>"
        "</table>"
    )
    assert extract_business_hours(soup) == [
        BusinessHours(day="Monday", hours="9am - 5pm"),
        BusinessHours(day="Tuesday", hours="10am - 6pm"),
        BusinessHours(day="Sunday", hours="Closed", closed=True),
    ]


def test_hours_from_body_text_ranges():
    soup = _soup("<p>We are open Mon - Fri: 8am - 6pm and Sat 9am - 1pm.</p>")
    hours = extract_business_hours(soup)
    assert BusinessHours(day="Monday-Friday", hours="8am - 6pm") in hours
    assert BusinessHours(day="Saturday", hours="9am - 1pm") in hours


def test_hours_container_keeps_day_ranges():
    soup = _soup(
        '<div class="hours"><p>Monday - Friday: 9am - 5pm</p><p>Saturday: 10am - 2pm</p></div>'
    )
    assert extract_business_hours(soup) == [
        BusinessHours(day="Monday-Friday", hours="9am - 5pm"),
        BusinessHours(day="Saturday", hours="10am - 2pm"),
    ]


def test_hours_by_day_only_maps_single_days():
    entries = [
        BusinessHours(day="Monday", hours="9am - 5pm"),
        BusinessHours(day="Monday-Friday", hours="8am - 6pm"),
        BusinessHours(day="Sunday", hours="Closed", closed=True),
    ]
    result = hours_by_day(entries)
    assert set(result) == {"monday", "sunday"}
    assert result["monday"].open == "9am"
    assert result["monday"].close == "5pm"
    assert result["sunday"].closed is True


def test_hours_by_day_empty():
    assert hours_by_day([]) is None


# --- Services ---


def test_services_from_cards_with_price_and_duration():
    soup = _soup(
        '<div class="service-item"><h3>Haircut</h3><span class="price">$30</span>'
        "<p>Classic cut and style, 45 minutes</p></div>"
        '<div class="service-item"><h3>Colour</h3><span class="price">$80</span></div>'
    )
    services = extract_services(soup)
    assert [s.name for s in services] == ["Haircut", "Colour"]
    assert services[0].price == "$30"
    assert services[0].duration == "45 minutes"


def test_services_from_pricing_table():
    soup = _soup(
        "<table><tr><th>Service</th><th>Price</th></tr>"
        "<tr><td>Oil change</td><td>$49</td></tr>"
        "<tr><td>Tyre rotation</td><td>$25</td></tr>"
        "<tr><td>Total</td><td>$74</td></tr></table>"
    )
    services = extract_services(soup)
    assert [(s.name, s.price) for s in services] == [("Oil change", "$49"), ("Tyre rotation", "$25")]


def test_services_from_bullet_list():
    soup = _soup('<ul class="services"><li>Deep cleaning - $120</li><li>Window washing</li></ul>')
    services = extract_services(soup)
    assert [(s.name, s.price) for s in services] == [("Deep cleaning", "$120"), ("Window washing", None)]


# --- Testimonials ---


def test_testimonials_with_author_and_rating():
    soup = _soup(
        '<div class="testimonial" data-rating="5">'
        "<p>Absolutely the best bakery in town, everything is delicious.</p>"
        '<span class="author">- Jane Doe</span><span class="role">Local guide</span></div>'
    )
    [testimonial] = extract_testimonials(soup)
    assert testimonial.name == "Jane Doe"
    assert testimonial.role == "Local guide"
    assert testimonial.rating == 5.0


def test_testimonial_rating_from_filled_stars():
    soup = _soup(
        '<div class="review"><p>Fast service and friendly staff, would recommend.</p>'
        '<i class="star filled"></i><i class="star filled"></i><i class="star filled"></i>'
        '<i class="star"></i></div>'
    )
    [testimonial] = extract_testimonials(soup)
    assert testimonial.rating == 3.0


def test_schema_testimonials_preferred():
    soup = _soup(
        '<div itemscope itemtype="https://schema.org/Review">'
        '<span itemprop="author">Sam</span><meta itemprop="ratingValue" content="4.5">'
        '<p itemprop="reviewBody">Great experience overall.</p></div>'
        '<blockquote>Some other quote that is long enough to count.</blockquote>'
    )
    testimonials = extract_testimonials(soup)
    assert len(testimonials) == 1
    assert testimonials[0].name == "Sam"
    assert testimonials[0].rating == 4.5


# --- FAQ ---


def test_faq_from_details_blocks():
    soup = _soup(
        "<details><summary>Do you deliver?</summary><p>Yes, within 10 miles of the shop.</p></details>"
        "<details><summary>Are you open on Sundays?</summary><p>Only during December.</p></details>"
    )
    faqs = extract_faq(soup)
    assert [f.question for f in faqs] == ["Do you deliver?", "Are you open on Sundays?"]
    assert faqs[0].answer == "Yes, within 10 miles of the shop."


def test_faq_from_schema():
    soup = _soup(
        '<div itemscope itemtype="https://schema.org/Question">'
        '<h3 itemprop="name">Can I book online?</h3>'
        '<div itemprop="acceptedAnswer"><p itemprop="text">Yes, through our booking page.</p></div></div>'
    )
    assert [(f.question, f.answer) for f in extract_faq(soup)] == [
        ("Can I book online?", "Yes, through our booking page."),
    ]


# --- Product categories and footer ---


def test_product_categories_with_item_count():
    soup = _soup(
        '<div class="category-card"><h3>Breads</h3><p>12 products</p></div>'
        '<nav><a href="/collections/cakes">Cakes</a></nav>'
    )
    categories = extract_product_categories(soup)
    assert [(c.name, c.item_count) for c in categories] == [("Breads", 12), ("Cakes", None)]


def test_footer_content():
    soup = _soup(
        '<footer><p>© 2024 Acme Bakery. All rights reserved.</p>'
        '<a href="/privacy">Privacy</a><a href="mailto:hi@acme.co">Email</a></footer>'
    )
    footer = extract_footer_content(soup, BASE)
    assert footer.copyright_text == "© 2024 Acme Bakery. All rights reserved."
    assert [(l.text, l.url) for l in footer.important_links] == [("Privacy", "https://example.com/privacy")]


def test_footer_copyright_from_year():
    soup = _soup("<footer><p>Acme Bakery 2019. All rights reserved.</p></footer>")
    assert extract_footer_content(soup, BASE).copyright_text == "Acme Bakery 2019. All rights reserved."


def test_no_footer():
    assert extract_footer_content(_soup("<p>x</p>"), BASE) is None


def test_structured_content_empty_page():
    content = extract_structured_content(_soup(""), BASE)
    assert content.services == []
    assert content.faq == []
    assert content.footer_content is None
