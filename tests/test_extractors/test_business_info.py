import pytest

from profile_extractor.extractors.business_info import extract_business_info
from profile_extractor.schemas.business_info import ExtractedBusinessInfo

BASE = "https://acme.com"

FULL_PAGE = """
<html><head>
  <title>Acme Bakery</title>
  <meta name="description" content="Family bakery baking sourdough since 1950.">
  <meta name="theme-color" content="#c0392b">
  <link rel="icon" href="/favicon.ico">
</head><body>
  <header><img class="logo" src="/logo.png"></header>
  <div class="hero"><h1>Fresh bread every morning</h1><a class="btn" href="/order">Order now</a></div>
  <section class="opening-hours"><ul><li>Monday 7am - 3pm</li><li>Sunday closed</li></ul></section>
  <footer>
    <a href="mailto:hello@acmebakery.com">hello@acmebakery.com</a>
    <a href="tel:+15551234567">Call</a>
    <a href="https://instagram.com/acmebakery">Instagram</a>
    <p>© 2024 Acme Bakery</p>
  </footer>
</body></html>
"""


@pytest.mark.parametrize("html", [
    "",
    "not html at all",
    "<html><body><div><p>unclosed",
    "<<<>>>",
    "<style>{{{{</style><div style='color: rgb(999'>x</div>",
    "<a href='http://[::1'>broken</a><img class='logo' src='http://['>",
    "\x00\x01\x02",
])
def test_never_raises_and_keeps_shape(html):
    info = extract_business_info(html, BASE)
    assert isinstance(info, ExtractedBusinessInfo)
    for field in ("emails", "phones", "addresses", "social_links", "brand_colors", "fonts",
                  "key_features", "hero_images", "galleries"):
        assert isinstance(getattr(info, field), list)
    assert isinstance(info.structured_content.services, list)


def test_full_page():
    info = extract_business_info(FULL_PAGE, BASE)

    assert info.site_title == "Acme Bakery"
    assert info.business_description == "Family bakery baking sourdough since 1950."
    assert info.logo_url == "https://acme.com/logo.png"
    assert info.brand_colors == ["#c0392b"]
    assert info.emails == ["hello@acmebakery.com"]
    assert info.phones == ["+15551234567"]
    assert [link.platform for link in info.social_links] == ["instagram"]
    assert info.hero_section.headline == "Fresh bread every morning"
    assert info.hero_section.cta_link == "https://acme.com/order"
    assert info.favicon == "https://acme.com/favicon.ico"
    assert info.hours["monday"].open == "7am"
    assert info.hours["sunday"].closed is True
    assert info.structured_content.footer_content.copyright_text == "© 2024 Acme Bakery"


def test_serializes_camel_case():
    data = extract_business_info(FULL_PAGE, BASE).model_dump(by_alias=True)
    assert "logoUrl" in data
    assert "brandColors" in data
    assert "structuredContent" in data
