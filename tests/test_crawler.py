import pytest

from visit_website.config import VisitConfig
from visit_website.content import extract_text
from visit_website.crawler import DOWNLOAD_ABORTED, VISIT_ABORTED, view_images, visit_website
from visit_website.fetcher import AbortSignal
from visit_website.reporting import CollectingReporter

from conftest import PNG_1X1, FakeResponse, html_response

PAGE = """<!doctype html>
<html><head><meta charset="utf-8"><title>Example Domain</title></head>
<body class="main">
<h1 id="top">Welcome</h1>
<h2>Section</h2>
<script>var secret = "hidden";</script>
<style>.x { color: red; }</style>
<p>Example text about widgets and gadgets.</p>
<a href="/about">About Us</a>
<a href="mailto:me@example.com">Mail</a>
<img alt="Logo" src="/logo.png">
<img alt="Broken" src="https://example.com/broken.gif">
</body></html>"""


def _png() -> FakeResponse:
    return FakeResponse(content=PNG_1X1, headers={"Content-Type": "image/png"})


@pytest.fixture
def site(web):
    web.add("https://example.com/", html_response(PAGE))
    web.add("https://example.com/logo.png", _png())
    return web


@pytest.mark.asyncio
async def test_visit_returns_bounded_summary(site, tmp_path) -> None:
    reporter = CollectingReporter()

    result = await visit_website(
        "https://example.com/",
        config=VisitConfig(working_directory=tmp_path),
        reporter=reporter,
    )

    assert result["url"] == "https://example.com/"
    assert result["title"] == "Example Domain"
    assert (result["h1"], result["h2"], result["h3"]) == ("Welcome", "Section", "")
    assert result["links"] == [["About Us", "https://example.com/about"]]

    (logo_alt, logo_md), (broken_alt, broken_md) = result["images"]
    assert logo_alt == "Logo"
    assert logo_md.startswith("![Image 1](") and logo_md.endswith("-1.png)")
    assert broken_alt == "Broken"
    assert broken_md == "Error fetching image from URL: https://example.com/broken.gif"

    assert "widgets and gadgets" in result["content"]
    assert "hidden" not in result["content"]
    assert "color" not in result["content"]
    assert reporter.statuses[0] == "Visiting website..."
    assert "Website visited successfully." in reporter.statuses
    assert any("Failed to fetch image 2" in w for w in reporter.warnings)


@pytest.mark.asyncio
async def test_zero_budgets_omit_fields(site, tmp_path) -> None:
    result = await visit_website(
        "https://example.com/",
        max_links=0,
        max_images=0,
        content_limit=0,
        config=VisitConfig(working_directory=tmp_path),
        reporter=CollectingReporter(),
    )

    assert set(result) == {"url", "title", "h1", "h2", "h3"}
    assert site.calls == ["https://example.com/"]
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_configured_budget_applies_unless_overridden(web, tmp_path) -> None:
    body = "".join(f'<a href="/p/{i}">Page {i}</a>' for i in range(20))
    web.add("https://example.com/", html_response(f"<body>{body}</body>"))
    config = VisitConfig(working_directory=tmp_path, max_links=3, max_images=0)

    configured = await visit_website("https://example.com/", config=config, reporter=CollectingReporter())
    overridden = await visit_website(
        "https://example.com/", max_links=1, config=config, reporter=CollectingReporter()
    )

    assert len(configured["links"]) == 3
    assert len(overridden["links"]) == 1


@pytest.mark.asyncio
async def test_overlapping_search_windows_merge(web, tmp_path) -> None:
    body = "<body><p>" + "lorem " * 100 + "alpha and beta" + " ipsum" * 100 + "</p></body>"
    web.add("https://example.com/", html_response(body))

    result = await visit_website(
        "https://example.com/",
        find_in_page=["beta", "alpha"],
        max_links=0,
        max_images=0,
        content_limit=40,
        config=VisitConfig(working_directory=tmp_path),
        reporter=CollectingReporter(),
    )

    content = result["content"]
    assert content.count("alpha") == 1
    assert content.count("beta") == 1
    assert content in extract_text(body)


@pytest.mark.asyncio
async def test_simple_profile_is_selectable(site, tmp_path) -> None:
    result = await visit_website(
        "https://example.com/",
        max_images=0,
        config=VisitConfig(working_directory=tmp_path, profile="simple"),
        reporter=CollectingReporter(),
    )

    assert result["links"] == [["About Us", "https://example.com/about"]]


@pytest.mark.asyncio
async def test_bad_status_returns_error_string(web, tmp_path) -> None:
    reporter = CollectingReporter()

    result = await visit_website(
        "https://example.com/missing",
        config=VisitConfig(working_directory=tmp_path),
        reporter=reporter,
    )

    assert result == "Error: Failed to fetch website: 404 Not Found"
    assert "Failed to fetch website: 404 Not Found" in reporter.warnings


@pytest.mark.asyncio
async def test_aborted_visit_returns_dedicated_message(site, tmp_path) -> None:
    signal = AbortSignal()
    signal.abort()

    result = await visit_website(
        "https://example.com/",
        config=VisitConfig(working_directory=tmp_path),
        reporter=CollectingReporter(),
        signal=signal,
    )

    assert result == VISIT_ABORTED


@pytest.mark.asyncio
async def test_unexpected_errors_are_not_raised(site, tmp_path, monkeypatch) -> None:
    def explode(*args, **kwargs):
        raise KeyError("boom")

    monkeypatch.setattr("visit_website.crawler.rank_links", explode)

    result = await visit_website(
        "https://example.com/",
        config=VisitConfig(working_directory=tmp_path),
        reporter=CollectingReporter(),
    )

    assert result == "Error: Unexpected error during website visit"


@pytest.mark.asyncio
async def test_view_images_from_urls_and_website(site, tmp_path) -> None:
    site.add("https://cdn.example.com/extra.png", _png())
    config = VisitConfig(working_directory=tmp_path)
    local = str(config.working_directory / "already-here.png")

    result = await view_images(
        ["https://cdn.example.com/extra.png", local],
        website_url="https://example.com/",
        max_images=1,
        config=config,
        reporter=CollectingReporter(),
    )

    assert len(result) == 3
    assert result[0].startswith("![Image 1](") and result[0].endswith("-1.png)")
    assert result[1] == f"![Image 2]({local})"
    assert result[2] == "Error fetching image from URL: https://example.com/broken.gif"


@pytest.mark.asyncio
async def test_view_images_without_input(web, tmp_path) -> None:
    reporter = CollectingReporter()

    result = await view_images(config=VisitConfig(working_directory=tmp_path), reporter=reporter)

    assert result == []
    assert reporter.warnings == ["Error fetching images"]


@pytest.mark.asyncio
async def test_view_images_aborted_website_fetch(site, tmp_path) -> None:
    signal = AbortSignal()
    signal.abort()

    result = await view_images(
        website_url="https://example.com/",
        config=VisitConfig(working_directory=tmp_path),
        reporter=CollectingReporter(),
        signal=signal,
    )

    assert result == DOWNLOAD_ABORTED
