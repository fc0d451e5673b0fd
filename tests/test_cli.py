import json

from visit_website.cli import main, parse_args

from conftest import html_response


def test_bare_url_defaults_to_visit() -> None:
    args = parse_args(["https://example.com/", "--find", "alpha", "--find", "beta"])

    assert args.command == "visit"
    assert args.url == "https://example.com/"
    assert args.find_in_page == ["alpha", "beta"]
    assert args.max_links is None


def test_images_subcommand() -> None:
    args = parse_args(["images", "https://e.com/a.png", "--website", "https://e.com/", "--max-images", "3"])

    assert args.command == "images"
    assert args.image_urls == ["https://e.com/a.png"]
    assert args.website == "https://e.com/"
    assert args.max_images == 3


def test_visit_prints_json(web, tmp_path, capsys) -> None:
    web.add(
        "https://example.com/",
        html_response('<head><title>Hi</title></head><body><a href="/x">Some link</a></body>'),
    )

    main(["visit", "https://example.com/", "--content-limit", "0", "--output", str(tmp_path)])

    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "url": "https://example.com/",
        "title": "Hi",
        "h1": "",
        "h2": "",
        "h3": "",
        "links": [["Some link", "https://example.com/x"]],
    }


def test_visit_prints_markdown(web, tmp_path, capsys) -> None:
    web.add(
        "https://example.com/",
        html_response("<head><title>Hi</title></head><body><h1>Header</h1><p>Body text</p></body>"),
    )

    main(["https://example.com/", "--markdown", "--output", str(tmp_path)])

    out = capsys.readouterr().out
    assert out.startswith("---\ntitle: Hi\nsource_url: https://example.com/\n")
    assert "# Header" in out
    assert "Body text" in out


def test_markdown_mode_reports_unexpected_errors(web, tmp_path, capsys, monkeypatch) -> None:
    web.add("https://example.com/", html_response("<body><p>Body text</p></body>"))

    def explode(*args, **kwargs):
        raise KeyError("boom")

    monkeypatch.setattr("visit_website.crawler.rank_links", explode)

    main(["https://example.com/", "--markdown", "--output", str(tmp_path)])

    assert capsys.readouterr().out == "Error: Unexpected error during website visit\n"
