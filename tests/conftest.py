import base64

import pytest
from requests.structures import CaseInsensitiveDict

PNG_1X1 = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8"
    "/w8AAgMBgN6M6vQAAAAASUVORK5CYII="
)


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        content: bytes = b"",
        headers: dict | None = None,
        reason: str = "OK",
    ):
        self.status_code = status_code
        self.reason = reason
        self.content = content
        self.headers = CaseInsensitiveDict(headers or {})

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


def html_response(html: str) -> FakeResponse:
    return FakeResponse(content=html.encode("utf-8"), headers={"Content-Type": "text/html"})


class StubWeb:
    """Stands in for ``requests.get``; unknown URLs answer 404."""

    def __init__(self):
        self.routes: dict = {}
        self.calls: list[str] = []
        self.headers: list[dict] = []

    def add(self, url: str, response) -> None:
        self.routes[url] = response

    def get(self, url, headers=None, timeout=None):
        self.calls.append(url)
        self.headers.append(headers or {})
        result = self.routes.get(url)
        if result is None:
            return FakeResponse(404, reason="Not Found")
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result()
        return result


@pytest.fixture
def web(monkeypatch) -> StubWeb:
    stub = StubWeb()
    monkeypatch.setattr("visit_website.fetcher.requests.get", stub.get)
    return stub
