import threading

import pytest
import requests

from voicenav.core.api_client import WikiApiClient


class FakeResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.calls = []

    def _respond(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.responses[url]

    def post(self, url, **kwargs):
        return self._respond("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._respond("GET", url, **kwargs)


BASE = "http://backend"


def _search_payload(*items):
    return {
        "status": "success",
        "results": [{"article_id": i, "title": t, "text": ""} for i, t in items],
    }


def test_search_posts_query_and_limit():
    session = FakeSession({f"{BASE}/api/search/lexical": FakeResponse(_search_payload((1, "Cats")))})
    client = WikiApiClient(BASE + "/", session=session)

    results = client.search("cats", "lexical", limit=3)

    assert [r.title for r in results] == ["Cats"]
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", f"{BASE}/api/search/lexical")
    assert kwargs["json"] == {"query": "cats", "limit": 3}


def test_legacy_backend_uses_old_type_names():
    session = FakeSession({
        f"{BASE}/api/search/content": FakeResponse(_search_payload((1, "Cats"))),
        f"{BASE}/api/search/vectors": FakeResponse(_search_payload((2, "Dogs"))),
    })
    client = WikiApiClient(BASE, legacy=True, session=session)
    assert [r.id for r in client.search_all("pets", ["lexical", "semantic"])] == [1, 2]


@pytest.mark.parametrize("response", [
    FakeResponse({"status": "error", "message": "index missing"}),
    FakeResponse(invalid_json=True),
    FakeResponse(status_code=500),
    FakeResponse(["not", "an", "object"]),
])
def test_search_failures_return_empty(response):
    session = FakeSession({f"{BASE}/api/search/lexical": response})
    assert WikiApiClient(BASE, session=session).search("cats") == []


def test_network_error_returns_empty():
    session = FakeSession(error=requests.ConnectionError("refused"))
    client = WikiApiClient(BASE, session=session)
    assert client.search("cats") == []
    assert client.fetch_article(3) is None


def test_malformed_results_are_skipped():
    payload = {"status": "success", "results": [{"title": "no id"}, {"article_id": 5, "title": "Ok"}]}
    session = FakeSession({f"{BASE}/api/search/lexical": FakeResponse(payload)})
    assert [r.id for r in WikiApiClient(BASE, session=session).search("x")] == [5]


def test_search_all_keeps_first_occurrence():
    session = FakeSession({
        f"{BASE}/api/search/title": FakeResponse(_search_payload((1, "A"), (2, "B"))),
        f"{BASE}/api/search/lexical": FakeResponse(_search_payload((2, "B"), (3, "C"))),
    })
    client = WikiApiClient(BASE, session=session)
    assert [r.id for r in client.search_all("q", ["title", "lexical"])] == [1, 2, 3]


def test_fetch_article():
    payload = {
        "status": "success",
        "article": {"title": "Rome", "sections": [{"title": "History", "texts": ["Old."]}]},
    }
    session = FakeSession({f"{BASE}/api/article": FakeResponse(payload)})
    article = WikiApiClient(BASE, session=session).fetch_article(9)

    assert article.id == 9
    assert article.sections[0].texts == ("Old.",)
    assert session.calls[0][2]["params"] == {"id": 9}


def test_fetch_article_legacy_sections():
    payload = {
        "status": "success",
        "article": {"title": "Rome", "sections": [{"title": "History", "content": "Old."}]},
    }
    session = FakeSession({f"{BASE}/api/article": FakeResponse(payload)})
    article = WikiApiClient(BASE, session=session).fetch_article(9)
    assert article.sections[0].texts == ("Old.",)


@pytest.mark.parametrize("payload", [
    {"status": "error", "message": "not found"},
    {"status": "success"},
    {"status": "success", "article": {"title": "x", "sections": "oops"}},
])
def test_fetch_article_failures_return_none(payload):
    session = FakeSession({f"{BASE}/api/article": FakeResponse(payload)})
    assert WikiApiClient(BASE, session=session).fetch_article(1) is None


class BarrierSession(FakeSession):
    """Each POST waits until every search type has been sent."""

    def __init__(self, responses, parties):
        super().__init__(responses)
        self.barrier = threading.Barrier(parties, timeout=2.0)

    def post(self, url, **kwargs):
        self.barrier.wait()
        return super().post(url, **kwargs)


def test_search_all_sends_types_concurrently():
    session = BarrierSession({
        f"{BASE}/api/search/title": FakeResponse(_search_payload((1, "A"))),
        f"{BASE}/api/search/lexical": FakeResponse(_search_payload((2, "B"))),
        f"{BASE}/api/search/semantic": FakeResponse(_search_payload((3, "C"))),
    }, parties=3)
    client = WikiApiClient(BASE, session=session)

    results = client.search_all("q", ["title", "lexical", "semantic"])
    assert [r.id for r in results] == [1, 2, 3]


def test_search_all_without_types():
    session = FakeSession()
    assert WikiApiClient(BASE, session=session).search_all("q", []) == []
    assert session.calls == []
