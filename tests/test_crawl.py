import pytest
import requests
from unittest.mock import Mock

from sitewalk.core import (
    CrawlRecord,
    CrawlSession,
    ItineraryExhausted,
    PageFetcher,
    TransportFailure,
    crawl,
)

SEED = "http://example.com/"

HOME = """<!DOCTYPE html>
<html>
<head><title>Home</title></head>
<body>
<p>Hello world</p>
<a href="/about"></a>
</body>
</html>
"""

MENU = """<html><head><title>Menu</title></head><body>
<a href="/a">A</a>
<a href="/b">B</a>
<a href="/c">C</a>
</body></html>
"""

LEAF = '<html><head><title>Leaf</title></head><body><a href="/elsewhere">x</a></body></html>'


def fetcher_for(client):
    return PageFetcher(http_client=client)


def test_end_to_end_single_hop(client_factory):
    client = client_factory({SEED: HOME, SEED + "about": LEAF})

    session = crawl(SEED, 1, fetcher=fetcher_for(client))

    assert len(session.records) == 2
    home = session.records[0]
    assert home.title == "Home"
    assert home.word_count == 2
    assert home.internal_links == ("about",)
    assert session.records[1].url == SEED + "about"
    assert [c.args[0] for c in client.call_args_list] == [SEED, SEED + "about"]


def test_budget_n_fetches_n_plus_one_pages(client_factory):
    pages = {SEED: MENU, SEED + "a": LEAF, SEED + "b": LEAF, SEED + "c": LEAF}
    client = client_factory(pages)

    session = crawl(SEED, 2, fetcher=fetcher_for(client))

    assert [r.url for r in session.records] == [SEED, SEED + "a", SEED + "b"]
    assert client.call_count == 3


def test_itinerary_fixed_at_first_page(client_factory):
    pages = {SEED: MENU, SEED + "a": LEAF, SEED + "b": LEAF, SEED + "c": LEAF}
    client = client_factory(pages)

    session = crawl(SEED, 3, fetcher=fetcher_for(client))

    assert session.itinerary == ("a", "b", "c")
    assert session.records[1].internal_links == ("elsewhere",)
    assert session.records[3].url == SEED + "c"


def test_urls_are_concatenated_without_normalization(client_factory):
    seed = "http://example.com"
    client = client_factory({seed: '<a href="/x">x</a>'})

    session = crawl(seed, 1, fetcher=fetcher_for(client))

    assert session.records[1].url == "http://example.comx"
    assert session.records[1].status_code == "404"


@pytest.mark.parametrize("budget", [0, -1, -10])
def test_non_positive_budget_is_empty_crawl(client_factory, budget):
    client = client_factory({SEED: HOME})

    session = crawl(SEED, budget, fetcher=fetcher_for(client))

    assert session.records == []
    assert session.itinerary == ()
    client.assert_not_called()


def test_insufficient_links_raise_itinerary_exhausted(client_factory):
    client = client_factory({SEED: HOME})

    with pytest.raises(ItineraryExhausted) as excinfo:
        crawl(SEED, 2, fetcher=fetcher_for(client))

    err = excinfo.value
    assert "insufficient links to traverse" in str(err)
    assert err.required == 2
    assert err.available == 1
    assert len(err.session.records) == 1
    assert client.call_count == 1


def test_seed_without_links_and_positive_budget(client_factory):
    client = client_factory({SEED: "<p>nothing here</p>"})

    with pytest.raises(ItineraryExhausted):
        crawl(SEED, 1, fetcher=fetcher_for(client))


def test_transport_failure_aborts_crawl():
    ok = Mock(status_code=200, text=HOME)
    client = Mock(side_effect=[ok, requests.exceptions.ConnectionError("refused")])

    with pytest.raises(TransportFailure) as excinfo:
        crawl(SEED, 1, fetcher=fetcher_for(client))

    err = excinfo.value
    assert err.step == 1
    assert err.url == SEED + "about"
    assert [r.url for r in err.session.records] == [SEED]


def test_transport_failure_on_seed():
    client = Mock(side_effect=requests.exceptions.ConnectTimeout("slow"))

    with pytest.raises(TransportFailure) as excinfo:
        crawl(SEED, 3, fetcher=fetcher_for(client))

    assert excinfo.value.step == 0
    assert excinfo.value.session.records == []


def test_verbose_progress_goes_to_stderr(client_factory, capsys):
    client = client_factory({SEED: HOME, SEED + "about": LEAF})

    crawl(SEED, 1, fetcher=fetcher_for(client), verbose=True)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Starting crawl from: http://example.com/" in captured.err
    assert "200 http://example.com/about" in captured.err


def test_session_rejects_out_of_order_steps():
    session = CrawlSession(url=SEED, step_budget=2)
    record = CrawlRecord(url=SEED, elapsed_seconds=0.0, status_code="200")

    with pytest.raises(ValueError):
        session.record(1, record)


def test_capture_itinerary_only_once():
    session = CrawlSession(url=SEED, step_budget=2)
    session.capture_itinerary(["a", "b"])
    session.capture_itinerary(["z"])

    assert session.itinerary == ("a", "b")
    assert session.url_for_step(2) == SEED + "b"
    with pytest.raises(ItineraryExhausted):
        session.url_for_step(3)
