import httpx

from norquay_status.config import SourceConfig
from norquay_status.http_client import HttpFetcher

SETTINGS = SourceConfig(conditions_url="https://norquay.test/winter/conditions/", timeout=5.0)


def test_built_client_is_closed_on_exit():
    with HttpFetcher(settings=SETTINGS) as fetcher:
        assert fetcher.client.headers["User-Agent"] == SETTINGS.user_agent
        assert not fetcher.client.is_closed

    assert fetcher.client.is_closed


def test_injected_client_stays_open(make_client):
    client = make_client(lambda _: httpx.Response(200, text="<html></html>"))

    with HttpFetcher(client=client, settings=SETTINGS) as fetcher:
        assert fetcher.fetch_text(SETTINGS.conditions_url) == "<html></html>"

    assert not client.is_closed
