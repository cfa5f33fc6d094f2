from unittest import mock

import pytest
import requests

from conftest import fake_response, make_sitemap
from src.errors import FetchError
from src.sitemap_fetcher import CatalogFetcher

SITEMAP_URL = "https://shop.example/sitemaps/products.xml"
PRODUCTS = ["https://shop.example/product/1/a", "https://shop.example/product/2/b"]


def build_fetcher(responses, **overrides):
    session = mock.Mock()
    session.get.side_effect = responses
    sleep = mock.Mock()
    config = {"sitemap_url": SITEMAP_URL, "retry_delay": 2.0, **overrides}
    return CatalogFetcher(config=config, session=session, sleep=sleep), session, sleep

# =============================================================================
# 1. SINGLE ATTEMPT
# =============================================================================

def test_successful_fetch_returns_catalog():
    fetcher, session, sleep = build_fetcher([fake_response(content=make_sitemap(PRODUCTS))])

    catalog = fetcher.fetch()

    assert catalog.to_list() == PRODUCTS
    session.get.assert_called_once_with(SITEMAP_URL, timeout=600)
    sleep.assert_not_called()


@pytest.mark.parametrize("outcome, expected", [
    (fake_response(status_code=503), "HTTP status 503"),
    (fake_response(content=b"<urlset><url>"), "XMLSyntaxError"),
    (requests.exceptions.ConnectionError("refused"), "ConnectionError"),
    (requests.exceptions.Timeout(), "Timeout"),
])
def test_failed_attempt_is_reported_not_raised(outcome, expected):
    fetcher, _, _ = build_fetcher([outcome])
    result = fetcher.fetch_attempt(1)
    assert result.ok is False
    assert result.catalog is None
    assert expected in result.error


def test_empty_urlset_is_a_successful_empty_catalog():
    fetcher, _, sleep = build_fetcher([fake_response(content=make_sitemap([]))])

    result = fetcher.fetch_attempt(1)

    assert result.ok is True
    assert result.error is None
    assert len(result.catalog) == 0
    sleep.assert_not_called()

# =============================================================================
# 2. RETRY POLICY
# =============================================================================

def test_succeeds_on_third_attempt():
    fetcher, session, sleep = build_fetcher([
        requests.exceptions.ConnectionError("reset"),
        fake_response(status_code=500),
        fake_response(content=make_sitemap(PRODUCTS)),
    ])

    assert fetcher.fetch().to_list() == PRODUCTS
    assert session.get.call_count == 3
    assert sleep.call_args_list == [mock.call(2.0), mock.call(2.0)]


def test_exhausted_attempts_raise_fetch_error():
    fetcher, session, sleep = build_fetcher([
        fake_response(status_code=500),
        fake_response(status_code=502),
        fake_response(status_code=504),
    ])

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch()

    assert "HTTP status 504" in str(excinfo.value)
    assert excinfo.value.attempts == 3
    assert session.get.call_count == 3
    # Fixed delay between attempts, none after the last one
    assert sleep.call_args_list == [mock.call(2.0), mock.call(2.0)]


def test_attempt_budget_is_configurable():
    fetcher, session, _ = build_fetcher([fake_response(status_code=500)], max_attempts=1)
    with pytest.raises(FetchError):
        fetcher.fetch()
    assert session.get.call_count == 1

# =============================================================================
# 3. CONFIGURATION
# =============================================================================

def test_rejects_invalid_sitemap_url():
    with pytest.raises(ValueError):
        CatalogFetcher(config={"sitemap_url": "not-a-url"})


def test_default_session_headers():
    fetcher = CatalogFetcher(config={"sitemap_url": SITEMAP_URL, "user_agent": "TestBot/1.0"})
    assert fetcher.session.headers["User-Agent"] == "TestBot/1.0"
    fetcher.close()
