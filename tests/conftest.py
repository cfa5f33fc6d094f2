import sys
from pathlib import Path
from unittest import mock

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.config import MonitorConfig  # noqa: E402


def make_sitemap(products, locale="en-us", extra_locales=("fr-fr",)):
    """Product sitemap with one <url> per product and locale alternates."""
    entries = []
    for url in products:
        links = "".join(
            f'<xhtml:link rel="alternate" hreflang="{other}" href="{url}?lang={other}"/>'
            for other in extra_locales
        )
        links += f'<xhtml:link rel="alternate" hreflang="{locale}" href="{url}"/>'
        entries.append(f"<url><loc>{url}</loc>{links}</url>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" '
        'xmlns:xhtml="http://www.w3.org/1999/xhtml">'
        + "".join(entries)
        + "</urlset>"
    ).encode("utf-8")


def fake_response(status_code=200, content=b"", text=""):
    response = mock.Mock()
    response.status_code = status_code
    response.content = content
    response.text = text or content.decode("utf-8", errors="replace")
    return response


@pytest.fixture
def monitor_config(tmp_path):
    return MonitorConfig(
        sitemap_url="https://shop.example/sitemaps/products.xml",
        data_directory=str(tmp_path),
        webhook_url="https://chat.example/api/webhooks/1/abc",
        interval_seconds=3600,
        retry_delay=0,
    )
