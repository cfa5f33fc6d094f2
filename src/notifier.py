"""
1.0 Notifier Module
Formats a catalog change summary and posts it to a chat webhook.

The message body is bounded: at most `max_items` added and `max_items`
removed products are listed, the rest are summarised as "+N more...".
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence, Union
from urllib.parse import unquote, urlparse

import requests

from src.errors import DeliveryError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 10
DEFAULT_CHANGE_URL_BASE = "http://localhost:5196/change/"
DEFAULT_TIMEOUT = 30
EMBED_TITLE = "📦 Product Changes"
EMBED_COLOR = 0x00FF00


def _title_case(text: str) -> str:
    """Capitalise each word, leaving all-caps words (acronyms) alone."""
    words = []
    for word in text.split(" "):
        if word.isupper():
            words.append(word)
        else:
            words.append(word[:1].upper() + word[1:].lower())
    return " ".join(words)


def display_label(product_url: str) -> str:
    """
    Human-readable label from the last path segment of a product URL.

    "https://shop.example/product/701-29461/pikachu-plush" -> "Pikachu Plush"
    """
    path = urlparse(product_url).path.rstrip("/")
    segment = unquote(path.rsplit("/", 1)[-1]) if path else ""
    if not segment:
        return product_url
    return _title_case(segment.replace("-", " "))


class WebhookNotifier:
    """
    2.0 WebhookNotifier Class
    Holds only immutable delivery settings plus its HTTP session.
    """

    def __init__(
        self,
        webhook_url: str,
        change_url_base: str = DEFAULT_CHANGE_URL_BASE,
        max_items: int = DEFAULT_MAX_ITEMS,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.webhook_url = (webhook_url or "").strip()
        self.change_url_base = change_url_base
        self.max_items = max(0, int(max_items))
        self.timeout = timeout
        self.session = session or requests.Session()

        if not self.webhook_url:
            logger.warning("No webhook URL configured; notifications disabled.")

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    # =========================================================================
    # 3.0 MESSAGE FORMATTING
    # =========================================================================

    def _section(self, heading: str, products: Sequence[str]) -> List[str]:
        lines = [heading]
        lines.extend(f"[{display_label(p)}]({p})" for p in products[:self.max_items])
        remaining = len(products) - self.max_items
        if remaining > 0:
            lines.append(f"+{remaining} more...")
        return lines

    def build_message(
        self,
        added: Sequence[str],
        removed: Sequence[str],
        change_id: Union[uuid.UUID, str],
    ) -> str:
        """
        3.1 Build the markdown summary for one change record.

        Layout: change link, blank line, new products block, blank line,
        removed products block. Empty blocks are omitted.
        """
        added = list(added)
        removed = list(removed)

        lines = [f"[🔗 View all changes]({self.change_url_base}{change_id})", ""]

        if added:
            lines.extend(self._section("🟢 **New Products:**", added))
            lines.append("")

        if removed:
            lines.extend(self._section("🔴 **Removed Products:**", removed))

        return "\n".join(lines).rstrip("\n")

    def build_payload(
        self,
        added: Sequence[str],
        removed: Sequence[str],
        change_id: Union[uuid.UUID, str],
    ) -> Dict[str, Any]:
        """3.2 Wrap the message in the webhook embed structure."""
        return {
            "embeds": [
                {
                    "title": EMBED_TITLE,
                    "description": self.build_message(added, removed, change_id),
                    "color": EMBED_COLOR,
                }
            ]
        }

    # =========================================================================
    # 4.0 DELIVERY
    # =========================================================================

    def notify(
        self,
        added: Sequence[str],
        removed: Sequence[str],
        change_id: Union[uuid.UUID, str],
    ) -> bool:
        """
        4.1 Send the change summary.

        Returns:
            True if a message was delivered, False if there was nothing to
            send or no webhook is configured

        Raises:
            DeliveryError: on a transport failure or a non-2xx response
        """
        if not added and not removed:
            return False

        if not self.enabled:
            logger.debug(f"Notifier inactive; skipping change {change_id}")
            return False

        payload = self.build_payload(added, removed, change_id)

        try:
            response = self.session.post(self.webhook_url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise DeliveryError(f"Could not reach webhook: {type(e).__name__}: {e}") from e

        if not 200 <= response.status_code < 300:
            raise DeliveryError(
                f"Webhook rejected change {change_id}: HTTP {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )

        logger.info(f"📣 Sent change notification {change_id} (+{len(added)}, -{len(removed)})")
        return True
