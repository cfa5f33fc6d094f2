import logging
from typing import Any, Dict, List, Optional, Union

from lxml import etree # Using lxml for robust parsing and namespace handling

logger = logging.getLogger(__name__)

# Product sitemap namespaces
SITEMAP_NS = {
    'sm': 'http://www.sitemaps.org/schemas/sitemap/0.9',
    # Localized alternates: <xhtml:link rel="alternate" hreflang="en-us" href="..."/>
    'xhtml': 'http://www.w3.org/1999/xhtml',
}

DEFAULT_LOCALE = "en-us"


class SitemapParser:
    def __init__(self, locale: str = DEFAULT_LOCALE):
        self.locale = (locale or DEFAULT_LOCALE).strip().lower()
        logger.info(f"SitemapParser initialized (locale={self.locale}).")

    def parse_sitemap(self, xml_content: Union[str, bytes], sitemap_url: str = "") -> Dict[str, Any]:
        """
        Parses a product sitemap and extracts the locale-tagged product URLs.

        Args:
            xml_content: The XML content of the sitemap (bytes preferred).
            sitemap_url: The URL from which this sitemap was fetched (for logging/context).

        Returns:
            A dictionary with:
                'type': 'urlset' or 'error'
                'urls': Deduplicated product URLs in document order, or None on error.
                'error_message': A string describing the error, if any.
        """
        if not xml_content:
            logger.error(f"Cannot parse empty XML content (from {sitemap_url}).")
            return {"type": "error", "urls": None, "error_message": "Empty XML content"}

        if isinstance(xml_content, str):
            xml_content = xml_content.encode('utf-8')

        try:
            # Strict parsing: a truncated download must fail rather than yield a partial catalog
            parser = etree.XMLParser(
                recover=False,
                remove_blank_text=True,
                resolve_entities=False,
                no_network=True,
                huge_tree=True,
            )
            root = etree.fromstring(xml_content, parser=parser)
        except (etree.XMLSyntaxError, ValueError) as e:
            logger.error(f"XML syntax error while parsing sitemap from {sitemap_url}: {e}")
            return {"type": "error", "urls": None, "error_message": f"XMLSyntaxError: {e}"}

        if root is None:
            return {"type": "error", "urls": None, "error_message": "Document has no root element"}

        root_tag_name = etree.QName(root.tag).localname
        if root_tag_name != 'urlset':
            msg = f"Unexpected root element '{root.tag}' in {sitemap_url}; expected a urlset."
            logger.error(msg)
            return {"type": "error", "urls": None, "error_message": msg}

        product_urls = self._extract_localized_urls(root)
        logger.info(f"Parsed URL set {sitemap_url}: {len(product_urls):,} {self.locale} product URLs")
        return {"type": "urlset", "urls": product_urls, "error_message": None}

    def _localized_href(self, url_element: etree._Element) -> Optional[str]:
        """Returns the href of the first alternate link tagged with our locale."""
        for link in url_element.findall('xhtml:link', SITEMAP_NS):
            hreflang = (link.get('hreflang') or '').strip().lower()
            if hreflang == self.locale:
                href = (link.get('href') or '').strip()
                return href or None
        return None

    def _extract_localized_urls(self, root_element: etree._Element) -> List[str]:
        """Extracts locale hrefs from each <url>, first-seen order, no duplicates."""
        seen = set()
        product_urls = []
        skipped = 0
        for url_element in root_element.xpath('//sm:url', namespaces=SITEMAP_NS):
            href = self._localized_href(url_element)
            if not href:
                skipped += 1
                continue
            if href in seen:
                continue
            seen.add(href)
            product_urls.append(href)

        if skipped:
            logger.debug(f"Skipped {skipped} <url> entries without a {self.locale} link.")
        return product_urls
