"""
Product Catalog Monitor - Source Package

Modules:
- config: Configuration loading and validation
- sitemap_fetcher: HTTP fetching with a fixed in-cycle retry policy
- sitemap_parser: XML parsing of locale-tagged product sitemaps
- diff_engine: Added/removed computation between catalogs
- change_store: Append-only change history and change-log export
- snapshot_store: Last observed catalog
- notifier: Webhook change summaries
- scheduler: The periodic fetch -> diff -> persist -> notify loop
"""

__version__ = "1.0.0"
