from .crawl import CrawlContext, Crawler
from .extract import ExtractSettings, run_extraction
from .markup import scan_references
from .paths import join_relative, normalize_path

__all__ = [
    "CrawlContext",
    "Crawler",
    "ExtractSettings",
    "join_relative",
    "normalize_path",
    "run_extraction",
    "scan_references",
]
