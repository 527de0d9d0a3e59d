from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from .crawl import DEFAULT_MAX_DEPTH, CrawlContext, Crawler
from .errors import ContentNotFound
from .manifest import addon_directories, build_file_ids, crawl_addons, export_tables
from .output import ExtractionStats, open_sink
from .store import DEFAULT_PATCH_URL, DEFAULT_REGION, open_store
from .tables import TableRegistry

PRODUCTS = (
    "wow",
    "wowt",
    "wow_classic",
    "wow_classic_era",
    "wow_classic_era_ptr",
    "wow_classic_ptr",
)


@dataclass(frozen=True)
class ExtractSettings:
    product: str
    cache: str = "cache"
    extracts: str = "extracts"
    db2: tuple[str, ...] = ()
    skip_framexml: bool = False
    zip_output: bool = False
    region: str = DEFAULT_REGION
    patch_url: str = DEFAULT_PATCH_URL
    version: str | None = None
    timeout: float = 30
    max_depth: int = DEFAULT_MAX_DEPTH
    tables: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: dict[str, Any], **overrides) -> "ExtractSettings":
        """Build settings from config values, with non-None overrides winning."""
        known = set(cls.__dataclass_fields__)
        values = {k.replace("-", "_"): v for k, v in (config or {}).items()}
        values = {k: v for k, v in values.items() if k in known}
        values.update({k: v for k, v in overrides.items() if v is not None})
        if "db2" in values:
            values["db2"] = tuple(values["db2"])
        return cls(**values)


@dataclass(frozen=True)
class ExtractionResult:
    version: str
    stats: ExtractionStats


def make_loader(store, file_ids: dict[str, int]) -> Callable[[Any], bytes | None]:
    """Read by file id where the interface manifest knows the path, else by path."""

    def load(key):
        if isinstance(key, str):
            key = file_ids.get(key.lower(), key)
        try:
            return store.read_file(key)
        except ContentNotFound:
            return None

    return load


def run_extraction(settings: ExtractSettings, log=None, store=None, version=None):
    """
    Extract the interface files and requested tables for one product.

    `store` and `version` may be supplied to bypass opening the archive.
    Returns the archive version and the sink statistics.
    """
    log = log or (lambda *args: None)
    if store is None:
        store, version = open_store(settings)
    log("loading", version)

    registry = TableRegistry(
        settings.tables, resolve_id=getattr(store, "file_id", None)
    )
    with open_sink(
        settings.extracts,
        version,
        settings.product,
        zip_output=settings.zip_output,
        log=log,
    ) as sink:
        file_ids = build_file_ids(store, registry, version)
        load = make_loader(store, file_ids)
        if not settings.skip_framexml:
            crawler = Crawler(
                CrawlContext(load=load, sink=sink, log=log, max_depth=settings.max_depth)
            )
            crawl_addons(crawler, addon_directories(store, registry, version))
        export_tables(sink, load, registry, settings.db2)
    return ExtractionResult(version=version, stats=sink.stats)

