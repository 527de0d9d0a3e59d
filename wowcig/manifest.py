from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Iterable

from .crawl import Crawler
from .errors import ContentNotFound, ManifestError
from .paths import normalize_path
from .tables import (
    MANIFEST_INTERFACE_DATA,
    MANIFEST_INTERFACE_TOC_DATA,
    TableRegistry,
)

INTERFACE_ROOT = "Interface/"
FRAMEXML_DIR = "Interface/FrameXML"
BUILD_VARIANTS = ("", "_Vanilla", "_TBC", "_Mainline")


@dataclass(frozen=True)
class AddonDescriptor:
    directory: str
    variants: tuple[str, ...] = BUILD_VARIANTS

    def __post_init__(self):
        if not self.directory.startswith(INTERFACE_ROOT):
            raise ValueError(f"addon directory outside Interface/: {self.directory}")

    @property
    def name(self) -> str:
        return posixpath.basename(self.directory)

    def toc_paths(self) -> list[str]:
        return [
            f"{self.directory}/{self.name}{suffix}.toc" for suffix in self.variants
        ]

    def bindings_paths(self) -> list[str]:
        subdir = self.directory[len(INTERFACE_ROOT) :]
        return [f"Interface{suffix}/{subdir}/Bindings.xml" for suffix in self.variants]


def _read_table(store, registry: TableRegistry, name: str, version: str):
    table = registry.lookup(name)
    try:
        data = store.read_file(table.file_id)
    except ContentNotFound as e:
        raise ManifestError(f"{name} ({table.file_id}) missing from archive") from e
    return table.build(version).rows(data)


def _table_path(path: str) -> str:
    # manifest tables store Windows-style separators
    return normalize_path(path.replace("\\", "/"))


def build_file_ids(store, registry: TableRegistry, version: str) -> dict[str, int]:
    """Map lowercased normalized paths to file ids from the interface file manifest."""
    file_ids = {}
    for row in _read_table(store, registry, MANIFEST_INTERFACE_DATA, version):
        path = _table_path(f"{row['FilePath']}{row['FileName']}")
        file_ids[path.lower()] = row["ID"]
    return file_ids


def addon_directories(store, registry: TableRegistry, version: str) -> list[str]:
    dirs = [FRAMEXML_DIR]
    for row in _read_table(store, registry, MANIFEST_INTERFACE_TOC_DATA, version):
        dirs.append(_table_path(row["FilePath"]))
    return dirs


def crawl_addon(crawler: Crawler, addon: AddonDescriptor) -> None:
    for toc, bindings in zip(addon.toc_paths(), addon.bindings_paths()):
        crawler.visit_toc(toc)
        crawler.visit(bindings)


def crawl_addons(crawler: Crawler, directories: Iterable[str]) -> None:
    for directory in directories:
        crawl_addon(crawler, AddonDescriptor(directory))


def export_tables(sink, load_id, registry: TableRegistry, names: Iterable[str]):
    """
    Save each requested table as `db2/<name>.db2`, without scanning it.

    Unknown names and tables missing from the archive are fatal.
    """
    for requested in names:
        table = registry.lookup(requested)

        def write(out, file_id=table.file_id, name=requested):
            content = load_id(file_id)
            if content is None:
                raise ManifestError(f"table {name} ({file_id}) missing from archive")
            out(content)

        sink.save(f"db2/{table.name}.db2", write)
