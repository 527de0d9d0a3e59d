from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol, Union

import requests

from .errors import ContentNotFound, ContentStoreError, StoreOpenError

FileKey = Union[int, str]

DEFAULT_PATCH_URL = "http://us.patch.battle.net:1119"
DEFAULT_REGION = "us"
LISTFILE_NAME = "listfile.csv"


class ContentStore(Protocol):
    def read_file(self, key: FileKey) -> bytes:
        """Return the bytes for a file id or path; raise ContentNotFound if absent."""
        ...


def parse_versions(text: str) -> list[dict[str, str]]:
    """
    Parse a patch server table such as

        Region!STRING:0|BuildConfig!HEX:16|...|VersionsName!String:0
        ## seqn = 2178423
        us|be2bb98dc28aee05bbee519393696cdb|...|1.15.2.55140

    into a list of row dicts keyed by column name (without type suffix).
    """
    header = None
    rows = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split("|")
        if header is None:
            header = [f.split("!", 1)[0] for f in fields]
            continue
        rows.append(dict(zip(header, fields)))
    return rows


def fetch_version(
    product: str,
    region: str = DEFAULT_REGION,
    patch_url: str = DEFAULT_PATCH_URL,
    timeout: float = 30,
) -> str:
    url = f"{patch_url.rstrip('/')}/{product}/versions"
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise StoreOpenError(f"version lookup failed: {e}") from e

    for row in parse_versions(resp.text):
        if row.get("Region") == region and row.get("VersionsName"):
            return row["VersionsName"]
    raise StoreOpenError(f"no {region} version listed at {url}")


class DirectoryContentStore:
    """
    Serves archive files from an on-disk mirror of the archive.

    Paths are matched case-insensitively, like lookups in the archive itself.
    Numeric file ids are mapped to paths through `listfile.csv` at the mirror
    root (lines of `<id>;<path>`).
    """

    def __init__(self, root: os.PathLike[str] | str) -> None:
        self.root = Path(root)
        if not self.root.is_dir():
            raise StoreOpenError(f"no archive mirror at {self.root}")
        self._index: dict[str, Path] | None = None
        self._listfile: dict[int, str] | None = None
        self._ids_by_path: dict[str, int] | None = None

    def read_file(self, key: FileKey) -> bytes:
        if isinstance(key, int):
            path = self._file_ids().get(key)
            if path is None:
                raise ContentNotFound(key)
        else:
            path = key
        full = self._paths().get(path.replace("\\", "/").lower())
        if full is None:
            raise ContentNotFound(key)
        try:
            return full.read_bytes()
        except OSError as e:
            raise ContentStoreError(f"reading {full}: {e}") from e

    def file_id(self, path: str) -> int | None:
        """Return the listfile id of `path` (case-insensitive), if it has one."""
        if self._ids_by_path is None:
            self._ids_by_path = {
                name.replace("\\", "/").lower(): file_id
                for file_id, name in self._file_ids().items()
            }
        return self._ids_by_path.get(path.replace("\\", "/").lower())

    def _paths(self) -> dict[str, Path]:
        if self._index is None:
            index = {}
            for dirpath, _dirnames, filenames in os.walk(self.root):
                for name in filenames:
                    full = Path(dirpath) / name
                    rel = full.relative_to(self.root).as_posix()
                    index.setdefault(rel.lower(), full)
            self._index = index
        return self._index

    def _file_ids(self) -> dict[int, str]:
        if self._listfile is None:
            listfile = {}
            path = self.root / LISTFILE_NAME
            if path.exists():
                with open(path, "r", encoding="utf-8") as f:
                    for line in f:
                        file_id, sep, name = line.strip().partition(";")
                        if sep and file_id.isdigit():
                            listfile[int(file_id)] = name
            self._listfile = listfile
        return self._listfile


def open_store(settings) -> tuple[DirectoryContentStore, str]:
    """Open the archive for `settings.product`; return (store, version)."""
    version = settings.version or fetch_version(
        settings.product,
        region=settings.region,
        patch_url=settings.patch_url,
        timeout=settings.timeout,
    )
    store = DirectoryContentStore(Path(settings.cache) / settings.product)
    return store, version
