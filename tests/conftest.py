from __future__ import annotations

import pytest

from wowcig.errors import ContentNotFound
from wowcig.tables import BUILTIN_TABLES


class FakeStore:
    """In-memory content store keyed by file id or exact path."""

    def __init__(self, files: dict | None = None) -> None:
        self.files = dict(files or {})
        self.reads: list = []

    def read_file(self, key):
        self.reads.append(key)
        try:
            return self.files[key]
        except KeyError:
            raise ContentNotFound(key) from None


class RecordingSink:
    def __init__(self) -> None:
        self.records: list[tuple[str, bytes | None]] = []

    def save(self, path, payload) -> None:
        self.records.append((path, payload))

    @property
    def paths(self) -> list[str]:
        return [path for path, _ in self.records]


def manifest_tables(addon_dirs=(), file_rows=()) -> dict:
    """Table files for the interface manifests, in their exported CSV form."""
    toc = "FilePath\n" + "".join(f"{d}\n" for d in addon_dirs)
    data = "ID,FilePath,FileName\n" + "".join(
        f"{fid},{path},{name}\n" for fid, path, name in file_rows
    )
    return {
        BUILTIN_TABLES["manifestinterfacetocdata"]: toc.encode(),
        BUILTIN_TABLES["manifestinterfacedata"]: data.encode(),
    }


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_store():
    return FakeStore
