from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping, Optional

from .errors import ManifestError, UnknownTableError

MANIFEST_INTERFACE_DATA = "manifestinterfacedata"
MANIFEST_INTERFACE_TOC_DATA = "manifestinterfacetocdata"

# file ids of the tables the extractor itself reads
BUILTIN_TABLES = {
    MANIFEST_INTERFACE_DATA: 1375801,
    MANIFEST_INTERFACE_TOC_DATA: 1267335,
}

_INTEGER_FIELDS = {"ID"}
TABLE_DIR = "DBFilesClient"


@dataclass(frozen=True)
class RowBuilder:
    """Decodes the exported (delimited text) form of one table."""

    table: str
    version: str
    delimiter: str = ","

    def rows(self, data: bytes) -> Iterator[dict[str, Any]]:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ManifestError(f"{self.table} is not an exported text table: {e}") from e
        reader = csv.DictReader(io.StringIO(text), delimiter=self.delimiter)
        try:
            for raw in reader:
                yield {k: _coerce(k, v) for k, v in raw.items() if k is not None}
        except csv.Error as e:
            raise ManifestError(f"{self.table}: {e}") from e


def _coerce(name: str, value: str | None) -> Any:
    if value is None:
        return ""
    if name in _INTEGER_FIELDS:
        try:
            return int(value)
        except ValueError:
            return value
    return value


@dataclass(frozen=True)
class TableDefinition:
    name: str
    file_id: int

    def build(self, version: str) -> RowBuilder:
        return RowBuilder(table=self.name, version=version)


class TableRegistry:
    """
    Case-insensitive mapping of table names to their archive file ids.

    Names that are neither built in nor configured are looked up as
    `DBFilesClient/<name>.db2` through `resolve_id`, usually the content
    store's listfile.
    """

    def __init__(
        self,
        extra: Mapping[str, int] | None = None,
        resolve_id: Optional[Callable[[str], Optional[int]]] = None,
    ) -> None:
        self._tables = dict(BUILTIN_TABLES)
        for name, file_id in (extra or {}).items():
            self._tables[name.lower()] = int(file_id)
        self._resolve_id = resolve_id

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._tables or self._resolve(name) is not None

    def lookup(self, name: str) -> TableDefinition:
        key = name.lower()
        file_id = self._tables.get(key)
        if file_id is None:
            file_id = self._resolve(name)
        if file_id is None:
            raise UnknownTableError(name)
        return TableDefinition(key, file_id)

    def _resolve(self, name: str) -> Optional[int]:
        if self._resolve_id is None:
            return None
        return self._resolve_id(f"{TABLE_DIR}/{name}.db2")
