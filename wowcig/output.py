from __future__ import annotations

import os
import warnings
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

Writer = Callable[[bytes], None]
Payload = Union[bytes, str, Callable[[Writer], None]]


def collect_payload(payload: Payload) -> bytes:
    """Normalize a buffer or a writer callback into a single bytes buffer."""
    if callable(payload):
        parts: list[bytes] = []
        payload(parts.append)
        return b"".join(_as_bytes(p) for p in parts)
    return _as_bytes(payload)


def _as_bytes(data) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


@dataclass
class ExtractionStats:
    written: int = 0
    skipped: int = 0


class _Sink:
    """Shared save/log logic; subclasses implement _write, finalize and abort."""

    def __init__(self, version: str, product: str, log=None) -> None:
        self.version = version
        self.product = product
        self.log = log or (lambda *args: None)
        self.stats = ExtractionStats()

    def save(self, path: str, payload: Optional[Payload]) -> None:
        if payload is None:
            self.log("skipping", path)
            self.stats.skipped += 1
            return
        self.log("writing ", path)
        self._write(path, collect_payload(payload))
        self.stats.written += 1

    def _write(self, path: str, content: bytes) -> None:
        raise NotImplementedError

    def finalize(self) -> None:
        raise NotImplementedError

    def abort(self) -> None:
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.finalize()
        else:
            self.abort()
        return False


class DirectorySink(_Sink):
    """Writes `<base>/<version>/<path>` and points `<base>/<product>` at the version."""

    def __init__(self, base_dir, version: str, product: str, log=None) -> None:
        super().__init__(version, product, log)
        self.base_dir = Path(base_dir)
        self.version_dir = self.base_dir / version

    def _write(self, path: str, content: bytes) -> None:
        dest = self.version_dir / path
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(content)

    def finalize(self) -> None:
        self.version_dir.mkdir(parents=True, exist_ok=True)
        link = self.base_dir / self.product
        tmp = self.base_dir / f".{self.product}.tmp"
        if tmp.is_symlink() or tmp.exists():
            tmp.unlink()
        tmp.symlink_to(self.version, target_is_directory=True)
        os.replace(tmp, link)

    def abort(self) -> None:
        # partial trees are left in place; the alias keeps its old target
        pass


class ZipContainer:
    """
    A zip file whose entries can be replaced.

    zipfile can only append, so a replaced entry is written again and the
    archive is compacted on close, keeping the last entry for each name.
    """

    def __init__(self, path) -> None:
        self.path = Path(path)
        self._zf = zipfile.ZipFile(
            self.path, "x", compression=zipfile.ZIP_DEFLATED
        )
        self._names: set[str] = set()
        self._replaced = False

    def put(self, name: str, content: bytes) -> None:
        if name in self._names:
            self._replaced = True
        self._names.add(name)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UserWarning)
            self._zf.writestr(name, content)

    def close(self) -> None:
        self._zf.close()
        if self._replaced:
            self._compact()

    def _compact(self) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        with zipfile.ZipFile(self.path) as src:
            latest = {info.filename: info for info in src.infolist()}
            with zipfile.ZipFile(tmp, "w", compression=zipfile.ZIP_DEFLATED) as dst:
                for info in latest.values():
                    dst.writestr(info, src.read(info))
        os.replace(tmp, self.path)


class ZipSink(_Sink):
    """Writes every file into `<version>.zip` and `<product>.zip`."""

    def __init__(self, base_dir, version: str, product: str, log=None) -> None:
        super().__init__(version, product, log)
        base = Path(base_dir)
        base.mkdir(parents=True, exist_ok=True)
        self.version_path = base / f"{version}.zip"
        self.product_path = base / f"{product}.zip"
        for path in (self.version_path, self.product_path):
            if path.exists():
                path.unlink()
        self._version_zip = ZipContainer(self.version_path)
        try:
            self._product_zip = ZipContainer(self.product_path)
        except BaseException:
            self._version_zip.close()
            self.version_path.unlink(missing_ok=True)
            raise

    def _write(self, path: str, content: bytes) -> None:
        self._version_zip.put(f"{self.version}/{path}", content)
        self._product_zip.put(f"{self.product}/{path}", content)

    def finalize(self) -> None:
        self._version_zip.close()
        self._product_zip.close()

    def abort(self) -> None:
        for container in (self._version_zip, self._product_zip):
            container.close()
            container.path.unlink(missing_ok=True)


def open_sink(extracts, version: str, product: str, *, zip_output=False, log=None):
    cls = ZipSink if zip_output else DirectorySink
    return cls(extracts, version, product, log=log)
