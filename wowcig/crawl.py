import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from .errors import CrawlDepthError, MarkupError
from .markup import is_markup, scan_references
from .paths import join_relative

DEFAULT_MAX_DEPTH = 64


def _quiet(*args):
    pass


@dataclass
class CrawlContext:
    """
    Everything a crawl needs, passed explicitly instead of captured globally.

    `load` returns the bytes for a path, or None when the archive has no such
    file. `sink` receives every visited path exactly once.
    """

    load: Callable[[str], Optional[bytes]]
    sink: object
    log: Callable[..., None] = _quiet
    max_depth: int = DEFAULT_MAX_DEPTH


@dataclass
class Crawler:
    """
    A recursive crawler over archive documents.

    - Every visited path is loaded and handed to the sink, found or not.
    - '.xml' documents are scanned for <Include file=...>/<Script file=...>
      references, which are resolved relative to the referencing document
      and crawled recursively.
    - TOC documents (see visit_toc) list one file per line; those files are
      crawled as plain files.
    - A path is only visited once per crawl, so files shared between build
      variants or included from several documents are written once.
    """

    context: CrawlContext
    visited: set = field(default_factory=set)

    def visit(self, path: str, depth: int = 0) -> Optional[bytes]:
        if depth > self.context.max_depth:
            raise CrawlDepthError(
                f"reference chain deeper than {self.context.max_depth} at {path}"
            )
        if path in self.visited:
            self.context.log("already visited", path)
            return None
        self.visited.add(path)

        content = self.context.load(path)
        self.context.sink.save(path, content)
        if content is not None and is_markup(path):
            try:
                for ref in scan_references(content):
                    self.visit(join_relative(path, ref), depth + 1)
            except MarkupError as e:
                if e.path is None:
                    e.path = path
                raise
        return content

    def visit_toc(self, toc_path: str) -> None:
        toc = self.visit(toc_path)
        if toc is None:
            return
        for line in _toc_entries(toc):
            self.visit(join_relative(toc_path, line), 1)


def _toc_entries(toc: bytes):
    """Yield the file lines of a TOC, skipping comments/directives and blanks."""
    text = toc.decode("utf-8-sig", errors="replace")
    for line in re.split(r"[\r\n]+", text):
        if not line.strip() or line.startswith("#"):
            continue
        yield line
