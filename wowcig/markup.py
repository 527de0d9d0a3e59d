from __future__ import annotations

from typing import Iterator
from xml.parsers.expat import ExpatError, ParserCreate

from .errors import MarkupError

REFERENCE_ELEMENTS = frozenset({"include", "script"})
REFERENCE_ATTRIBUTE = "file"
CHUNK_SIZE = 64 * 1024


def is_markup(path: str) -> bool:
    return path.lower().endswith(".xml")


def scan_references(content: bytes, chunk_size: int = CHUNK_SIZE) -> Iterator[str]:
    """
    Yield the `file` attribute of every <Include>/<Script> element, in
    document order. Element names are matched case-insensitively.

    The document is fed to expat in chunks and references are yielded after
    each chunk, so callers can start following them before the whole
    document has been parsed.
    """
    found: list[str] = []

    def start_element(name, attrs):
        if name.lower() in REFERENCE_ELEMENTS:
            ref = attrs.get(REFERENCE_ATTRIBUTE)
            if ref is not None:
                found.append(ref)

    parser = ParserCreate()
    parser.StartElementHandler = start_element

    offset = 0
    while True:
        chunk = content[offset : offset + chunk_size]
        offset += chunk_size
        final = offset >= len(content)
        try:
            parser.Parse(chunk, final)
        except ExpatError as e:
            raise MarkupError(str(e)) from e
        yield from found
        found.clear()
        if final:
            break
