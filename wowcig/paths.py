import posixpath


def normalize_path(path: str) -> str:
    """
    Collapse '.' and '..' segments of an archive-relative path.

    A '..' may cancel the first segment ('x/../y' is 'y'); per-variant TOCs
    reference shared files that way. Climbing above the archive root raises
    ValueError.
    """
    parts: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if not parts:
                raise ValueError(f"path escapes the archive root: {path!r}")
            parts.pop()
        else:
            parts.append(segment)
    return "/".join(parts)


def join_relative(relative_to: str, reference: str) -> str:
    """Resolve `reference` against the directory of the document containing it."""
    base = posixpath.dirname(relative_to)
    return normalize_path(f"{base}/{reference.rstrip()}")
