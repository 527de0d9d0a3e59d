class WowcigError(Exception):
    """Base class for fatal extraction errors."""


class ContentStoreError(WowcigError):
    """The content store could not be opened or read."""


class StoreOpenError(ContentStoreError):
    """The archive for a product could not be opened."""


class ContentNotFound(WowcigError, KeyError):
    """A file id or path is not present in the content store."""

    def __str__(self) -> str:
        return f"not found: {self.args[0]!r}" if self.args else "not found"


class MarkupError(WowcigError):
    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        message = super().__str__()
        return f"{self.path}: {message}" if self.path else message


class CrawlDepthError(WowcigError):
    pass


class UnknownTableError(WowcigError, KeyError):
    def __str__(self) -> str:
        return f"unknown table: {self.args[0]!r}"


class ManifestError(WowcigError):
    pass
