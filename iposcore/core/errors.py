class IpoScoreError(Exception):
    """Base class for errors raised by the scoring pipeline."""


class SourceFetchError(IpoScoreError):
    """A single HTML source could not be fetched."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class ListingsUnavailableError(IpoScoreError):
    """Every listings source failed or produced zero usable rows."""
