"""Error taxonomy shared by the upstream clients and the API layer."""


class SkywatchError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidCoordinate(SkywatchError):
    """Raised when a latitude/longitude query pair cannot be parsed."""

    status_code = 400


class InvalidQuery(SkywatchError):
    """Raised when a non-coordinate query parameter is missing or malformed."""

    status_code = 400


class UpstreamUnavailable(SkywatchError):
    """Raised when an upstream provider fails, times out or answers non-2xx."""


class FeedParseError(SkywatchError):
    """Raised when the observation document has no recognizable structure."""


class FallbackUnavailable(SkywatchError):
    """Raised when the fallback provider cannot supply a cloud cover reading.

    Never reaches the caller: the observation service absorbs it into a
    null reading.
    """
