"""Exception hierarchy for topology discovery."""


class NetvisioError(Exception):
    """Base exception for all discovery errors."""


class RemoteCallError(NetvisioError):
    """A remote call (AI inference, probe agent) failed.

    Transports map raw failures into this shape before the retry wrapper
    sees them, so classification only ever looks at ``status_code`` and the
    message text.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class TopologyError(NetvisioError):
    """The device set cannot be turned into a single rooted tree."""


class ConfigurationError(NetvisioError):
    """Required configuration (e.g. an API key) is missing or invalid."""
