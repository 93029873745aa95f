"""cv exception hierarchy.

All cv-specific exceptions inherit from CvError.
"""


class CvError(Exception):
    """Base exception for all cv errors."""


class BootError(CvError):
    """Raised when the site runtime cannot be booted."""


class FeedError(CvError):
    """Raised when the remote extension feed cannot be read."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to read extension feed {url}: {reason}")


class ExtensionNotFoundError(CvError):
    """Raised when an extension key is not present in the local container."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Extension not found: {key}")


class InfoParseError(CvError):
    """Raised when an info.xml document is malformed."""


class ApiError(CvError):
    """Raised by API actions to produce an error envelope."""


class EncoderError(CvError):
    """Raised when an output format is unknown."""

    def __init__(self, fmt: str) -> None:
        self.format = fmt
        super().__init__(f"Unknown output format: {fmt}")
