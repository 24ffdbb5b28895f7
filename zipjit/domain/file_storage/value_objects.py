"""
File Storage Value Objects

Immutable value objects for type safety and validation.
"""

import re
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

DEFAULT_FILENAME = "file"

_DISALLOWED = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(hint: str, max_length: int = 255) -> str:
    """
    Reduce an untrusted filename hint to a safe archive entry name.

    Keeps only ``[A-Za-z0-9._-]``, strips leading dots and truncates to
    ``max_length``. Anything that ends up empty falls back to ``file``.
    """
    cleaned = _DISALLOWED.sub("", hint or "").lstrip(".")[:max_length]
    if not cleaned.strip("."):
        return DEFAULT_FILENAME
    return cleaned


@dataclass(frozen=True)
class DisplayName:
    """
    Value object for the name the fetched file carries inside the archive.

    Always safe to use as a path component and as a ZIP entry name.
    """
    value: str

    def __post_init__(self):
        if self.value != sanitize_filename(self.value, max(len(self.value), 1)):
            raise ValueError(f"Unsafe display name: {self.value!r}")

    @classmethod
    def from_url(cls, url: str, max_length: int = 255) -> 'DisplayName':
        """
        Derive the display name from the last path segment of ``url``.

        The segment is percent-decoded before sanitizing, so
        ``/a/report%20v1.pdf`` becomes ``reportv1.pdf``.
        """
        try:
            path = urlsplit(url).path
        except ValueError:
            path = ""
        segment = unquote(path.rsplit("/", 1)[-1])
        return cls(sanitize_filename(segment, max_length))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ArchiveHandle:
    """Location of a finished archive and the name to serve it under."""
    path: str
    download_name: str
