"""
File Storage Domain

Naming rules for fetched files and handles to finished archives.
"""

from .value_objects import DEFAULT_FILENAME, ArchiveHandle, DisplayName, sanitize_filename

__all__ = [
    'ArchiveHandle',
    'DEFAULT_FILENAME',
    'DisplayName',
    'sanitize_filename',
]
