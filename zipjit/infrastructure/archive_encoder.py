"""
Archive Encoder

Double-wraps a file in password-protected ZIP archives using pyminizip.

The inner archive holds the file under its display name; the outer archive
holds the inner archive under a fresh random identifier, so the outer
listing reveals nothing about the content. Both layers use traditional
PKWARE encryption with the same fixed password.
"""

import logging
import os
import shutil
import uuid

import pyminizip

from zipjit.domain.errors import PackagingError

logger = logging.getLogger(__name__)


class ArchiveEncoder:
    """Builds the nested encrypted archive for a fetched file."""

    def __init__(self, password: str = "password", compress_level: int = 5):
        """
        Initialize encoder.

        Args:
            password: Password applied to both archive layers
            compress_level: Deflate level 0-9
        """
        self.password = password
        self.compress_level = compress_level

    def _compress(self, source: str, destination: str) -> None:
        # pyminizip names the entry after the source file's basename
        pyminizip.compress(source, None, destination, self.password, self.compress_level)

    def double_wrap(self, source_file: str, destination_file: str, display_name: str) -> str:
        """
        Package ``source_file`` into ``destination_file``.

        Args:
            source_file: Raw fetched file
            destination_file: Path of the outer archive to create
            display_name: Entry name inside the inner archive, already sanitized

        Returns:
            The identifier used for the outer entry (``<identifier>.zip``)

        Raises:
            PackagingError: If either layer cannot be written
        """
        workdir = os.path.dirname(os.path.abspath(source_file))
        identifier = str(uuid.uuid4())
        inner_path = os.path.join(workdir, f"{identifier}.zip")
        staged = os.path.join(workdir, display_name)
        copied = False

        try:
            if os.path.abspath(source_file) != staged:
                shutil.copyfile(source_file, staged)
                copied = True
            self._compress(staged, inner_path)
            self._compress(inner_path, destination_file)
        except Exception as e:
            self._discard(destination_file)
            raise PackagingError(f"archive creation failed: {type(e).__name__}", original_error=e)
        finally:
            self._discard(inner_path)
            if copied:
                self._discard(staged)

        logger.debug(f"Packaged {display_name} as {identifier}.zip")
        return identifier

    def _discard(self, path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")
