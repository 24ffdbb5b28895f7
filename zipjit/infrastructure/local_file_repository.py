"""
Local File Repository

Infrastructure layer for the temp directory: per-job scratch directories,
final archives and the orphan sweep.
"""

import logging
import os
import shutil
import time
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


class LocalFileStorageError(Exception):
    """Raised when local file storage operation fails."""
    pass


class LocalFileRepository:
    """
    Repository for temp-directory storage operations.

    Layout under ``storage_dir``:
        <job_id>/          scratch directory owned by the running job
        <job_id>.zip       finished outer archive
    """

    def __init__(self, storage_dir: str = "./temp"):
        """
        Initialize local file repository.

        Args:
            storage_dir: Base directory for temp files
        """
        self.storage_dir = Path(storage_dir).resolve()
        self._ensure_storage_dir()

    def _ensure_storage_dir(self):
        """Ensure storage directory exists."""
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LocalFileStorageError(f"Failed to create storage directory: {e}")

    def is_available(self) -> bool:
        """
        Check if local storage is available.

        Returns:
            True if storage directory is accessible
        """
        return self.storage_dir.exists() and os.access(self.storage_dir, os.W_OK)

    def create_job_workdir(self, job_id: str) -> str:
        """
        Create the scratch directory of a job.

        Raises:
            LocalFileStorageError: If the directory cannot be created
        """
        workdir = self.storage_dir / job_id
        try:
            workdir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LocalFileStorageError(f"Failed to create job directory: {e}")
        return str(workdir)

    def archive_path_for(self, job_id: str) -> str:
        return str(self.storage_dir / f"{job_id}.zip")

    def remove_job_workdir(self, job_id: str) -> None:
        """Remove a job's scratch directory and everything in it."""
        shutil.rmtree(self.storage_dir / job_id, ignore_errors=True)

    def delete_file(self, file_path: Optional[str]) -> bool:
        """
        Delete a file from storage.

        Args:
            file_path: Path to file; None is a no-op

        Returns:
            True if a file was removed

        Raises:
            OSError: If the file exists but cannot be removed
        """
        if not file_path:
            return False
        try:
            os.remove(file_path)
            return True
        except FileNotFoundError:
            return False

    def file_exists(self, file_path: str) -> bool:
        return Path(file_path).is_file()

    def cleanup_orphaned_files(self, max_age_seconds: float, keep: Iterable[str] = ()) -> int:
        """
        Remove temp entries older than ``max_age_seconds``.

        Entries in ``keep`` (archives of live jobs) are left alone.

        Returns:
            Number of entries removed
        """
        keep_paths = {str(Path(path).resolve()) for path in keep}
        cutoff = time.time() - max_age_seconds
        removed = 0

        try:
            entries = list(self.storage_dir.iterdir())
        except OSError as e:
            logger.warning(f"Cannot list {self.storage_dir}: {e}")
            return 0

        for entry in entries:
            if str(entry.resolve()) in keep_paths:
                continue
            try:
                if entry.stat().st_mtime >= cutoff:
                    continue
                if entry.is_dir():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
                removed += 1
                logger.info(f"Removed orphaned temp entry {entry.name}")
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Failed to remove orphaned entry {entry}: {e}")

        return removed
