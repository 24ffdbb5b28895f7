"""
Unit tests for JobManager.
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from zipjit.domain.errors import ErrorCategory
from zipjit.domain.job_management import (
    JobManager,
    JobNotFoundError,
    JobProgress,
    JobStateError,
    JobStatus,
)

from tests.fixtures import create_completed_job, create_fetch_job


class TestJobManagerLifecycle:
    """Transitions go through the repository and come back as snapshots."""

    def test_create_job_saves_pending_job(self, job_manager, job_repository):
        job = job_manager.create_job("http://files.test/hello.txt", "hello.txt")

        stored = job_repository.get(job.job_id)
        assert stored.status == JobStatus.PENDING
        assert stored.filename == "hello.txt"

    def test_create_job_raises_when_save_fails(self):
        repo = Mock()
        repo.save.return_value = False

        with pytest.raises(Exception, match="Failed to save job"):
            JobManager(repo).create_job("http://files.test/a", "a")

    def test_get_job_unknown_id(self, job_manager):
        with pytest.raises(JobNotFoundError) as exc_info:
            job_manager.get_job("missing")

        assert exc_info.value.category == ErrorCategory.JOB_NOT_FOUND

    def test_happy_path(self, job_manager):
        job = job_manager.create_job("http://files.test/hello.txt", "hello.txt")

        job_manager.start_download(job.job_id)
        job_manager.update_progress(job.job_id, JobProgress.downloading(5, 5))
        job_manager.start_zipping(job.job_id, "5d41402abc4b2a76b9719d911017c592")
        completed = job_manager.complete_job(job.job_id, "/tmp/a.zip", "identifier")

        assert completed.status == JobStatus.COMPLETE
        assert job_manager.get_job(job.job_id).archive_path == "/tmp/a.zip"

    def test_illegal_transition_raises_state_error(self, job_manager):
        job = job_manager.create_job("http://files.test/hello.txt", "hello.txt")

        with pytest.raises(JobStateError):
            job_manager.start_zipping(job.job_id, "abc")

        assert job_manager.get_job(job.job_id).status == JobStatus.PENDING

    def test_update_job_applies_mutation(self, job_manager):
        job = job_manager.create_job("http://files.test/hello.txt", "hello.txt")

        updated = job_manager.update_job(job.job_id, lambda stored: stored.start_download())

        assert updated.status == JobStatus.DOWNLOADING
        assert job_manager.get_job(job.job_id).status == JobStatus.DOWNLOADING

    def test_transition_on_missing_job(self, job_manager):
        with pytest.raises(JobNotFoundError):
            job_manager.start_download("missing")

    def test_fail_job_on_terminal_job(self, job_manager, job_repository):
        job_repository.save(create_completed_job(job_id="done"))

        with pytest.raises(JobStateError):
            job_manager.fail_job("done", "too late")

        assert job_manager.get_job("done").status == JobStatus.COMPLETE

    def test_returned_job_is_a_copy(self, job_manager):
        job = job_manager.create_job("http://files.test/hello.txt", "hello.txt")

        job.status = JobStatus.FAILED

        assert job_manager.get_job(job.job_id).status == JobStatus.PENDING


class TestJobManagerStatusInfo:
    def test_status_info_fields(self, job_manager, job_repository):
        job_repository.save(create_completed_job(job_id="done"))

        info = job_manager.get_job_status_info("done")

        assert info == {
            "job_id": "done",
            "status": "complete",
            "progress": 100,
            "bytes_downloaded": 5,
            "total_bytes": 5,
            "status_text": "Complete",
            "original_md5": "5d41402abc4b2a76b9719d911017c592",
            "filename": "hello.txt",
            "error": None,
            "error_category": None,
        }

    def test_status_info_for_failed_job(self, job_manager):
        job = job_manager.create_job("http://files.test/missing", "missing")
        job_manager.start_download(job.job_id)
        job_manager.fail_job(job.job_id, "Download Failed: bad status: 404 Not Found",
                             "download_failed", "Download failed")

        info = job_manager.get_job_status_info(job.job_id)

        assert info["status"] == "failed"
        assert info["status_text"] == "Download failed"
        assert info["error"] == "Download Failed: bad status: 404 Not Found"
        assert info["error_category"] == "download_failed"


class TestJobManagerCleanup:
    def test_cleanup_expired_jobs_releases_and_removes(self, job_manager, job_repository):
        job_repository.save(create_completed_job(job_id="old", age=timedelta(hours=1)))
        job_repository.save(create_fetch_job(job_id="running", status=JobStatus.DOWNLOADING,
                                             age=timedelta(hours=1)))
        job_repository.save(create_fetch_job(job_id="fresh"))
        release = Mock()

        removed = job_manager.cleanup_expired_jobs(timedelta(minutes=30), release=release)

        assert removed == 2
        assert not job_repository.exists("old")
        assert not job_repository.exists("running")
        assert job_repository.exists("fresh")
        assert sorted(call.args[0].job_id for call in release.call_args_list) == ["old", "running"]

    def test_delete_job(self, job_manager, job_repository):
        job_repository.save(create_fetch_job(job_id="a"))

        assert job_manager.delete_job("a") is True
        assert job_manager.delete_job("a") is False

    def test_live_archive_paths_only_lists_completed_jobs(self, job_manager, job_repository):
        job_repository.save(create_completed_job(job_id="a", archive_path="/tmp/a.zip"))
        job_repository.save(create_completed_job(job_id="b", archive_path="/tmp/b.zip"))
        job_repository.save(create_fetch_job(job_id="c", status=JobStatus.ZIPPING))

        assert sorted(job_manager.live_archive_paths()) == ["/tmp/a.zip", "/tmp/b.zip"]
