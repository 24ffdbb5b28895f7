"""
Unit tests for job management value objects.
"""

import pytest

from zipjit.domain.job_management import JobProgress, JobStatus, percentage_of


class TestJobStatus:
    """Test cases for JobStatus enum."""

    @pytest.mark.parametrize("status", [JobStatus.COMPLETE, JobStatus.FAILED])
    def test_terminal_statuses(self, status):
        assert status.is_terminal()
        assert not status.is_active()

    @pytest.mark.parametrize("status", [
        JobStatus.PENDING, JobStatus.DOWNLOADING, JobStatus.ZIPPING,
    ])
    def test_active_statuses(self, status):
        assert status.is_active()
        assert not status.is_terminal()

    def test_values_match_wire_format(self):
        assert [s.value for s in JobStatus] == [
            "pending", "downloading", "zipping", "complete", "failed",
        ]


class TestPercentageOf:
    def test_floor_division(self):
        assert percentage_of(1, 3) == 33
        assert percentage_of(2, 3) == 66
        assert percentage_of(999, 1000) == 99

    def test_complete_is_100(self):
        assert percentage_of(1000, 1000) == 100

    def test_clamped_above_total(self):
        assert percentage_of(2000, 1000) == 100

    @pytest.mark.parametrize("total", [None, 0, -5])
    def test_unknown_total_is_zero(self, total):
        assert percentage_of(500, total) == 0


class TestJobProgress:
    """Test cases for JobProgress value object."""

    def test_initial(self):
        progress = JobProgress.initial()

        assert progress.percentage == 0
        assert progress.bytes_downloaded == 0
        assert progress.total_bytes is None
        assert progress.is_indeterminate

    def test_downloading_with_known_total(self):
        progress = JobProgress.downloading(512, 1024)

        assert progress.percentage == 50
        assert progress.bytes_downloaded == 512
        assert not progress.is_indeterminate

    def test_downloading_without_total_is_indeterminate(self):
        progress = JobProgress.downloading(4096, None)

        assert progress.percentage == 0
        assert progress.bytes_downloaded == 4096
        assert progress.is_indeterminate

    def test_completed_pins_percentage(self):
        progress = JobProgress.downloading(4096, None).completed()

        assert progress.percentage == 100
        assert progress.bytes_downloaded == 4096

    @pytest.mark.parametrize("percentage", [-1, 101])
    def test_rejects_out_of_range_percentage(self, percentage):
        with pytest.raises(ValueError):
            JobProgress(percentage=percentage)

    def test_rejects_negative_bytes(self):
        with pytest.raises(ValueError):
            JobProgress(percentage=0, bytes_downloaded=-1)

    def test_is_immutable(self):
        progress = JobProgress.initial()

        with pytest.raises(Exception):
            progress.percentage = 50

    def test_dict_conversion(self):
        progress = JobProgress(percentage=40, bytes_downloaded=400, total_bytes=1000)

        assert progress.to_dict() == {
            "percentage": 40,
            "bytes_downloaded": 400,
            "total_bytes": 1000,
        }
        assert JobProgress.from_dict(progress.to_dict()) == progress
