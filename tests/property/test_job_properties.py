"""
Property-based tests for progress tracking and filename sanitizing.
"""

import re

from hypothesis import given
from hypothesis import strategies as st

from zipjit.domain.file_storage import DisplayName, sanitize_filename
from zipjit.domain.job_management import JobStatus, percentage_of

from tests.fixtures import create_fetch_job

from .strategies import filename_hints, progress_updates

SAFE_NAME = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9._-]*$")


class TestProgressProperties:
    @given(st.integers(min_value=0, max_value=10 ** 12),
           st.one_of(st.none(), st.integers(min_value=-10, max_value=10 ** 12)))
    def test_percentage_is_bounded(self, written, total):
        assert 0 <= percentage_of(written, total) <= 100

    @given(progress_updates())
    def test_job_progress_never_decreases(self, updates):
        job = create_fetch_job(status=JobStatus.DOWNLOADING)
        previous_percentage = 0
        previous_bytes = 0

        for update in updates:
            job.update_progress(update)
            assert job.progress.percentage >= previous_percentage
            assert job.progress.bytes_downloaded >= previous_bytes
            previous_percentage = job.progress.percentage
            previous_bytes = job.progress.bytes_downloaded

        assert previous_bytes == max(update.bytes_downloaded for update in updates)


class TestFilenameProperties:
    @given(filename_hints, st.integers(min_value=1, max_value=300))
    def test_sanitized_names_are_safe(self, hint, max_length):
        name = sanitize_filename(hint, max_length)

        assert SAFE_NAME.match(name)
        assert len(name) <= max(max_length, len("file"))
        assert name not in (".", "..")

    @given(filename_hints)
    def test_sanitizing_is_idempotent(self, hint):
        once = sanitize_filename(hint)

        assert sanitize_filename(once) == once

    @given(st.text(max_size=100))
    def test_display_name_from_any_path(self, segment):
        name = DisplayName.from_url("http://files.test/dir/" + segment)

        assert SAFE_NAME.match(name.value)
