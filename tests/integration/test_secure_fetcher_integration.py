"""
Integration tests for SecureFetcher against a local HTTP server.

The server listens on 127.0.0.1 and is reached as ``files.test`` through
a guard that allows loopback. ``blocked.test`` resolves to 10.0.0.1.
"""

import hashlib
import os
import socket
import time

import pytest

from zipjit.config import FetchConfig
from zipjit.domain.address_guard import AddressGuard
from zipjit.domain.errors import (
    BlockedDestinationError,
    ConnectionFailedError,
    DownloadTimeoutError,
    FetchIOError,
    InvalidUrlError,
    ResolutionError,
    ResponseStatusError,
    SizeLimitExceededError,
    TooManyRedirectsError,
)
from zipjit.infrastructure.secure_fetcher import SecureFetcher

from tests.fixtures.http_server import BIG_BODY, HELLO_MD5, SLOW_BODY_SIZE
from tests.fixtures.resolvers import TEST_BLOCKED_NETWORKS, SequenceResolver, StaticResolver

pytestmark = pytest.mark.integration


@pytest.fixture
def fetcher(loopback_guard):
    return SecureFetcher(loopback_guard, FetchConfig(download_timeout=10, connect_timeout=5))


@pytest.fixture
def destination(tmp_path):
    return str(tmp_path / "payload")


class TestFetchSuccess:
    def test_fetch_writes_body_and_hash(self, fetcher, http_server, destination):
        calls = []

        result = fetcher.fetch(
            http_server.url("hello.txt"), destination,
            progress_callback=lambda written, total: calls.append((written, total)),
        )

        assert result.content_hash == HELLO_MD5
        assert result.bytes_written == 5
        assert result.total_bytes == 5
        assert result.final_url == http_server.url("hello.txt")
        with open(destination, "rb") as handle:
            assert handle.read() == b"hello"
        assert calls == [(5, 5)]

    def test_unknown_length_reports_indeterminate_total(self, fetcher, http_server, destination):
        calls = []

        result = fetcher.fetch(
            http_server.url("no-length"), destination,
            progress_callback=lambda written, total: calls.append((written, total)),
        )

        assert result.total_bytes is None
        assert result.content_hash == HELLO_MD5
        assert calls[-1] == (5, None)

    def test_progress_is_reported_per_chunk(self, loopback_guard, http_server, destination):
        fetcher = SecureFetcher(loopback_guard, FetchConfig(chunk_size=1024))
        calls = []

        result = fetcher.fetch(
            http_server.url("slow"), destination,
            progress_callback=lambda written, total: calls.append(written),
        )

        assert result.bytes_written == SLOW_BODY_SIZE
        assert len(calls) > 1
        assert calls == sorted(calls)
        assert calls[-1] == SLOW_BODY_SIZE

    def test_environment_proxy_is_ignored(self, fetcher, http_server, destination, monkeypatch):
        monkeypatch.setenv("HTTP_PROXY", "http://10.0.0.1:3128")
        monkeypatch.setenv("http_proxy", "http://10.0.0.1:3128")

        result = fetcher.fetch(http_server.url("hello.txt"), destination)

        assert result.content_hash == HELLO_MD5

    def test_exactly_at_size_limit(self, loopback_guard, http_server, destination):
        fetcher = SecureFetcher(loopback_guard, FetchConfig(max_file_size=len(BIG_BODY)))

        result = fetcher.fetch(http_server.url("big-no-length"), destination)

        assert result.content_hash == hashlib.md5(BIG_BODY).hexdigest()


class TestRedirects:
    @pytest.mark.parametrize("hops", [1, 2, 3])
    def test_up_to_three_redirects_succeed(self, fetcher, http_server, destination, hops):
        result = fetcher.fetch(http_server.url(f"redirect/{hops}"), destination)

        assert result.content_hash == HELLO_MD5
        assert result.final_url == http_server.url("redirect/0")

    def test_fourth_redirect_fails(self, fetcher, http_server, destination):
        before = http_server.request_count

        with pytest.raises(TooManyRedirectsError):
            fetcher.fetch(http_server.url("redirect/4"), destination)

        assert http_server.request_count - before == 4
        assert http_server.paths[-1] == "/redirect/1"

    @pytest.mark.parametrize("position", [0, 1, 2])
    def test_blocked_redirect_target_at_any_position(self, fetcher, http_server, destination,
                                                     position):
        before = http_server.request_count

        with pytest.raises(BlockedDestinationError) as exc_info:
            fetcher.fetch(http_server.url(f"chain-to-blocked/{position}"), destination)

        assert exc_info.value.host == "blocked.test"
        assert http_server.request_count - before == position + 1

    def test_redirect_without_location(self, fetcher, http_server, destination):
        with pytest.raises(ResponseStatusError) as exc_info:
            fetcher.fetch(http_server.url("redirect-no-location"), destination)

        assert exc_info.value.status_code == 302

    def test_zero_redirects_allowed(self, loopback_guard, http_server, destination):
        fetcher = SecureFetcher(loopback_guard, FetchConfig(max_redirects=0))

        with pytest.raises(TooManyRedirectsError):
            fetcher.fetch(http_server.url("redirect/1"), destination)


class TestFetchFailures:
    def test_not_found(self, fetcher, http_server, destination):
        with pytest.raises(ResponseStatusError) as exc_info:
            fetcher.fetch(http_server.url("missing"), destination)

        assert str(exc_info.value) == "bad status: 404 Not Found"
        assert exc_info.value.status_code == 404

    @pytest.mark.parametrize("path", ["big", "big-no-length"])
    def test_size_limit(self, loopback_guard, http_server, destination, path):
        fetcher = SecureFetcher(loopback_guard, FetchConfig(max_file_size=10))

        with pytest.raises(SizeLimitExceededError):
            fetcher.fetch(http_server.url(path), destination)

    def test_partial_file_is_removed(self, loopback_guard, http_server, tmp_path):
        fetcher = SecureFetcher(loopback_guard, FetchConfig(max_file_size=10, chunk_size=4))
        destination = tmp_path / "payload"

        with pytest.raises(SizeLimitExceededError):
            fetcher.fetch(http_server.url("big-no-length"), str(destination))

        assert not destination.exists()

    def test_blocked_initial_url(self, fetcher, http_server, destination):
        before = http_server.request_count

        with pytest.raises(BlockedDestinationError):
            fetcher.fetch(f"http://blocked.test:{http_server.server_port}/hello.txt", destination)

        assert http_server.request_count == before

    def test_dns_rebinding_is_caught_at_dial_time(self, http_server, destination):
        resolver = SequenceResolver("files.test", [["127.0.0.1"], ["10.0.0.1"]])
        guard = AddressGuard(resolver=resolver, blocked_networks=TEST_BLOCKED_NETWORKS)
        before = http_server.request_count

        with pytest.raises(BlockedDestinationError) as exc_info:
            SecureFetcher(guard).fetch(http_server.url("hello.txt"), destination)

        assert exc_info.value.address == "10.0.0.1"
        assert resolver.lookups == 2
        assert http_server.request_count == before

    def test_unresolvable_host(self, fetcher, destination):
        with pytest.raises(ResolutionError):
            fetcher.fetch("http://unknown.test/file", destination)

    def test_invalid_url(self, fetcher, destination):
        with pytest.raises(InvalidUrlError):
            fetcher.fetch("ftp://files.test/file", destination)

    def test_connection_refused(self, destination):
        with socket.socket() as placeholder:
            placeholder.bind(("127.0.0.1", 0))
            port = placeholder.getsockname()[1]
        guard = AddressGuard(
            resolver=StaticResolver({"closed.test": ["127.0.0.1"]}),
            blocked_networks=TEST_BLOCKED_NETWORKS,
        )

        with pytest.raises(ConnectionFailedError):
            SecureFetcher(guard).fetch(f"http://closed.test:{port}/", destination)

    def test_deadline_exceeded(self, loopback_guard, http_server, destination):
        fetcher = SecureFetcher(loopback_guard, FetchConfig(download_timeout=0.5))

        with pytest.raises(DownloadTimeoutError):
            fetcher.fetch(http_server.url("stall"), destination)

    def test_slow_drip_body_is_cut_at_deadline(self, loopback_guard, http_server, destination):
        # 40 bytes at one byte per 0.2s would take 8s to arrive in full
        fetcher = SecureFetcher(loopback_guard, FetchConfig(download_timeout=1.0))
        started = time.monotonic()

        with pytest.raises(DownloadTimeoutError):
            fetcher.fetch(http_server.url("drip"), destination)

        assert time.monotonic() - started < 3.0
        assert not os.path.exists(destination)

    def test_unwritable_destination(self, fetcher, http_server, tmp_path):
        with pytest.raises(FetchIOError):
            fetcher.fetch(http_server.url("hello.txt"), str(tmp_path / "absent" / "payload"))
