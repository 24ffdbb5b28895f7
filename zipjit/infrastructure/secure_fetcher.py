"""
Secure Fetcher

Bounded HTTP(S) GET that streams a response body to disk while hashing it.

The address guard runs three times per hop: before the first request, at
the moment each TCP connection is dialed (see ``guarded_transport``), and
on every redirect target before it is requested. Redirects are followed
manually so each ``Location`` can be validated.
"""

import hashlib
import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urljoin

import requests
from urllib3.exceptions import HTTPError as Urllib3HTTPError
from urllib3.exceptions import ReadTimeoutError

from zipjit.config.fetch_config import FetchConfig
from zipjit.domain.address_guard import AddressGuard
from zipjit.domain.errors import (
    ConnectionFailedError,
    DownloadTimeoutError,
    FetchIOError,
    InvalidUrlError,
    ResponseStatusError,
    SizeLimitExceededError,
    TooManyRedirectsError,
)

from .guarded_transport import GuardedHTTPAdapter

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})

ProgressCallback = Callable[[int, Optional[int]], None]


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a successful fetch."""
    content_hash: str
    bytes_written: int
    total_bytes: Optional[int]
    final_url: str


class SecureFetcher:
    """
    Fetches one URL into a local file under size, time and address limits.

    A new ``requests.Session`` is built per fetch so no connection is ever
    reused across jobs.
    """

    def __init__(self, guard: AddressGuard, config: Optional[FetchConfig] = None):
        self.guard = guard
        self.config = config or FetchConfig()

    def _new_session(self) -> requests.Session:
        session = requests.Session()
        # Proxies from the environment would bypass the dial-time check
        session.trust_env = False
        adapter = GuardedHTTPAdapter(self.guard, max_retries=0)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({
            "User-Agent": self.config.user_agent,
            "Accept-Encoding": "identity",
        })
        return session

    def fetch(
        self,
        url: str,
        destination: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> FetchResult:
        """
        Download ``url`` into ``destination``.

        Args:
            url: URL to fetch
            destination: File path to write the body to
            progress_callback: Called with ``(bytes_written, total_bytes)``
                after every write; ``total_bytes`` is None when the server
                declared no length

        Returns:
            FetchResult with the hex MD5 of the body

        Raises:
            InvalidUrlError, BlockedDestinationError, ResolutionError,
            TooManyRedirectsError, ResponseStatusError,
            SizeLimitExceededError, DownloadTimeoutError,
            ConnectionFailedError, FetchIOError
        """
        deadline = time.monotonic() + self.config.download_timeout

        try:
            with self._new_session() as session:
                response, final_url = self._open(session, url, deadline)
                with response:
                    total_bytes = self._declared_length(response)
                    content_hash, written = self._stream_to_file(
                        response, destination, total_bytes, deadline, progress_callback
                    )
        except Exception:
            self._remove_partial(destination)
            raise

        logger.info(f"Fetched {written} bytes from {final_url} (md5 {content_hash})")
        return FetchResult(
            content_hash=content_hash,
            bytes_written=written,
            total_bytes=total_bytes,
            final_url=final_url,
        )

    def _remaining(self, deadline: float) -> float:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise DownloadTimeoutError(
                f"download exceeded {self.config.download_timeout:g}s"
            )
        return remaining

    def _open(self, session: requests.Session, url: str, deadline: float):
        current = self.guard.validate_url(url).url

        for hop in range(self.config.max_redirects + 1):
            response = self._request(session, current, deadline)

            if response.status_code not in REDIRECT_STATUSES:
                if response.status_code != 200:
                    response.close()
                    raise ResponseStatusError(
                        f"bad status: {response.status_code} {response.reason or ''}".rstrip(),
                        status_code=response.status_code,
                    )
                return response, current

            location = response.headers.get("Location")
            response.close()
            if not location:
                raise ResponseStatusError(
                    f"redirect without Location (status {response.status_code})",
                    status_code=response.status_code,
                )
            if hop == self.config.max_redirects:
                raise TooManyRedirectsError(
                    f"stopped after {self.config.max_redirects} redirects"
                )

            target = urljoin(current, location)
            self.guard.validate_url(target)
            logger.debug(f"Redirect {hop + 1}: {current} -> {target}")
            current = target

        raise TooManyRedirectsError(f"stopped after {self.config.max_redirects} redirects")

    def _request(self, session: requests.Session, url: str, deadline: float) -> requests.Response:
        remaining = self._remaining(deadline)
        timeout = (min(self.config.connect_timeout, remaining), remaining)
        try:
            return session.get(url, stream=True, allow_redirects=False, timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise DownloadTimeoutError(f"request to {url} timed out", original_error=e)
        except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema) as e:
            raise InvalidUrlError("malformed URL", original_error=e)
        except requests.exceptions.RequestException as e:
            raise ConnectionFailedError(f"connection failed: {type(e).__name__}", original_error=e)

    def _declared_length(self, response: requests.Response) -> Optional[int]:
        header = response.headers.get("Content-Length")
        if header is None:
            return None
        try:
            length = int(header)
        except ValueError:
            return None
        if length < 0:
            return None
        if length > self.config.max_file_size:
            raise SizeLimitExceededError(
                f"declared size {length} exceeds limit of {self.config.max_file_size} bytes"
            )
        return length

    def _read_chunk(self, response: requests.Response, amount: int, deadline: float) -> bytes:
        remaining = self._remaining(deadline)
        # A read returns what has arrived and never waits past the deadline
        self._bound_socket_timeout(response, remaining)
        try:
            return response.raw.read1(amount, decode_content=False)
        except ReadTimeoutError as e:
            raise DownloadTimeoutError("read timed out", original_error=e)
        except (Urllib3HTTPError, OSError) as e:
            raise ConnectionFailedError(f"transfer interrupted: {type(e).__name__}", original_error=e)

    def _bound_socket_timeout(self, response: requests.Response, remaining: float) -> None:
        connection = response.raw.connection
        sock = getattr(connection, "sock", None)
        if sock is not None:
            sock.settimeout(remaining)

    def _stream_to_file(
        self,
        response: requests.Response,
        destination: str,
        total_bytes: Optional[int],
        deadline: float,
        progress_callback: Optional[ProgressCallback],
    ):
        limit = self.config.max_file_size
        digest = hashlib.md5()
        written = 0

        try:
            handle = open(destination, "wb")
        except OSError as e:
            raise FetchIOError(f"cannot create {os.path.basename(destination)}", original_error=e)

        with handle:
            while True:
                # Never read more than one byte past the ceiling
                amount = min(self.config.chunk_size, limit + 1 - written)
                chunk = self._read_chunk(response, amount, deadline)
                if not chunk:
                    break
                if written + len(chunk) > limit:
                    raise SizeLimitExceededError(
                        f"body exceeds limit of {limit} bytes"
                    )
                try:
                    handle.write(chunk)
                except OSError as e:
                    raise FetchIOError("write failed", original_error=e)
                digest.update(chunk)
                written += len(chunk)
                if progress_callback is not None:
                    progress_callback(written, total_bytes)

        return digest.hexdigest(), written

    def _remove_partial(self, destination: str) -> None:
        try:
            os.remove(destination)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove partial download {destination}: {e}")
