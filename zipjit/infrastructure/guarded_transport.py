"""
Guarded Transport

urllib3 connection classes that run the address guard at the moment a TCP
connection is opened, and a requests adapter that installs them.

The hostname is resolved and checked inside ``_new_conn``, then the socket
is connected to one of the addresses that were just validated. No second
lookup happens between check and connect, so a DNS answer that changes
after pre-flight validation cannot redirect the dial. TLS still uses the
original hostname for SNI and certificate verification.
"""

import logging
import socket
from typing import Tuple, Type

from requests.adapters import HTTPAdapter
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool
from urllib3.exceptions import ConnectTimeoutError, NewConnectionError
from urllib3.util import connection

from zipjit.domain.address_guard import AddressGuard

logger = logging.getLogger(__name__)


class _GuardedConnectionMixin:
    """Replaces urllib3's resolve-and-connect with check-then-connect."""

    guard: AddressGuard = None

    def _new_conn(self) -> socket.socket:
        addresses = self.guard.check_host(self._dns_host)

        last_error = None
        for address in addresses:
            try:
                return connection.create_connection(
                    (address, self.port),
                    self.timeout,
                    source_address=self.source_address,
                    socket_options=self.socket_options,
                )
            except socket.timeout as e:
                last_error = ConnectTimeoutError(
                    self,
                    f"Connection to {self.host} timed out. (connect timeout={self.timeout})",
                )
                last_error.__cause__ = e
            except OSError as e:
                last_error = NewConnectionError(
                    self, f"Failed to establish a new connection: {e}"
                )
                last_error.__cause__ = e
            logger.debug(f"Connect to {self.host} via {address} failed: {last_error}")

        raise last_error


def guarded_connection_factory(
    guard: AddressGuard,
) -> Tuple[Type[HTTPConnectionPool], Type[HTTPSConnectionPool]]:
    """
    Build HTTP and HTTPS pool classes whose connections consult ``guard``.

    The guard is bound as a class attribute because urllib3 rejects
    unknown keyword arguments in its pool keys.

    Returns:
        (http_pool_class, https_pool_class)
    """

    class GuardedHTTPConnection(_GuardedConnectionMixin, HTTPConnection):
        pass

    class GuardedHTTPSConnection(_GuardedConnectionMixin, HTTPSConnection):
        pass

    GuardedHTTPConnection.guard = guard
    GuardedHTTPSConnection.guard = guard

    class GuardedHTTPConnectionPool(HTTPConnectionPool):
        ConnectionCls = GuardedHTTPConnection

    class GuardedHTTPSConnectionPool(HTTPSConnectionPool):
        ConnectionCls = GuardedHTTPSConnection

    return GuardedHTTPConnectionPool, GuardedHTTPSConnectionPool


class GuardedHTTPAdapter(HTTPAdapter):
    """
    requests adapter whose pool manager only opens guarded connections.

    Mount it for both ``http://`` and ``https://`` on a session with
    ``trust_env`` disabled; proxied requests would dial the proxy instead
    of the checked destination.
    """

    def __init__(self, guard: AddressGuard, **kwargs):
        self.guard = guard
        self._pool_classes = guarded_connection_factory(guard)
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        super().init_poolmanager(*args, **kwargs)
        http_pool, https_pool = self._pool_classes
        self.poolmanager.pool_classes_by_scheme = {
            "http": http_pool,
            "https": https_pool,
        }
