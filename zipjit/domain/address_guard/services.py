"""
Address Guard Services

SSRF protection: classifies IP addresses and validates URLs against the
blocked-range table. Every call resolves DNS again so that checks made at
dial time or on a redirect see the current answer, not a cached one.
"""

import ipaddress
import logging
import socket
from typing import Callable, Iterable, List, Optional, Sequence, Union
from urllib.parse import urlsplit

from zipjit.domain.errors import (
    BlockedDestinationError,
    InvalidUrlError,
    ResolutionError,
)

from .value_objects import (
    ALLOWED_SCHEMES,
    BLOCKED_NETWORKS,
    DEFAULT_PORTS,
    NAT64_PREFIX,
    IPNetwork,
    ValidatedUrl,
)

logger = logging.getLogger(__name__)

Resolver = Callable[[str], Iterable[str]]
AddressLike = Union[str, ipaddress.IPv4Address, ipaddress.IPv6Address]


def _parse_address(address: AddressLike):
    if isinstance(address, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return address
    text = str(address).strip().strip("[]")
    # Zone ids ("fe80::1%eth0") are not part of the address itself
    text = text.split("%", 1)[0]
    return ipaddress.ip_address(text)


def _embedded_ipv4(address: ipaddress.IPv6Address) -> Optional[ipaddress.IPv4Address]:
    if address.ipv4_mapped is not None:
        return address.ipv4_mapped
    if address.sixtofour is not None:
        return address.sixtofour
    if address in NAT64_PREFIX:
        return ipaddress.IPv4Address(int(address) & 0xFFFFFFFF)
    return None


def is_blocked(
    address: AddressLike, networks: Sequence[IPNetwork] = BLOCKED_NETWORKS
) -> bool:
    """
    Check whether an IP address falls inside any blocked range.

    IPv6 forms that embed an IPv4 address (mapped, 6to4, NAT64) are also
    judged by the embedded address. Translation and tunnelling prefixes
    whose embedded address cannot be trusted (IPv4-compatible,
    IPv4-translated, local-use NAT64, Teredo) are in the table outright.
    Anything that does not parse as an IP address is treated as blocked.

    Args:
        address: IP address as text or ``ipaddress`` object
        networks: Blocked networks to test against

    Returns:
        True if the address must not be contacted
    """
    try:
        ip = _parse_address(address)
    except ValueError:
        return True

    if any(ip.version == net.version and ip in net for net in networks):
        return True

    if ip.version == 6:
        embedded = _embedded_ipv4(ip)
        if embedded is not None:
            return is_blocked(embedded, networks)

    return False


def system_resolver(host: str) -> List[str]:
    """Resolve every address of ``host`` with getaddrinfo."""
    try:
        infos = socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    except (socket.gaierror, UnicodeError) as e:
        raise ResolutionError(f"DNS resolution failed for {host}", original_error=e)

    addresses: List[str] = []
    for _family, _type, _proto, _canonname, sockaddr in infos:
        address = sockaddr[0].split("%", 1)[0]
        if address not in addresses:
            addresses.append(address)
    return addresses


class AddressGuard:
    """
    Validates destinations before any socket is opened.

    The resolver and the blocked-range table are injectable so tests can
    simulate DNS answers, including answers that change between calls.
    """

    def __init__(
        self,
        resolver: Optional[Resolver] = None,
        blocked_networks: Sequence[IPNetwork] = BLOCKED_NETWORKS,
    ):
        self._resolver = resolver or system_resolver
        self.blocked_networks = tuple(blocked_networks)

    def is_blocked(self, address: AddressLike) -> bool:
        return is_blocked(address, self.blocked_networks)

    def resolve(self, host: str) -> List[str]:
        """
        Resolve a hostname to all of its addresses.

        Raises:
            ResolutionError: If the lookup fails or returns nothing
        """
        try:
            addresses = list(self._resolver(host))
        except ResolutionError:
            raise
        except OSError as e:
            raise ResolutionError(f"DNS resolution failed for {host}", original_error=e)

        if not addresses:
            raise ResolutionError(f"DNS resolution returned no addresses for {host}")
        return addresses

    def check_host(self, host: str) -> List[str]:
        """
        Resolve ``host`` and reject it if any address is blocked.

        IP literals are checked directly without a DNS lookup.

        Returns:
            The addresses that were validated

        Raises:
            BlockedDestinationError: If at least one address is blocked
            ResolutionError: If the host cannot be resolved
        """
        host = host.strip("[]")
        try:
            addresses = [str(_parse_address(host))]
        except ValueError:
            addresses = self.resolve(host)

        for address in addresses:
            if self.is_blocked(address):
                logger.warning(f"Blocked destination {host} -> {address}")
                raise BlockedDestinationError(
                    "access to host denied: resolves to blocked IP",
                    host=host,
                    address=address,
                )
        return addresses

    def validate_url(self, raw_url: str) -> ValidatedUrl:
        """
        Validate scheme and host of a URL and check where it resolves.

        Args:
            raw_url: URL as submitted or taken from a Location header

        Returns:
            ValidatedUrl with the resolved addresses

        Raises:
            InvalidUrlError: Malformed URL, unsupported scheme or no host
            BlockedDestinationError: Host resolves to a blocked address
            ResolutionError: Host cannot be resolved
        """
        if not isinstance(raw_url, str):
            raise InvalidUrlError("malformed URL")

        try:
            parts = urlsplit(raw_url.strip())
            port = parts.port
        except ValueError:
            raise InvalidUrlError("malformed URL")

        scheme = parts.scheme.lower()
        if scheme not in ALLOWED_SCHEMES:
            raise InvalidUrlError(f"unsupported scheme: {parts.scheme or '(none)'}")

        host = parts.hostname
        if not host:
            raise InvalidUrlError("missing hostname")

        addresses = self.check_host(host)

        return ValidatedUrl(
            url=raw_url.strip(),
            scheme=scheme,
            host=host,
            port=port or DEFAULT_PORTS[scheme],
            addresses=tuple(addresses),
        )
