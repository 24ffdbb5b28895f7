"""
Address Guard Domain

Blocks requests to private, loopback, link-local, multicast and reserved
destinations.
"""

from .services import AddressGuard, is_blocked, system_resolver
from .value_objects import ALLOWED_SCHEMES, BLOCKED_NETWORKS, ValidatedUrl

__all__ = [
    'AddressGuard',
    'ALLOWED_SCHEMES',
    'BLOCKED_NETWORKS',
    'ValidatedUrl',
    'is_blocked',
    'system_resolver',
]
