"""
Test fixtures package.

Factory functions for domain objects, fake DNS resolvers and a local
HTTP server.
"""

from .domain_fixtures import create_completed_job, create_fetch_job
from .resolvers import SequenceResolver, StaticResolver

__all__ = [
    "SequenceResolver",
    "StaticResolver",
    "create_completed_job",
    "create_fetch_job",
]
