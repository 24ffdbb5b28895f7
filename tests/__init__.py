"""
Tests package for the ZipJIT backend.

Unit, property-based and integration tests.
"""
