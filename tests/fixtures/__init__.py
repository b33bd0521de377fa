"""
Test fixtures package.

Provides factory functions and mock implementations for testing.
"""

from .domain_fixtures import create_file_record, create_new_file_record
from .mock_gateways import MockObjectGateway

__all__ = [
    "create_file_record",
    "create_new_file_record",
    "MockObjectGateway",
]
