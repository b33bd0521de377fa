"""
Tests package for UltraDL backend.

This package contains test suites organized by type:
- contracts/: Contract tests for repository interfaces
- integration/: Integration tests with real services
- e2e/: End-to-end workflow tests
"""
