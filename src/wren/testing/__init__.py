"""Test utilities for wren applications.

    from wren.testing import TestClient, assert_json, assert_redirect
"""

from wren.testing.assertions import assert_json, assert_redirect, assert_status
from wren.testing.client import TestClient

__all__ = [
    "TestClient",
    "assert_json",
    "assert_redirect",
    "assert_status",
]
