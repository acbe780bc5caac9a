"""Test utilities for migus applications.

    from migus.testing import TestClient, RecordingSink
"""

from migus.testing.client import RecordingSink, TestClient, TestResponse

__all__ = ["RecordingSink", "TestClient", "TestResponse"]
