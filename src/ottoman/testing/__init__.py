"""Test utilities for ottoman applications::

    from ottoman.testing import TestClient
"""

from ottoman.testing.client import TestClient

__all__ = ["TestClient"]
