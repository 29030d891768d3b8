"""Unit test configuration.

Unit tests should be fast and isolated - no network, no real sleeps.
"""

import pytest


pytestmark = pytest.mark.unit
