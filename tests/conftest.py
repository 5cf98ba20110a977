"""Shared fixtures for healthmetrics tests."""
import json
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def latency_payload():
    """Fetched payload with one fully populated latency series."""
    with open(FIXTURES / "latency_ts.json", 'r') as f:
        return json.load(f)
