"""Shared test configuration and fixtures."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from social_extract.extractor.resources import reset_vision_client

# Load .env from project root for all tests
root = Path(__file__).parent.parent.resolve()
load_dotenv(root / ".env")


@pytest.fixture(autouse=True)
def _fresh_vision_client():
    """Make every test build (or fail to build) its own vision client."""
    reset_vision_client()
    yield
    reset_vision_client()
