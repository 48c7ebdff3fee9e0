"""
Pytest configuration and fixtures.
"""
import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from channel_catalog.db.database import Database


@pytest.fixture
def db(tmp_path):
    """Create a connected test database with catalog tables."""
    database = Database(str(tmp_path / "test.db"))
    database.connect()
    database.ensure_catalog_tables()
    yield database
    database.close()
