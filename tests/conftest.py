import pytest

from photo_blog.store import PostStore


@pytest.fixture
def store(db):
    """A PostStore on the test database."""
    return PostStore()
