"""
Tests for photo_blog models.
"""
from datetime import datetime, timezone as dt_timezone

import pytest
from django.db import connection

from photo_blog.models import Post


@pytest.fixture
def post(db):
    """Create a test post."""
    return Post.objects.create(
        title="Beach Day",
        slug="beach-day",
        date=datetime(2017, 6, 1, 10, 0, tzinfo=dt_timezone.utc),
        content='<p>Sand</p><img src="/uploads/a.jpg">',
        categories=["2017"],
        tags=["Penn", "Quinn"],
        featured_image="/uploads/a.jpg",
    )


class TestPost:
    """Tests for Post model."""

    def test_defaults(self, db):
        post = Post.objects.create(title="Hello", slug="hello")
        assert post.status == "publish"
        assert post.post_type == "post"
        assert post.content == ""
        assert post.excerpt == ""
        assert post.categories == []
        assert post.gallery_images == []
        assert post.featured_image is None
        assert post.is_published

    def test_str(self, post):
        assert str(post) == "Beach Day"

    def test_to_dict(self, post):
        assert post.to_dict() == {
            "id": post.pk,
            "title": "Beach Day",
            "slug": "beach-day",
            "date": "2017-06-01T10:00:00+00:00",
            "content": '<p>Sand</p><img src="/uploads/a.jpg">',
            "excerpt": "",
            "status": "publish",
            "type": "post",
            "categories": ["2017"],
            "tags": ["Penn", "Quinn"],
            "featuredImage": "/uploads/a.jpg",
            "galleryImages": [],
        }

    def test_ordering(self, db):
        old = Post.objects.create(title="Old", slug="old", date=datetime(2016, 1, 1, tzinfo=dt_timezone.utc))
        new = Post.objects.create(title="New", slug="new", date=datetime(2018, 1, 1, tzinfo=dt_timezone.utc))
        tie = Post.objects.create(title="Tie", slug="tie", date=datetime(2018, 1, 1, tzinfo=dt_timezone.utc))
        assert list(Post.objects.all()) == [new, tie, old]

    def test_type_column(self, db):
        """The post type keeps its exported column name."""
        columns = [c.name for c in connection.introspection.get_table_description(
            connection.cursor(), Post._meta.db_table,
        )]
        assert "type" in columns
