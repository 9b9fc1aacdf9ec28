"""
Post model for photo_blog.
"""
from django.db import models
from django.utils import timezone

from ..conf import blog_settings


class Post(models.Model):
    """
    Blog post.

    The slug is the public lookup key and is unique across all posts. It is
    allocated by photo_blog.slugs.get_unique_slug before every write that
    sets it; the unique constraint here backs that check up.

    Categories, tags and gallery images are ordered lists of strings kept
    exactly as the source gave them, duplicates included.
    """

    title = models.TextField()
    slug = models.SlugField(
        max_length=blog_settings.SLUG_MAX_LENGTH,
        unique=True,
        allow_unicode=True,
    )
    date = models.DateTimeField(default=timezone.now, db_index=True)
    content = models.TextField(blank=True, default="")
    excerpt = models.TextField(blank=True, default="")
    status = models.CharField(max_length=20, default="publish")
    post_type = models.CharField(max_length=20, default="post", db_column="type")
    categories = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    featured_image = models.TextField(null=True, blank=True)
    gallery_images = models.JSONField(default=list, blank=True)

    class Meta:
        # Posts sharing a date fall back to insertion order via id.
        ordering = ["-date", "id"]

    def __str__(self):
        return self.title or self.slug

    @property
    def is_published(self):
        return self.status == "publish"

    def to_dict(self):
        """Return the JSON shape served by the API."""
        return {
            "id": self.pk,
            "title": self.title,
            "slug": self.slug,
            "date": self.date.isoformat() if self.date else None,
            "content": self.content,
            "excerpt": self.excerpt,
            "status": self.status,
            "type": self.post_type,
            "categories": list(self.categories or []),
            "tags": list(self.tags or []),
            "featuredImage": self.featured_image,
            "galleryImages": list(self.gallery_images or []),
        }
