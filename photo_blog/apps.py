"""Django app configuration for photo_blog."""
from django.apps import AppConfig


class PhotoBlogConfig(AppConfig):
    """Configuration for the photo blog app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "photo_blog"
    verbose_name = "Photo Blog"
