"""
Models for photo_blog.

All models are importable from photo_blog.models:

    from photo_blog.models import Post
"""
from .posts import Post

__all__ = [
    "Post",
]
