"""
Exceptions raised by photo_blog.

"Not found" is never an exception here: store lookups return ``None`` and
deletes return ``False`` so callers can tell a missing record apart from a
failure.
"""


class PhotoBlogError(Exception):
    """Base class for photo_blog errors."""


class WXRParseError(PhotoBlogError):
    """The WordPress export could not be parsed as XML."""

    def __init__(self, source, error):
        self.source = source
        self.error = error
        super().__init__(f"Could not parse WordPress export {source}: {error}")


class SlugConflictError(PhotoBlogError):
    """
    A write lost the race for a slug.

    The allocator checks and then writes without isolation, so the unique
    constraint on ``Post.slug`` is the final word. Callers may allocate again
    and retry.
    """

    def __init__(self, slug):
        self.slug = slug
        super().__init__(f"Slug already in use: {slug}")
