"""
Slug allocation for posts.
"""
from django.utils.text import slugify

from .conf import blog_settings
from .models import Post


def slugify_title(title):
    """Build a base slug from a post title."""
    slug = slugify(title or "", allow_unicode=True)[:blog_settings.SLUG_MAX_LENGTH]
    return slug.strip("-") or "post"


def get_unique_slug(base_slug, exclude_id=None, using=None):
    """
    Return ``base_slug`` or the first free ``base_slug-N`` (N >= 2).

    Args:
        base_slug: the slug the caller asked for
        exclude_id: pk of a post being updated, so it never collides with
            its own current slug
        using: database alias

    A suffixed slug never exceeds SLUG_MAX_LENGTH: the base is cut short to
    make room for the suffix.

    The check and the later write are not isolated from each other. Two
    writers racing for the same base can both get the same answer; the
    unique constraint on Post.slug rejects the loser.
    """
    max_length = blog_settings.SLUG_MAX_LENGTH
    base_slug = base_slug[:max_length]

    others = Post.objects.all()
    if using:
        others = others.using(using)
    if exclude_id is not None:
        others = others.exclude(pk=exclude_id)

    # SQLite's LIKE ignores case, so membership is checked exactly here.
    taken = set(others.filter(slug__startswith=base_slug).values_list("slug", flat=True))
    if base_slug not in taken:
        return base_slug

    counter = 2
    while True:
        candidate = _with_suffix(base_slug, counter, max_length)
        if candidate.startswith(base_slug):
            if candidate not in taken:
                return candidate
        elif not others.filter(slug=candidate).exists():
            # The base was cut short to fit the suffix.
            return candidate
        counter += 1


def _with_suffix(base_slug, counter, max_length):
    suffix = f"-{counter}"
    if len(base_slug) + len(suffix) <= max_length:
        return base_slug + suffix
    return base_slug[:max_length - len(suffix)].rstrip("-") + suffix
