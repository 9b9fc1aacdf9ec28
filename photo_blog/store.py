"""
Post store: the data access layer behind the API and the import commands.

Build one ``PostStore`` and hand it to whatever needs persistence:

    store = PostStore()
    post = store.create({"title": "Beach Day", "slug": "beach-day"})
    store.update(post.pk, {"slug": "beach-day"})   # keeps its own slug
    store.delete(post.pk)                           # True
    store.delete(post.pk)                           # False, already gone

Missing records come back as ``None`` or ``False``, never as exceptions.
"""
import logging
from dataclasses import dataclass, field
from typing import List

from django.core.management.color import no_style
from django.db import IntegrityError, connections, router, transaction
from django.db.models import Q
from django.utils import timezone

from .conf import blog_settings
from .exceptions import SlugConflictError
from .models import Post
from .slugs import get_unique_slug, slugify_title

logger = logging.getLogger(__name__)

# Fields a caller may set through create() and update().
WRITABLE_FIELDS = (
    "title",
    "slug",
    "date",
    "content",
    "excerpt",
    "status",
    "post_type",
    "categories",
    "tags",
    "featured_image",
    "gallery_images",
)


@dataclass
class ImportResult:
    """
    Outcome of a bulk import.

    ``inserted`` counts rows actually written. ``skipped_slugs`` lists the
    drafts found to exist before insert; rows that collided only at insert
    time are counted in ``skipped`` but not named.
    """

    inserted: int = 0
    skipped: int = 0
    skipped_slugs: List[str] = field(default_factory=list)

    @property
    def total(self):
        return self.inserted + self.skipped


class PostStore:
    """CRUD over posts with slug allocation on every slug write."""

    def __init__(self, using=None):
        self.using = using or router.db_for_write(Post)

    @property
    def posts(self):
        return Post.objects.using(self.using)

    def _check_fields(self, fields):
        unknown = set(fields) - set(WRITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown post fields: {', '.join(sorted(unknown))}")

    def _slug_taken(self, slug, exclude_id=None):
        queryset = self.posts.filter(slug=slug)
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()

    # Reads

    def get_all(self):
        """Return every post, newest first."""
        return list(self.posts.order_by("-date", "id"))

    def get_by_id(self, post_id):
        return self.posts.filter(pk=post_id).first()

    def get_by_slug(self, slug):
        return self.posts.filter(slug=slug).first()

    def count(self):
        return self.posts.count()

    # Writes

    def create(self, fields):
        """
        Store a new post and return it with its generated id.

        The requested slug (or one derived from the title) is only a base;
        the stored slug is the first free variant of it.
        """
        fields = dict(fields)
        self._check_fields(fields)
        base_slug = fields.get("slug") or slugify_title(fields.get("title"))
        fields["slug"] = get_unique_slug(base_slug, using=self.using)
        if not fields.get("date"):
            fields["date"] = timezone.now()

        post = Post(**fields)
        try:
            with transaction.atomic(using=self.using):
                post.save(using=self.using, force_insert=True)
        except IntegrityError as e:
            if not self._slug_taken(fields["slug"]):
                raise
            logger.warning("Slug conflict creating post %r: %s", fields["slug"], e)
            raise SlugConflictError(fields["slug"]) from e
        logger.info("Created post %s (%s)", post.pk, post.slug)
        return post

    def update(self, post_id, fields):
        """
        Apply a full or partial update and return the post, or None.

        The slug is only re-allocated when ``fields`` contains one, with the
        post itself excluded so keeping its own slug is never a collision.
        """
        fields = dict(fields)
        self._check_fields(fields)
        post = self.get_by_id(post_id)
        if post is None:
            return None

        if fields.get("slug"):
            fields["slug"] = get_unique_slug(fields["slug"], exclude_id=post.pk, using=self.using)
        elif "slug" in fields:
            # An empty slug is not a change.
            del fields["slug"]

        for name, value in fields.items():
            setattr(post, name, value)
        try:
            with transaction.atomic(using=self.using):
                post.save(using=self.using, update_fields=list(fields) or None)
        except IntegrityError as e:
            if not self._slug_taken(post.slug, exclude_id=post.pk):
                raise
            logger.warning("Slug conflict updating post %s to %r: %s", post_id, post.slug, e)
            raise SlugConflictError(post.slug) from e
        logger.info("Updated post %s (%s)", post.pk, post.slug)
        return post

    def delete(self, post_id):
        """Permanently delete a post. Returns whether anything was removed."""
        deleted, _ = self.posts.filter(pk=post_id).delete()
        if deleted:
            logger.info("Deleted post %s", post_id)
        return deleted > 0

    def clear(self):
        """Delete every post and return how many were removed."""
        deleted, _ = self.posts.all().delete()
        logger.info("Cleared %d posts", deleted)
        return deleted

    # Bulk import

    def _draft_to_post(self, draft, keep_ids):
        post = Post(
            title=draft.title,
            slug=draft.slug,
            date=draft.parsed_date() or timezone.now(),
            content=draft.content,
            excerpt=draft.excerpt,
            status=draft.status,
            post_type=draft.post_type,
            categories=list(draft.categories),
            tags=list(draft.tags),
            featured_image=draft.featured_image or None,
            gallery_images=list(draft.gallery_images),
        )
        if keep_ids and draft.wp_id:
            post.pk = draft.wp_id
        return post

    def bulk_import(self, drafts, batch_size=None, keep_ids=True, progress=None):
        """
        Insert drafts in batches, skipping rows that already exist.

        A draft is skipped when its id or slug matches a stored post or a
        draft earlier in the same run. Nothing is overwritten, so re-running
        an import against a partly filled store only adds what is missing.
        Slugs are taken as given; run them through the allocator first if
        they need to be made unique.

        Args:
            drafts: iterable of PostDraft
            batch_size: rows per insert, defaults to IMPORT_BATCH_SIZE
            keep_ids: reuse the WordPress ids as primary keys
            progress: optional callable(done, total) called after each batch

        Returns:
            ImportResult with inserted and skipped counts
        """
        drafts = list(drafts)
        batch_size = batch_size or blog_settings.IMPORT_BATCH_SIZE
        result = ImportResult()
        seen_ids = set()
        seen_slugs = set()

        for start in range(0, len(drafts), batch_size):
            batch = drafts[start:start + batch_size]
            ids = [d.wp_id for d in batch if keep_ids and d.wp_id]
            slugs = [d.slug for d in batch]
            for pk, slug in self._existing_keys(ids, slugs):
                seen_ids.add(pk)
                seen_slugs.add(slug)

            rows = []
            for draft in batch:
                post_id = draft.wp_id if keep_ids and draft.wp_id else None
                if draft.slug in seen_slugs or (post_id is not None and post_id in seen_ids):
                    logger.info("Post %r already exists, skip", draft.slug)
                    result.skipped += 1
                    result.skipped_slugs.append(draft.slug)
                    continue
                seen_slugs.add(draft.slug)
                if post_id is not None:
                    seen_ids.add(post_id)
                rows.append(self._draft_to_post(draft, keep_ids))

            inserted = self._insert(rows)
            dropped = len(rows) - inserted
            if dropped:
                logger.warning("%d posts already existed at insert time, skip", dropped)
            result.inserted += inserted
            result.skipped += dropped
            logger.info(
                "Imported batch %d-%d: %d inserted, %d skipped",
                start + 1, start + len(batch), inserted, len(batch) - inserted,
            )
            if progress is not None:
                progress(start + len(batch), len(drafts))

        if keep_ids and result.inserted:
            self.reset_id_sequence()
        return result

    def _existing_keys(self, ids, slugs):
        """Return (pk, slug) pairs of stored posts matching any id or slug."""
        existing = self.posts.filter(Q(pk__in=ids) | Q(slug__in=slugs))
        return list(existing.values_list("pk", "slug"))

    def _insert(self, rows):
        """Insert rows, ignoring conflicts, and return how many were written."""
        if not rows:
            return 0
        with transaction.atomic(using=self.using):
            before = self.posts.count()
            # ignore_conflicts covers rows written since the existence check
            self.posts.bulk_create(rows, ignore_conflicts=True)
            return self.posts.count() - before

    def reset_id_sequence(self):
        """Move the primary key sequence past the highest stored id."""
        connection = connections[self.using]
        statements = connection.ops.sequence_reset_sql(no_style(), [Post])
        if not statements:
            return
        with connection.cursor() as cursor:
            for sql in statements:
                cursor.execute(sql)
