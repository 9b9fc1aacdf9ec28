"""
WordPress eXtended RSS (WXR) import.

Turns a WordPress export into ``PostDraft`` records ready for
``PostStore.bulk_import``. Only published posts survive; pages,
attachments, revisions, drafts and the like are dropped.

    drafts = parse_wxr("export.xml", year="2017")
"""
import logging
import re
import xml.etree.ElementTree as ET
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .conf import blog_settings
from .exceptions import WXRParseError
from .sanitizer import clean_content, decode_entities, first_image_src

logger = logging.getLogger(__name__)

WXR_VERSIONS = ["1.2", "1.1", "1.0"]
CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
DC_NS = "http://purl.org/dc/elements/1.1/"

_YEAR_RE = re.compile(r"^\d{4}$")


@dataclass
class PostDraft:
    """A post parsed from an export, not yet stored."""

    wp_id: int
    title: str
    slug: str
    date: str = ""
    content: str = ""
    excerpt: str = ""
    status: str = "publish"
    post_type: str = "post"
    categories: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    featured_image: Optional[str] = None
    gallery_images: List[str] = field(default_factory=list)

    def parsed_date(self):
        """Return the date as an aware datetime, or None if missing or bad."""
        if not self.date:
            return None
        try:
            value = parse_datetime(self.date)
        except ValueError:
            # Well formed but impossible, e.g. WordPress' 0000-00-00 00:00:00
            return None
        if value is None:
            return None
        if settings.USE_TZ and timezone.is_naive(value):
            value = timezone.make_aware(value)
        return value

    def to_dict(self):
        return {
            "id": self.wp_id,
            "title": self.title,
            "slug": self.slug,
            "date": self.date,
            "content": self.content,
            "excerpt": self.excerpt,
            "status": self.status,
            "type": self.post_type,
            "categories": list(self.categories),
            "tags": list(self.tags),
            "featuredImage": self.featured_image,
            "galleryImages": list(self.gallery_images),
        }

    @classmethod
    def from_dict(cls, data):
        """Build a draft from the shape written by ``to_dict``."""
        return cls(
            wp_id=_parse_id(data.get("id")),
            title=data.get("title") or blog_settings.DEFAULT_TITLE,
            slug=data.get("slug") or f"post-{_parse_id(data.get('id'))}",
            date=data.get("date") or "",
            content=data.get("content") or "",
            excerpt=data.get("excerpt") or "",
            status=data.get("status") or "publish",
            post_type=data.get("type") or "post",
            categories=list(data.get("categories") or []),
            tags=list(data.get("tags") or []),
            featured_image=data.get("featuredImage") or None,
            gallery_images=list(data.get("galleryImages") or []),
        )


def _parse_id(value):
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


def _detect_wp_namespace(channel):
    for version in WXR_VERSIONS:
        namespace = f"http://wordpress.org/export/{version}/"
        if channel.find(f"{{{namespace}}}wxr_version") is not None:
            return namespace
    return f"http://wordpress.org/export/{WXR_VERSIONS[0]}/"


def _group_children(item, namespaces):
    """
    Map each child of ``item`` to a prefixed name, always holding a list.

    A field appears once, many times or not at all depending on the post.
    Callers look it up by name and always get a list back, of length 0..N.
    """
    prefixes = {uri: prefix for prefix, uri in namespaces.items()}
    grouped = defaultdict(list)
    for child in item:
        tag = child.tag
        if isinstance(tag, str) and tag.startswith("{"):
            uri, _, local = tag[1:].partition("}")
            prefix = prefixes.get(uri)
            name = f"{prefix}:{local}" if prefix else local
        else:
            name = tag
        grouped[name].append(child)
    return grouped


def _text(grouped, name):
    elements = grouped.get(name) or []
    if not elements:
        return ""
    return elements[0].text or ""


def _taxonomy(elements):
    categories = []
    tags = []
    for element in elements:
        label = (element.text or "").strip()
        if not label:
            continue
        domain = element.get("domain")
        if domain is None or domain == "category":
            categories.append(label)
        elif domain == "post_tag":
            tags.append(label)
    return categories, tags


def _sort_key(draft):
    value = draft.parsed_date()
    if value is None:
        return datetime.min
    return timezone.make_naive(value) if timezone.is_aware(value) else value


def _read(source):
    try:
        return ET.parse(source)
    except ET.ParseError as e:
        raise WXRParseError(source, e) from e


def parse_wxr(source, year=None):
    """
    Parse a WXR export into drafts, newest first.

    Args:
        source: path or file object holding the export
        year: optional four-digit year; only posts dated that year are kept

    Returns:
        List of PostDraft sorted by date descending. Drafts without a usable
        date sort last. Drafts sharing a date keep export order.

    Raises:
        WXRParseError: the document is not well-formed XML.
    """
    if year is not None:
        year = str(year)
        if not _YEAR_RE.match(year):
            raise ValueError(f"Year filter must be four digits, got {year!r}")

    root = _read(source).getroot()
    channel = root.find("channel")
    if channel is None:
        channel = root
    namespaces = {
        "wp": _detect_wp_namespace(channel),
        "content": CONTENT_NS,
        "dc": DC_NS,
    }
    namespaces["excerpt"] = namespaces["wp"] + "excerpt/"

    wanted_type = blog_settings.IMPORT_POST_TYPE
    wanted_status = blog_settings.IMPORT_STATUS

    drafts = []
    skipped = 0
    for item in channel.findall("item"):
        grouped = _group_children(item, namespaces)
        post_type = _text(grouped, "wp:post_type")
        status = _text(grouped, "wp:status")
        if post_type != wanted_type or status != wanted_status:
            skipped += 1
            continue

        post_date = _text(grouped, "wp:post_date")
        if year and post_date[:4] != year:
            skipped += 1
            continue

        wp_id = _parse_id(_text(grouped, "wp:post_id"))
        categories, tags = _taxonomy(grouped.get("category", []))
        content = clean_content(_text(grouped, "content:encoded"))

        drafts.append(PostDraft(
            wp_id=wp_id,
            title=decode_entities(_text(grouped, "title")).strip() or blog_settings.DEFAULT_TITLE,
            slug=_text(grouped, "wp:post_name").strip() or f"post-{wp_id}",
            date=post_date,
            content=content,
            excerpt=_text(grouped, "excerpt:encoded"),
            status=status,
            post_type=post_type,
            categories=categories,
            tags=tags,
            featured_image=first_image_src(content),
        ))

    logger.info(
        "Parsed %d published posts from %s (%d items skipped)",
        len(drafts), source, skipped,
    )
    return sort_drafts(drafts)


def sort_drafts(drafts):
    """Return drafts newest first; undated last, ties in their given order."""
    # reverse=True keeps equal keys in their original order
    return sorted(drafts, key=_sort_key, reverse=True)


def collect_taxonomy(drafts):
    """
    Summarize the taxonomy used by a set of drafts.

    Returns:
        (categories, tags): distinct categories sorted alphabetically and
        distinct tags in first-seen order
    """
    categories = set()
    tags = []
    seen_tags = set()
    for draft in drafts:
        categories.update(draft.categories)
        for tag in draft.tags:
            if tag not in seen_tags:
                seen_tags.add(tag)
                tags.append(tag)
    return sorted(categories), tags
