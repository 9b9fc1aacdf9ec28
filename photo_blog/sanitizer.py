"""
Cleanup for HTML carried over from WordPress.

Old posts are full of page-builder shortcodes, absolute links to hosts that
no longer serve the uploads, empty paragraphs and encoded punctuation.
``clean_content`` turns that into plain HTML that the site can serve as is.
"""
import re

from .conf import blog_settings

ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#039;": "'",
    "&rsquo;": "'",
    "&lsquo;": "'",
    "&rdquo;": '"',
    "&ldquo;": '"',
    "&hellip;": "...",
    "&ndash;": "-",
    "&mdash;": "—",
}

_EMPTY_PARAGRAPH_RE = re.compile(r"<p>\s*</p>")
_BLANK_LINES_RE = re.compile(r"\n{2,}")
_IMG_SRC_RE = re.compile(r"""<img[^>]+src=["']([^"']+)["']""", re.IGNORECASE)
_VIDEO_RE = re.compile(r"vimeo|youtube|youtu\.be", re.IGNORECASE)
_YOUTUBE_ID_RE = re.compile(r"(?:youtube\.com/(?:watch\?v=|embed/)|youtu\.be/)([a-zA-Z0-9_-]{11})")
_VIMEO_ID_RE = re.compile(r"vimeo\.com/(?:video/)?(\d+)")


def decode_entities(text):
    """
    Decode the handful of named entities WordPress writes into posts.

    Anything outside the fixed set is left encoded. Entities are replaced
    one after another in table order, ``&amp;`` first, so ``&amp;lt;``
    ends up as ``<``.
    """
    if not text:
        return ""
    for entity, char in ENTITIES.items():
        text = text.replace(entity, char)
    return text


def strip_shortcodes(text, prefixes=None):
    """Remove opening and closing shortcode tags with the given prefixes."""
    if prefixes is None:
        prefixes = blog_settings.STRIPPED_SHORTCODE_PREFIXES
    if not prefixes:
        return text
    alternation = "|".join(re.escape(prefix) for prefix in prefixes)
    return re.sub(r"\[/?(?:%s)[^\]]*\]" % alternation, "", text)


def rewrite_legacy_urls(text, patterns=None, prefix=None):
    """Point absolute upload URLs on retired hosts at the local uploads path."""
    if patterns is None:
        patterns = blog_settings.LEGACY_UPLOAD_PATTERNS
    if prefix is None:
        prefix = blog_settings.UPLOADS_URL_PREFIX
    for pattern in patterns:
        text = re.sub(pattern, lambda match: prefix, text)
    return text


def _clean_once(text):
    text = strip_shortcodes(text)
    text = rewrite_legacy_urls(text)
    text = _EMPTY_PARAGRAPH_RE.sub("", text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    text = decode_entities(text)
    return text.strip()


def clean_content(html):
    """
    Normalize a WordPress post body.

    In order: strip page-builder shortcodes, rewrite legacy upload URLs,
    drop empty paragraphs, collapse runs of blank lines, decode entities and
    trim. Each step can uncover work for an earlier one (a decoded
    ``&lt;p&gt;&lt;/p&gt;`` is an empty paragraph), so the steps repeat until
    the text settles. The result is stable under a second call.
    """
    if not html:
        return ""
    cleaned = _clean_once(html)
    while True:
        again = _clean_once(cleaned)
        if again == cleaned:
            return cleaned
        cleaned = again


def first_image_src(html):
    """Return the src of the first <img> tag, or None."""
    if not html:
        return None
    match = _IMG_SRC_RE.search(html)
    if match:
        return match.group(1)
    return None


def has_video_embed(html):
    """Return True if the content embeds a Vimeo or YouTube video."""
    return bool(html) and _VIDEO_RE.search(html) is not None


def video_thumbnail_src(html):
    """
    Return a thumbnail URL for the first YouTube or Vimeo video, or None.

    YouTube ids map to img.youtube.com, Vimeo ids to vumbnail.com.
    """
    if not html:
        return None
    match = _YOUTUBE_ID_RE.search(html)
    if match:
        return f"https://img.youtube.com/vi/{match.group(1)}/hqdefault.jpg"
    match = _VIMEO_ID_RE.search(html)
    if match:
        return f"https://vumbnail.com/{match.group(1)}.jpg"
    return None
