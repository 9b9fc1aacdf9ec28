"""
Configuration settings for photo_blog.

Override these in your Django settings.py:

    PHOTO_BLOG = {
        'IMPORT_BATCH_SIZE': 50,
        'ADMIN_PASSWORD': 'change-me',
        ...
    }

The legacy upload hosts are the places old WordPress content pointed its
images at. Matching URLs are rewritten to UPLOADS_URL_PREFIX on import:

    PHOTO_BLOG = {
        'LEGACY_UPLOAD_PATTERNS': [
            r'https?://(?:www\\.)?example\\.com/wp-content/uploads/',
        ],
        'UPLOADS_URL_PREFIX': '/uploads/',
    }
"""
import os

from django.conf import settings

DEFAULTS = {
    # Import
    "IMPORT_BATCH_SIZE": 50,
    "IMPORT_POST_TYPE": "post",
    "IMPORT_STATUS": "publish",
    "DEFAULT_TITLE": "Untitled",

    # Content cleanup
    "STRIPPED_SHORTCODE_PREFIXES": ["vc_", "nectar_", "slidepress"],
    "LEGACY_UPLOAD_PATTERNS": [
        r"https?://(?:www\.)?pennquinn\.com/wp-content/uploads/",
        r"http://live-pennquinn\.pantheonsite\.io/wp-content/uploads/",
    ],
    "UPLOADS_URL_PREFIX": "/uploads/",

    # Slugs
    "SLUG_MAX_LENGTH": 255,

    # Admin access
    "ADMIN_PASSWORD": None,
    "SESSION_ADMIN_KEY": "photo_blog_is_admin",
}


class PhotoBlogSettings:
    """
    Lazy settings object that reads from Django settings.

    Access via: from photo_blog.conf import blog_settings
    """

    def __getattr__(self, name):
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid photo_blog setting: {name}")

        user_settings = getattr(settings, "PHOTO_BLOG", {})
        return user_settings.get(name, DEFAULTS[name])

    @property
    def ADMIN_PASSWORD(self):
        """Return the admin password, falling back to the environment."""
        user_settings = getattr(settings, "PHOTO_BLOG", {})
        password = user_settings.get("ADMIN_PASSWORD")
        if password:
            return password
        return os.environ.get("PHOTO_BLOG_ADMIN_PASSWORD") or None


blog_settings = PhotoBlogSettings()
