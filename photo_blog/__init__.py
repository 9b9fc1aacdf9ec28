"""
photo-blog - A Django photo blog with a WordPress importer.

Features:
- WordPress eXtended RSS (WXR) import with legacy markup cleanup
- Unique, URL-safe slugs allocated on every create and slug change
- Post store with CRUD and idempotent batched bulk import
- JSON API behind a shared admin password
- Management commands for importing, seeding and backfilling posts
"""

__version__ = "0.1.0"
