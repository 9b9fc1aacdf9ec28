"""
JSON API views for photo_blog.

Every post view talks to the PostStore it was given and turns its
outcomes into status codes: missing records are 404, slug races are 409,
anything unexpected is logged and reported as 500.
"""
import json
import logging
from datetime import datetime

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_unicode_slug
from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from django.views import View

from .auth import ADMIN_USER, AdminRequiredMixin, check_password, is_admin, log_in, log_out
from .conf import blog_settings
from .exceptions import SlugConflictError
from .store import PostStore

logger = logging.getLogger(__name__)

# API field name -> model field name
PAYLOAD_FIELDS = {
    "title": "title",
    "slug": "slug",
    "date": "date",
    "content": "content",
    "excerpt": "excerpt",
    "status": "status",
    "type": "post_type",
    "categories": "categories",
    "tags": "tags",
    "featuredImage": "featured_image",
    "galleryImages": "gallery_images",
}
TEXT_FIELDS = ("title", "slug", "content", "excerpt", "status", "type")
LIST_FIELDS = ("categories", "tags", "galleryImages")

class PostStoreMixin:
    """
    Give a view the PostStore it works on.

    Pass one in with ``as_view(store=...)``. A view built without one makes
    its own.
    """

    store = None

    def get_store(self):
        if self.store is None:
            self.store = PostStore()
        return self.store


def _parse_date_value(value):
    parsed = None
    try:
        parsed = parse_datetime(value)
        if parsed is None:
            day = parse_date(value)
            if day is not None:
                parsed = datetime(day.year, day.month, day.day)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError("Enter a valid date.")
    if settings.USE_TZ and timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def clean_post_payload(data, partial=False):
    """
    Validate an API payload and map it to PostStore field names.

    Raises:
        ValidationError: with a message per offending field
    """
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object.")

    errors = {}
    fields = {}
    for key, value in data.items():
        if key not in PAYLOAD_FIELDS:
            continue
        if key in TEXT_FIELDS:
            if not isinstance(value, str):
                errors[key] = ["Expected a string."]
                continue
            if key == "slug" and value:
                try:
                    validate_unicode_slug(value)
                except ValidationError as e:
                    errors[key] = e.messages
                    continue
        elif key in LIST_FIELDS:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                errors[key] = ["Expected a list of strings."]
                continue
        elif key == "featuredImage":
            if value is not None and not isinstance(value, str):
                errors[key] = ["Expected a string or null."]
                continue
        elif key == "date":
            if not isinstance(value, str):
                errors[key] = ["Expected a date string."]
                continue
            try:
                value = _parse_date_value(value)
            except ValidationError as e:
                errors[key] = e.messages
                continue
        fields[PAYLOAD_FIELDS[key]] = value

    if not partial and not (fields.get("title") or "").strip():
        errors.setdefault("title", ["This field is required."])
    if "title" in fields and not fields["title"].strip():
        errors.setdefault("title", ["This field may not be blank."])

    if errors:
        raise ValidationError(errors)
    return fields


def _read_json(request):
    try:
        return json.loads(request.body.decode("utf-8") or "{}")
    except (UnicodeDecodeError, ValueError):
        raise ValidationError("Request body is not valid JSON.")


def _validation_response(error):
    if hasattr(error, "message_dict"):
        return JsonResponse({"error": error.message_dict}, status=400)
    return JsonResponse({"error": error.messages}, status=400)


def _parse_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class PostListView(AdminRequiredMixin, PostStoreMixin, View):
    """List posts newest first, or create one (admin)."""

    public_methods = ("get", "head", "options")

    def get(self, request):
        try:
            posts = self.get_store().get_all()
        except Exception:
            logger.exception("Failed to fetch posts")
            return JsonResponse({"error": "Failed to fetch posts"}, status=500)
        logger.debug("Fetched %d posts", len(posts))
        return JsonResponse([post.to_dict() for post in posts], safe=False)

    def post(self, request):
        try:
            fields = clean_post_payload(_read_json(request))
        except ValidationError as e:
            return _validation_response(e)
        try:
            post = self.get_store().create(fields)
        except SlugConflictError as e:
            return JsonResponse({"error": str(e), "slug": e.slug}, status=409)
        except Exception:
            logger.exception("Failed to create post")
            return JsonResponse({"error": "Failed to create post"}, status=500)
        return JsonResponse(post.to_dict(), status=201)


class PostDetailView(AdminRequiredMixin, PostStoreMixin, View):
    """
    Read a post by slug, or update/delete one by id (admin).

    Both lookups share one path segment, the same way the public URLs do.
    """

    public_methods = ("get", "head", "options")

    def get(self, request, key):
        try:
            post = self.get_store().get_by_slug(key)
        except Exception:
            logger.exception("Failed to fetch post %r", key)
            return JsonResponse({"error": "Failed to fetch post"}, status=500)
        if post is None:
            return JsonResponse({"error": "Post not found"}, status=404)
        return JsonResponse(post.to_dict())

    def put(self, request, key):
        post_id = _parse_id(key)
        if post_id is None:
            return JsonResponse({"error": "Invalid post ID"}, status=400)
        try:
            fields = clean_post_payload(_read_json(request), partial=True)
        except ValidationError as e:
            return _validation_response(e)
        try:
            post = self.get_store().update(post_id, fields)
        except SlugConflictError as e:
            return JsonResponse({"error": str(e), "slug": e.slug}, status=409)
        except Exception:
            logger.exception("Failed to update post %s", post_id)
            return JsonResponse({"error": "Failed to update post"}, status=500)
        if post is None:
            return JsonResponse({"error": "Post not found"}, status=404)
        return JsonResponse(post.to_dict())

    def delete(self, request, key):
        post_id = _parse_id(key)
        if post_id is None:
            return JsonResponse({"error": "Invalid post ID"}, status=400)
        try:
            deleted = self.get_store().delete(post_id)
        except Exception:
            logger.exception("Failed to delete post %s", post_id)
            return JsonResponse({"error": "Failed to delete post"}, status=500)
        if not deleted:
            return JsonResponse({"error": "Post not found"}, status=404)
        return HttpResponse(status=204)


class LoginView(View):
    """Start an admin session with the shared password."""

    def post(self, request):
        if not blog_settings.ADMIN_PASSWORD:
            logger.error("ADMIN_PASSWORD is not configured")
            return JsonResponse({"message": "Server configuration error"}, status=500)
        try:
            data = _read_json(request)
        except ValidationError as e:
            return _validation_response(e)
        password = data.get("password") if isinstance(data, dict) else None
        if not check_password(password):
            return JsonResponse({"message": "Invalid password"}, status=401)
        log_in(request)
        return JsonResponse({"success": True, "user": ADMIN_USER})


class LogoutView(View):
    """End the admin session."""

    def post(self, request):
        log_out(request)
        return JsonResponse({"success": True})


class CurrentUserView(View):
    """Report who is logged in."""

    def get(self, request):
        if is_admin(request):
            return JsonResponse(ADMIN_USER)
        return JsonResponse({"message": "Not authenticated"}, status=401)
