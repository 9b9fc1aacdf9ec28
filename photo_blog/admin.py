"""
Django admin configuration for photo_blog.
"""
from django import forms
from django.contrib import admin, messages
from django.db.models import Q
from django.utils.html import format_html

from .models import Post
from .sanitizer import clean_content, first_image_src, video_thumbnail_src
from .slugs import get_unique_slug, slugify_title


class PostAdminForm(forms.ModelForm):
    """
    Post form that leaves slug uniqueness to the allocator.

    A taken or empty slug is not a form error here: PostAdmin.save_model turns
    it into the next free slug.
    """

    slug = forms.SlugField(required=False, allow_unicode=True, max_length=Post._meta.get_field("slug").max_length)

    class Meta:
        model = Post
        fields = "__all__"

    def _get_validation_exclusions(self):
        exclude = super()._get_validation_exclusions()
        exclude.add("slug")
        return exclude


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    form = PostAdminForm
    list_display = [
        "thumbnail_preview",
        "title_preview",
        "slug",
        "status",
        "date",
    ]
    list_filter = ["status", "post_type", "date"]
    search_fields = ["title", "slug", "content"]
    date_hierarchy = "date"
    ordering = ["-date", "id"]
    prepopulated_fields = {"slug": ("title",)}

    fieldsets = (
        (None, {
            "fields": ("title", "slug", "date", "content", "excerpt")
        }),
        ("Taxonomy", {
            "fields": ("categories", "tags")
        }),
        ("Images", {
            "fields": ("featured_image", "gallery_images")
        }),
        ("Status", {
            "fields": ("status", "post_type"),
            "classes": ("collapse",),
        }),
    )

    actions = ["clean_selected_content", "backfill_featured_images"]

    def save_model(self, request, obj, form, change):
        # Route admin writes through the same allocator as the API.
        if not change or "slug" in form.changed_data:
            base_slug = obj.slug or slugify_title(obj.title)
            obj.slug = get_unique_slug(base_slug, exclude_id=obj.pk if change else None)
        super().save_model(request, obj, form, change)

    def title_preview(self, obj):
        """Truncated title for list display."""
        return obj.title[:60] + "..." if len(obj.title) > 60 else obj.title

    title_preview.short_description = "Title"

    def thumbnail_preview(self, obj):
        if obj.featured_image:
            return format_html(
                '<img src="{}" style="max-width: 50px; max-height: 50px;" />',
                obj.featured_image,
            )
        return "-"

    thumbnail_preview.short_description = "Preview"

    @admin.action(description="Clean legacy WordPress markup")
    def clean_selected_content(self, request, queryset):
        changed = 0
        for post in queryset:
            cleaned = clean_content(post.content)
            if cleaned != post.content:
                post.content = cleaned
                post.save(update_fields=["content"])
                changed += 1
        self.message_user(request, f"{changed} posts cleaned.")

    @admin.action(description="Use first content image or video as featured image")
    def backfill_featured_images(self, request, queryset):
        updated = 0
        for post in queryset.filter(Q(featured_image__isnull=True) | Q(featured_image="")):
            src = first_image_src(post.content) or video_thumbnail_src(post.content)
            if src:
                post.featured_image = src
                post.save(update_fields=["featured_image"])
                updated += 1
        self.message_user(request, f"{updated} featured images set.", level=messages.INFO)
