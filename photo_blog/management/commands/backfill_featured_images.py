from django.core.management.base import BaseCommand

from photo_blog.models import Post
from photo_blog.sanitizer import first_image_src, has_video_embed, video_thumbnail_src


class Command(BaseCommand):
    help = "Set missing featured images from the first image or video in each post"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would change without saving",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        has_featured = 0
        from_images = 0
        from_videos = 0
        unresolved_videos = 0
        missing = 0

        for post in Post.objects.all():
            if post.featured_image and post.featured_image.strip():
                has_featured += 1
                continue

            src = first_image_src(post.content)
            if src:
                from_images += 1
            else:
                src = video_thumbnail_src(post.content)
                if src:
                    from_videos += 1
                elif has_video_embed(post.content):
                    unresolved_videos += 1
                    self.stdout.write(self.style.WARNING(
                        f"[{post.pk}] {post.title}: could not find a video id"
                    ))
                    continue
                else:
                    missing += 1
                    continue

            self.stdout.write(f"[{post.pk}] {post.title} -> {src}")
            if not dry_run:
                post.featured_image = src
                post.save(update_fields=["featured_image"])

        verb = "Would backfill" if dry_run else "Backfilled"
        self.stdout.write(f"Posts with featured image set: {has_featured}")
        self.stdout.write(f"Posts using a video thumbnail: {from_videos}")
        self.stdout.write(f"Posts with an unrecognised video embed: {unresolved_videos}")
        self.stdout.write(f"Posts without any visual: {missing}")
        self.stdout.write(self.style.SUCCESS(
            f"{verb} {from_images + from_videos} featured images"
        ))
