import json

from django.core.management.base import BaseCommand, CommandError

from photo_blog.store import PostStore
from photo_blog.wordpress import PostDraft


class Command(BaseCommand):
    help = "Seed an empty post table from a JSON dump written by import_wordpress --json-output"

    def add_arguments(self, parser):
        parser.add_argument("json_path", help="Path to the JSON dump")
        parser.add_argument("--batch-size", type=int, default=None, help="Rows per insert")

    def handle(self, *args, **options):
        store = PostStore()
        existing = store.count()
        if existing:
            self.stdout.write(f"Database already has {existing} posts, skipping")
            return

        drafts = self.read(options["json_path"])
        if not drafts:
            self.stdout.write(self.style.WARNING("No posts found to import"))
            return

        self.stdout.write("Database is empty, importing posts...")

        def progress(done, total):
            self.stdout.write(f"Imported posts {done}/{total}")

        result = store.bulk_import(drafts, batch_size=options["batch_size"], progress=progress)
        self.stdout.write(self.style.SUCCESS(
            f"Loaded {result.inserted} posts ({result.skipped} skipped)"
        ))

    def read(self, path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise CommandError(f"File not found: {path}")
        except json.JSONDecodeError as e:
            raise CommandError(f"Could not decode {path}: {e}")

        if isinstance(data, dict):
            data = data.get("posts", [])
        if not isinstance(data, list):
            raise CommandError(f"Expected a list of posts in {path}")
        return [PostDraft.from_dict(item) for item in data]
