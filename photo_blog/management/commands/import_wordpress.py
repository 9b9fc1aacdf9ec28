import json
import os

from django.core.management.base import BaseCommand, CommandError

from photo_blog.exceptions import WXRParseError
from photo_blog.store import PostStore
from photo_blog.wordpress import collect_taxonomy, parse_wxr, sort_drafts


class Command(BaseCommand):
    help = "Import published posts from a WordPress WXR export"

    def add_arguments(self, parser):
        parser.add_argument("xml_path", help="Path to the WordPress export (.xml)")
        parser.add_argument(
            "--year",
            action="append",
            dest="years",
            default=[],
            help="Only import posts from this year. Repeat for several years.",
        )
        parser.add_argument("--batch-size", type=int, default=None, help="Rows per insert")
        parser.add_argument(
            "--replace",
            action="store_true",
            help="Delete every stored post before importing",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Parse and report without touching the database",
        )
        parser.add_argument("--json-output", default=None, help="Also write the parsed posts to this JSON file")
        parser.add_argument(
            "--no-keep-ids",
            action="store_false",
            dest="keep_ids",
            help="Let the database assign ids instead of reusing WordPress ids",
        )

    def handle(self, *args, **options):
        xml_path = options["xml_path"]
        if not os.path.exists(xml_path):
            raise CommandError(f"File not found: {xml_path}")

        drafts = self.parse(xml_path, options["years"])
        self.stdout.write(f"Total: {len(drafts)} posts")

        if options["json_output"]:
            self.write_json(drafts, options["json_output"])

        categories, tags = collect_taxonomy(drafts)
        self.stdout.write(f"Categories ({len(categories)}): {', '.join(categories)}")
        suffix = "..." if len(tags) > 30 else ""
        self.stdout.write(f"Tags ({len(tags)}): {', '.join(tags[:30])}{suffix}")

        if options["dry_run"]:
            self.stdout.write(self.style.WARNING("Dry run, nothing written to the database."))
            return

        store = PostStore()
        if options["replace"]:
            removed = store.clear()
            self.stdout.write(f"Cleared {removed} existing posts")

        def progress(done, total):
            self.stdout.write(f"Inserted {done}/{total} posts...")

        result = store.bulk_import(
            drafts,
            batch_size=options["batch_size"],
            keep_ids=options["keep_ids"],
            progress=progress,
        )
        for slug in result.skipped_slugs:
            self.stdout.write(self.style.WARNING(f"Skipped (already exists): {slug}"))
        self.stdout.write(self.style.SUCCESS(
            f"Done! Imported: {result.inserted}, skipped: {result.skipped}"
        ))

    def parse(self, xml_path, years):
        try:
            if not years:
                drafts = parse_wxr(xml_path)
                self.stdout.write(f"Found {len(drafts)} published posts")
                return drafts

            drafts = []
            for year in years:
                year_drafts = parse_wxr(xml_path, year=year)
                self.stdout.write(f"Found {len(year_drafts)} published posts from {year}")
                drafts.extend(year_drafts)
            return sort_drafts(drafts)
        except WXRParseError as e:
            raise CommandError(str(e)) from e
        except ValueError as e:
            raise CommandError(str(e)) from e

    def write_json(self, drafts, path):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump([draft.to_dict() for draft in drafts], f, ensure_ascii=False, indent=2)
        self.stdout.write(f"Saved posts to {path}")
