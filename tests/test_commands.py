"""
Tests for the management commands.
"""
import json
from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from photo_blog.models import Post

from .wxr import make_item, write_wxr


def run(*args):
    out = StringIO()
    call_command(*args, stdout=out)
    return out.getvalue()


@pytest.fixture
def export(tmp_path):
    return write_wxr(
        tmp_path / "export.xml",
        make_item(post_id=10, name="spring", date="2017-04-01 09:00:00", categories=["2017"], tags=["Penn"]),
        make_item(post_id=11, name="summer", date="2017-07-01 09:00:00", categories=["2017"], tags=["Penn", "Quinn"]),
        make_item(post_id=12, name="last-year", date="2016-07-01 09:00:00", categories=["2016"]),
        make_item(post_id=13, name="about", post_type="page"),
    )


class TestImportWordpress:
    def test_imports_published_posts(self, db, export):
        output = run("import_wordpress", str(export))
        assert "Total: 3 posts" in output
        assert "Categories (2): 2016, 2017" in output
        assert "Tags (2): Penn, Quinn" in output
        assert "Done! Imported: 3, skipped: 0" in output
        assert list(Post.objects.values_list("pk", flat=True)) == [11, 10, 12]

    def test_batches_reported(self, db, export):
        output = run("import_wordpress", str(export), "--batch-size", "2")
        assert "Inserted 2/3 posts..." in output
        assert "Inserted 3/3 posts..." in output

    def test_year_filter(self, db, export):
        output = run("import_wordpress", str(export), "--year", "2017")
        assert "Found 2 published posts from 2017" in output
        assert set(Post.objects.values_list("slug", flat=True)) == {"spring", "summer"}

    def test_several_years(self, db, export):
        run("import_wordpress", str(export), "--year", "2016", "--year", "2017")
        assert list(Post.objects.values_list("slug", flat=True)) == ["summer", "spring", "last-year"]

    def test_rerun_skips_existing(self, db, export):
        run("import_wordpress", str(export))
        output = run("import_wordpress", str(export))
        assert "Done! Imported: 0, skipped: 3" in output
        assert "Skipped (already exists): summer" in output
        assert Post.objects.count() == 3

    def test_dry_run(self, db, export):
        output = run("import_wordpress", str(export), "--dry-run")
        assert "Dry run" in output
        assert Post.objects.count() == 0

    def test_replace(self, db, export):
        Post.objects.create(title="Stale", slug="stale")
        output = run("import_wordpress", str(export), "--replace")
        assert "Cleared 1 existing posts" in output
        assert not Post.objects.filter(slug="stale").exists()
        assert Post.objects.count() == 3

    def test_without_ids(self, db, export):
        run("import_wordpress", str(export), "--no-keep-ids")
        assert not Post.objects.filter(pk=10).exists()
        assert Post.objects.count() == 3

    def test_json_output(self, db, export, tmp_path):
        path = tmp_path / "out" / "posts.json"
        output = run("import_wordpress", str(export), "--dry-run", "--json-output", str(path))
        assert f"Saved posts to {path}" in output
        data = json.loads(path.read_text(encoding="utf-8"))
        assert [item["slug"] for item in data] == ["summer", "spring", "last-year"]
        assert data[0]["tags"] == ["Penn", "Quinn"]

    def test_missing_file(self, db, tmp_path):
        with pytest.raises(CommandError, match="File not found"):
            run("import_wordpress", str(tmp_path / "nope.xml"))

    def test_malformed_file(self, db, tmp_path):
        path = tmp_path / "broken.xml"
        path.write_text("<rss><channel>", encoding="utf-8")
        with pytest.raises(CommandError):
            run("import_wordpress", str(path))

    def test_bad_year(self, db, export):
        with pytest.raises(CommandError):
            run("import_wordpress", str(export), "--year", "17")


class TestLoadPosts:
    @pytest.fixture
    def dump(self, tmp_path):
        path = tmp_path / "posts.json"
        path.write_text(json.dumps([
            {"id": 5, "title": "Beach Day", "slug": "beach-day", "date": "2017-06-01 10:00:00",
             "tags": ["Penn"], "featuredImage": "/uploads/a.jpg"},
            {"id": 6, "title": "Park", "slug": "park", "date": "2017-05-01 10:00:00"},
        ]), encoding="utf-8")
        return path

    def test_seeds_empty_table(self, db, dump):
        output = run("load_posts", str(dump))
        assert "Loaded 2 posts (0 skipped)" in output
        post = Post.objects.get(pk=5)
        assert post.tags == ["Penn"]
        assert post.featured_image == "/uploads/a.jpg"

    def test_leaves_populated_table_alone(self, db, dump):
        Post.objects.create(title="Existing", slug="existing")
        output = run("load_posts", str(dump))
        assert "Database already has 1 posts, skipping" in output
        assert Post.objects.count() == 1

    def test_accepts_wrapped_list(self, db, tmp_path):
        path = tmp_path / "posts.json"
        path.write_text(json.dumps({"posts": [{"id": 1, "title": "A", "slug": "a"}]}), encoding="utf-8")
        run("load_posts", str(path))
        assert Post.objects.get(pk=1).slug == "a"

    def test_round_trip_from_import(self, db, export, tmp_path):
        path = tmp_path / "posts.json"
        run("import_wordpress", str(export), "--dry-run", "--json-output", str(path))
        run("load_posts", str(path))
        assert list(Post.objects.values_list("pk", flat=True)) == [11, 10, 12]

    def test_empty_dump(self, db, tmp_path):
        path = tmp_path / "posts.json"
        path.write_text("[]", encoding="utf-8")
        assert "No posts found" in run("load_posts", str(path))

    @pytest.mark.parametrize("text", ["{nope", '"posts"'])
    def test_bad_dump(self, db, tmp_path, text):
        path = tmp_path / "posts.json"
        path.write_text(text, encoding="utf-8")
        with pytest.raises(CommandError):
            run("load_posts", str(path))

    def test_missing_file(self, db, tmp_path):
        with pytest.raises(CommandError, match="File not found"):
            run("load_posts", str(tmp_path / "nope.json"))


class TestBackfillFeaturedImages:
    @pytest.fixture
    def posts(self, db):
        return {
            "set": Post.objects.create(
                title="Set", slug="set", content='<img src="/uploads/b.jpg">', featured_image="/uploads/a.jpg",
            ),
            "image": Post.objects.create(
                title="Image", slug="image", content='<p>x</p><img src="/uploads/c.jpg"><img src="/uploads/d.jpg">',
            ),
            "blank": Post.objects.create(
                title="Blank", slug="blank", content='<img src="/uploads/e.jpg">', featured_image="  ",
            ),
            "video": Post.objects.create(
                title="Video", slug="video", content='<iframe src="https://player.vimeo.com/video/1"></iframe>',
            ),
            "words": Post.objects.create(title="Words", slug="words", content="<p>Just words</p>"),
        }

    def test_backfill(self, posts):
        output = run("backfill_featured_images")
        assert "Backfilled 3 featured images" in output
        assert "Posts using a video thumbnail: 1" in output
        assert "Posts without any visual: 1" in output
        assert Post.objects.get(slug="video").featured_image == "https://vumbnail.com/1.jpg"
        assert Post.objects.get(slug="image").featured_image == "/uploads/c.jpg"
        assert Post.objects.get(slug="blank").featured_image == "/uploads/e.jpg"
        assert Post.objects.get(slug="set").featured_image == "/uploads/a.jpg"
        assert Post.objects.get(slug="words").featured_image is None

    def test_dry_run(self, posts):
        output = run("backfill_featured_images", "--dry-run")
        assert "Would backfill 3 featured images" in output
        assert Post.objects.get(slug="image").featured_image is None
        assert Post.objects.get(slug="video").featured_image is None

    def test_youtube_thumbnail(self, db):
        Post.objects.create(
            title="Clip", slug="clip", content='<iframe src="https://www.youtube.com/embed/dQw4w9WgXcQ"></iframe>',
        )
        run("backfill_featured_images")
        assert Post.objects.get(slug="clip").featured_image == "https://img.youtube.com/vi/dQw4w9WgXcQ/hqdefault.jpg"

    def test_unrecognised_video(self, db):
        Post.objects.create(title="Odd", slug="odd", content="<p>see my youtube channel</p>")
        output = run("backfill_featured_images")
        assert "Posts with an unrecognised video embed: 1" in output
        assert Post.objects.get(slug="odd").featured_image is None
