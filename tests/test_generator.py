"""End-to-end tests for DocsGenerator.

Runs the whole pipeline against the fixture tree in ``tmp_path`` with
fetching disabled.
"""

from __future__ import annotations

import json

import pytest

from canon_docs import generate_docs
from canon_docs.errors import SourceFetchError
from canon_docs.fetch import FetchOutcome
from canon_docs.generator import DocsGenerator
from canon_docs.renderers import SpecPageRenderer


class TestDocsGenerator:
    """Tests for a full generation run."""

    def test_run_writes_all_outputs(self, settings):
        result = DocsGenerator(settings).run()
        docs = settings.output_dir

        assert result.fetch is FetchOutcome.LOCAL
        assert result.page_count == 5
        for rel in [
            "index.md",
            "type/0.2.0.md",
            "blog-post/1.0.0.md",
            "taggable/1.0.0.md",
            "my-post/1.0.0.md",
            "my-post/2.0.0-beta.md",
            "my-post/_category_.json",
            "type/_category_.json",
        ]:
            assert (docs / rel).is_file(), rel
        assert not (docs / "broken").exists()
        assert len(result.written) == 11

    def test_sidebar_follows_group_order(self, settings):
        DocsGenerator(settings).run()
        sidebar = json.loads(settings.sidebar_file.read_text(encoding="utf-8"))

        assert [item["id"] for item in sidebar["specSidebar"]] == [
            "index",
            "my-post/2.0.0-beta",
            "blog-post/1.0.0",
            "taggable/1.0.0",
            "type/0.2.0",
        ]

    def test_category_positions(self, settings):
        DocsGenerator(settings).run()
        category = json.loads((settings.output_dir / "blog-post" / "_category_.json").read_text(encoding="utf-8"))
        assert category["position"] == 3
        assert category["link"]["description"] == "A single blog article."

    def test_instance_page_content(self, settings):
        DocsGenerator(settings).run()
        page = (settings.output_dir / "my-post" / "1.0.0.md").read_text(encoding="utf-8")

        assert "### Core Properties" in page
        assert "#### From taggable" in page
        assert "#### Mood" in page
        assert 'label="README.md"' in page
        assert ":::warning Older Version" in page

    def test_skipped_files_reported(self, settings):
        result = DocsGenerator(settings).run()
        assert sorted(s.stage for s in result.skipped) == ["discovery", "parse"]

    def test_clean_output_removes_stale_files(self, settings):
        stale = settings.output_dir / "old" / "1.0.0.md"
        stale.parent.mkdir(parents=True)
        stale.write_text("stale\n", encoding="utf-8")

        DocsGenerator(settings).run()
        assert not stale.exists()

    def test_keep_output_when_not_cleaning(self, settings):
        keep = settings.output_dir / "intro.md"
        keep.parent.mkdir(parents=True)
        keep.write_text("hand written\n", encoding="utf-8")

        DocsGenerator(settings.model_copy(update={"clean_output": False})).run()
        assert keep.exists()

    def test_render_failure_excludes_record(self, settings, monkeypatch):
        original = SpecPageRenderer.render

        def flaky(self):
            if self.record.name == "taggable":
                raise ValueError("boom")
            return original(self)

        monkeypatch.setattr(SpecPageRenderer, "render", flaky)
        result = DocsGenerator(settings).run()

        assert "taggable" not in [g.name for g in result.groups]
        assert not (settings.output_dir / "taggable").exists()
        render_failures = [s for s in result.skipped if s.stage == "render"]
        assert len(render_failures) == 1
        assert render_failures[0].reason == "boom"

        sidebar = json.loads(settings.sidebar_file.read_text(encoding="utf-8"))
        assert "taggable/1.0.0" not in [item["id"] for item in sidebar["specSidebar"]]

    def test_latest_render_failure_promotes_older_version(self, settings, monkeypatch):
        """Older versions are re-rendered as latest when the newest fails."""
        original = SpecPageRenderer.render

        def flaky(self):
            if self.record.key == "my-post@2.0.0-beta":
                raise ValueError("boom")
            return original(self)

        monkeypatch.setattr(SpecPageRenderer, "render", flaky)
        result = DocsGenerator(settings).run()

        assert not (settings.output_dir / "my-post" / "2.0.0-beta.md").exists()
        page = (settings.output_dir / "my-post" / "1.0.0.md").read_text(encoding="utf-8")
        assert "/my-post/2.0.0-beta" not in page
        assert "sidebar_position: 1" in page
        assert ":::tip Version Information" in page

        blog_post = (settings.output_dir / "blog-post" / "1.0.0.md").read_text(encoding="utf-8")
        assert "/my-post/2.0.0-beta" not in blog_post
        assert "/my-post/2.0.0-beta" not in (settings.output_dir / "index.md").read_text(encoding="utf-8")

        assert [s.stage for s in result.skipped].count("render") == 1
        my_post = next(g for g in result.groups if g.name == "my-post")
        assert my_post.versions == ["1.0.0"]

    def test_fetch_failure_leaves_output_untouched(self, settings, tmp_path):
        marker = settings.output_dir / "index.md"
        marker.parent.mkdir(parents=True)
        marker.write_text("previous run\n", encoding="utf-8")
        missing = settings.model_copy(update={"input_dir": tmp_path / "missing"})

        with pytest.raises(SourceFetchError):
            DocsGenerator(missing).run()
        assert marker.read_text(encoding="utf-8") == "previous run\n"

    def test_generate_docs_helper(self, settings):
        result = generate_docs(settings)
        assert [g.name for g in result.groups][0] == "my-post"
