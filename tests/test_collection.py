"""
test_collection.py
------------------
Unit tests for llmsite.collection: glob selection, id derivation and
collection loading.
"""
import datetime as dt

import pytest

from llmsite.collection import (
    DEFAULT_ID_RULES,
    DEFAULT_PATTERNS,
    Collection,
    IdRule,
    compile_patterns,
    derive_id,
    glob_to_regex,
    is_selected,
    load_collection,
    scan_files,
)
from llmsite.errors import CollectionError, DuplicateIdError, FrontMatterError


class TestGlobToRegex:
    @pytest.mark.parametrize(
        "pattern, path, expected",
        [
            ("**/*.md", "a.md", True),
            ("**/*.md", "articles/a.md", True),
            ("**/*.md", "articles/deep/a.md", True),
            ("*.md", "articles/a.md", False),
            ("articles/*.md", "articles/a.md", True),
            ("articles/*.md", "articles/x/a.md", False),
            ("articles/**", "articles/x/a.md", True),
            ("**/_*", "articles/_draft.md", True),
            ("**/*.{md,markdown}", "a.markdown", True),
            ("**/*.{md,markdown}", "a.txt", False),
            ("202?-*.md", "2024-x.md", True),
            ("[!_]*.md", "_x.md", False),
        ],
    )
    def test_matching(self, pattern, path, expected):
        assert bool(glob_to_regex(pattern).match(path)) is expected


class TestIsSelected:
    def test_later_pattern_overrides_earlier(self):
        compiled = compile_patterns(["**/*.md", "!**/_*", "**/_keep.md"])
        assert is_selected("articles/a.md", compiled)
        assert not is_selected("articles/_draft.md", compiled)
        assert is_selected("articles/_keep.md", compiled)

    def test_default_patterns_skip_underscore_folders(self):
        compiled = compile_patterns(DEFAULT_PATTERNS)
        assert is_selected("articles/post.md", compiled)
        assert not is_selected("articles/_drafts/wip.md", compiled)
        assert not is_selected("_partials/nav.md", compiled)
        assert not is_selected("articles/_draft.md", compiled)

    def test_unmatched_path_is_excluded(self):
        assert not is_selected("notes.txt", compile_patterns(["**/*.md"]))

    def test_blank_patterns_ignored(self):
        assert compile_patterns(["", "  "]) == []


class TestScanFiles:
    def test_hidden_and_excluded_files_skipped(self, content_dir):
        for rel in [
            "articles/b.md",
            "articles/a.md",
            "articles/_draft.md",
            ".obsidian/workspace.md",
            "articles/.hidden.md",
            "articles/image.png",
            "daily-logs/2024-01-02.md",
        ]:
            path = content_dir / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("x", encoding="utf-8")

        found = scan_files(content_dir, ["**/*.md", "!**/_*"])
        rels = [path.relative_to(content_dir).as_posix() for path in found]
        assert rels == ["articles/a.md", "articles/b.md", "daily-logs/2024-01-02.md"]


class TestDeriveId:
    @pytest.mark.parametrize(
        "rel_path, expected",
        [
            ("articles/2024-01-01-hello-world.md", "hello-world"),
            ("articles/hello-world.md", "hello-world"),
            ("daily-logs/2024-01-02.md", "2024-01-02"),
            ("daily-logs/2024-01-02-notes.md", "2024-01-02-notes"),
            ("other/2024-01-01-x.md", "other/2024-01-01-x"),
            ("articles/post.markdown", "post"),
        ],
    )
    def test_default_rules(self, rel_path, expected):
        assert derive_id(rel_path) == expected

    def test_deterministic_and_idempotent(self):
        rel = "articles/2024-05-06-stable.md"
        first = derive_id(rel)
        assert derive_id(rel) == first
        assert derive_id(first) == first

    def test_rules_apply_in_order(self):
        rules = [
            IdRule.compile("ext", r"\.md$"),
            IdRule.compile("upper", r"^notes/", "n-"),
        ]
        assert derive_id("notes/a.md", rules) == "n-a"

    def test_rule_set_is_exposed(self):
        assert [rule.name for rule in DEFAULT_ID_RULES] == ["date-prefix", "folder", "extension"]


class TestLoadCollection:
    def test_entries_built_in_scan_order(self, content_dir, write_entry):
        write_entry("articles/2024-01-01-hello.md", "Hello", "2024-01-01", tags="[a, b]")
        write_entry("daily-logs/2024-01-02.md", "Activity Log 1", "2024-01-02", description="Day one")

        entries = load_collection(Collection("writing", content_dir))

        assert [entry.id for entry in entries] == ["hello", "2024-01-02"]
        hello, log = entries
        assert hello.title == "Hello"
        assert hello.date == dt.date(2024, 1, 1)
        assert hello.tags == ("a", "b")
        assert hello.description is None
        assert hello.source_path == content_dir / "articles/2024-01-01-hello.md"
        assert log.description == "Day one"

    def test_schema_failure_is_fatal(self, content_dir, write_entry):
        write_entry("articles/good.md", "Good", "2024-01-01")
        write_entry("articles/no-title.md", None, "2024-01-01")
        write_entry("articles/no-date.md", "No date", None)

        with pytest.raises(CollectionError) as exc_info:
            load_collection(Collection("writing", content_dir))
        message = str(exc_info.value)
        assert "2 file(s)" in message
        assert "no-title.md" in message
        assert "no-date.md" in message

    def test_duplicate_ids_are_fatal(self, content_dir, write_entry):
        write_entry("articles/2024-01-01-hello.md", "One", "2024-01-01")
        write_entry("articles/hello.md", "Two", "2024-02-01")

        with pytest.raises(DuplicateIdError) as exc_info:
            load_collection(Collection("writing", content_dir))
        assert exc_info.value.entry_id == "hello"

    def test_drafts_dropped_unless_requested(self, content_dir, write_entry):
        write_entry("articles/live.md", "Live", "2024-01-01")
        write_entry("articles/wip.md", "WIP", "2024-01-02", draft="true")

        collection = Collection("writing", content_dir)
        assert [entry.id for entry in load_collection(collection)] == ["live"]
        assert [entry.id for entry in load_collection(collection, include_drafts=True)] == ["live", "wip"]

    def test_malformed_front_matter_is_fatal(self, content_dir):
        (content_dir / "articles" / "bad.md").write_text("---\ntitle: [oops\n---\n", encoding="utf-8")
        with pytest.raises(FrontMatterError):
            load_collection(Collection("writing", content_dir))

    def test_missing_directory(self, tmp_path):
        with pytest.raises(CollectionError):
            load_collection(Collection("writing", tmp_path / "nope"))

    def test_underscore_folder_not_loaded(self, content_dir, write_entry):
        write_entry("articles/post.md", "Post", "2024-01-01")
        write_entry("articles/_drafts/wip.md", "WIP", "2024-01-02")
        entries = load_collection(Collection("writing", content_dir))
        assert [entry.id for entry in entries] == ["post"]

    def test_empty_collection(self, content_dir):
        assert load_collection(Collection("writing", content_dir)) == []
