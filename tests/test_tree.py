"""Tests for building the repository tree from a flat listing."""

import pytest

from github_repo_explorer.errors import OrphanEntryError
from github_repo_explorer.tree import (
    TreeEntry,
    build_tree,
    count_entries,
    filter_entries,
    find_entry,
    iter_entries,
)


def shape(entries: list[TreeEntry]) -> list:
    """Reduce a forest to nested (path, children) tuples for comparison."""
    return [(e.path, shape(e.children)) for e in entries]


class TestBuildTree:
    """Tests for build_tree."""

    def test_nested_example(self):
        """Entries nest under the entry matching their parent path."""
        entries = [
            {"path": "a", "type": "tree"},
            {"path": "a/b.md", "type": "blob"},
            {"path": "a/c", "type": "tree"},
            {"path": "a/c/d.txt", "type": "blob"},
        ]
        roots = build_tree(entries)

        assert shape(roots) == [
            ("a", [("a/b.md", []), ("a/c", [("a/c/d.txt", [])])]),
        ]

    def test_every_non_root_appears_once_under_its_parent(self, tree_listing):
        roots = build_tree(filter_entries(tree_listing))

        seen = [e.path for e in iter_entries(roots)]
        assert len(seen) == len(set(seen))
        for entry in iter_entries(roots):
            for child in entry.children:
                assert child.parent_path == entry.path

    def test_parent_may_come_after_child(self):
        """Parents are resolved after the whole listing is indexed."""
        entries = [
            {"path": "a/b.txt", "type": "blob"},
            {"path": "a", "type": "tree"},
        ]
        roots = build_tree(entries)

        assert shape(roots) == [("a", [("a/b.txt", [])])]

    def test_orphan_promoted_to_root(self):
        """Entries whose parent is missing become top-level, nothing is dropped."""
        entries = [
            {"path": "x", "type": "tree"},
            {"path": "missing/dir/file.txt", "type": "blob"},
            {"path": "x/y.txt", "type": "blob"},
        ]
        roots = build_tree(entries)

        assert [e.path for e in roots] == ["x", "missing/dir/file.txt"]
        assert count_entries(roots) == len(entries)

    def test_strict_mode_rejects_orphans(self):
        entries = [{"path": "missing/file.txt", "type": "blob"}]

        with pytest.raises(OrphanEntryError) as exc_info:
            build_tree(entries, strict=True)

        assert exc_info.value.parent_path == "missing"

    def test_preserves_input_order(self):
        """The builder never sorts; display order is the navigator's job."""
        entries = [
            {"path": "z.txt", "type": "blob"},
            {"path": "a", "type": "tree"},
            {"path": "m.txt", "type": "blob"},
        ]
        roots = build_tree(entries)

        assert [e.path for e in roots] == ["z.txt", "a", "m.txt"]

    def test_duplicate_paths_last_write_wins_index(self):
        """A child attaches to the last entry registered for its parent path."""
        first = TreeEntry(path="a", type="tree")
        second = TreeEntry(path="a", type="tree", sha="second")
        child = TreeEntry(path="a/b.txt", type="blob")

        build_tree([first, second, child])

        assert second.children == [child]
        assert first.children == []

    def test_rebuild_resets_children(self):
        entries = [TreeEntry(path="a", type="tree"), TreeEntry(path="a/b", type="blob")]

        build_tree(entries)
        roots = build_tree(entries)

        assert len(roots[0].children) == 1

    def test_empty_input(self):
        assert build_tree([]) == []


class TestTreeEntry:
    """Tests for TreeEntry helpers."""

    def test_from_dict_keeps_unknown_keys(self):
        entry = TreeEntry.from_dict(
            {"path": "a/b.txt", "type": "blob", "mode": "100644", "sha": "s", "custom": 1}
        )

        assert entry.mode == "100644"
        assert entry.extra == {"custom": 1}
        assert entry.to_dict()["custom"] == 1

    def test_name_and_parent_path(self):
        entry = TreeEntry(path="a/b/c.txt", type="blob")

        assert entry.name == "c.txt"
        assert entry.parent_path == "a/b"
        assert TreeEntry(path="top", type="tree").parent_path == ""

    def test_to_dict_includes_children_for_trees(self):
        roots = build_tree([{"path": "a", "type": "tree"}, {"path": "a/b", "type": "blob"}])
        data = roots[0].to_dict()

        assert data["name"] == "a"
        assert [c["path"] for c in data["children"]] == ["a/b"]
        assert "children" not in data["children"][0]


class TestHelpers:
    """Tests for filtering and lookup helpers."""

    def test_filter_drops_items_without_path_or_mode(self):
        items = [
            {"path": "ok", "mode": "100644", "type": "blob"},
            {"path": "no-mode", "type": "blob"},
            {"mode": "100644", "type": "blob"},
        ]

        assert [i["path"] for i in filter_entries(items)] == ["ok"]

    def test_find_entry(self, tree_listing):
        roots = build_tree(filter_entries(tree_listing))

        assert find_entry(roots, "docs/img/logo.png").type == "blob"
        assert find_entry(roots, "nope") is None
