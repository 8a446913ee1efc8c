"""Build the repository hierarchy from GitHub's flat recursive tree listing.

GitHub returns ``git/trees/{sha}?recursive=1`` as a flat list of entries
with slash-delimited paths. The functions here turn that list into a
forest of ``TreeEntry`` objects without sorting or validating it; display
order is the navigator's business.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from .errors import OrphanEntryError

logger = logging.getLogger(__name__)

TREE = "tree"
BLOB = "blob"

# Keys of a GitHub tree item that map onto TreeEntry fields
_KNOWN_KEYS = {"path", "type", "mode", "sha", "size", "url", "children"}


@dataclass
class TreeEntry:
    """One file (blob) or directory (tree) of the repository."""

    path: str
    type: str
    mode: str | None = None
    sha: str | None = None
    size: int | None = None
    url: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    children: list[TreeEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TreeEntry:
        """Create an entry from a GitHub tree item, keeping unknown keys in ``extra``."""
        return cls(
            path=data["path"],
            type=data.get("type", BLOB),
            mode=data.get("mode"),
            sha=data.get("sha"),
            size=data.get("size"),
            url=data.get("url"),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def parent_path(self) -> str:
        """Path with the final segment removed, empty for top-level entries."""
        if "/" not in self.path:
            return ""
        return self.path.rsplit("/", 1)[0]

    @property
    def is_tree(self) -> bool:
        return self.type == TREE

    @property
    def is_blob(self) -> bool:
        return self.type == BLOB

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dict, children included."""
        data: dict[str, Any] = dict(self.extra)
        data.update(
            {
                "path": self.path,
                "name": self.name,
                "type": self.type,
                "mode": self.mode,
                "sha": self.sha,
            }
        )
        if self.size is not None:
            data["size"] = self.size
        if self.is_tree:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def filter_entries(items: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop raw tree items that lack a path or a mode marker."""
    return [item for item in items if item.get("path") and item.get("mode")]


def build_tree(
    entries: Iterable[TreeEntry | dict[str, Any]], strict: bool = False
) -> list[TreeEntry]:
    """Convert a flat entry list into a forest, returning the top-level roots.

    Every entry is indexed by path first, so a parent may appear anywhere in
    the input, not only before its children. Entries whose parent path is
    not in the listing are promoted to roots unless ``strict`` is set, in
    which case ``OrphanEntryError`` is raised. Duplicate paths are not
    supported: the last one wins the index.

    Args:
        entries: TreeEntry objects or GitHub tree item dicts, pre-filtered.
        strict: Fail on orphaned entries instead of promoting them.

    Returns:
        Root entries in input order; children are in input order too.
    """
    items = [e if isinstance(e, TreeEntry) else TreeEntry.from_dict(e) for e in entries]

    index: dict[str, TreeEntry] = {}
    for entry in items:
        entry.children = []
        index[entry.path] = entry

    roots: list[TreeEntry] = []
    for entry in items:
        parent_path = entry.parent_path
        if not parent_path:
            roots.append(entry)
            continue
        parent = index.get(parent_path)
        if parent is None:
            if strict:
                raise OrphanEntryError(entry.path, parent_path)
            logger.debug(f"No parent for {entry.path}, promoting to top level")
            roots.append(entry)
        else:
            parent.children.append(entry)
    return roots


def iter_entries(roots: Iterable[TreeEntry]) -> Iterator[TreeEntry]:
    """Depth-first, pre-order walk over a forest."""
    for entry in roots:
        yield entry
        yield from iter_entries(entry.children)


def count_entries(roots: Iterable[TreeEntry]) -> int:
    return sum(1 for _ in iter_entries(roots))


def find_entry(roots: Iterable[TreeEntry], path: str) -> TreeEntry | None:
    for entry in iter_entries(roots):
        if entry.path == path:
            return entry
    return None
