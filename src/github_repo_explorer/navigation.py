"""Tree navigation: expand/collapse, file selection and display rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .tree import TreeEntry, iter_entries

logger = logging.getLogger(__name__)

EXPANDED_MARKER = "[-] "
COLLAPSED_MARKER = "[+] "
LEAF_MARKER = "    "
FOLDER_ICON = "\U0001f4c1"
FILE_ICON = "\U0001f4c4"


@dataclass(frozen=True)
class FileSelected:
    """Event produced when a blob is selected in the tree."""

    path: str


@dataclass
class NavigationState:
    """Per-node expansion flags plus the session-wide selection."""

    initial_path: str | None = None
    expanded: dict[str, bool] = field(default_factory=dict)
    selected_path: str | None = None


@dataclass
class TreeRow:
    """One visible line of the rendered tree."""

    entry: TreeEntry
    depth: int
    expanded: bool
    selected: bool
    highlighted: bool

    @property
    def marker(self) -> str:
        if not self.entry.children:
            return LEAF_MARKER
        return EXPANDED_MARKER if self.expanded else COLLAPSED_MARKER

    @property
    def icon(self) -> str:
        return FOLDER_ICON if self.entry.is_tree else FILE_ICON

    @property
    def label(self) -> str:
        return f"{self.marker}{self.icon} {self.entry.name}"

    def to_dict(self) -> dict:
        return {
            "path": self.entry.path,
            "name": self.entry.name,
            "type": self.entry.type,
            "depth": self.depth,
            "expanded": self.expanded,
            "selected": self.selected,
            "highlighted": self.highlighted,
            "marker": self.marker,
            "icon": self.icon,
            "label": self.label,
        }


def sort_children(children: Iterable[TreeEntry]) -> list[TreeEntry]:
    """Directories before files, then ascending by full path."""
    return sorted(children, key=lambda e: (not e.is_tree, e.path))


class TreeNavigator:
    """State machine over a built tree.

    Directories toggle, files select. Expansion flags are created lazily
    the first time a node is looked at, seeded from ``initial_path``.
    """

    def __init__(self, roots: list[TreeEntry], initial_path: str | None = None):
        self.roots = roots
        self.state = NavigationState(initial_path=initial_path or None)
        self._index = {entry.path: entry for entry in iter_entries(roots)}

    @property
    def selected_path(self) -> str | None:
        return self.state.selected_path

    @property
    def initial_path(self) -> str | None:
        return self.state.initial_path

    def get(self, path: str) -> TreeEntry | None:
        return self._index.get(path)

    def default_expanded(self, node: TreeEntry) -> bool:
        """Whether a directory starts expanded: it is or contains the initial path."""
        initial = self.state.initial_path
        if not initial or not node.is_tree:
            return False
        return initial == node.path or initial.startswith(node.path + "/")

    def is_expanded(self, node: TreeEntry) -> bool:
        flags = self.state.expanded
        if node.path not in flags:
            flags[node.path] = self.default_expanded(node)
        return flags[node.path]

    def is_highlighted(self, node: TreeEntry) -> bool:
        return node.is_tree and self.state.initial_path == node.path

    def _resolve(self, node: TreeEntry | str) -> TreeEntry | None:
        if isinstance(node, TreeEntry):
            return node
        return self._index.get(node)

    def toggle(self, node: TreeEntry | str) -> bool | None:
        """Flip a directory's expansion flag.

        Returns:
            The new flag, or None when the node is a file or unknown.
        """
        entry = self._resolve(node)
        if entry is None or not entry.is_tree:
            return None
        expanded = not self.is_expanded(entry)
        self.state.expanded[entry.path] = expanded
        logger.debug(f"{'Expanded' if expanded else 'Collapsed'} {entry.path}")
        return expanded

    def select(self, node: TreeEntry | str) -> FileSelected | None:
        """Select a file, returning the FileSelected event for the controller.

        Selecting a directory or an unknown path does nothing. Expansion
        flags are never touched by selection.
        """
        entry = self._resolve(node)
        if entry is None or not entry.is_blob:
            return None
        if entry.path not in self._index:
            return None
        self.state.selected_path = entry.path
        return FileSelected(entry.path)

    def rows(self, expand_all: bool = False) -> list[TreeRow]:
        """Flatten the visible part of the tree in display order."""
        rows: list[TreeRow] = []
        self._collect(sort_children(self.roots), 0, rows, expand_all)
        return rows

    def _collect(
        self, entries: list[TreeEntry], depth: int, rows: list[TreeRow], expand_all: bool
    ) -> None:
        for entry in entries:
            expanded = entry.is_tree and (expand_all or self.is_expanded(entry))
            rows.append(
                TreeRow(
                    entry=entry,
                    depth=depth,
                    expanded=expanded,
                    selected=entry.is_blob and entry.path == self.state.selected_path,
                    highlighted=self.is_highlighted(entry),
                )
            )
            if expanded and entry.children:
                self._collect(sort_children(entry.children), depth + 1, rows, expand_all)
