#!/usr/bin/env python3
"""
File Tree Module for Ogkos

Walks a filesystem subtree into an in-memory tree of nodes with aggregated
sizes, and provides the size-ranked view of a directory's children.

Every directory keeps the invariant
    size == self_size + sum(child.size for child in children)
after the build and after every deletion.
"""

import os
import stat
import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional


class NodeKind(Enum):
    """Kind of filesystem entry a node represents"""

    FILE = "file"
    DIRECTORY = "directory"
    UNLISTABLE = "unlistable"


class TreeBuildError(OSError):
    """Raised when the root path of a tree cannot be stat'ed"""


@dataclass(eq=False)
class FileNode:
    """One filesystem entry. Anything that is not a directory is a FILE."""

    path: str
    size: int = 0
    kind: NodeKind = NodeKind.FILE
    removed: bool = field(default=False, repr=False)
    _parent: Optional[weakref.ref] = field(default=None, repr=False)

    @property
    def parent(self) -> Optional["DirectoryNode"]:
        return self._parent() if self._parent is not None else None

    @parent.setter
    def parent(self, directory: Optional["DirectoryNode"]):
        self._parent = weakref.ref(directory) if directory is not None else None

    @property
    def name(self) -> str:
        """Final path segment ("/" for the filesystem root)"""
        stripped = self.path.rstrip("/")
        if not stripped:
            return self.path
        return stripped.rsplit("/", 1)[-1]

    @property
    def is_directory(self) -> bool:
        return False

    @property
    def is_listed(self) -> bool:
        """True for directories whose contents were read"""
        return False


@dataclass(eq=False)
class DirectoryNode(FileNode):
    """A directory; UNLISTABLE directories keep an empty child list"""

    kind: NodeKind = NodeKind.DIRECTORY
    self_size: int = 0
    children: list[FileNode] = field(default_factory=list, repr=False)
    sort_dirty: bool = True

    @property
    def is_directory(self) -> bool:
        return True

    @property
    def is_listed(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    def add_child(self, child: FileNode):
        """Attach a child and account for its size"""
        child.parent = self
        self.children.append(child)
        self.size += child.size
        self.sort_dirty = True

    def remove_child(self, child: FileNode) -> bool:
        """Detach a child without touching sizes; returns False if not present"""
        for index, candidate in enumerate(self.children):
            if candidate is child:
                del self.children[index]
                self.sort_dirty = True
                return True
        return False

    def update_size(self):
        """Recompute the aggregate size from the current children"""
        self.size = self.self_size + sum(child.size for child in self.children)
        self.sort_dirty = True


def sorted_children(directory: DirectoryNode) -> list[FileNode]:
    """Return the children of a directory ordered by descending size

    The order is cached in place until a mutation marks it dirty again.
    list.sort is Timsort, a stable merge-based sort, so equal sizes keep
    their previous relative order.
    """
    if directory.sort_dirty:
        directory.children.sort(key=lambda node: node.size, reverse=True)
        directory.sort_dirty = False
    return directory.children


def resolve_name(node: FileNode, name: str) -> Optional[FileNode]:
    """Resolve a child name or ".." against a node

    Returns None when nothing matches, including ".." on the root.
    Children are scanned in their current order; the first match wins.
    """
    if name == "..":
        return node.parent
    if node.is_listed:
        for child in node.children:
            if child.name == name:
                return child
    return None


def iter_nodes(root: FileNode):
    """Yield every node of a tree in pre-order without recursion"""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if node.is_directory:
            stack.extend(reversed(node.children))


def find_size_violations(root: FileNode) -> list[DirectoryNode]:
    """Return directories whose aggregate size does not match their children"""
    return [
        node
        for node in iter_nodes(root)
        if node.is_directory and node.size != node.self_size + sum(child.size for child in node.children)
    ]


class TreeBuilder:
    """Builds the in-memory tree with an explicit worklist"""

    def __init__(
        self,
        count_directory_size: bool = True,
        warning_callback: Optional[Callable[[str], None]] = None,
        progress_callback: Optional[Callable[[int], None]] = None,
        progress_interval: int = 500,
    ):
        """Initialize tree builder

        Args:
            count_directory_size: Count a directory's own on-disk size as its self size
            warning_callback: Receives a message for every entry that is skipped or unlistable
            progress_callback: Receives the number of entries scanned so far
            progress_interval: Number of entries between progress notifications
        """
        self.count_directory_size = count_directory_size
        self.warning_callback = warning_callback
        self.progress_callback = progress_callback
        self.progress_interval = progress_interval
        self.warnings: list[tuple[str, str]] = []
        self.entries_scanned = 0

    def build(self, path: str) -> FileNode:
        """Build the tree rooted at path

        Raises:
            TreeBuildError: If the root path cannot be stat'ed
        """
        self.warnings = []
        self.entries_scanned = 0

        try:
            root_stat = os.lstat(path)
        except OSError as e:
            raise TreeBuildError(e.errno, f"stat failed: {e.strerror or e}", path) from e

        root = self._make_node(path, root_stat)
        directories: list[DirectoryNode] = []
        pending = [root] if root.is_directory else []

        while pending:
            directory = pending.pop()
            directories.append(directory)
            for child in self._list_children(directory):
                directory.children.append(child)
                child.parent = directory
                if child.is_directory:
                    pending.append(child)

        # Parents are discovered before their children, so reversed discovery
        # order aggregates every subtree before its owner.
        for directory in reversed(directories):
            directory.update_size()

        return root

    def _make_node(self, path: str, st: os.stat_result) -> FileNode:
        self.entries_scanned += 1
        if self.progress_callback and self.entries_scanned % self.progress_interval == 0:
            self.progress_callback(self.entries_scanned)

        if stat.S_ISDIR(st.st_mode):
            self_size = st.st_size if self.count_directory_size else 0
            return DirectoryNode(path=path, size=self_size, self_size=self_size)
        return FileNode(path=path, size=st.st_size)

    def _list_children(self, directory: DirectoryNode) -> list[FileNode]:
        children: list[FileNode] = []
        try:
            listing = os.scandir(directory.path)
        except OSError as e:
            directory.kind = NodeKind.UNLISTABLE
            self._warn(directory.path, f"cannot list directory: {e.strerror or e}")
            return children

        with listing as entries:
            while True:
                try:
                    entry = next(entries)
                except StopIteration:
                    break
                except OSError as e:
                    # Entries read before the error are kept
                    self._warn(directory.path, f"listing interrupted: {e.strerror or e}")
                    break
                child_path = os.path.join(directory.path, entry.name)
                try:
                    child_stat = entry.stat(follow_symlinks=False)
                except OSError as e:
                    self._warn(child_path, f"stat failed: {e.strerror or e}; skipping")
                    continue
                children.append(self._make_node(child_path, child_stat))
        return children

    def _warn(self, path: str, message: str):
        self.warnings.append((path, message))
        if self.warning_callback:
            self.warning_callback(f"{path}: {message}")
