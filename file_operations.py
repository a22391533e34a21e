#!/usr/bin/env python3
"""
File Operations Module for Ogkos

Removes entries from storage and from the in-memory tree, keeping every
aggregate size consistent when only part of a subtree could be deleted.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from file_tree import DirectoryNode, FileNode


class DeletionStatus(Enum):
    """Overall outcome of a removal"""

    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"


@dataclass
class DeletionResult:
    """Result of removing one node and its descendants"""

    target: FileNode
    parent: Optional[DirectoryNode]
    status: DeletionStatus = DeletionStatus.SUCCESS
    removed_count: int = 0
    reclaimed_bytes: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status is DeletionStatus.SUCCESS

    @property
    def root_removed(self) -> bool:
        """True when the removed target was the root of its tree"""
        return self.success and self.parent is None


class FileOperations:
    """Deletion engine operating on a tree built by TreeBuilder"""

    def __init__(self, progress_callback: Optional[Callable[[str], None]] = None):
        """Initialize with optional progress callback"""
        self.progress_callback = progress_callback

    def remove(self, node: FileNode) -> DeletionResult:
        """Remove a node from storage and from the tree

        Directories are emptied bottom-up first; a directory that still has a
        child afterwards is left in place. Ancestors are resized either way.
        """
        parent = node.parent
        result = DeletionResult(target=node, parent=parent)
        size_before = node.size

        if self._remove_subtree(node, result):
            if parent is not None:
                parent.remove_child(node)
            result.reclaimed_bytes = size_before
        else:
            result.status = DeletionStatus.PARTIAL_FAILURE
            result.reclaimed_bytes = size_before - node.size

        ancestor = parent
        while ancestor is not None:
            ancestor.update_size()
            ancestor = ancestor.parent

        return result

    def _remove_subtree(self, node: FileNode, result: DeletionResult) -> bool:
        """Delete node and all its descendants, deepest entries first

        Returns True if node itself was removed from storage.
        """
        order: list[FileNode] = []
        stack = [node]
        while stack:
            current = stack.pop()
            order.append(current)
            if current.is_directory:
                stack.extend(current.children)

        # Every descendant appears after its directory in order, so the
        # reverse visits children before the directory that owns them.
        for current in reversed(order):
            if current.is_directory:
                self._remove_directory(current, result)
            else:
                self._remove_file(current, result)

        return node.removed

    def _remove_file(self, node: FileNode, result: DeletionResult):
        if self.progress_callback:
            self.progress_callback(f"Removing {node.path}")
        try:
            os.unlink(node.path)
        except OSError as unlink_error:
            # Entries of unknown type may still be removable as directories
            try:
                os.rmdir(node.path)
            except OSError:
                result.errors.append((node.path, unlink_error.strerror or str(unlink_error)))
                return
        node.removed = True
        result.removed_count += 1

    def _remove_directory(self, directory: DirectoryNode, result: DeletionResult):
        survivors = [child for child in directory.children if not child.removed]
        if len(survivors) != len(directory.children):
            directory.children[:] = survivors
        directory.update_size()

        if survivors:
            result.skipped.append(directory.path)
            return

        if self.progress_callback:
            self.progress_callback(f"Removing {directory.path}")
        try:
            os.rmdir(directory.path)
        except OSError as e:
            result.errors.append((directory.path, e.strerror or str(e)))
            return
        directory.removed = True
        result.removed_count += 1
