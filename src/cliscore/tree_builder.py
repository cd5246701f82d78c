"""ASCII tree builder for file listings returned with machine info."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

NO_FILES_MESSAGE = "No files found"


@dataclass
class TreeNode:
    """A file (``children is None``) or a directory keyed by child name."""

    children: dict[str, TreeNode] | None = None

    @property
    def is_dir(self) -> bool:
        return self.children is not None

    @classmethod
    def directory(cls) -> TreeNode:
        return cls(children={})


def build_tree(paths: Iterable[str]) -> TreeNode:
    """Build a directory tree from flat slash-separated file paths.

    Intermediate segments become directories, the last segment a file.
    When a name is both a file and a directory prefix, the directory wins
    regardless of the order the paths arrive in.
    """
    root = TreeNode.directory()
    for path in paths:
        parts = [part for part in path.split("/") if part]
        if not parts:
            continue
        node = root
        for part in parts[:-1]:
            child = node.children.get(part)
            if child is None or not child.is_dir:
                child = node.children[part] = TreeNode.directory()
            node = child
        node.children.setdefault(parts[-1], TreeNode())
    return root


def render_tree(root: TreeNode) -> str:
    """Render a tree built by :func:`build_tree`.

    Example output:
        ├── src/
        │   ├── main.py
        │   └── utils.py
        └── README.md
    """
    if not root.children:
        return NO_FILES_MESSAGE
    lines: list[str] = []
    _render_level(root, lines, prefix="")
    return "".join(lines)


def format_file_tree(paths: Iterable[str]) -> str:
    return render_tree(build_tree(paths))


def _render_level(node: TreeNode, lines: list[str], prefix: str) -> None:
    names = sorted(node.children)
    for i, name in enumerate(names):
        child = node.children[name]
        is_last = i == len(names) - 1
        connector = "└── " if is_last else "├── "

        if not child.is_dir:
            lines.append(f"{prefix}{connector}{name}\n")
            continue

        lines.append(f"{prefix}{connector}{name}/\n")
        extension = "    " if is_last else "│   "
        _render_level(child, lines, prefix + extension)
