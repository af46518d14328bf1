"""Views over a generated FilesMap for the code editor.

``build_file_tree`` nests flat ``path -> content`` entries into directories
(directories first, then files, each alphabetical). ``render_file_listing``
produces the ``// File: <path>`` text form, which ``extract_files`` reads
back through its marker strategy.
"""

from __future__ import annotations

from typing import Any

from ..exceptions import ValidationError
from ..schemas.generation import FileNode


def _file_type(name: str) -> str:
    return name.rsplit(".", 1)[-1] if "." in name else ""


def _sort_nodes(nodes: list[FileNode]) -> list[FileNode]:
    return sorted(nodes, key=lambda n: (n.type != "directory", n.name))


def build_file_tree(files: dict[str, str]) -> list[FileNode]:
    """Nest a flat file map into directory and file nodes.

    Raises:
        ValidationError: A path is absolute or climbs out with ``..``.
    """
    root: dict[str, Any] = {}

    for path in sorted(files):
        if path.startswith("/") or ".." in path.split("/"):
            raise ValidationError(f"File path must stay inside the project: {path}", field=path)
        parts = [p for p in path.split("/") if p]
        if not parts:
            continue
        *dirs, file_name = parts

        level = root
        for part in dirs:
            entry = level.setdefault(part, {})
            if isinstance(entry, FileNode):
                # "a" is both a file and a directory; keep the file, skip the nested entry.
                break
            level = entry
        else:
            level[file_name] = FileNode(
                name=file_name,
                path=path,
                type="file",
                file_type=_file_type(file_name),
                content=files[path],
            )

    return _to_nodes(root, prefix="")


def _to_nodes(level: dict[str, Any], prefix: str) -> list[FileNode]:
    nodes: list[FileNode] = []
    for name, entry in level.items():
        if isinstance(entry, FileNode):
            nodes.append(entry)
        else:
            path = f"{prefix}{name}"
            nodes.append(FileNode(
                name=name,
                path=path,
                type="directory",
                children=_to_nodes(entry, prefix=f"{path}/"),
            ))
    return _sort_nodes(nodes)


def render_file_listing(files: dict[str, str]) -> str:
    """Concatenate files as ``// File: path`` headers with fenced content."""
    sections = [
        f"// File: {path}\n```{_file_type(path)}\n{content}\n```"
        for path, content in files.items()
    ]
    return "\n\n".join(sections)
