"""
Tree Renderer

Renders a workspace as an indented tree with box-drawing branch markers.
Siblings are listed directories first, then case-insensitively by name, so
the output is byte-identical across runs over the same workspace.

Rendering is best-effort: an unreadable directory or any other failure
degrades the whole tree to an empty string instead of failing the request.
Directories are walked with an explicit stack, so depth is not bounded by
the interpreter recursion limit.

Sample input:
    render_tree("/tmp/repogist-abc123", ignore)

Expected output:
    Outcome.ok("├── src\\n│   └── main.go\\n└── README.md\\n")
"""

import os
from pathlib import Path
from typing import Callable, List, Tuple, Union

from loguru import logger

from repogist.core.results import Diagnostic, Outcome

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_PREFIX = "│   "
SPACE_PREFIX = "    "

IgnorePredicate = Callable[..., bool]


def _sort_key(item):
    entry, is_dir = item
    return (not is_dir, entry.name.casefold(), entry.name)


def _visible_children(directory: str, root: str, ignore: IgnorePredicate) -> List[Tuple[os.DirEntry, bool]]:
    with os.scandir(directory) as it:
        entries = list(it)

    visible = []
    for entry in entries:
        is_dir = entry.is_dir(follow_symlinks=False)
        rel_path = Path(os.path.relpath(entry.path, root)).as_posix()
        if ignore(rel_path, is_dir=is_dir):
            continue
        visible.append((entry, is_dir))
    visible.sort(key=_sort_key, reverse=True)
    return visible


def _render_lines(root: str, ignore: IgnorePredicate) -> List[str]:
    # Explicit stack of (remaining siblings, prefix); siblings are stored
    # reversed so pop() yields them in display order.
    lines: List[str] = []
    stack = [(_visible_children(root, root, ignore), "")]
    while stack:
        siblings, prefix = stack[-1]
        if not siblings:
            stack.pop()
            continue
        entry, is_dir = siblings.pop()
        is_last = not siblings
        lines.append(f"{prefix}{LAST_BRANCH if is_last else BRANCH}{entry.name}")
        if is_dir:
            child_prefix = prefix + (SPACE_PREFIX if is_last else PIPE_PREFIX)
            stack.append((_visible_children(entry.path, root, ignore), child_prefix))
    return lines


def render_tree(workspace_root: Union[str, Path], ignore: IgnorePredicate) -> Outcome[str]:
    """Render ``workspace_root`` as a tree, degrading to an empty tree on any error."""
    root = str(workspace_root)
    try:
        lines = _render_lines(root, ignore)
    except OSError as e:
        logger.error(f"Tree rendering failed for {root}: {e}")
        return Outcome.degraded(Diagnostic("TreeRenderError", str(e), getattr(e, "filename", None)))
    except Exception as e:
        logger.exception(f"Unexpected error rendering tree for {root}")
        return Outcome.degraded(Diagnostic("TreeRenderError", str(e) or type(e).__name__))

    logger.debug(f"Rendered {len(lines)} tree entries for {root}")
    return Outcome.ok("\n".join(lines) + "\n" if lines else "")
