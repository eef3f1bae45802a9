"""Tree-shaped progress trace."""

from __future__ import annotations

from typing import Optional, Sequence

from rich.console import Console
from rich.control import Control

BRANCH = "├── "
LAST_BRANCH = "└── "
CONTINUATION = "│   "
BLANK = "    "
COUNTER_WIDTH = 6


def tree_prefix(ancestors: Sequence[bool]) -> str:
    """Return the indentation for a nesting path.

    Args:
        ancestors: One flag per ancestor level, True when that ancestor has
            further siblings below it.
    """
    return "".join(CONTINUATION if has_more else BLANK for has_more in ancestors)


def tree_line(
    progress: Optional[tuple[int, int]],
    ancestors: Sequence[bool],
    has_more: bool,
    label: str,
) -> str:
    """Return one trace line with an optional ``K/N`` counter column."""
    counter = f"{progress[0]:02d}/{progress[1]:02d} " if progress else " " * COUNTER_WIDTH
    return counter + tree_prefix(ancestors) + (BRANCH if has_more else LAST_BRANCH) + label


class TreeReporter:
    """Render the directory walk as a tree on a rich console.

    On an interactive terminal the counter of the file being rendered is updated
    in place; otherwise only the finished line is printed.
    """

    def __init__(self, console: Optional[Console] = None, *, enabled: bool = True) -> None:
        self._console = console or Console()
        self.enabled = enabled

    def file_progress(
        self,
        ancestors: Sequence[bool],
        has_more: bool,
        name: str,
        done: int,
        total: int,
    ) -> None:
        if not self.enabled or not self._console.is_terminal:
            return
        self._console.control(Control.move_to_column(0))
        self._emit(tree_line((done, total), ancestors, has_more, name), end="")

    def file_finished(
        self,
        ancestors: Sequence[bool],
        has_more: bool,
        name: str,
        total: int,
        *,
        failed: bool = False,
    ) -> None:
        if not self.enabled:
            return
        if self._console.is_terminal:
            self._console.control(Control.move_to_column(0))
        label = f"{name} [failed]" if failed else name
        self._emit(tree_line((total, total), ancestors, has_more, label))

    def directory(
        self,
        ancestors: Sequence[bool],
        has_more: bool,
        name: str,
        *,
        accessible: bool = True,
    ) -> None:
        if not self.enabled:
            return
        label = name if accessible else f"{name} [inaccessible]"
        self._emit(tree_line(None, ancestors, has_more, label))

    def manifest_written(self, ancestors: Sequence[bool], manifest_name: str) -> None:
        if not self.enabled:
            return
        self._emit(" " * COUNTER_WIDTH + tree_prefix(ancestors) + f"{{meta: {manifest_name}}}")

    def _emit(self, text: str, *, end: str = "\n") -> None:
        self._console.print(text, end=end, markup=False, highlight=False, soft_wrap=True)


__all__ = ["TreeReporter", "tree_line", "tree_prefix"]
