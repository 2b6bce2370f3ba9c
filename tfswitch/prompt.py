"""
Interactive version selection.
"""

from __future__ import annotations

import sys
from typing import Callable, Sequence, TextIO

from .catalog import strip_recent_marker
from .errors import PromptAborted

DEFAULT_PAGE_SIZE = 10


def select_version(
    items: Sequence[str],
    label: str = "Select Terraform version",
    input_fn: Callable[[str], str] = input,
    output: TextIO | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
    require_tty: bool = True,
) -> str:
    """
    Ask the user to pick a version from a numbered list.

    The user may answer with a list number or type a version from the list.
    Pressing enter shows the next page.

    Args:
        items: Menu entries (may carry the " *recent" marker)
        label: Prompt heading
        input_fn: Reads one answer (injectable for tests)
        output: Stream the menu is written to (stdout by default)
        page_size: Entries shown per page
        require_tty: Refuse to prompt when stdin is not a terminal

    Returns:
        Bare version string of the chosen entry

    Raises:
        PromptAborted: On EOF, Ctrl-C, "q", an empty list or no terminal
    """
    if output is None:
        output = sys.stdout
    if not items:
        raise PromptAborted("No terraform versions available to choose from")
    if require_tty and not sys.stdin.isatty():
        raise PromptAborted(
            "Cannot prompt for a version without a terminal",
            remediation="Pass a version argument or add a .terraform-version file",
        )

    bare = [strip_recent_marker(item) for item in items]
    start = 0
    print(f"{label}:", file=output)
    while True:
        page = items[start:start + page_size]
        for offset, item in enumerate(page, start=start + 1):
            print(f"  {offset:>3}) {item}", file=output)

        more = start + page_size < len(items)
        hint = "number or version" + (", enter for more" if more else "") + ", q to quit"
        try:
            answer = input_fn(f"{label} [{hint}]: ").strip()
        except (EOFError, KeyboardInterrupt) as e:
            raise PromptAborted("Prompt failed: no version selected") from e

        if answer.lower() in ("q", "quit"):
            raise PromptAborted("No version selected")
        if not answer:
            start = start + page_size if more else 0
            continue
        if answer.isdigit() and 1 <= int(answer) <= len(items):
            return bare[int(answer) - 1]
        if answer in bare:
            return answer
        print(f"Invalid choice: {answer}", file=output)
