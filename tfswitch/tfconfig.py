"""
Required terraform version declared in a module's source tree.

Scans ``*.tf`` files for ``terraform { required_version = "..." }``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .errors import ConfigError

logger = logging.getLogger(__name__)

_TERRAFORM_BLOCK = re.compile(r"^\s*terraform\s*\{", re.MULTILINE)
_REQUIRED_VERSION = re.compile(r"^\s*required_version\s*=\s*\"([^\"]*)\"", re.MULTILINE)
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_NESTED_BLOCK = re.compile(r"\{[^{}]*\}")


def _strip_comments(text: str) -> str:
    text = _BLOCK_COMMENT.sub("", text)
    # Keep quoted strings intact; only strip comments outside them
    out = []
    for line in text.splitlines():
        in_string = False
        cut = len(line)
        i = 0
        while i < len(line):
            ch = line[i]
            if ch == '"' and (i == 0 or line[i - 1] != "\\"):
                in_string = not in_string
            elif not in_string and (ch == "#" or line.startswith("//", i)):
                cut = i
                break
            i += 1
        out.append(line[:cut])
    return "\n".join(out)


def _block_body(text: str, open_brace: int) -> str:
    depth = 0
    in_string = False
    for i in range(open_brace, len(text)):
        ch = text[i]
        if ch == '"' and text[i - 1] != "\\":
            in_string = not in_string
        elif in_string:
            continue
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[open_brace + 1:i]
    return text[open_brace + 1:]


def required_versions_in_text(text: str) -> list[str]:
    """
    Extract required_version expressions from HCL text.

    Only top-level attributes of ``terraform`` blocks are considered.
    """
    text = _strip_comments(text)
    found = []
    for block in _TERRAFORM_BLOCK.finditer(text):
        body = _block_body(text, block.end() - 1)
        # Drop nested blocks such as required_providers
        while _NESTED_BLOCK.search(body):
            body = _NESTED_BLOCK.sub("", body)
        found.extend(m.group(1) for m in _REQUIRED_VERSION.finditer(body))
    return found


def load_required_versions(directory: str | Path) -> list[str]:
    """
    Collect required_version constraints from every *.tf file in a directory.

    Files are read in sorted name order; callers honor only the first entry.

    Raises:
        ConfigError: If a .tf file exists but cannot be read
    """
    directory = Path(directory)
    constraints: list[str] = []
    for tf_file in sorted(directory.glob("*.tf")):
        if not tf_file.is_file():
            continue
        try:
            text = tf_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to read {tf_file}: {e}") from e
        found = required_versions_in_text(text)
        if found:
            logger.debug(f"{tf_file.name}: required_version {found}")
        constraints.extend(found)
    return constraints
