"""
Version constraint parsing and resolution.

Supported expressions (terms joined by "," are ANDed, groups joined by "||" are ORed):
- exact versions: "1.2.3", "=1.2.3"
- comparisons: "!=1.2.3", ">1.2", ">=0.12", "<0.14.0", "<=1.0.0"
- pessimistic "~>": "~>1.2.3" -> >=1.2.3,<1.3.0 ; "~>1.2" -> >=1.2.0,<2.0.0
- tilde "~": "~1.2.3" -> >=1.2.3,<1.3.0 ; "~1" -> >=1.0.0,<2.0.0
- caret "^": "^1.2.3" -> >=1.2.3,<2.0.0 ; "^0.12.1" -> >=0.12.1,<0.13.0

Partial operands are padded with zeros. A pre-release version only satisfies a
term whose operand itself names a pre-release.

Terraform itself only knows the comparisons, "~>" and ","; "~", "^" and "||"
are accepted as well so constraints written for semver-style tools resolve too.
"""

from __future__ import annotations

import logging
import operator
import re
from dataclasses import dataclass
from typing import Callable, Iterable

from packaging.version import Version as PackagingVersion

from .errors import ConstraintParseError
from .version import Version, valid_version_format

logger = logging.getLogger(__name__)


TERM_PATTERN = re.compile(
    r"^\s*(~>|>=|<=|!=|==|=|>|<|~|\^)?\s*v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:-(\w+))?\s*$",
    re.ASCII,
)

_OPERATORS: dict[str, Callable[[PackagingVersion, PackagingVersion], bool]] = {
    "=": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}


def _make_version(major: int, minor: int, patch: int, prerelease: str = "") -> PackagingVersion:
    text = f"{major}.{minor}.{patch}"
    if prerelease:
        text += f"-{prerelease}"
    return Version.parse(text).parsed


@dataclass(frozen=True)
class Term:
    """
    One comparator from a constraint expression, expanded to plain bounds.

    Attributes:
        raw: Term as written
        bounds: (operator, version) pairs that must all hold
        allow_prerelease: Whether pre-release versions may satisfy this term
    """
    raw: str
    bounds: tuple[tuple[str, PackagingVersion], ...]
    allow_prerelease: bool = False

    def check(self, version: Version) -> bool:
        if version.is_prerelease and not self.allow_prerelease:
            return False
        return all(_OPERATORS[op](version.parsed, bound) for op, bound in self.bounds)


def _expand_term(raw: str) -> Term:
    match = TERM_PATTERN.match(raw)
    if match is None:
        raise ConstraintParseError(f"Improper constraint: {raw.strip()!r}")

    op = match.group(1) or "="
    if op == "==":
        op = "="
    numbers = [match.group(i) for i in (2, 3, 4)]
    segments = sum(1 for n in numbers if n is not None)
    major, minor, patch = (int(n) if n is not None else 0 for n in numbers)
    prerelease = match.group(5) or ""
    if prerelease and segments < 3:
        raise ConstraintParseError(
            f"Improper constraint: {raw.strip()!r} (pre-release needs a full version)"
        )

    base = _make_version(major, minor, patch, prerelease)

    if op == "~>":
        if segments == 3:
            upper = _make_version(major, minor + 1, 0)
        else:
            upper = _make_version(major + 1, 0, 0)
        bounds = ((">=", base), ("<", upper))
    elif op == "~":
        if segments >= 2:
            upper = _make_version(major, minor + 1, 0)
        else:
            upper = _make_version(major + 1, 0, 0)
        bounds = ((">=", base), ("<", upper))
    elif op == "^":
        if major > 0 or segments == 1:
            upper = _make_version(major + 1, 0, 0)
        else:
            upper = _make_version(0, minor + 1, 0)
        bounds = ((">=", base), ("<", upper))
    else:
        bounds = ((op, base),)

    return Term(raw=raw.strip(), bounds=bounds, allow_prerelease=bool(prerelease))


@dataclass(frozen=True)
class Constraint:
    """
    Parsed constraint expression.

    Attributes:
        raw: Expression as written
        groups: Alternatives; each is a tuple of terms that must all hold
    """
    raw: str
    groups: tuple[tuple[Term, ...], ...]

    def check(self, version: Version | str) -> bool:
        """Whether a version satisfies this constraint."""
        if isinstance(version, str):
            version = Version.parse(version)
        return any(all(term.check(version) for term in group) for group in self.groups)

    def __str__(self) -> str:
        return self.raw


def parse_constraint(expression: str) -> Constraint:
    """
    Parse a constraint expression.

    Args:
        expression: Constraint such as ">= 0.12, < 0.14" or "~> 1.0"

    Returns:
        Constraint

    Raises:
        ConstraintParseError: If the expression is empty or malformed
    """
    if not isinstance(expression, str) or not expression.strip():
        raise ConstraintParseError("Empty version constraint")

    groups = []
    for alternative in expression.split("||"):
        terms = alternative.split(",")
        if any(not t.strip() for t in terms):
            raise ConstraintParseError(f"Improper constraint: {expression!r}")
        groups.append(tuple(_expand_term(t) for t in terms))

    return Constraint(raw=expression.strip(), groups=tuple(groups))


def resolve_constraint(constraint: Constraint | str, versions: Iterable[str]) -> str | None:
    """
    Find the highest version satisfying a constraint.

    Candidates are scanned in descending semantic-version order and the first
    match is returned.

    Args:
        constraint: Parsed constraint or expression
        versions: Candidate version strings (e.g., a release catalog)

    Returns:
        Matching version string, or None if nothing matches

    Raises:
        ConstraintParseError: If constraint is an unparsable expression
    """
    if isinstance(constraint, str):
        constraint = parse_constraint(constraint)

    candidates = []
    for text in versions:
        if not valid_version_format(text):
            logger.debug(f"Skipping unparsable catalog entry: {text!r}")
            continue
        candidates.append(Version.parse(text))

    for candidate in sorted(candidates, reverse=True):
        if constraint.check(candidate):
            logger.debug(f"Constraint {constraint.raw!r} matched {candidate}")
            return str(candidate)

    return None
