"""Semantic version values for compact package records.

Versions follow Semantic Versioning 2.0.0: ``major.minor.patch`` with an
optional pre-release (``-rc.1``) and optional build metadata (``+build.5``).
Precedence follows section 11 of the SemVer specification. Build metadata does
not affect precedence, but it is part of the value: two versions differing
only in build metadata are distinct packages. ``sort_key()`` refines
precedence with the raw build text so that ordering is total and consistent
with equality.

References
----------
.. [SemVer] Preston-Werner, T. (2013). "Semantic Versioning 2.0.0."
   https://semver.org/
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from depaudit.exceptions import InvalidVersionError

_NUMERIC = r"0|[1-9][0-9]*"
_PRE_IDENT = r"(?:0|[1-9][0-9]*|[0-9]*[A-Za-z-][0-9A-Za-z-]*)"
_BUILD_IDENT = r"[0-9A-Za-z-]+"

_SEMVER_RE = re.compile(
    rf"(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<pre>{_PRE_IDENT}(?:\.{_PRE_IDENT})*))?"
    rf"(?:\+(?P<build>{_BUILD_IDENT}(?:\.{_BUILD_IDENT})*))?",
    re.ASCII,
)

# Same grammar without named groups, valid as an ECMA-262 regular expression
# for JSON Schema "pattern" keywords.
SEMVER_PATTERN = (
    rf"^(?:{_NUMERIC})\.(?:{_NUMERIC})\.(?:{_NUMERIC})"
    rf"(?:-{_PRE_IDENT}(?:\.{_PRE_IDENT})*)?"
    rf"(?:\+{_BUILD_IDENT}(?:\.{_BUILD_IDENT})*)?$"
)


def _identifier_key(ident: str) -> tuple[int, int | str]:
    # Numeric identifiers sort numerically and before alphanumeric ones.
    if ident.isdigit():
        return (0, int(ident))
    return (1, ident)


@dataclass(frozen=True)
class Version:
    """A parsed semantic version.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        pre: Dot-separated pre-release identifiers (empty for a release).
        build: Dot-separated build metadata identifiers.
    """

    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str, package: str | None = None) -> Version:
        """Parse a semantic version string.

        Args:
            text: Version text such as ``"1.2.3-beta.1+exp.sha.5114f85"``.
            package: Package name to report if parsing fails.

        Raises:
            InvalidVersionError: If *text* is not a valid semantic version.
        """
        if not isinstance(text, str):
            raise InvalidVersionError(repr(text), package)
        m = _SEMVER_RE.fullmatch(text)
        if not m:
            raise InvalidVersionError(text, package)
        pre = m.group("pre")
        build = m.group("build")
        return cls(
            major=int(m.group("major")),
            minor=int(m.group("minor")),
            patch=int(m.group("patch")),
            pre=tuple(pre.split(".")) if pre else (),
            build=tuple(build.split(".")) if build else (),
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.pre)

    def precedence_key(self) -> tuple[Any, ...]:
        """Key implementing SemVer precedence (build metadata ignored)."""
        if self.pre:
            pre_key: tuple[Any, ...] = (0, tuple(_identifier_key(p) for p in self.pre))
        else:
            # A release outranks any of its pre-releases.
            pre_key = (1, ())
        return (self.major, self.minor, self.patch, pre_key)

    def sort_key(self) -> tuple[Any, ...]:
        """Total-order key: precedence first, then build metadata text."""
        return (*self.precedence_key(), ".".join(self.build))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() <= other.sort_key()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() > other.sort_key()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() >= other.sort_key()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += "-" + ".".join(self.pre)
        if self.build:
            text += "+" + ".".join(self.build)
        return text
