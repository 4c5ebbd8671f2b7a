# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Ordered module version strings."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import total_ordering
from typing import Final, TypeAlias

VersionToken: TypeAlias = int | str

_PRE_MARKER: Final[str] = "-"
_BUILD_MARKER: Final[str] = "+"
_SEPARATORS: Final[frozenset[str]] = frozenset({".", "-", "+"})


@total_ordering
@dataclass(frozen=True, slots=True)
class ModuleVersion:
    """Version of a module in ``<sequence>[-<pre>][+<build>]`` form.

    Each part is split into tokens at separators and at every change between
    digits and other characters. Numeric tokens compare numerically, any
    other pairing compares textually. A version carrying a pre-release part
    sorts before the same sequence without one.
    """

    text: str
    sequence: tuple[VersionToken, ...] = field(compare=False)
    pre: tuple[VersionToken, ...] = field(compare=False)
    build: tuple[VersionToken, ...] = field(compare=False)

    @classmethod
    def parse(cls, text: str) -> ModuleVersion:
        """Parse ``text`` into a :class:`ModuleVersion`.

        Args:
            text: Version string such as ``1.2.3-SNAPSHOT``.

        Returns:
            ModuleVersion: Parsed version preserving the original text.

        Raises:
            ValueError: If ``text`` is empty, does not start with a digit, or
                contains an empty pre-release or build part.
        """

        if not text:
            raise ValueError("empty version string")
        if not text[0].isdigit():
            raise ValueError(f"{text}: version must begin with a digit")

        build_text = ""
        head = text
        if _BUILD_MARKER in head:
            head, build_text = head.split(_BUILD_MARKER, 1)
            if not build_text:
                raise ValueError(f"{text}: empty build part")
        pre_text = ""
        if _PRE_MARKER in head:
            head, pre_text = head.split(_PRE_MARKER, 1)
            if not pre_text:
                raise ValueError(f"{text}: empty pre-release part")

        return cls(
            text=text,
            sequence=_tokenize(head, context=text),
            pre=_tokenize(pre_text, context=text),
            build=_tokenize(build_text, context=text),
        )

    def __str__(self) -> str:
        return self.text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModuleVersion):
            return NotImplemented
        return (self.sequence, self.pre, self.build) == (other.sequence, other.pre, other.build)

    def __hash__(self) -> int:
        return hash((self.sequence, self.pre, self.build))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ModuleVersion):
            return NotImplemented
        return self._compare(other) < 0

    def _compare(self, other: ModuleVersion) -> int:
        result = _compare_tokens(self.sequence, other.sequence)
        if result:
            return result
        if self.pre and not other.pre:
            return -1
        if other.pre and not self.pre:
            return 1
        result = _compare_tokens(self.pre, other.pre)
        if result:
            return result
        return _compare_tokens(self.build, other.build)


def parse_version(text: str | None) -> ModuleVersion | None:
    """Return the parsed version for ``text`` or ``None`` when it is unparsable.

    Args:
        text: Candidate version string, possibly ``None``.

    Returns:
        ModuleVersion | None: Parsed version, or ``None`` on any parse failure.
    """

    if not text:
        return None
    try:
        return ModuleVersion.parse(text)
    except ValueError:
        return None


def _tokenize(part: str, *, context: str) -> tuple[VersionToken, ...]:
    """Split ``part`` into numeric and textual tokens.

    Args:
        part: Portion of a version string to tokenize.
        context: Full version string used in error messages.

    Returns:
        tuple[VersionToken, ...]: Tokens in order of appearance.

    Raises:
        ValueError: If ``part`` contains consecutive or trailing separators.
    """

    tokens: list[VersionToken] = []
    current = ""
    previous_separator = False
    for char in part:
        if char in _SEPARATORS:
            if previous_separator or (not current and not tokens):
                raise ValueError(f"{context}: misplaced separator '{char}'")
            tokens.append(_coerce(current))
            current = ""
            previous_separator = True
            continue
        if current and current[-1].isdigit() != char.isdigit():
            tokens.append(_coerce(current))
            current = ""
        current += char
        previous_separator = False
    if previous_separator:
        raise ValueError(f"{context}: trailing separator")
    if current:
        tokens.append(_coerce(current))
    return tuple(tokens)


def _coerce(token: str) -> VersionToken:
    return int(token) if token.isdigit() else token


def _compare_tokens(left: tuple[VersionToken, ...], right: tuple[VersionToken, ...]) -> int:
    for lhs, rhs in zip(left, right):
        if isinstance(lhs, int) and isinstance(rhs, int):
            if lhs != rhs:
                return -1 if lhs < rhs else 1
            continue
        lhs_text, rhs_text = str(lhs), str(rhs)
        if lhs_text != rhs_text:
            return -1 if lhs_text < rhs_text else 1
    if len(left) == len(right):
        return 0
    return -1 if len(left) < len(right) else 1


__all__ = ("ModuleVersion", "VersionToken", "parse_version")
