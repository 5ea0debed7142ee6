"""Identifier sanitising and component-based renaming.

Output identifiers follow the grammar ``[A-Z0-9_]+`` with no leading digit
and no leading, trailing or doubled underscores.  Variables whose names end
in a component index (``X1``, ``MOLAL(3)``, ``MOLE_FRAC12``) are renamed with
the display name of that component from ``/General/ComponentTable`` when the
table is available.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, List, Literal, Optional, Sequence, Set, Tuple

import numpy as np

from . import constants
from .diagnostics import IDENTIFIER_COLLISION, DiagnosticLog
from .errors import ConfigurationError
from .warnings import MetadataWarning

CollisionPolicy = Literal["suffix", "error"]

_STRIP_RE = re.compile(r"[()\[\]\s]")
_INVALID_RE = re.compile(r"[^A-Z0-9_]")
_UNDERSCORE_RUN_RE = re.compile(r"_+")
# NAME(NUM), NAMENUM; spatial variable tokens
_INDEXED_TOKEN_RE = re.compile(r"^(?P<base>[A-Za-z_]+)\(?(?P<idx>\d+)\)?$")
# trailing digits on an already sanitised identifier; well post-pass
_TRAILING_DIGITS_RE = re.compile(r"^(?P<base>.*?)(?P<idx>\d+)$")


def decode_label(value: Any) -> str:
    """Return ``value`` as a clean string.

    HDF5 fixed-width string fields arrive as ``bytes`` padded with NULs or
    blanks; both are stripped.
    """

    if isinstance(value, (bytes, bytearray, np.bytes_)):
        text = bytes(value).decode("utf-8", errors="replace")
    else:
        text = str(value)
    return text.replace("\x00", "").strip()


def sanitize(label: Any) -> str:
    """Map an arbitrary label to a stable identifier.

    Total and idempotent: ``sanitize(sanitize(x)) == sanitize(x)``.
    """

    out = decode_label(label).upper()
    out = _STRIP_RE.sub("", out)
    out = _INVALID_RE.sub("_", out)
    out = _UNDERSCORE_RUN_RE.sub("_", out)
    out = out.strip("_")
    if not out:
        return constants.PLACEHOLDER_IDENTIFIER
    if out[0].isdigit():
        out = constants.DIGIT_PREFIX + out
    return out


def split_indexed(token: str) -> Optional[Tuple[str, int]]:
    """Split a spatial variable token like ``X2`` or ``MOLAL(3)`` into base and index."""

    match = _INDEXED_TOKEN_RE.match(token.strip())
    if match is None:
        return None
    return match.group("base").upper(), int(match.group("idx"))


def split_suffix(identifier: str) -> Optional[Tuple[str, int]]:
    """Split an identifier with trailing digits, e.g. ``BHP_X12`` -> ``("BHP_X", 12)``."""

    match = _TRAILING_DIGITS_RE.match(identifier)
    if match is None:
        return None
    return match.group("base"), int(match.group("idx"))


class ComponentResolver:
    """Map 1-based component indices to component display names.

    A resolver built from ``None`` is valid and never renames anything.
    """

    def __init__(self, names: Optional[Sequence[Any]] = None) -> None:
        if names is None:
            self.names: Optional[Tuple[str, ...]] = None
        else:
            self.names = tuple(decode_label(name) for name in names)

    @classmethod
    def build(cls, names: Optional[Iterable[Any]]) -> "ComponentResolver":
        return cls(None if names is None else list(names))

    @property
    def available(self) -> bool:
        return self.names is not None

    def lookup(self, index: int) -> Optional[str]:
        if self.names is None or index < 1 or index > len(self.names):
            return None
        return self.names[index - 1]

    def resolve(self, base: str, index: int) -> str:
        component = self.lookup(index)
        if component is None:
            return sanitize(f"{base}{index}")
        return sanitize(f"{base}_{component}")

    def can_resolve(self, index: int) -> bool:
        return self.lookup(index) is not None

    def rename_token(self, token: str) -> str:
        """Identifier for a spatial variable token, component-renamed when possible."""

        parts = split_indexed(token)
        if parts is None:
            return sanitize(token)
        base, index = parts
        if not self.can_resolve(index):
            return sanitize(token)
        return self.resolve(base, index)

    def rename_identifier(self, identifier: str) -> str:
        """Rename an identifier with a trailing component index, else return it unchanged."""

        parts = split_suffix(identifier)
        if parts is None:
            return identifier
        base, index = parts
        if not self.can_resolve(index):
            return identifier
        return self.resolve(base, index)


class IdentifierRegistry:
    """Hand out unique identifiers according to a collision policy.

    ``suffix`` appends ``_2``, ``_3``, ... to later claimants; ``error``
    raises :class:`ConfigurationError`.  Every collision is recorded.
    """

    def __init__(
        self,
        policy: CollisionPolicy = "suffix",
        *,
        diagnostics: Optional[DiagnosticLog] = None,
        kind: str = "variable",
    ) -> None:
        if policy not in ("suffix", "error"):
            raise ConfigurationError(f"Unknown identifier collision policy: {policy!r}")
        self.policy = policy
        self.kind = kind
        self.diagnostics = diagnostics
        self.taken: Set[str] = set()

    def reserve(self, identifier: str) -> None:
        self.taken.add(identifier)

    def claim(self, identifier: str, original: str) -> str:
        if identifier not in self.taken:
            self.taken.add(identifier)
            return identifier
        if self.policy == "error":
            raise ConfigurationError(
                f"{self.kind} {original!r} maps to identifier {identifier!r}, which is already in use"
            )
        n = 2
        candidate = f"{identifier}_{n}"
        while candidate in self.taken:
            n += 1
            candidate = f"{identifier}_{n}"
        self.taken.add(candidate)
        if self.diagnostics is not None:
            self.diagnostics.warn(
                IDENTIFIER_COLLISION,
                f"{self.kind} {original!r} collides on {identifier!r}; stored as {candidate!r}",
                MetadataWarning,
                kind=self.kind,
                original=original,
                identifier=identifier,
                assigned=candidate,
            )
        return candidate


def unique_identifiers(
    labels: Sequence[Any],
    policy: CollisionPolicy = "suffix",
    *,
    diagnostics: Optional[DiagnosticLog] = None,
    kind: str = "variable",
) -> List[str]:
    """Sanitise ``labels`` in order, disambiguating collisions."""

    registry = IdentifierRegistry(policy, diagnostics=diagnostics, kind=kind)
    return [registry.claim(sanitize(label), decode_label(label)) for label in labels]


__all__ = [
    "CollisionPolicy",
    "ComponentResolver",
    "IdentifierRegistry",
    "decode_label",
    "sanitize",
    "split_indexed",
    "split_suffix",
    "unique_identifiers",
]
