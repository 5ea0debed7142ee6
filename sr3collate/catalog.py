"""Variable catalog: original tokens and their output identifiers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

import pandas as pd

from .diagnostics import DiagnosticLog
from .naming import CollisionPolicy, ComponentResolver, IdentifierRegistry


@dataclass(frozen=True)
class VariableCatalog:
    """Unique variable tokens in first-seen order, each mapped 1:1 to an identifier."""

    originals: Tuple[str, ...]
    identifiers: Tuple[str, ...]
    _positions: Dict[str, int] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.originals) != len(self.identifiers):
            raise ValueError("catalog originals and identifiers differ in length")
        if len(set(self.identifiers)) != len(self.identifiers):
            raise ValueError("catalog identifiers must be unique")
        self._positions.update({token: idx for idx, token in enumerate(self.originals)})

    def __len__(self) -> int:
        return len(self.originals)

    def position(self, token: str) -> Optional[int]:
        return self._positions.get(token.strip())

    def identifier(self, token: str) -> Optional[str]:
        pos = self.position(token)
        return None if pos is None else self.identifiers[pos]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"original": list(self.originals), "identifier": list(self.identifiers)})

    @classmethod
    def build(
        cls,
        tokens: Iterable[str],
        resolver: Optional[ComponentResolver] = None,
        *,
        policy: CollisionPolicy = "suffix",
        diagnostics: Optional[DiagnosticLog] = None,
    ) -> "VariableCatalog":
        resolver = resolver if resolver is not None else ComponentResolver(None)
        originals = []
        seen = set()
        for raw in tokens:
            token = raw.strip()
            if not token or token in seen:
                continue
            seen.add(token)
            originals.append(token)
        registry = IdentifierRegistry(policy, diagnostics=diagnostics, kind="variable")
        identifiers = [registry.claim(resolver.rename_token(token), token) for token in originals]
        return cls(originals=tuple(originals), identifiers=tuple(identifiers))


__all__ = ["VariableCatalog"]
