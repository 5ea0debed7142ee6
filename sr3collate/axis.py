"""Timestep axis discovery.

Step tokens are folder names such as ``000010``.  The axis orders them
numerically; tokens that do not parse as numbers are kept after all numeric
tokens in the order they were first seen.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np


def _parse_number(token: str) -> float:
    try:
        value = float(token)
    except ValueError:
        return float("nan")
    if not math.isfinite(value):
        return float("nan")
    return value


@dataclass(frozen=True)
class TimestepAxis:
    tokens: Tuple[str, ...]
    values: np.ndarray = field(compare=False)
    _columns: Dict[str, int] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._columns.update({token: idx for idx, token in enumerate(self.tokens)})

    def __len__(self) -> int:
        return len(self.tokens)

    def column(self, token: str) -> Optional[int]:
        return self._columns.get(token.strip())

    @property
    def is_numeric(self) -> np.ndarray:
        return np.isfinite(self.values)


def index_steps(step_tokens: Iterable[Optional[str]]) -> TimestepAxis:
    """Build the sorted, de-duplicated :class:`TimestepAxis` for ``step_tokens``."""

    unique: List[str] = []
    seen = set()
    for raw in step_tokens:
        if raw is None:
            continue
        token = raw.strip()
        if not token or token in seen:
            continue
        seen.add(token)
        unique.append(token)

    numbers = [_parse_number(token) for token in unique]
    # sorted() is stable, so non-numeric tokens keep first-seen order
    order = sorted(
        range(len(unique)),
        key=lambda i: (math.isnan(numbers[i]), 0.0 if math.isnan(numbers[i]) else numbers[i]),
    )
    tokens = tuple(unique[i] for i in order)
    values = np.array([numbers[i] for i in order], dtype=float)
    return TimestepAxis(tokens=tokens, values=values)


def step_numbers(axis: TimestepAxis) -> Sequence[int]:
    """Integer step numbers for every token; raises ``ValueError`` on a non-integer token."""

    return [int(token) for token in axis.tokens]


__all__ = ["TimestepAxis", "index_steps", "step_numbers"]
