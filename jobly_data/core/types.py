"""Shared core type aliases used across builders, repositories, and ports."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

PositionalParams = Tuple[Any, ...]

RowMapping = Mapping[str, Any]
Record = Dict[str, Any]
Rows = List[RowMapping]
MaybeRow = Optional[RowMapping]
