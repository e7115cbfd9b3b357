# masks.py — region mask and piece payload parsing
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from config import CFG
from models import Cell, MalformedMaskError, RegionMask

_TRUTHY = {"1", "true", "yes", "on", "x"}


def mask_from_strings(rows: Iterable[str]) -> List[List[bool]]:
    """``'X'`` marks a coverable cell; any other character is blocked."""
    return [[ch == "X" for ch in row] for row in rows]


def coerce_mask(mask: Any) -> RegionMask:
    """Accept a ``RegionMask``, a grid of booleans, or a list of ``'X'`` strings."""
    if isinstance(mask, RegionMask):
        return mask
    if isinstance(mask, str):
        raise MalformedMaskError("Region mask must be a sequence of rows, not a single string")
    try:
        rows = list(mask)
    except TypeError as e:
        raise MalformedMaskError(f"Region mask is not iterable: {e}") from e
    if rows and all(isinstance(r, str) for r in rows):
        rows = mask_from_strings(rows)
    return RegionMask.from_rows(rows)


def _to_bool(x: Any) -> bool:
    if isinstance(x, str):
        return x.strip().lower() in _TRUTHY
    return bool(x)


def _to_int(v: Any) -> int:
    if isinstance(v, float) and not v.is_integer():
        raise ValueError(f"coordinate {v!r} is not an integer")
    return int(v)


def _to_cell(raw: Any) -> Cell:
    if isinstance(raw, dict):
        return _to_int(raw["x"]), _to_int(raw["y"])
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        return _to_int(raw[0]), _to_int(raw[1])
    raise ValueError(f"Not a cell: {raw!r}")


def parse_pieces(raw: Any) -> List[List[Cell]]:
    """Turn a JSON-ish list of cell lists into ``[[(x, y), ...], ...]``."""
    if not isinstance(raw, (list, tuple)):
        raise ValueError("pieces must be a list of cell lists")
    pieces: List[List[Cell]] = []
    for idx, piece in enumerate(raw):
        if not isinstance(piece, (list, tuple)):
            raise ValueError(f"piece {idx} must be a list of cells")
        try:
            pieces.append([_to_cell(c) for c in piece])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"piece {idx}: {e}") from e
    return pieces


def parse_payload(payload: Optional[Dict[str, Any]]) -> Tuple[List[List[Cell]], Sequence, bool, bool]:
    """
    Parse a solve request into (pieces, mask_rows, allow_reflections, verbose).
    Accepts ``mask`` as ``'X'`` strings or boolean rows; flags may be strings.
    """
    if not isinstance(payload, dict):
        raise ValueError("request body must be a JSON object")
    if "pieces" not in payload:
        raise ValueError("missing 'pieces'")
    if "mask" not in payload:
        raise ValueError("missing 'mask'")
    pieces = parse_pieces(payload["pieces"])
    mask = payload["mask"]
    if not isinstance(mask, (list, tuple)):
        raise ValueError("mask must be a list of rows")
    allow_reflections = _to_bool(payload.get("allow_reflections", CFG.ALLOW_REFLECTIONS))
    verbose = _to_bool(payload.get("verbose", False))
    return pieces, mask, allow_reflections, verbose
