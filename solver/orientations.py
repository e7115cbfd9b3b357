# solver/orientations.py
from __future__ import annotations

from typing import List

from models import Piece


def _rotation_orbit(piece: Piece) -> List[Piece]:
    orbit: List[Piece] = []
    for _ in range(4):
        orbit.append(piece)
        piece = piece.rotate90()
    return orbit


def generate_orientations(piece: Piece, allow_reflections: bool = False) -> List[Piece]:
    """All distinct orientations of ``piece``, normalized and sorted.

    Rotations only yield at most 4 variants. With reflections the rotation
    orbits of the mirror images are added as well.
    """
    base = piece.normalize()
    variants = _rotation_orbit(base)
    if allow_reflections:
        mirrored = base.reflect_x()
        variants.extend(_rotation_orbit(mirrored))
        mirrored = mirrored.reflect_x().reflect_y()
        variants.extend(_rotation_orbit(mirrored))
        mirrored = mirrored.reflect_x()
        variants.extend(_rotation_orbit(mirrored))

    seen = set()
    unique: List[Piece] = []
    for v in variants:
        if v in seen:
            continue
        seen.add(v)
        unique.append(v)
    unique.sort()
    return unique


def orientation_count(piece: Piece, allow_reflections: bool = False) -> int:
    return len(generate_orientations(piece, allow_reflections))
