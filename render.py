import random
import string
from typing import Dict, List, Sequence, Tuple

from models import Cell, RegionMask

_LABELS = string.ascii_uppercase + string.ascii_lowercase + string.digits


def piece_label(idx: int) -> str:
    if idx < len(_LABELS):
        return _LABELS[idx]
    return "?"

def _color(label: str) -> str:
    rng = random.Random(sum(ord(ch) * 131 for ch in label))
    r = rng.randint(40, 200)
    g = rng.randint(40, 200)
    b = rng.randint(40, 200)
    return f"rgb({r},{g},{b})"

def render_text(pieces: Sequence[Sequence[Cell]], mask: RegionMask) -> str:
    """Lettered grid: each placed piece gets the next letter, blocked cells are blank."""
    grid: List[List[str]] = [[" "] * mask.width for _ in range(mask.height)]
    for y in range(mask.height):
        for x in range(mask.width):
            if mask.rows[y][x]:
                grid[y][x] = "."
    for idx, cells in enumerate(pieces):
        label = piece_label(idx)
        for x, y in cells:
            grid[y][x] = label
    return "\n".join("".join(row) for row in grid)

def render_svg(pieces: Sequence[Sequence[Cell]], mask: RegionMask, scale: int = 32) -> Tuple[str, str]:
    palette: Dict[str, str] = {}
    for idx in range(len(pieces)):
        label = piece_label(idx)
        palette.setdefault(label, _color(label))

    svg_w = mask.width * scale + 2
    svg_h = mask.height * scale + 2

    cells = []
    for y in range(mask.height):
        for x in range(mask.width):
            if not mask.rows[y][x]:
                cells.append(
                    f'<rect x="{x * scale + 1}" y="{y * scale + 1}" width="{scale}" height="{scale}" fill="#ddd"/>'
                )
    for idx, piece_cells in enumerate(pieces):
        label = piece_label(idx)
        for x, y in piece_cells:
            px = x * scale + 1
            py = y * scale + 1
            cells.append(
                f'<rect x="{px}" y="{py}" width="{scale}" height="{scale}" fill="{palette[label]}" stroke="black" stroke-width="1"/>'
                f'<text x="{px + 4}" y="{py + 14}" font-size="12" fill="black">{label}</text>'
            )
    grid = f'<rect x="1" y="1" width="{svg_w-2}" height="{svg_h-2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="layout-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{grid}{"".join(cells)}</svg>'
    )

    legend = "".join(
        f"<li><span class='swatch' style='background:{palette[piece_label(i)]}'></span>"
        f"{piece_label(i)} ({len(cells_i)} cells)</li>"
        for i, cells_i in enumerate(pieces)
    )
    return svg, legend
