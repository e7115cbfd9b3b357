"""Helpers for writing solver outputs to disk."""

from __future__ import annotations

import os
from typing import List, Sequence

from config import CFG
from models import Cell
from render import piece_label


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def write_coords(pieces: Sequence[Sequence[Cell]], base_dir: str, rendering: str = "") -> str:
    """Write one line per placed piece (label and sorted cells) to the configured text file."""

    path = _resolve_output_path(base_dir, CFG.COORDS_OUT, "coords.txt")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        if not pieces:
            f.write("No solution\n")
        else:
            for idx, cells in enumerate(pieces):
                coords: List[str] = [f"({x},{y})" for x, y in sorted(cells)]
                f.write(f"{piece_label(idx)} @ {' '.join(coords)}\n")
            if rendering:
                f.write("\n" + rendering + "\n")
    return path


def write_layout_view_html(svg: str, legend_html: str, base_dir: str) -> str:
    """Write the rendered SVG/legend preview to the configured HTML file."""

    path = _resolve_output_path(base_dir, CFG.LAYOUT_HTML, "layout_view.html")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as vf:
        vf.write(layout_page(svg, legend_html))
    return path


def layout_page(svg: str, legend_html: str, title: str = "Layout View") -> str:
    return f"""<!doctype html>
<html><head><meta charset='utf-8'><title>{title}</title></head>
<body class='container'>
<h1>{title}</h1>
<section class='card'><div class='gridwrap'>{svg}</div></section>
<section class='card'><h3>Legend</h3><ul>{legend_html}</ul></section>
</body></html>"""


__all__ = ["layout_page", "write_coords", "write_layout_view_html"]
