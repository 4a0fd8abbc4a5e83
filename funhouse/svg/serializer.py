"""SVG output for quadratic chains and profile diagrams."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from funhouse.geometry.bezier import QuadraticBezier
from funhouse.optics.diagram import CrossSection


def _fmt(v: float) -> str:
    s = f"{v:.4f}".rstrip("0").rstrip(".")
    return "0" if s == "-0" else s


def quadratics_to_path(quads: Sequence[QuadraticBezier]) -> str:
    """SVG path data ``M x y Q cx cy ex ey ...``; empty chain → ''."""
    if not quads:
        return ""
    sx, sy = quads[0].start
    parts = [f"M {_fmt(sx)} {_fmt(sy)}"]
    for q in quads:
        parts.append(f"Q {_fmt(q.cp[0])} {_fmt(q.cp[1])} {_fmt(q.end[0])} {_fmt(q.end[1])}")
    return " ".join(parts)


@dataclass(frozen=True)
class ConversionStats:
    original_segments: int
    quadratic_segments: int
    average_quads_per_segment: float
    compression_ratio: float


def conversion_stats(points: Sequence, quads: Sequence[QuadraticBezier]) -> ConversionStats:
    """Spline-span vs. emitted-quadratic counts (compression ratio in percent)."""
    original = max(len(points) - 1, 0)
    ratio = len(quads) / max(1, original)
    return ConversionStats(
        original_segments=original,
        quadratic_segments=len(quads),
        average_quads_per_segment=round(ratio, 2),
        compression_ratio=round(100.0 / ratio, 1) if ratio > 0 else 0.0,
    )


def serialize_svg(
    elements: list[dict[str, Any]],
    canvas_w: float = 800.0,
    canvas_h: float = 600.0,
    title: str = "",
    view_box: tuple[float, float, float, float] | None = None,
) -> str:
    """SVG markup from element dicts (``tag`` key plus attributes)."""
    vx, vy, vw, vh = view_box or (0.0, 0.0, canvas_w, canvas_h)
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg width="{_fmt(canvas_w)}" height="{_fmt(canvas_h)}"'
        f' viewBox="{_fmt(vx)} {_fmt(vy)} {_fmt(vw)} {_fmt(vh)}"'
        ' xmlns="http://www.w3.org/2000/svg">',
    ]
    if title:
        lines.append(f"  <title>{title}</title>")

    for elem in elements:
        tag = elem.get("tag", "path")
        attrs = {k: v for k, v in elem.items() if k != "tag"}
        attr_str = " ".join(f'{k.replace("_", "-")}="{v}"' for k, v in attrs.items())
        lines.append(f"  <{tag} {attr_str} />")

    lines.append("</svg>")
    return "\n".join(lines)


def profile_svg(
    quads: Sequence[QuadraticBezier],
    anchors: Sequence[tuple[float, float]] = (),
    canvas_w: float = 800.0,
    canvas_h: float = 600.0,
    line_x: float | None = None,
) -> str:
    """Designer-canvas view: centre line, fitted curve and anchor dots."""
    elements: list[dict[str, Any]] = []
    if line_x is not None:
        elements.append({
            "tag": "line", "x1": _fmt(line_x), "y1": 0, "x2": _fmt(line_x), "y2": _fmt(canvas_h),
            "stroke": "#999", "stroke_dasharray": "5,5",
        })
    path = quadratics_to_path(quads)
    if path:
        elements.append({"tag": "path", "d": path, "fill": "none", "stroke": "#2563eb", "stroke_width": 3})
    for x, y in anchors:
        elements.append({"tag": "circle", "cx": _fmt(x), "cy": _fmt(y), "r": 6, "fill": "#dc2626"})
    return serialize_svg(elements, canvas_w, canvas_h, title="Mirror profile")


def diagram_svg(section: CrossSection, canvas_w: float = 600.0, canvas_h: float = 400.0) -> str:
    """Side view of a cross-section in (z, r) units; camera at the origin."""
    reach = max([abs(r) for _, r in section.profile] + [section.image_half_height, 1e-6])
    z_lo = min(section.image_plane, 0.0) - 0.2
    z_hi = max([z for z, _ in section.profile] + [section.mirror_dist]) + 0.2
    view = (z_lo, -reach * 1.2, z_hi - z_lo, reach * 2.4)

    elements: list[dict[str, Any]] = [
        {
            "tag": "line",
            "x1": _fmt(section.image_plane), "y1": _fmt(-section.image_half_height),
            "x2": _fmt(section.image_plane), "y2": _fmt(section.image_half_height),
            "stroke": "#16a34a", "stroke_width": 0.03,
        },
        {"tag": "circle", "cx": 0, "cy": 0, "r": 0.04, "fill": "#111"},
    ]
    if section.profile:
        # SVG y grows downward; negate r so +r is up.
        pts = " ".join(f"{_fmt(z)},{_fmt(-r)}" for z, r in section.profile)
        elements.append(
            {"tag": "polyline", "points": pts, "fill": "none", "stroke": "#2563eb", "stroke_width": 0.04}
        )

    for ray in section.rays:
        if ray.hit is None:
            continue
        hz, hr = ray.hit
        elements.append({
            "tag": "line", "x1": 0, "y1": 0, "x2": _fmt(hz), "y2": _fmt(-hr),
            "stroke": "#f59e0b", "stroke_width": 0.015,
        })
        if ray.landing is not None:
            lz, lr = ray.landing
            elements.append({
                "tag": "line", "x1": _fmt(hz), "y1": _fmt(-hr), "x2": _fmt(lz), "y2": _fmt(-lr),
                "stroke": "#dc2626", "stroke_width": 0.015,
            })
    return serialize_svg(elements, canvas_w, canvas_h, title="Mirror cross-section", view_box=view)
