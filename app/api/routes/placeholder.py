from __future__ import annotations

import random
from xml.sax.saxutils import escape

from fastapi import APIRouter, Depends, Query, Response

from app.core.rate_limit import require_admission

router = APIRouter(tags=["Images"])

MIN_DIMENSION = 1
MAX_DIMENSION = 2000

GRADIENTS: tuple[tuple[str, str], ...] = (
    ("#667eea", "#764ba2"),
    ("#f093fb", "#f5576c"),
    ("#4facfe", "#00f2fe"),
    ("#43e97b", "#38f9d7"),
    ("#fa709a", "#fee140"),
    ("#a8edea", "#fed6e3"),
    ("#d299c2", "#fef9d7"),
    ("#89f7fe", "#66a6ff"),
    ("#fdbb2d", "#22c1c3"),
    ("#ff9a9e", "#fecfef"),
    ("#ffecd2", "#fcb69f"),
    ("#ff8a80", "#ffab91"),
    ("#a18cd1", "#fbc2eb"),
    ("#fad0c4", "#ffd1ff"),
    ("#ffeef4", "#e0c3fc"),
    ("#e3ffe7", "#d9e7ff"),
    ("#f6d365", "#fda085"),
    ("#96fbc4", "#f9f586"),
    ("#fbc2eb", "#a6c1ee"),
    ("#fdcbf1", "#e6dee9"),
    ("#a1c4fd", "#c2e9fb"),
)

_SVG_TEMPLATE = """<svg width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg">
  <defs>
    <linearGradient id="grad" x1="0%" y1="0%" x2="100%" y2="100%">
      <stop offset="0%" style="stop-color:{start};stop-opacity:1" />
      <stop offset="100%" style="stop-color:{end};stop-opacity:1" />
    </linearGradient>
    <filter id="shadow" x="-20%" y="-20%" width="140%" height="140%">
      <feDropShadow dx="0" dy="2" stdDeviation="3" flood-color="rgba(0,0,0,0.3)"/>
    </filter>
  </defs>
  <rect width="100%" height="100%" fill="url(#grad)" />
  <circle cx="50%" cy="40%" r="30" fill="rgba(255,255,255,0.2)" />
  <circle cx="20%" cy="70%" r="20" fill="rgba(255,255,255,0.1)" />
  <circle cx="80%" cy="20%" r="15" fill="rgba(255,255,255,0.15)" />
  <text x="50%" y="60%" text-anchor="middle" fill="white" font-family="Arial, sans-serif" font-size="16" font-weight="500" filter="url(#shadow)">{text}</text>
  <text x="50%" y="80%" text-anchor="middle" fill="rgba(255,255,255,0.8)" font-family="Arial, sans-serif" font-size="12">{brand}</text>
</svg>
"""


def clamp_dimension(value: int) -> int:
    return max(MIN_DIMENSION, min(MAX_DIMENSION, value))


def render_placeholder_svg(
    width: int,
    height: int,
    text: str,
    *,
    brand: str = "Kitchen365",
    rng: random.Random | None = None,
) -> str:
    """Render a gradient placeholder image; ``text`` is XML-escaped."""
    start, end = (rng or random).choice(GRADIENTS)
    return _SVG_TEMPLATE.format(
        width=clamp_dimension(width),
        height=clamp_dimension(height),
        start=start,
        end=end,
        text=escape(text),
        brand=escape(brand),
    )


@router.get(
    "/placeholder-image",
    response_class=Response,
    responses={200: {"content": {"image/svg+xml": {}}}},
    dependencies=[Depends(require_admission("bot"))],
)
def placeholder_image(
    width: int = Query(400),
    height: int = Query(300),
    text: str = Query("Product Image", max_length=200),
) -> Response:
    svg = render_placeholder_svg(width, height, text)
    return Response(
        content=svg,
        media_type="image/svg+xml",
        headers={"Cache-Control": "public, max-age=31536000"},
    )
