"""OpenAPI metadata and customization utilities.

Enriches the generated schema with tag descriptions and documents the
rate-limit response shared by every throttled operation. Kept apart from the
app factory so documentation concerns stay in one place.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {
        "name": "Products",
        "description": "Catalog reads (cached) and writes (invalidate caches).",
    },
    {
        "name": "Images",
        "description": "Image upload, retention management and SVG placeholders.",
    },
    {
        "name": "Health",
        "description": "Liveness and readiness checks. Not rate limited.",
    },
]

_RATE_LIMITED_RESPONSE = {
    "description": "Too many requests. Retry after the number of seconds in `Retry-After`.",
    "headers": {
        "Retry-After": {"schema": {"type": "integer"}},
        "X-RateLimit-Limit": {"schema": {"type": "integer"}},
        "X-RateLimit-Remaining": {"schema": {"type": "integer"}},
        "X-RateLimit-Reset": {"schema": {"type": "integer"}},
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and 429 responses.

    - Adds tags metadata if not present
    - Documents 429 on every operation except health endpoints
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        paths = schema.get("paths", {})
        for path, methods in paths.items():
            if path.endswith("/health"):
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj.setdefault("responses", {}).setdefault("429", _RATE_LIMITED_RESPONSE)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
