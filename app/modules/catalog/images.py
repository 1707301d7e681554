"""
Image-list handling at the storage boundary.

Rows written before the current schema stored the default flag as
`is_default` and the media identifier as `public_id`. Everything that reads
rows goes through `normalize_image`, so the rest of the app only ever sees
`Image` instances. Precedence: the current (camelCase) name wins whenever it
holds a value; the legacy snake_case name is the fallback.
"""
from typing import Any, Iterable, List, Optional

from app.schemas.bag import Image


def _first_present(raw: dict, *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def normalize_image(raw: dict) -> Image:
    return Image(
        url=raw.get("url") or "",
        public_id=_first_present(raw, "publicId", "public_id"),
        is_default=bool(_first_present(raw, "isDefault", "is_default") or False),
    )


def normalize_images(raw: Any) -> List[Image]:
    if not isinstance(raw, list):
        return []
    return [normalize_image(item) for item in raw if isinstance(item, dict)]


def hero_image(images: Iterable[Image]) -> Optional[Image]:
    images = list(images)
    if not images:
        return None
    return next((img for img in images if img.is_default), images[0])


def clamp_index(index: int, length: int) -> int:
    return min(max(0, index), length - 1)


def with_default(images: List[Image], default_index: int) -> List[Image]:
    """Return a copy of `images` with exactly one entry flagged default."""
    if not images:
        return []
    safe = clamp_index(default_index, len(images))
    return [
        img.model_copy(update={"is_default": i == safe})
        for i, img in enumerate(images)
    ]
