"""Record transforms that normalize decoded payloads, keyed by source name"""

import logging
from typing import Any, Callable, Dict, List

from apisync.domain.models.errors import TransformError

logger = logging.getLogger(__name__)

Transform = Callable[[Any], Any]

SUMMARY_LENGTH = 40


def _items(source: str, payload: Any) -> List[Dict[str, Any]]:
    if not isinstance(payload, list):
        raise TransformError(
            f"{source}: expected a JSON array, got {type(payload).__name__}"
        )
    for item in payload:
        if not isinstance(item, dict):
            raise TransformError(f"{source}: expected JSON objects, got {type(item).__name__}")
    return payload


def _field(source: str, item: Dict[str, Any], key: str) -> Any:
    try:
        return item[key]
    except KeyError:
        raise TransformError(f"{source}: record is missing field '{key}'") from None


def transform_users(payload: Any) -> List[Dict[str, Any]]:
    """Map users to {id, nombre, email}"""
    return [
        {
            "id": _field("users", u, "id"),
            "nombre": _field("users", u, "name"),
            "email": _field("users", u, "email"),
        }
        for u in _items("users", payload)
    ]


def transform_posts(payload: Any) -> List[Dict[str, Any]]:
    """Map posts to {id, titulo, resumen}, resumen being a shortened body"""
    records = []
    for p in _items("posts", payload):
        body = str(_field("posts", p, "body"))
        records.append(
            {
                "id": _field("posts", p, "id"),
                "titulo": _field("posts", p, "title"),
                "resumen": body[:SUMMARY_LENGTH] + "...",
            }
        )
    return records


def identity(payload: Any) -> Any:
    return payload


TRANSFORMS: Dict[str, Transform] = {
    "users": transform_users,
    "posts": transform_posts,
}


def get_transform(source_name: str) -> Transform:
    """Get the transform for a source

    Args:
        source_name: Source name

    Returns:
        Registered transform, or the identity transform for unknown sources
    """
    transform = TRANSFORMS.get(source_name)
    if transform is None:
        logger.debug(f"No transform registered for '{source_name}', keeping payload as is")
        return identity
    return transform
