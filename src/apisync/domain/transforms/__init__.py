"""Record transforms keyed by source name"""

from apisync.domain.transforms.record_transforms import TRANSFORMS, Transform, get_transform

__all__ = ["TRANSFORMS", "Transform", "get_transform"]
