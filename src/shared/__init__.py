"""
#WHERE
    Imported by bridge.py, main.py, every component module and the tests.

#WHAT
    Shared constants and the exception hierarchy.

#INPUT
    None (constant registries).

#OUTPUT
    Constants from constants.py; BridgeError and its subclasses.
"""

from .constants import (
    WORLD_BODY_ID,
    RENDER_GROUP_THRESHOLD,
    INFINITE_PLANE_EXTENT,
    WORLD_GEOM_COLOR,
    DEFAULT_TARGET_FPS,
    MAX_SUBSTEPS_PER_FRAME,
)
from .errors import (
    BridgeError,
    ModelLoadError,
    ConfigurationError,
    ModelConsistencyError,
    MeshAssetError,
    UnsupportedGeometryError,
)

__all__ = [
    "WORLD_BODY_ID",
    "RENDER_GROUP_THRESHOLD",
    "INFINITE_PLANE_EXTENT",
    "WORLD_GEOM_COLOR",
    "DEFAULT_TARGET_FPS",
    "MAX_SUBSTEPS_PER_FRAME",
    "BridgeError",
    "ModelLoadError",
    "ConfigurationError",
    "ModelConsistencyError",
    "MeshAssetError",
    "UnsupportedGeometryError",
]
