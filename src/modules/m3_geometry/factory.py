"""
#WHERE
    Used by m5_pose_sync (scene construction and per-tick anchor
    correction) and bridge.py (render geom precomputation).

#WHAT
    Geometry factory — picks the single renderable geom per body, turns a
    geom descriptor into a render-space mesh, and owns the per-kind anchor
    correction policy and material colors.

#INPUT
    Body + candidate geoms, Geom descriptors, optional OBJ asset directory.

#OUTPUT
    Optional[Geom], MeshData (Y-up), anchor correction vec3, RGBA color.

Anchor policy
-------------
Body frames sit at the joint, i.e. at one end of the link, while the
renderer's primitives are center-anchored.  The correction is the distance
from the shape's end to its center along the long axis (local Z in the
simulation, Y after the axis swap):

    BOX       hz          center → end face
    CAPSULE   hl + r      center → cap tip
    CYLINDER  hl          center → end cap
    others    0
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, Optional

import numpy as np

from src.modules.m1_model_table import Body, FlatModelTable, Geom, GeomKind, MeshData
from src.modules.m4_frame_converter import FrameConverter
from src.shared.constants import RENDER_GROUP_THRESHOLD, WORLD_BODY_ID, WORLD_GEOM_COLOR
from src.shared.errors import UnsupportedGeometryError

from .assets import MeshAssetLoader
from .primitives import ShapeFactory

log = logging.getLogger(__name__)

UNSUPPORTED_KINDS = frozenset({GeomKind.ELLIPSOID, GeomKind.HEIGHT_FIELD})

ANCHOR_POLICY: Dict[GeomKind, Callable[[np.ndarray], float]] = {
    GeomKind.BOX:      lambda size: float(size[2]),
    GeomKind.CAPSULE:  lambda size: float(size[2] + size[0]),
    GeomKind.CYLINDER: lambda size: float(size[2]),
}


class GeometryFactory:
    """Renderable-geom selection, mesh generation and anchor corrections."""

    def __init__(self, assets: Optional[MeshAssetLoader] = None,
                 render_group_threshold: int = RENDER_GROUP_THRESHOLD,
                 world_id: int = WORLD_BODY_ID):
        self.assets = assets or MeshAssetLoader()
        self.render_group_threshold = render_group_threshold
        self.world_id = world_id
        self._mesh_cache: Dict[int, MeshData] = {}

    # ── selection ─────────────────────────────────────────────────

    def is_visible(self, geom: Geom) -> bool:
        return geom.visibility_group < self.render_group_threshold

    def render_geom_for(self, body: Body, candidate_geoms: Iterable[Geom]) -> Optional[Geom]:
        """Mesh beats primitive, then lowest group, then lowest id. None → not renderable."""
        visible = [g for g in candidate_geoms if g.body_id == body.id and self.is_visible(g)]
        if not visible:
            return None
        return min(visible, key=lambda g: (not g.is_mesh, g.visibility_group, g.id))

    def render_geoms(self, table: FlatModelTable) -> Dict[int, Geom]:
        """``{body_id: renderable geom}`` for every body that has one."""
        selected = {}
        for body in table.bodies:
            geom = self.render_geom_for(body, table.geoms_of(body))
            if geom is not None:
                selected[body.id] = geom
        log.debug("%d of %d bodies are renderable", len(selected), len(table.bodies))
        return selected

    # ── meshes ────────────────────────────────────────────────────

    def mesh_for(self, geom: Geom) -> MeshData:
        """Render-space (Y-up) mesh for *geom*; cached per geom id."""
        if geom.kind in UNSUPPORTED_KINDS:
            raise UnsupportedGeometryError(f"Unsupported geometry kind: {geom.kind.name}")
        cached = self._mesh_cache.get(geom.id)
        if cached is not None:
            return cached

        if geom.is_mesh:
            source = geom.mesh_ref if geom.mesh_ref is not None else self.assets.load(geom.asset_name)
        else:
            source = ShapeFactory.create(geom)
        mesh = FrameConverter.to_render_mesh(source)
        self._mesh_cache[geom.id] = mesh
        return mesh

    # ── anchoring and materials ───────────────────────────────────

    def anchor_correction_for(self, geom: Geom) -> np.ndarray:
        """Offset to subtract from a primitive body's render-space translation."""
        offset = ANCHOR_POLICY.get(geom.kind)
        if offset is None:
            return np.zeros(3)
        return np.array([0.0, offset(geom.size), 0.0])

    def color_for(self, geom: Geom) -> tuple:
        if geom.body_id == self.world_id:
            return WORLD_GEOM_COLOR
        return geom.color
