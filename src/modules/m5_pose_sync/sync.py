"""Per-tick driver: absolute simulation poses → parent-relative node transforms."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

import numpy as np

from src.modules.m1_model_table import FlatModelTable, Geom
from src.modules.m3_geometry import GeometryFactory
from src.modules.m4_frame_converter import FrameConverter, Pose

from .scene import SceneNode

log = logging.getLogger(__name__)


class PoseSync:
    def __init__(self, factory: GeometryFactory, converter: FrameConverter):
        self.factory = factory
        self.converter = converter
        self._table: Optional[FlatModelTable] = None
        self._render_geoms: Dict[int, Geom] = {}

    def _geoms_for(self, table: FlatModelTable) -> Dict[int, Geom]:
        if table is not self._table:
            self._render_geoms = self.factory.render_geoms(table)
            self._table = table
        return self._render_geoms

    def body_transform(self, body_id: int, abs_positions: np.ndarray,
                       abs_orientations: np.ndarray, table: FlatModelTable,
                       geom: Geom, is_root: bool) -> Pose:
        parent_id = table.body(body_id).parent_id
        child = self.converter.to_render_pose(abs_positions[body_id], abs_orientations[body_id])
        parent = self.converter.to_render_pose(abs_positions[parent_id], abs_orientations[parent_id])
        pose = self.converter.relative_pose(child, parent)
        if is_root:
            pose = self.converter.align_root(pose)
        if not geom.is_mesh:
            # mesh assets already carry their own anchoring
            pose.position -= self.factory.anchor_correction_for(geom)
        return pose

    def update(self, abs_positions, abs_orientations, body_table: FlatModelTable,
               scene_nodes: Iterable[SceneNode]) -> int:
        """Write this tick's relative transform into every body node. Returns the count."""
        abs_positions = np.asarray(abs_positions, dtype=np.float64)
        abs_orientations = np.asarray(abs_orientations, dtype=np.float64)
        render_geoms = self._geoms_for(body_table)
        updated = 0
        for node in scene_nodes:
            if node.body_id is None:
                continue
            geom = render_geoms.get(node.body_id)
            if geom is None:
                continue
            pose = self.body_transform(node.body_id, abs_positions, abs_orientations,
                                       body_table, geom, node.is_root)
            node.transform.assign(pose)
            updated += 1
        log.debug("PoseSync: %d nodes updated", updated)
        return updated
