"""
#WHERE
    Used by bridge.py at setup (SceneBuilder) and by PoseSync every tick
    (SceneNode transforms). Tests read the in-memory graph directly.

#WHAT
    Scene-graph surface consumed by the bridge: a SceneGraph protocol for
    external renderers, an in-memory implementation, and the one-time
    builder that turns the body forest into body + mesh nodes.

#INPUT
    List[BodyTree], FlatModelTable, GeometryFactory, FrameConverter.

#OUTPUT
    A "world" container SceneNode with one subtree per renderable body tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from src.modules.m1_model_table import Body, FlatModelTable, Geom, MeshData
from src.modules.m2_kinematic_tree import BodyTree
from src.modules.m3_geometry import GeometryFactory
from src.modules.m4_frame_converter import FrameConverter, Pose, compose

log = logging.getLogger(__name__)

# (body, renderable geom, depth, index of the parent entry or None for the world node)
_PlannedBody = Tuple[Body, Geom, int, Optional[int]]


@dataclass(eq=False)
class SceneNode:
    name: str
    transform: Pose = field(default_factory=Pose.identity)
    parent: Optional["SceneNode"] = None
    children: List["SceneNode"] = field(default_factory=list)
    mesh: Optional[MeshData] = None
    color: Optional[Tuple[float, float, float, float]] = None
    body_id: Optional[int] = None
    is_root: bool = False

    def world_pose(self) -> Pose:
        chain = []
        node: Optional[SceneNode] = self
        while node is not None:
            chain.append(node.transform)
            node = node.parent
        pose = Pose.identity()
        for local in reversed(chain):
            pose = compose(pose, local)
        return pose


class SceneGraph(Protocol):
    """What the bridge needs from a renderer's scene graph."""

    def spawn(self, name: str, parent: Optional[SceneNode], transform: Pose,
              mesh: Optional[MeshData] = None, color=None,
              body_id: Optional[int] = None, is_root: bool = False) -> SceneNode: ...

    def nodes(self) -> List[SceneNode]: ...


class InMemorySceneGraph:
    """Plain node list; stands in for a renderer in the CLI and tests."""

    def __init__(self):
        self._nodes: List[SceneNode] = []

    def spawn(self, name: str, parent: Optional[SceneNode], transform: Pose,
              mesh: Optional[MeshData] = None, color=None,
              body_id: Optional[int] = None, is_root: bool = False) -> SceneNode:
        node = SceneNode(name=name, transform=transform, parent=parent, mesh=mesh,
                         color=color, body_id=body_id, is_root=is_root)
        if parent is not None:
            parent.children.append(node)
        self._nodes.append(node)
        return node

    def nodes(self) -> List[SceneNode]:
        return list(self._nodes)

    def find(self, name: str) -> Optional[SceneNode]:
        return next((n for n in self._nodes if n.name == name), None)

    def body_nodes(self) -> Dict[int, SceneNode]:
        return {n.body_id: n for n in self._nodes if n.body_id is not None}


class SceneBuilder:
    def __init__(self, factory: GeometryFactory, converter: FrameConverter):
        self.factory = factory
        self.converter = converter

    def build(self, forest: Sequence[BodyTree], table: FlatModelTable,
              graph: SceneGraph) -> SceneNode:
        """Spawn the whole scene, or nothing if any renderable mesh fails to build."""
        plan = self._plan(forest, table)
        world = graph.spawn("world", None, Pose.identity())
        body_nodes: List[SceneNode] = []
        for body, geom, depth, parent_slot in plan:
            parent = world if parent_slot is None else body_nodes[parent_slot]
            body_nodes.append(self._spawn_body(graph, parent, body, geom, depth))
        log.info("Scene built: %d body nodes, %d bodies skipped",
                 len(plan), len(table.bodies) - len(plan))
        return world

    def _plan(self, forest: Sequence[BodyTree], table: FlatModelTable) -> List[_PlannedBody]:
        """Spawn order with parent slots. Meshes are generated here so errors surface early."""
        render_geoms = self.factory.render_geoms(table)
        plan: List[_PlannedBody] = []
        for tree in forest:
            stack: List[Tuple[int, Optional[int], int]] = [(0, None, 0)]
            while stack:
                index, parent_slot, depth = stack.pop()
                body = tree.nodes[index].body
                geom = render_geoms.get(body.id)
                if geom is None:
                    log.debug("Body '%s' has no renderable geom, subtree not spawned", body.name)
                    continue
                self.factory.mesh_for(geom)
                plan.append((body, geom, depth, parent_slot))
                slot = len(plan) - 1
                for child in tree.nodes[index].children:
                    stack.append((child, slot, depth + 1))
        return plan

    def _spawn_body(self, graph: SceneGraph, parent: SceneNode, body: Body, geom: Geom,
                    depth: int) -> SceneNode:
        mesh = self.factory.mesh_for(geom)
        transform = self.converter.to_render_pose(body.position, body.orientation)
        if depth == 0:
            transform = self.converter.align_root(transform)
        if not geom.is_mesh:
            transform.position -= self.factory.anchor_correction_for(geom)
        node = graph.spawn(f"body_{body.name}", parent, transform,
                           body_id=body.id, is_root=depth == 0)
        graph.spawn(
            f"mesh_{body.name}", node,
            self.converter.to_render_pose(geom.position, geom.orientation),
            mesh=mesh,
            color=self.factory.color_for(geom),
        )
        return node
