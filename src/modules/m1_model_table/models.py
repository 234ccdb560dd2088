"""
#WHERE
    Built by m6_simulation.loader (from a MuJoCo model) or directly in tests;
    read by the tree builder, geometry factory, pose sync and bridge.py.

#WHAT
    Immutable per-load snapshot of the simulation's flat tables: bodies,
    geoms and triangulated meshes, each keyed by an integer id.

#INPUT
    Plain values (ids, names, vectors, quaternions) in simulation convention:
    Z-up, quaternions stored (w, x, y, z).

#OUTPUT
    Body, Geom, MeshData, GeomKind and the FlatModelTable container.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import trimesh

from src.shared.constants import WORLD_BODY_ID
from src.shared.errors import ModelConsistencyError

log = logging.getLogger(__name__)


def _frozen_array(values, length: int, dtype=np.float64) -> np.ndarray:
    arr = np.array(values, dtype=dtype).reshape(-1)
    if arr.shape != (length,):
        raise ValueError(f"Expected {length} components, got {arr.shape[0]}")
    arr.flags.writeable = False
    return arr


class GeomKind(IntEnum):
    """Geom shape kinds, numbered like the simulation's type codes."""
    PLANE        = 0
    HEIGHT_FIELD = 1
    SPHERE       = 2
    CAPSULE      = 3
    ELLIPSOID    = 4
    CYLINDER     = 5
    BOX          = 6
    MESH         = 7

    @classmethod
    def from_code(cls, code: int) -> "GeomKind":
        try:
            return cls(int(code))
        except ValueError:
            raise ValueError(f"Invalid geom type code: {code}") from None


@dataclass(eq=False)
class MeshData:
    """Triangle mesh with per-vertex normals and a flat index buffer."""
    vertices: np.ndarray
    normals: np.ndarray
    triangle_indices: np.ndarray
    name: str = ""

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=np.float32).reshape(-1, 3)
        self.normals = np.asarray(self.normals, dtype=np.float32).reshape(-1, 3)
        self.triangle_indices = np.asarray(self.triangle_indices, dtype=np.uint32).reshape(-1)
        if self.normals.shape != self.vertices.shape:
            raise ValueError(
                f"Mesh '{self.name}': {len(self.normals)} normals for {len(self.vertices)} vertices"
            )
        if self.triangle_indices.size % 3:
            raise ValueError(f"Mesh '{self.name}': index count is not a multiple of 3")

    @property
    def triangles(self) -> np.ndarray:
        return self.triangle_indices.reshape(-1, 3)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return self.triangle_indices.size // 3

    def bounds(self) -> np.ndarray:
        """(2, 3) array of min and max corners."""
        if not len(self.vertices):
            return np.zeros((2, 3), dtype=np.float32)
        return np.stack([self.vertices.min(axis=0), self.vertices.max(axis=0)])

    def extents(self) -> np.ndarray:
        lo, hi = self.bounds()
        return hi - lo

    @classmethod
    def from_trimesh(cls, mesh: trimesh.Trimesh, name: str = "") -> "MeshData":
        return cls(
            vertices=mesh.vertices,
            normals=mesh.vertex_normals,
            triangle_indices=mesh.faces,
            name=name,
        )

    def to_trimesh(self) -> trimesh.Trimesh:
        return trimesh.Trimesh(
            vertices=self.vertices,
            faces=self.triangles,
            vertex_normals=self.normals,
            process=False,
        )


@dataclass(frozen=True, eq=False)
class Body:
    """Rigid link. Position/orientation are relative to the parent body."""
    id: int
    name: str
    parent_id: int
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orientation: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))
    geom_address: Optional[int] = None
    geom_count: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "position", _frozen_array(self.position, 3))
        object.__setattr__(self, "orientation", _frozen_array(self.orientation, 4))

    @property
    def is_self_parented(self) -> bool:
        return self.id == self.parent_id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "parent_id": self.parent_id,
            "position": self.position.tolist(),
            "orientation": self.orientation.tolist(),
        }


@dataclass(frozen=True, eq=False)
class Geom:
    """
    Collision/visual primitive attached to a body.

    ``size`` holds half extents along the geom's local x, y, z axes:
    box (hx, hy, hz), sphere (r, r, r), capsule/cylinder (r, r, half_length),
    plane (hx, hy, 0). ``position``/``orientation`` are relative to the body.
    """
    id: int
    body_id: int
    kind: GeomKind
    name: str = ""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orientation: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))
    size: np.ndarray = field(default_factory=lambda: np.zeros(3))
    color: Tuple[float, float, float, float] = (0.5, 0.5, 0.5, 1.0)
    mesh_ref: Optional[MeshData] = None
    mesh_name: Optional[str] = None
    visibility_group: int = 0

    def __post_init__(self):
        object.__setattr__(self, "kind", GeomKind(self.kind))
        object.__setattr__(self, "position", _frozen_array(self.position, 3))
        object.__setattr__(self, "orientation", _frozen_array(self.orientation, 4))
        object.__setattr__(self, "size", _frozen_array(self.size, 3))
        object.__setattr__(self, "color", tuple(float(c) for c in self.color))

    @property
    def is_mesh(self) -> bool:
        return self.kind is GeomKind.MESH

    @property
    def asset_name(self) -> str:
        return self.mesh_name or self.name


@dataclass(frozen=True, eq=False)
class FlatModelTable:
    """Bodies, geoms and meshes of one loaded model. Read-only after load."""
    bodies: Tuple[Body, ...]
    geoms: Tuple[Geom, ...] = ()
    meshes: Tuple[MeshData, ...] = ()
    world_id: int = WORLD_BODY_ID
    _bodies_by_id: Dict[int, Body] = field(init=False, repr=False)
    _geoms_by_body: Dict[int, List[Geom]] = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "bodies", tuple(self.bodies))
        object.__setattr__(self, "geoms", tuple(self.geoms))
        object.__setattr__(self, "meshes", tuple(self.meshes))
        object.__setattr__(self, "_bodies_by_id", {b.id: b for b in self.bodies})
        by_body: Dict[int, List[Geom]] = {}
        for geom in self.geoms:
            by_body.setdefault(geom.body_id, []).append(geom)
        object.__setattr__(self, "_geoms_by_body", by_body)

    def __len__(self) -> int:
        return len(self.bodies)

    def body(self, body_id: int) -> Body:
        return self._bodies_by_id[body_id]

    def has_body(self, body_id: int) -> bool:
        return body_id in self._bodies_by_id

    def body_by_name(self, name: str) -> Optional[Body]:
        return next((b for b in self.bodies if b.name == name), None)

    def body_names(self) -> List[str]:
        return [b.name for b in self.bodies]

    def geoms_of(self, body: Body) -> List[Geom]:
        """Geoms owned by *body*, using its geom range when the model declares one."""
        if body.geom_address is not None and body.geom_count is not None:
            start = body.geom_address
            return list(self.geoms[start:start + body.geom_count]) if body.geom_count > 0 else []
        return list(self._geoms_by_body.get(body.id, []))

    def children_of(self, body_id: int) -> List[Body]:
        return [b for b in self.bodies if b.parent_id == body_id and not b.is_self_parented]

    def validate(self) -> None:
        """Raise ModelConsistencyError when the tables contradict each other."""
        problems: List[str] = []
        problems += _duplicates("body", (b.id for b in self.bodies))
        problems += _duplicates("geom", (g.id for g in self.geoms))

        for body in self.bodies:
            if body.parent_id != self.world_id and body.parent_id not in self._bodies_by_id:
                problems.append(f"body '{body.name}' ({body.id}) has unknown parent {body.parent_id}")
            problems += self._check_geom_range(body)

        for geom in self.geoms:
            if geom.body_id not in self._bodies_by_id:
                problems.append(f"geom {geom.id} references unknown body {geom.body_id}")

        if problems:
            for p in problems:
                log.error("Model table: %s", p)
            raise ModelConsistencyError("; ".join(problems))
        log.debug("Model table valid: %d bodies, %d geoms, %d meshes",
                  len(self.bodies), len(self.geoms), len(self.meshes))

    def _check_geom_range(self, body: Body) -> List[str]:
        if body.geom_count is None:
            return []
        owned = self._geoms_by_body.get(body.id, [])
        if len(owned) != body.geom_count:
            return [f"body '{body.name}' declares {body.geom_count} geoms, table holds {len(owned)}"]
        if body.geom_count == 0:
            return []
        declared = self.geoms[body.geom_address:body.geom_address + body.geom_count]
        if len(declared) != body.geom_count or any(g.body_id != body.id for g in declared):
            return [f"body '{body.name}' geom range [{body.geom_address}, "
                    f"{body.geom_address + body.geom_count}) does not match its geoms"]
        return []


def _duplicates(label: str, ids: Iterable[int]) -> List[str]:
    seen, dupes = set(), set()
    for i in ids:
        (dupes if i in seen else seen).add(i)
    return [f"duplicate {label} id {i}" for i in sorted(dupes)]


def make_table(bodies: Sequence[Body], geoms: Sequence[Geom] = (),
               meshes: Sequence[MeshData] = (), world_id: int = WORLD_BODY_ID) -> FlatModelTable:
    return FlatModelTable(tuple(bodies), tuple(geoms), tuple(meshes), world_id)
