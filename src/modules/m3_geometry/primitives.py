"""Primitive mesh creation with Factory pattern, in the simulation's local frame."""

import logging
from typing import Callable, Dict

import numpy as np
import trimesh

from src.modules.m1_model_table import Geom, GeomKind, MeshData
from src.shared.constants import (
    CAPSULE_COUNT, CYLINDER_SECTIONS, INFINITE_PLANE_EXTENT, SPHERE_SUBDIVISIONS,
)
from src.shared.errors import UnsupportedGeometryError

log = logging.getLogger(__name__)


def plane_half_extents(size) -> tuple:
    """Declared first-axis size 0 means the plane is unbounded."""
    hx, hy = float(size[0]), float(size[1])
    if hx == 0.0:
        return INFINITE_PLANE_EXTENT, INFINITE_PLANE_EXTENT
    return hx, hy if hy > 0.0 else hx


class ShapeFactory:
    """Builds a Z-axis-aligned, center-anchored mesh for a primitive geom."""

    @staticmethod
    def create(geom: Geom) -> MeshData:
        creators: Dict[GeomKind, Callable[[np.ndarray], trimesh.Trimesh]] = {
            GeomKind.PLANE: ShapeFactory._create_plane,
            GeomKind.BOX: ShapeFactory._create_box,
            GeomKind.SPHERE: ShapeFactory._create_sphere,
            GeomKind.CAPSULE: ShapeFactory._create_capsule,
            GeomKind.CYLINDER: ShapeFactory._create_cylinder,
        }
        creator = creators.get(geom.kind)
        if creator is None:
            raise UnsupportedGeometryError(f"Unsupported geometry kind: {geom.kind.name}")
        mesh = creator(geom.size)
        mesh.apply_translation(-mesh.bounds.mean(axis=0))
        return MeshData.from_trimesh(mesh, name=geom.name)

    @staticmethod
    def _create_plane(size: np.ndarray) -> trimesh.Trimesh:
        hx, hy = plane_half_extents(size)
        vertices = np.array([[-hx, -hy, 0.0], [hx, -hy, 0.0], [hx, hy, 0.0], [-hx, hy, 0.0]])
        faces = np.array([[0, 1, 2], [0, 2, 3]])
        normals = np.tile([0.0, 0.0, 1.0], (4, 1))
        return trimesh.Trimesh(vertices=vertices, faces=faces, vertex_normals=normals, process=False)

    @staticmethod
    def _create_box(size: np.ndarray) -> trimesh.Trimesh:
        return trimesh.creation.box(extents=2.0 * np.asarray(size, dtype=np.float64))

    @staticmethod
    def _create_sphere(size: np.ndarray) -> trimesh.Trimesh:
        return trimesh.creation.icosphere(subdivisions=SPHERE_SUBDIVISIONS, radius=float(size[0]))

    @staticmethod
    def _create_capsule(size: np.ndarray) -> trimesh.Trimesh:
        # height is the straight segment between the two cap centers
        return trimesh.creation.capsule(height=2.0 * float(size[2]), radius=float(size[0]),
                                        count=list(CAPSULE_COUNT))

    @staticmethod
    def _create_cylinder(size: np.ndarray) -> trimesh.Trimesh:
        return trimesh.creation.cylinder(radius=float(size[0]), height=2.0 * float(size[2]),
                                         sections=CYLINDER_SECTIONS)
