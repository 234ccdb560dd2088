"""
Geometry — Module 3
===================
Renderable-geom selection, primitive/mesh generation and anchor policy.

Quick start::

    from src.modules.m3_geometry import GeometryFactory, MeshAssetLoader

    factory = GeometryFactory(MeshAssetLoader("assets/a1/meshes"))
    geom = factory.render_geom_for(body, table.geoms_of(body))
    if geom is not None:
        mesh = factory.mesh_for(geom)
"""
from .assets import MeshAssetLoader
from .factory import ANCHOR_POLICY, UNSUPPORTED_KINDS, GeometryFactory
from .primitives import ShapeFactory, plane_half_extents

__all__ = [
    "ANCHOR_POLICY", "UNSUPPORTED_KINDS", "GeometryFactory", "MeshAssetLoader",
    "ShapeFactory", "plane_half_extents",
]
