"""
#WHERE
    Called by bridge.py at setup; tests use load_model_from_string with
    inline MJCF documents.

#WHAT
    MuJoCo model loading and extraction of the flat body/geom/mesh tables
    into an immutable FlatModelTable (simulation convention kept as-is,
    except geom sizes, which are repacked into per-axis half extents).

#INPUT
    Path to an MJCF document (or the XML text), mujoco.MjModel.

#OUTPUT
    mujoco.MjModel, FlatModelTable.
"""

from __future__ import annotations

import logging
import os
from typing import List

import mujoco
import numpy as np
import trimesh

from src.modules.m1_model_table import Body, FlatModelTable, Geom, GeomKind, MeshData
from src.shared.constants import WORLD_BODY_ID
from src.shared.errors import ModelLoadError

log = logging.getLogger(__name__)


def load_model(path: str) -> mujoco.MjModel:
    if not os.path.exists(path):
        log.error("Model document not found: %s", path)
        raise ModelLoadError(f"Model document not found: {path}")
    try:
        model = mujoco.MjModel.from_xml_path(path)
    except ValueError as e:
        log.error("Model parse failed: %s", e)
        raise ModelLoadError(f"Could not parse {path}: {e}") from e
    log.info("Loaded model %s (%d bodies, %d geoms, %d actuators)",
             path, model.nbody, model.ngeom, model.nu)
    return model


def load_model_from_string(xml: str) -> mujoco.MjModel:
    try:
        return mujoco.MjModel.from_xml_string(xml)
    except ValueError as e:
        raise ModelLoadError(f"Could not parse model XML: {e}") from e


def _name(model: mujoco.MjModel, obj: mujoco.mjtObj, index: int, fallback: str) -> str:
    return mujoco.mj_id2name(model, obj, index) or f"{fallback}_{index}"


def half_extents(kind: GeomKind, raw_size: np.ndarray) -> np.ndarray:
    """Repack the packed ``geom_size`` row into half extents per local axis."""
    r0, r1, r2 = (float(v) for v in raw_size)
    if kind is GeomKind.SPHERE:
        return np.array([r0, r0, r0])
    if kind in (GeomKind.CAPSULE, GeomKind.CYLINDER):
        return np.array([r0, r0, r1])
    if kind is GeomKind.PLANE:
        return np.array([r0, r1, 0.0])
    return np.array([r0, r1, r2])


def extract_meshes(model: mujoco.MjModel) -> List[MeshData]:
    meshes = []
    for i in range(model.nmesh):
        va, vn = model.mesh_vertadr[i], model.mesh_vertnum[i]
        fa, fn = model.mesh_faceadr[i], model.mesh_facenum[i]
        vertices = np.array(model.mesh_vert[va:va + vn], dtype=np.float64)
        faces = np.array(model.mesh_face[fa:fa + fn], dtype=np.int64)
        # per-vertex normals from the triangulation
        tm = trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
        meshes.append(MeshData.from_trimesh(tm, name=_name(model, mujoco.mjtObj.mjOBJ_MESH, i, "mesh")))
    return meshes


def extract_bodies(model: mujoco.MjModel) -> List[Body]:
    return [
        Body(
            id=i,
            name=_name(model, mujoco.mjtObj.mjOBJ_BODY, i, "body"),
            parent_id=int(model.body_parentid[i]),
            position=model.body_pos[i],
            orientation=model.body_quat[i],
            geom_address=int(model.body_geomadr[i]),
            geom_count=int(model.body_geomnum[i]),
        )
        for i in range(model.nbody)
    ]


def extract_geoms(model: mujoco.MjModel, meshes: List[MeshData]) -> List[Geom]:
    geoms = []
    for i in range(model.ngeom):
        try:
            kind = GeomKind.from_code(model.geom_type[i])
        except ValueError as e:
            raise ModelLoadError(f"Geom {i}: {e}") from e
        mesh_ref = mesh_name = None
        if kind is GeomKind.MESH and model.geom_dataid[i] >= 0:
            mesh_ref = meshes[model.geom_dataid[i]]
            mesh_name = mesh_ref.name
        geoms.append(Geom(
            id=i,
            body_id=int(model.geom_bodyid[i]),
            kind=kind,
            name=_name(model, mujoco.mjtObj.mjOBJ_GEOM, i, "geom"),
            position=model.geom_pos[i],
            orientation=model.geom_quat[i],
            size=half_extents(kind, model.geom_size[i]),
            color=tuple(model.geom_rgba[i]),
            mesh_ref=mesh_ref,
            mesh_name=mesh_name,
            visibility_group=int(model.geom_group[i]),
        ))
    return geoms


def table_from_model(model: mujoco.MjModel) -> FlatModelTable:
    meshes = extract_meshes(model)
    table = FlatModelTable(
        bodies=tuple(extract_bodies(model)),
        geoms=tuple(extract_geoms(model, meshes)),
        meshes=tuple(meshes),
        world_id=WORLD_BODY_ID,
    )
    log.info("Model table: %d bodies, %d geoms, %d meshes",
             len(table.bodies), len(table.geoms), len(table.meshes))
    return table
