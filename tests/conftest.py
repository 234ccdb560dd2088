"""Shared fixtures: a 14-body quadruped table and a small MJCF model."""

import numpy as np
import pytest

from src.modules.m1_model_table import Body, FlatModelTable, Geom, GeomKind, MeshData

QUADRUPED_NAMES = [
    "world", "trunk",
    "FR_hip", "FR_thigh", "FR_calf",
    "FL_hip", "FL_thigh", "FL_calf",
    "RR_hip", "RR_thigh", "RR_calf",
    "RL_hip", "RL_thigh", "RL_calf",
]

MINI_QUADRUPED_XML = """
<mujoco model="mini_quadruped">
  <option timestep="0.002"/>
  <asset>
    <mesh name="tet" vertex="0 0 0  0.1 0 0  0 0.1 0  0 0 0.1"/>
  </asset>
  <worldbody>
    <geom name="floor" type="plane" size="0 0 0.05" rgba="0.2 0.3 0.4 1"/>
    <body name="trunk" pos="0 0 0.5">
      <freejoint/>
      <geom name="trunk_visual" type="mesh" mesh="tet" group="1"/>
      <geom name="trunk_collision" type="box" size="0.2 0.1 0.05" group="3"/>
      <body name="FR_hip" pos="0.2 -0.1 0">
        <joint name="FR_hip_joint" type="hinge" axis="1 0 0"/>
        <geom name="FR_hip_geom" type="cylinder" size="0.04 0.02" group="1"/>
        <body name="FR_thigh" pos="0 -0.05 0">
          <joint name="FR_thigh_joint" type="hinge" axis="0 1 0"/>
          <geom name="FR_thigh_geom" type="capsule" size="0.02 0.1" pos="0 0 -0.1" group="1"/>
          <body name="FR_calf" pos="0 0 -0.2">
            <joint name="FR_calf_joint" type="hinge" axis="0 1 0"/>
            <geom name="FR_calf_collision" type="capsule" size="0.015 0.1" pos="0 0 -0.1" group="3"/>
          </body>
        </body>
      </body>
    </body>
  </worldbody>
  <actuator>
    <motor joint="FR_hip_joint"/>
    <motor joint="FR_thigh_joint"/>
    <motor joint="FR_calf_joint"/>
  </actuator>
  <sensor>
    <jointpos joint="FR_thigh_joint"/>
  </sensor>
</mujoco>
"""


def quadruped_bodies():
    parents = [0, 0, 1, 2, 3, 1, 5, 6, 1, 8, 9, 1, 11, 12]
    return [Body(id=i, name=n, parent_id=p) for i, (n, p) in enumerate(zip(QUADRUPED_NAMES, parents))]


def triangle_mesh(name="tri"):
    return MeshData(
        vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]],
        normals=[[0, 0, 1]] * 3,
        triangle_indices=[0, 1, 2],
        name=name,
    )


def random_quat_wxyz(rng):
    q = rng.normal(size=4)
    return q / np.linalg.norm(q)


@pytest.fixture
def bodies():
    return quadruped_bodies()


@pytest.fixture
def mesh_table():
    """Quadruped where every body owns one mesh geom, so no anchor offsets apply."""
    bodies = quadruped_bodies()
    geoms = [
        Geom(id=b.id, body_id=b.id, kind=GeomKind.MESH, name=f"{b.name}_mesh",
             mesh_ref=triangle_mesh(b.name), visibility_group=1)
        for b in bodies
    ]
    return FlatModelTable(tuple(bodies), tuple(geoms))


@pytest.fixture
def mini_xml_path(tmp_path):
    path = tmp_path / "mini_quadruped.xml"
    path.write_text(MINI_QUADRUPED_XML, encoding="utf-8")
    return str(path)
