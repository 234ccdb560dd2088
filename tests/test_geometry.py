"""Tests for Geometry - renderable geom selection, primitive meshes and anchor policy."""

import numpy as np
import pytest

from src.modules.m1_model_table import Body, Geom, GeomKind
from src.modules.m3_geometry import GeometryFactory, MeshAssetLoader, ShapeFactory, plane_half_extents
from src.shared.constants import INFINITE_PLANE_EXTENT, WORLD_GEOM_COLOR
from src.shared.errors import MeshAssetError, UnsupportedGeometryError

from conftest import triangle_mesh

BODY = Body(id=1, name="link", parent_id=0)


def _geom(gid=0, kind=GeomKind.BOX, size=(1, 2, 3), group=0, body_id=1, **kw):
    return Geom(id=gid, body_id=body_id, kind=kind, size=size, visibility_group=group, **kw)


class TestRenderGeomSelection:

    def setup_method(self):
        self.factory = GeometryFactory()

    def test_no_geoms(self):
        assert self.factory.render_geom_for(BODY, []) is None

    def test_collision_only_body_is_not_renderable(self):
        assert self.factory.render_geom_for(BODY, [_geom(group=3), _geom(1, group=4)]) is None

    def test_mesh_beats_primitive(self):
        mesh = _geom(5, GeomKind.MESH, group=2, mesh_ref=triangle_mesh())
        assert self.factory.render_geom_for(BODY, [_geom(0, group=0), mesh]) is mesh

    def test_lowest_group_then_lowest_id(self):
        a, b, c = _geom(4, group=1), _geom(2, group=1), _geom(1, group=2)
        assert self.factory.render_geom_for(BODY, [a, b, c]) is b

    def test_ignores_geoms_of_other_bodies(self):
        assert self.factory.render_geom_for(BODY, [_geom(body_id=2)]) is None

    def test_threshold_is_configurable(self):
        factory = GeometryFactory(render_group_threshold=5)
        assert factory.render_geom_for(BODY, [_geom(group=4)]) is not None


class TestPrimitiveMeshes:

    def setup_method(self):
        self.factory = GeometryFactory()

    def test_box_extents_in_render_space(self):
        mesh = self.factory.mesh_for(_geom(size=(1, 2, 3)))
        assert np.allclose(mesh.extents(), [2, 6, 4])

    def test_primitives_are_center_anchored(self):
        for kind, size in [(GeomKind.BOX, (1, 2, 3)), (GeomKind.CAPSULE, (0.5, 0.5, 1.0)),
                           (GeomKind.CYLINDER, (0.5, 0.5, 1.0)), (GeomKind.SPHERE, (0.5, 0.5, 0.5))]:
            lo, hi = ShapeFactory.create(_geom(kind=kind, size=size)).bounds()
            assert np.allclose((lo + hi) / 2, 0.0, atol=1e-6)

    def test_capsule_long_axis_becomes_y(self):
        mesh = self.factory.mesh_for(_geom(kind=GeomKind.CAPSULE, size=(1, 1, 2)))
        assert np.allclose(mesh.extents(), [2, 6, 2], atol=1e-6)

    def test_cylinder_extents(self):
        mesh = self.factory.mesh_for(_geom(kind=GeomKind.CYLINDER, size=(0.5, 0.5, 1)))
        assert np.allclose(mesh.extents(), [1, 2, 1], atol=1e-6)

    def test_sphere_extents(self):
        mesh = self.factory.mesh_for(_geom(kind=GeomKind.SPHERE, size=(0.5, 0.5, 0.5)))
        assert np.allclose(mesh.extents(), [1, 1, 1], atol=0.05)

    def test_infinite_plane(self):
        assert plane_half_extents((0, 0, 0)) == (INFINITE_PLANE_EXTENT, INFINITE_PLANE_EXTENT)
        mesh = self.factory.mesh_for(_geom(kind=GeomKind.PLANE, size=(0, 0, 0)))
        assert np.allclose(mesh.extents(), [2e6, 0, 2e6])
        assert np.allclose(mesh.normals, [0, 1, 0])

    def test_finite_plane(self):
        mesh = self.factory.mesh_for(_geom(kind=GeomKind.PLANE, size=(2, 3, 0)))
        assert np.allclose(mesh.extents(), [4, 0, 6])

    @pytest.mark.parametrize("kind", [GeomKind.ELLIPSOID, GeomKind.HEIGHT_FIELD])
    def test_unsupported_kinds(self, kind):
        with pytest.raises(UnsupportedGeometryError):
            self.factory.mesh_for(_geom(kind=kind))
        with pytest.raises(ValueError):
            ShapeFactory.create(_geom(kind=kind))

    def test_meshes_are_cached_per_geom(self):
        geom = _geom()
        assert self.factory.mesh_for(geom) is self.factory.mesh_for(geom)


class TestMeshGeoms:

    def test_embedded_mesh_is_converted(self):
        mesh = GeometryFactory().mesh_for(_geom(kind=GeomKind.MESH, mesh_ref=triangle_mesh()))
        assert np.allclose(mesh.vertices, [[0, 0, 0], [1, 0, 0], [0, 0, 1]])

    def test_asset_loaded_by_name(self, tmp_path):
        (tmp_path / "calf.obj").write_text("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n")
        factory = GeometryFactory(MeshAssetLoader(str(tmp_path)))
        mesh = factory.mesh_for(_geom(kind=GeomKind.MESH, mesh_name="calf"))
        assert mesh.vertex_count == 3
        assert np.allclose(mesh.extents(), [1, 0, 1])

    def test_missing_asset(self, tmp_path):
        factory = GeometryFactory(MeshAssetLoader(str(tmp_path)))
        with pytest.raises(MeshAssetError):
            factory.mesh_for(_geom(kind=GeomKind.MESH, mesh_name="thigh"))

    def test_missing_asset_without_directory(self):
        with pytest.raises(FileNotFoundError):
            GeometryFactory().mesh_for(_geom(kind=GeomKind.MESH, name="thigh"))

    def test_loader_path(self, tmp_path):
        assert MeshAssetLoader(str(tmp_path)).path_for("hip") == str(tmp_path / "hip.obj")


class TestAnchorPolicy:

    def setup_method(self):
        self.factory = GeometryFactory()

    def test_box(self):
        assert np.allclose(self.factory.anchor_correction_for(_geom(size=(1, 2, 3))), [0, 3, 0])

    def test_capsule(self):
        geom = _geom(kind=GeomKind.CAPSULE, size=(1, 1, 2))
        assert np.allclose(self.factory.anchor_correction_for(geom), [0, 3, 0])

    def test_cylinder(self):
        geom = _geom(kind=GeomKind.CYLINDER, size=(1, 1, 2))
        assert np.allclose(self.factory.anchor_correction_for(geom), [0, 2, 0])

    @pytest.mark.parametrize("kind", [GeomKind.SPHERE, GeomKind.PLANE, GeomKind.MESH])
    def test_zero_for_other_kinds(self, kind):
        assert np.array_equal(self.factory.anchor_correction_for(_geom(kind=kind)), [0, 0, 0])


class TestColors:

    def test_world_geoms_get_override(self):
        factory = GeometryFactory()
        assert factory.color_for(_geom(body_id=0, color=(0, 0, 1, 1))) == WORLD_GEOM_COLOR

    def test_other_geoms_keep_their_color(self):
        assert GeometryFactory().color_for(_geom(color=(0, 0, 1, 1))) == (0.0, 0.0, 1.0, 1.0)
