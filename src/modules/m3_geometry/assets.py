"""OBJ mesh assets looked up by name inside one asset directory."""

import logging
import os
from typing import Dict, Optional

import trimesh

from src.modules.m1_model_table import MeshData
from src.shared.constants import MESH_ASSET_SUFFIX
from src.shared.errors import MeshAssetError

log = logging.getLogger(__name__)


class MeshAssetLoader:
    def __init__(self, assets_dir: Optional[str] = None, suffix: str = MESH_ASSET_SUFFIX):
        self.assets_dir = assets_dir
        self.suffix = suffix
        self._cache: Dict[str, MeshData] = {}

    def path_for(self, name: str) -> str:
        return os.path.join(self.assets_dir or ".", f"{name}{self.suffix}")

    def load(self, name: str) -> MeshData:
        if name in self._cache:
            return self._cache[name]
        path = self.path_for(name)
        if self.assets_dir is None or not os.path.exists(path):
            log.error("Mesh asset not found: %s", path)
            raise MeshAssetError(f"Mesh asset not found: {path}")
        mesh = trimesh.load(path, force="mesh", process=False)
        data = MeshData.from_trimesh(mesh, name=name)
        self._cache[name] = data
        log.info("Loaded mesh asset '%s' (%d vertices)", name, data.vertex_count)
        return data
