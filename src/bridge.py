"""
#WHERE
    Entry point of the whole system, called by main.py and by any host
    application that owns a renderer.

#WHAT
    End-to-end bridge: MJCF → M6 load → M1 table → M2 forest → M3/M4/M5
    scene construction, then per frame: M6 catch-up tick → M5 pose sync.

#INPUT
    BridgeConfig, optional SceneGraph implementation, per-frame controls.

#OUTPUT
    Populated scene graph whose body nodes carry parent-relative transforms,
    and the latest SimulationState snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from src.modules.m1_model_table import FlatModelTable
from src.modules.m2_kinematic_tree import BodyTree, build_forest
from src.modules.m3_geometry import GeometryFactory, MeshAssetLoader
from src.modules.m4_frame_converter import FrameConverter
from src.modules.m5_pose_sync import InMemorySceneGraph, PoseSync, SceneBuilder, SceneGraph
from src.modules.m6_simulation import (
    Simulation, SimulationSettings, SimulationState, load_model, table_from_model,
)
from src.shared.constants import DEFAULT_TARGET_FPS, MAX_SUBSTEPS_PER_FRAME, RENDER_GROUP_THRESHOLD
from src.shared.errors import BridgeError

log = logging.getLogger(__name__)

Controller = Callable[[Optional[SimulationState], int], Sequence[float]]


@dataclass
class BridgeConfig:
    model_xml_path: str = ""
    assets_dir: Optional[str] = None            # OBJ files for mesh geoms without mesh data
    pause: bool = False
    target_fps: float = DEFAULT_TARGET_FPS
    render_group_threshold: int = RENDER_GROUP_THRESHOLD
    max_substeps: int = MAX_SUBSTEPS_PER_FRAME
    align_root_frame: bool = True
    control: Optional[List[float]] = None       # initial control vector, length nu


class Bridge:
    """Simulation → scene graph. Call setup() once, then frame() per rendered frame."""

    def __init__(self, config: BridgeConfig | None = None, scene: SceneGraph | None = None) -> None:
        self.config = config or BridgeConfig()
        self.scene: SceneGraph = scene if scene is not None else InMemorySceneGraph()
        self._owns_scene = scene is None
        self.simulation: Optional[Simulation] = None
        self.table: Optional[FlatModelTable] = None
        self.forest: List[BodyTree] = []
        self.converter = FrameConverter(align_root_frame=self.config.align_root_frame)
        self.factory = GeometryFactory(
            MeshAssetLoader(self.config.assets_dir),
            render_group_threshold=self.config.render_group_threshold,
        )
        self._pose_sync: Optional[PoseSync] = None
        self._is_setup = False

    @property
    def state(self) -> Optional[SimulationState]:
        return self.simulation.state if self.simulation else None

    def setup(self) -> None:
        if self._is_setup:
            log.debug("Bridge already set up")
            return
        try:
            settings = SimulationSettings(
                pause=self.config.pause,
                target_fps=self.config.target_fps,
                max_substeps=self.config.max_substeps,
            )
            model = load_model(self.config.model_xml_path)
            simulation = Simulation(model, settings)
            if self.config.control is not None:
                simulation.set_control(self.config.control)
            log.info("[M6] simulation ready (nu=%d, fps=%s)", simulation.nu, settings.target_fps)

            table = table_from_model(model)
            table.validate()
            log.info("[M1] model table ready: %d bodies", len(table))

            forest = build_forest(table.bodies, table.world_id)
            log.info("[M2] forest ready: %d trees", len(forest))

            # an owned scene is rebuilt from empty and only swapped in on success
            scene = InMemorySceneGraph() if self._owns_scene else self.scene
            SceneBuilder(self.factory, self.converter).build(forest, table, scene)
            log.info("[M3] geometry ready | [M5] scene ready")
        except BridgeError as exc:
            log.error("Bridge setup failed: %s", exc)
            raise

        self.simulation, self.table, self.forest, self.scene = simulation, table, forest, scene
        self._pose_sync = PoseSync(self.factory, self.converter)
        self._is_setup = True

    def frame(self, control: Optional[Sequence[float]] = None) -> SimulationState:
        if not self._is_setup:
            self.setup()
        if control is not None:
            self.simulation.set_control(control)
        state = self.simulation.tick()
        self._pose_sync.update(state.xpos, state.xquat, self.table, self.scene.nodes())
        return state

    def run(self, frames: int, controller: Optional[Controller] = None) -> Optional[SimulationState]:
        state = self.state
        for i in range(frames):
            control = controller(state, i) if controller else None
            state = self.frame(control)
        log.info("Ran %d frames, t=%.3fs", frames, state.time if state else 0.0)
        return state

    def set_paused(self, paused: bool) -> None:
        if self.simulation is not None:
            self.simulation.settings.pause = paused
        self.config.pause = paused
