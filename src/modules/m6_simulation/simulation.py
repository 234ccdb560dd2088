"""
#WHERE
    Owned by bridge.py; read by PoseSync (xpos/xquat) and by logging or
    control collaborators through the published SimulationState.

#WHAT
    Single-owner wrapper around one MuJoCo model/data pair. Writes the
    control vector, advances the physics with a catch-up loop until one
    frame's worth of simulated time has passed, and publishes a read-only
    state snapshot after each tick.

#INPUT
    mujoco.MjModel, SimulationSettings, control vector (length nu).

#OUTPUT
    SimulationState (time, qpos, qvel, cfrc_ext, sensordata, xpos, xquat).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Sequence

import mujoco
import numpy as np

from src.shared.constants import DEFAULT_TARGET_FPS, MAX_SUBSTEPS_PER_FRAME
from src.shared.errors import ConfigurationError

log = logging.getLogger(__name__)


@dataclass
class SimulationSettings:
    pause: bool = False                           # halt stepping, keep last pose
    target_fps: float = DEFAULT_TARGET_FPS        # one frame = 1 / target_fps sim seconds
    max_substeps: int = MAX_SUBSTEPS_PER_FRAME    # bound on the catch-up loop

    @property
    def frame_budget(self) -> float:
        return 1.0 / self.target_fps

    def validate(self) -> None:
        if not self.target_fps > 0:
            raise ConfigurationError(f"target_fps must be positive, got {self.target_fps}")
        if self.max_substeps < 1:
            raise ConfigurationError(f"max_substeps must be >= 1, got {self.max_substeps}")


def _frozen_copy(values) -> np.ndarray:
    arr = np.array(values, dtype=np.float64, copy=True)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class SimulationState:
    time: float
    qpos: np.ndarray
    qvel: np.ndarray
    cfrc_ext: np.ndarray
    sensordata: np.ndarray
    xpos: np.ndarray
    xquat: np.ndarray
    substeps: int = 0

    @classmethod
    def capture(cls, data: mujoco.MjData, substeps: int = 0) -> "SimulationState":
        return cls(
            time=float(data.time),
            qpos=_frozen_copy(data.qpos),
            qvel=_frozen_copy(data.qvel),
            cfrc_ext=_frozen_copy(data.cfrc_ext),
            sensordata=_frozen_copy(data.sensordata),
            xpos=_frozen_copy(data.xpos),
            xquat=_frozen_copy(data.xquat),
            substeps=substeps,
        )

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "qpos": self.qpos.tolist(),
            "qvel": self.qvel.tolist(),
            "cfrc_ext": self.cfrc_ext.tolist(),
            "sensor_data": self.sensordata.tolist(),
        }


class Simulation:
    """The only object that touches MjData. One tick at a time."""

    def __init__(self, model: mujoco.MjModel, settings: Optional[SimulationSettings] = None):
        self.settings = settings or SimulationSettings()
        self.settings.validate()
        self.model = model
        self.data = mujoco.MjData(model)
        self._control = np.zeros(model.nu)
        self._state: Optional[SimulationState] = None
        self._lock = threading.Lock()

    @property
    def nu(self) -> int:
        return int(self.model.nu)

    @property
    def state(self) -> Optional[SimulationState]:
        return self._state

    @property
    def time(self) -> float:
        return float(self.data.time)

    def set_control(self, values: Sequence[float]) -> None:
        values = np.asarray(values, dtype=np.float64).reshape(-1)
        if values.shape[0] != self.nu:
            raise ConfigurationError(
                f"Control vector has {values.shape[0]} entries, model has {self.nu} actuators"
            )
        with self._lock:
            self._control = values.copy()

    def tick(self) -> SimulationState:
        """Advance one rendered frame (or nothing when paused) and publish state."""
        with self._lock:
            if self.settings.pause:
                if self._state is None:
                    mujoco.mj_forward(self.model, self.data)
                    self._state = SimulationState.capture(self.data)
                return self._state

            self.data.ctrl[:] = self._control
            start = self.data.time
            budget = self.settings.frame_budget
            steps = 0
            while self.data.time - start < budget:
                if steps >= self.settings.max_substeps:
                    log.warning("Catch-up loop hit %d substeps at t=%.4f", steps, self.data.time)
                    break
                mujoco.mj_step(self.model, self.data)
                steps += 1

            self._state = SimulationState.capture(self.data, substeps=steps)
            log.debug("Tick: %d substeps, t=%.4f", steps, self._state.time)
            return self._state

    def reset(self) -> None:
        with self._lock:
            mujoco.mj_resetData(self.model, self.data)
            self._state = None
