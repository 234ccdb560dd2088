"""
Simulation — Module 6
=====================
MuJoCo model loading, flat table extraction and catch-up stepping.

Quick start::

    from src.modules.m6_simulation import Simulation, SimulationSettings, load_model

    sim = Simulation(load_model("scene.xml"), SimulationSettings(target_fps=60))
    state = sim.tick()
"""
from .loader import (
    extract_bodies, extract_geoms, extract_meshes, half_extents,
    load_model, load_model_from_string, table_from_model,
)
from .simulation import Simulation, SimulationSettings, SimulationState

__all__ = [
    "Simulation", "SimulationSettings", "SimulationState",
    "extract_bodies", "extract_geoms", "extract_meshes", "half_extents",
    "load_model", "load_model_from_string", "table_from_model",
]
