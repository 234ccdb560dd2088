"""
#WHERE
    Imported by bridge.py and every component module (M1–M6) — single
    source of truth for ids, thresholds, and default settings.

#WHAT
    Centralised constants shared by the model table, tree builder,
    geometry factory, frame converter, pose sync and simulation wrapper.
    Edit here, not in individual module files.

#INPUT / #OUTPUT
    Pure constants — no I/O.
"""

import math

# ── Model table ──────────────────────────────────────────────────────────

WORLD_BODY_ID: int = 0           # the world body is its own parent

# ── Rendering policy ─────────────────────────────────────────────────────

RENDER_GROUP_THRESHOLD: int = 3  # geom groups >= 3 are collision-only
INFINITE_PLANE_EXTENT: float = 1e6   # plane size 0 means unbounded
WORLD_GEOM_COLOR = (0.8, 0.4, 0.4, 1.0)

SPHERE_SUBDIVISIONS: int = 3
CYLINDER_SECTIONS:   int = 32
CAPSULE_COUNT = (32, 32)         # (latitude, longitude) samples

# Root bodies get a quarter turn about the horizontal X axis.
ROOT_CORRECTION_AXIS  = (1.0, 0.0, 0.0)
ROOT_CORRECTION_ANGLE: float = -math.pi / 2

# ── Simulation ───────────────────────────────────────────────────────────

DEFAULT_TARGET_FPS: float = 60.0     # rendered frames per simulated second
MAX_SUBSTEPS_PER_FRAME: int = 100_000

# ── Assets ───────────────────────────────────────────────────────────────

MESH_ASSET_SUFFIX = ".obj"
