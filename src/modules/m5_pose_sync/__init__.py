"""
Pose Sync — Module 5
====================
One-time scene construction and the per-tick transform update.

Quick start::

    from src.modules.m5_pose_sync import InMemorySceneGraph, PoseSync, SceneBuilder

    graph = InMemorySceneGraph()
    SceneBuilder(factory, converter).build(forest, table, graph)
    PoseSync(factory, converter).update(state.xpos, state.xquat, table, graph.nodes())
"""
from .scene import InMemorySceneGraph, SceneBuilder, SceneGraph, SceneNode
from .sync import PoseSync

__all__ = ["InMemorySceneGraph", "PoseSync", "SceneBuilder", "SceneGraph", "SceneNode"]
