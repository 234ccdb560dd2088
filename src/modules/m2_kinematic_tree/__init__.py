"""
Kinematic Tree — Module 2
=========================
Flat body table → forest of parent/child trees.

Quick start::

    from src.modules.m2_kinematic_tree import build_forest, format_tree

    forest = build_forest(table.bodies)
    print(format_tree(forest[-1]))
"""
from .tree import BodyTree, KinematicTreeBuilder, TreeNode, build_forest, format_tree

__all__ = ["BodyTree", "KinematicTreeBuilder", "TreeNode", "build_forest", "format_tree"]
