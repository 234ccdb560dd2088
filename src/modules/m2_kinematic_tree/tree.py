"""
#WHERE
    Called once at load time by bridge.py; the forest is consumed by
    m5_pose_sync.scene (scene construction) and by main.py --print-tree.

#WHAT
    Kinematic tree builder — rebuilds the parent/child hierarchy from the
    flat, parent-indexed body table as a forest of arena-indexed trees.

    The world sentinel is a container of root trees, not a mega-root:
    every body whose parent is the world starts its own tree (the world
    body itself included, since it is its own parent), and the world
    never collects children.

#INPUT
    Sequence[Body] (table order), world sentinel id.

#OUTPUT
    List[BodyTree]; each tree is a flat list of TreeNode with parent and
    children indices into that list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from src.modules.m1_model_table import Body
from src.shared.constants import WORLD_BODY_ID

log = logging.getLogger(__name__)


@dataclass(slots=True)
class TreeNode:
    body: Body
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)


@dataclass
class BodyTree:
    """One rooted tree; ``nodes[0]`` is the root."""
    nodes: List[TreeNode] = field(default_factory=list)

    @property
    def root(self) -> Body:
        return self.nodes[0].body

    @property
    def size(self) -> int:
        return len(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def bodies(self) -> List[Body]:
        return [n.body for n in self.nodes]

    def add(self, body: Body, parent: Optional[int] = None) -> int:
        self.nodes.append(TreeNode(body=body, parent=parent))
        index = len(self.nodes) - 1
        if parent is not None:
            self.nodes[parent].children.append(index)
        return index

    def depth_of(self, index: int) -> int:
        depth = 0
        while self.nodes[index].parent is not None:
            index = self.nodes[index].parent
            depth += 1
        return depth

    def walk(self) -> Iterator[Tuple[int, int]]:
        """Depth-first ``(depth, node_index)`` pairs using an explicit stack.

        Siblings are pushed in table order, so the last child is visited first.
        """
        if not self.nodes:
            return
        stack: List[Tuple[int, int]] = [(0, 0)]
        while stack:
            depth, index = stack.pop()
            yield depth, index
            for child in self.nodes[index].children:
                stack.append((depth + 1, child))

    def to_dict(self) -> dict:
        """Nested ``{"body": ..., "children": [...]}`` structure, JSON-friendly."""
        if not self.nodes:
            return {}
        out: List[dict] = [{} for _ in self.nodes]
        for index in reversed(range(len(self.nodes))):
            node = self.nodes[index]
            out[index] = {
                "body": node.body.to_dict(),
                "children": [out[c] for c in node.children],
            }
        return out[0]


def _children_index(bodies: Sequence[Body], world_id: int) -> Dict[int, List[Body]]:
    index: Dict[int, List[Body]] = {}
    for child in bodies:
        # self-parented entries would loop forever; world never owns children
        if child.id == child.parent_id or child.parent_id == world_id:
            continue
        index.setdefault(child.parent_id, []).append(child)
    return index


def build_forest(bodies: Sequence[Body], world_id: int = WORLD_BODY_ID) -> List[BodyTree]:
    """Build one tree per body parented to the world, in table order."""
    children = _children_index(bodies, world_id)
    forest: List[BodyTree] = []
    placed = set()

    for root in (b for b in bodies if b.parent_id == world_id):
        tree = BodyTree()
        tree.add(root)
        placed.add(root.id)
        queue = [0]
        while queue:
            index = queue.pop()
            parent_body = tree.nodes[index].body
            if parent_body.id == world_id:
                continue
            for child in children.get(parent_body.id, []):
                if child.id in placed:
                    log.warning("Body '%s' (%d) reached twice, skipped", child.name, child.id)
                    continue
                placed.add(child.id)
                queue.append(tree.add(child, parent=index))
        forest.append(tree)

    unplaced = [b.name for b in bodies if b.id not in placed]
    if unplaced:
        log.warning("%d bodies not attached to the world: %s", len(unplaced), ", ".join(unplaced))
    log.debug("Forest: %d trees, %d nodes", len(forest), sum(t.size for t in forest))
    return forest


def format_tree(tree: BodyTree, indent: str = "--") -> str:
    """One body name per line, prefixed by *indent* once per depth level."""
    return "".join(f"{indent * depth}{tree.nodes[i].body.name}\n" for depth, i in tree.walk())


class KinematicTreeBuilder:
    """Thin object wrapper so the tree step can be configured and injected."""

    def __init__(self, world_id: int = WORLD_BODY_ID):
        self.world_id = world_id

    def build(self, bodies: Sequence[Body]) -> List[BodyTree]:
        return build_forest(bodies, self.world_id)
