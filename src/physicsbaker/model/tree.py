"""
Bone Tree (Arena)
=================
Hierarchy of bones used to expand output selections to whole subtrees.

Nodes live in one flat list indexed by bone index; parent/child relations are
stored as integer indexes, so every traversal is a plain index walk with no
back-references between node objects.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from physicsbaker.model.rig import RigModel

logger = logging.getLogger(__name__)


@dataclass
class BoneNode:
    bone_index: int
    name: str
    parent: int = -1
    children: List[int] = field(default_factory=list)


class BoneTree:
    def __init__(self, nodes: List[BoneNode], roots: List[int]):
        self.nodes = nodes
        self.roots = roots
        self._by_name: Dict[str, int] = {n.name: n.bone_index for n in nodes}

    @staticmethod
    def from_model(model: RigModel) -> BoneTree:
        nodes = [BoneNode(bone_index=bone.index, name=bone.name) for bone in model.bones]

        roots: List[int] = []
        for bone in model.layer_sorted_bones():
            node = nodes[bone.index]
            if 0 <= bone.parent_index < len(nodes) and bone.parent_index != bone.index:
                node.parent = bone.parent_index
                nodes[bone.parent_index].children.append(bone.index)
            else:
                roots.append(bone.index)

        logger.debug(f"Bone tree built: {len(nodes)} nodes, {len(roots)} roots.")
        return BoneTree(nodes, roots)

    def node(self, name: str) -> Optional[BoneNode]:
        index = self._by_name.get(name)
        return self.nodes[index] if index is not None else None

    def walk(self, start: Optional[int] = None) -> Iterator[BoneNode]:
        """Depth-first, parents before children."""
        stack = [start] if start is not None else list(reversed(self.roots))
        visited = set()
        while stack:
            index = stack.pop()
            if index in visited:
                continue
            visited.add(index)
            node = self.nodes[index]
            yield node
            stack.extend(reversed(node.children))

    def subtree_names(self, name: str) -> List[str]:
        """The bone and all of its descendants, for "check children" selection."""
        node = self.node(name)
        if node is None:
            return []
        return [n.name for n in self.walk(node.bone_index)]
