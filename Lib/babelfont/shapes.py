from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Union

from fontTools.pens.pointPen import AbstractPointPen

from babelfont.decomposedAffine import DecomposedAffine
from babelfont.errors import BadPath

logger = logging.getLogger(__name__)


class NodeType(Enum):
    Move = "m"
    Line = "l"
    OffCurve = "o"
    Curve = "c"
    QCurve = "q"

    @property
    def segmentType(self):
        """The fontTools point pen segment type for this node type."""
        return _SEGMENT_TYPES[self]

    @classmethod
    def fromSegmentType(cls, segmentType):
        return _NODE_TYPES[segmentType]


_SEGMENT_TYPES = {
    NodeType.Move: "move",
    NodeType.Line: "line",
    NodeType.OffCurve: None,
    NodeType.Curve: "curve",
    NodeType.QCurve: "qcurve",
}
_NODE_TYPES = {v: k for k, v in _SEGMENT_TYPES.items()}


@dataclass
class Node:
    x: float
    y: float
    nodetype: NodeType = NodeType.Line
    smooth: bool = False
    format_specific: Dict[str, Any] = field(default_factory=dict)

    def __str__(self):
        return "{:g} {:g} {}{}".format(
            self.x, self.y, self.nodetype.value, "s" if self.smooth else ""
        )

    @classmethod
    def fromString(cls, s: str) -> "Node":
        try:
            x, y, t = s.split()
            smooth = t.endswith("s")
            nodetype = NodeType(t[:-1] if smooth else t)
            return cls(float(x), float(y), nodetype, smooth)
        except ValueError as e:
            raise BadPath(f"Could not parse node {s!r}") from e


@dataclass
class Path:
    nodes: List[Node] = field(default_factory=list)
    closed: bool = True
    format_specific: Dict[str, Any] = field(default_factory=dict)

    def signature(self):
        """The sequence of node types; paths interpolate only if these match."""
        return tuple(node.nodetype for node in self.nodes)

    def coordinates(self) -> List[float]:
        return [c for node in self.nodes for c in (node.x, node.y)]

    def validate(self):
        """Raise BadPath unless the node sequence is well formed."""
        nodes = self.nodes
        if not nodes:
            return
        if self.closed and nodes[0].nodetype is NodeType.Move:
            raise BadPath("Closed path begins with a move")
        if not self.closed and nodes[0].nodetype is not NodeType.Move:
            raise BadPath("Open path does not begin with a move")
        if any(n.nodetype is NodeType.Move for n in nodes[1:]):
            raise BadPath("Move in the middle of a path")
        types = [n.nodetype for n in nodes]
        if self.closed:
            # offcurves at the end of a closed path lead into its first node
            trailing = 0
            while trailing < len(types) and types[-1 - trailing] is NodeType.OffCurve:
                trailing += 1
            if trailing == len(types):
                # TrueType contour made only of offcurves
                return
            types = types[len(types) - trailing :] + types[: len(types) - trailing]
        elif types[-1] is NodeType.OffCurve:
            raise BadPath("Open path ends with an offcurve")
        offcurves = 0
        for nodetype in types:
            if nodetype is NodeType.OffCurve:
                offcurves += 1
                continue
            if nodetype is NodeType.Curve and offcurves != 2:
                raise BadPath(f"Curve with {offcurves} offcurve points")
            if nodetype in (NodeType.Line, NodeType.Move) and offcurves:
                raise BadPath(f"{nodetype.name} node preceded by offcurve points")
            offcurves = 0

    def drawPoints(self, pointPen):
        pointPen.beginPath()
        for node in self.nodes:
            pointPen.addPoint(
                (node.x, node.y), segmentType=node.nodetype.segmentType, smooth=node.smooth
            )
        pointPen.endPath()

    def transform(self, transform):
        """Apply a fontTools Transform to every node in place."""
        for node in self.nodes:
            node.x, node.y = transform.transformPoint((node.x, node.y))

    def nodesToString(self) -> str:
        return " ".join(str(node) for node in self.nodes)

    @classmethod
    def fromNodesString(cls, s: str, closed=True) -> "Path":
        tokens = s.split()
        if len(tokens) % 3:
            raise BadPath(f"Could not parse nodes {s!r}")
        nodes = [
            Node.fromString(" ".join(tokens[i : i + 3])) for i in range(0, len(tokens), 3)
        ]
        return cls(nodes, closed)


@dataclass
class Component:
    reference: str
    transform: DecomposedAffine = field(default_factory=DecomposedAffine)
    location: Dict[str, float] = field(default_factory=dict)
    format_specific: Dict[str, Any] = field(default_factory=dict)

    def drawPoints(self, pointPen):
        pointPen.addComponent(self.reference, tuple(self.transform.asTransform()))


Shape = Union[Path, Component]


class ShapesPointPen(AbstractPointPen):
    """A point pen which appends the paths and components it receives to a
    list of shapes."""

    def __init__(self, shapes: List[Shape]):
        self.shapes = shapes
        self._path = None

    def beginPath(self, identifier=None, **kwargs):
        self._path = Path([], closed=True)

    def addPoint(self, pt, segmentType=None, smooth=False, name=None, identifier=None, **kwargs):
        nodetype = NodeType.fromSegmentType(segmentType)
        self._path.nodes.append(Node(pt[0], pt[1], nodetype, bool(smooth)))

    def endPath(self):
        path = self._path
        if path.nodes and path.nodes[0].nodetype is NodeType.Move:
            path.closed = False
        self.shapes.append(path)
        self._path = None

    def addComponent(self, baseGlyphName, transformation, identifier=None, **kwargs):
        self.shapes.append(
            Component(baseGlyphName, DecomposedAffine.fromTransform(transformation))
        )
