from babelfont.axis import Axis
from babelfont.common import Anchor, Color, Guide, Position
from babelfont.convertors import load, save
from babelfont.decomposedAffine import DecomposedAffine
from babelfont.features import Features
from babelfont.font import Font
from babelfont.glyph import Glyph, GlyphCategory, GlyphList
from babelfont.instance import Instance
from babelfont.layer import AssociatedWithMaster, DefaultForMaster, FreeFloating, Layer
from babelfont.master import Master
from babelfont.names import Names
from babelfont.shapes import Component, Node, NodeType, Path

__all__ = [
    "Anchor",
    "AssociatedWithMaster",
    "Axis",
    "Color",
    "Component",
    "DecomposedAffine",
    "DefaultForMaster",
    "Features",
    "Font",
    "FreeFloating",
    "Glyph",
    "GlyphCategory",
    "GlyphList",
    "Guide",
    "Instance",
    "Layer",
    "Master",
    "Names",
    "Node",
    "NodeType",
    "Path",
    "Position",
    "load",
    "save",
]

try:
    from ._version import version as __version__
except ImportError:
    __version__ = "0.0.0+unknown"
