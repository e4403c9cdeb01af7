from __future__ import annotations

import importlib
import logging
import re
from typing import Dict, Iterable, List, Mapping, Set, Tuple

from babelfont.constants import NOTDEF
from babelfont.errors import FilterError

logger = logging.getLogger(__name__)

Location = Mapping[str, float]
LocationKey = Tuple[Tuple[str, float], ...]


def makeOfficialGlyphOrder(glyphNames: Iterable[str], glyphOrder=None) -> List[str]:
    """Make the final glyph order for a set of glyph names.

    If glyphOrder is None or empty, sort glyphs alphabetically. Names in
    glyphOrder come first, in that order, followed by the remaining names
    sorted.

    If ".notdef" glyph is present, force this to always be the first glyph
    (at index 0).
    """
    names = set(glyphNames)
    order = []
    if NOTDEF in names:
        names.remove(NOTDEF)
        order.append(NOTDEF)
    for name in glyphOrder or ():
        if name not in names:
            continue
        names.remove(name)
        order.append(name)
    order.extend(sorted(names))
    return order


def location_to_string(location: Location) -> str:
    """Reports a designspace location (dictionary mapping axis:loc)
    in a user-friendly way"""
    return ", ".join([f"{axis}={loc:g}" for axis, loc in location.items()])


def location_to_key(location: Location) -> LocationKey:
    """Converts a Location into a sorted tuple so it can be used as a dict
    key. Zero coordinates are dropped, so that sparse normalized locations
    compare equal to their filled-in counterparts."""
    return tuple(sorted((k, v) for k, v in location.items() if v != 0))


class _LazyFontName:
    def __init__(self, font):
        self.font = font

    def __str__(self):
        names = self.font.names.family_name
        if names:
            return next(iter(names.values()))
        return self.font.source or "<untitled>"


def componentGraph(font) -> Dict[str, Set[str]]:
    """Map each glyph name to the names of glyphs its components reference,
    in any layer."""
    return {glyph.name: glyph.component_references() for glyph in font.glyphs}


def reachableGlyphs(graph: Mapping[str, Set[str]], names: Iterable[str]) -> Set[str]:
    """Return names plus every glyph reachable from them through components."""
    seen = set()
    todo = list(names)
    while todo:
        name = todo.pop()
        if name in seen:
            continue
        seen.add(name)
        todo.extend(graph.get(name, ()))
    return seen


def topologicalOrder(graph: Mapping[str, Set[str]], names: Iterable[str]) -> List[str]:
    """Sort names so that every glyph comes after the glyphs it references.

    Ties are broken by the order of ``names``. Edges closing a cycle are
    ignored with a warning.
    """
    order = []
    done = set()
    for root in names:
        if root in done:
            continue
        # iterative depth-first search over (name, remaining children)
        stack = [(root, iter(sorted(graph.get(root, ()))))]
        onStack = [root]
        while stack:
            name, children = stack[-1]
            for child in children:
                if child in done or child not in graph:
                    continue
                if child in onStack:
                    logger.warning(
                        "Cyclical component reference %s => %s; skipped",
                        " -> ".join(onStack),
                        child,
                    )
                    continue
                stack.append((child, iter(sorted(graph.get(child, ())))))
                onStack.append(child)
                break
            else:
                stack.pop()
                onStack.pop()
                done.add(name)
                order.append(name)
    return order


def getMaxComponentDepth(name: str, graph: Mapping[str, Set[str]], _stack=None) -> int:
    """Return the height of a composite glyph's tree of components.

    For glyphs that contain no components, only contours, this is 0.
    Cyclical references do not add to the depth.
    """
    if _stack is None:
        _stack = set()
    refs = [r for r in graph.get(name, ()) if r in graph and r not in _stack]
    if not refs:
        return 0
    _stack.add(name)
    depth = 1 + max(getMaxComponentDepth(r, graph, _stack) for r in refs)
    _stack.discard(name)
    return depth


def splitGlyphList(s: str) -> List[str]:
    """Parse a comma-separated list of glyph names, as given on the command line."""
    return [name.strip() for name in s.split(",") if name.strip()]


# NOTE about the security risk involved in using eval: the function below is
# meant to be used to parse string coming from the command-line, which is
# inherently "trusted"; if that weren't the case, a potential attacker
# could do worse things than segfaulting the Python interpreter...


def _kwargsEval(s):
    return eval(
        "dict(%s)" % s, {"__builtins__": {"True": True, "False": False, "dict": dict}}
    )


_pluginSpecRE = re.compile(
    r"(?:([\w\.]+)::)?"  # MODULE_NAME + '::'
    r"(\w+)"  # CLASS_NAME [required]
    r"(?:\((.*)\))?"  # (KWARGS)
)


def _loadPluginFromString(spec, moduleName, isValidFunc):
    spec = spec.strip()
    m = _pluginSpecRE.match(spec)
    if not m or (m.end() - m.start()) != len(spec):
        raise ValueError(spec)
    moduleName = m.group(1) or moduleName
    className = m.group(2)
    kwargs = m.group(3)

    module = importlib.import_module(moduleName)
    klass = getattr(module, className)
    if not isValidFunc(klass):
        raise TypeError(klass)
    try:
        options = _kwargsEval(kwargs) if kwargs else {}
    except SyntaxError as e:
        raise ValueError("options have incorrect format: %r" % kwargs) from e

    return klass(**options)


def checkNoSyntheticAxisTags(axes, pattern=re.compile(r"^x\d{3}$")):
    """Raise if a font axis tag could collide with a synthetic smart axis tag."""
    for axis in axes:
        if pattern.match(axis.tag):
            raise FilterError(
                f"Axis tag {axis.tag!r} is reserved for smart component axes"
            )
