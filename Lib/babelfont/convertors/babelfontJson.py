"""The canonical JSON serialization of a Font.

Every field is named, ownership is expressed by nesting, and paths are
written as compact node strings.
"""
import datetime
import json
import logging

from babelfont.axis import Axis
from babelfont.common import Anchor, Color, Guide, Position
from babelfont.convertors import BaseConvertor
from babelfont.decomposedAffine import DecomposedAffine, Order
from babelfont.errors import BabelfontIOError, JsonSerializeError
from babelfont.features import Features
from babelfont.font import Font
from babelfont.glyph import Glyph, GlyphCategory, GlyphList
from babelfont.instance import Instance
from babelfont.layer import AssociatedWithMaster, DefaultForMaster, FreeFloating, Layer
from babelfont.master import Master
from babelfont.names import Names
from babelfont.shapes import Component, Path

logger = logging.getLogger(__name__)


def _num(value):
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


# Serialization


def _axisToDict(axis):
    return {
        "name": axis.name,
        "tag": axis.tag,
        "id": axis.id,
        "min": axis.min,
        "default": axis.default,
        "max": axis.max,
        "map": [list(pair) for pair in axis.map] if axis.map is not None else None,
        "hidden": axis.hidden,
        "localized_names": axis.localized_names,
        "format_specific": axis.format_specific,
    }


def _guideToDict(guide):
    return {
        "pos": {"x": guide.pos.x, "y": guide.pos.y, "angle": guide.pos.angle},
        "name": guide.name,
        "color": _colorToList(guide.color),
        "format_specific": guide.format_specific,
    }


def _colorToList(color):
    if color is None:
        return None
    return [color.r, color.g, color.b, color.a]


def _masterToDict(master):
    return {
        "name": master.name,
        "id": master.id,
        "location": master.location,
        "guides": [_guideToDict(g) for g in master.guides],
        "metrics": master.metrics,
        "kerning": [[left, right, value] for (left, right), value in master.kerning.items()],
        "custom_ot_values": master.custom_ot_values,
        "format_specific": master.format_specific,
    }


def _layerTypeToJson(layerType):
    if isinstance(layerType, DefaultForMaster):
        return {"DefaultForMaster": layerType.master_id}
    if isinstance(layerType, AssociatedWithMaster):
        return {"AssociatedWithMaster": layerType.master_id}
    return "FreeFloating"


def _shapeToDict(shape):
    if isinstance(shape, Component):
        result = {"ref": shape.reference}
        transform = shape.transform
        if not (transform.isIdentity() and transform.order is Order.Default):
            result["transform"] = {
                "translation": list(transform.translation),
                "scale": list(transform.scale),
                "rotation": transform.rotation,
                "skew": list(transform.skew),
                "order": transform.order.value,
            }
        if shape.location:
            result["location"] = shape.location
    else:
        result = {
            "nodes": " ".join(
                f"{_num(n.x)} {_num(n.y)} {n.nodetype.value}{'s' if n.smooth else ''}"
                for n in shape.nodes
            ),
            "closed": shape.closed,
        }
        nodeData = {
            str(i): n.format_specific for i, n in enumerate(shape.nodes) if n.format_specific
        }
        if nodeData:
            result["node_format_specific"] = nodeData
    if shape.format_specific:
        result["format_specific"] = shape.format_specific
    return result


def _layerToDict(layer):
    return {
        "width": layer.width,
        "name": layer.name,
        "id": layer.id,
        "master": _layerTypeToJson(layer.master),
        "shapes": [_shapeToDict(s) for s in layer.shapes],
        "anchors": [
            {"name": a.name, "x": a.x, "y": a.y, "format_specific": a.format_specific}
            for a in layer.anchors
        ],
        "guides": [_guideToDict(g) for g in layer.guides],
        "color": _colorToList(layer.color),
        "location": layer.location,
        "smart_component_location": layer.smart_component_location,
        "is_background": layer.is_background,
        "background_layer_id": layer.background_layer_id,
        "format_specific": layer.format_specific,
    }


def _glyphToDict(glyph):
    return {
        "name": glyph.name,
        "production_name": glyph.production_name,
        "category": glyph.category.value,
        "codepoints": glyph.codepoints,
        "layers": [_layerToDict(l) for l in glyph.layers],
        "exported": glyph.exported,
        "direction": glyph.direction,
        "component_axes": [_axisToDict(a) for a in glyph.component_axes],
        "format_specific": glyph.format_specific,
    }


def _namesToDict(names):
    return {field: getattr(names, field) for field in Names.fieldNames()}


def fontToDict(font):
    return {
        "upm": font.upm,
        "version": list(font.version),
        "date": font.date.isoformat(),
        "names": _namesToDict(font.names),
        "axes": [_axisToDict(a) for a in font.axes],
        "instances": [
            {
                "name": i.name,
                "id": i.id,
                "location": i.location,
                "variable": i.variable,
                "custom_names": _namesToDict(i.custom_names),
                "format_specific": i.format_specific,
            }
            for i in font.instances
        ],
        "masters": [_masterToDict(m) for m in font.masters],
        "glyphs": [_glyphToDict(g) for g in font.glyphs],
        "note": font.note,
        "custom_ot_values": font.custom_ot_values,
        "variation_sequences": [
            [selector, codepoint, name]
            for (selector, codepoint), name in font.variation_sequences.items()
        ],
        "features": {
            "classes": font.features.classes,
            "prefixes": font.features.prefixes,
            "features": [list(f) for f in font.features.features],
        },
        "first_kern_groups": font.first_kern_groups,
        "second_kern_groups": font.second_kern_groups,
        "format_specific": font.format_specific,
    }


# Deserialization


def _axisFromDict(d):
    axisMap = d.get("map")
    return Axis(
        name=d["name"],
        tag=d["tag"],
        id=d["id"],
        min=d.get("min"),
        default=d.get("default"),
        max=d.get("max"),
        map=[tuple(pair) for pair in axisMap] if axisMap is not None else None,
        hidden=d.get("hidden", False),
        localized_names=d.get("localized_names", {}),
        format_specific=d.get("format_specific", {}),
    )


def _colorFromList(color):
    return Color(*color) if color is not None else None


def _guideFromDict(d):
    return Guide(
        pos=Position(**d["pos"]),
        name=d.get("name"),
        color=_colorFromList(d.get("color")),
        format_specific=d.get("format_specific", {}),
    )


def _layerTypeFromJson(value):
    if value == "FreeFloating":
        return FreeFloating()
    if "DefaultForMaster" in value:
        return DefaultForMaster(value["DefaultForMaster"])
    return AssociatedWithMaster(value["AssociatedWithMaster"])


def _shapeFromDict(d):
    if "ref" in d:
        transform = DecomposedAffine()
        if "transform" in d:
            t = d["transform"]
            transform = DecomposedAffine(
                tuple(t["translation"]),
                tuple(t["scale"]),
                t["rotation"],
                tuple(t["skew"]),
                Order(t["order"]),
            )
        return Component(
            d["ref"], transform, d.get("location", {}), d.get("format_specific", {})
        )
    path = Path.fromNodesString(d["nodes"], closed=d["closed"])
    for index, data in d.get("node_format_specific", {}).items():
        path.nodes[int(index)].format_specific = data
    path.format_specific = d.get("format_specific", {})
    return path


def _layerFromDict(d):
    return Layer(
        width=d["width"],
        name=d.get("name"),
        id=d.get("id"),
        master=_layerTypeFromJson(d["master"]),
        shapes=[_shapeFromDict(s) for s in d.get("shapes", [])],
        anchors=[Anchor(**a) for a in d.get("anchors", [])],
        guides=[_guideFromDict(g) for g in d.get("guides", [])],
        color=_colorFromList(d.get("color")),
        location=d.get("location"),
        smart_component_location=d.get("smart_component_location", {}),
        is_background=d.get("is_background", False),
        background_layer_id=d.get("background_layer_id"),
        format_specific=d.get("format_specific", {}),
    )


def _glyphFromDict(d):
    return Glyph(
        name=d["name"],
        production_name=d.get("production_name"),
        category=GlyphCategory(d.get("category", "base")),
        codepoints=d.get("codepoints", []),
        layers=[_layerFromDict(l) for l in d.get("layers", [])],
        exported=d.get("exported", True),
        direction=d.get("direction"),
        component_axes=[_axisFromDict(a) for a in d.get("component_axes", [])],
        format_specific=d.get("format_specific", {}),
    )


def _masterFromDict(d):
    return Master(
        name=d["name"],
        id=d["id"],
        location=d.get("location", {}),
        guides=[_guideFromDict(g) for g in d.get("guides", [])],
        metrics=d.get("metrics", {}),
        kerning={(l, r): v for l, r, v in d.get("kerning", [])},
        custom_ot_values=d.get("custom_ot_values", {}),
        format_specific=d.get("format_specific", {}),
    )


def fontFromDict(d):
    features = d.get("features", {})
    return Font(
        upm=d.get("upm", 1000),
        version=tuple(d.get("version", (1, 0))),
        date=datetime.datetime.fromisoformat(d["date"]),
        names=Names(**d.get("names", {})),
        axes=[_axisFromDict(a) for a in d.get("axes", [])],
        instances=[
            Instance(
                name=i["name"],
                id=i["id"],
                location=i.get("location", {}),
                variable=i.get("variable", False),
                custom_names=Names(**i.get("custom_names", {})),
                format_specific=i.get("format_specific", {}),
            )
            for i in d.get("instances", [])
        ],
        masters=[_masterFromDict(m) for m in d.get("masters", [])],
        glyphs=GlyphList(_glyphFromDict(g) for g in d.get("glyphs", [])),
        note=d.get("note"),
        custom_ot_values=d.get("custom_ot_values", {}),
        variation_sequences={
            (selector, codepoint): name
            for selector, codepoint, name in d.get("variation_sequences", [])
        },
        features=Features(
            classes=features.get("classes", {}),
            prefixes=features.get("prefixes", {}),
            features=[tuple(f) for f in features.get("features", [])],
        ),
        first_kern_groups=d.get("first_kern_groups", {}),
        second_kern_groups=d.get("second_kern_groups", {}),
        format_specific=d.get("format_specific", {}),
    )


def dumps(font):
    try:
        return json.dumps(fontToDict(font), indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise JsonSerializeError(str(e)) from e


def loads(text):
    try:
        return fontFromDict(json.loads(text))
    except (ValueError, KeyError, TypeError) as e:
        raise JsonSerializeError(str(e)) from e


class BabelfontJsonConvertor(BaseConvertor):
    suffix = ".babelfont"

    def _load(self):
        try:
            with open(self.path, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise BabelfontIOError(str(e)) from e
        return loads(text)

    def _save(self, font):
        # serialize fully before touching the file
        text = dumps(font)
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise BabelfontIOError(str(e)) from e
