"""Designspace + UFO sources, read and written with designspaceLib and ufoLib2."""
import datetime
import logging
import os
import re

import ufoLib2
from fontTools.designspaceLib import DesignSpaceDocument, DesignSpaceDocumentError
from ufoLib2.objects import Anchor as UfoAnchor
from ufoLib2.objects import Guideline

from babelfont.axis import Axis
from babelfont.common import Anchor, Color, Guide, Position
from babelfont.constants import (
    BABELFONT_PREFIX,
    DEFAULT_LANGUAGE,
    FILTERS_KEY,
    GROUP_PREFIX,
    KERN1_PREFIX,
    KERN2_PREFIX,
    UFO_LIB_KEY,
    MetricType,
)
from babelfont.convertors import BaseConvertor
from babelfont.errors import DesignSpaceLoad, DesignSpaceSave, UfoColor, UfoLoad
from babelfont.features import Features
from babelfont.font import Font
from babelfont.glyph import Glyph, GlyphCategory
from babelfont.instance import Instance
from babelfont.layer import AssociatedWithMaster, DefaultForMaster, Layer
from babelfont.master import Master
from babelfont.util import location_to_string

logger = logging.getLogger(__name__)

UFO_GROUPS_KEY = BABELFONT_PREFIX + "ufo.groups"
UFO_GLYPH_LIB_KEY = BABELFONT_PREFIX + "ufo.glyph.lib"

GLYPH_ORDER_KEY = "public.glyphOrder"
POSTSCRIPT_NAMES_KEY = "public.postscriptNames"
SKIP_EXPORT_KEY = "public.skipExportGlyphs"
CATEGORIES_KEY = "public.openTypeCategories"
# lib keys rebuilt from the model on save
MODELLED_LIB_KEYS = (GLYPH_ORDER_KEY, POSTSCRIPT_NAMES_KEY, SKIP_EXPORT_KEY, CATEGORIES_KEY)

HEAD_CREATED_FORMAT = "%Y/%m/%d %H:%M:%S"

# fontinfo attribute -> metric name
INFO_METRICS = {
    "xHeight": MetricType.XHeight,
    "capHeight": MetricType.CapHeight,
    "ascender": MetricType.Ascender,
    "descender": MetricType.Descender,
    "italicAngle": MetricType.ItalicAngle,
    "openTypeHheaAscender": MetricType.HheaAscender,
    "openTypeHheaDescender": MetricType.HheaDescender,
    "openTypeHheaLineGap": MetricType.HheaLineGap,
    "openTypeHheaCaretSlopeRise": MetricType.HheaCaretSlopeRise,
    "openTypeHheaCaretSlopeRun": MetricType.HheaCaretSlopeRun,
    "openTypeHheaCaretOffset": MetricType.HheaCaretOffset,
    "openTypeOS2WinAscent": MetricType.WinAscent,
    "openTypeOS2WinDescent": MetricType.WinDescent,
    "openTypeOS2TypoAscender": MetricType.TypoAscender,
    "openTypeOS2TypoDescender": MetricType.TypoDescender,
    "openTypeOS2TypoLineGap": MetricType.TypoLineGap,
    "openTypeOS2SubscriptXSize": MetricType.SubscriptXSize,
    "openTypeOS2SubscriptYSize": MetricType.SubscriptYSize,
    "openTypeOS2SubscriptXOffset": MetricType.SubscriptXOffset,
    "openTypeOS2SubscriptYOffset": MetricType.SubscriptYOffset,
    "openTypeOS2SuperscriptXSize": MetricType.SuperscriptXSize,
    "openTypeOS2SuperscriptYSize": MetricType.SuperscriptYSize,
    "openTypeOS2SuperscriptXOffset": MetricType.SuperscriptXOffset,
    "openTypeOS2SuperscriptYOffset": MetricType.SuperscriptYOffset,
    "openTypeOS2StrikeoutSize": MetricType.StrikeoutSize,
    "openTypeOS2StrikeoutPosition": MetricType.StrikeoutPosition,
    "postscriptUnderlinePosition": MetricType.UnderlinePosition,
    "postscriptUnderlineThickness": MetricType.UnderlineThickness,
}

# fontinfo attribute -> Names field
INFO_NAMES = {
    "familyName": "family_name",
    "styleName": "subfamily_name",
    "copyright": "copyright",
    "trademark": "trademark",
    "postscriptFontName": "postscript_name",
    "postscriptFullName": "full_name",
    "openTypeNameDesigner": "designer",
    "openTypeNameDesignerURL": "designer_url",
    "openTypeNameManufacturer": "manufacturer",
    "openTypeNameManufacturerURL": "manufacturer_url",
    "openTypeNameLicense": "license",
    "openTypeNameLicenseURL": "license_url",
    "openTypeNameDescription": "description",
    "openTypeNameVersion": "version",
    "openTypeNameUniqueID": "unique_id",
    "openTypeNamePreferredFamilyName": "typographic_family",
    "openTypeNamePreferredSubfamilyName": "typographic_subfamily",
    "openTypeNameSampleText": "sample_text",
}

CATEGORIES = {
    "base": GlyphCategory.Base,
    "mark": GlyphCategory.Mark,
    "ligature": GlyphCategory.Ligature,
}


# Loading


def _openUfo(path):
    try:
        return ufoLib2.Font.open(path)
    except Exception as e:
        raise UfoLoad(f"Could not open {path}: {e}") from e


def _parseColor(value):
    if value is None:
        return None
    try:
        r, g, b, a = (float(c) for c in value.split(","))
    except ValueError as e:
        raise UfoColor(f"Could not parse color {value!r}") from e
    return Color(*(round(c * 255) for c in (r, g, b, a)))


def _formatColor(color):
    if color is None:
        return None
    return ",".join(f"{c / 255:g}" for c in (color.r, color.g, color.b, color.a))


def _guidesFromUfo(guidelines):
    return [
        Guide(
            Position(g.x or 0, g.y or 0, g.angle or 0),
            name=g.name,
            color=_parseColor(g.color),
        )
        for g in guidelines
    ]


def _groupSide(name, groups, prefix):
    if name in groups and name.startswith(prefix):
        return GROUP_PREFIX + name[len(prefix) :]
    return name


class _SourceReader:
    """Builds a Font from (master, ufo, layer name, location) sources. The
    first is the default master; sources with a layer name are intermediate
    layers at the given location."""

    def __init__(self, font, sources):
        self.font = font
        self.sources = sources

    def read(self):
        font = self.font
        defaultUfo = self.sources[0][1]
        self._readInfo(defaultUfo)
        self._readGroups(defaultUfo)

        glyphNames = {}
        for _, ufo, layerName, _ in self.sources:
            layer = ufo.layers[layerName] if layerName else ufo.layers.defaultLayer
            glyphNames.update(dict.fromkeys(layer.keys()))
        for name in glyphNames:
            font.glyphs.append(self._readGlyph(name, defaultUfo))
        font.sort_glyphs(defaultUfo.lib.get(GLYPH_ORDER_KEY))
        return font

    def _readInfo(self, ufo):
        font = self.font
        info = ufo.info
        font.upm = info.unitsPerEm or font.upm
        font.version = (info.versionMajor or 1, info.versionMinor or 0)
        if info.openTypeHeadCreated:
            font.date = datetime.datetime.strptime(
                info.openTypeHeadCreated, HEAD_CREATED_FORMAT
            )
        for attr, field in INFO_NAMES.items():
            value = getattr(info, attr)
            if value:
                getattr(font.names, field)[DEFAULT_LANGUAGE] = value
        font.note = info.note
        font.features = Features.from_fea(ufo.features.text or "")
        lib = {k: v for k, v in ufo.lib.items() if k not in MODELLED_LIB_KEYS}
        if lib:
            font.format_specific[UFO_LIB_KEY] = lib
        if FILTERS_KEY in lib:
            font.format_specific[FILTERS_KEY] = lib[FILTERS_KEY]

    def _readGroups(self, ufo):
        font = self.font
        other = {}
        for name, members in ufo.groups.items():
            if name.startswith(KERN1_PREFIX):
                font.first_kern_groups[name[len(KERN1_PREFIX) :]] = list(members)
            elif name.startswith(KERN2_PREFIX):
                font.second_kern_groups[name[len(KERN2_PREFIX) :]] = list(members)
            else:
                other[name] = list(members)
        if other:
            font.format_specific[UFO_GROUPS_KEY] = other

    def _readGlyph(self, name, defaultUfo):
        lib = defaultUfo.lib
        glyph = Glyph(
            name,
            production_name=lib.get(POSTSCRIPT_NAMES_KEY, {}).get(name),
            exported=name not in lib.get(SKIP_EXPORT_KEY, ()),
            category=CATEGORIES.get(
                lib.get(CATEGORIES_KEY, {}).get(name), GlyphCategory.Unknown
            ),
        )
        for master, ufo, layerName, location in self.sources:
            ufoLayer = ufo.layers[layerName] if layerName else ufo.layers.defaultLayer
            if name not in ufoLayer:
                continue
            ufoGlyph = ufoLayer[name]
            if not glyph.codepoints:
                glyph.codepoints = list(ufoGlyph.unicodes)
            if layerName:
                layer = Layer(
                    name=layerName,
                    id=f"{master.id}.{layerName}",
                    master=AssociatedWithMaster(master.id),
                    location=dict(location),
                )
            else:
                layer = Layer(id=master.id, master=DefaultForMaster(master.id))
            self._readLayer(layer, ufoGlyph)
            glyph.layers.append(layer)
        return glyph

    def _readLayer(self, layer, ufoGlyph):
        layer.width = ufoGlyph.width
        ufoGlyph.drawPoints(layer.getPointPen())
        layer.anchors = [Anchor(a.name, a.x, a.y) for a in ufoGlyph.anchors]
        layer.guides = _guidesFromUfo(ufoGlyph.guidelines)
        if ufoGlyph.lib:
            layer.format_specific[UFO_GLYPH_LIB_KEY] = dict(ufoGlyph.lib)

    def readMasterData(self, master, ufo):
        info = ufo.info
        for attr, metric in INFO_METRICS.items():
            value = getattr(info, attr)
            if value is not None:
                master.metrics[metric.value] = value
        master.guides = _guidesFromUfo(info.guidelines or [])
        groups = ufo.groups
        for (left, right), value in ufo.kerning.items():
            pair = (
                _groupSide(left, groups, KERN1_PREFIX),
                _groupSide(right, groups, KERN2_PREFIX),
            )
            master.kerning[pair] = value


class DesignspaceConvertor(BaseConvertor):
    suffix = ".designspace"

    def _load(self):
        try:
            doc = DesignSpaceDocument.fromfile(self.path)
        except (DesignSpaceDocumentError, OSError) as e:
            raise DesignSpaceLoad(str(e)) from e
        root = os.path.realpath(os.path.dirname(os.path.abspath(self.path)))

        font = Font()
        tags = {}
        for dsAxis in doc.axes:
            values = getattr(dsAxis, "values", None)
            axis = Axis(
                name=dsAxis.name,
                tag=dsAxis.tag,
                min=min(values) if values else dsAxis.minimum,
                default=dsAxis.default,
                max=max(values) if values else dsAxis.maximum,
                map=[tuple(pair) for pair in dsAxis.map] or None,
                hidden=dsAxis.hidden,
                localized_names={
                    k: v for k, v in dsAxis.labelNames.items() if k != "en"
                },
            )
            tags[dsAxis.name] = dsAxis.tag
            font.axes.append(axis)

        default = doc.findDefault()
        ufos = {}
        sources = []
        layerSources = []
        owners = {}
        for source in doc.sources:
            if source.path is None:
                raise DesignSpaceLoad(f"Source {source.name} has no filename")
            path = os.path.realpath(source.path)
            if os.path.commonpath([root, path]) != root:
                raise DesignSpaceLoad(
                    f"Source {source.filename} is outside the project root {root}"
                )
            if path not in ufos:
                ufos[path] = _openUfo(path)
            location = {
                tags[name]: value
                for name, value in source.getFullDesignLocation(doc).items()
                if name in tags
            }
            if source.layerName:
                layerSources.append((path, source.layerName, location))
                continue
            master = Master(
                name=source.styleName or source.name or source.filename,
                id=source.name or source.filename,
                location=location,
            )
            owners[path] = master
            font.masters.append(master)
            entry = (master, ufos[path], None, None)
            if source is default:
                sources.insert(0, entry)
            else:
                sources.append(entry)
        if not sources:
            raise DesignSpaceLoad("No master sources found")

        # a layer source becomes an intermediate layer of the master whose
        # UFO holds it
        for path, layerName, location in layerSources:
            owner = owners.get(path)
            if owner is None:
                raise DesignSpaceLoad(f"Layer {layerName} has no master in {path}")
            sources.append((owner, ufos[path], layerName, location))

        reader = _SourceReader(font, sources)
        reader.read()
        for path, master in owners.items():
            reader.readMasterData(master, ufos[path])

        for dsInstance in doc.instances:
            location = {
                tags[name]: value
                for name, value in dsInstance.getFullDesignLocation(doc).items()
                if name in tags
            }
            instance = Instance(
                name=dsInstance.name or dsInstance.styleName or location_to_string(location),
                location=location,
            )
            if dsInstance.familyName:
                instance.custom_names.family_name[DEFAULT_LANGUAGE] = dsInstance.familyName
            if dsInstance.styleName:
                instance.custom_names.subfamily_name[DEFAULT_LANGUAGE] = dsInstance.styleName
            font.instances.append(instance)
        return font

    def _save(self, font):
        directory = os.path.dirname(os.path.abspath(self.path))
        stem = os.path.splitext(os.path.basename(self.path))[0]
        doc = DesignSpaceDocument()
        names = {}
        for axis in font.axes:
            doc.addAxisDescriptor(
                name=axis.name,
                tag=axis.tag,
                minimum=axis.min,
                default=axis.default,
                maximum=axis.max,
                map=list(axis.map or []),
                hidden=axis.hidden,
            )
            names[axis.tag] = axis.name

        def dsLocation(location):
            return {names[tag]: value for tag, value in location.items() if tag in names}

        writer = _UfoWriter(font)
        try:
            for master in font.masters:
                filename = f"{stem}-{_safeName(master.name)}.ufo"
                ufo, sparseLayers = writer.masterUfo(master)
                ufo.save(os.path.join(directory, filename), overwrite=True)
                doc.addSourceDescriptor(
                    filename=filename,
                    name=master.id,
                    styleName=master.name,
                    designLocation=dsLocation(master.location),
                )
                for layerName, location in sparseLayers:
                    doc.addSourceDescriptor(
                        filename=filename,
                        name=f"{master.id}.{layerName}",
                        layerName=layerName,
                        designLocation=dsLocation(location),
                    )
            for instance in font.instances:
                doc.addInstanceDescriptor(
                    name=instance.name,
                    familyName=instance.custom_names.family_name.get(DEFAULT_LANGUAGE),
                    styleName=instance.custom_names.subfamily_name.get(DEFAULT_LANGUAGE),
                    designLocation=dsLocation(instance.location),
                )
            doc.write(self.path)
        except (DesignSpaceDocumentError, OSError) as e:
            raise DesignSpaceSave(str(e)) from e


class UFOConvertor(BaseConvertor):
    """A single UFO, read as a font with one master and no axes."""

    suffix = ".ufo"

    def _load(self):
        ufo = _openUfo(self.path)
        font = Font()
        master = Master(name=ufo.info.styleName or "Regular", id="master01")
        font.masters.append(master)
        reader = _SourceReader(font, [(master, ufo, None, None)])
        reader.read()
        reader.readMasterData(master, ufo)
        return font

    def _save(self, font):
        master = font.default_master()
        if master is None:
            raise DesignSpaceSave("No default master to write to UFO")
        if len(font.masters) > 1:
            logger.warning("Only the default master is written to %s", self.path)
        ufo, _ = _UfoWriter(font).masterUfo(master)
        try:
            ufo.save(self.path, overwrite=True)
        except OSError as e:
            raise DesignSpaceSave(str(e)) from e


# Saving


def _safeName(name):
    return re.sub(r"[^\w.-]+", "", name.replace(" ", "")) or "Master"


class _UfoWriter:
    def __init__(self, font):
        self.font = font

    def masterUfo(self, master):
        """Return the UFO for a master and the (layer name, location) of its
        sparse layers."""
        font = self.font
        ufo = ufoLib2.Font()
        self._writeInfo(ufo, master)
        self._writeGroupsAndKerning(ufo, master)
        ufo.features.text = font.features.to_fea()
        self._writeLib(ufo)

        sparseLayers = []
        for glyph in font.glyphs:
            for layer in glyph.layers:
                if layer.master == DefaultForMaster(master.id):
                    ufoLayer = ufo.layers.defaultLayer
                elif (
                    layer.master == AssociatedWithMaster(master.id)
                    and layer.location is not None
                    and not layer.is_background
                ):
                    layerName = layer.name or location_to_string(layer.location)
                    if layerName not in ufo.layers:
                        ufo.newLayer(layerName)
                        location = dict(master.location)
                        location.update(layer.location)
                        sparseLayers.append((layerName, location))
                    ufoLayer = ufo.layers[layerName]
                else:
                    continue
                self._writeGlyph(ufoLayer.newGlyph(glyph.name), glyph, layer)
        return ufo, sparseLayers

    def _writeInfo(self, ufo, master):
        font = self.font
        info = ufo.info
        info.unitsPerEm = font.upm
        info.versionMajor, info.versionMinor = font.version
        info.openTypeHeadCreated = font.date.strftime(HEAD_CREATED_FORMAT)
        info.note = font.note
        for attr, field in INFO_NAMES.items():
            value = getattr(font.names, field).get(DEFAULT_LANGUAGE)
            if value:
                setattr(info, attr, value)
        info.styleName = master.name
        for attr, metric in INFO_METRICS.items():
            if metric.value in master.metrics:
                setattr(info, attr, master.metrics[metric.value])
        info.guidelines = [
            Guideline(
                x=g.pos.x,
                y=g.pos.y,
                angle=g.pos.angle % 360,
                name=g.name,
                color=_formatColor(g.color),
            )
            for g in master.guides
        ]

    def _writeGroupsAndKerning(self, ufo, master):
        font = self.font
        for name, members in font.format_specific.get(UFO_GROUPS_KEY, {}).items():
            ufo.groups[name] = list(members)
        for name, members in font.first_kern_groups.items():
            ufo.groups[KERN1_PREFIX + name] = list(members)
        for name, members in font.second_kern_groups.items():
            ufo.groups[KERN2_PREFIX + name] = list(members)
        for (left, right), value in master.kerning.items():
            if left.startswith(GROUP_PREFIX):
                left = KERN1_PREFIX + left[len(GROUP_PREFIX) :]
            if right.startswith(GROUP_PREFIX):
                right = KERN2_PREFIX + right[len(GROUP_PREFIX) :]
            ufo.kerning[left, right] = value

    def _writeLib(self, ufo):
        font = self.font
        ufo.lib.update(font.format_specific.get(UFO_LIB_KEY, {}))
        ufo.lib[GLYPH_ORDER_KEY] = font.glyphs.keys()
        productionNames = {
            g.name: g.production_name for g in font.glyphs if g.production_name
        }
        if productionNames:
            ufo.lib[POSTSCRIPT_NAMES_KEY] = productionNames
        skipped = [g.name for g in font.glyphs if not g.exported]
        if skipped:
            ufo.lib[SKIP_EXPORT_KEY] = skipped
        categories = {
            g.name: g.category.value
            for g in font.glyphs
            if g.category is not GlyphCategory.Unknown
        }
        if categories:
            ufo.lib[CATEGORIES_KEY] = categories

    def _writeGlyph(self, ufoGlyph, glyph, layer):
        ufoGlyph.width = layer.width
        ufoGlyph.unicodes = list(glyph.codepoints)
        if any(c.location for c in layer.components()):
            logger.warning(
                "Smart component locations in %s cannot be written to UFO", glyph.name
            )
        layer.drawPoints(ufoGlyph.getPointPen())
        ufoGlyph.anchors = [UfoAnchor(x=a.x, y=a.y, name=a.name) for a in layer.anchors]
        ufoGlyph.guidelines = [
            Guideline(x=g.pos.x, y=g.pos.y, angle=g.pos.angle % 360, name=g.name)
            for g in layer.guides
        ]
        ufoGlyph.lib.update(layer.format_specific.get(UFO_GLYPH_LIB_KEY, {}))
