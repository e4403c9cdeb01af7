from enum import Enum

BABELFONT_PREFIX = "com.github.simoncozens.babelfont."
UFO_LIB_KEY = BABELFONT_PREFIX + "ufo.lib"

FILTERS_KEY = BABELFONT_PREFIX + "filters"

DEFAULT_UPM = 1000
NOTDEF = ".notdef"

# tag assigned to the n-th smart component axis while interpolating
SYNTHETIC_AXIS_TAG = "x{:03d}"

# language key for an axis or font name in the default language
DEFAULT_LANGUAGE = "dflt"

KERN1_PREFIX = "public.kern1."
KERN2_PREFIX = "public.kern2."
GROUP_PREFIX = "@"


class MetricType(Enum):
    XHeight = "xHeight"
    CapHeight = "capHeight"
    Ascender = "ascender"
    Descender = "descender"
    ItalicAngle = "italicAngle"
    HheaAscender = "hheaAscender"
    HheaDescender = "hheaDescender"
    HheaLineGap = "hheaLineGap"
    WinAscent = "winAscent"
    WinDescent = "winDescent"
    TypoAscender = "typoAscender"
    TypoDescender = "typoDescender"
    TypoLineGap = "typoLineGap"
    SubscriptXSize = "subscriptXSize"
    SubscriptYSize = "subscriptYSize"
    SubscriptXOffset = "subscriptXOffset"
    SubscriptYOffset = "subscriptYOffset"
    SuperscriptXSize = "superscriptXSize"
    SuperscriptYSize = "superscriptYSize"
    SuperscriptXOffset = "superscriptXOffset"
    SuperscriptYOffset = "superscriptYOffset"
    StrikeoutSize = "strikeoutSize"
    StrikeoutPosition = "strikeoutPosition"
    UnderlinePosition = "underlinePosition"
    UnderlineThickness = "underlineThickness"
    HheaCaretSlopeRise = "hheaCaretSlopeRise"
    HheaCaretSlopeRun = "hheaCaretSlopeRun"
    HheaCaretOffset = "hheaCaretOffset"


# metrics which are not measured in font units and so do not scale with UPM
UNSCALED_METRICS = frozenset(
    [
        MetricType.ItalicAngle.value,
        MetricType.HheaCaretSlopeRise.value,
        MetricType.HheaCaretSlopeRun.value,
    ]
)
