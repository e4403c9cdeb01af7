import importlib
import logging
from inspect import getfullargspec, isclass

from babelfont.constants import FILTERS_KEY
from babelfont.util import _loadPluginFromString

from .base import BaseFilter
from .decomposeComponentReferences import DecomposeComponentReferencesFilter
from .dropAxis import DropAxisFilter
from .dropFeatures import DropFeaturesFilter
from .dropGuides import DropGuidesFilter
from .dropIncompatiblePaths import DropIncompatiblePathsFilter
from .dropInstances import DropInstancesFilter
from .dropKerning import DropKerningFilter
from .dropSparseMasters import DropSparseMastersFilter
from .dropVariations import DropVariationsFilter
from .renameGlyphs import RenameGlyphsFilter
from .resolveIncludes import ResolveIncludesFilter
from .retainGlyphs import RetainGlyphsFilter
from .scaleUPM import ScaleUPMFilter
from .subsetLayout import SubsetLayoutFilter

__all__ = [
    "BaseFilter",
    "DecomposeComponentReferencesFilter",
    "DropAxisFilter",
    "DropFeaturesFilter",
    "DropGuidesFilter",
    "DropIncompatiblePathsFilter",
    "DropInstancesFilter",
    "DropKerningFilter",
    "DropSparseMastersFilter",
    "DropVariationsFilter",
    "RenameGlyphsFilter",
    "ResolveIncludesFilter",
    "RetainGlyphsFilter",
    "ScaleUPMFilter",
    "SubsetLayoutFilter",
    "FILTERS_KEY",
    "getFilterClass",
    "loadFilterFromString",
    "loadFilters",
]

logger = logging.getLogger(__name__)


def getFilterClass(filterName, pkg="babelfont.filters"):
    """Given a filter name, import and return the filter class.
    By default, filter modules are searched within the ``babelfont.filters``
    package.
    """
    # if filter name is 'Foo Bar', the module should be called 'fooBar'
    filterName = filterName.replace(" ", "")
    moduleName = filterName[0].lower() + filterName[1:]
    module = importlib.import_module(".".join([pkg, moduleName]))
    # if filter name is 'Foo Bar', the class should be called 'FooBarFilter'
    className = filterName[0].upper() + filterName[1:]
    if not className.endswith("Filter"):
        className += "Filter"
    return getattr(module, className)


def loadFilters(font):
    """Parse custom filters from the font's format-specific data. Return two
    lists, one for the filters that are applied before the default pipeline,
    another for the filters that are applied after it.
    """
    preFilters, postFilters = [], []
    for filterDict in font.format_specific.get(FILTERS_KEY, []):
        namespace = filterDict.get("namespace", "babelfont.filters")
        try:
            filterClass = getFilterClass(filterDict["name"], namespace)
        except (ImportError, AttributeError):
            from pprint import pformat

            logger.exception("Failed to load filter: %s", pformat(filterDict))
            continue
        filterObj = filterClass(
            *filterDict.get("args", []),
            include=filterDict.get("include"),
            exclude=filterDict.get("exclude"),
            pre=filterDict.get("pre", False),
            **filterDict.get("kwargs", {}),
        )
        if filterObj.pre:
            preFilters.append(filterObj)
        else:
            postFilters.append(filterObj)
    return preFilters, postFilters


def isValidFilter(klass):
    """Return True if 'klass' is a valid filter class.
    A valid filter class is a class (of type 'type'), that has
    a '__call__' (bound method), with the signature matching the same method
    from the BaseFilter class:

        def __call__(self, font)
    """
    if not isclass(klass):
        logger.error(f"{klass!r} is not a class")
        return False
    if not callable(klass):
        logger.error(f"{klass!r} is not callable")
        return False
    if getfullargspec(klass.__call__).args != getfullargspec(BaseFilter.__call__).args:
        logger.error(f"{klass!r} '__call__' method has incorrect signature")
        return False
    return True


def loadFilterFromString(spec):
    """Take a string specifying a filter class to load (either a built-in
    filter or one defined in an external, user-defined module), initialize it
    with given options and return the filter object.

    The string must conform to the following notation:
    - an optional python module, followed by '::'
    - a required class name; the class must have a method called 'filter'
      with the same signature as the BaseFilter.
    - an optional list of keyword-only arguments enclosed by parentheses

    Raises ValueError if the string doesn't conform to this notation;
    TypeError if imported name is not a filter class.

    Examples:

      >>> loadFilterFromString("DropKerningFilter")
      DropKerningFilter()
      >>> loadFilterFromString("ScaleUPMFilter(unitsPerEm=2048)")
      ScaleUPMFilter(unitsPerEm=2048)
    """
    return _loadPluginFromString(spec, "babelfont.filters", isValidFilter)
