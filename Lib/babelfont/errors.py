class Error(Exception):
    """Base exception class for all babelfont errors."""

    pass


class UnknownFileType(Error):
    """Raised when no convertor recognizes the file's extension."""

    def __init__(self, path):
        super().__init__(f"Unknown file type: {path}")
        self.path = path


class WrongConvertor(Error):
    """Raised when an explicitly requested convertor cannot handle the file."""

    def __init__(self, path):
        super().__init__(f"Wrong convertor for file: {path}")
        self.path = path


class BabelfontIOError(Error):
    """Raised when reading or writing a file fails."""

    pass


class PlistParse(Error):
    pass


class DesignSpaceLoad(Error):
    pass


class DesignSpaceSave(Error):
    pass


class UfoLoad(Error):
    pass


class UfoName(Error):
    pass


class UfoColor(Error):
    pass


class VfbLoad(Error):
    pass


class NoDefaultMaster(Error):
    """Raised when a variable font has no master at the default location."""

    def __init__(self, message="Could not find default master"):
        super().__init__(message)


class MasterNotFound(Error):
    def __init__(self, name):
        super().__init__(f"Master not found: {name}")
        self.name = name


class GlyphNotFound(Error):
    def __init__(self, glyph):
        super().__init__(f"Glyph not found: {glyph}")
        self.glyph = glyph


class IllDefinedAxis(Error):
    def __init__(self, axis, reason):
        super().__init__(f"Ill-defined axis {axis}: {reason}")
        self.axis = axis
        self.reason = reason


class BadPath(Error):
    """Raised when a path's nodes break the node sequence rules."""

    pass


class GlyphNotInterpolatable(Error):
    def __init__(self, glyph, reason):
        super().__init__(f"Glyph {glyph} is not interpolatable: {reason}")
        self.glyph = glyph
        self.reason = reason


class UnknownSmartComponentAxis(Error):
    def __init__(self, axis, layer):
        super().__init__(f"Unknown smart component axis {axis!r} in layer {layer}")
        self.axis = axis
        self.layer = layer


class FilterError(Error):
    """Raised for any failure inside a filter."""

    pass


class VariationModelError(Error):
    pass


class DeltaError(Error):
    pass


class JsonSerializeError(Error):
    pass


class NeedsDecomposition(Error):
    """Raised when a metric is requested on a layer that still has components."""

    def __init__(self, message="Layer contains components; decompose first"):
        super().__init__(message)
