"""Reading and writing fonts in the supported source formats."""
import logging
import os

from babelfont.errors import UnknownFileType, WrongConvertor

logger = logging.getLogger(__name__)


class BaseConvertor:
    """A convertor maps between one file format and the Font model.

    Subclasses set ``suffix`` and implement ``_load`` and/or ``_save``.
    """

    suffix = None

    def __init__(self, path):
        self.path = os.fspath(path)

    @classmethod
    def can_handle(cls, path):
        return os.fspath(path).lower().endswith(cls.suffix)

    @classmethod
    def can_load(cls, path):
        return cls.can_handle(path) and hasattr(cls, "_load")

    @classmethod
    def can_save(cls, path):
        return cls.can_handle(path) and hasattr(cls, "_save")

    def load(self):
        font = self._load()
        font.source = self.path
        return font

    def save(self, font):
        self._save(font)


def _convertors():
    from babelfont.convertors.babelfontJson import BabelfontJsonConvertor
    from babelfont.convertors.designspace import DesignspaceConvertor, UFOConvertor

    return [BabelfontJsonConvertor, DesignspaceConvertor, UFOConvertor]


def _pick(path, convertor, test):
    if convertor is not None:
        if not test(convertor, path):
            raise WrongConvertor(path)
        return convertor
    for candidate in _convertors():
        if test(candidate, path):
            return candidate
    raise UnknownFileType(path)


def load(path, convertor=None):
    """Load a font from any supported format, picked by file extension
    unless a convertor class is given."""
    path = os.fspath(path)
    convertor = _pick(path, convertor, lambda c, p: c.can_load(p))
    logger.info("Loading %s with %s", path, convertor.__name__)
    return convertor(path).load()


def save(font, path, convertor=None):
    path = os.fspath(path)
    convertor = _pick(path, convertor, lambda c, p: c.can_save(p))
    logger.info("Saving %s with %s", path, convertor.__name__)
    convertor(path).save(font)
