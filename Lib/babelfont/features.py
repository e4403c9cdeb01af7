from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from io import StringIO
from typing import Dict, Iterable, List, Optional, Tuple

from fontTools.feaLib.parser import Parser

logger = logging.getLogger(__name__)

ANONYMOUS_PREFIX = "anonymous"


def featureIncludeDir(source: Optional[str]) -> Optional[str]:
    """Return the directory feature `include` statements of a font loaded
    from source are resolved against: the one containing the source."""
    if not source:
        return None
    return os.path.dirname(os.path.normpath(source)) or "."


@dataclass
class Features:
    """OpenType feature code, split into glyph classes, free-standing
    prefix code and feature blocks."""

    # class name (without "@") -> space-separated glyph names
    classes: Dict[str, str] = field(default_factory=dict)
    # prefix name -> feature code
    prefixes: Dict[str, str] = field(default_factory=dict)
    # (feature tag, code)
    features: List[Tuple[str, str]] = field(default_factory=list)

    def to_fea(self) -> str:
        fea = ""
        for name, glyphs in self.classes.items():
            fea += f"@{name} = [{glyphs}];\n"
        for name, code in self.prefixes.items():
            if name != ANONYMOUS_PREFIX:
                fea += f"# Prefix: {name}\n"
            fea += code + "\n"
        for tag, code in self.features:
            fea += f"feature {tag} {{\n{code}\n}} {tag};\n"
        return fea

    @classmethod
    def from_fea(cls, fea: str) -> "Features":
        return cls(prefixes={ANONYMOUS_PREFIX: fea})

    def is_empty(self) -> bool:
        return not (
            self.classes or self.features or any(p.strip() for p in self.prefixes.values())
        )

    def parse(self, glyphNames: Optional[Iterable[str]] = None, includeDir=None):
        """Parse the feature code into a fontTools.feaLib AST.

        Included files are looked up in includeDir, or in the current
        working directory if it is not given.
        """
        includeDir = os.path.normpath(includeDir) if includeDir else None
        return Parser(
            StringIO(self.to_fea()),
            glyphNames=set(glyphNames) if glyphNames is not None else (),
            includeDir=includeDir,
        ).parse()
