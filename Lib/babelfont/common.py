from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0
    angle: float = 0.0


@dataclass
class Color:
    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255


@dataclass
class Anchor:
    name: str
    x: float = 0.0
    y: float = 0.0
    format_specific: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Guide:
    pos: Position = field(default_factory=Position)
    name: Optional[str] = None
    color: Optional[Color] = None
    format_specific: Dict[str, Any] = field(default_factory=dict)
