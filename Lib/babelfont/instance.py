from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict

from babelfont.names import Names


@dataclass
class Instance:
    name: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    # designspace coordinates
    location: Dict[str, float] = field(default_factory=dict)
    variable: bool = False
    custom_names: Names = field(default_factory=Names)
    format_specific: Dict[str, Any] = field(default_factory=dict)
