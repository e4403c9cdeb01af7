from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Dict

# language -> string
I18NDictionary = Dict[str, str]


@dataclass
class Names:
    family_name: I18NDictionary = field(default_factory=dict)
    subfamily_name: I18NDictionary = field(default_factory=dict)
    unique_id: I18NDictionary = field(default_factory=dict)
    full_name: I18NDictionary = field(default_factory=dict)
    version: I18NDictionary = field(default_factory=dict)
    postscript_name: I18NDictionary = field(default_factory=dict)
    trademark: I18NDictionary = field(default_factory=dict)
    manufacturer: I18NDictionary = field(default_factory=dict)
    designer: I18NDictionary = field(default_factory=dict)
    description: I18NDictionary = field(default_factory=dict)
    manufacturer_url: I18NDictionary = field(default_factory=dict)
    designer_url: I18NDictionary = field(default_factory=dict)
    license: I18NDictionary = field(default_factory=dict)
    license_url: I18NDictionary = field(default_factory=dict)
    typographic_family: I18NDictionary = field(default_factory=dict)
    typographic_subfamily: I18NDictionary = field(default_factory=dict)
    copyright: I18NDictionary = field(default_factory=dict)
    sample_text: I18NDictionary = field(default_factory=dict)

    @classmethod
    def fieldNames(cls):
        return [f.name for f in fields(cls)]
