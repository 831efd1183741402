"""Built-in providers, one per supported format."""

from __future__ import annotations

from .hocon import HOCONProvider
from .properties import PropertiesProvider
from .structured import JSONProvider, TOMLProvider, YAMLProvider
from .xml_properties import XMLProvider

__all__ = [
    "HOCONProvider",
    "JSONProvider",
    "PropertiesProvider",
    "TOMLProvider",
    "XMLProvider",
    "YAMLProvider",
]
