"""Vendor extractor implementations."""

from .centar_zlata import CentarZlataExtractor
from .elementum import ElementumExtractor
from .gvs_croatia import GvsCroatiaExtractor
from .moro import MoroExtractor
from .plemenit import PlemenitExtractor

__all__ = [
    "GvsCroatiaExtractor",
    "PlemenitExtractor",
    "MoroExtractor",
    "CentarZlataExtractor",
    "ElementumExtractor",
]
