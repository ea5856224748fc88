"""
Export Package

KML rendering of auction listings.
"""

from .kml_renderer import (
    KML_CONTENT_TYPE,
    KmlRenderer,
    MarkerType,
    classify_marker,
    content_disposition,
)

__all__ = [
    "KML_CONTENT_TYPE",
    "KmlRenderer",
    "MarkerType",
    "classify_marker",
    "content_disposition",
]
