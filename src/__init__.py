"""
Sheriff Sale Listings - Core Package

Extraction of Allegheny County sheriff sale listings from the published bid
and postponement lists, enrichment and map export.
"""

__version__ = "0.1.0"
