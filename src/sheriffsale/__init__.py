"""
Sheriff Sale Package

Parsing, reconciliation, enrichment and KML export of sheriff sale listings.
"""
