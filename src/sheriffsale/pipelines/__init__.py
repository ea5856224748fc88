"""
Pipelines Package
"""

from .auction_pipeline import SheriffSalePipeline

__all__ = ["SheriffSalePipeline"]
