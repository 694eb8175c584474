"""Strategy module for opportunity detection and market impact."""

from crossarb.strategy.impact import MarketImpactModel
from crossarb.strategy.opportunity import OpportunityDetector


__all__ = [
    "MarketImpactModel",
    "OpportunityDetector",
]
