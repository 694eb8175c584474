"""Configuration module for the arbitrage simulator."""

from crossarb.config.constants import (
    CAPITAL_VOLUME_MULTIPLE,
    LIQUIDITY_VOLUME_SCALE,
    SIZING_IMPACT_FACTOR,
    SNAPSHOT_VERSION,
)
from crossarb.config.settings import Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "CAPITAL_VOLUME_MULTIPLE",
    "LIQUIDITY_VOLUME_SCALE",
    "SIZING_IMPACT_FACTOR",
    "SNAPSHOT_VERSION",
]
