"""Agent module: synthetic communications and scoring-oracle adapters."""

from crossarb.agents.communication import CommunicationSynthesizer
from crossarb.agents.oracle import ConfidenceOracle, LazyOracle, SimulatorOracle


__all__ = [
    "CommunicationSynthesizer",
    "ConfidenceOracle",
    "LazyOracle",
    "SimulatorOracle",
]
