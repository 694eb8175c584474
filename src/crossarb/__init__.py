"""
Cross-Exchange Arbitrage Simulator.

Detects bid/ask mispricings between exchanges in historical or
generated tick data, simulates impact-aware execution, and reports
performance metrics. Action generation can be delegated to a
pluggable asynchronous scoring oracle.
"""

__version__ = "1.0.0"
