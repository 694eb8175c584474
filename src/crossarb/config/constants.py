"""
Simulation constants and default configuration values.

This module contains every tunable number used by the pipeline.
Values are organized by category so scaling constants are never
hardcoded inside the algorithms that use them.
"""

from typing import Final


# =============================================================================
# Sample Data Generation
# =============================================================================

DEFAULT_NUM_EXCHANGES: Final[int] = 3
DEFAULT_NUM_TIME_POINTS: Final[int] = 100

# BTC/USD reference price for generated ticks
DEFAULT_BASE_PRICE: Final[float] = 50_000.0

# One tick per exchange per minute
DEFAULT_TICK_INTERVAL_MS: Final[int] = 60_000

# Per-exchange price noise amplitude, multiplied by (exchange index + 1)
PRICE_NOISE_AMPLITUDE: Final[float] = 100.0

# Slow sinusoidal drift shared by all exchanges
PRICE_WAVE_AMPLITUDE: Final[float] = 200.0
PRICE_WAVE_PERIOD: Final[float] = 100.0

# Bid-ask spread as a fraction of price: base + uniform jitter
BOOK_SPREAD_BASE_PCT: Final[float] = 0.0005
BOOK_SPREAD_JITTER_PCT: Final[float] = 0.001

TICK_VOLUME_RANGE: Final[tuple[float, float]] = (1.0, 11.0)
TICK_LIQUIDITY_RANGE: Final[tuple[float, float]] = (0.1, 1.0)

EXCHANGE_NAME_PREFIX: Final[str] = "Exchange_"


# =============================================================================
# Opportunity Detection
# =============================================================================

# Maps liquidity_level in [0, 1] onto a tradeable unit-volume range
LIQUIDITY_VOLUME_SCALE: Final[float] = 100.0

# How fast the market is expected to close a detected gap
DECAY_RATE_RANGE: Final[tuple[float, float]] = (0.02, 0.07)


# =============================================================================
# Market Impact & Execution
# =============================================================================

# Per-exchange quadratic impact factor bounds
IMPACT_FACTOR_MIN: Final[float] = 0.001
IMPACT_FACTOR_MAX: Final[float] = 0.003

# k in q* = spread / (2k), the maximiser of q * spread - k * q^2
SIZING_IMPACT_FACTOR: Final[float] = 0.01

# Idle "hold" flavor actions after an executed opportunity
HOLD_PROBABILITY: Final[float] = 0.3
HOLD_OFFSET_MS: Final[int] = 30_000

AGENT_PREFIX: Final[str] = "Agent_"


# =============================================================================
# Performance Aggregation
# =============================================================================

# Notional capital base = average realizing volume * this multiple
CAPITAL_VOLUME_MULTIPLE: Final[float] = 100.0


# =============================================================================
# Communication Synthesis
# =============================================================================

DEFAULT_MESSAGE_COUNT: Final[int] = 100
MESSAGE_LATENCY_MAX_MS: Final[float] = 100.0
MESSAGE_PRICE_RANGE: Final[tuple[float, float]] = (50_000.0, 51_000.0)


# =============================================================================
# Scoring Oracle
# =============================================================================

# Observations kept per exchange when building oracle histories
ORACLE_HISTORY_LIMIT: Final[int] = 100

# Confidence thresholds for mapping a score to an action
ORACLE_BUY_CONFIDENCE: Final[float] = 0.85
ORACLE_SELL_CONFIDENCE: Final[float] = 0.7

# Oracle sizing: share of liquidity, capped at a share of tick volume
ORACLE_LIQUIDITY_SHARE: Final[float] = 0.1
ORACLE_VOLUME_CAP_SHARE: Final[float] = 0.5

# Flat per-unit impact applied to oracle-produced trades
ORACLE_IMPACT_RATE: Final[float] = 0.01


# =============================================================================
# Model State
# =============================================================================

DEFAULT_TOTAL_EPOCHS: Final[int] = 100
DEFAULT_LEARNING_RATE: Final[float] = 0.0001


# =============================================================================
# Analysis
# =============================================================================

REWARD_SMOOTHING_WINDOW: Final[int] = 5
RESILIENCE_RANGE: Final[tuple[float, float]] = (0.5, 1.0)

# Baseline strategies plotted next to cumulative profit
BASELINE_PROFIT_SHARE: Final[float] = 0.7
STATIC_SPLIT_PROFIT_SHARE: Final[float] = 0.85
STATIC_SPLIT_IMPACT_SHARE: Final[float] = 0.5


# =============================================================================
# Snapshot Format
# =============================================================================

SNAPSHOT_VERSION: Final[int] = 1

CSV_FIELDS: Final[tuple[str, ...]] = (
    "timestamp",
    "exchange_id",
    "price",
    "volume",
    "bid",
    "ask",
    "liquidity_level",
)


# =============================================================================
# Logging & Dashboard
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

MAX_LOG_QUEUE_SIZE: Final[int] = 10_000

DEFAULT_DASHBOARD_HOST: Final[str] = "127.0.0.1"
DEFAULT_DASHBOARD_PORT: Final[int] = 8000
