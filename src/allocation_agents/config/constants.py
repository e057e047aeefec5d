"""
Centralized configuration for the allocation engine

This module defines the magic numbers and thresholds used to judge a
crypto portfolio against its target tier allocation. Centralizing these
values makes it easier to tune policy without touching the algorithms.
"""

# ============================================================================
# BALANCE VERDICT
# ============================================================================
# Overall deviation is the mean absolute deviation (percentage points)
# across all tiers.

BALANCED_DEVIATION_THRESHOLD = 10.0
"""Overall deviation <= 10 points means the portfolio is well balanced"""

SIGNIFICANT_DEVIATION_THRESHOLD = 15.0
"""Overall deviation > 15 points triggers the significant-deviation advisory"""

# ============================================================================
# REBALANCING ACTIONS
# ============================================================================
# Smaller band than the balance verdict: a portfolio can be unbalanced
# while only some tiers are materially off target.

ACTIONABLE_DEVIATION_THRESHOLD = 5.0
"""Tier deviation must exceed ±5 points before an action is emitted"""

PRIORITY_HIGH_MIN = 20.0
"""Adjustment > 20 points is HIGH priority"""

PRIORITY_MEDIUM_MIN = 10.0
"""Adjustment > 10 points is MEDIUM priority (everything else LOW)"""

# ============================================================================
# ADVISORY RULES
# ============================================================================

CORE_DEVIATION_WARNING = 10.0
"""|CORE deviation| > 10 points produces an over/under-allocated advisory"""

SPECULATIVE_EXPOSURE_MAX = 30.0
"""SPECULATIVE share above 30% produces a high-exposure warning"""

# ============================================================================
# NUMERICS
# ============================================================================

PERCENT_SUM_TOLERANCE = 1e-6
"""Allowed float drift when percentages are expected to sum to 100"""

# ============================================================================
# CALLER TIMEOUTS (§5)
# ============================================================================
# The core never blocks; these document the budgets the calling
# application applies before invoking it.

PORTFOLIO_SYNC_TIMEOUT_SECONDS = 60
"""Allowance for a live exchange portfolio sync"""

ANALYSIS_REQUEST_TIMEOUT_SECONDS = 30
"""Allowance for triggering an allocation analysis remotely"""

# ============================================================================
# RUNNER DEFAULTS
# ============================================================================

DEFAULT_RISK_PROFILE = "BALANCED"
"""Risk profile used by run_analysis.py when none is given"""

DEFAULT_OUTPUT_DIR = "output"
"""Directory for JSON snapshots and Excel workbooks"""
