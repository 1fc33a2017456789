"""Centralized constants for the allocation backends.

This module contains the hardcoded floors, tolerances and defaults shared by
the greedy allocator, the LP formulation and the metrics. Centralizing these
values keeps both backends consistent.
"""

# ============================================================================
# CONFIGURATION FLOORS
# ============================================================================

#: Speed floor for travel time (km/h); slow or misconfigured rakes run at this speed
MIN_SPEED_KMPH = 30.0

#: Loading rate floor (tons/hour) for yards with a non-positive rate
MIN_LOADING_RATE_TPH = 1.0


# ============================================================================
# OBJECTIVE
# ============================================================================

#: Default soft penalty per ton of unmet demand in the heuristic objective
UNFULFILLED_PENALTY_PER_TON = 2000.0


# ============================================================================
# NUMERICS
# ============================================================================

#: LP variables at or below this many tons are treated as zero
LP_TONS_EPSILON = 1e-3

#: Tolerance for hour-budget and tonnage invariant checks
FEASIBILITY_TOLERANCE = 1e-6

#: Default wall-clock limit for the LP solve (seconds)
DEFAULT_SOLVER_TIME_LIMIT_SECONDS = 30.0
