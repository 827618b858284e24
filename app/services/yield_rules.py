"""
Deterministic agronomic rules and thresholds for yield prediction.

This module centralizes constants so the estimator, the limiting factor
analyzer and the tests share one source for every floor and weight.
"""

# Yield penalty curve floors (fraction of yield retained at worst)
PH_FACTOR_FLOOR = 0.7
NUTRIENT_FACTOR_FLOOR = 0.6
TEMPERATURE_FACTOR_FLOOR = 0.5
RAINFALL_FACTOR_FLOOR = 0.6

# Penalty slopes
PH_PENALTY_PER_UNIT = 0.1
N_PENALTY_WEIGHT = 0.3
P_PENALTY_WEIGHT = 0.2
K_PENALTY_WEIGHT = 0.25
TEMPERATURE_PENALTY_WEIGHT = 0.4
RAINFALL_PENALTY_WEIGHT = 0.3

# Neutral multiplier for unknown soil/irrigation categories
CATEGORY_FALLBACK_MULTIPLIER = 1.0

YIELD_NOISE_AMPLITUDE = 0.15
MIN_YIELD_TON_HA = 1.0

CONFIDENCE_BASE = 85.0
CONFIDENCE_SPREAD = 10.0
CONFIDENCE_MIN = 70.0
CONFIDENCE_MAX = 95.0

# Special rule tags carried by crop profiles
HEAT_STRESS_SENSITIVE = "heat-stress-sensitive"
DRAINAGE_SENSITIVE = "drainage-sensitive"

HEAT_STRESS_TEMP_C = 22.0
POOR_DRAINAGE_SOIL = "clay"
POOR_DRAINAGE_NOTE = "Poor drainage in clay soil"

# Physical validity bounds for field observations
PH_SCALE_MIN = 0.0
PH_SCALE_MAX = 14.0
ABSOLUTE_ZERO_C = -273.15
