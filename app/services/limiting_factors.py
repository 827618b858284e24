"""
Limiting Factor Analyzer.

Evaluates an observation against the crop's diagnostic ranges. Checks run in
a fixed order and are independent of each other: several factors may fire
for the same observation and none suppresses another.

Order:
1. Soil pH outside [ph_min, ph_max]         -> High
2. Nitrogen below n_min                     -> Medium
3. Rainfall below rainfall_min              -> High
4. Temperature outside [temp_min, temp_max] -> Medium
5. Crop special rules (heat stress, drainage)

Ranges are inclusive: a value equal to a bound is not limiting.
"""
from typing import List
import logging

from app.services.crop_profiles import CropProfile
from app.services.yield_models import (
    FieldObservation,
    ImpactLevel,
    LimitingFactor,
    LimitingFactorName,
)
from app.services.yield_rules import (
    HEAT_STRESS_SENSITIVE,
    DRAINAGE_SENSITIVE,
    HEAT_STRESS_TEMP_C,
    POOR_DRAINAGE_SOIL,
    POOR_DRAINAGE_NOTE,
)

logger = logging.getLogger(__name__)


class LimitingFactorAnalyzer:
    """Flags the inputs that are limiting yield for a given crop profile."""

    def analyze(self, observation: FieldObservation, profile: CropProfile) -> List[LimitingFactor]:
        factors = []

        if observation.soil_ph < profile.ph_min or observation.soil_ph > profile.ph_max:
            factors.append(LimitingFactor(LimitingFactorName.SOIL_PH, ImpactLevel.HIGH, observation.soil_ph))

        if observation.nitrogen < profile.n_min:
            factors.append(LimitingFactor(LimitingFactorName.NITROGEN, ImpactLevel.MEDIUM, observation.nitrogen))

        if observation.rainfall < profile.rainfall_min:
            factors.append(LimitingFactor(LimitingFactorName.RAINFALL, ImpactLevel.HIGH, observation.rainfall))

        if observation.temperature < profile.temp_min or observation.temperature > profile.temp_max:
            factors.append(
                LimitingFactor(LimitingFactorName.TEMPERATURE, ImpactLevel.MEDIUM, observation.temperature)
            )

        factors.extend(self._special_rule_factors(observation, profile))

        if factors:
            logger.debug(
                f"Limiting factors for {profile.crop_id}: "
                f"{', '.join(f.name.value for f in factors)}"
            )
        return factors

    def _special_rule_factors(self, observation: FieldObservation, profile: CropProfile) -> List[LimitingFactor]:
        factors = []

        # Fires independently of the temperature range check
        if profile.has_rule(HEAT_STRESS_SENSITIVE) and observation.temperature > HEAT_STRESS_TEMP_C:
            factors.append(
                LimitingFactor(LimitingFactorName.HEAT_STRESS_RISK, ImpactLevel.HIGH, observation.temperature)
            )

        if profile.has_rule(DRAINAGE_SENSITIVE) and observation.soil_type == POOR_DRAINAGE_SOIL:
            factors.append(
                LimitingFactor(LimitingFactorName.SOIL_DRAINAGE, ImpactLevel.MEDIUM, POOR_DRAINAGE_NOTE)
            )

        return factors


limiting_factor_analyzer = LimitingFactorAnalyzer()
