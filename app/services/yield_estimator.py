"""
Yield and confidence estimation.

The yield estimate is a strictly multiplicative composition of independent
factors (soil, pH, nutrients, temperature, rainfall, irrigation) applied to
the crop's base yield, followed by a small random perturbation:

    y = base * soil * pH * nutrients * temperature * rainfall * irrigation
    y = max(1.0, round(y + uniform(-0.15, 0.15), 2))

Each penalty factor has a floor so that a single poor input cannot drive the
estimate towards zero. Randomness is always injected through a NoiseSource
(random.Random satisfies the protocol) so results can be pinned in tests.
"""
from dataclasses import dataclass, asdict
from typing import Dict, Protocol
import logging

from app.services.crop_profiles import CropProfile
from app.services.yield_models import FieldObservation
from app.services.yield_rules import (
    PH_FACTOR_FLOOR,
    NUTRIENT_FACTOR_FLOOR,
    TEMPERATURE_FACTOR_FLOOR,
    RAINFALL_FACTOR_FLOOR,
    PH_PENALTY_PER_UNIT,
    N_PENALTY_WEIGHT,
    P_PENALTY_WEIGHT,
    K_PENALTY_WEIGHT,
    TEMPERATURE_PENALTY_WEIGHT,
    RAINFALL_PENALTY_WEIGHT,
    YIELD_NOISE_AMPLITUDE,
    MIN_YIELD_TON_HA,
    CONFIDENCE_BASE,
    CONFIDENCE_SPREAD,
    CONFIDENCE_MIN,
    CONFIDENCE_MAX,
)

logger = logging.getLogger(__name__)


class NoiseSource(Protocol):
    """Anything exposing uniform(a, b), e.g. random.Random."""

    def uniform(self, a: float, b: float) -> float:
        ...


def relative_deviation(value: float, optimal: float) -> float:
    """|value - optimal| / optimal"""
    return abs(value - optimal) / optimal


def ph_factor(soil_ph: float, ph_optimal: float) -> float:
    return max(PH_FACTOR_FLOOR, 1 - abs(soil_ph - ph_optimal) * PH_PENALTY_PER_UNIT)


def nutrient_factor(
    nitrogen: float,
    phosphorus: float,
    potassium: float,
    n_optimal: float,
    p_optimal: float,
    k_optimal: float,
) -> float:
    """Mean of the N, P and K ratios, floored as a whole."""
    n_factor = 1 - relative_deviation(nitrogen, n_optimal) * N_PENALTY_WEIGHT
    p_factor = 1 - relative_deviation(phosphorus, p_optimal) * P_PENALTY_WEIGHT
    k_factor = 1 - relative_deviation(potassium, k_optimal) * K_PENALTY_WEIGHT
    return max(NUTRIENT_FACTOR_FLOOR, (n_factor + p_factor + k_factor) / 3)


def temperature_factor(temperature: float, temp_optimal: float) -> float:
    return max(
        TEMPERATURE_FACTOR_FLOOR,
        1 - relative_deviation(temperature, temp_optimal) * TEMPERATURE_PENALTY_WEIGHT,
    )


def rainfall_factor(rainfall: float, rainfall_optimal: float) -> float:
    return max(
        RAINFALL_FACTOR_FLOOR,
        1 - relative_deviation(rainfall, rainfall_optimal) * RAINFALL_PENALTY_WEIGHT,
    )


@dataclass(frozen=True)
class YieldFactors:
    """Individual multipliers applied to the base yield."""
    base_yield: float
    soil: float
    ph: float
    nutrients: float
    temperature: float
    rainfall: float
    irrigation: float

    @property
    def product(self) -> float:
        return (
            self.base_yield
            * self.soil
            * self.ph
            * self.nutrients
            * self.temperature
            * self.rainfall
            * self.irrigation
        )

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def yield_factors(observation: FieldObservation, profile: CropProfile) -> YieldFactors:
    """Compute every yield factor for an observation without noise."""
    return YieldFactors(
        base_yield=profile.base_yield,
        soil=profile.soil_multiplier_for(observation.soil_type),
        ph=ph_factor(observation.soil_ph, profile.ph_optimal),
        nutrients=nutrient_factor(
            observation.nitrogen,
            observation.phosphorus,
            observation.potassium,
            profile.n_optimal,
            profile.p_optimal,
            profile.k_optimal,
        ),
        temperature=temperature_factor(observation.temperature, profile.temp_optimal),
        rainfall=rainfall_factor(observation.rainfall, profile.rainfall_optimal),
        irrigation=profile.irrigation_bonus_for(observation.irrigation_type),
    )


class YieldEstimator:
    """Converts a field observation into a yield estimate in ton/ha."""

    def estimate(self, observation: FieldObservation, profile: CropProfile, noise: NoiseSource) -> float:
        factors = yield_factors(observation, profile)
        value = factors.product + noise.uniform(-YIELD_NOISE_AMPLITUDE, YIELD_NOISE_AMPLITUDE)
        result = max(MIN_YIELD_TON_HA, round(value, 2))
        logger.debug(
            f"Yield for {profile.crop_id}: base={factors.base_yield} soil={factors.soil:.3f} "
            f"ph={factors.ph:.3f} npk={factors.nutrients:.3f} temp={factors.temperature:.3f} "
            f"rain={factors.rainfall:.3f} irr={factors.irrigation:.3f} -> {result}"
        )
        return result


class ConfidenceEstimator:
    """
    Self-reported confidence of the heuristic.

    Independent of the observation: a bounded nuisance value in [70, 95],
    not a calibrated statistic.
    """

    def confidence(self, noise: NoiseSource) -> float:
        value = CONFIDENCE_BASE + noise.uniform(0, CONFIDENCE_SPREAD)
        return round(min(CONFIDENCE_MAX, max(CONFIDENCE_MIN, value)), 1)


yield_estimator = YieldEstimator()
confidence_estimator = ConfidenceEstimator()
