"""
Yield Prediction Service.

Orchestrates one prediction:
- Validate the field observation (rejects non-physical input)
- Resolve the crop profile (unknown categories fall back to defaults)
- Estimate yield and confidence (injected randomness)
- Analyze limiting factors and generate recommendations

Every call is independent: the profile and recommendation tables are
read-only and the noise source is created per call unless one is supplied.
"""
from typing import Dict, List, Optional
import math
import random
import logging

from app.core.config import YIELD_NOISE_SEED
from app.services.crop_profiles import CropProfileTable, get_crop_profile_table
from app.services.limiting_factors import LimitingFactorAnalyzer, limiting_factor_analyzer
from app.services.yield_estimator import (
    ConfidenceEstimator,
    NoiseSource,
    YieldEstimator,
    confidence_estimator as default_confidence_estimator,
    yield_estimator as default_yield_estimator,
)
from app.services.yield_models import FieldObservation, PredictionResult
from app.services.yield_recommendations import RecommendationGenerator, get_recommendation_generator
from app.services.yield_rules import PH_SCALE_MIN, PH_SCALE_MAX, ABSOLUTE_ZERO_C

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = ("soil_ph", "nitrogen", "phosphorus", "potassium", "temperature", "rainfall")
NON_NEGATIVE_FIELDS = ("nitrogen", "phosphorus", "potassium", "rainfall")


class InvalidParameterError(ValueError):
    """Raised when a field observation value is not physically valid."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


def validate_observation(observation: FieldObservation) -> None:
    """
    Reject observations that cannot describe a real field.

    Raises:
        InvalidParameterError: naming the first offending field.
    """
    for name in NUMERIC_FIELDS:
        value = getattr(observation, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidParameterError(name, f"must be a number, got {type(value).__name__}")
        if not math.isfinite(value):
            raise InvalidParameterError(name, "must be a finite number")

    for name in NON_NEGATIVE_FIELDS:
        if getattr(observation, name) < 0:
            raise InvalidParameterError(name, "cannot be negative")

    if not PH_SCALE_MIN <= observation.soil_ph <= PH_SCALE_MAX:
        raise InvalidParameterError("soil_ph", f"must be between {PH_SCALE_MIN:g} and {PH_SCALE_MAX:g}")

    if observation.temperature < ABSOLUTE_ZERO_C:
        raise InvalidParameterError("temperature", "cannot be below absolute zero")


def new_noise_source() -> NoiseSource:
    """Per-call generator; seeded when YIELD_NOISE_SEED is configured."""
    return random.Random(YIELD_NOISE_SEED)


class PredictionService:
    """Single entry point from a FieldObservation to a PredictionResult."""

    def __init__(
        self,
        profiles: Optional[CropProfileTable] = None,
        recommendations: Optional[RecommendationGenerator] = None,
        estimator: Optional[YieldEstimator] = None,
        confidence_estimator: Optional[ConfidenceEstimator] = None,
        analyzer: Optional[LimitingFactorAnalyzer] = None,
    ):
        self.profiles = profiles or get_crop_profile_table()
        self.recommendations = recommendations or get_recommendation_generator(self.profiles)
        self.estimator = estimator or default_yield_estimator
        self.confidence_estimator = confidence_estimator or default_confidence_estimator
        self.analyzer = analyzer or limiting_factor_analyzer

    def detect_fallbacks(self, observation: FieldObservation) -> List[str]:
        """Categorical fields resolved via a default rather than an exact match."""
        fallbacks = []
        if not self.profiles.has_profile(observation.crop_type):
            fallbacks.append("crop_type")

        profile = self.profiles.profile_for(observation.crop_type)
        if observation.soil_type not in profile.soil_multipliers:
            fallbacks.append("soil_type")
        if observation.irrigation_type not in profile.irrigation_bonus:
            fallbacks.append("irrigation_type")
        return fallbacks

    def predict(self, observation: FieldObservation, noise: Optional[NoiseSource] = None) -> PredictionResult:
        validate_observation(observation)

        if noise is None:
            noise = new_noise_source()

        profile = self.profiles.profile_for(observation.crop_type)
        fallbacks = self.detect_fallbacks(observation)
        if fallbacks:
            logger.info(
                f"Prediction for crop='{observation.crop_type}' soil='{observation.soil_type}' "
                f"irrigation='{observation.irrigation_type}' used defaults for: {', '.join(fallbacks)}"
            )

        yield_estimate = self.estimator.estimate(observation, profile, noise)
        confidence = self.confidence_estimator.confidence(noise)
        factors = self.analyzer.analyze(observation, profile)
        recommendations = self.recommendations.generate(observation, factors)

        logger.info(
            f"Predicted {yield_estimate} ton/ha for {profile.crop_id} "
            f"(confidence={confidence}, limiting_factors={len(factors)})"
        )

        return PredictionResult(
            yield_estimate=yield_estimate,
            confidence=confidence,
            limiting_factors=factors,
            recommendations=recommendations,
            crop_type=observation.crop_type,
            crop_class=self.recommendations.crop_class(observation.crop_type),
            region=observation.region,
            fallbacks=fallbacks,
        )

    def list_crops(self) -> List[Dict]:
        return [p.summary() for p in self.profiles.profiles()]


_prediction_service = None


def get_prediction_service() -> PredictionService:
    global _prediction_service
    if _prediction_service is None:
        _prediction_service = PredictionService()
    return _prediction_service
