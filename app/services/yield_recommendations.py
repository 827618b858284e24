"""
Recommendation Generator.

Maps each limiting factor to a fixed advisory sentence looked up by
(factor, crop class). Crop classes are the keys of the recommendation table
(melon, pumpkin, cilantro, default); any crop without its own class, and any
key a class does not define, falls back to the default class.
"""
from typing import Dict, List, Optional
import json
import logging

from app.core.config import CROP_RECOMMENDATIONS_PATH
from app.services.crop_profiles import CropProfileTable, get_crop_profile_table
from app.services.yield_models import (
    FieldObservation,
    LimitingFactor,
    LimitingFactorName,
    normalize_category,
)

logger = logging.getLogger(__name__)

DEFAULT_CROP_CLASS = "default"
OPTIMAL_KEY = "optimal"

FACTOR_KEYS = {
    LimitingFactorName.NITROGEN: "nitrogen",
    LimitingFactorName.RAINFALL: "rainfall",
    LimitingFactorName.TEMPERATURE: "temperature",
    LimitingFactorName.HEAT_STRESS_RISK: "heat_stress",
    LimitingFactorName.SOIL_DRAINAGE: "drainage",
}

_recommendation_table_cache = None


def load_recommendation_table(path: str = CROP_RECOMMENDATIONS_PATH) -> Dict[str, Dict[str, str]]:
    """Load advisory texts keyed by crop class."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Error loading crop recommendations from {path}: {e}")
        raise
    classes = data.get("classes", {})
    if DEFAULT_CROP_CLASS not in classes:
        raise ValueError(f"Recommendation table {path} has no '{DEFAULT_CROP_CLASS}' class")
    return {normalize_category(k): dict(v) for k, v in classes.items()}


class RecommendationGenerator:
    """Turns limiting factors into ordered, crop-specific advice."""

    def __init__(self, table: Dict[str, Dict[str, str]], profiles: CropProfileTable):
        self._table = table
        self._profiles = profiles

    def crop_class(self, crop_type: Optional[str]) -> str:
        key = normalize_category(crop_type)
        return key if key in self._table else DEFAULT_CROP_CLASS

    def _lookup(self, crop_class: str, key: str) -> str:
        texts = self._table.get(crop_class, {})
        if key in texts:
            return texts[key]
        return self._table[DEFAULT_CROP_CLASS][key]

    def _factor_key(self, factor: LimitingFactor, observation: FieldObservation) -> str:
        if factor.name == LimitingFactorName.SOIL_PH:
            profile = self._profiles.profile_for(observation.crop_type)
            return "ph_low" if factor.observed_value < profile.ph_min else "ph_high"
        return FACTOR_KEYS[factor.name]

    def generate(self, observation: FieldObservation, factors: List[LimitingFactor]) -> List[str]:
        """One recommendation per factor, in order; a single affirmation if none."""
        crop_class = self.crop_class(observation.crop_type)

        if not factors:
            return [self._lookup(crop_class, OPTIMAL_KEY)]

        return [self._lookup(crop_class, self._factor_key(f, observation)) for f in factors]


def get_recommendation_table() -> Dict[str, Dict[str, str]]:
    """Process-wide recommendation table, loaded on first use."""
    global _recommendation_table_cache
    if _recommendation_table_cache is None:
        _recommendation_table_cache = load_recommendation_table()
    return _recommendation_table_cache


def get_recommendation_generator(profiles: Optional[CropProfileTable] = None) -> RecommendationGenerator:
    return RecommendationGenerator(get_recommendation_table(), profiles or get_crop_profile_table())


def clear_recommendation_table_cache():
    """Clear the cache to reload recommendation texts on next call."""
    global _recommendation_table_cache
    _recommendation_table_cache = None
