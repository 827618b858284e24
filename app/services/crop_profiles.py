"""
Crop Profile Table.

Static, crop-keyed configuration of optimal ranges and multipliers used by
the yield estimator and the limiting factor analyzer.

The table is loaded once from JSON (see CROP_PROFILES_PATH). The file holds
a single default profile plus, per crop, only the values that crop overrides.
Lookups never fail: unknown crops resolve to the default profile.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional
import json
import logging

from app.core.config import CROP_PROFILES_PATH
from app.services.yield_models import normalize_category
from app.services.yield_rules import CATEGORY_FALLBACK_MULTIPLIER

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_ID = "default"

_MAPPING_KEYS = ("soil_multipliers", "irrigation_bonus")

_crop_profile_table_cache = None


@dataclass(frozen=True)
class CropProfile:
    """Immutable per-crop configuration."""
    crop_id: str
    name: str
    base_yield: float
    soil_multipliers: Mapping[str, float]
    ph_optimal: float
    ph_min: float
    ph_max: float
    n_optimal: float
    p_optimal: float
    k_optimal: float
    n_min: float
    temp_optimal: float
    temp_min: float
    temp_max: float
    rainfall_optimal: float
    rainfall_min: float
    irrigation_bonus: Mapping[str, float]
    special_rules: FrozenSet[str] = field(default_factory=frozenset)

    def soil_multiplier_for(self, soil_type: str) -> float:
        return self.soil_multipliers.get(normalize_category(soil_type), CATEGORY_FALLBACK_MULTIPLIER)

    def irrigation_bonus_for(self, irrigation_type: str) -> float:
        return self.irrigation_bonus.get(normalize_category(irrigation_type), CATEGORY_FALLBACK_MULTIPLIER)

    def has_rule(self, tag: str) -> bool:
        return tag in self.special_rules

    def summary(self) -> Dict:
        """Compact description for API listings."""
        return {
            "id": self.crop_id,
            "name": self.name,
            "base_yield_ton_ha": self.base_yield,
            "ph_range": [self.ph_min, self.ph_max],
            "temperature_range_c": [self.temp_min, self.temp_max],
            "rainfall_min_mm": self.rainfall_min,
            "special_rules": sorted(self.special_rules),
        }


def _build_profile(crop_id: str, values: Dict) -> CropProfile:
    return CropProfile(
        crop_id=crop_id,
        name=values.get("name", crop_id.title()),
        base_yield=float(values["base_yield"]),
        soil_multipliers=MappingProxyType(
            {normalize_category(k): float(v) for k, v in values["soil_multipliers"].items()}
        ),
        ph_optimal=float(values["ph_optimal"]),
        ph_min=float(values["ph_min"]),
        ph_max=float(values["ph_max"]),
        n_optimal=float(values["n_optimal"]),
        p_optimal=float(values["p_optimal"]),
        k_optimal=float(values["k_optimal"]),
        n_min=float(values["n_min"]),
        temp_optimal=float(values["temp_optimal"]),
        temp_min=float(values["temp_min"]),
        temp_max=float(values["temp_max"]),
        rainfall_optimal=float(values["rainfall_optimal"]),
        rainfall_min=float(values["rainfall_min"]),
        irrigation_bonus=MappingProxyType(
            {normalize_category(k): float(v) for k, v in values["irrigation_bonus"].items()}
        ),
        special_rules=frozenset(values.get("special_rules", [])),
    )


def merge_profile_values(default: Dict, overrides: Dict) -> Dict:
    """
    Overlay a crop's overrides on the default profile values.

    Soil multipliers and irrigation bonuses are merged key by key, so a crop
    only lists the categories it changes. Everything else is replaced.
    """
    merged = dict(default)
    for key, value in overrides.items():
        if key in _MAPPING_KEYS:
            combined = dict(default.get(key, {}))
            combined.update(value)
            merged[key] = combined
        else:
            merged[key] = value
    return merged


class CropProfileTable:
    """
    Read-only lookup of crop profiles.

    Built once per process; profile_for() never raises.
    """

    def __init__(self, config: Dict):
        default_values = config["default"]
        self._default = _build_profile(DEFAULT_PROFILE_ID, default_values)

        profiles = {}
        for crop_id, overrides in config.get("crops", {}).items():
            key = normalize_category(crop_id)
            profiles[key] = _build_profile(key, merge_profile_values(default_values, overrides))
        self._profiles = MappingProxyType(profiles)

    @classmethod
    def from_file(cls, path: str) -> "CropProfileTable":
        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error loading crop profiles from {path}: {e}")
            raise
        table = cls(config)
        logger.info(f"Loaded {len(table.crop_ids())} crop profiles from {path}")
        return table

    @property
    def default_profile(self) -> CropProfile:
        return self._default

    def has_profile(self, crop_type: Optional[str]) -> bool:
        return normalize_category(crop_type) in self._profiles

    def profile_for(self, crop_type: Optional[str]) -> CropProfile:
        """Return the crop's profile, or the default profile for unknown crops."""
        return self._profiles.get(normalize_category(crop_type), self._default)

    def crop_ids(self) -> List[str]:
        return list(self._profiles.keys())

    def profiles(self) -> List[CropProfile]:
        return list(self._profiles.values())


def get_crop_profile_table() -> CropProfileTable:
    """Process-wide table, loaded on first use."""
    global _crop_profile_table_cache
    if _crop_profile_table_cache is None:
        _crop_profile_table_cache = CropProfileTable.from_file(CROP_PROFILES_PATH)
    return _crop_profile_table_cache


def clear_crop_profile_table_cache():
    """Clear the cache to reload crop profiles on next call."""
    global _crop_profile_table_cache
    _crop_profile_table_cache = None
