"""
Data classes shared by the yield prediction services.

A FieldObservation comes in, a PredictionResult goes out. Both are created
per call and never shared between requests.
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Union


class SoilType(str, Enum):
    """Soil types with dedicated multipliers."""
    CLAY = "clay"
    SANDY = "sandy"
    LOAM = "loam"
    SILT = "silt"


class IrrigationType(str, Enum):
    """Irrigation systems with dedicated bonuses."""
    NONE = "none"
    FLOOD = "flood"
    SPRINKLER = "sprinkler"
    DRIP = "drip"


class Region(str, Enum):
    """Growing regions offered to callers. Informational only."""
    MIDWEST = "midwest"
    SOUTH = "south"
    WEST = "west"
    NORTHEAST = "northeast"


class LimitingFactorName(str, Enum):
    SOIL_PH = "Soil pH"
    NITROGEN = "Nitrogen Level"
    RAINFALL = "Rainfall"
    TEMPERATURE = "Temperature"
    HEAT_STRESS_RISK = "Heat Stress Risk"
    SOIL_DRAINAGE = "Soil Drainage"


class ImpactLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def normalize_category(value: str) -> str:
    """Lower-case and trim a categorical identifier for table lookups."""
    if not value:
        return ""
    return str(value).strip().lower()


@dataclass(frozen=True)
class FieldObservation:
    """Field and crop parameters supplied by the caller."""
    crop_type: str
    soil_type: str
    soil_ph: float
    nitrogen: float       # kg/ha
    phosphorus: float     # kg/ha
    potassium: float      # kg/ha
    temperature: float    # °C
    rainfall: float       # mm/year
    irrigation_type: str
    region: str = ""

    def __post_init__(self):
        object.__setattr__(self, "crop_type", normalize_category(self.crop_type))
        object.__setattr__(self, "soil_type", normalize_category(self.soil_type))
        object.__setattr__(self, "irrigation_type", normalize_category(self.irrigation_type))
        object.__setattr__(self, "region", normalize_category(self.region))


@dataclass(frozen=True)
class LimitingFactor:
    """An input dimension outside the crop's acceptable diagnostic range."""
    name: LimitingFactorName
    impact: ImpactLevel
    observed_value: Union[float, str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factor": self.name.value,
            "impact": self.impact.value,
            "value": self.observed_value,
        }


@dataclass
class PredictionResult:
    """Result of a single yield prediction."""
    yield_estimate: float
    confidence: float
    limiting_factors: List[LimitingFactor]
    recommendations: List[str]
    crop_type: str = ""
    crop_class: str = "default"
    region: str = ""
    fallbacks: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["limiting_factors"] = [f.to_dict() for f in self.limiting_factors]
        return data
