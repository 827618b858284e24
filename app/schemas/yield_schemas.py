"""
Pydantic schemas for the Yield Prediction module.
"""
from pydantic import BaseModel, Field
from typing import List, Union

from app.services.yield_models import FieldObservation, PredictionResult


# ==================== PREDICTION SCHEMAS ====================

class YieldPredictionRequest(BaseModel):
    """Field and crop parameters for a yield prediction."""
    crop_type: str = Field(..., min_length=1, max_length=50, description="Crop identifier (corn, melon, ...)")
    soil_type: str = Field(..., min_length=1, max_length=50, description="Soil type: clay, sandy, loam, silt")
    soil_ph: float = Field(..., strict=True, ge=0, le=14, description="Soil pH")
    nitrogen: float = Field(..., strict=True, ge=0, description="Nitrogen kg/ha")
    phosphorus: float = Field(..., strict=True, ge=0, description="Phosphorus kg/ha")
    potassium: float = Field(..., strict=True, ge=0, description="Potassium kg/ha")
    temperature: float = Field(..., strict=True, ge=-273.15, description="Mean growing-season temperature °C")
    rainfall: float = Field(..., strict=True, ge=0, description="Rainfall mm/year")
    irrigation_type: str = Field(..., min_length=1, max_length=50, description="Irrigation: none, flood, sprinkler, drip")
    region: str = Field(default="", max_length=50, description="Growing region (informational)")

    def to_observation(self) -> FieldObservation:
        return FieldObservation(
            crop_type=self.crop_type,
            soil_type=self.soil_type,
            soil_ph=self.soil_ph,
            nitrogen=self.nitrogen,
            phosphorus=self.phosphorus,
            potassium=self.potassium,
            temperature=self.temperature,
            rainfall=self.rainfall,
            irrigation_type=self.irrigation_type,
            region=self.region,
        )


class LimitingFactorResponse(BaseModel):
    """A parameter limiting yield."""
    factor: str
    impact: str
    value: Union[float, str]


class YieldPredictionResponse(BaseModel):
    """Yield prediction result."""
    yield_estimate: float = Field(..., description="Estimated yield ton/ha (>= 1.0)")
    confidence: float = Field(..., description="Confidence % (70-95)")
    limiting_factors: List[LimitingFactorResponse]
    recommendations: List[str]
    crop_type: str
    crop_class: str
    region: str = ""
    fallbacks: List[str] = Field(default_factory=list, description="Fields resolved via defaults")

    @classmethod
    def from_result(cls, result: PredictionResult) -> "YieldPredictionResponse":
        return cls(**result.to_dict())


# ==================== CATALOG SCHEMAS ====================

class CropProfileSummary(BaseModel):
    """Summary of a supported crop profile."""
    id: str
    name: str
    base_yield_ton_ha: float
    ph_range: List[float]
    temperature_range_c: List[float]
    rainfall_min_mm: float
    special_rules: List[str] = []


class CropProfileList(BaseModel):
    items: List[CropProfileSummary]
    total: int


class PredictionOptions(BaseModel):
    """Known categorical values accepted by the predictor."""
    crop_types: List[str]
    soil_types: List[str]
    irrigation_types: List[str]
    regions: List[str]
