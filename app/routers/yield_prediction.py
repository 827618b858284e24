"""
Yield Prediction Router.
Provides endpoints for crop yield prediction and the crop catalog.
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from app.core.config import API_PREFIX
from app.schemas.yield_schemas import (
    YieldPredictionRequest,
    YieldPredictionResponse,
    CropProfileList,
    CropProfileSummary,
    PredictionOptions,
)
from app.services.yield_models import SoilType, IrrigationType, Region
from app.services.yield_prediction_service import (
    InvalidParameterError,
    PredictionService,
    get_prediction_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix=API_PREFIX, tags=["yield"])


@router.post("/predict", response_model=YieldPredictionResponse)
def predict_yield(
    request: YieldPredictionRequest,
    service: PredictionService = Depends(get_prediction_service),
):
    """
    Estimate yield for a field observation.

    Returns:
    - yield_estimate: ton/ha, never below 1.0
    - confidence: % in [70, 95]
    - limiting_factors: parameters outside the crop's acceptable range
    - recommendations: one per limiting factor, or a single affirmation
    - fallbacks: categorical fields resolved via defaults
    """
    try:
        result = service.predict(request.to_observation())
    except InvalidParameterError as e:
        logger.warning(f"Rejected prediction request: {e}")
        raise HTTPException(
            status_code=422,
            detail={"field": e.field, "message": e.message},
        )

    return YieldPredictionResponse.from_result(result)


@router.get("/crops", response_model=CropProfileList)
def list_crops(service: PredictionService = Depends(get_prediction_service)):
    """List crops with dedicated profiles."""
    items = [CropProfileSummary(**summary) for summary in service.list_crops()]
    return CropProfileList(items=items, total=len(items))


@router.get("/options", response_model=PredictionOptions)
def get_prediction_options(service: PredictionService = Depends(get_prediction_service)):
    """Categorical values the predictor recognizes without falling back."""
    return PredictionOptions(
        crop_types=service.profiles.crop_ids(),
        soil_types=[s.value for s in SoilType],
        irrigation_types=[i.value for i in IrrigationType],
        regions=[r.value for r in Region],
    )
