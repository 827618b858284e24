"""
Runtime configuration for the Crop Yield Predictor service.

All values come from environment variables so deployments can override
data files, logging and noise seeding without code changes.
"""
import os
from typing import Optional

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

API_PREFIX = os.environ.get("API_PREFIX", "/api/yield")

CROP_PROFILES_PATH = os.environ.get(
    "CROP_PROFILES_PATH", os.path.join(DATA_DIR, "crop_profiles.json")
)

CROP_RECOMMENDATIONS_PATH = os.environ.get(
    "CROP_RECOMMENDATIONS_PATH", os.path.join(DATA_DIR, "crop_recommendations.json")
)


def _parse_seed(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


# When set, every request draws its noise from random.Random(YIELD_NOISE_SEED)
YIELD_NOISE_SEED = _parse_seed(os.environ.get("YIELD_NOISE_SEED"))
