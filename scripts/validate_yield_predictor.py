#!/usr/bin/env python3
"""
Yield Predictor Validation Script
Runs randomized scenarios across every crop profile and checks the
prediction invariants (yield floor, confidence bounds, one recommendation
per limiting factor, factor floors).
"""
import sys
import os
import random
import json
from collections import Counter
from typing import List, Dict, Any, Tuple

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from app.services.crop_profiles import get_crop_profile_table
from app.services.yield_estimator import yield_factors
from app.services.yield_models import FieldObservation, PredictionResult, SoilType, IrrigationType, Region
from app.services.yield_prediction_service import PredictionService
from app.services.yield_rules import (
    PH_FACTOR_FLOOR,
    NUTRIENT_FACTOR_FLOOR,
    TEMPERATURE_FACTOR_FLOOR,
    RAINFALL_FACTOR_FLOOR,
    MIN_YIELD_TON_HA,
    CONFIDENCE_MIN,
    CONFIDENCE_MAX,
)

EXTRA_CROPS = ["barley", "sorghum"]
EXTRA_SOILS = ["rocky", "peat"]
EXTRA_IRRIGATION = ["pivot"]

RANGES = {
    "soil_ph": (3.5, 9.5),
    "nitrogen": (0, 400),
    "phosphorus": (0, 200),
    "potassium": (0, 350),
    "temperature": (-5, 45),
    "rainfall": (0, 2500),
}


def random_observation(rng: random.Random, crop_ids: List[str]) -> FieldObservation:
    values = {name: round(rng.uniform(lo, hi), 1) for name, (lo, hi) in RANGES.items()}
    return FieldObservation(
        crop_type=rng.choice(crop_ids + EXTRA_CROPS),
        soil_type=rng.choice([s.value for s in SoilType] + EXTRA_SOILS),
        irrigation_type=rng.choice([i.value for i in IrrigationType] + EXTRA_IRRIGATION),
        region=rng.choice([r.value for r in Region]),
        **values,
    )


def check_prediction(
    service: PredictionService, observation: FieldObservation, rng: random.Random
) -> Tuple[PredictionResult, List[str]]:
    """Predict once and return the result together with any invariant violations."""
    issues = []
    result = service.predict(observation, noise=rng)

    if result.yield_estimate < MIN_YIELD_TON_HA:
        issues.append(f"yield {result.yield_estimate} below floor")
    if not CONFIDENCE_MIN <= result.confidence <= CONFIDENCE_MAX:
        issues.append(f"confidence {result.confidence} out of range")

    expected = len(result.limiting_factors) or 1
    if len(result.recommendations) != expected:
        issues.append(
            f"{len(result.recommendations)} recommendations for {len(result.limiting_factors)} factors"
        )

    factors = yield_factors(observation, service.profiles.profile_for(observation.crop_type))
    for label, value, floor in [
        ("ph", factors.ph, PH_FACTOR_FLOOR),
        ("nutrients", factors.nutrients, NUTRIENT_FACTOR_FLOOR),
        ("temperature", factors.temperature, TEMPERATURE_FACTOR_FLOOR),
        ("rainfall", factors.rainfall, RAINFALL_FACTOR_FLOOR),
    ]:
        if value < floor:
            issues.append(f"{label} factor {value:.3f} below floor {floor}")

    return result, issues


def run_validation(num_tests: int = 1000, seed: int = 42) -> Dict[str, Any]:
    rng = random.Random(seed)
    service = PredictionService()
    crop_ids = get_crop_profile_table().crop_ids()

    stats = {
        "total_tests": num_tests,
        "passed": 0,
        "failed": 0,
        "factor_counts": Counter(),
        "fallback_counts": Counter(),
        "yield_by_crop": {},
    }
    anomalies = []

    for test_id in range(1, num_tests + 1):
        observation = random_observation(rng, crop_ids)
        result, issues = check_prediction(service, observation, rng)

        for factor in result.limiting_factors:
            stats["factor_counts"][factor.name.value] += 1
        for fallback in result.fallbacks:
            stats["fallback_counts"][fallback] += 1
        stats["yield_by_crop"].setdefault(observation.crop_type, []).append(result.yield_estimate)

        if issues:
            stats["failed"] += 1
            anomalies.append({"test_id": test_id, "crop": observation.crop_type, "issues": issues})
        else:
            stats["passed"] += 1

    return {"stats": stats, "anomalies": anomalies}


def generate_report(validation: Dict[str, Any]) -> str:
    stats = validation["stats"]
    anomalies = validation["anomalies"]
    report = []

    report.append("=" * 80)
    report.append("YIELD PREDICTOR VALIDATION REPORT")
    report.append("=" * 80)
    report.append("")
    report.append(f"Scenarios: {stats['total_tests']}  Passed: {stats['passed']}  Failed: {stats['failed']}")
    report.append("")

    report.append("## LIMITING FACTORS")
    report.append("-" * 40)
    for name, count in stats["factor_counts"].most_common():
        report.append(f"  {name:<20} {count:>6}")
    report.append("")

    report.append("## CATEGORY FALLBACKS")
    report.append("-" * 40)
    for name, count in stats["fallback_counts"].most_common():
        report.append(f"  {name:<20} {count:>6}")
    report.append("")

    report.append("## YIELD BY CROP (ton/ha)")
    report.append("-" * 40)
    for crop, yields in sorted(stats["yield_by_crop"].items()):
        report.append(
            f"  {crop:<10} n={len(yields):>4}  min={min(yields):>6.2f}  "
            f"mean={sum(yields) / len(yields):>6.2f}  max={max(yields):>6.2f}"
        )
    report.append("")

    if anomalies:
        report.append(f"## ANOMALIES ({len(anomalies)})")
        report.append("-" * 40)
        for anom in anomalies[:15]:
            report.append(f"Test #{anom['test_id']} ({anom['crop']}): {'; '.join(anom['issues'])}")
        if len(anomalies) > 15:
            report.append(f"   ... and {len(anomalies) - 15} more")
    else:
        report.append("✓ All invariants held for every scenario.")

    report.append("")
    report.append("=" * 80)
    return "\n".join(report)


if __name__ == "__main__":
    print("Running yield predictor validation (1000 scenarios)...")
    print("")

    validation = run_validation(num_tests=1000, seed=42)

    report = generate_report(validation)
    print(report)

    with open("yield_validation_report.txt", "w", encoding="utf-8") as f:
        f.write(report)

    with open("yield_validation_data.json", "w", encoding="utf-8") as f:
        json.dump(validation, f, indent=2, ensure_ascii=False)

    print("\nFiles written:")
    print("- yield_validation_report.txt")
    print("- yield_validation_data.json")

    sys.exit(1 if validation["stats"]["failed"] else 0)
