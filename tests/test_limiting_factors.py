"""
Tests for the Limiting Factor Analyzer.

Checks fire independently in a fixed order:
pH -> nitrogen -> rainfall -> temperature -> heat stress -> drainage
"""
import pytest

from app.services.crop_profiles import CropProfileTable, get_crop_profile_table
from app.services.limiting_factors import LimitingFactorAnalyzer
from app.services.yield_models import (
    FieldObservation,
    ImpactLevel,
    LimitingFactor,
    LimitingFactorName,
)


def make_observation(**overrides) -> FieldObservation:
    values = dict(
        crop_type="corn",
        soil_type="loam",
        soil_ph=6.5,
        nitrogen=150,
        phosphorus=60,
        potassium=120,
        temperature=25,
        rainfall=800,
        irrigation_type="drip",
        region="midwest",
    )
    values.update(overrides)
    return FieldObservation(**values)


@pytest.fixture
def profiles():
    return get_crop_profile_table()


@pytest.fixture
def analyzer():
    return LimitingFactorAnalyzer()


def analyze(analyzer, profiles, **overrides):
    observation = make_observation(**overrides)
    return analyzer.analyze(observation, profiles.profile_for(observation.crop_type))


def names(factors):
    return [f.name for f in factors]


class TestDefaultRanges:

    def test_reference_corn_has_no_factors(self, analyzer, profiles):
        assert analyze(analyzer, profiles) == []

    def test_low_ph(self, analyzer, profiles):
        factors = analyze(analyzer, profiles, soil_ph=5.5)
        assert factors == [LimitingFactor(LimitingFactorName.SOIL_PH, ImpactLevel.HIGH, 5.5)]

    def test_high_ph(self, analyzer, profiles):
        assert names(analyze(analyzer, profiles, soil_ph=7.8)) == [LimitingFactorName.SOIL_PH]

    @pytest.mark.parametrize("soil_ph", [6.0, 7.5])
    def test_ph_bounds_are_inclusive(self, analyzer, profiles, soil_ph):
        assert analyze(analyzer, profiles, soil_ph=soil_ph) == []

    def test_low_nitrogen(self, analyzer, profiles):
        factors = analyze(analyzer, profiles, nitrogen=100)
        assert factors == [LimitingFactor(LimitingFactorName.NITROGEN, ImpactLevel.MEDIUM, 100)]

    def test_nitrogen_at_minimum_is_not_limiting(self, analyzer, profiles):
        assert analyze(analyzer, profiles, nitrogen=120) == []

    def test_low_rainfall(self, analyzer, profiles):
        factors = analyze(analyzer, profiles, rainfall=450)
        assert factors == [LimitingFactor(LimitingFactorName.RAINFALL, ImpactLevel.HIGH, 450)]

    @pytest.mark.parametrize("temperature", [10, 35])
    def test_temperature_out_of_range(self, analyzer, profiles, temperature):
        factors = analyze(analyzer, profiles, temperature=temperature)
        assert factors == [LimitingFactor(LimitingFactorName.TEMPERATURE, ImpactLevel.MEDIUM, temperature)]

    def test_multiple_factors_in_fixed_order(self, analyzer, profiles):
        factors = analyze(analyzer, profiles, soil_ph=8.0, nitrogen=50, rainfall=300, temperature=40)
        assert names(factors) == [
            LimitingFactorName.SOIL_PH,
            LimitingFactorName.NITROGEN,
            LimitingFactorName.RAINFALL,
            LimitingFactorName.TEMPERATURE,
        ]

    def test_unknown_crop_uses_default_ranges(self, analyzer, profiles):
        assert names(analyze(analyzer, profiles, crop_type="barley", nitrogen=110)) == [
            LimitingFactorName.NITROGEN
        ]


class TestCropSpecificRanges:

    def test_melon_ph_range_is_narrower(self, analyzer, profiles):
        assert names(analyze(analyzer, profiles, crop_type="melon", soil_ph=6.2)) == [
            LimitingFactorName.SOIL_PH
        ]

    def test_melon_temperature_minimum(self, analyzer, profiles):
        assert names(analyze(analyzer, profiles, crop_type="melon", temperature=20)) == [
            LimitingFactorName.TEMPERATURE
        ]

    def test_pumpkin_rainfall_minimum(self, analyzer, profiles):
        assert names(analyze(analyzer, profiles, crop_type="pumpkin", rainfall=620)) == [
            LimitingFactorName.RAINFALL
        ]

    def test_cilantro_nitrogen_minimum(self, analyzer, profiles):
        assert analyze(analyzer, profiles, crop_type="cilantro", temperature=20, nitrogen=90) == []
        assert names(analyze(analyzer, profiles, crop_type="cilantro", temperature=20, nitrogen=70)) == [
            LimitingFactorName.NITROGEN
        ]


class TestSpecialRules:

    def test_melon_on_clay_has_poor_drainage(self, analyzer, profiles):
        factors = analyze(analyzer, profiles, crop_type="melon", soil_type="clay", soil_ph=6.5, rainfall=800)
        assert factors == [
            LimitingFactor(LimitingFactorName.SOIL_DRAINAGE, ImpactLevel.MEDIUM, "Poor drainage in clay soil")
        ]

    def test_pumpkin_on_clay_has_poor_drainage(self, analyzer, profiles):
        assert names(analyze(analyzer, profiles, crop_type="pumpkin", soil_type="clay")) == [
            LimitingFactorName.SOIL_DRAINAGE
        ]

    def test_corn_on_clay_has_no_drainage_factor(self, analyzer, profiles):
        assert analyze(analyzer, profiles, soil_type="clay") == []

    def test_melon_on_sandy_soil_has_no_drainage_factor(self, analyzer, profiles):
        assert analyze(analyzer, profiles, crop_type="melon", soil_type="sandy") == []

    def test_cilantro_at_temperature_max_only_heat_stress(self, analyzer, profiles):
        # 25 °C is the inclusive upper bound of cilantro's range
        factors = analyze(analyzer, profiles, crop_type="cilantro", temperature=25)
        assert factors == [LimitingFactor(LimitingFactorName.HEAT_STRESS_RISK, ImpactLevel.HIGH, 25)]

    def test_cilantro_above_range_has_temperature_and_heat_stress(self, analyzer, profiles):
        factors = analyze(analyzer, profiles, crop_type="cilantro", temperature=26)
        assert names(factors) == [LimitingFactorName.TEMPERATURE, LimitingFactorName.HEAT_STRESS_RISK]
        assert factors[1].impact == ImpactLevel.HIGH

    def test_cilantro_at_heat_threshold_is_not_stressed(self, analyzer, profiles):
        assert analyze(analyzer, profiles, crop_type="cilantro", temperature=22) == []

    def test_heat_stress_only_for_sensitive_crops(self, analyzer, profiles):
        assert analyze(analyzer, profiles, crop_type="pumpkin", temperature=28) == []

    def test_all_six_factors_can_fire(self, analyzer):
        config = {
            "default": {
                "base_yield": 5.0,
                "soil_multipliers": {"clay": 1.0},
                "ph_optimal": 6.5, "ph_min": 6.0, "ph_max": 7.0,
                "n_optimal": 100, "p_optimal": 50, "k_optimal": 100, "n_min": 80,
                "temp_optimal": 20, "temp_min": 10, "temp_max": 25,
                "rainfall_optimal": 600, "rainfall_min": 400,
                "irrigation_bonus": {"none": 1.0},
            },
            "crops": {
                "testcrop": {"special_rules": ["heat-stress-sensitive", "drainage-sensitive"]},
            },
        }
        table = CropProfileTable(config)
        observation = make_observation(
            crop_type="testcrop", soil_type="clay", soil_ph=4.0, nitrogen=10, rainfall=100, temperature=40
        )
        factors = analyzer.analyze(observation, table.profile_for("testcrop"))
        assert names(factors) == [
            LimitingFactorName.SOIL_PH,
            LimitingFactorName.NITROGEN,
            LimitingFactorName.RAINFALL,
            LimitingFactorName.TEMPERATURE,
            LimitingFactorName.HEAT_STRESS_RISK,
            LimitingFactorName.SOIL_DRAINAGE,
        ]


class TestIdempotence:

    def test_repeated_analysis_is_identical(self, analyzer, profiles):
        observation = make_observation(crop_type="melon", soil_type="clay", soil_ph=5.0, nitrogen=20)
        profile = profiles.profile_for("melon")
        assert analyzer.analyze(observation, profile) == analyzer.analyze(observation, profile)

    def test_factor_serialization(self):
        factor = LimitingFactor(LimitingFactorName.SOIL_PH, ImpactLevel.HIGH, 5.5)
        assert factor.to_dict() == {"factor": "Soil pH", "impact": "High", "value": 5.5}
