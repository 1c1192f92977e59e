"""Tests for caller-side assessment validation."""

from dataclasses import replace

import pytest

from gadget_risk.reference_data import GENDERS, LOCATIONS, MOOD_STATUSES, create_sample_assessments
from gadget_risk.validation import AssessmentValidationError, collect_errors, validate_assessment


class TestValidAssessments:

    def test_initial_defaults_are_valid(self, initial_assessment):
        assert collect_errors(initial_assessment) == {}
        validate_assessment(initial_assessment)

    def test_all_samples_are_valid(self):
        for data in create_sample_assessments().values():
            assert collect_errors(data) == {}

    def test_reference_enumerations(self):
        assert GENDERS == ("Male", "Female", "Other")
        assert "Depressed" in MOOD_STATUSES
        assert len(LOCATIONS) == 36


class TestRejectedAssessments:

    @pytest.mark.parametrize("field,value", [
        ("age", 4),
        ("age", 101),
        ("total_app_usage_hours", 25),
        ("daily_screen_time_hours", -1),
        ("number_of_apps_used", -3),
        ("sleep_hours", 24.5),
        ("anxiety_level", 0),
        ("anxiety_level", 11),
        ("physical_activity_hours", -2),
        ("gender", "Unknown"),
        ("mood_status", "Bored"),
        ("location", "Atlantis"),
    ])
    def test_single_field_errors(self, initial_assessment, field, value):
        data = replace(initial_assessment, **{field: value})
        errors = collect_errors(data)

        assert field in errors
        with pytest.raises(AssessmentValidationError) as exc_info:
            validate_assessment(data)
        assert field in exc_info.value.errors

    def test_app_hours_cannot_exceed_a_day(self, initial_assessment):
        data = replace(
            initial_assessment,
            social_media_usage_hours=10,
            productivity_app_usage_hours=10,
            gaming_app_usage_hours=5,
        )
        errors = collect_errors(data)

        assert "general" in errors
        assert "24" in errors["general"]

    def test_exactly_24_hours_is_allowed(self, initial_assessment):
        data = replace(
            initial_assessment,
            social_media_usage_hours=10,
            productivity_app_usage_hours=10,
            gaming_app_usage_hours=4,
        )
        assert "general" not in collect_errors(data)

    def test_error_is_a_value_error(self, initial_assessment):
        data = replace(initial_assessment, age=2, anxiety_level=20)
        with pytest.raises(ValueError) as exc_info:
            validate_assessment(data)

        assert set(exc_info.value.errors) == {"age", "anxiety_level"}
        assert "Invalid assessment" in str(exc_info.value)
