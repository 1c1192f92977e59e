from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict

from .data_models import AssessmentInput

GENDERS = ("Male", "Female", "Other")

MOOD_STATUSES = ("Happy", "Neutral", "Stressed", "Anxious", "Depressed")

LOCATIONS = (
    "Andaman and Nicobar Islands",
    "Andhra Pradesh",
    "Arunachal Pradesh",
    "Assam",
    "Bihar",
    "Chandigarh",
    "Chhattisgarh",
    "Dadra and Nagar Haveli and Daman and Diu",
    "Delhi",
    "Goa",
    "Gujarat",
    "Haryana",
    "Himachal Pradesh",
    "Jammu and Kashmir",
    "Jharkhand",
    "Karnataka",
    "Kerala",
    "Ladakh",
    "Lakshadweep",
    "Madhya Pradesh",
    "Maharashtra",
    "Manipur",
    "Meghalaya",
    "Mizoram",
    "Nagaland",
    "Odisha",
    "Puducherry",
    "Punjab",
    "Rajasthan",
    "Sikkim",
    "Tamil Nadu",
    "Telangana",
    "Tripura",
    "Uttar Pradesh",
    "Uttarakhand",
    "West Bengal",
)


@dataclass(frozen=True)
class ModelMetrics:
    name: str
    accuracy: float
    precision: float
    recall: float
    f1: float


# Offline evaluation of the classifiers the heuristic was calibrated against
RESEARCH_METRICS = (
    ModelMetrics("Random Forest Classifier", 1.00, 1.00, 1.00, 1.00),
    # Weighted averages
    ModelMetrics("Support Vector Machine (RBF)", 0.93, 0.94, 0.98, 0.96),
    ModelMetrics("Logistic Regression", 0.905, 0.90, 0.91, 0.90),
)

FEATURE_IMPORTANCE = (
    ("Social Media Usage", 0.43),
    ("Gaming Usage", 0.25),
    ("Daily Screen Time", 0.21),
    ("Productivity Usage", 0.03),
    ("Total App Usage", 0.02),
    ("Number of Apps", 0.02),
)


def create_initial_assessment() -> AssessmentInput:
    return AssessmentInput(
        age=25,
        gender="Male",
        location="Maharashtra",
        total_app_usage_hours=5,
        daily_screen_time_hours=4,
        number_of_apps_used=10,
        social_media_usage_hours=2,
        productivity_app_usage_hours=2,
        gaming_app_usage_hours=1,
        sleep_hours=7,
        anxiety_level=3,
        physical_activity_hours=3,
        mood_status="Neutral",
    )


def create_sample_assessments() -> Dict[str, AssessmentInput]:
    initial = create_initial_assessment()
    samples: Dict[str, AssessmentInput] = {"initial": initial}

    # Light user: short screen time, full night of sleep
    samples["balanced"] = replace(
        initial,
        daily_screen_time_hours=2,
        social_media_usage_hours=1,
        gaming_app_usage_hours=0,
        anxiety_level=2,
        sleep_hours=8,
        mood_status="Happy",
    )

    # Heavy social + gaming use, trips the behavioural rule
    samples["high_risk"] = replace(
        initial,
        total_app_usage_hours=9,
        daily_screen_time_hours=8,
        social_media_usage_hours=4,
        gaming_app_usage_hours=3,
        anxiety_level=5,
        sleep_hours=6,
        mood_status="Stressed",
    )

    # Screen time far outside the population distribution
    samples["outlier"] = replace(
        initial,
        total_app_usage_hours=20,
        daily_screen_time_hours=20,
        social_media_usage_hours=6,
        productivity_app_usage_hours=4,
        gaming_app_usage_hours=5,
        sleep_hours=4,
        anxiety_level=9,
        physical_activity_hours=0,
        mood_status="Anxious",
    )
    return samples
