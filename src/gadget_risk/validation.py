"""입력 검증 모듈: 점수 계산 전에 호출자가 설문 응답을 검증하는 규칙

점수 계산기는 입력을 다시 검증하지 않으므로, 범위를 벗어난 값은
이 모듈에서 걸러내야 합니다.
"""
from __future__ import annotations

from typing import Dict

from .data_models import AssessmentInput
from .reference_data import GENDERS, LOCATIONS, MOOD_STATUSES

MAX_HOURS_PER_DAY = 24


class AssessmentValidationError(ValueError):
    """필드별 오류 메시지를 담은 검증 예외"""

    def __init__(self, errors: Dict[str, str]) -> None:
        self.errors = dict(errors)
        details = "; ".join(f"{name}: {message}" for name, message in self.errors.items())
        super().__init__(f"Invalid assessment: {details}")


def collect_errors(data: AssessmentInput) -> Dict[str, str]:
    """
    설문 응답에서 규칙을 위반한 필드와 메시지를 수집

    Args:
        data: 검증할 설문 응답

    Returns:
        필드 이름에서 오류 메시지로의 매핑 (문제가 없으면 빈 딕셔너리)
    """
    errors: Dict[str, str] = {}

    # 1단계: 기본 정보
    if data.age < 5 or data.age > 100:
        errors["age"] = "Age must be between 5 and 100."
    if data.gender not in GENDERS:
        errors["gender"] = f"Gender must be one of {', '.join(GENDERS)}."
    if data.location not in LOCATIONS:
        errors["location"] = "Unknown location."

    # 2단계: 전체 사용량
    if not 0 <= data.total_app_usage_hours <= MAX_HOURS_PER_DAY:
        errors["total_app_usage_hours"] = "Total app usage must be between 0 and 24 hours."
    if not 0 <= data.daily_screen_time_hours <= MAX_HOURS_PER_DAY:
        errors["daily_screen_time_hours"] = "Daily screen time must be between 0 and 24 hours."
    if data.number_of_apps_used < 0:
        errors["number_of_apps_used"] = "Number of apps cannot be negative."

    # 3단계: 앱 종류별 사용량 (합계가 하루를 넘을 수 없음)
    for name in (
        "social_media_usage_hours",
        "productivity_app_usage_hours",
        "gaming_app_usage_hours",
    ):
        if getattr(data, name) < 0:
            errors[name] = "Usage hours cannot be negative."
    total_specific = (
        data.social_media_usage_hours
        + data.productivity_app_usage_hours
        + data.gaming_app_usage_hours
    )
    if total_specific > MAX_HOURS_PER_DAY:
        errors["general"] = "Social media, productivity and gaming hours cannot exceed 24 in total."

    # 4단계: 웰니스
    if not 0 <= data.sleep_hours <= MAX_HOURS_PER_DAY:
        errors["sleep_hours"] = "Sleep hours must be between 0 and 24."
    if data.anxiety_level < 1 or data.anxiety_level > 10:
        errors["anxiety_level"] = "Anxiety level must be on a 1-10 scale."
    if data.physical_activity_hours < 0:
        errors["physical_activity_hours"] = "Physical activity cannot be negative."
    if data.mood_status not in MOOD_STATUSES:
        errors["mood_status"] = f"Mood must be one of {', '.join(MOOD_STATUSES)}."

    return errors


def validate_assessment(data: AssessmentInput) -> None:
    """규칙 위반이 있으면 AssessmentValidationError 발생"""
    errors = collect_errors(data)
    if errors:
        raise AssessmentValidationError(errors)
