"""위험도 점수 계산 모듈: 설문 지표를 가중 합산하여 중독 위험도를 분류하는 모듈

이 모듈은 다음 단계로 결정적인 결과를 계산합니다:
- 행동 규칙: 화면/소셜/게임 사용 시간이 모두 기준 이상인지 확인
- 웰니스 규칙: 수면 부족 또는 높은 불안 수준 확인
- 가중 점수: 다섯 가지 지표의 정규화된 값에 가중치를 곱해 합산
- 위험 수준: 확률 임계값과 행동 규칙으로 Low / Moderate / High 결정
- 이상치 탐지: 모집단 평균/표준편차 기준 화면 사용 시간의 z-score
- 고정 기여 요인 표와 규칙 기반 기본 추천 목록

입력 범위는 검증하지 않으며, 범위를 벗어난 값도 그대로 계산에 반영됩니다.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Tuple

from .data_models import AssessmentInput, FeatureContribution, PredictionResult, RiskLevel

logger = logging.getLogger(__name__)

# 각 지표의 정규화 분모와 가중치
SCREEN_TIME_SCALE, SCREEN_TIME_WEIGHT = 14, 0.25
SOCIAL_MEDIA_SCALE, SOCIAL_MEDIA_WEIGHT = 6, 0.3
GAMING_SCALE, GAMING_WEIGHT = 5, 0.2
ANXIETY_SCALE, ANXIETY_WEIGHT = 10, 0.15
SLEEP_TARGET_HOURS, SLEEP_DEBT_WEIGHT = 8, 0.1

# 확률 상한과 고위험 하한
MAX_PROBABILITY = 0.99
HIGH_RISK_PROBABILITY_FLOOR = 0.85

# 위험 수준 임계값
MODERATE_LOWER_BOUND = 0.4
HIGH_LOWER_BOUND = 0.75

# 화면 사용 시간 모집단 통계 (이상치 탐지용)
SCREEN_TIME_MEAN = 7.69
SCREEN_TIME_STD = 3.71
ANOMALY_Z_THRESHOLD = 2.5

# 결과 화면의 고정 기여 가중치 (데이터로 재계산하지 않음)
FEATURE_WEIGHTS = {
    "Social Media": 40,
    "Gaming": 20,
    "Anxiety": 15,
    "Sleep Debt": 10,
}

# 규칙 기반 기본 추천 문구
SOCIAL_MEDIA_TIP = "Limit social media usage to under 2 hours daily."
GAMING_TIP = "Reduce gaming sessions; try the 20-20-20 rule."
SCREEN_TIME_TIP = "Implement a 'Digital Detox' after 8 PM."
SLEEP_TIP = "Prioritize sleep: No screens 1 hour before bed."
ANXIETY_TIP = "Consider mindfulness apps instead of doom-scrolling."


@dataclass(frozen=True)
class RiskRules:
    """고위험 규칙 평가 결과"""
    high_risk_behavior: bool
    high_risk_wellness: bool
    high_risk: bool


def evaluate_rules(data: AssessmentInput) -> RiskRules:
    """
    행동 규칙과 웰니스 규칙을 평가하는 함수

    결합 규칙은 `behavior or (behavior and wellness)` 형태로 유지되며,
    이는 행동 규칙과 동치입니다. 웰니스 규칙은 계산되지만 결과를 바꾸지 않습니다.

    Args:
        data: 설문 응답

    Returns:
        규칙별 평가 결과
    """
    high_risk_behavior = (
        data.daily_screen_time_hours >= 6
        and data.social_media_usage_hours >= 3
        and data.gaming_app_usage_hours >= 2
    )
    high_risk_wellness = data.sleep_hours < 5 or data.anxiety_level >= 8
    high_risk = high_risk_behavior or (high_risk_behavior and high_risk_wellness)
    return RiskRules(high_risk_behavior, high_risk_wellness, high_risk)


def weighted_score(data: AssessmentInput) -> float:
    """다섯 가지 지표의 가중 합 (범위 제한 없음)"""
    return (
        (data.daily_screen_time_hours / SCREEN_TIME_SCALE) * SCREEN_TIME_WEIGHT
        + (data.social_media_usage_hours / SOCIAL_MEDIA_SCALE) * SOCIAL_MEDIA_WEIGHT
        + (data.gaming_app_usage_hours / GAMING_SCALE) * GAMING_WEIGHT
        + (data.anxiety_level / ANXIETY_SCALE) * ANXIETY_WEIGHT
        + ((SLEEP_TARGET_HOURS - min(data.sleep_hours, SLEEP_TARGET_HOURS)) / SLEEP_TARGET_HOURS)
        * SLEEP_DEBT_WEIGHT
    )


def classify_risk(probability: float, high_risk: bool) -> RiskLevel:
    """
    확률과 고위험 여부로 위험 수준을 결정하는 함수

    뒤의 조건이 앞의 조건을 덮어씁니다 (High가 Moderate보다 우선).
    """
    level = RiskLevel.LOW
    if MODERATE_LOWER_BOUND < probability < HIGH_LOWER_BOUND:
        level = RiskLevel.MODERATE
    if probability >= HIGH_LOWER_BOUND or high_risk:
        level = RiskLevel.HIGH
    return level


def screen_time_z_score(daily_screen_time_hours: float) -> float:
    return abs((daily_screen_time_hours - SCREEN_TIME_MEAN) / SCREEN_TIME_STD)


def detect_anomaly(daily_screen_time_hours: float) -> bool:
    return screen_time_z_score(daily_screen_time_hours) > ANOMALY_Z_THRESHOLD


def build_feature_contributions(data: AssessmentInput) -> Tuple[FeatureContribution, ...]:
    """결과 화면의 고정 요인 표 생성 (값만 입력에서 가져옴)"""
    values = {
        "Social Media": data.social_media_usage_hours,
        "Gaming": data.gaming_app_usage_hours,
        "Anxiety": data.anxiety_level,
        "Sleep Debt": max(0, SLEEP_TARGET_HOURS - data.sleep_hours),
    }
    return tuple(
        FeatureContribution(name=name, value=values[name], contribution=weight)
        for name, weight in FEATURE_WEIGHTS.items()
    )


def build_legacy_recommendations(data: AssessmentInput) -> Tuple[str, ...]:
    """
    독립적으로 발동한 규칙마다 고정 문구를 순서대로 추가

    발동한 규칙이 없으면 빈 목록을 반환합니다.
    """
    tips: List[str] = []
    if data.social_media_usage_hours > 2:
        tips.append(SOCIAL_MEDIA_TIP)
    if data.gaming_app_usage_hours > 1:
        tips.append(GAMING_TIP)
    if data.daily_screen_time_hours > 6:
        tips.append(SCREEN_TIME_TIP)
    if data.sleep_hours < 7:
        tips.append(SLEEP_TIP)
    if data.anxiety_level > 6:
        tips.append(ANXIETY_TIP)
    return tuple(tips)


def round_probability(probability: float) -> float:
    """
    소수점 둘째 자리로 반올림

    부동소수점 값의 정확한 이진 표현을 기준으로 half-up 반올림합니다
    (예: 0.125 -> 0.13).
    """
    return float(Decimal(probability).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_probability(data: AssessmentInput, rules: RiskRules | None = None) -> float:
    """
    반올림 전의 위험 확률 계산 (범위 제한과 고위험 하한 적용)

    Args:
        data: 설문 응답
        rules: 이미 평가한 규칙 결과 (None이면 새로 평가)

    Returns:
        [0, 0.99] 범위의 확률
    """
    if rules is None:
        rules = evaluate_rules(data)
    probability = min(max(weighted_score(data), 0), MAX_PROBABILITY)

    # 고위험이면 확률 하한 적용
    if rules.high_risk:
        probability = max(probability, HIGH_RISK_PROBABILITY_FLOOR)
    return probability


def format_confidence(probability: float) -> str:
    """확률을 소수점 첫째 자리 백분율 문자열로 변환 (예: 0.015 -> "1.5")"""
    return str(Decimal(probability * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def score_assessment(data: AssessmentInput) -> PredictionResult:
    """
    설문 응답으로 결정적인 위험도 결과를 계산하는 함수

    Args:
        data: 설문 응답 (검증되지 않은 값도 그대로 사용)

    Returns:
        ai_analysis가 없는 PredictionResult
    """
    # 1. 고위험 규칙 평가
    rules = evaluate_rules(data)

    # 2. 가중 점수를 [0, 0.99] 범위로 제한하고 고위험 하한 적용
    score = weighted_score(data)
    probability = compute_probability(data, rules)

    # 3. 위험 수준 결정
    risk_level = classify_risk(probability, rules.high_risk)

    # 4. 이상치 탐지
    anomaly_detected = detect_anomaly(data.daily_screen_time_hours)

    logger.debug(
        "Scored assessment: score=%.4f probability=%.4f behavior=%s wellness=%s level=%s anomaly=%s",
        score,
        probability,
        rules.high_risk_behavior,
        rules.high_risk_wellness,
        risk_level.value,
        anomaly_detected,
    )

    return PredictionResult(
        is_addicted=rules.high_risk,
        probability=round_probability(probability),
        risk_level=risk_level,
        anomaly_detected=anomaly_detected,
        features=build_feature_contributions(data),
        recommendations=build_legacy_recommendations(data),
    )
