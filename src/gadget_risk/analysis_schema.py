"""AI 분석 스키마 모듈: 텍스트 생성 서비스 응답의 형태를 검증하는 pydantic 모델

외부 언어 모델이 돌려준 JSON은 이 모델로 검증된 경우에만 결과에 포함됩니다.
필드가 하나라도 빠지거나 타입이 다르면 응답 전체가 거부됩니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AIRecommendationLists(BaseModel):
    """카테고리별 추천 목록 (5개 카테고리 모두 필수)"""

    model_config = ConfigDict(frozen=True)

    usage_control: List[str] = Field(description="Screen-time caps, app scheduling")
    sleep_hygiene: List[str] = Field(description="Device cutoff, night routines")
    productivity_focus: List[str] = Field(description="Study blocks, distraction reduction")
    mental_wellbeing: List[str] = Field(description="Offline activities, mindfulness")
    daily_action_plan: List[str] = Field(description="3-5 simple steps for today")


class AIAnalysis(BaseModel):
    """
    언어 모델이 생성한 구조화된 분석 결과

    요약, 위험 수준 설명, 이상치 설명, 카테고리별 추천,
    진행 상황 추적 팁, 면책 문구로 구성됩니다.
    """

    model_config = ConfigDict(frozen=True)

    summary: str
    risk_level_explanation: str
    anomaly_explanation: str
    recommendations: AIRecommendationLists
    progress_tracking_tip: str
    disclaimer: str


@dataclass(frozen=True)
class EnrichmentOutcome:
    """
    AI 보강 호출의 결과

    실패는 예외가 아니라 예상 가능한 결과값으로 표현합니다.
    성공 시 analysis만, 실패 시 error만 채워집니다.
    """
    analysis: Optional[AIAnalysis] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.analysis is not None

    @classmethod
    def success(cls, analysis: AIAnalysis) -> "EnrichmentOutcome":
        return cls(analysis=analysis)

    @classmethod
    def failure(cls, reason: str) -> "EnrichmentOutcome":
        return cls(error=reason)
