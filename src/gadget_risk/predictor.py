"""예측 모듈: 결정적 점수 계산과 선택적 AI 분석을 결합하는 진입점

점수 계산이 먼저 끝나고, 분석기가 설정된 경우에만 AI 분석을 한 번 요청합니다.
AI 분석의 성공 여부는 결정적 필드에 영향을 주지 않습니다.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from .analysis_schema import EnrichmentOutcome
from .data_models import AssessmentInput, PredictionResult
from .scoring import score_assessment

logger = logging.getLogger(__name__)


class RiskAnalyst(Protocol):
    """AI 분석기 인터페이스 (OpenAIRiskAnalyst 등)"""

    async def analyze(self, data: AssessmentInput, result: PredictionResult) -> EnrichmentOutcome:
        ...


class RiskPredictor:
    """
    위험도 예측기 클래스

    점수 계산기와 선택적 AI 분석기를 묶어
    한 번의 제출에 대한 최종 결과를 생성합니다.
    """

    def __init__(self, analyst: Optional[RiskAnalyst] = None) -> None:
        """
        Args:
            analyst: AI 분석기 (선택사항, 없으면 결정적 결과만 반환)
        """
        self.analyst = analyst

    async def predict(self, data: AssessmentInput) -> PredictionResult:
        """
        설문 응답에 대한 예측 결과를 생성하는 함수

        Args:
            data: 검증된 설문 응답

        Returns:
            AI 분석이 성공하면 ai_analysis가 포함된 PredictionResult
        """
        # 결정적 점수 계산
        result = score_assessment(data)

        # 분석기가 없으면 스킵
        if self.analyst is None:
            return result

        outcome = await self._enrich(data, result)
        if not outcome.succeeded:
            logger.warning(f"AI recommendation generation failed, using fallback: {outcome.error}")
            return result

        return result.with_analysis(outcome.analysis)

    async def _enrich(self, data: AssessmentInput, result: PredictionResult) -> EnrichmentOutcome:
        """분석기 호출 (분석기 구현이 예외를 던져도 실패 결과로 변환)"""
        try:
            return await self.analyst.analyze(data, result)
        except Exception as exc:
            logger.error(f"AI analyst raised unexpectedly: {exc}")
            return EnrichmentOutcome.failure(str(exc))


async def predict(data: AssessmentInput, analyst: Optional[RiskAnalyst] = None) -> PredictionResult:
    return await RiskPredictor(analyst).predict(data)
