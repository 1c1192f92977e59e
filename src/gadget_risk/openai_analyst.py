"""OpenAI API-based Risk Analyst"""
from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .analysis_schema import AIAnalysis, EnrichmentOutcome
from .data_models import AssessmentInput, PredictionResult
from .scoring import compute_probability, format_confidence

logger = logging.getLogger(__name__)

# 응답 앞뒤의 마크다운 코드 블록 표시
FENCE_OPEN_PATTERN = re.compile(r"\A```[A-Za-z]*\s*")
FENCE_CLOSE_PATTERN = re.compile(r"\s*```\Z")

# 행동 기반 추천 생성을 위한 시스템 지시문
AI_SYSTEM_INSTRUCTION = """ROLE:
You are an AI Behavioral Recommendation Engine integrated into a Gadget Addiction Prediction Platform.
Your purpose is to generate personalized, safe, explainable recommendations based on the predicted addiction level, behavioral anomalies, and user input features (including sleep, anxiety, and physical activity).

ABSOLUTE RULES:
- Recommendations must be explainable
- No medical or psychological prescriptions
- Advice must be actionable and realistic
- No fear-based language
- All outputs must align with the prediction results provided in the input
- Tone: Calm, Supportive, Non-judgmental, Professional

RECOMMENDATION CATEGORIES (MANDATORY):
1. Usage Control (Screen-time caps, App scheduling)
2. Sleep Hygiene (Device cutoff, Night routines)
3. Productivity & Focus (Study blocks, Distraction reduction)
4. Mental & Social Well-being (Offline activities, Mindfulness)
5. Daily Action Plan (3-5 simple steps for today)

Return ONLY a valid JSON object in this format:
{
  "summary": "One-paragraph interpretation...",
  "risk_level_explanation": "...",
  "anomaly_explanation": "...",
  "recommendations": {
    "usage_control": ["Tip 1", "Tip 2"],
    "sleep_hygiene": ["Tip 1", "Tip 2"],
    "productivity_focus": ["Tip 1", "Tip 2"],
    "mental_wellbeing": ["Tip 1", "Tip 2"],
    "daily_action_plan": ["Step 1", "Step 2", "Step 3"]
  },
  "progress_tracking_tip": "...",
  "disclaimer": "..."
}"""


def build_analysis_context(data: AssessmentInput, result: PredictionResult) -> Dict[str, Any]:
    """
    언어 모델에 전달할 컨텍스트 객체 구성

    Args:
        data: 설문 응답
        result: 결정적 점수 계산 결과

    Returns:
        예측 결과와 사용자 지표를 담은 JSON 직렬화 가능한 딕셔너리
    """
    return {
        "predicted_addiction_level": result.risk_level.label,
        # 반올림 전 확률 기준의 백분율
        "confidence_score": format_confidence(compute_probability(data)),
        "anomaly_detected": result.anomaly_detected,
        "user_metrics": {
            "screen_time": data.daily_screen_time_hours,
            "social_media": data.social_media_usage_hours,
            "gaming": data.gaming_app_usage_hours,
            "sleep_hours": data.sleep_hours,
            "anxiety_level": data.anxiety_level,
            "physical_activity": data.physical_activity_hours,
            "mood": data.mood_status,
        },
    }


class OpenAIRiskAnalyst:
    """
    OpenAI API를 사용한 위험도 분석 생성기

    결정적 점수 결과를 바탕으로 요약, 설명, 카테고리별 추천을
    구조화된 JSON으로 생성합니다. 한 번의 제출에 한 번만 호출하며 재시도하지 않습니다.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4.1",
        temperature: float = 0.7,
        max_tokens: int = 1200,
        client: Any = None,
    ) -> None:
        """
        OpenAI Risk Analyst 초기화

        Args:
            api_key: OpenAI API 키 (None이면 환경변수 OPENAI_API_KEY 사용)
            model: 사용할 OpenAI 모델
            temperature: 생성 온도
            max_tokens: 최대 토큰 수
            client: 미리 생성된 비동기 클라이언트 (테스트 등에서 주입)
        """
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

        if client is not None:
            self.client = client
            return

        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "OpenAI API key is required. Set OPENAI_API_KEY environment variable or pass api_key parameter."
            )

        # OpenAI 비동기 클라이언트 초기화
        try:
            from openai import AsyncOpenAI
            self.client = AsyncOpenAI(api_key=self.api_key)
        except ImportError as exc:
            raise RuntimeError(
                "openai package is required. Install it with `pip install openai`."
            ) from exc

    async def analyze(self, data: AssessmentInput, result: PredictionResult) -> EnrichmentOutcome:
        """
        점수 결과에 대한 AI 분석을 요청하는 함수

        어떤 실패(네트워크, API 오류, 빈 응답, 잘못된 JSON, 스키마 불일치)도
        예외로 전파하지 않고 실패 결과로 반환합니다.

        Args:
            data: 설문 응답
            result: 결정적 점수 계산 결과

        Returns:
            성공 시 검증된 AIAnalysis를, 실패 시 오류 사유를 담은 EnrichmentOutcome
        """
        context = build_analysis_context(data, result)

        try:
            # OpenAI API 호출 (단일 시도)
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": AI_SYSTEM_INSTRUCTION},
                    {"role": "user", "content": json.dumps(context)},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
            raw_text = response.choices[0].message.content
        except Exception as exc:
            logger.error(f"OpenAI API call failed: {exc}")
            return EnrichmentOutcome.failure(f"request failed: {exc}")

        if not raw_text or not raw_text.strip():
            logger.warning("OpenAI returned an empty analysis")
            return EnrichmentOutcome.failure("empty response")

        logger.info(f"OpenAI response: {raw_text}")
        return self._parse_analysis(raw_text)

    def _parse_analysis(self, generated_text: str) -> EnrichmentOutcome:
        """생성된 텍스트에서 JSON 분석 결과를 추출하고 검증"""
        # 앞뒤 코드 블록 표시만 제거 (```json ... ```)
        text = FENCE_OPEN_PATTERN.sub("", generated_text.strip())
        text = FENCE_CLOSE_PATTERN.sub("", text).strip()

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning(f"Could not parse JSON from: {text}")
            return EnrichmentOutcome.failure(f"malformed JSON: {exc}")

        try:
            analysis = AIAnalysis.model_validate(payload)
        except ValidationError as exc:
            logger.warning(f"AI analysis does not match the expected shape: {exc}")
            return EnrichmentOutcome.failure("schema mismatch")

        return EnrichmentOutcome.success(analysis)


def build_analyst_from_settings(settings) -> Optional[OpenAIRiskAnalyst]:
    """
    설정으로 분석기를 생성 (API 키가 없으면 None)

    Args:
        settings: config.Settings 인스턴스

    Returns:
        OpenAIRiskAnalyst 또는 None
    """
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; AI analysis is disabled")
        return None
    return OpenAIRiskAnalyst(
        api_key=settings.openai_api_key,
        model=settings.model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )
