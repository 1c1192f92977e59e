"""설명 생성 모듈: 예측 결과를 사용자에게 보여줄 문장으로 구성

AI 분석이 있으면 그 내용을 사용하고, 없으면 템플릿 기반 기본 문장을 사용합니다.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .data_models import PredictionResult

# 카테고리 키 -> 화면 제목
CATEGORY_TITLES = {
    "usage_control": "Usage Control",
    "sleep_hygiene": "Sleep Hygiene",
    "productivity_focus": "Productivity & Focus",
    "mental_wellbeing": "Mental & Social Well-being",
}

# AI 분석이 없을 때 규칙 기반 추천을 묶는 제목
LEGACY_TITLE = "Suggestions"

# 기본 위험 설명 템플릿
RISK_EXPLANATION_TEMPLATE = (
    "The screening model places you in the {label} band "
    "with an estimated probability of {percent:.0f}%. {verdict}"
)
ELEVATED_VERDICT = "Your current habits suggest a notable dependency on your devices."
CONTAINED_VERDICT = "Your current habits look broadly manageable."

DEFAULT_ANOMALY_EXPLANATION = (
    "Your daily screen time is far outside the range reported by most participants."
)

DEFAULT_DISCLAIMER = (
    "This assessment is an automated screening heuristic, not a medical or "
    "psychological diagnosis. If you are struggling, please reach out to a "
    "qualified professional."
)


@dataclass
class Narrative:
    """결과 화면에 표시되는 설명 묶음"""
    risk_explanation: str
    disclaimer: str
    summary: Optional[str] = None
    anomaly_explanation: Optional[str] = None
    recommendations: Dict[str, List[str]] = field(default_factory=dict)
    daily_action_plan: List[str] = field(default_factory=list)
    tracking_tip: Optional[str] = None
    ai_generated: bool = False


class NarrativeBuilder:
    """
    예측 결과에 대한 설명 생성기 클래스 (템플릿 기반 + AI 분석 사용)
    """

    def build(self, result: PredictionResult) -> Narrative:
        """
        예측 결과로 설명 묶음을 생성하는 함수

        Args:
            result: 예측 결과

        Returns:
            화면 표시용 Narrative
        """
        analysis = result.ai_analysis
        if analysis is None:
            return self._build_fallback(result)

        recommendations = {
            title: list(getattr(analysis.recommendations, key))
            for key, title in CATEGORY_TITLES.items()
        }
        return Narrative(
            risk_explanation=analysis.risk_level_explanation,
            disclaimer=analysis.disclaimer,
            summary=analysis.summary,
            anomaly_explanation=analysis.anomaly_explanation or None,
            recommendations=recommendations,
            daily_action_plan=list(analysis.recommendations.daily_action_plan),
            tracking_tip=analysis.progress_tracking_tip,
            ai_generated=True,
        )

    def _build_fallback(self, result: PredictionResult) -> Narrative:
        """AI 분석이 없을 때 템플릿 기반 설명 생성"""
        verdict = ELEVATED_VERDICT if result.probability > 0.5 else CONTAINED_VERDICT
        risk_explanation = RISK_EXPLANATION_TEMPLATE.format(
            label=result.risk_level.label,
            percent=result.probability * 100,
            verdict=verdict,
        )
        # 규칙 기반 추천이 없으면 빈 섹션은 만들지 않음
        recommendations = {LEGACY_TITLE: list(result.recommendations)} if result.recommendations else {}
        return Narrative(
            risk_explanation=risk_explanation,
            disclaimer=DEFAULT_DISCLAIMER,
            anomaly_explanation=DEFAULT_ANOMALY_EXPLANATION if result.anomaly_detected else None,
            recommendations=recommendations,
        )


def render_text(narrative: Narrative) -> str:
    """설명 묶음을 일반 텍스트 보고서로 변환"""
    lines: List[str] = []
    if narrative.summary:
        lines.append(narrative.summary)
        lines.append("")
    lines.append(narrative.risk_explanation)
    if narrative.anomaly_explanation:
        lines.append(f"Anomaly: {narrative.anomaly_explanation}")

    for title, tips in narrative.recommendations.items():
        if not tips:
            continue
        lines.append("")
        lines.append(f"{title}:")
        lines.extend(f"  - {tip}" for tip in tips)

    if narrative.daily_action_plan:
        lines.append("")
        lines.append("Daily Action Plan:")
        lines.extend(f"  {i}. {step}" for i, step in enumerate(narrative.daily_action_plan, 1))

    if narrative.tracking_tip:
        lines.append("")
        lines.append(f"Tracking tip: {narrative.tracking_tip}")

    lines.append("")
    lines.append(f"Disclaimer: {narrative.disclaimer}")
    return "\n".join(lines)
