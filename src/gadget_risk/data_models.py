"""
데이터 모델 정의 모듈: 위험도 평가 시스템에서 사용되는 핵심 데이터 구조들

이 모듈은 다음 데이터 클래스들을 정의합니다:
- AssessmentInput: 사용자가 설문으로 입력한 디지털 습관 지표
- RiskLevel: 위험 수준 분류 (Low / Moderate / High)
- FeatureContribution: 결과 화면에 표시되는 고정 기여 요인
- PredictionResult: 점수 계산 결과와 선택적 AI 분석
- ProgressEntry: 사용자별로 저장되는 평가 기록
- ChatMessage: 건강 도우미 대화 기록
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .analysis_schema import AIAnalysis

# 스네이크 케이스 필드 -> 원본 JSON 페이로드의 카멜 케이스 키
ASSESSMENT_FIELD_KEYS = {
    "age": "age",
    "gender": "gender",
    "location": "location",
    "total_app_usage_hours": "totalAppUsageHours",
    "daily_screen_time_hours": "dailyScreenTimeHours",
    "number_of_apps_used": "numberOfAppsUsed",
    "social_media_usage_hours": "socialMediaUsageHours",
    "productivity_app_usage_hours": "productivityAppUsageHours",
    "gaming_app_usage_hours": "gamingAppUsageHours",
    "sleep_hours": "sleepHours",
    "anxiety_level": "anxietyLevel",
    "physical_activity_hours": "physicalActivityHours",
    "mood_status": "moodStatus",
}


@dataclass(frozen=True)
class AssessmentInput:
    """
    사용자가 한 번의 제출로 입력한 디지털 습관 지표

    값의 범위 검증은 호출자(validation 모듈)의 책임이며,
    점수 계산기는 입력값을 그대로 사용합니다.
    """
    age: int                              # 나이 (5-100)
    gender: str                           # Male / Female / Other
    location: str                         # 지역 (보고용, 점수 계산에는 미사용)
    total_app_usage_hours: float          # 전체 앱 사용 시간
    daily_screen_time_hours: float        # 일일 화면 사용 시간
    number_of_apps_used: int              # 사용하는 앱 개수
    social_media_usage_hours: float       # 소셜 미디어 사용 시간
    productivity_app_usage_hours: float   # 생산성 앱 사용 시간
    gaming_app_usage_hours: float         # 게임 앱 사용 시간
    sleep_hours: float                    # 수면 시간
    anxiety_level: int                    # 불안 수준 (1-10)
    physical_activity_hours: float        # 주간 신체 활동 시간
    mood_status: str                      # 기분 상태 (보고 및 AI 프롬프트용)

    def to_dict(self) -> Dict[str, Any]:
        """카멜 케이스 키를 사용하는 JSON 호환 딕셔너리로 변환"""
        return {key: getattr(self, name) for name, key in ASSESSMENT_FIELD_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssessmentInput":
        """
        카멜 케이스 또는 스네이크 케이스 키를 가진 매핑에서 입력 생성

        Args:
            data: 설문 응답 매핑

        Returns:
            AssessmentInput 인스턴스

        Raises:
            KeyError: 필수 필드가 없을 때
        """
        values = {}
        for name, key in ASSESSMENT_FIELD_KEYS.items():
            if key in data:
                values[name] = data[key]
            elif name in data:
                values[name] = data[name]
            else:
                raise KeyError(f"Missing assessment field: {key}")
        return cls(**values)


class RiskLevel(str, Enum):
    """위험 수준 분류"""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"

    @property
    def label(self) -> str:
        """결과 화면에 표시되는 라벨"""
        return RISK_LEVEL_LABELS[self]


RISK_LEVEL_LABELS = {
    RiskLevel.LOW: "Low Risk",
    RiskLevel.MODERATE: "Moderate Risk",
    RiskLevel.HIGH: "High Addiction Risk",
}


@dataclass(frozen=True)
class FeatureContribution:
    """결과 화면에 표시되는 요인과 고정 기여 가중치"""
    name: str            # 요인 이름 (예: "Social Media")
    value: float         # 사용자 입력에서 가져온 값
    contribution: int    # 고정 가중치 (데이터로 재계산하지 않음)


@dataclass(frozen=True)
class PredictionResult:
    """
    점수 계산 결과

    결정적 필드는 한 번 생성되면 변하지 않으며,
    ai_analysis는 텍스트 생성 호출이 성공하고 검증된 경우에만 채워집니다.
    """
    is_addicted: bool
    probability: float
    risk_level: RiskLevel
    anomaly_detected: bool
    features: Tuple[FeatureContribution, ...]
    recommendations: Tuple[str, ...]          # 규칙 기반 기본 추천 목록
    ai_analysis: Optional[AIAnalysis] = None

    def with_analysis(self, analysis: Optional[AIAnalysis]) -> "PredictionResult":
        """AI 분석을 포함한 사본 반환 (결정적 필드는 그대로 유지)"""
        return replace(self, ai_analysis=analysis)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "isAddicted": self.is_addicted,
            "probability": self.probability,
            "riskLevel": self.risk_level.value,
            "features": [
                {"name": f.name, "value": f.value, "contribution": f.contribution}
                for f in self.features
            ],
            "anomalyDetected": self.anomaly_detected,
            "recommendations": list(self.recommendations),
        }
        if self.ai_analysis is not None:
            data["aiAnalysis"] = self.ai_analysis.model_dump()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PredictionResult":
        analysis = data.get("aiAnalysis")
        return cls(
            is_addicted=bool(data["isAddicted"]),
            probability=float(data["probability"]),
            risk_level=RiskLevel(data["riskLevel"]),
            anomaly_detected=bool(data["anomalyDetected"]),
            features=tuple(
                FeatureContribution(
                    name=f["name"], value=f["value"], contribution=f["contribution"]
                )
                for f in data.get("features", [])
            ),
            recommendations=tuple(data.get("recommendations", [])),
            ai_analysis=AIAnalysis.model_validate(analysis) if analysis else None,
        )


@dataclass(frozen=True)
class ProgressEntry:
    """
    사용자별로 저장되는 평가 기록

    입력과 결과를 한 쌍으로 묶고, 생성된 식별자와
    ISO-8601 타임스탬프를 함께 보관합니다.
    """
    entry_id: str
    user_id: str
    timestamp: str
    inputs: AssessmentInput
    result: PredictionResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "user_id": self.user_id,
            "timestamp": self.timestamp,
            "progress_payload": {
                "inputs": self.inputs.to_dict(),
                "result": self.result.to_dict(),
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProgressEntry":
        payload = data["progress_payload"]
        return cls(
            entry_id=data["entry_id"],
            user_id=data["user_id"],
            timestamp=data["timestamp"],
            inputs=AssessmentInput.from_dict(payload["inputs"]),
            result=PredictionResult.from_dict(payload["result"]),
        )


@dataclass(frozen=True)
class ChatMessage:
    """건강 도우미 대화의 한 메시지"""
    role: str        # user / model / system
    content: str
    timestamp: str = field(default="")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessage":
        return cls(role=data["role"], content=data["content"], timestamp=data.get("timestamp", ""))
