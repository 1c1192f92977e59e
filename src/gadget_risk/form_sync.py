"""기록 서비스 모듈: 평가 결과를 원격 폼에 미러링하고 로컬 저장소에 보관

이 모듈은 다음 구성 요소를 제공합니다:
- GoogleFormMirror: 평가 결과를 원격 폼 엔드포인트로 전송 (쓰기 전용, 최선 노력)
- ProgressRecorder: 기록 저장, 이력/최신/기준 기록 조회, 대화 기록 관리

저장 실패는 PersistenceError로 호출자에게 전달되며, 점수 계산과는 독립적입니다.
"""
from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import httpx

from .data_models import AssessmentInput, ChatMessage, PredictionResult, ProgressEntry
from .storage import ORDER_ASC, ORDER_DESC, PersistenceError, ProgressStore

logger = logging.getLogger(__name__)

CHAT_ROLES = ("user", "model", "system")


@dataclass(frozen=True)
class FormFieldIds:
    """원격 폼의 입력 필드 ID"""
    user_id: str = "entry.210620355"
    timestamp: str = "entry.36374783"
    input_json: str = "entry.730137239"
    prediction_json: str = "entry.1621251062"
    ai_json: str = "entry.2067402192"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class GoogleFormMirror:
    """
    평가 결과를 원격 폼으로 전송하는 쓰기 전용 미러

    폼 응답은 읽어오지 않으며, 전송 결과는 성공 여부만 반환합니다.
    """

    def __init__(
        self,
        form_url: str,
        field_ids: FormFieldIds | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        """
        Args:
            form_url: 폼 응답 전송 URL
            field_ids: 폼 필드 ID (None이면 기본값)
            client: 미리 생성된 httpx 클라이언트 (테스트 등에서 주입)
            timeout: 요청 타임아웃 (초)
        """
        self.form_url = form_url
        self.field_ids = field_ids or FormFieldIds()
        self.client = client
        self.timeout = timeout

    def build_form_data(self, entry: ProgressEntry) -> dict:
        """기록을 폼 필드 딕셔너리로 변환"""
        result = entry.result
        prediction_summary = {
            "isAddicted": result.is_addicted,
            "probability": result.probability,
            "riskLevel": result.risk_level.value,
            "anomalyDetected": result.anomaly_detected,
        }
        ai_payload = result.ai_analysis.model_dump() if result.ai_analysis is not None else {}
        return {
            self.field_ids.user_id: entry.user_id,
            self.field_ids.timestamp: entry.timestamp,
            self.field_ids.input_json: json.dumps(entry.inputs.to_dict()),
            self.field_ids.prediction_json: json.dumps(prediction_summary),
            self.field_ids.ai_json: json.dumps(ai_payload),
        }

    async def submit(self, entry: ProgressEntry) -> bool:
        """
        기록을 원격 폼으로 전송하는 함수

        Returns:
            전송 성공 여부 (실패는 로그만 남기고 예외를 전파하지 않음)
        """
        data = self.build_form_data(entry)
        try:
            if self.client is not None:
                response = await self.client.post(self.form_url, data=data)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.form_url, data=data)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(f"Form submission failed: {exc}")
            return False

        logger.info("Data submitted to form successfully.")
        return True


class ProgressRecorder:
    """
    평가 기록 서비스 클래스

    로컬 저장소를 기준 저장소로 사용하고, 미러가 설정되어 있으면
    저장 전에 원격 폼으로도 전송합니다.
    """

    def __init__(self, store: ProgressStore, mirror: Optional[GoogleFormMirror] = None) -> None:
        self.store = store
        self.mirror = mirror

    async def save_progress(
        self,
        user_id: str,
        data: AssessmentInput,
        result: PredictionResult,
    ) -> ProgressEntry:
        """
        새 평가 기록을 저장하는 함수

        Args:
            user_id: 사용자 ID
            data: 설문 응답
            result: 예측 결과

        Returns:
            생성된 식별자와 타임스탬프를 가진 ProgressEntry

        Raises:
            PersistenceError: 사용자 ID가 없거나 로컬 저장에 실패한 경우
        """
        if not user_id:
            raise PersistenceError("No user ID provided for save_progress")

        entry = ProgressEntry(
            entry_id=str(uuid.uuid4()),
            user_id=user_id,
            timestamp=utc_timestamp(),
            inputs=data,
            result=result,
        )

        # 원격 미러 전송 (실패해도 로컬 저장은 진행)
        if self.mirror is not None and not await self.mirror.submit(entry):
            logger.warning(f"Form mirror rejected entry {entry.entry_id}; keeping local copy only")

        try:
            self.store.append(entry)
        except PersistenceError:
            logger.error(f"Error saving progress for user {user_id}")
            raise
        except OSError as exc:
            raise PersistenceError(f"Error saving progress: {exc}") from exc

        return entry

    async def get_progress_history(self, user_id: str, order: str = ORDER_DESC) -> List[ProgressEntry]:
        """사용자의 평가 이력을 시간순으로 조회 (사용자 ID가 없으면 빈 목록)"""
        if not user_id:
            return []
        return self.store.list_entries(user_id, order)

    async def get_latest_progress(self, user_id: str) -> Optional[ProgressEntry]:
        """가장 최근 평가 기록"""
        history = await self.get_progress_history(user_id, ORDER_DESC)
        return history[0] if history else None

    async def get_baseline_progress(self, user_id: str) -> Optional[ProgressEntry]:
        """첫 번째 평가 기록 (기준선)"""
        history = await self.get_progress_history(user_id, ORDER_ASC)
        return history[0] if history else None

    async def save_chat_message(
        self,
        user_id: str,
        role: str,
        content: str,
        session_id: Optional[str] = None,
    ) -> Optional[ChatMessage]:
        """
        대화 메시지를 저장하는 함수

        사용자 ID나 세션 ID가 없으면 저장하지 않고 None을 반환합니다.
        """
        if not user_id or not session_id:
            return None
        if role not in CHAT_ROLES:
            raise ValueError(f"Unknown chat role: {role}")

        message = ChatMessage(role=role, content=content, timestamp=utc_timestamp())
        self.store.append_chat_message(user_id, session_id, message)
        return message

    async def get_chat_history(
        self,
        user_id: str,
        session_id: Optional[str] = None,
        limit: int = 50,
    ) -> List[ChatMessage]:
        """세션의 최근 대화 메시지 (최대 limit개, 오래된 순)"""
        if not user_id or not session_id:
            return []
        messages = self.store.list_chat_messages(user_id, session_id)
        return messages[-limit:] if limit > 0 else []
