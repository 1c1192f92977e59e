"""건강 도우미 모듈: 디지털 습관 관리에 대한 대화형 도우미

대화 기록(시스템 지시문 + 이전 메시지)을 유지하면서 사용자 메시지마다
한 번의 채팅 완성 요청을 보내고, 사용자/모델 메시지를 기록 서비스에 저장합니다.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from .form_sync import ProgressRecorder
from .storage import PersistenceError

logger = logging.getLogger(__name__)

ASSISTANT_SYSTEM_INSTRUCTION = """You are a helpful, professional, and empathetic AI behavioral health assistant integrated into a Gadget Addiction Prediction system.

Your Role:
- Provide supportive, science-backed advice on digital wellness, screen time reduction, and healthy habit formation.
- Answer questions about the assessment results and metrics.
- Be encouraging but realistic.

Guidelines:
- Keep responses concise and easy to read.
- Use a polite and professional tone.
- Do not provide medical diagnoses.
- If a user seems distressed, suggest professional help politely."""

GREETING = "Hello. I'm your behavioral health assistant. How can I help you manage your digital habits today?"
SERVICE_UNAVAILABLE_REPLY = "Service unavailable. Please check your API key."
CONNECTION_ERROR_REPLY = "I'm having trouble connecting right now. Please try again."


class HealthAssistant:
    """
    대화형 건강 도우미 클래스

    client가 없으면 서비스 불가 안내를, 요청이 실패하면 연결 오류 안내를 반환합니다.
    실패한 요청의 사용자 메시지는 대화 맥락에서 제외됩니다.
    """

    def __init__(
        self,
        client: Any = None,
        recorder: Optional[ProgressRecorder] = None,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
        model: str = "gpt-4.1",
        temperature: float = 0.7,
    ) -> None:
        """
        Args:
            client: OpenAI 비동기 클라이언트 (None이면 서비스 불가)
            recorder: 대화 기록 저장용 기록 서비스 (선택사항)
            user_id: 대화 기록을 저장할 사용자 ID
            session_id: 대화 세션 ID (None이면 새로 생성)
            model: 사용할 OpenAI 모델
            temperature: 생성 온도
        """
        self.client = client
        self.recorder = recorder
        self.user_id = user_id
        self.session_id = session_id or str(uuid.uuid4())
        self.model = model
        self.temperature = temperature

        # 화면에 표시되는 대화 (인사말로 시작)
        self.transcript: List[Dict[str, str]] = [{"role": "model", "text": GREETING}]

        # 모델에 전달되는 대화 맥락
        self._history: List[Dict[str, str]] = [
            {"role": "system", "content": ASSISTANT_SYSTEM_INSTRUCTION}
        ]

    async def send(self, message: str) -> str:
        """
        사용자 메시지를 보내고 도우미 응답을 반환하는 함수

        Args:
            message: 사용자 메시지

        Returns:
            도우미 응답 (실패 시 안내 문구)
        """
        text = message.strip()
        if not text:
            return ""

        if self.client is None:
            self.transcript.append({"role": "model", "text": SERVICE_UNAVAILABLE_REPLY})
            return SERVICE_UNAVAILABLE_REPLY

        self.transcript.append({"role": "user", "text": text})
        await self._persist("user", text)

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=self._history + [{"role": "user", "content": text}],
                temperature=self.temperature,
            )
            reply = (response.choices[0].message.content or "").strip()
        except Exception as exc:
            logger.error(f"Chat error: {exc}")
            self.transcript.append({"role": "model", "text": CONNECTION_ERROR_REPLY})
            return CONNECTION_ERROR_REPLY

        # 성공한 대화만 맥락에 추가
        self._history.append({"role": "user", "content": text})
        self._history.append({"role": "assistant", "content": reply})
        self.transcript.append({"role": "model", "text": reply})
        await self._persist("model", reply)
        return reply

    async def _persist(self, role: str, content: str) -> None:
        """대화 기록 저장 (실패는 경고만 남김)"""
        if self.recorder is None or not self.user_id:
            return
        try:
            await self.recorder.save_chat_message(self.user_id, role, content, self.session_id)
        except PersistenceError as exc:
            logger.warning(f"Chat log save failed: {exc}")


def build_assistant_from_settings(
    settings,
    recorder: Optional[ProgressRecorder] = None,
    user_id: Optional[str] = None,
) -> HealthAssistant:
    """
    설정으로 건강 도우미를 생성 (API 키가 없으면 client 없이 생성)

    Args:
        settings: config.Settings 인스턴스
        recorder: 대화 기록 저장용 기록 서비스
        user_id: 대화 기록을 저장할 사용자 ID

    Returns:
        HealthAssistant
    """
    client = None
    if settings.openai_api_key:
        try:
            from openai import AsyncOpenAI
            client = AsyncOpenAI(api_key=settings.openai_api_key)
        except ImportError as exc:
            raise RuntimeError(
                "openai package is required. Install it with `pip install openai`."
            ) from exc
    else:
        logger.warning("OPENAI_API_KEY is not set; health assistant is unavailable")

    return HealthAssistant(
        client=client,
        recorder=recorder,
        user_id=user_id,
        model=settings.model,
        temperature=settings.temperature,
    )
