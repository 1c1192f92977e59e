"""저장소 모듈: 사용자별 평가 기록과 대화 기록을 보관하는 저장소 구현

이 모듈은 다음 구성 요소를 제공합니다:
- ProgressStore: 저장소 인터페이스 (추가, 사용자별 시간순 조회)
- InMemoryProgressStore: 프로세스 메모리에 보관하는 저장소
- JsonFileProgressStore: 사용자별 JSON 파일에 보관하는 저장소

기록은 타임스탬프 오름차순(같은 시각이면 추가 순서)으로 정렬되며,
내림차순은 정확히 그 역순입니다.
"""
from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Protocol, Tuple

from .data_models import ChatMessage, ProgressEntry

logger = logging.getLogger(__name__)

ORDER_ASC = "asc"
ORDER_DESC = "desc"


class PersistenceError(RuntimeError):
    """기록 저장 또는 조회 실패"""


class ProgressStore(Protocol):
    """평가 기록 및 대화 기록 저장소 인터페이스"""

    def append(self, entry: ProgressEntry) -> None:
        ...

    def list_entries(self, user_id: str, order: str = ORDER_DESC) -> List[ProgressEntry]:
        ...

    def append_chat_message(self, user_id: str, session_id: str, message: ChatMessage) -> None:
        ...

    def list_chat_messages(self, user_id: str, session_id: str) -> List[ChatMessage]:
        ...


def _parse_timestamp(value: str) -> datetime:
    """ISO 8601 타임스탬프를 UTC 기준 datetime으로 변환 (시간대가 없으면 UTC로 간주)"""
    if not isinstance(value, str):
        raise PersistenceError(f"Invalid timestamp in stored record: {value!r}")
    # Python 3.10 이하의 fromisoformat은 "Z" 접미사를 받지 않음
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise PersistenceError(f"Invalid timestamp in stored record: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_entries(entries: List[ProgressEntry], order: str = ORDER_DESC) -> List[ProgressEntry]:
    """
    기록을 타임스탬프 순으로 정렬하는 함수

    Args:
        entries: 추가 순서대로 나열된 기록
        order: "asc" 또는 "desc"

    Returns:
        정렬된 새 목록

    Raises:
        ValueError: 알 수 없는 정렬 순서
        PersistenceError: 기록의 타임스탬프를 해석할 수 없는 경우
    """
    if order not in (ORDER_ASC, ORDER_DESC):
        raise ValueError(f"Unknown sort order: {order}")
    # sorted()는 안정 정렬이므로 같은 시각의 기록은 추가 순서를 유지
    ascending = sorted(entries, key=lambda entry: _parse_timestamp(entry.timestamp))
    if order == ORDER_DESC:
        ascending.reverse()
    return ascending


class InMemoryProgressStore:
    """프로세스 메모리에 기록을 보관하는 저장소"""

    def __init__(self) -> None:
        # 사용자_ID -> 추가 순서대로의 기록
        self._entries: Dict[str, List[ProgressEntry]] = defaultdict(list)

        # (사용자_ID, 세션_ID) -> 메시지
        self._chats: Dict[Tuple[str, str], List[ChatMessage]] = defaultdict(list)

    def append(self, entry: ProgressEntry) -> None:
        self._entries[entry.user_id].append(entry)

    def list_entries(self, user_id: str, order: str = ORDER_DESC) -> List[ProgressEntry]:
        return sort_entries(self._entries.get(user_id, []), order)

    def append_chat_message(self, user_id: str, session_id: str, message: ChatMessage) -> None:
        self._chats[(user_id, session_id)].append(message)

    def list_chat_messages(self, user_id: str, session_id: str) -> List[ChatMessage]:
        return list(self._chats.get((user_id, session_id), []))


class JsonFileProgressStore:
    """
    사용자별 JSON 파일에 기록을 보관하는 저장소

    파일 이름은 키의 SHA-256 해시로 만들고, 쓰기는 임시 파일에 기록한 뒤
    원자적으로 교체하므로 쓰기 실패가 기존 기록을 손상시키지 않습니다.
    """

    def __init__(self, data_dir: str | os.PathLike) -> None:
        """
        Args:
            data_dir: 기록 파일을 저장할 디렉터리 (없으면 생성)
        """
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def append(self, entry: ProgressEntry) -> None:
        path = self._history_path(entry.user_id)
        records = self._read(path)
        records.append(entry.to_dict())
        self._write(path, records)

    def list_entries(self, user_id: str, order: str = ORDER_DESC) -> List[ProgressEntry]:
        records = self._read(self._history_path(user_id))
        try:
            entries = [ProgressEntry.from_dict(record) for record in records]
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Corrupt history record for user {user_id}: {exc}") from exc
        return sort_entries(entries, order)

    def append_chat_message(self, user_id: str, session_id: str, message: ChatMessage) -> None:
        path = self._chat_path(user_id, session_id)
        records = self._read(path)
        records.append(message.to_dict())
        self._write(path, records)

    def list_chat_messages(self, user_id: str, session_id: str) -> List[ChatMessage]:
        records = self._read(self._chat_path(user_id, session_id))
        try:
            return [ChatMessage.from_dict(record) for record in records]
        except (KeyError, TypeError) as exc:
            raise PersistenceError(f"Corrupt chat record for user {user_id}: {exc}") from exc

    def _history_path(self, user_id: str) -> Path:
        return self.data_dir / f"history_{_key_digest(user_id)}.json"

    def _chat_path(self, user_id: str, session_id: str) -> Path:
        return self.data_dir / f"chat_{_key_digest(user_id + chr(0) + session_id)}.json"

    def _read(self, path: Path) -> List[Dict[str, Any]]:
        """JSON 파일에서 기록 목록을 읽음 (파일이 없으면 빈 목록)"""
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Could not read {path.name}: {exc}") from exc
        if not isinstance(records, list):
            raise PersistenceError(f"Unexpected content in {path.name}")
        return records

    def _write(self, path: Path, records: List[Dict[str, Any]]) -> None:
        """임시 파일에 쓴 뒤 원자적으로 교체"""
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=".tmp_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as exc:
            # 교체 전에 실패했으므로 기존 파일은 그대로 남음
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise PersistenceError(f"Could not write {path.name}: {exc}") from exc
        logger.debug(f"Wrote {len(records)} records to {path.name}")


def _key_digest(key: str) -> str:
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]
