"""설정 모듈: .env 파일 로딩, 환경변수 기반 설정, 로깅 초기화"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

DEFAULT_MODEL = "gpt-4.1"
DEFAULT_DATA_DIR = ".gadget_risk"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def load_env_file(path: str | os.PathLike) -> int:
    """
    .env 파일의 KEY=VALUE 줄을 환경변수로 로드

    빈 줄과 #으로 시작하는 줄은 무시합니다.

    Args:
        path: .env 파일 경로

    Returns:
        로드한 변수 개수 (파일이 없으면 0)
    """
    env_path = Path(path)
    if not env_path.exists():
        return 0

    loaded = 0
    with open(env_path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#') and '=' in line:
                key, value = line.split('=', 1)
                os.environ[key.strip()] = value.strip()
                loaded += 1
    return loaded


def _env_number(name: str, default: str, convert: Callable[[str], Any]) -> Any:
    """숫자 환경변수를 변환 (형식이 잘못되면 변수 이름을 담은 ValueError)"""
    raw = os.getenv(name, default)
    try:
        return convert(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a {convert.__name__}, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """환경변수에서 읽은 실행 설정"""
    openai_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    max_tokens: int = 1200
    data_dir: str = DEFAULT_DATA_DIR
    form_url: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            model=os.getenv("GADGET_RISK_MODEL", DEFAULT_MODEL),
            temperature=_env_number("GADGET_RISK_TEMPERATURE", "0.7", float),
            max_tokens=_env_number("GADGET_RISK_MAX_TOKENS", "1200", int),
            data_dir=os.getenv("GADGET_RISK_DATA_DIR", DEFAULT_DATA_DIR),
            form_url=os.getenv("GADGET_RISK_FORM_URL") or None,
            log_level=os.getenv("GADGET_RISK_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
