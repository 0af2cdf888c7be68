"""
zkcircuits 설정
=================

환경 변수:
  ZKCIRCUITS_SRS_SEED     SRS τ 시드 (없으면 OS 난수)
  ZKCIRCUITS_KEY_STORE    TinyDB 키 저장소 JSON 경로 (없으면 메모리)
  ZKCIRCUITS_LOG_LEVEL    로그 레벨 이름 (기본 WARNING)

라이브러리는 import 시점에 로깅을 설정하지 않는다.
애플리케이션이 configure_logging()을 호출한다.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Union


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Settings:
    srs_seed: Union[int, str, None] = None
    key_store_path: Optional[str] = None
    log_level: str = "WARNING"
    default_k: dict = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ=None):
        env = os.environ if environ is None else environ
        return cls(
            srs_seed=env.get("ZKCIRCUITS_SRS_SEED") or None,
            key_store_path=env.get("ZKCIRCUITS_KEY_STORE") or None,
            log_level=env.get("ZKCIRCUITS_LOG_LEVEL", "WARNING").upper(),
        )


_settings = None


def get_settings():
    """프로세스 전역 Settings (처음 호출 시 환경 변수에서 읽는다)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def configure_logging(level=None):
    """basicConfig로 루트 핸들러를 설치한다."""
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)
