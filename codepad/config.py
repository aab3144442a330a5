# codepad/config.py
import logging
import os
from dataclasses import dataclass
from functools import lru_cache

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Environment variable {name} must be a boolean, got '{raw}'.")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got '{raw}'.")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got '{raw}'.")


@dataclass(frozen=True)
class Settings:
    """
    애플리케이션 전역 설정입니다.
    모든 값은 환경 변수(CODEPAD_*)에서 읽어오며, 없으면 기본값을 사용합니다.
    """
    database_url: str = "sqlite:///codepad.db"
    judge_url: str = "https://ce.judge0.com"
    judge_api_key: str = ""
    judge_host: str = ""
    judge_timeout: float = 30.0
    judge_wait: bool = True
    judge_poll_interval: float = 0.5
    judge_poll_timeout: float = 20.0
    default_language: str = "javascript"
    log_level: str = "INFO"
    port: int = 8000


def load_settings() -> Settings:
    """환경 변수에서 설정을 새로 읽어 Settings 객체를 만듭니다."""
    return Settings(
        database_url=os.environ.get("CODEPAD_DATABASE_URL", Settings.database_url),
        judge_url=os.environ.get("CODEPAD_JUDGE_URL", Settings.judge_url).rstrip("/"),
        judge_api_key=os.environ.get("CODEPAD_JUDGE_API_KEY", ""),
        judge_host=os.environ.get("CODEPAD_JUDGE_HOST", ""),
        judge_timeout=_env_float("CODEPAD_JUDGE_TIMEOUT", Settings.judge_timeout),
        judge_wait=_env_bool("CODEPAD_JUDGE_WAIT", Settings.judge_wait),
        judge_poll_interval=_env_float("CODEPAD_JUDGE_POLL_INTERVAL", Settings.judge_poll_interval),
        judge_poll_timeout=_env_float("CODEPAD_JUDGE_POLL_TIMEOUT", Settings.judge_poll_timeout),
        default_language=os.environ.get("CODEPAD_DEFAULT_LANGUAGE", Settings.default_language).strip().lower(),
        log_level=os.environ.get("CODEPAD_LOG_LEVEL", Settings.log_level).upper(),
        port=_env_int("CODEPAD_PORT", Settings.port),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """프로세스 전체에서 공유되는 설정 객체를 반환합니다. (최초 1회만 로드)"""
    return load_settings()


def configure_logging(settings: Settings = None):
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
