# src/infrastructure/queue/config.py
import os
from dataclasses import dataclass
from pathlib import Path

_DEFAULT_SITE_DIR = str(Path(__file__).resolve().parents[3] / "site")


@dataclass(frozen=True)
class WaitRoomConfig:
    # number of front-of-queue positions that are admitted
    max_active: int = 1
    # un-refreshed entries older than this are evicted
    session_timeout_sec: int = 5 * 60
    protected_path: str = "/"
    status_path: str = "/queue-stat"
    exit_path: str = "/thankyou"
    cookie_name: str = "__uid"
    queue_key: str = "queue"
    site_dir: str = _DEFAULT_SITE_DIR
    # stripped from the URL path before mapping it to a site file
    asset_prefix: str = ""
    debug: bool = False
    # "memory" | "redis"
    store_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    # "best_effort" | "strict"
    consistency: str = "best_effort"
    strict_max_attempts: int = 5
    # re-stamp waiting entries too, not only admitted ones
    refresh_waiting: bool = False
    # "noop" | "prom"
    metrics_backend: str = "noop"


def _int_env(name: str, default: int, minimum: int = 1) -> int:
    try:
        value = int(os.getenv(name, str(default)))
    except Exception:
        return default
    return value if value >= minimum else default


def _as_bool(v: str | None, default: bool = False) -> bool:
    if v is None:
        return default
    return v.lower() in {"1", "true", "yes", "on"}


def _choice_env(name: str, default: str, choices: tuple[str, ...]) -> str:
    value = os.getenv(name, default).lower()
    return value if value in choices else default


def load_waitroom_config() -> WaitRoomConfig:
    return WaitRoomConfig(
        max_active=_int_env("WAITROOM_MAX_ACTIVE", 1),
        session_timeout_sec=_int_env("WAITROOM_SESSION_TIMEOUT_SEC", 300),
        protected_path=os.getenv("WAITROOM_PROTECTED_PATH", "/"),
        status_path=os.getenv("WAITROOM_STATUS_PATH", "/queue-stat"),
        exit_path=os.getenv("WAITROOM_EXIT_PATH", "/thankyou"),
        cookie_name=os.getenv("WAITROOM_COOKIE_NAME", "__uid"),
        queue_key=os.getenv("WAITROOM_QUEUE_KEY", "queue"),
        site_dir=os.getenv("WAITROOM_SITE_DIR", _DEFAULT_SITE_DIR),
        asset_prefix=os.getenv("WAITROOM_ASSET_PREFIX", ""),
        debug=_as_bool(os.getenv("WAITROOM_DEBUG"), False),
        store_backend=_choice_env("WAITROOM_STORE", "memory", ("memory", "redis")),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        consistency=_choice_env("WAITROOM_CONSISTENCY", "best_effort", ("best_effort", "strict")),
        strict_max_attempts=_int_env("WAITROOM_STRICT_MAX_ATTEMPTS", 5),
        refresh_waiting=_as_bool(os.getenv("WAITROOM_REFRESH_WAITING"), False),
        metrics_backend=_choice_env("WAITROOM_METRICS", "noop", ("noop", "prom")),
    )
