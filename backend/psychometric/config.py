import os

from dotenv import load_dotenv

load_dotenv()

FAILURE_POLICY_FAIL_SESSION = "fail_session"
FAILURE_POLICY_KEEP_PARTIAL = "keep_partial"
FAILURE_POLICIES = {FAILURE_POLICY_FAIL_SESSION, FAILURE_POLICY_KEEP_PARTIAL}

# Upper bound the content provider accepts per request.
MAX_QUESTIONS_PER_BATCH = 10


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def database_url() -> str:
    return os.getenv("DATABASE_URL", "sqlite:///./psychometric.db")


def openai_api_key() -> str | None:
    return os.getenv("OPENAI_API_KEY") or None


def openai_model() -> str:
    return os.getenv("OPENAI_MODEL", "gpt-4o-mini")


def provider_timeout_seconds() -> float:
    return _env_float("PROVIDER_TIMEOUT_SECONDS", 60.0)


def questions_per_section() -> int:
    return max(1, _env_int("QUESTIONS_PER_SECTION", 40))


def questions_per_batch() -> int:
    size = _env_int("QUESTIONS_PER_BATCH", MAX_QUESTIONS_PER_BATCH)
    return max(1, min(MAX_QUESTIONS_PER_BATCH, size))


def generation_workers() -> int:
    return max(1, _env_int("GENERATION_WORKERS", 3))


def section_failure_policy() -> str:
    policy = os.getenv("SECTION_FAILURE_POLICY", FAILURE_POLICY_FAIL_SESSION).strip().lower()
    if policy not in FAILURE_POLICIES:
        return FAILURE_POLICY_FAIL_SESSION
    return policy


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
