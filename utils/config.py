from __future__ import annotations

import base64
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ANYONE = "anyone"
DEFAULT_LABEL_NAME = "AUTOMATED_REPLY"
DEFAULT_SIGNATURE = "The Management"
POLICY_CHOICES = ("halt", "continue")


def default_reply_body(signature: str) -> str:
    return (
        "This is a automated reply. \n\n"
        "I am on vacation. I will reply to your email when I get back. \n\n"
        f"Thanks, \n{signature}"
    )


@dataclass(slots=True)
class AppConfig:
    credentials_file: Path
    token_file: Path
    user_id: str
    log_dir: Path
    log_level: str
    label_name: str
    default_sender: str
    reply_body: str
    min_interval: int
    max_interval: int
    on_error: str


def _resolve_path(value: str | None, fallback: str) -> Path:
    candidate = Path(value or fallback)
    if not candidate.is_absolute():
        candidate = Path.cwd() / candidate
    return candidate


def _maybe_write_secret_file(target: Path, inline_value: str | None, b64_value: str | None) -> None:
    if not inline_value and not b64_value:
        return
    target.parent.mkdir(parents=True, exist_ok=True)
    if inline_value:
        target.write_text(inline_value, encoding="utf-8")
        return
    try:
        decoded = base64.b64decode(b64_value or "", validate=True)
    except ValueError as exc:
        raise ValueError("Failed to decode base64 secret payload") from exc
    target.write_bytes(decoded)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def load_config(env_file: str | os.PathLike[str] | None = None) -> AppConfig:
    """Load configuration values from a .env file and environment variables."""

    if env_file:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(override=False)

    credentials_file = _resolve_path(os.getenv("GOOGLE_CLIENT_SECRETS"), "credentials.json")
    token_file = _resolve_path(os.getenv("GOOGLE_TOKEN_PATH"), "token.json")
    log_dir = _resolve_path(os.getenv("LOG_DIR"), "logs")

    _maybe_write_secret_file(
        credentials_file,
        os.getenv("GOOGLE_CLIENT_SECRETS_JSON"),
        os.getenv("GOOGLE_CLIENT_SECRETS_B64"),
    )
    _maybe_write_secret_file(
        token_file,
        os.getenv("GOOGLE_TOKEN_JSON"),
        os.getenv("GOOGLE_TOKEN_B64"),
    )

    min_interval = _int_env("POLL_MIN_SECONDS", 45)
    max_interval = _int_env("POLL_MAX_SECONDS", 120)
    if min_interval < 0 or min_interval > max_interval:
        raise ValueError(
            f"Invalid polling range {min_interval}-{max_interval}: need 0 <= min <= max"
        )

    on_error = os.getenv("POLL_ON_ERROR", "halt").strip().lower()
    if on_error not in POLICY_CHOICES:
        raise ValueError(f"POLL_ON_ERROR must be one of {', '.join(POLICY_CHOICES)}, got {on_error!r}")

    body = os.getenv("AUTO_REPLY_BODY")
    if body:
        # .env files cannot hold real newlines on one line
        body = body.replace("\\n", "\n")
    else:
        body = default_reply_body(os.getenv("AUTO_REPLY_SIGNATURE", DEFAULT_SIGNATURE))

    return AppConfig(
        credentials_file=credentials_file,
        token_file=token_file,
        user_id=os.getenv("GMAIL_USER_ID", "me"),
        log_dir=log_dir,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        label_name=os.getenv("AUTO_REPLY_LABEL", DEFAULT_LABEL_NAME),
        default_sender=os.getenv("AUTO_REPLY_SENDER", ANYONE),
        reply_body=body,
        min_interval=min_interval,
        max_interval=max_interval,
        on_error=on_error,
    )
