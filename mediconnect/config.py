"""
Centralized configuration with environment variable overrides.

Clinic branding, the consultation fee, and model settings are
configurable here. Nothing is hardcoded in the controller or adapters.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from mediconnect.logging_context import SessionIdFilter

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class ClinicConfig:
    """Clinic branding and booking fee settings."""

    app_name: str = os.getenv("APP_NAME", "MediConnect AI")
    # Minor currency units (paise for INR).
    appointment_fee: int = _safe_int("APPOINTMENT_FEE", "50000")
    currency: str = os.getenv("PAYMENT_CURRENCY", "INR")
    greeting_message: str = os.getenv(
        "BOT_GREETING_MESSAGE",
        "Hello! I'm your MediConnect AI assistant. Tell me a little about "
        "how you're feeling and I'll help you figure out the next step.",
    )


@dataclass(frozen=True)
class ModelConfig:
    """Text generation backend settings."""

    llm_model: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    llm_temperature: float = _safe_float("LLM_TEMPERATURE", "0.3")
    llm_max_tokens: int = _safe_int("LLM_MAX_TOKENS", "800")


@dataclass(frozen=True)
class ConversationConfig:
    """Limits applied to user turns."""

    max_input_length: int = _safe_int("MAX_INPUT_LENGTH", "2000")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    clinic: ClinicConfig = field(default_factory=ClinicConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    conversation: ConversationConfig = field(default_factory=ConversationConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 0.0 <= config.model.llm_temperature <= 2.0:
        raise ValueError(
            f"LLM_TEMPERATURE must be between 0.0 and 2.0, got {config.model.llm_temperature}"
        )
    if config.model.llm_max_tokens < 1:
        raise ValueError(
            f"LLM_MAX_TOKENS must be >= 1, got {config.model.llm_max_tokens}"
        )
    if config.clinic.appointment_fee < 1:
        raise ValueError(
            f"APPOINTMENT_FEE must be >= 1, got {config.clinic.appointment_fee}"
        )
    currency = config.clinic.currency
    if len(currency) != 3 or not currency.isalpha() or not currency.isupper():
        raise ValueError(
            f"PAYMENT_CURRENCY must be a 3-letter ISO code, got {currency!r}"
        )
    if config.conversation.max_input_length < 1:
        raise ValueError(
            "MAX_INPUT_LENGTH must be >= 1, "
            f"got {config.conversation.max_input_length}"
        )


LOG_FORMAT = "%(asctime)s [%(name)s] [%(session_id)s] %(levelname)s: %(message)s"


def _attach_session_filter(handlers: list[logging.Handler]) -> None:
    """Stamp session ids on every record the given handlers format."""
    for handler in handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    _attach_session_filter(logging.getLogger().handlers)
    logger.info("Configuration loaded for '%s'", config.clinic.app_name)
    return config


# Singleton instance
settings = load_config()
