import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv


DEFAULT_MODELS = {
    "groq": "llama-3.3-70b-versatile",
    "openai": "gpt-4.1-2025-04-14",
}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    port: int = 3001
    host: str = "0.0.0.0"
    provider: str = "groq"
    model: str = DEFAULT_MODELS["groq"]
    groq_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    max_tokens: int = 3000
    temperature: float = 0.3
    parse_fallback: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment (and a local .env file, if any)."""
    load_dotenv()

    provider = os.getenv("QUIZ_PROVIDER", "groq").strip().lower()
    if provider not in DEFAULT_MODELS:
        raise ValueError(f"Unknown QUIZ_PROVIDER: {provider}")

    origins = os.getenv("CORS_ORIGINS", "*")

    return Settings(
        port=int(os.getenv("PORT", "3001")),
        host=os.getenv("HOST", "0.0.0.0"),
        provider=provider,
        model=os.getenv("QUIZ_MODEL") or DEFAULT_MODELS[provider],
        groq_api_key=os.getenv("GROQ_API_KEY"),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        max_tokens=int(os.getenv("QUIZ_MAX_TOKENS", "3000")),
        temperature=float(os.getenv("QUIZ_TEMPERATURE", "0.3")),
        parse_fallback=_env_bool("QUIZ_PARSE_FALLBACK", True),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
