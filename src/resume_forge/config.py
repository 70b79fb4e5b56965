"""Application configuration loaded from config.yaml."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv


@dataclass(frozen=True)
class LLMConfig:
    primary_model: str = "claude-haiku-4-5-20251001"
    fallback_model: str = "claude-sonnet-4-5-20250929"
    temperature: float = 0.2
    max_tokens: int = 4096
    timeout: int = 60


@dataclass(frozen=True)
class RetryConfig:
    transient_statuses: tuple[int, ...] = (429, 500, 502, 503, 529)
    retry_delay: float = 2.0
    fallback_delay: float = 1.0


@dataclass(frozen=True)
class LimitsConfig:
    free_generations: int = 2
    max_pdf_bytes: int = 5 * 1024 * 1024
    premium_plans: tuple[str, ...] = ("plus", "plus-annual", "pro", "pro-annual")
    active_statuses: tuple[str, ...] = ("active", "trialing", "past_due")
    allow_list_type: str = "free-resume"


@dataclass(frozen=True)
class CompilerConfig:
    service_url: str | None = None
    timeout: float = 60.0
    latex_command: str = "pdflatex"


@dataclass(frozen=True)
class StoreConfig:
    db_path: str = "~/.resume-forge/usage.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    environment: str = "production"
    llm: LLMConfig = field(default_factory=LLMConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    compiler: CompilerConfig = field(default_factory=CompilerConfig)
    store: StoreConfig = field(default_factory=StoreConfig)

    @property
    def debug(self) -> bool:
        """Debug detail (error details, stack traces) is only exposed outside production."""
        return self.environment != "production"


def _tuples(raw: dict) -> dict:
    # YAML lists become tuples so the frozen dataclasses stay hashable
    return {k: tuple(v) if isinstance(v, list) else v for k, v in raw.items()}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults.

    Environment overrides: RESUME_FORGE_ENV, LATEX_SERVICE_URL, RESUME_FORGE_DB.
    """
    load_dotenv()

    if path is None:
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    compiler_raw = dict(raw.get("compiler", {}))
    if os.environ.get("LATEX_SERVICE_URL"):
        compiler_raw["service_url"] = os.environ["LATEX_SERVICE_URL"]

    store_raw = dict(raw.get("store", {}))
    if os.environ.get("RESUME_FORGE_DB"):
        store_raw["db_path"] = os.environ["RESUME_FORGE_DB"]

    return AppConfig(
        environment=os.environ.get("RESUME_FORGE_ENV", raw.get("environment", "production")),
        llm=LLMConfig(**raw.get("llm", {})),
        retry=RetryConfig(**_tuples(raw.get("retry", {}))),
        limits=LimitsConfig(**_tuples(raw.get("limits", {}))),
        compiler=CompilerConfig(**compiler_raw),
        store=StoreConfig(**store_raw),
    )
