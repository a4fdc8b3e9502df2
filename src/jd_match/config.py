"""Application configuration loaded from config.yaml and the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import yaml

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


@dataclass(frozen=True)
class LLMConfig:
    groq_model: str = "llama-3.1-8b-instant"
    openai_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-haiku-4-5-20251001"
    max_iterations: int = 3
    timeout: int = 30
    max_tokens: int = 2048
    temperature: float = 0.0

    def __post_init__(self) -> None:
        if not 1 <= self.max_iterations <= 10:
            raise ValueError(f"max_iterations must be between 1 and 10, got {self.max_iterations}")
        if not 1 <= self.timeout <= 600:
            raise ValueError(f"timeout must be between 1 and 600 seconds, got {self.timeout}")
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")


@dataclass(frozen=True)
class SearchConfig:
    max_results: int = 10
    search_depth: str = "advanced"
    fetch_threshold: int = 200

    def __post_init__(self) -> None:
        if not 1 <= self.max_results <= 30:
            raise ValueError(f"max_results must be between 1 and 30, got {self.max_results}")
        if self.search_depth not in ("basic", "advanced"):
            raise ValueError(f"search_depth must be 'basic' or 'advanced', got {self.search_depth!r}")


@dataclass(frozen=True)
class PipelineConfig:
    max_ranked_jobs: int = 3
    scoring_concurrency: int = 1
    description_limit: int = 500

    def __post_init__(self) -> None:
        if not 1 <= self.max_ranked_jobs <= 10:
            raise ValueError(f"max_ranked_jobs must be between 1 and 10, got {self.max_ranked_jobs}")
        if not 1 <= self.scoring_concurrency <= 10:
            raise ValueError(
                f"scoring_concurrency must be between 1 and 10, got {self.scoring_concurrency}"
            )
        if self.description_limit < 50:
            raise ValueError(f"description_limit must be at least 50, got {self.description_limit}")


@dataclass(frozen=True)
class CoverLetterConfig:
    min_length: int = 100

    def __post_init__(self) -> None:
        if not 1 <= self.min_length <= 500:
            raise ValueError(f"min_length must be between 1 and 500, got {self.min_length}")


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    cover_letter: CoverLetterConfig = field(default_factory=CoverLetterConfig)


@dataclass(frozen=True)
class ModelProviderConfig:
    """Credentials and model for one LLM backend. Never persisted."""

    name: str  # "groq", "openai" or "anthropic"
    api_key: str = field(repr=False)
    model: str
    base_url: str | None = None


def select_provider(
    llm: LLMConfig | None = None,
    env: Mapping[str, str] | None = None,
) -> ModelProviderConfig | None:
    """Pick the first configured provider: Groq, then OpenAI, then Anthropic.

    Returns None when no credential is set.
    """
    llm = llm or LLMConfig()
    env = os.environ if env is None else env

    groq_key = (env.get("GROQ_API_KEY") or "").strip()
    if groq_key:
        return ModelProviderConfig(
            name="groq",
            api_key=groq_key,
            model=env.get("GROQ_MODEL") or llm.groq_model,
            base_url=GROQ_BASE_URL,
        )

    openai_key = (env.get("OPENAI_API_KEY") or "").strip()
    if openai_key:
        return ModelProviderConfig(
            name="openai",
            api_key=openai_key,
            model=env.get("OPENAI_MODEL") or llm.openai_model,
            base_url=(env.get("OPENAI_BASE_URL") or "").strip() or None,
        )

    anthropic_key = (env.get("ANTHROPIC_API_KEY") or "").strip()
    if anthropic_key:
        return ModelProviderConfig(
            name="anthropic",
            api_key=anthropic_key,
            model=env.get("ANTHROPIC_MODEL") or llm.anthropic_model,
        )

    return None


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
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

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        search=SearchConfig(**raw.get("search", {})),
        pipeline=PipelineConfig(**raw.get("pipeline", {})),
        cover_letter=CoverLetterConfig(**raw.get("cover_letter", {})),
    )
