"""
GraphConfig - Configuration Management

Sensible defaults with full override capability.

Example:
    >>> # Use defaults (reads from environment)
    >>> builder = GraphBuilder()

    >>> # Explicit configuration
    >>> config = GraphConfig(
    ...     llm_model="gpt-4o-mini",
    ...     extraction_concurrency=4,
    ... )
    >>> builder = GraphBuilder(config=config)

    >>> # From config file
    >>> config = GraphConfig.from_file("./docgraph.toml")

Environment Variables:
    DOCGRAPH_LLM_PROVIDER - LLM provider name
    DOCGRAPH_LLM_MODEL - Model for chunk extraction and entity merging
    DOCGRAPH_LLM_MODEL_FAST - Model for vocabulary suggestions
    DOCGRAPH_CHUNK_MAX_CHARS - Character budget per chunk
    DOCGRAPH_EXTRACTION_CONCURRENCY - Max concurrent chunk extraction calls
    DOCGRAPH_SKIP_FAILED_FILES - "true" to skip unreadable files instead of aborting
    DOCGRAPH_THROTTLE_SECONDS - Pause between LLM calls
    DOCGRAPH_COST_DEBUG_WARN_THRESHOLD_USD - Cost warning threshold
    OPENAI_API_KEY - OpenAI API key (standard name)
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, cast

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return cast(dict[str, Any], tomllib.load(f))


class GraphConfig:
    """Configuration for DocGraph."""

    # === LLM Configuration ===

    llm_provider: str = "openai"
    """LLM provider: "openai" """

    llm_model: str = "gpt-4o"
    """Model for chunk extraction and entity merging"""

    llm_model_fast: str = "gpt-4o-mini"
    """Model for quick operations (vocabulary suggestions)"""

    # === API Keys ===

    openai_api_key: str | None = None

    # === Processing Configuration ===

    chunk_max_chars: int = 8000
    """Character budget per chunk (sentence-aligned)"""

    extraction_concurrency: int = 1
    """Max concurrent chunk extraction calls (1 = sequential)"""

    throttle_seconds: float = 0.0
    """Pause inserted between LLM calls to stay under upstream rate limits"""

    extraction_progress_share: float = 70.0
    """Share of the 0-100 progress range spent on chunk extraction"""

    skip_failed_files: bool = False
    """Skip documents whose text cannot be extracted instead of aborting the batch"""

    # === Cost Telemetry Configuration ===

    cost_debug: bool = False
    """Collect per-request token usage and estimated cost"""

    cost_debug_warn_threshold_usd: float | None = None
    """Optional warning threshold for per-request estimated cost in cost_debug mode"""

    # === Server Configuration ===

    server_host: str = "127.0.0.1"
    server_port: int = 8000

    def __init__(self, **kwargs: Any) -> None:
        """
        Initialize configuration.

        Args:
            **kwargs: Override any configuration option
        """
        # Load from environment first
        self._load_from_env()

        # Apply explicit overrides
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                raise ValueError(f"Unknown configuration option: {key}")

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        self.openai_api_key = os.getenv("OPENAI_API_KEY")

        if provider := os.getenv("DOCGRAPH_LLM_PROVIDER"):
            self.llm_provider = provider
        if model := os.getenv("DOCGRAPH_LLM_MODEL"):
            self.llm_model = model
        if model := os.getenv("DOCGRAPH_LLM_MODEL_FAST"):
            self.llm_model_fast = model
        if max_chars := os.getenv("DOCGRAPH_CHUNK_MAX_CHARS"):
            self.chunk_max_chars = int(max_chars)
        if concurrency := os.getenv("DOCGRAPH_EXTRACTION_CONCURRENCY"):
            self.extraction_concurrency = int(concurrency)
        if throttle := os.getenv("DOCGRAPH_THROTTLE_SECONDS"):
            self.throttle_seconds = float(throttle)
        if skip := os.getenv("DOCGRAPH_SKIP_FAILED_FILES"):
            self.skip_failed_files = skip.strip().lower() in _TRUE_VALUES
        if threshold := os.getenv("DOCGRAPH_COST_DEBUG_WARN_THRESHOLD_USD"):
            self.cost_debug_warn_threshold_usd = float(threshold)

    @classmethod
    def from_file(cls, path: str | Path) -> "GraphConfig":
        """
        Load configuration from TOML file.

        Nested sections are flattened with a section prefix.

        Example TOML:
            [llm]
            provider = "openai"
            model = "gpt-4o"

            [processing]
            chunk_max_chars = 6000
            extraction_concurrency = 4

            [api_keys]
            openai = "sk-..."

        Args:
            path: Path to TOML configuration file

        Returns:
            GraphConfig instance with values from file

        Raises:
            FileNotFoundError: If config file doesn't exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        data = _load_toml(path)

        flat_config: dict[str, Any] = {}

        # Map section names to config key prefixes
        section_mapping = {
            "llm": "llm_",
            "api_keys": "",  # api_keys.openai -> openai_api_key
            "processing": "",
            "cost_telemetry": "cost_debug_",
            "server": "server_",
        }

        for section, prefix in section_mapping.items():
            if section in data:
                for key, value in data[section].items():
                    if section == "api_keys":
                        flat_config[f"{key}_api_key"] = value
                    else:
                        flat_config[f"{prefix}{key}"] = value

        # Also support flat top-level keys
        for key, value in data.items():
            if key not in section_mapping and not isinstance(value, dict):
                flat_config[key] = value

        return cls(**flat_config)

    @classmethod
    def from_env(cls) -> "GraphConfig":
        """Load configuration from environment variables only."""
        return cls()

    def to_file(self, path: str | Path) -> None:
        """
        Save configuration to TOML file.

        API keys are excluded.

        Args:
            path: Path to write TOML configuration file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        sections: dict[str, dict[str, str | int | float | bool | None]] = {
            "llm": {
                "provider": self.llm_provider,
                "model": self.llm_model,
                "model_fast": self.llm_model_fast,
            },
            "processing": {
                "chunk_max_chars": self.chunk_max_chars,
                "extraction_concurrency": self.extraction_concurrency,
                "throttle_seconds": self.throttle_seconds,
                "extraction_progress_share": self.extraction_progress_share,
                "skip_failed_files": self.skip_failed_files,
            },
            "cost_telemetry": {
                "warn_threshold_usd": self.cost_debug_warn_threshold_usd,
            },
            "server": {
                "host": self.server_host,
                "port": self.server_port,
            },
        }

        # Build TOML string manually
        lines = ["# DocGraph Configuration", ""]

        for section_name, section_values in sections.items():
            lines.append(f"[{section_name}]")
            for key, value in section_values.items():
                if isinstance(value, str):
                    lines.append(f'{key} = "{value}"')
                elif isinstance(value, bool):
                    lines.append(f"{key} = {str(value).lower()}")
                elif isinstance(value, (int, float)):
                    lines.append(f"{key} = {value}")
            lines.append("")

        lines.extend([
            "# API keys should be set via environment variables:",
            "# OPENAI_API_KEY",
            "",
        ])

        path.write_text("\n".join(lines))

    def with_overrides(self, **kwargs: Any) -> "GraphConfig":
        """Return new config with specified overrides."""
        new_config = GraphConfig.__new__(GraphConfig)
        for key in dir(self):
            if not key.startswith("_") and not callable(getattr(self, key)):
                setattr(new_config, key, getattr(self, key))
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise ValueError(f"Unknown configuration option: {key}")
            setattr(new_config, key, value)
        return new_config
