"""Configuration handling for Censor Browser."""

import os
from dataclasses import dataclass, field

import yaml

DEFAULT_CONFIG_PATH = "~/.config/censor-browser/config.yaml"


@dataclass
class DelayConfig:
    """Simulated network delays, in seconds."""

    blocked: float = 0.8
    cached: float = 0.3
    cached_slowed: float = 5.0
    generated: float = 1.0
    generated_slowed: float = 15.0
    failure: float = 1.0


@dataclass
class Config:
    """Main configuration class."""

    litellm_url: str = "http://localhost:4000/v1"
    api_key: str = "not-needed"
    model: str = "ollama/llama3.2"
    judge_model: str = "ollama/llama3.2"
    language: str = "Russian"
    store_path: str = "~/.local/share/censor-browser/sites.json"
    appeal_probability: float = 0.4
    risky_ratio: float = 0.4
    max_search_results: int = 5
    delays: DelayConfig = field(default_factory=DelayConfig)
    log_file: str = "~/.local/share/censor-browser/censor-browser.log"
    log_level: str = "INFO"

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        """Load configuration from YAML file."""
        with open(os.path.expanduser(path), "r") as f:
            data = yaml.safe_load(f) or {}

        delays_data = data.get("delays", {})
        defaults = DelayConfig()
        delays = DelayConfig(
            blocked=delays_data.get("blocked", defaults.blocked),
            cached=delays_data.get("cached", defaults.cached),
            cached_slowed=delays_data.get("cached_slowed", defaults.cached_slowed),
            generated=delays_data.get("generated", defaults.generated),
            generated_slowed=delays_data.get("generated_slowed", defaults.generated_slowed),
            failure=delays_data.get("failure", defaults.failure),
        )

        model = data.get("model", cls.model)
        return cls(
            litellm_url=data.get("litellm_url", cls.litellm_url),
            api_key=data.get("api_key", cls.api_key),
            model=model,
            judge_model=data.get("judge_model", model),
            language=data.get("language", cls.language),
            store_path=data.get("store_path", cls.store_path),
            appeal_probability=data.get("appeal_probability", cls.appeal_probability),
            risky_ratio=data.get("risky_ratio", cls.risky_ratio),
            max_search_results=data.get("max_search_results", cls.max_search_results),
            delays=delays,
            log_file=data.get("log_file", cls.log_file),
            log_level=data.get("log_level", cls.log_level),
        )

    @classmethod
    def load(cls, path: str | None = None) -> "Config":
        """Load configuration from a file, then apply environment overrides."""
        config_path = path or os.environ.get("CENSOR_BROWSER_CONFIG", DEFAULT_CONFIG_PATH)

        if os.path.exists(os.path.expanduser(config_path)):
            config = cls.from_yaml(config_path)
        else:
            config = cls()

        config.litellm_url = os.environ.get("LITELLM_URL", config.litellm_url)
        config.api_key = os.environ.get("LITELLM_API_KEY", config.api_key)
        if "LLM_MODEL" in os.environ:
            config.model = os.environ["LLM_MODEL"]
        return config
