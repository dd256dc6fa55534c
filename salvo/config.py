"""
Configuration management for Salvo.

Implements multi-level configuration loading with precedence:
1. Command-line flags (applied on top by the CLI)
2. Environment variables (SALVO_*)
3. Project config (./.salvo/config.yaml)
4. User config (~/.salvo/config.yaml)
5. .env files
"""

from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict, YamlConfigSettingsSource, PydanticBaseSettingsSource


def _user_files(*names: str) -> List[str]:
    """Return paths under ~/.salvo, or nothing when the home directory is unknown."""
    try:
        home = Path.home()
    except RuntimeError:
        return []
    return [str(home / ".salvo" / name) for name in names]


def config_files() -> List[str]:
    """Return the YAML config files, lowest precedence first."""
    return [*_user_files("config.yaml"), str(Path.cwd() / ".salvo" / "config.yaml")]


class Config(BaseSettings):
    """Configuration schema for Salvo."""

    model_config = SettingsConfigDict(
        # Load from .env files in order of precedence (lowest to highest)
        env_file=[".env", *_user_files(".env")],
        env_prefix="SALVO_",
        case_sensitive=False,
        extra="ignore",
        env_file_encoding="utf-8",
    )

    # =================================================================
    # Target selection
    # =================================================================
    namespace: str = Field(default="default", min_length=1, description="Namespace to get logs from")
    directory: Optional[str] = Field(
        default=None, description="Directory to write logs to (default: ./logs/<namespace>/)"
    )

    # =================================================================
    # Cluster access
    # =================================================================
    kubeconfig: Optional[str] = Field(
        default=None, description="Path to the Kubernetes config file (default: ~/.kube/config)"
    )
    context: Optional[str] = Field(default=None, description="Kubernetes context to use")
    request_timeout: Optional[float] = Field(
        default=None, gt=0, description="Timeout in seconds for each Kubernetes API request"
    )
    page_size: Optional[int] = Field(
        default=None, ge=1, description="Maximum pods returned per list request"
    )

    # =================================================================
    # Processing
    # =================================================================
    workers: int = Field(default=1, ge=1, le=32, description="Number of pods processed concurrently")
    fail_fast: bool = Field(default=False, description="Abort the run on the first pod failure")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML support.

        YAML files are looked up when the settings are loaded, so the project
        file follows the current working directory.
        """
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=config_files())
        return (
            init_settings,
            env_settings,
            yaml_settings,
            dotenv_settings,
            file_secret_settings,
        )


def load_config(**overrides) -> Config:
    """
    Load configuration from all sources with proper precedence.

    Keyword arguments whose value is None are ignored, so unset CLI flags
    fall through to the environment, YAML files and defaults.

    Returns:
        Config: The loaded and validated configuration

    Raises:
        pydantic.ValidationError: If a value from any source is invalid

    Examples:
        >>> config = load_config()
        >>> print(config.namespace)
        'default'

        # export SALVO_NAMESPACE=team-a
        >>> config = load_config()
        >>> print(config.namespace)
        'team-a'
    """
    explicit = {key: value for key, value in overrides.items() if value is not None}
    return Config(**explicit)
