"""Pydantic configuration models for llms-fetch."""

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from .. import __version__

DEFAULT_CACHE_DIR = Path(".llms-fetch-mcp")
DEFAULT_USER_AGENT = f"llms-fetch/{__version__}"


class ByteSize(int):
    """
    Custom type that parses human-readable byte sizes.

    Accepts:
        - Integers (bytes)
        - Strings like '200kb', '1mb', '5gb'

    Examples:
        >>> ByteSize._parse('200kb')
        204800
        >>> ByteSize._parse(1024)
        1024
    """

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> Any:
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(cls._parse)

    @classmethod
    def _parse(cls, v: Any) -> int:
        if isinstance(v, bool):
            raise ValueError(f"Invalid byte size: {v}")
        if isinstance(v, int):
            if v <= 0:
                raise ValueError(f"Byte size must be positive: {v}")
            return v
        if isinstance(v, str):
            v = v.lower().strip()
            # Longer suffixes first so "mb" is not read as "b"
            units = [("gb", 1024**3), ("mb", 1024**2), ("kb", 1024), ("b", 1)]
            for unit, mult in units:
                if v.endswith(unit):
                    num_str = v[: -len(unit)].strip()
                    try:
                        return int(float(num_str) * mult)
                    except ValueError as err:
                        raise ValueError(f"Invalid number in byte size: {v}") from err
            try:
                return int(v)
            except ValueError:
                pass
        raise ValueError(f"Invalid byte size: {v}. Use format like '200kb', '1mb', or integer bytes.")


class NetworkConfig(BaseModel):
    """Configuration for the HTTP client and request fan-out."""

    timeout: float = Field(30.0, gt=0, description="Per-request timeout in seconds")
    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header sent with every request")
    max_retries: int = Field(0, ge=0, description="Retry attempts for 429/5xx and transient errors")
    retry_base_delay: float = Field(1.0, ge=0, description="Base delay for exponential backoff (seconds)")
    max_content_size: ByteSize = Field(
        ByteSize(50 * 1024 * 1024),
        description="Maximum response size (e.g., '10mb')",
    )
    max_concurrent: int = Field(10, ge=1, description="Maximum in-flight requests across all fetch calls")
    per_host_concurrent: int = Field(5, ge=1, description="Maximum in-flight requests per host")
    proxy: Optional[str] = Field(None, description="HTTP/HTTPS proxy URL")

    model_config = {"extra": "forbid"}


class CacheConfig(BaseModel):
    """Configuration for the on-disk cache."""

    directory: Path = Field(DEFAULT_CACHE_DIR, description="Cache root directory")

    model_config = {"extra": "forbid"}


class ConversionConfig(BaseModel):
    """Configuration for candidate generation and HTML conversion."""

    github_variants: bool = Field(
        False,
        description="Also try raw.githubusercontent.com and README.md candidates for github.com URLs",
    )
    extract_main_content: bool = Field(
        False,
        description="Render only the main content container of converted HTML pages",
    )
    toc_budget: int = Field(4000, ge=0, description="Maximum table of contents size in bytes")
    toc_threshold: int = Field(
        8000,
        ge=0,
        description="Minimum document size in characters before a table of contents is generated",
    )

    model_config = {"extra": "forbid"}


class LlmsFetchConfig(BaseModel):
    """
    Root configuration model for llms-fetch.

    Example:
        config = LlmsFetchConfig(
            cache=CacheConfig(directory=Path("./.llms-cache")),
            network={"timeout": 10},
        )

    YAML format:
        cache:
          directory: ./.llms-cache
        network:
          timeout: 10
          max_concurrent: 4
        conversion:
          github_variants: true
    """

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    conversion: ConversionConfig = Field(default_factory=ConversionConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "LlmsFetchConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "LlmsFetchConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text(encoding="utf-8"))
