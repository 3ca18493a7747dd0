"""
Pipeline Configuration.

Policy points of the core that deployments commonly tune: the minimum level
let through the processor, default rendering options, the severity adapters
fall back to for unmapped input and the context key conflict rule.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from chrysalis.entry import ConflictPolicy
from chrysalis.levels import LogLevel


class PipelineSettings(BaseSettings):
    """Processing and rendering defaults."""

    model_config = SettingsConfigDict(
        env_prefix="CHRYSALIS_PIPELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    min_level: Optional[LogLevel] = Field(
        default=None,
        description="Drop entries below this level (unset: keep everything)",
    )
    pretty_print: bool = Field(default=False, description="Indent rendered JSON")
    include_metadata: bool = Field(default=True, description="Emit the metadata map")
    adapter_default_level: LogLevel = Field(
        default=LogLevel.FATAL,
        description="Level assigned to external severities with no mapping",
    )
    context_conflict: ConflictPolicy = Field(
        default=ConflictPolicy.OVERWRITE,
        description="Rule applied when an adapter writes a context key twice",
    )
