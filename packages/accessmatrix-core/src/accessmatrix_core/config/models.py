from typing import Any, Literal

from pydantic import BaseModel, Field


class AccessMatrixSettings(BaseModel):
    max_resource_name_length: int = Field(default=100, gt=0)
    enable_detailed_logging: bool = True
    max_principals_threshold: int = Field(default=100, gt=0)
    max_rules_per_case: int = Field(default=50, gt=0)
    principal_cache_size: int = Field(default=1000, ge=0)
    # Milliseconds; consumed by the deployment engine, not by this package.
    default_operation_timeout: int = Field(default=30000, gt=0)
    # case name -> principal entries (strings or cross-stack objects)
    principals: dict[str, Any] = Field(default_factory=dict)


class ReferenceConfig(BaseModel):
    default_output_key: str | None = None
    stack_cache_size: int = Field(default=100, gt=0)
    state_dir: str = ".accessmatrix/stacks"


class ValidationConfig(BaseModel):
    max_cases: int = Field(default=20, gt=0)
    max_rules_per_case: int = Field(default=50, gt=0)
    max_principals: int = Field(default=100, gt=0)


class PluginsConfig(BaseModel):
    enabled: bool = False
    disabled: list[str] = Field(default_factory=list)


class AccessMatrixConfig(BaseModel):
    access_matrix: AccessMatrixSettings = Field(default_factory=AccessMatrixSettings)
    reference: ReferenceConfig = Field(default_factory=ReferenceConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
