"""
配置文件 - 客户端配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import Optional


class GrpcTlsSettings(BaseModel):
    enabled: bool = False
    cert: Optional[str] = None
    key: Optional[str] = None
    ca: Optional[str] = None


class NamenodeSettings(BaseModel):
    """Endpoint binding and retry tuning for the namenode protocol client."""

    host: str = "localhost"
    port: int = 8020
    # Per-attempt deadline in seconds; None waits indefinitely
    timeout: Optional[float] = 60.0
    # Identity sent with every call
    user: Optional[str] = None
    token: Optional[str] = None
    # Fixed sleep between create-path retries (milliseconds)
    lease_soft_limit_ms: int = 60 * 1000
    create_retry_max: int = 5
    max_message_length: int = 64 * 1024 * 1024
    tls: GrpcTlsSettings = Field(default_factory=GrpcTlsSettings)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @field_validator("create_retry_max", "lease_soft_limit_ms")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v


class Settings(BaseSettings):
    """项目配置"""

    PROJECT_NAME: str = Field(default="namenode-protocol-client")
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: Optional[str] = Field(default=None, description="覆盖默认日志级别，例如 WARNING")

    namenode: NamenodeSettings = Field(default_factory=NamenodeSettings)

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_log_level(cls, v):
        if isinstance(v, str) and v.strip():
            return v.strip().upper()
        return None


settings = Settings()
