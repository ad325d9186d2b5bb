from typing import Any, List, Optional, Union

from pydantic import (
    AnyHttpUrl,
    Field,
    PostgresDsn,
    ValidationInfo,
    field_validator,
)
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    ENVIRONMENT_NAME: str = "Development"

    @property
    def is_production(self):
        return self.ENVIRONMENT_NAME == "Production"

    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "DeFi Portfolio Dashboard"
    # BACKEND_CORS_ORIGINS is a JSON-formatted list of origins
    # e.g: '["http://localhost", "http://localhost:4200", "http://localhost:3000"]'
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    SQLITE_PATH: str = "./defi_dashboard.db"
    SQLALCHEMY_DATABASE_URI: str | None = Field(default=None, validate_default=True)

    # Seq log
    SEQ_SERVER_URL: Optional[str] = None
    SEQ_SERVER_API_KEY: Optional[str] = None

    # NAV fee defaults for months that have no stored settings yet
    DEFAULT_ANNUAL_EXPENSE: float = 600
    DEFAULT_MONTHLY_EXPENSE: float = 50
    DEFAULT_PERFORMANCE_FEE_RATE: float = 0.05
    DEFAULT_ACCRUED_PERFORMANCE_FEE_RATE: float = 0.05
    DEFAULT_MANAGEMENT_FEE_RATE: float = 0.005

    # APY
    SNAPSHOT_LOOKBACK_LIMIT: int = 10

    @field_validator("SQLALCHEMY_DATABASE_URI", mode="before")
    def assemble_db_connection(cls, v: str | None, info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return v
        if not info.data.get("POSTGRES_SERVER"):
            return f"sqlite:///{info.data.get('SQLITE_PATH')}"
        return str(
            PostgresDsn.build(
                scheme="postgresql+psycopg",
                username=info.data.get("POSTGRES_USER"),
                password=info.data.get("POSTGRES_PASSWORD"),
                host=info.data.get("POSTGRES_SERVER"),
                path=f"{info.data.get('POSTGRES_DB') or ''}",
            )
        )

    class Config:

        case_sensitive = True
        env_file = ".env"
        extra = "allow"


settings = Settings()
