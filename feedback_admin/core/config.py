from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Hierarchy policy. Lists are read as JSON, e.g. ALLOWED_YEAR_VALUES='["1","2","3","4","5"]'.
    # An empty ALLOWED_YEAR_VALUES accepts free-text year labels.
    reserved_course_names: List[str] = Field(
        default_factory=lambda: ["admin", "system", "test", "null", "undefined"],
        alias="RESERVED_COURSE_NAMES",
    )
    allowed_year_values: List[str] = Field(
        default_factory=lambda: ["1", "2", "3", "4"],
        alias="ALLOWED_YEAR_VALUES",
    )
    default_batches: List[str] = Field(
        default_factory=lambda: ["A", "B", "C", "D"],
        alias="DEFAULT_BATCHES",
    )
    default_semesters: List[str] = Field(
        default_factory=lambda: ["Odd", "Even"],
        alias="DEFAULT_SEMESTERS",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
