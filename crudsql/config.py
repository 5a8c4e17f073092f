"""
Runtime configuration
Settings are read from environment variables with sensible defaults
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .query.compiler import PLACEHOLDER_STYLES

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class Settings(BaseModel):
    """Database and logging settings"""
    db_path: str = Field("crudsql.db", description="Path to the SQLite database file")
    placeholder_style: str = Field("qmark", description="DB-API paramstyle used when compiling queries")
    log_level: str = Field("INFO", description="Level for the crudsql logger")
    use_returning: Optional[bool] = Field(
        None,
        description="Force RETURNING on or off; None detects it from the SQLite version",
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("placeholder_style")
    @classmethod
    def check_placeholder_style(cls, value: str) -> str:
        if value not in PLACEHOLDER_STYLES:
            raise ValueError(
                f"Unknown placeholder style {value!r}, expected one of {sorted(PLACEHOLDER_STYLES)}"
            )
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from CRUDSQL_* environment variables

        Returns:
            Settings: Settings with environment overrides applied

        Raises:
            ValueError: If CRUDSQL_USE_RETURNING is not a boolean word
        """
        values = {}
        if "CRUDSQL_DB_PATH" in os.environ:
            values["db_path"] = os.environ["CRUDSQL_DB_PATH"]
        if "CRUDSQL_PLACEHOLDER_STYLE" in os.environ:
            values["placeholder_style"] = os.environ["CRUDSQL_PLACEHOLDER_STYLE"]
        if "CRUDSQL_LOG_LEVEL" in os.environ:
            values["log_level"] = os.environ["CRUDSQL_LOG_LEVEL"]

        returning = os.getenv("CRUDSQL_USE_RETURNING")
        if returning is not None:
            word = returning.strip().lower()
            if word in _TRUE_VALUES:
                values["use_returning"] = True
            elif word in _FALSE_VALUES:
                values["use_returning"] = False
            else:
                raise ValueError(f"CRUDSQL_USE_RETURNING must be a boolean, got {returning!r}")

        return cls(**values)
