"""Service configuration loaded from the environment."""
import os
from pathlib import Path
from typing import Dict, Literal, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress

# Settings field -> environment variable
ENV_VARS: Dict[str, str] = {
    "host": "CALC_HOST",
    "port": "CALC_PORT",
    "database_url": "CALC_DATABASE_URL",
    "storage": "CALC_STORAGE",
    "log_level": "CALC_LOG_LEVEL",
}


class Settings(BaseModel):
    """
    Runtime settings of the calculation service.

    Values come from defaults, then the environment (optionally seeded from a
    .env file), then command-line overrides.
    """

    # Settings must not change once the server is running
    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="HTTP bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="HTTP port")
    database_url: str = Field(
        default="sqlite:///calculations.db",
        description="SQLAlchemy database URL",
    )
    storage: Literal["sql", "memory"] = Field(
        default="sql",
        description="Storage backend; 'memory' keeps records for the process lifetime only",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None, **overrides) -> "Settings":
        """
        Build settings from environment variables.

        Overrides whose value is None are ignored, so unset CLI options fall
        back to the environment.

        :param env_file: Optional .env file loaded before reading the environment
        :param overrides: Field values taking precedence over the environment

        :return: Validated settings
        :rtype: Settings
        :raises pydantic.ValidationError: If a value is invalid
        """
        load_dotenv(env_file)
        values = {field: os.environ[var] for field, var in ENV_VARS.items() if var in os.environ}
        values.update({field: value for field, value in overrides.items() if value is not None})
        if "log_level" in values:
            values["log_level"] = str(values["log_level"]).upper()
        return cls(**values)
