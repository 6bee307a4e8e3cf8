"""
Main entrypoint of the calculation service.

This script:
- Loads settings from the environment, a .env file and CLI options
- Connects to the database and creates the schema (fatal on failure)
- Serves the HTTP API with uvicorn
"""

import argparse
import sys
from typing import List, Optional

from pydantic import ValidationError
import uvicorn

from calculation_api.common.config import Settings
from calculation_api.common.errors import StorageError
from calculation_api.common.logger import configure_logging, logger
from calculation_api.server.app import create_app
from calculation_api.server.service import CalculationService
from calculation_api.storage.database import init_db
from calculation_api.storage.repository import (
    CalculationRepository,
    InMemoryCalculationRepository,
    SqlCalculationRepository,
)


def parse_args(argv: Optional[List[str]] = None) -> Settings:
    """
    Parse CLI options and merge them with environment settings.

    :param argv: Arguments to parse, defaults to sys.argv[1:]

    :return: Validated settings
    :rtype: Settings
    """
    parser = argparse.ArgumentParser(description="Calculation HTTP service")
    parser.add_argument("--host", help="Bind address (env CALC_HOST)")
    parser.add_argument("--port", type=int, help="Bind port (env CALC_PORT)")
    parser.add_argument("--database-url", help="SQLAlchemy database URL (env CALC_DATABASE_URL)")
    parser.add_argument(
        "--storage",
        choices=["sql", "memory"],
        help="Storage backend (env CALC_STORAGE)",
    )
    parser.add_argument("--log-level", help="Logging level (env CALC_LOG_LEVEL)")
    parser.add_argument("--env-file", help="Path to a .env file")

    args = parser.parse_args(argv)

    try:
        return Settings.from_env(
            env_file=args.env_file,
            host=args.host,
            port=args.port,
            database_url=args.database_url,
            storage=args.storage,
            log_level=args.log_level,
        )
    except ValidationError as exc:
        parser.error(str(exc))


def build_repository(settings: Settings) -> CalculationRepository:
    """
    Create the repository selected by the settings.

    :param Settings settings: Service settings

    :return: Repository instance
    :rtype: CalculationRepository
    :raises StorageError: If the database cannot be initialised
    """
    if settings.storage == "memory":
        logger.warning("Using in-memory storage, calculations are lost when the process exits")
        return InMemoryCalculationRepository()
    return SqlCalculationRepository(init_db(settings.database_url))


def main(argv: Optional[List[str]] = None) -> None:
    """
    Start the service.

    Exits with status 1 if storage cannot be initialised.
    """
    settings = parse_args(argv)
    configure_logging(settings.log_level)

    try:
        repository = build_repository(settings)
    except StorageError as exc:
        logger.critical("💥 Could not start: %s", exc)
        sys.exit(1)

    app = create_app(CalculationService(repository))
    logger.info("Starting server on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=str(settings.host), port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
