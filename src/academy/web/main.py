# standard library
import argparse
import asyncio
import logging
import sys

# typing
from typing import NamedTuple, Optional

# third parties
import uvicorn

# Academy
from academy.domain import DB_PATH_ENV
from academy.repositories import LocalDocDb, migrate, rollback

# relative
from .app import create_app
from .deployment import ConfigurationFactory

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="academy")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("serve", help="Serve the REST API")
    migrate_parser = subparsers.add_parser(
        "migrate", help=f"Apply the pending migrations of the store at ${DB_PATH_ENV}"
    )
    migrate_parser.add_argument(
        "--rollback-to",
        help="Revert the migrations applied after this one, use '0' to revert all of them",
    )
    return parser


class MainArguments(NamedTuple):
    """
    Arguments of the `academy` command, inline help can be displayed using:
    ```shell
    academy --help
    ```
    """

    command: str
    """
    Either `serve` or `migrate`.
    """
    rollback_to: Optional[str] = None
    """
    Exposed as **--rollback-to** for the `migrate` command.

    **Example**
    ```shell
    academy migrate --rollback-to=20230209223029_InitialCreate
    ```
    """


def get_main_arguments(argv: Optional[list[str]] = None) -> MainArguments:
    args = get_parser().parse_args(argv)
    return MainArguments(
        command=args.command,
        rollback_to=getattr(args, "rollback_to", None),
    )


async def run_migrations(rollback_to: Optional[str]) -> list[str]:
    configuration = ConfigurationFactory.get()
    if configuration.db_path is None:
        raise ValueError(f"Missing environment value {DB_PATH_ENV}")
    db = LocalDocDb(root_path=configuration.db_path)
    if rollback_to is None:
        return await migrate(db)
    return await rollback(db, target=None if rollback_to == "0" else rollback_to)


def main(argv: Optional[list[str]] = None) -> int:
    arguments = get_main_arguments(argv)
    ConfigurationFactory.set_from_env()
    configuration = ConfigurationFactory.get()
    configure_logging(configuration.log_level)
    logger = logging.getLogger("academy")
    logger.debug("Starting up")

    if arguments.command == "migrate":
        try:
            ids = asyncio.run(run_migrations(arguments.rollback_to))
        except ValueError as e:
            logger.error("Migration failed: %s", e)
            return 1
        logger.info("Migrations processed: %s", ", ".join(ids) or "none")
        return 0

    uvicorn.run(
        create_app(),
        host=configuration.host,
        port=configuration.port,
        log_level=configuration.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
