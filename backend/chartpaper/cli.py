"""
chartpaper command line: run the API server or create the database schema.
"""
import argparse
import logging

from .core.config import settings
from .core.logging import setup_logging

logger = logging.getLogger(__name__)


def migrate() -> None:
    from .db.base import Base
    from .db.session import engine

    Base.metadata.create_all(bind=engine)
    logger.info(f"Database schema is up to date ({engine.url.render_as_string(hide_password=True)})")


def listen(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("chartpaper.main:app", host=host, port=port, log_level=settings.LOG_LEVEL.lower())


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="chartpaper", description="Chartpaper API server and CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    listen_parser = subparsers.add_parser("listen", help="Start the Chartpaper API server")
    listen_parser.add_argument("--host", default="0.0.0.0")
    listen_parser.add_argument("--port", type=int, default=8000)

    subparsers.add_parser("migrate", help="Create database tables")

    args = parser.parse_args(argv)
    setup_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)

    if args.command == "listen":
        listen(args.host, args.port)
    elif args.command == "migrate":
        migrate()


if __name__ == "__main__":
    main()
