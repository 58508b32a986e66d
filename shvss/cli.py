"""Command line entry point: serve the subscriptions and video endpoints."""

import argparse
import sys
from typing import List, Optional

import structlog
import uvicorn

from . import PROGRAM_NAME, __version__
from .api.app import create_app
from .config.log_config import configure_logging
from .config.settings import settings
from .config.subscriptions import SubscriptionStore
from .errors import StorageError

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROGRAM_NAME, description="Serve a merged video feed")
    parser.add_argument("-p", dest="port", type=int, default=settings.port, help="Server Port")
    parser.add_argument("-s", dest="subs_file", default=str(settings.subs_file),
                        help="json formatted subs file")
    parser.add_argument("-v", dest="version", action="store_true",
                        help="Print version and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.version:
        print(f"{PROGRAM_NAME} v{__version__}")
        return 0

    configure_logging(settings.log_level, settings.json_logs)

    store = SubscriptionStore(args.subs_file)
    try:
        store.ensure_exists()
    except StorageError as e:
        logger.error("subscriptions_bootstrap_failed", path=args.subs_file, error=str(e))
        return 1

    logger.info("shvss_serving", host=settings.host, port=args.port, subs_file=args.subs_file)
    uvicorn.run(create_app(store=store), host=settings.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
