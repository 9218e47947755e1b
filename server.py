import argparse
import logging
import os
import sys

from exportstats.api import create_app
from exportstats.db import DB
from exportstats.fetcher import StatHatFetcher

VERSION = "0.1.0"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="server.py",
        description="Re-export StatHat series over HTTP",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="The address to bind to",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=6070,
        help="The server port",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("STATHAT_ACCESSTOKEN", ""),
        help="The StatHat access token (default: $STATHAT_ACCESSTOKEN)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Seconds to wait on each upstream request",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="The log level",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=VERSION,
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.token:
        logging.error("access token required, see --token")
        return 1

    logging.info("start exportstats service %s", VERSION)

    # The cache sweeper lives as long as the server does.
    with DB(StatHatFetcher(args.token, timeout=args.timeout)) as db:
        app = create_app(db)
        app.run(host=args.host, port=args.port, threaded=True)

    logging.info("Shutting down ..")
    return 0


if __name__ == "__main__":
    sys.exit(main())
