"""
The HTTP API.
"""

from datetime import datetime, timezone
import logging
import re

from flask import Flask, request

from exportstats.db import DB
from exportstats.fetcher import NotFoundError
from exportstats.model.timeframe import DEFAULT_TIMEFRAME, Timeframe, parse_timeframe
from exportstats.writers import render

logger = logging.getLogger(__name__)

_UNIX_SECONDS = re.compile(r"-?[0-9]+")


def _timeframe_from_request() -> Timeframe:
    """
    Build the timeframe from the `t` and `start` query parameters.

    Raises:
        ValueError: Either parameter is malformed.
    """
    t = request.args.get("t", "")
    timeframe = parse_timeframe(t) if t else DEFAULT_TIMEFRAME

    start = request.args.get("start", "")
    if start:
        if not _UNIX_SECONDS.fullmatch(start):
            raise ValueError(f"Invalid start {start!r}: expected unix seconds")
        try:
            start_dt = datetime.fromtimestamp(int(start), tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as e:
            raise ValueError(f"Invalid start {start!r}: {e}") from e
        timeframe = timeframe.with_start(start_dt)

    return timeframe


def create_app(db: DB) -> Flask:
    """
    Build the flask app serving the datasets in `db`.

    Args:
        db: The dataset cache.
    """
    app = Flask(__name__)

    @app.after_request
    def nocache(response):
        response.headers["Cache-Control"] = (
            "no-cache, no-store, max-age=0, must-revalidate"
        )
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        return response

    @app.route("/v1/exportstats/stat/<stat>", methods=["GET"])
    def get_stat(stat: str):
        logger.info("stat %s t=%s", stat, request.args.get("t"))
        try:
            timeframe = _timeframe_from_request()
        except ValueError as e:
            return {"message": str(e)}, 400

        try:
            data = db.get(stat, timeframe)
        except NotFoundError:
            return {"message": f"Not Found: {stat}"}, 404
        except Exception:
            logger.exception("fetching %s failed", stat)
            return {"message": "Internal Server Error"}, 500

        logger.info("count %d", len(data.points))
        return render(data, request.args.get("format"))

    @app.route("/v1/exportstats/rate/<stat_a>/<stat_b>", methods=["GET"])
    def get_rate(stat_a: str, stat_b: str):
        logger.info("rate %s %s t=%s", stat_a, stat_b, request.args.get("t"))
        try:
            timeframe = _timeframe_from_request()
        except ValueError as e:
            return {"message": str(e)}, 400

        try:
            data = db.get_rate(stat_a, stat_b, timeframe)
        except NotFoundError:
            return {"message": f"Not Found: {stat_a} or {stat_b}"}, 404
        except Exception:
            logger.exception("rate of %s and %s failed", stat_a, stat_b)
            return {"message": "Internal Server Error"}, 500

        logger.info("count %d", len(data.points))
        return render(data, request.args.get("format"))

    return app
