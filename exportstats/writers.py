"""
Renderings of a dataset for the HTTP API.
"""

import csv
import io

from flask import Response, jsonify

from exportstats.model.data import Dataset


def csv_response(dataset: Dataset) -> Response:
    """
    One "value,time" row per point, value with 6 decimals.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(point.to_csv() for point in dataset.points)
    return Response(buf.getvalue(), mimetype="text/plain")


def json_response(dataset: Dataset) -> Response:
    """
    The points as a list of {"time", "value"} objects.
    """
    return jsonify(dataset.points)


def text_response(dataset: Dataset) -> Response:
    return Response(str(dataset), mimetype="text/plain")


def render(dataset: Dataset, format: str | None) -> Response:
    """
    Render a dataset in the requested format, the text rendering by default.
    """
    if format == "csv":
        return csv_response(dataset)
    if format == "json":
        return json_response(dataset)
    return text_response(dataset)
