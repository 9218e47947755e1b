"""
Download a series (or the rate between two series) and save it locally.
"""

import argparse
from enum import StrEnum
import pathlib

import pandas as pd
import requests


class Format(StrEnum):
    CSV = "csv"
    PARQUET = "parquet"

    @classmethod
    def values(cls):
        return list(map(lambda c: c.value, cls))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="export_series.py",
        description="Save an exported series to disk",
    )
    parser.add_argument(
        "--host",
        default="localhost:6070",
        help="The API endpoint",
    )
    parser.add_argument(
        "--stat",
        required=True,
        action="append",
        help="The series name. Pass it twice to export the rate between two series",
    )
    parser.add_argument(
        "--timeframe",
        default="1 hour @ 1 minute",
        help="The timeframe, e.g. '1 day @ 1 hour' or '1d1h'",
    )
    parser.add_argument(
        "--start",
        type=int,
        help="Unix timestamp the timeframe starts at, defaults to ending now",
    )
    parser.add_argument(
        "--filename",
        required=True,
        type=pathlib.Path,
        help="Where to write the data",
    )
    parser.add_argument(
        "--format",
        type=str,
        default=Format.CSV.value,
        choices=Format.values(),
        help="The output format",
    )
    return parser.parse_args()


def fetch(args: argparse.Namespace) -> pd.DataFrame:
    if len(args.stat) == 1:
        url = f"http://{args.host}/v1/exportstats/stat/{args.stat[0]}"
    elif len(args.stat) == 2:
        url = f"http://{args.host}/v1/exportstats/rate/{args.stat[0]}/{args.stat[1]}"
    else:
        raise ValueError("Pass --stat once for a series or twice for a rate")

    params = {"t": args.timeframe, "format": "json"}
    if args.start is not None:
        params["start"] = args.start

    resp = requests.get(url, params=params, timeout=60)
    if resp.status_code != 200:
        raise RuntimeError(f"{resp.status_code}: {resp.json().get('message')}")

    df = pd.DataFrame(resp.json(), columns=["time", "value"])
    df["time"] = pd.to_datetime(df["time"], unit="s", utc=True)
    return df


def save(df: pd.DataFrame, filename: pathlib.Path, format: str):
    if format == Format.CSV.value:
        df.to_csv(filename, index=False)
    elif format == Format.PARQUET.value:
        df.to_parquet(filename, index=False)
    else:
        raise ValueError(
            f"Unknown format: {format}. Please choose one of {Format.values()}"
        )


args = parse_args()
df = fetch(args)
save(df, args.filename, args.format)
print(f"{len(df)} points written to {args.filename}")
