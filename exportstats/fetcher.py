"""
Upstream sources of datasets.
"""

from abc import ABC, abstractmethod
import logging

import requests

from exportstats.model.data import Dataset, Point, Stat
from exportstats.model.timeframe import Timeframe

logger = logging.getLogger(__name__)

STATHAT_BASE_URI = "https://www.stathat.com/x"


class NotFoundError(LookupError):
    """
    The named series doesn't exist upstream.
    """

    def __init__(self, name: str):
        super().__init__(f"Stat not found: {name}")
        self.name = name


class FetchError(Exception):
    """
    The upstream answered with something we couldn't decode.
    """


class Fetcher(ABC):
    """
    Retrieves a named dataset for a timeframe.
    """

    @abstractmethod
    def get(self, name: str, timeframe: Timeframe) -> Dataset:
        """
        Fetch a dataset.

        Args:
            name: The series name.
            timeframe: The span and sampling interval to fetch.

        Returns: The dataset, points in ascending time order.

        Raises:
            NotFoundError: The series doesn't exist.
        """


class StatHatFetcher(Fetcher):
    """
    Fetches series from the StatHat export API. A series name is first resolved
    to a stat ID, then the data for that ID is requested.
    """

    def __init__(
        self,
        access_token: str,
        base_uri: str = STATHAT_BASE_URI,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        """
        Constructor.

        Args:
            access_token: The StatHat access token.
            base_uri: The export API root, without the token.
            timeout: Seconds to wait on each upstream request.
            session: The HTTP session, one is created if omitted.
        """
        self.access_token = access_token
        self.timeout = timeout
        self._base_uri = f"{base_uri.rstrip('/')}/{access_token}"
        self._session = session or requests.Session()

    def get(self, name: str, timeframe: Timeframe) -> Dataset:
        stat = self._get_stat(name)

        params = {"t": timeframe.format()}
        if timeframe.start is not None:
            params["start"] = str(int(timeframe.start.timestamp()))

        payload = self._get_json(f"/data/{stat.id}", params, name)
        try:
            points = [
                Point(int(point["time"]), float(point["value"]))
                for point in payload[0]["points"] or []
            ]
        except (IndexError, KeyError, TypeError, ValueError) as e:
            raise FetchError(f"Malformed data for {name}: {e!r}") from e

        return Dataset(name, timeframe, points)

    def _get_stat(self, name: str) -> Stat:
        payload = self._get_json("/stat", {"name": name}, name)
        try:
            return Stat(
                id=str(payload["id"]),
                name=payload.get("name", name),
                public=bool(payload.get("public", False)),
                counter=bool(payload.get("counter", False)),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise FetchError(f"Malformed stat for {name}: {e!r}") from e

    def _get_json(self, path: str, params: dict[str, str], name: str):
        # Don't log the token, it's part of the URI.
        logger.debug("GET %s %s", path, params)
        resp = self._session.get(
            self._base_uri + path, params=params, timeout=self.timeout
        )
        if resp.status_code != requests.codes.ok:
            logger.info("%s %s answered %d", path, params, resp.status_code)
            raise NotFoundError(name)

        try:
            return resp.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {path}: {e}") from e
