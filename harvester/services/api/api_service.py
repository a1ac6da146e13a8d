from abc import ABC
import logging
import time
from typing import Dict, Any
from requests import request, Response
from requests.exceptions import HTTPError, RequestException
from yarl import URL

from harvester.exceptions import FetchError

logger = logging.getLogger(__name__)


class HttpService(ABC):
    """
    Base class for making HTTP GET requests with retry logic
    """

    def __init__(
        self,
        base_url: str,
        timeout: int,
        retries: int,
        backoff: float,
    ) -> None:
        self.base_url = base_url
        self.__timeout = timeout
        self.__retries = retries
        self.__backoff = backoff

    @property
    def retries(self) -> int:
        return self.__retries

    def fetch(
        self,
        sub_route: str | None = None,
        params: Dict[str, Any] | None = None,
    ) -> bytes:
        """
        Perform a GET request and return the raw response body. Transport errors and non-2xx
        responses are retried with an exponential backoff; once all attempts have failed a
        FetchError is raised carrying the last failure.
        """
        url = self.make_target_url(sub_route, params)
        last_error: Exception | None = None

        for attempt in range(1, self.__retries + 1):
            try:
                response = self.do_request(url)
                if not 200 <= response.status_code < 300:
                    raise HTTPError(
                        f"API returned status {response.status_code}", response=response
                    )
                return response.content
            except RequestException as e:
                last_error = e
                logger.warning(
                    "Attempt %d/%d failed to request %s: %s", attempt, self.__retries, url, e
                )

            if attempt < self.__retries:
                wait_time = self.__backoff * (2**attempt)
                logger.info("Retrying %d/%d in %s seconds", attempt, self.__retries, wait_time)
                time.sleep(wait_time)

        logger.error("Failed to request %s after %d attempts", url, self.__retries)
        raise FetchError(str(url), self.__retries, last_error) from last_error

    def do_request(self, url: URL) -> Response:
        logger.info(f"Making HTTP GET request to {url}")
        return request(
            method="GET",
            url=str(url),
            headers=self.make_headers(),
            timeout=self.__timeout,
        )

    def make_headers(self) -> Dict[str, Any]:
        return {"Accept": "application/fhir+json, application/json"}

    def make_target_url(
        self, sub_route: str | None = None, params: Dict[str, Any] | None = None
    ) -> URL:
        url = self.base_url
        if sub_route:
            url = f"{url}/{sub_route}"

        target = URL(url)
        if params:
            return target.with_query(params)

        return target
