"""Retry policy for outbound page fetches."""

import logging

import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

# Attempts per page fetch, including the first one
MAX_ATTEMPTS = 3


class TransientStatusError(Exception):
    """Origin answered with a 5xx status; worth another attempt."""

    def __init__(self, response: requests.Response):
        self.response = response
        super().__init__(f"{response.status_code} {response.reason}")


# Page fetch retry decorator: 5xx and connection-level failures only.
# Waits 2^attempt seconds between attempts (2s, then 4s).
page_fetch_retry = retry(
    retry=retry_if_exception_type(
        (TransientStatusError, requests.ConnectionError, requests.Timeout)
    ),
    wait=wait_exponential(multiplier=2),
    stop=stop_after_attempt(MAX_ATTEMPTS),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
