"""Probe the deployed echo endpoint."""

import json
from dataclasses import dataclass
from typing import Any

import httpx

from .core import AssertionFailed, ProbeUnreachable
from .observability import get_logger

logger = get_logger(__name__)

ECHO_PATH = "/echo"


@dataclass
class EchoResult:
    """Validated response of one echo round trip."""

    status_code: int
    body: dict[str, Any]


class EndpointProbe:
    """Send one API-key-authenticated echo request and validate the reply."""

    def __init__(self, client: httpx.Client, api_key: str, path: str = ECHO_PATH):
        """Initialize probe.

        Args:
            client: HTTP client whose base_url points at the service
            api_key: Endpoints API key, sent as the ``key`` query parameter
            path: Echo path relative to the base URL
        """
        self.client = client
        self.api_key = api_key
        self.path = path

    def echo(self, message: str) -> EchoResult:
        """POST message and assert it comes back unchanged.

        Args:
            message: Text to echo

        Returns:
            EchoResult with the parsed response

        Raises:
            ProbeUnreachable: If the request could not be sent
            AssertionFailed: If status, JSON shape or message differ
        """
        try:
            response = self.client.post(
                self.path,
                params={"key": self.api_key},
                content=json.dumps({"message": message}),
                headers={"content-type": "application/json"},
            )
        except httpx.RequestError as e:
            raise ProbeUnreachable(str(self.client.base_url.join(self.path)), e) from e

        logger.info("POST %s -> %d", self.path, response.status_code)

        if response.status_code != 200:
            raise AssertionFailed("status_code", 200, response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise AssertionFailed("body", "JSON object", response.text) from e

        if not isinstance(body, dict):
            raise AssertionFailed("body", "JSON object", body)
        if "message" not in body:
            raise AssertionFailed("message", message, "<missing>")
        if body["message"] != message:
            raise AssertionFailed("message", message, body["message"])

        return EchoResult(
            status_code=response.status_code,
            body=body,
        )
