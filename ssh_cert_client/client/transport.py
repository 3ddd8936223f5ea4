"""HTTP transport for fetching signed certificates from the signer."""

import logging

import httpx

from ._constants import CERT_REQUESTS_PATH, VERSION
from .exceptions import NetworkError

logger = logging.getLogger(__name__)


class SignerTransport:
    """Single-shot, blocking GET against the signer. No retries, no timeout.

    ``transport`` is passed through to ``httpx.Client``; tests supply an
    ``httpx.MockTransport``.
    """

    def __init__(self, transport: httpx.BaseTransport | None = None) -> None:
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": f"get_cert/{VERSION}"}

    def request_url(self, request_id: str, signer_url: str) -> str:
        return signer_url + CERT_REQUESTS_PATH + request_id

    def fetch(self, request_id: str, signer_url: str) -> bytes:
        """Return the certificate body for ``request_id``.

        Raises:
            NetworkError: On connection failure, or with the response body
                as the message when the status is not 200.
        """
        url = self.request_url(request_id, signer_url)
        logger.info("Fetching certificate from %s", url)
        try:
            with httpx.Client(timeout=None, transport=self._transport) as client:
                resp = client.get(url, headers=self._headers())
        except httpx.RequestError as e:
            raise NetworkError(f"Didn't get a valid response: {e}") from e
        logger.debug("Signer responded status=%d bytes=%d", resp.status_code, len(resp.content))
        if resp.status_code != 200:
            raise NetworkError(resp.text, status_code=resp.status_code)
        return resp.content
