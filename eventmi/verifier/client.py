"""
HTTP client for the event pages under verification.

One blocking round trip per request, redirects followed, no retries.
Transport failures surface as TransportError rather than a status code.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from eventmi.config import Settings, get_settings
from eventmi.verifier.errors import TransportError
from eventmi.verifier.request_builder import RequestDescriptor

logger = logging.getLogger(__name__)

USER_AGENT = "Eventmi-Verifier/1.0"


@dataclass(frozen=True)
class EndpointResponse:
    """Final response of a dispatched request."""

    status_code: int
    body: str
    url: str
    redirected: bool = False


class EndpointClient:
    """
    Dispatches RequestDescriptors to the endpoint surface.

    Any ``httpx.Client`` can be injected (Starlette's TestClient included);
    otherwise one is built from settings. Injected clients are left open on
    close().
    """

    def __init__(self, http: Optional[httpx.Client] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._owns_http = http is None
        if http is None:
            http = httpx.Client(
                base_url=self.settings.base_url,
                timeout=self.settings.request_timeout,
                verify=self.settings.verify_tls,
                headers={"User-Agent": USER_AGENT},
            )
        self.http = http

    def send(self, request: RequestDescriptor) -> EndpointResponse:
        logger.debug("%s %s", request.method, request.path)
        try:
            response = self.http.request(
                request.method,
                request.path,
                content=request.body,
                headers=dict(request.headers),
                follow_redirects=True,
            )
        except httpx.RequestError as exc:
            logger.error("Transport failure on %s %s: %s", request.method, request.path, exc)
            raise TransportError(
                f"{request.method} {request.path} failed: {exc}",
                method=request.method,
                path=request.path,
            ) from exc

        logger.debug(
            "%s %s -> %s%s", request.method, request.path, response.status_code,
            " (redirected)" if response.history else "",
        )
        return EndpointResponse(
            status_code=response.status_code,
            body=response.text,
            url=str(response.url),
            redirected=bool(response.history),
        )

    def close(self):
        if self._owns_http:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
