"""HTTP transport adapter built on ``httpx``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from statsburner import __version__
from statsburner.domain.exceptions import TransportError
from statsburner.domain.interfaces import ITransport

DEFAULT_USER_AGENT = f"Statsburner API v{__version__}"


@dataclass(frozen=True)
class TransportConfig:
    """Settings applied to every report fetch."""

    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError("timeout must be greater than zero")
        if not self.user_agent:
            raise ValueError("user_agent must be provided")


class HttpTransport(ITransport):
    """Fetches report bodies with a single GET; no retries."""

    def __init__(
        self,
        http_client: Optional[httpx.Client] = None,
        config: Optional[TransportConfig] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or TransportConfig()
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(
            timeout=self.config.timeout, follow_redirects=True
        )
        self.logger = logger or logging.getLogger(
            f"{__name__}.{self.__class__.__name__}"
        )

    def fetch(self, url: str) -> str:
        self.logger.debug("stats_fetch", extra={"url": url})
        try:
            http_response = self._http.get(
                url,
                headers={"User-Agent": self.config.user_agent},
                timeout=self.config.timeout,
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or exc.__class__.__name__, context={"url": url}) from exc

        # 4xx bodies still carry the API error report.
        status = http_response.status_code
        if status >= 500:
            raise TransportError(
                f"HTTP {status} from statistics API",
                context={"url": url, "status_code": status},
            )

        self.logger.debug(
            "stats_fetched",
            extra={"url": url, "status_code": status, "bytes": len(http_response.content)},
        )
        return http_response.text

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
