"""Gist publisher.

Delivers the rendered report, and a small JSON counter document, to a
GitHub gist with a single authenticated PATCH per delivery. HTTP
failures are mapped onto the DeliveryError hierarchy; nothing is
retried here.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

import httpx

from counterproductive.adapters.base import BasePublisher, DeliveryState
from counterproductive.config import GistConfig
from counterproductive.errors import (
    DeliveryRejected,
    DeliveryTimeout,
    DeliveryUnavailable,
)

logger = logging.getLogger("counterproductive.adapters.gist")

USER_AGENT = "gist-updater"


class GistPublisher(BasePublisher):
    """Publisher for a single GitHub gist.

    Args:
        gist_id: Target gist identifier.
        token: Bearer token allowed to edit the gist.
        api_url: API base URL (default: https://api.github.com).
        timeout: Request timeout in seconds.
        report_filename: Gist filename for the HTML report.
        data_filename: Gist filename for the JSON counter document.
    """

    def __init__(
        self,
        gist_id: str,
        token: str,
        api_url: str = "https://api.github.com",
        timeout: int = 30,
        report_filename: str = "report.html",
        data_filename: str = "counterproductive-data.json",
    ):
        super().__init__(endpoint=f"{api_url.rstrip('/')}/gists/{gist_id}")
        self._token = token
        self._timeout = timeout
        self.report_filename = report_filename
        self.data_filename = data_filename
        if not (gist_id and token):
            self._state = DeliveryState.DISABLED

    @classmethod
    def from_config(cls, config: GistConfig) -> GistPublisher:
        return cls(
            gist_id=config.gist_id,
            token=config.token,
            api_url=config.api_url,
            timeout=config.timeout,
            report_filename=config.report_filename,
            data_filename=config.data_filename,
        )

    @property
    def publisher_type(self) -> str:
        return "gist"

    @property
    def enabled(self) -> bool:
        return self._state != DeliveryState.DISABLED

    async def publish(self, files: dict[str, str]) -> str:
        """PATCH the given files into the gist and return its html_url."""
        payload: dict[str, Any] = {
            "files": {name: {"content": content} for name, content in files.items()}
        }
        headers = {
            "Authorization": f"Bearer {self._token}",
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github+json",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.patch(self.endpoint, json=payload, headers=headers)
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPStatusError as e:
            msg = f"gist update rejected [{e.response.status_code}]: {e.response.text}"
            self._record_error(msg)
            raise DeliveryRejected(msg) from e
        except httpx.TimeoutException as e:
            self._record_error("gist update timed out")
            raise DeliveryTimeout("gist update timed out") from e
        except httpx.RequestError as e:
            msg = f"Cannot reach gist API at {self.endpoint}"
            self._record_error(msg)
            raise DeliveryUnavailable(msg) from e

        self._record_delivery()
        url = body.get("html_url", "")
        logger.info("Gist updated: %s (%s)", url, ", ".join(files))
        return url

    async def publish_report(self, html: str) -> str:
        return await self.publish({self.report_filename: html})

    async def publish_counter(self, count: int, last_updated: datetime | str) -> str:
        """Publish the `{count, lastUpdated}` JSON document."""
        if isinstance(last_updated, datetime):
            last_updated = last_updated.isoformat()
        content = json.dumps({"count": count, "lastUpdated": last_updated}, indent=2)
        return await self.publish({self.data_filename: content})
