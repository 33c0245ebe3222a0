"""HTTP clients for the external telemetry time-series store.

The store speaks the ThingSpeak channel API:

    POST {base}/update                          one data point per call
    GET  {base}/channels/{id}/feeds.json        bulk history query

Uploads are fire-and-forget: a failed point is logged and dropped, never
retried. History fetch failures propagate to the caller so a forecast run
can classify and report them.
"""

from __future__ import annotations

from datetime import tzinfo
from typing import Any

import httpx
import structlog

from flow_state_monitor.core.config import Settings
from flow_state_monitor.core.exceptions import MalformedTelemetryError, TelemetryStoreError
from flow_state_monitor.models.telemetry import FilteredReading, TelemetryRecord
from flow_state_monitor.transformers.telemetry import TelemetryTransformer

logger = structlog.get_logger()


class TelemetryUploader:
    """Synchronous writer used from the sensing node's upload tick."""

    def __init__(self, settings: Settings, client: httpx.Client | None = None) -> None:
        """Initialize uploader.

        Args:
            settings: Application settings
            client: Optional preconfigured HTTP client (tests inject a mock transport)
        """
        self.settings = settings
        self._client = client or httpx.Client(
            base_url=settings.telemetry_base_url,
            timeout=settings.telemetry_timeout_seconds,
        )
        self.sent = 0
        self.dropped = 0
        self.logger = logger.bind(component="telemetry_uploader")

    def upload(self, reading: FilteredReading) -> bool:
        """Send one reading. Never raises for transport or server errors.

        Returns:
            True if the store accepted the point
        """
        payload = TelemetryTransformer.to_fields(reading)
        payload["api_key"] = self.settings.telemetry_write_key or ""

        try:
            response = self._client.post("/update", data=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.dropped += 1
            self.logger.warning(
                "Telemetry upload failed, point dropped",
                error_type=type(e).__name__,
                error=str(e),
                dropped=self.dropped,
            )
            return False

        # The store answers with the new entry id, or "0" when it refused the point
        if response.text.strip() in ("", "0"):
            self.dropped += 1
            self.logger.warning("Telemetry point rejected by store", dropped=self.dropped)
            return False

        self.sent += 1
        self.logger.debug(
            "Telemetry uploaded",
            entry_id=response.text.strip(),
            status=reading.state.value,
        )
        return True

    def close(self) -> None:
        self._client.close()


class TelemetryHistoryClient:
    """Async reader for the bulk history query."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        """Initialize history client.

        Args:
            settings: Application settings
            client: Optional preconfigured async HTTP client
        """
        self.settings = settings
        self._client = client
        self.logger = logger.bind(component="telemetry_history")

    def _query_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "results": self.settings.history_query_size(),
            "days": self.settings.history_days,
        }
        if self.settings.telemetry_read_key:
            params["api_key"] = self.settings.telemetry_read_key
        return params

    async def fetch_feeds(self) -> list[dict[str, Any]]:
        """Fetch raw feed rows for the history window.

        Raises:
            httpx.HTTPError: On transport failure
            TelemetryStoreError: On a non-2xx status
            MalformedTelemetryError: If the body is not a feeds document
        """
        path = f"/channels/{self.settings.telemetry_channel_id}/feeds.json"

        if self._client is not None:
            response = await self._client.get(path, params=self._query_params())
        else:
            async with httpx.AsyncClient(
                base_url=self.settings.telemetry_base_url,
                timeout=self.settings.telemetry_timeout_seconds,
            ) as client:
                response = await client.get(path, params=self._query_params())

        if response.is_error:
            raise TelemetryStoreError(
                f"History query failed with HTTP {response.status_code}",
                endpoint=path,
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedTelemetryError(f"History response is not JSON: {e}") from e

        if not isinstance(body, dict):
            raise MalformedTelemetryError("History response is not an object")

        feeds = body.get("feeds") or []
        if not isinstance(feeds, list):
            raise MalformedTelemetryError("History 'feeds' is not a list")
        return feeds

    async def fetch_records(self, tz: tzinfo) -> list[TelemetryRecord]:
        """Fetch and clean the history window.

        Args:
            tz: Timezone for day/hour binning

        Returns:
            Valid records only; rows with unusable timestamps or invalid heart rate are dropped
        """
        feeds = await self.fetch_feeds()
        records, dropped = TelemetryTransformer.from_feeds(feeds, tz)
        self.logger.info(
            "History fetched",
            rows=len(feeds),
            valid=len(records),
            dropped=dropped,
        )
        return records
