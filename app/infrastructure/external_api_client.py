"""
Infrastructure layer: Farm-records API client with retry logic.

Read-only: the engine never writes back to the document store.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar
import logging

import httpx
from pydantic import BaseModel, ValidationError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from app.config import settings
from app.domain.models import SeasonRecord, TreeData, ZoneData
from app.infrastructure.api_constants import APIConstants, FarmRecordsEndpoints

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)

RecordT = TypeVar("RecordT", bound=BaseModel)


class ExternalAPIError(Exception):
    """Custom exception for farm-records API errors."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _parse_record(model: Type[RecordT], payload: Any, endpoint: str) -> RecordT:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.error(f"Malformed {model.__name__} from {endpoint}: {e.error_count()} error(s)")
        raise ExternalAPIError(
            f"Malformed {model.__name__} from farm-records API: {e}",
            status_code=502,
        )


def _end_date_key(record: SeasonRecord) -> datetime:
    end_date = record.end_date
    if end_date is None:
        return _OLDEST
    if end_date.tzinfo is None:
        return end_date.replace(tzinfo=timezone.utc)
    return end_date


class FarmRecordsClient:
    """
    Client for the farm-records API.
    Implements retry logic with exponential backoff.
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None):
        """Initialize the API client with configuration."""
        self.base_url = base_url or settings.farm_records_api_base_url
        self.api_key = api_key if api_key is not None else settings.farm_records_api_key
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "accept": APIConstants.CONTENT_TYPE_JSON,
            },
            timeout=APIConstants.DEFAULT_TIMEOUT,
        )

    async def __aenter__(self) -> "FarmRecordsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make an HTTP request with retry logic.

        Server errors (5xx) and transport errors are retried; client
        errors (4xx) fail immediately.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            **kwargs: Additional arguments for the request

        Returns:
            Decoded JSON body

        Raises:
            ExternalAPIError: On client errors
            httpx.HTTPStatusError: On server errors, after retries
            httpx.RequestError: On transport errors, after retries
        """
        response = await self.client.request(method, endpoint, **kwargs)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code >= 500:
                logger.warning(f"Farm-records API {e.response.status_code} on {endpoint}, retrying")
                raise
            raise ExternalAPIError(
                f"API request failed: {e.response.status_code} - {e.response.text}",
                status_code=e.response.status_code,
            )
        return response.json()

    async def _get(self, endpoint: str, **kwargs) -> Any:
        try:
            return await self._make_request("GET", endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            raise ExternalAPIError(
                f"API request failed: {e.response.status_code} - {e.response.text}",
                status_code=502,
            )
        except httpx.RequestError as e:
            raise ExternalAPIError(f"API request error: {str(e)}", status_code=502)

    async def get_latest_season(self, farm_id: str) -> Optional[SeasonRecord]:
        """
        Fetch the most recent season record of a farm.

        Args:
            farm_id: Unique identifier for the farm

        Returns:
            SeasonRecord with the latest end date, or None if the farm has none

        Raises:
            ExternalAPIError: If the request fails or a record is malformed
        """
        endpoint = FarmRecordsEndpoints.get_seasons(farm_id)
        data = await self._get(
            endpoint,
            params={
                "orderBy": APIConstants.SEASON_ORDER_FIELD,
                "direction": APIConstants.SEASON_ORDER_DIRECTION,
                "limit": 1,
            },
        )
        results: List[Dict[str, Any]] = data.get("results", []) if isinstance(data, dict) else data
        if not results:
            logger.info(f"No season records for farm {farm_id}")
            return None

        if not isinstance(results, list):
            raise ExternalAPIError(f"Malformed season list from {endpoint}", status_code=502)

        records = [_parse_record(SeasonRecord, item, endpoint) for item in results]
        # The store does not guarantee ordering for records without endDate
        records.sort(key=_end_date_key, reverse=True)
        return records[0]

    async def get_tree(self, farm_id: str, tree_id: str) -> TreeData:
        """
        Fetch a tree.

        Args:
            farm_id: Unique identifier for the farm
            tree_id: Unique identifier for the tree

        Returns:
            TreeData instance

        Raises:
            ExternalAPIError: If the request fails, the tree does not exist
                or the record is malformed
        """
        endpoint = FarmRecordsEndpoints.get_tree(farm_id, tree_id)
        data = await self._get(endpoint)
        return _parse_record(TreeData, data, endpoint)

    async def get_zone(self, farm_id: str, zone_id: str) -> ZoneData:
        """
        Fetch a zone with its boundary.

        Args:
            farm_id: Unique identifier for the farm
            zone_id: Unique identifier for the zone

        Returns:
            ZoneData instance

        Raises:
            ExternalAPIError: If the request fails, the zone does not exist
                or the record is malformed
        """
        endpoint = FarmRecordsEndpoints.get_zone(farm_id, zone_id)
        data = await self._get(endpoint)
        return _parse_record(ZoneData, data, endpoint)


# Singleton instance
_api_client: Optional[FarmRecordsClient] = None


def get_api_client() -> FarmRecordsClient:
    """
    Get or create the singleton API client instance.

    Returns:
        FarmRecordsClient instance
    """
    global _api_client
    if _api_client is None:
        _api_client = FarmRecordsClient()
    return _api_client
