"""
API endpoint constants and configuration.

This module contains all farm-records API endpoint paths and related constants.
Centralizing these values makes it easy to swap out endpoints or update API versions.
"""


# Farm Records API Endpoints
class FarmRecordsEndpoints:
    """Farm-records API endpoint paths."""

    # Base paths
    FARM_BASE = "/farms/{farm_id}"

    SEASONS = f"{FARM_BASE}/seasons"
    TREE_BY_ID = f"{FARM_BASE}/trees/{{tree_id}}"
    ZONE_BY_ID = f"{FARM_BASE}/zones/{{zone_id}}"

    @classmethod
    def get_seasons(cls, farm_id: str) -> str:
        """
        Get seasons endpoint for a farm.

        Args:
            farm_id: Farm ID

        Returns:
            Formatted endpoint path
        """
        return cls.SEASONS.format(farm_id=farm_id)

    @classmethod
    def get_tree(cls, farm_id: str, tree_id: str) -> str:
        return cls.TREE_BY_ID.format(farm_id=farm_id, tree_id=tree_id)

    @classmethod
    def get_zone(cls, farm_id: str, zone_id: str) -> str:
        return cls.ZONE_BY_ID.format(farm_id=farm_id, zone_id=zone_id)


# API Configuration Constants
class APIConstants:
    """General API configuration constants."""

    # HTTP Headers
    CONTENT_TYPE_JSON = "application/json"

    # Timeouts (in seconds)
    DEFAULT_TIMEOUT = 30.0

    # Latest-season query
    SEASON_ORDER_FIELD = "endDate"
    SEASON_ORDER_DIRECTION = "desc"
