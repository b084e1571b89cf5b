"""Application-wide constants for the trade platform."""

from __future__ import annotations

BRAND_NAME = "TradeSwap"

# Length limits shared by models and schemas
MAX_ITEM_DESCRIPTION_LENGTH = 500
MAX_CHARACTER_NAME_LENGTH = 100
MAX_ZONE_CODE_LENGTH = 20

# Event match paging
DEFAULT_MATCH_PAGE_SIZE = 10
MAX_MATCH_PAGE_SIZE = 50

# Header set by the upstream auth gateway with the resolved user id
USER_ID_HEADER = "X-User-Id"

# Path parameter pattern for ULID identifiers
ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"

# API metadata
API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Give/want trade posts, offer negotiation and trade chat rooms."
API_VERSION = "1.0.0"
