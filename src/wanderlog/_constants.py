"""Internal constants shared across the library."""

API_BASE_URL = "http://localhost:8000/api"
USER_AGENT = "wanderlog/0.1"

#: User id the auth layer assigns to guest (local-only) sessions.
GUEST_USER_ID = "guest"

# ------------------------------------------------------------------
# Local persistence keys (one per record kind, must not collide)
# ------------------------------------------------------------------

VISITED_STORAGE_KEY = "guest_cities"
PLANNED_STORAGE_KEY = "planned_cities"

# ------------------------------------------------------------------
# Country code -> flag emoji
# ------------------------------------------------------------------

#: ``ord("🇦") - ord("A")``: offset from an ASCII capital to its regional indicator.
REGIONAL_INDICATOR_OFFSET = 127397


def flag_emoji(country_code: str) -> str:
    """Convert a two-letter country code (``"pt"``) to its flag emoji (``"🇵🇹"``)."""
    return "".join(chr(REGIONAL_INDICATOR_OFFSET + ord(ch)) for ch in country_code.strip().upper())


# ------------------------------------------------------------------
# Directional arrows
# ------------------------------------------------------------------

#: Fraction along a segment where its arrow is anchored (towards the destination).
ARROW_POSITION = 0.6
