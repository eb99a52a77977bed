"""
Preference resolution.
Loads a user's stored preference document and merges it over defaults,
parsing each recognized field independently.
"""
import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from pluggable_feed.core.exceptions import InvalidPreferenceError, PreferenceReadError
from pluggable_feed.models.interfaces import PreferenceRepository
from pluggable_feed.models.schemas import FeedPreferences

logger = logging.getLogger(__name__)

WEIGHT_FIELDS = ("like_weight", "comment_weight", "follower_weight", "recency_weight")

_MISSING = object()


def parse_weight(value: Any) -> Optional[float]:
    """
    Parse a stored weight.

    Returns the float value, or None when the value cannot be read as a
    finite number. Booleans are rejected even though they subclass int.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _parse_algorithm_id(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _parse_endpoint(value: Any) -> Tuple[bool, Optional[str]]:
    if not isinstance(value, str):
        return False, None
    stripped = value.strip()
    return True, stripped or None


def merge_preferences(raw: Any, strict: bool = False) -> FeedPreferences:
    """
    Merge a raw preference document over the defaults.

    Each field is handled in isolation so one malformed value never
    invalidates the rest of the record. Missing or null fields take their
    default silently. Malformed fields take their default and are listed in
    ``defaulted_fields``, unless ``strict`` is set, in which case
    InvalidPreferenceError is raised for the first one.
    """
    if raw is None:
        return FeedPreferences()
    if not isinstance(raw, Mapping):
        logger.warning(f"Preference document is not a mapping ({type(raw).__name__}), using defaults")
        return FeedPreferences()

    values: Dict[str, Any] = {}
    defaulted: List[str] = []

    def take(field: str, parser: Callable[[Any], Any]) -> None:
        value = raw.get(field, _MISSING)
        if value is _MISSING or value is None:
            return
        parsed = parser(value)
        if parsed is None:
            if strict:
                raise InvalidPreferenceError(field, value)
            logger.warning(f"Malformed preference '{field}'={value!r}, using default")
            defaulted.append(field)
            return
        values[field] = parsed

    take("algorithm_id", _parse_algorithm_id)
    for field in WEIGHT_FIELDS:
        take(field, parse_weight)

    endpoint = raw.get("third_party_endpoint")
    if endpoint is not None:
        ok, parsed_endpoint = _parse_endpoint(endpoint)
        if not ok:
            if strict:
                raise InvalidPreferenceError("third_party_endpoint", endpoint)
            logger.warning(f"Malformed preference 'third_party_endpoint'={endpoint!r}, using default")
            defaulted.append("third_party_endpoint")
        else:
            values["third_party_endpoint"] = parsed_endpoint

    return FeedPreferences(**values, defaulted_fields=defaulted)


class PreferenceResolver:
    """
    Resolves a user's effective feed preferences.

    A failed read is the one self-healing path of the subsystem: it is
    logged and the user gets pure defaults.
    """

    def __init__(self, repository: PreferenceRepository, strict: bool = False) -> None:
        """
        Initialize the resolver.

        Args:
            repository: Store holding the raw preference documents
            strict: Reject malformed fields instead of defaulting them
        """
        self._repository = repository
        self._strict = strict

    async def resolve(self, user_id: str) -> FeedPreferences:
        """Load and merge preferences for ``user_id``. Never fails on store errors."""
        try:
            raw = await self._load(user_id)
        except PreferenceReadError as e:
            logger.warning(
                f"Preference read failed, using defaults: {e.message}",
                extra={"user_id": user_id},
            )
            return FeedPreferences()

        preferences = merge_preferences(raw, strict=self._strict)
        if preferences.defaulted_fields:
            logger.info(
                f"Defaulted preference fields: {', '.join(preferences.defaulted_fields)}",
                extra={"user_id": user_id},
            )
        return preferences

    async def _load(self, user_id: str) -> Optional[Mapping[str, Any]]:
        try:
            return await self._repository.get_preferences(user_id)
        except Exception as e:
            raise PreferenceReadError(user_id, str(e)) from e
