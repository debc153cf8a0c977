"""
Ingestion of raw tracking payloads.

Turns the JSON sent by the listing pages into validated EngagementEvents,
filling in what the server can observe (user agent, client IP, device type).
"""

import re
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from ..errors import EventValidationError
from ..models.engagement_models import CLICK_EVENT_TYPES, DeviceType, EngagementEvent

_TABLET_RE = re.compile(r"tablet|ipad|playbook|silk", re.IGNORECASE)
_MOBILE_RE = re.compile(
    r"mobile|iphone|ipod|android|blackberry|opera|mini|windows\sce|palm|smartphone|iemobile",
    re.IGNORECASE
)


def detect_device_type(user_agent: Optional[str]) -> DeviceType:
    """Classify a User-Agent string; tablets are checked before phones"""
    if not user_agent:
        return DeviceType.DESKTOP
    if _TABLET_RE.search(user_agent):
        return DeviceType.TABLET
    if _MOBILE_RE.search(user_agent):
        return DeviceType.MOBILE
    return DeviceType.DESKTOP


def validate_event(event: EngagementEvent) -> EngagementEvent:
    """
    Check an event against the ingestion rules.

    Raises:
        EventValidationError: blank business id, event type outside the
            vocabulary, or a clicked URL on an event that is not a click
    """
    if not event.business_id or not event.business_id.strip():
        raise EventValidationError("businessId is required")

    event_type = event.known_type
    if event_type is None:
        raise EventValidationError(f"Unrecognized eventType: {event.event_type!r}")

    if event.event_data.clicked_url and event_type not in CLICK_EVENT_TYPES:
        raise EventValidationError(
            f"clickedUrl is only valid on click events, not {event_type.value}"
        )

    return event


def parse_event(
    payload: Any,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None
) -> EngagementEvent:
    """
    Build a validated event from a raw tracking payload.

    Args:
        payload: Decoded JSON body (camelCase or snake_case keys)
        user_agent: User-Agent header observed by the server
        ip_address: Client address observed by the server

    Returns:
        Validated EngagementEvent

    Raises:
        EventValidationError: if the payload is malformed
    """
    if not isinstance(payload, Mapping):
        raise EventValidationError("Engagement payload must be a JSON object")

    data = dict(payload)
    camel_data = data.pop("eventData", None)
    snake_data = data.pop("event_data", None)
    event_data = camel_data if camel_data is not None else snake_data
    if event_data is None:
        event_data = {}
    if not isinstance(event_data, Mapping):
        raise EventValidationError("eventData must be a JSON object")
    event_data = dict(event_data)

    if user_agent and not (data.get("userAgent") or data.get("user_agent")):
        data["userAgent"] = user_agent
    if ip_address and not (data.get("ipAddress") or data.get("ip_address")):
        data["ipAddress"] = ip_address

    data["eventData"] = event_data

    try:
        event = EngagementEvent.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise EventValidationError(f"Invalid engagement event ({fields})") from e

    # Device is derived from the validated agent strings only
    observed_agent = event.user_agent or event.event_data.user_agent
    if observed_agent and not event.event_data.device_type:
        device = detect_device_type(observed_agent).value
        event = event.model_copy(
            update={"event_data": event.event_data.model_copy(update={"device_type": device})}
        )

    return validate_event(event)
