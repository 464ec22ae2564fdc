"""Render Strava activities as Telegram Markdown messages."""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from ...models.strava import ActivityDetail, AthleteSummary
from ...telegram.domain.markdown import escape_markdown

DURATION_PLACEHOLDER = "--:--:--"
NOT_APPLICABLE = "N/A"

# Activity types without a meaningful distance.
DURATION_BASED_TYPES = frozenset({"WeightTraining", "Workout", "Crossfit", "Yoga"})


class MessageKind(str, Enum):
    DURATION_BASED = "duration_based"
    DISTANCE_BASED = "distance_based"


def activity_url(activity_id: int) -> str:
    return f"https://www.strava.com/activities/{activity_id}"


def classify(activity_type: Optional[str]) -> MessageKind:
    if activity_type in DURATION_BASED_TYPES:
        return MessageKind.DURATION_BASED
    return MessageKind.DISTANCE_BASED


def _as_number(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def format_duration(seconds: object) -> str:
    """Format a number of seconds as zero-padded ``HH:MM:SS``."""
    number = _as_number(seconds)
    if number is None or number < 0:
        return DURATION_PLACEHOLDER
    total = int(number)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_pace(moving_time: object, distance: object) -> str:
    """Return pace as ``M:SS`` minutes per kilometre."""
    seconds = _as_number(moving_time)
    meters = _as_number(distance)
    if seconds is None or not meters:
        return NOT_APPLICABLE
    pace = seconds / (meters / 1000)
    minutes = int(pace // 60)
    secs = int(pace % 60)
    return f"{minutes}:{secs:02d}"


def _fixed(value: object, placeholder: str) -> str:
    number = _as_number(value)
    return f"{number:.2f}" if number is not None else placeholder


def _activity_label(activity: ActivityDetail) -> str:
    activity_type = activity.type or activity.sport_type or "Activity"
    label = f"{activity_type} - {activity.name}" if activity.name else activity_type
    return escape_markdown(label)


def format_activity_message(activity: ActivityDetail, display_name: str) -> str:
    display_name = escape_markdown(display_name)
    link = f"[Open in Strava]({activity_url(activity.id)})"
    duration = format_duration(activity.moving_time)

    if classify(activity.type or activity.sport_type) is MessageKind.DURATION_BASED:
        calories = _as_number(activity.calories)
        calories_text = f"{calories:.2f} kcal" if calories else "unknown"
        lines = [
            f"💪 *{display_name}* finished a strength session!",
            "",
            f"*Activity*: {_activity_label(activity)}",
            f"*Duration*: {duration}",
            f"*Calories*: {calories_text}",
            f"*Description*: {escape_markdown(activity.description or 'No description')}",
        ]
    else:
        distance = _as_number(activity.distance)
        distance_km = f"{distance / 1000:.2f}" if distance is not None else "0.00"
        pace = format_pace(activity.moving_time, activity.distance)
        pace_text = pace if pace == NOT_APPLICABLE else f"{pace} min/km"
        lines = [
            f"🚴‍♂️🏃‍♂️🏊‍♂️ *{display_name}* just got back from a workout:",
            "",
            f"*Activity*: {_activity_label(activity)}",
            f"*Distance*: {distance_km} km",
            f"*Time*: {duration}",
            f"*Pace*: {pace_text} 🔥",
            f"*Elevation gain*: {_fixed(activity.total_elevation_gain, '0')} m",
        ]

    lines.extend(["", link])
    return "\n".join(lines)


def format_connected_message(athlete: AthleteSummary) -> str:
    name = athlete.full_name or athlete.display_name
    return f"🎉 {escape_markdown(name)} connected Strava!"


def format_reauthorization_message(display_name: str, authorization_url: str) -> str:
    return (
        f"⚠️ *{escape_markdown(display_name)}*, "
        "Strava no longer accepts the saved authorization. "
        f"Please reconnect: [Authorize Strava]({authorization_url})"
    )


__all__ = [
    "DURATION_BASED_TYPES",
    "MessageKind",
    "activity_url",
    "classify",
    "format_activity_message",
    "format_connected_message",
    "format_duration",
    "format_pace",
    "format_reauthorization_message",
]
