"""
Display constants: session titles, points table, team and tyre colours.
"""
from typing import Any, Optional


SESSION_TITLE_MAP: dict[int, str] = {
    0: "P1",
    1: "P2 / Sprint Qualifying",
    2: "P3 / Sprint Race",
    3: "Race Quali",
    4: "Race Day",
}

F1_POINTS: dict[int, int] = {
    1: 25, 2: 18, 3: 15, 4: 12, 5: 10,
    6: 8, 7: 6, 8: 4, 9: 2, 10: 1,
}

COMPOUND_COLORS: dict[str, str] = {
    "HARD": "#ffffff",
    "MEDIUM": "#ffdb4d",
    "SOFT": "#ff4d4d",
    "INTERMEDIATE": "#4bb2ff",
    "WET": "#003b88",
}
UNKNOWN_COMPOUND_COLOR = "#888"

DEFAULT_TEAM_COLOR = "e10600"


def get_session_title(index: int, total_sessions: int) -> str:
    """
    Title for the session at ``index`` in a newest-first list.

    The oldest session of a meeting is P1 and the newest is Race Day.
    """
    race_index = total_sessions - 1 - index
    return SESSION_TITLE_MAP.get(race_index, f"Session {race_index + 1}")


def get_f1_points(position: Any) -> int:
    try:
        return F1_POINTS.get(int(position), 0)
    except (TypeError, ValueError):
        return 0


def team_color(colour: Optional[str], default: str = DEFAULT_TEAM_COLOR) -> str:
    """CSS hex colour for a team, from OpenF1's bare 'rrggbb' string."""
    return f"#{colour or default}"


def team_color_with_opacity(colour: Optional[str], opacity: str = "20") -> str:
    return f"#{colour}{opacity}"


def team_color_border(colour: Optional[str]) -> str:
    return f"#{colour}"


def compound_color(compound: Optional[str]) -> str:
    return COMPOUND_COLORS.get((compound or "").upper(), UNKNOWN_COMPOUND_COLOR)


def color_for_driver(driver_number: Any) -> str:
    """Deterministic HSL colour per driver number."""
    try:
        num = int(driver_number)
    except (TypeError, ValueError):
        num = 0
    return f"hsl({(num * 57) % 360}, 68%, 50%)"


def format_driver_short(full_name: Optional[str]) -> str:
    """'Max VERSTAPPEN' -> 'M. VER'."""
    if not full_name:
        return ""
    parts = full_name.strip().split()
    if not parts:
        return ""
    if len(parts) == 1:
        return parts[0]
    return f"{parts[0][0]}. {parts[1][:3].upper()}"
