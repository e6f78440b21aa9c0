"""Session settings: team size, tactical schema and display preferences."""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, NamedTuple, Optional

from ..utils.constants import (
    DEFAULT_PLAYERS_PER_TEAM, DEFAULT_TACTICAL_SCHEMA, DEFAULT_THEME,
    EMPTY_TACTICAL_SCHEMA, FORMATIONS_BY_SIZE, MAX_PLAYERS_PER_TEAM,
    MIN_PLAYERS_PER_TEAM, THEMES
)


class TacticalQuota(NamedTuple):
    """Target shape per team, goalkeeper excluded."""
    defenders: int
    fullbacks: int
    midfielders: int
    forwards: int

    @property
    def outfield_total(self) -> int:
        return self.defenders + self.fullbacks + self.midfielders + self.forwards

    def label(self) -> str:
        return f"{self.defenders}-{self.fullbacks}-{self.midfielders}-{self.forwards}"


def parse_tactical_schema(schema: str) -> TacticalQuota:
    """
    Parse a "Def-FB-Mid-Fwd" schema string.

    Example:
        >>> parse_tactical_schema("2-2-3-2")
        TacticalQuota(defenders=2, fullbacks=2, midfielders=3, forwards=2)

    Raises:
        ValueError: If the schema is not four non-negative integers
    """
    parts = (schema or "").split("-")
    if len(parts) != 4:
        raise ValueError(f"Tactical schema must have four parts: {schema!r}")
    try:
        counts = [int(part.strip()) for part in parts]
    except ValueError:
        raise ValueError(f"Tactical schema must be numeric: {schema!r}")
    if any(count < 0 for count in counts):
        raise ValueError(f"Tactical schema cannot be negative: {schema!r}")
    return TacticalQuota(*counts)


def formations_for(players_per_team: int) -> List[str]:
    """Catalogued schema values for a team size (may be empty)."""
    return [value for _label, value in FORMATIONS_BY_SIZE.get(players_per_team, [])]


@dataclass
class Settings:
    """
    Settings read by the balancer on every assignment.

    Attributes:
        players_per_team: Starter limit per team
        tactical_schema: Target quota shape "Def-FB-Mid-Fwd"
        theme: "light" or "dark"
        auto_balance: Preference flag kept for the client
    """
    players_per_team: int = DEFAULT_PLAYERS_PER_TEAM
    tactical_schema: str = DEFAULT_TACTICAL_SCHEMA
    theme: str = DEFAULT_THEME
    auto_balance: bool = True

    def validate(self) -> List[str]:
        """
        Validate the settings.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []
        if not isinstance(self.players_per_team, int) or isinstance(self.players_per_team, bool):
            errors.append("Players per team must be an integer")
        elif not MIN_PLAYERS_PER_TEAM <= self.players_per_team <= MAX_PLAYERS_PER_TEAM:
            errors.append(
                f"Players per team must be between {MIN_PLAYERS_PER_TEAM} and {MAX_PLAYERS_PER_TEAM}"
            )
        try:
            parse_tactical_schema(self.tactical_schema)
        except ValueError as e:
            errors.append(str(e))
        if self.theme not in THEMES:
            errors.append(f"Theme must be one of: {', '.join(THEMES)}")
        return errors

    def quota(self) -> Optional[TacticalQuota]:
        """Parsed schema, or None when the stored value is malformed."""
        try:
            return parse_tactical_schema(self.tactical_schema)
        except ValueError:
            return None

    def with_players_per_team(self, players_per_team: int) -> 'Settings':
        """
        Return a copy with a new team size and a schema valid for it.

        The schema is kept when catalogued for the new size, otherwise it
        switches to the first catalogued formation, or to the empty schema
        when the size has no catalogue.
        """
        available = formations_for(players_per_team)
        schema = self.tactical_schema
        if available:
            if schema not in available:
                schema = available[0]
        else:
            schema = EMPTY_TACTICAL_SCHEMA
        return replace(self, players_per_team=players_per_team, tactical_schema=schema)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "players_per_team": self.players_per_team,
            "tactical_schema": self.tactical_schema,
            "theme": self.theme,
            "auto_balance": self.auto_balance,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Settings':
        """Merge stored values over the defaults."""
        if not data:
            return cls()
        defaults = cls()
        return cls(
            players_per_team=int(data.get("players_per_team", data.get("playersPerTeam", defaults.players_per_team))),
            tactical_schema=str(data.get("tactical_schema", data.get("tacticalSchema", defaults.tactical_schema))),
            theme=str(data.get("theme", defaults.theme)),
            auto_balance=bool(data.get("auto_balance", data.get("autoBalance", defaults.auto_balance))),
        )
