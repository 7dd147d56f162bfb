"""Roster of entities the question catalog refers to."""

from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class Roster:
    """Drivers and teams taking part in the season."""

    drivers: Tuple[str, ...] = ()
    teams: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict) -> "Roster":
        return cls(
            drivers=tuple(str(d) for d in data.get("drivers") or []),
            teams=tuple(str(t) for t in data.get("teams") or []),
        )

    def to_dict(self) -> Dict[str, List[str]]:
        return {"drivers": list(self.drivers), "teams": list(self.teams)}

    def entities_for(self, source: str, races: List[str]) -> List[str]:
        """Values named by an ``options_source`` key."""
        if source == "drivers":
            return list(self.drivers)
        if source == "teams":
            return list(self.teams)
        if source == "races":
            return list(races or [])
        return []
