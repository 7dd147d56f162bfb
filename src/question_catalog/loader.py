"""Load the question catalog, roster and race calendar from JSON files."""

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from src.question_catalog.config import (
    DATA_DIR,
    QUESTIONS_FILE,
    RACES_FILE,
    ROSTER_FILE,
)
from src.question_catalog.questions import CatalogError, Question, load_catalog
from src.question_catalog.roster import Roster

logger = logging.getLogger(__name__)


def _read_json(path: Path):
    if not path.exists():
        raise FileNotFoundError(f"Expected data file not found: {path}")

    # utf-8-sig tolerates a byte-order mark left by spreadsheet exports
    with open(path, "r", encoding="utf-8-sig") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise CatalogError(f"Malformed JSON in {path}: {e}") from e


def load_questions(path: Path) -> List[Question]:
    """Load and validate the question catalog file."""
    return load_catalog(_read_json(path))


def load_roster(path: Path) -> Roster:
    data = _read_json(path)
    if not isinstance(data, dict):
        raise CatalogError(f"Roster file {path} must contain an object.")
    roster = Roster.from_dict(data)
    logger.info(
        "Loaded roster: %d drivers, %d teams", len(roster.drivers), len(roster.teams)
    )
    return roster


def load_races(path: Path) -> List[str]:
    data = _read_json(path)
    races = data.get("races") if isinstance(data, dict) else data
    if not isinstance(races, list):
        raise CatalogError(f"Race file {path} must contain a list of races.")
    return [str(r) for r in races]


def load_season_inputs(
    data_dir: Optional[Path] = None,
) -> Tuple[List[Question], Roster, List[str]]:
    """Load questions, roster and races from one data directory.

    Args:
        data_dir: Directory holding ``questions.json``, ``roster.json``
            and ``races.json``. Defaults to ``data/``.

    Returns:
        ``(questions, roster, races)`` tuple.
    """
    data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
    questions = load_questions(data_dir / QUESTIONS_FILE)
    roster = load_roster(data_dir / ROSTER_FILE)
    races = load_races(data_dir / RACES_FILE)
    return questions, roster, races
