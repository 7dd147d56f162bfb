from pathlib import Path

# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Data files
DATA_DIR = PROJECT_ROOT / "data"
QUESTIONS_FILE = "questions.json"
ROSTER_FILE = "roster.json"
RACES_FILE = "races.json"

# Labels used as keys in ranking "points" objects
POSITION_LABELS = ["1st", "2nd", "3rd", "4th", "5th"]

DEFAULT_RANKING_COUNT = 3
DEFAULT_LIMITED_SELECT_COUNT = 3

VALID_OPTIONS_SOURCES = {"drivers", "teams", "races"}

# Grid value used when a win comes from the pit lane
PITLANE_GRID_POSITION = 23
PITLANE_LABELS = {"pitlane", "pit lane"}

TIE = "tie"
YES = "yes"
NO = "no"
