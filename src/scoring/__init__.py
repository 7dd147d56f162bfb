from src.scoring.leaderboard import LeaderboardRow, build_leaderboard
from src.scoring.scorer import score

__all__ = ["LeaderboardRow", "build_leaderboard", "score"]
