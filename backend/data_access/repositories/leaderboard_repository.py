"""
Leaderboard repository for submitted scores.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .base import BaseRepository


class LeaderboardRepository(BaseRepository):
    """
    Repository for leaderboard entries.
    """

    def get_entries(
        self,
        mode: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Get leaderboard entries sorted by score, best first.

        Args:
            mode: If given, only entries for this game mode
            limit: Maximum number of entries to return

        Returns:
            List of entry dictionaries
        """
        with self.read() as store:
            entries = [dict(entry) for entry in store.leaderboard]

        if mode:
            entries = [entry for entry in entries if entry["mode"] == mode]

        # Stable sort: equal scores keep submission order
        entries.sort(key=lambda entry: entry["score"], reverse=True)

        if limit is not None:
            entries = entries[:limit]

        return entries

    def add_entry(self, username: str, score: int, mode: str) -> Dict[str, Any]:
        with self.transaction() as store:
            entry = {
                "id": str(len(store.leaderboard) + 1),
                "username": username,
                "score": score,
                "mode": mode,
                "date": datetime.now(timezone.utc),
            }
            store.leaderboard.append(entry)
            return dict(entry)

    def get_top_score(self, username: str, mode: Optional[str] = None) -> int:
        """Best score for a user, 0 if they have no entries."""
        scores = [
            entry["score"]
            for entry in self.get_entries(mode=mode)
            if entry["username"] == username
        ]
        return max(scores) if scores else 0
