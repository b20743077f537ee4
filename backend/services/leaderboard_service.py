"""
Leaderboard reads and score submission.
"""

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional

from data_access.repositories import LeaderboardRepository
from domain.constants import VALID_MODES
from .auth_service import AuthService
from .webhook_service import send_score_submitted_webhook

logger = logging.getLogger(__name__)


def _check_mode(mode: Optional[str]) -> None:
    if mode is not None and mode not in VALID_MODES:
        raise ValueError(f"Unknown game mode '{mode}'")


class LeaderboardService:
    """
    Leaderboard rules on top of the repository.

    Scores arriving here are final scores (mode multiplier already applied).
    Notifications run on a background executor so a slow webhook never
    delays the submitting request or game session.
    """

    def __init__(
        self,
        leaderboard_repo: LeaderboardRepository,
        auth_service: AuthService,
        notify: Optional[Callable[[Dict[str, Any], int], bool]] = send_score_submitted_webhook,
        executor: Optional[Executor] = None
    ):
        self.leaderboard_repo = leaderboard_repo
        self.auth_service = auth_service
        self.notify = notify
        self.executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="score-notify")

    def get_leaderboard(
        self,
        mode: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        _check_mode(mode)
        if limit is not None and limit < 0:
            raise ValueError("limit must not be negative")
        return self.leaderboard_repo.get_entries(mode=mode, limit=limit)

    def submit_score(self, token: Optional[str], score: int, mode: str) -> Dict[str, Any]:
        """
        Store a score for the logged-in user.

        Raises:
            AuthError: If no user is logged in with this token.
            ValueError: If the score or mode is invalid.
        """
        user = self.auth_service.require_user(token, "Must be logged in to submit score")

        _check_mode(mode)
        if mode is None:
            raise ValueError("mode is required")
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            raise ValueError("score must be a non-negative integer")

        entry = self.leaderboard_repo.add_entry(user["username"], score, mode)
        logger.info(f"Score submitted: {entry['username']} {entry['score']} ({entry['mode']})")

        if self.notify is not None:
            self.executor.submit(self._deliver, dict(entry), self.rank_of(entry))

        return entry

    def rank_of(self, entry: Dict[str, Any]) -> int:
        """1-based position of an entry within its mode's leaderboard."""
        entries = self.leaderboard_repo.get_entries(mode=entry["mode"])
        for position, candidate in enumerate(entries, start=1):
            if candidate["id"] == entry["id"]:
                return position
        return len(entries)

    def shutdown(self, wait: bool = True) -> None:
        """Stop the notification executor, by default after pending deliveries finish."""
        self.executor.shutdown(wait=wait)

    def _deliver(self, entry: Dict[str, Any], rank: int) -> None:
        try:
            self.notify(entry, rank)
        except Exception:
            logger.exception(f"Score notification failed for entry {entry['id']}")
