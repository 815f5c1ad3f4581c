from __future__ import annotations

from bisect import bisect_right
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from roshdino.models import AccountRole, GameMode, QuizResult, User
from roshdino.utils.errors import NotFoundError


T = TypeVar("T")


def competition_ranks(items: Sequence[T], key: Callable[[T], tuple]) -> List[int]:
	"""Rank already-sorted ``items`` by strict-greater count.

	``key`` must sort ascending in leaderboard order. Items with equal keys
	share a rank and the next distinct key skips ahead (1, 2, 2, 4).
	"""
	ranks: List[int] = []
	prev = None
	for position, item in enumerate(items, start=1):
		k = key(item)
		if ranks and k == prev:
			ranks.append(ranks[-1])
		else:
			ranks.append(position)
		prev = k
	return ranks


def rank_for_points(points: int, population: Iterable[int]) -> int:
	return 1 + sum(1 for p in population if p > points)


class LeaderboardService:

	def __init__(self, store):
		self.store = store

	def _active_users(self, role: AccountRole | None = None) -> List[User]:
		return self.store.list_users(active_only=True, role=role)

	def get_user_rank(self, user_id: str) -> dict:
		user = self.store.get_user(user_id)
		totals = sorted(u.points for u in self._active_users())
		rank = rank_for_points(user.points, totals)
		# Smallest active total strictly above this user's points
		idx = bisect_right(totals, user.points)
		points_to_next = totals[idx] - user.points if idx < len(totals) else 0
		return {
			"userId": user.user_id,
			"rank": rank,
			"points": user.points,
			"totalUsers": len(totals),
			"pointsToNextRank": points_to_next,
		}

	def get_leaderboard(self, limit: int, role: Optional[AccountRole] = None) -> List[dict]:
		users = sorted(self._active_users(role), key=lambda u: (-u.points, u.username, u.user_id))
		ranks = competition_ranks(users, key=lambda u: (-u.points,))
		items = []
		for rank, user in zip(ranks[:limit], users[:limit]):
			items.append({
				"rank": rank,
				"userId": user.user_id,
				"username": user.username,
				"firstName": user.first_name,
				"lastName": user.last_name,
				"points": user.points,
				"trainingProgress": user.training_progress,
			})
		return items

	def get_quiz_leaderboard(self, quiz_id: str, limit: int) -> List[dict]:
		self.store.get_quiz(quiz_id, include_inactive=True)
		results: List[QuizResult] = self.store.list_results(quiz_id=quiz_id, game_mode=GameMode.CONTEST)
		users = {}
		for result in results:
			if result.user_id not in users:
				try:
					users[result.user_id] = self.store.get_user(result.user_id)
				except NotFoundError:
					users[result.user_id] = None
		results = [r for r in results if users[r.user_id] is not None and users[r.user_id].is_active]
		results.sort(key=lambda r: (-r.score, r.time_spent, r.completed_at))
		ranks = competition_ranks(results, key=lambda r: (-r.score, r.time_spent))
		items = []
		for rank, result in zip(ranks[:limit], results[:limit]):
			items.append({
				"rank": rank,
				"userId": result.user_id,
				"username": users[result.user_id].username,
				"score": result.score,
				"timeSpent": result.time_spent,
				"completedAt": result.completed_at,
			})
		return items
