from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from roshdino.services.leaderboard_service import LeaderboardService
from roshdino.services.notification_service import NotificationService
from roshdino.services.quiz_service import QuizService
from roshdino.services.reward_service import BadgePolicy, RewardService
from roshdino.services.store import Store, create_store
from roshdino.services.submission_service import SubmissionService
from roshdino.services.user_service import UserService
from roshdino.utils.helpers import parse_enum


EXTENSION_KEY = "roshdino"


@dataclass
class Services:

	store: Store
	submissions: SubmissionService
	leaderboard: LeaderboardService
	users: UserService
	quizzes: QuizService


def init_services(app: Flask, store: Store | None = None) -> Services:
	config = app.config
	store = store or create_store(config)
	rewards = RewardService(policy=parse_enum(BadgePolicy, config.get("BADGE_POLICY", "append"), "BADGE_POLICY"))
	notifications = NotificationService(
		webhook_url=config.get("NOTIFICATIONS_WEBHOOK_URL", ""),
		timeout=config.get("NOTIFICATIONS_TIMEOUT", 5.0),
	)
	leaderboard = LeaderboardService(store)
	services = Services(
		store=store,
		submissions=SubmissionService(store, rewards=rewards, notifications=notifications),
		leaderboard=leaderboard,
		users=UserService(store, leaderboard, rewards=rewards),
		quizzes=QuizService(store),
	)
	app.extensions[EXTENSION_KEY] = services
	return services


def get_services() -> Services:
	return current_app.extensions[EXTENSION_KEY]
