import threading
import time
import unittest

import requests

from roshdino.models import GameMode, Role
from roshdino.services.notification_service import Events, NotificationService
from roshdino.services.submission_service import SubmissionRequest, SubmissionService
from tests.factories import make_quiz, make_user, seeded_store


HOOK = "https://hooks.test/roshdino"


class FakeResponse:

	def __init__(self, status_code: int = 200):
		self.status_code = status_code

	def raise_for_status(self):
		if self.status_code >= 400:
			raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:

	def __init__(self, response=None, error=None):
		self.response = response or FakeResponse()
		self.error = error
		self.calls = []

	def post(self, url, json=None, timeout=None):
		self.calls.append((url, json, timeout))
		if self.error:
			raise self.error
		return self.response


class GatedSession(FakeSession):
	"""Holds every POST until the test opens the gate."""

	def __init__(self):
		super().__init__()
		self.gate = threading.Event()

	def post(self, url, json=None, timeout=None):
		self.gate.wait(5)
		return super().post(url, json=json, timeout=timeout)


class NotificationServiceTests(unittest.TestCase):
	def test_without_webhook_nothing_is_sent(self) -> None:
		session = FakeSession()
		service = NotificationService(session=session)
		self.assertIsNone(service.publish(Events.QUIZ_COMPLETED, {"score": 90}))
		service.shutdown()
		self.assertEqual(session.calls, [])

	def test_event_envelope(self) -> None:
		session = FakeSession()
		service = NotificationService(HOOK, timeout=2.5, session=session)
		future = service.publish(Events.BADGE_AWARDED, {"badge": "Quiz Master"})
		self.assertTrue(future.result(timeout=5))
		service.shutdown()
		url, body, timeout = session.calls[0]
		self.assertEqual(url, HOOK)
		self.assertEqual(timeout, 2.5)
		self.assertEqual(body["event"], "badge.awarded")
		self.assertEqual(body["payload"], {"badge": "Quiz Master"})
		self.assertIn("emittedAt", body)

	def test_events_are_delivered_in_publish_order(self) -> None:
		session = FakeSession()
		service = NotificationService(HOOK, session=session)
		for name in (Events.QUIZ_COMPLETED, Events.BADGE_AWARDED, Events.CERTIFICATE_ELIGIBLE):
			service.publish(name, {})
		service.shutdown(wait=True)
		self.assertEqual(
			[body["event"] for _, body, _ in session.calls],
			[Events.QUIZ_COMPLETED, Events.BADGE_AWARDED, Events.CERTIFICATE_ELIGIBLE],
		)

	def test_delivery_failures_are_logged_not_raised(self) -> None:
		for session in (FakeSession(error=requests.ConnectionError("down")), FakeSession(FakeResponse(502))):
			service = NotificationService(HOOK, session=session)
			with self.assertLogs("roshdino.services.notification_service", level="WARNING"):
				self.assertFalse(service.publish(Events.QUIZ_COMPLETED, {}).result(timeout=5))
			service.shutdown()

	def test_publish_does_not_wait_for_the_webhook(self) -> None:
		session = GatedSession()
		service = NotificationService(HOOK, session=session)
		started = time.monotonic()
		future = service.publish(Events.QUIZ_COMPLETED, {})
		self.assertLess(time.monotonic() - started, 1)
		self.assertFalse(future.done())
		session.gate.set()
		self.assertTrue(future.result(timeout=5))
		service.shutdown()


class SubmissionWithSlowWebhookTests(unittest.TestCase):
	def test_submit_returns_before_events_are_delivered(self) -> None:
		store = seeded_store(
			quizzes=[make_quiz("q1")],
			users=[make_user("graduate", progress=100, complete=True)],
		)
		session = GatedSession()
		notifications = NotificationService(HOOK, session=session)
		service = SubmissionService(store, notifications=notifications)
		request = SubmissionRequest(
			quiz_id="q1",
			answers=(1, 2, 3),
			game_mode=GameMode.CONTEST,
			role=Role.STUDENT,
			time_spent=60,
		)

		started = time.monotonic()
		outcome = service.submit("graduate", request)
		elapsed = time.monotonic() - started

		self.assertLess(elapsed, 1)
		self.assertEqual(outcome.points_earned, 1000)
		# Committed while every webhook call is still held
		self.assertEqual(session.calls, [])
		self.assertEqual(store.get_user("graduate").points, 1000)

		session.gate.set()
		notifications.shutdown(wait=True)
		self.assertEqual(len(session.calls), 3)


if __name__ == "__main__":
	unittest.main()
