import threading
import unittest

from roshdino.models import GameMode, Role
from roshdino.services.demo_store import DemoStore
from roshdino.services.notification_service import Events
from roshdino.services.reward_service import BadgePolicy, RewardService
from roshdino.services.submission_service import SubmissionRequest, SubmissionService
from roshdino.utils.errors import NotFoundError, TransientError, ValidationError
from tests.factories import RecordingNotifier, make_quiz, make_user, seeded_store


def request_for(answers, mode=GameMode.PRACTICE, quiz_id="q1", time_spent=90, role=Role.STUDENT):
	return SubmissionRequest(
		quiz_id=quiz_id,
		answers=tuple(answers),
		game_mode=mode,
		role=role,
		time_spent=time_spent,
	)


class SubmissionRequestTests(unittest.TestCase):
	def test_valid_payload(self) -> None:
		req = SubmissionRequest.from_payload(
			{"answers": [1, None, 2], "gameMode": "contest", "role": "manager", "timeSpent": "75"},
			quiz_id="q1",
		)
		self.assertEqual(req.quiz_id, "q1")
		self.assertEqual(req.answers, (1, None, 2))
		self.assertIs(req.game_mode, GameMode.CONTEST)
		self.assertIs(req.role, Role.MANAGER)
		self.assertEqual(req.time_spent, 75.0)

	def test_quiz_id_can_come_from_body(self) -> None:
		req = SubmissionRequest.from_payload(
			{"quizId": "q9", "answers": [], "gameMode": "practice", "role": "client", "timeSpent": 0}
		)
		self.assertEqual(req.quiz_id, "q9")

	def test_rejects_bad_input(self) -> None:
		base = {"answers": [1], "gameMode": "practice", "role": "student", "timeSpent": 10}
		bad = [
			{"gameMode": "ranked"},
			{"role": "intern"},
			{"timeSpent": "soon"},
			{"timeSpent": -1},
			{"timeSpent": True},
			{"answers": "1,2"},
			{"answers": [1, "b"]},
			{"answers": [True]},
			{"answers": [1.5]},
			{"answers": [float("inf")]},
		]
		for override in bad:
			with self.subTest(override=override):
				with self.assertRaises(ValidationError):
					SubmissionRequest.from_payload({**base, **override}, quiz_id="q1")

	def test_requires_quiz_id(self) -> None:
		with self.assertRaises(ValidationError):
			SubmissionRequest.from_payload({"answers": [], "gameMode": "practice", "role": "student", "timeSpent": 1})

	def test_whole_number_floats_become_indices(self) -> None:
		req = SubmissionRequest.from_payload(
			{"answers": [2.0, None, 0.0], "gameMode": "practice", "role": "student", "timeSpent": 1},
			quiz_id="q1",
		)
		self.assertEqual(req.answers, (2, None, 0))
		self.assertTrue(all(type(a) is int for a in req.answers if a is not None))

	def test_rejects_non_object_body(self) -> None:
		with self.assertRaises(ValidationError):
			SubmissionRequest.from_payload(["quizId", "answers", "gameMode", "role", "timeSpent"], quiz_id="q1")


class SubmissionScenarioTests(unittest.TestCase):
	def setUp(self) -> None:
		self.store = seeded_store(
			quizzes=[make_quiz("q1"), make_quiz("q92", points=(46, 46, 8)), make_quiz("off", is_active=False)],
			users=[
				make_user("trainee"),
				make_user("graduate", points=100, progress=100, complete=True),
			],
		)
		self.notifier = RecordingNotifier()
		self.service = SubmissionService(self.store, notifications=self.notifier)

	def test_practice_all_correct(self) -> None:
		outcome = self.service.submit("trainee", request_for([1, 2, 3]))
		self.assertEqual(outcome.result.score, 100)
		self.assertTrue(outcome.result.passed)
		self.assertEqual(outcome.points_earned, 500)
		self.assertEqual(outcome.result.points_earned, 500)
		self.assertEqual(outcome.progress_gained, 50)
		user = self.store.get_user("trainee")
		self.assertEqual(user.training_progress, 50)
		self.assertEqual(user.points, 0)
		self.assertFalse(user.training_complete)
		# Eligible regardless of mode, but practice earns no badge
		self.assertTrue(outcome.result.certificate_eligible)
		self.assertEqual(user.badges, [])
		self.assertEqual(len(user.certificates), 1)

	def test_contest_before_training_is_recorded_but_not_credited(self) -> None:
		outcome = self.service.submit("trainee", request_for([1, 2, 3], mode=GameMode.CONTEST))
		self.assertEqual(outcome.result.points_earned, 1000)
		self.assertEqual(outcome.points_earned, 0)
		self.assertTrue(outcome.points_withheld)
		self.assertEqual(self.store.get_user("trainee").points, 0)
		stored = self.store.list_results(user_id="trainee")
		self.assertEqual([r.points_earned for r in stored], [1000])

	def test_contest_after_training_awards_points_badge_and_certificate(self) -> None:
		outcome = self.service.submit("graduate", request_for([1, 2, 0], mode=GameMode.CONTEST, quiz_id="q92"))
		self.assertEqual(outcome.result.score, 92)
		self.assertTrue(outcome.result.certificate_eligible)
		self.assertEqual(outcome.points_earned, 920)
		self.assertEqual(outcome.badges_awarded, ["Quiz Master"])
		user = self.store.get_user("graduate")
		self.assertEqual(user.points, 1020)
		self.assertEqual([b.name for b in user.badges], ["Quiz Master"])
		self.assertEqual(user.certificates[0].name, "Conflict Resolution - Student")
		self.assertEqual(user.certificates[0].result_id, outcome.result.result_id)

	def test_short_answer_list_is_padded(self) -> None:
		outcome = self.service.submit("trainee", request_for([1]))
		self.assertEqual([a.selected_answer for a in outcome.result.answers], [1, 0, 0])
		self.assertEqual([a.is_correct for a in outcome.result.answers], [True, False, False])
		self.assertEqual(outcome.result.score, 33)
		self.assertFalse(outcome.result.passed)
		self.assertFalse(outcome.result.certificate_eligible)

	def test_answer_log_splits_time_evenly(self) -> None:
		outcome = self.service.submit("trainee", request_for([1, 2, 3], time_spent=100))
		self.assertEqual([a.time_spent for a in outcome.result.answers], [33, 33, 33])
		self.assertEqual(outcome.to_dict()["timeSpentMinutes"], 2)

	def test_practice_completion_unlocks_contest_points(self) -> None:
		self.service.submit("trainee", request_for([1, 2, 3]))
		outcome = self.service.submit("trainee", request_for([1, 2, 3]))
		self.assertTrue(outcome.training_completed)
		self.assertIn(Events.TRAINING_COMPLETED, self.notifier.names())
		contest = self.service.submit("trainee", request_for([1, 2, 3], mode=GameMode.CONTEST))
		self.assertEqual(contest.points_earned, 1000)
		self.assertEqual(self.store.get_user("trainee").points, 1000)

	def test_repeat_badges_under_default_policy(self) -> None:
		for _ in range(2):
			self.service.submit("graduate", request_for([1, 2, 3], mode=GameMode.CONTEST))
		self.assertEqual([b.name for b in self.store.get_user("graduate").badges], ["Quiz Master", "Quiz Master"])

	def test_dedupe_policy_issues_badge_once(self) -> None:
		service = SubmissionService(
			self.store,
			rewards=RewardService(policy=BadgePolicy.DEDUPE),
			notifications=self.notifier,
		)
		first = service.submit("graduate", request_for([1, 2, 3], mode=GameMode.CONTEST))
		second = service.submit("graduate", request_for([1, 2, 3], mode=GameMode.CONTEST))
		self.assertEqual(first.badges_awarded, ["Quiz Master"])
		self.assertEqual(second.badges_awarded, [])
		self.assertEqual(len(self.store.get_user("graduate").badges), 1)

	def test_quiz_statistics_are_updated_incrementally(self) -> None:
		self.service.submit("trainee", request_for([1, 2, 3]))
		self.service.submit("trainee", request_for([1]))
		quiz = self.store.get_quiz("q1")
		self.assertEqual(quiz.attempts, 2)
		self.assertAlmostEqual(quiz.average_score, (100 + 33) / 2)

	def test_inactive_quiz_is_not_found_and_nothing_is_recorded(self) -> None:
		with self.assertRaises(NotFoundError):
			self.service.submit("trainee", request_for([1, 2, 3], quiz_id="off"))
		with self.assertRaises(NotFoundError):
			self.service.submit("trainee", request_for([1, 2, 3], quiz_id="nope"))
		self.assertEqual(self.store.list_results(user_id="trainee"), [])
		self.assertEqual(self.store.get_user("trainee").training_progress, 0)
		self.assertEqual(self.notifier.events, [])

	def test_events_are_published_after_commit(self) -> None:
		self.service.submit("graduate", request_for([1, 2, 3], mode=GameMode.CONTEST))
		self.assertEqual(
			self.notifier.names(),
			[Events.QUIZ_COMPLETED, Events.BADGE_AWARDED, Events.CERTIFICATE_ELIGIBLE],
		)
		_, payload = self.notifier.events[0]
		self.assertEqual(payload["pointsEarned"], 1000)

	def test_result_survives_quiz_deactivation(self) -> None:
		outcome = self.service.submit("trainee", request_for([1, 2, 3]))

		def _off(quiz):
			quiz.is_active = False
			return quiz

		self.store.update_quiz_atomically("q1", _off)
		self.assertEqual(self.store.get_result(outcome.result.result_id).quiz_id, "q1")


class ConflictingStore(DemoStore):
	"""Lets another writer bump the user between read and commit."""

	def __init__(self, conflicts: int, **kwargs):
		super().__init__(**kwargs)
		self.conflicts = conflicts

	def _commit_submission(self, commit, quiz_version, user_version):
		if self.conflicts > 0:
			self.conflicts -= 1
			self.update_user_atomically(commit.user.user_id, _add_progress)
		super()._commit_submission(commit, quiz_version, user_version)


def _add_progress(user):
	user.training_progress += 5
	return user


class ConcurrencyTests(unittest.TestCase):
	def _store(self, conflicts: int, max_attempts: int) -> ConflictingStore:
		store = ConflictingStore(conflicts, max_attempts=max_attempts)
		store.save_quiz(make_quiz("q1"))
		store.save_user(make_user("trainee"))
		return store

	def test_conflict_is_retried_against_fresh_user(self) -> None:
		store = self._store(conflicts=1, max_attempts=3)
		service = SubmissionService(store, notifications=RecordingNotifier())
		with self.assertLogs("roshdino.services.demo_store", level="WARNING"):
			service.submit("trainee", request_for([1, 2, 3]))
		user = store.get_user("trainee")
		# Neither the concurrent +5 nor the +50 is lost
		self.assertEqual(user.training_progress, 55)
		self.assertEqual(len(store.list_results()), 1)
		self.assertEqual(store.get_quiz("q1").attempts, 1)

	def test_exhausted_retries_leave_no_trace(self) -> None:
		store = self._store(conflicts=10, max_attempts=3)
		notifier = RecordingNotifier()
		service = SubmissionService(store, notifications=notifier)
		with self.assertRaises(TransientError):
			service.submit("trainee", request_for([1, 2, 3]))
		self.assertEqual(store.list_results(), [])
		self.assertEqual(store.get_quiz("q1").attempts, 0)
		self.assertEqual(store.get_user("trainee").training_progress, 15)
		self.assertEqual(notifier.events, [])

	def test_parallel_submissions_do_not_lose_progress(self) -> None:
		store = seeded_store(quizzes=[make_quiz("q1")], users=[make_user("trainee")], max_attempts=10)
		service = SubmissionService(store, notifications=RecordingNotifier())
		errors = []

		def worker():
			try:
				service.submit("trainee", request_for([1]))
			except Exception as e:  # surfaced through the assertion below
				errors.append(e)

		threads = [threading.Thread(target=worker) for _ in range(4)]
		for t in threads:
			t.start()
		for t in threads:
			t.join()

		self.assertEqual(errors, [])
		# Each attempt scores 33 -> 165 raw points -> 16.5 progress
		self.assertEqual(store.get_user("trainee").training_progress, 66)
		self.assertEqual(store.get_quiz("q1").attempts, 4)
		self.assertEqual(len(store.list_results(user_id="trainee")), 4)


if __name__ == "__main__":
	unittest.main()
