from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from roshdino.utils.errors import ValidationError
from roshdino.utils.helpers import parse_enum, utc_now


class Role(str, Enum):
	"""Training role a quiz is written for."""

	STUDENT = "student"
	MANAGER = "manager"
	CLIENT = "client"


class GameMode(str, Enum):

	PRACTICE = "practice"
	CONTEST = "contest"


class Difficulty(str, Enum):

	BEGINNER = "beginner"
	INTERMEDIATE = "intermediate"
	ADVANCED = "advanced"


class Category(str, Enum):

	COMMUNICATION = "communication"
	LEADERSHIP = "leadership"
	TEAMWORK = "teamwork"
	PROBLEM_SOLVING = "problem-solving"
	TIME_MANAGEMENT = "time-management"
	GENERAL = "general"


class AccountRole(str, Enum):
	"""Platform permission level of a user account."""

	USER = "user"
	MANAGER = "manager"
	ADMIN = "admin"


DEFAULT_QUESTION_POINTS = 10


def _is_int(value) -> bool:
	return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class Question:

	question: str
	options: List[str]
	correct_answer: int
	points: int = DEFAULT_QUESTION_POINTS
	explanation: str = ""

	def validate(self, position: int = 0) -> None:
		label = f"Question {position + 1}"
		if not isinstance(self.question, str) or not self.question.strip():
			raise ValidationError(f"{label} is invalid")
		if len(self.options) < 2 or not all(isinstance(o, str) for o in self.options):
			raise ValidationError(f"{label} is invalid")
		if not isinstance(self.explanation, str):
			raise ValidationError(f"{label} has an invalid explanation")
		if isinstance(self.correct_answer, bool) or not isinstance(self.correct_answer, int):
			raise ValidationError(f"{label} has invalid correct answer")
		if self.correct_answer < 0 or self.correct_answer >= len(self.options):
			raise ValidationError(f"{label} has invalid correct answer")
		if isinstance(self.points, bool) or not isinstance(self.points, int) or self.points <= 0:
			raise ValidationError(f"{label} must be worth a positive number of points")

	def to_dict(self) -> dict:
		return {
			"question": self.question,
			"options": list(self.options),
			"correctAnswer": self.correct_answer,
			"points": self.points,
			"explanation": self.explanation,
		}

	@classmethod
	def from_dict(cls, data: dict) -> "Question":
		return cls(
			question=data.get("question", ""),
			options=list(data.get("options") or []),
			correct_answer=data.get("correctAnswer", -1),
			points=data.get("points", DEFAULT_QUESTION_POINTS),
			explanation=data.get("explanation", "") or "",
		)


@dataclass
class Quiz:

	quiz_id: str
	title: str
	role: Role
	questions: List[Question] = field(default_factory=list)
	description: str = ""
	difficulty: Difficulty = Difficulty.INTERMEDIATE
	category: Category = Category.GENERAL
	passing_score: int = 70
	time_limit: int = 30
	tags: List[str] = field(default_factory=list)
	is_active: bool = True
	created_by: Optional[str] = None
	created_at: Optional[datetime] = None
	attempts: int = 0
	average_score: float = 0.0
	version: int = 0

	@property
	def total_points(self) -> int:
		return sum(q.points for q in self.questions)

	@property
	def question_count(self) -> int:
		return len(self.questions)

	def validate(self) -> None:
		if not isinstance(self.title, str) or not self.title.strip():
			raise ValidationError("Title is required")
		if not isinstance(self.description, str):
			raise ValidationError("description must be text")
		if not _is_int(self.passing_score) or not 0 <= self.passing_score <= 100:
			raise ValidationError("passingScore must be between 0 and 100")
		if not _is_int(self.time_limit) or self.time_limit <= 0:
			raise ValidationError("timeLimit must be a positive number of minutes")
		if not all(isinstance(t, str) for t in self.tags):
			raise ValidationError("tags must be a list of strings")
		if not isinstance(self.is_active, bool):
			raise ValidationError("isActive must be true or false")
		if not self.questions:
			raise ValidationError("At least one question is required")
		for i, q in enumerate(self.questions):
			q.validate(i)

	def to_dict(self) -> dict:
		return {
			"quizId": self.quiz_id,
			"title": self.title,
			"description": self.description,
			"role": self.role.value,
			"difficulty": self.difficulty.value,
			"category": self.category.value,
			"questions": [q.to_dict() for q in self.questions],
			"passingScore": self.passing_score,
			"timeLimit": self.time_limit,
			"tags": list(self.tags),
			"isActive": self.is_active,
			"createdBy": self.created_by,
			"createdAt": self.created_at,
			"attempts": self.attempts,
			"averageScore": self.average_score,
			"version": self.version,
		}

	def to_client_dict(self) -> dict:
		# Correct answers never leave the server
		data = self.to_dict()
		for key in ("attempts", "averageScore", "version", "createdBy", "createdAt", "isActive"):
			data.pop(key)
		data["questions"] = [
			{"question": q.question, "options": list(q.options), "points": q.points}
			for q in self.questions
		]
		data["questionCount"] = self.question_count
		data["totalPoints"] = self.total_points
		return data

	@classmethod
	def from_dict(cls, data: dict) -> "Quiz":
		return cls(
			quiz_id=data.get("quizId", ""),
			title=data.get("title", ""),
			role=parse_enum(Role, data.get("role"), "role"),
			questions=[Question.from_dict(q) for q in data.get("questions") or []],
			description=data.get("description", "") or "",
			difficulty=parse_enum(Difficulty, data.get("difficulty", "intermediate"), "difficulty"),
			category=parse_enum(Category, data.get("category", "general"), "category"),
			passing_score=data.get("passingScore", 70),
			time_limit=data.get("timeLimit", 30),
			tags=list(data.get("tags") or []),
			is_active=data.get("isActive", True),
			created_by=data.get("createdBy"),
			created_at=data.get("createdAt"),
			attempts=data.get("attempts", 0),
			average_score=data.get("averageScore", 0.0),
			version=data.get("version", 0),
		)


@dataclass(frozen=True)
class AnswerRecord:

	question_index: int
	selected_answer: int
	is_correct: bool
	time_spent: int

	def to_dict(self) -> dict:
		return {
			"questionIndex": self.question_index,
			"selectedAnswer": self.selected_answer,
			"isCorrect": self.is_correct,
			"timeSpent": self.time_spent,
		}

	@classmethod
	def from_dict(cls, data: dict) -> "AnswerRecord":
		return cls(
			question_index=data.get("questionIndex", 0),
			selected_answer=data.get("selectedAnswer", 0),
			is_correct=bool(data.get("isCorrect", False)),
			time_spent=data.get("timeSpent", 0),
		)


@dataclass(frozen=True)
class QuizResult:
	"""One attempt. Written once, never updated."""

	result_id: str
	user_id: str
	quiz_id: str
	score: int
	points_earned: int
	answers: tuple
	game_mode: GameMode
	role: Role
	time_spent: float
	passed: bool
	certificate_eligible: bool
	completed_at: datetime

	def to_dict(self) -> dict:
		return {
			"resultId": self.result_id,
			"userId": self.user_id,
			"quizId": self.quiz_id,
			"score": self.score,
			"pointsEarned": self.points_earned,
			"answers": [a.to_dict() for a in self.answers],
			"gameMode": self.game_mode.value,
			"role": self.role.value,
			"timeSpent": self.time_spent,
			"passed": self.passed,
			"certificateEligible": self.certificate_eligible,
			"completedAt": self.completed_at,
		}

	@classmethod
	def from_dict(cls, data: dict) -> "QuizResult":
		return cls(
			result_id=data.get("resultId", ""),
			user_id=data.get("userId", ""),
			quiz_id=data.get("quizId", ""),
			score=data.get("score", 0),
			points_earned=data.get("pointsEarned", 0),
			answers=tuple(AnswerRecord.from_dict(a) for a in data.get("answers") or []),
			game_mode=GameMode(data.get("gameMode", "practice")),
			role=Role(data.get("role")),
			time_spent=data.get("timeSpent", 0),
			passed=bool(data.get("passed", False)),
			certificate_eligible=bool(data.get("certificateEligible", False)),
			completed_at=data.get("completedAt") or utc_now(),
		)


@dataclass(frozen=True)
class Badge:

	name: str
	description: str
	earned_at: datetime
	result_id: Optional[str] = None

	def to_dict(self) -> dict:
		return {
			"name": self.name,
			"description": self.description,
			"earnedAt": self.earned_at,
			"resultId": self.result_id,
		}

	@classmethod
	def from_dict(cls, data: dict) -> "Badge":
		return cls(
			name=data.get("name", ""),
			description=data.get("description", ""),
			earned_at=data.get("earnedAt") or utc_now(),
			result_id=data.get("resultId"),
		)


@dataclass(frozen=True)
class Certificate:

	name: str
	score: int
	issued_at: datetime
	result_id: Optional[str] = None
	certificate_url: Optional[str] = None

	def to_dict(self) -> dict:
		return {
			"name": self.name,
			"score": self.score,
			"issuedAt": self.issued_at,
			"resultId": self.result_id,
			"certificateUrl": self.certificate_url,
		}

	@classmethod
	def from_dict(cls, data: dict) -> "Certificate":
		return cls(
			name=data.get("name", ""),
			score=data.get("score", 0),
			issued_at=data.get("issuedAt") or utc_now(),
			result_id=data.get("resultId"),
			certificate_url=data.get("certificateUrl"),
		)


@dataclass
class User:

	user_id: str
	username: str = ""
	first_name: str = ""
	last_name: str = ""
	role: AccountRole = AccountRole.USER
	is_active: bool = True
	points: int = 0
	training_progress: float = 0
	training_complete: bool = False
	badges: List[Badge] = field(default_factory=list)
	certificates: List[Certificate] = field(default_factory=list)
	version: int = 0

	@property
	def full_name(self) -> str:
		return f"{self.first_name} {self.last_name}".strip()

	def to_dict(self) -> dict:
		return {
			"userId": self.user_id,
			"username": self.username,
			"firstName": self.first_name,
			"lastName": self.last_name,
			"role": self.role.value,
			"isActive": self.is_active,
			"points": self.points,
			"trainingProgress": self.training_progress,
			"trainingComplete": self.training_complete,
			"badges": [b.to_dict() for b in self.badges],
			"certificates": [c.to_dict() for c in self.certificates],
			"version": self.version,
		}

	@classmethod
	def from_dict(cls, data: dict) -> "User":
		return cls(
			user_id=data.get("userId", ""),
			username=data.get("username", ""),
			first_name=data.get("firstName", ""),
			last_name=data.get("lastName", ""),
			role=AccountRole(data.get("role", "user")),
			is_active=data.get("isActive", True),
			points=data.get("points", 0),
			training_progress=data.get("trainingProgress", 0),
			training_complete=bool(data.get("trainingComplete", False)),
			badges=[Badge.from_dict(b) for b in data.get("badges") or []],
			certificates=[Certificate.from_dict(c) for c in data.get("certificates") or []],
			version=data.get("version", 0),
		)
