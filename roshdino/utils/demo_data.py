from __future__ import annotations

from datetime import datetime, timezone, timedelta


def _dt(hours_ago: int = 0):
	return datetime.now(timezone.utc) - timedelta(hours=hours_ago)


DEMO_USERS = [
	{
		"userId": "uid-manager",
		"username": "TrainingLead",
		"firstName": "Maya",
		"lastName": "Haddad",
		"role": "manager",
		"isActive": True,
		"points": 0,
		"trainingProgress": 100,
		"trainingComplete": True,
		"badges": [],
		"certificates": [],
	},
	{
		"userId": "uid-demo",
		"username": "QuizMaster",
		"firstName": "Demo",
		"lastName": "Learner",
		"role": "user",
		"isActive": True,
		"points": 2850,
		"trainingProgress": 100,
		"trainingComplete": True,
		"badges": [
			{"name": "Quiz Master", "description": "Achieved 90% or higher in a contest quiz", "earnedAt": _dt(30)},
		],
		"certificates": [
			{"name": "Active Listening - Student", "score": 92, "issuedAt": _dt(30), "certificateUrl": None},
		],
	},
	{
		"userId": "uid-alice",
		"username": "AliceLeads",
		"firstName": "Alice",
		"lastName": "Moreau",
		"role": "user",
		"isActive": True,
		"points": 3200,
		"trainingProgress": 100,
		"trainingComplete": True,
		"badges": [],
		"certificates": [],
	},
	{
		"userId": "uid-bob",
		"username": "BobTheBuilder",
		"firstName": "Bob",
		"lastName": "Okafor",
		"role": "user",
		"isActive": True,
		"points": 2850,
		"trainingProgress": 100,
		"trainingComplete": True,
		"badges": [],
		"certificates": [],
	},
	{
		"userId": "uid-evan",
		"username": "SpeedLearner",
		"firstName": "Evan",
		"lastName": "Lindqvist",
		"role": "user",
		"isActive": True,
		"points": 0,
		"trainingProgress": 45,
		"trainingComplete": False,
		"badges": [],
		"certificates": [],
	},
	{
		"userId": "uid-former",
		"username": "FormerStaff",
		"firstName": "Noor",
		"lastName": "Salem",
		"role": "user",
		"isActive": False,
		"points": 9000,
		"trainingProgress": 100,
		"trainingComplete": True,
		"badges": [],
		"certificates": [],
	},
]


DEMO_QUIZZES = [
	{
		"quizId": "quiz-listening",
		"title": "Active Listening",
		"description": "Core listening habits for student mentors.",
		"role": "student",
		"difficulty": "beginner",
		"category": "communication",
		"passingScore": 70,
		"timeLimit": 15,
		"tags": ["listening", "feedback"],
		"createdBy": "uid-manager",
		"createdAt": _dt(2000),
		"questions": [
			{
				"question": "What is the first step of active listening?",
				"options": ["Interrupt to clarify", "Give full attention", "Plan your reply", "Take notes"],
				"correctAnswer": 1,
				"explanation": "Attention comes before everything else.",
			},
			{
				"question": "Paraphrasing mainly shows that you...",
				"options": ["Agree", "Understood", "Disagree", "Are bored"],
				"correctAnswer": 1,
			},
			{
				"question": "Which body language signals openness?",
				"options": ["Crossed arms", "Looking at phone", "Relaxed posture", "Turning away"],
				"correctAnswer": 2,
			},
		],
	},
	{
		"quizId": "quiz-delegation",
		"title": "Delegating Work",
		"description": "Delegation fundamentals for new managers.",
		"role": "manager",
		"difficulty": "intermediate",
		"category": "leadership",
		"passingScore": 75,
		"timeLimit": 20,
		"tags": ["delegation"],
		"createdBy": "uid-manager",
		"createdAt": _dt(1500),
		"questions": [
			{
				"question": "Which task is best kept rather than delegated?",
				"options": ["Routine reports", "Performance reviews", "Data entry", "Meeting notes"],
				"correctAnswer": 1,
				"points": 20,
			},
			{
				"question": "A clear delegation brief includes...",
				"options": ["Only the deadline", "Outcome, scope and deadline", "Nothing in writing", "A script"],
				"correctAnswer": 1,
				"points": 10,
			},
		],
	},
	{
		"quizId": "quiz-retired",
		"title": "Legacy Onboarding",
		"description": "Replaced by the new onboarding track.",
		"role": "client",
		"difficulty": "beginner",
		"category": "general",
		"isActive": False,
		"createdBy": "uid-manager",
		"createdAt": _dt(4000),
		"questions": [
			{"question": "Where is the handbook?", "options": ["Intranet", "Email"], "correctAnswer": 0},
		],
	},
]
