from flask import Blueprint, jsonify, g, request
from roshdino.extensions import get_services
from roshdino.models import Category, Difficulty, GameMode, Role
from roshdino.services.submission_service import SubmissionRequest
from roshdino.utils.decorators import auth_required, manager_required
from roshdino.utils.helpers import get_json, parse_enum, parse_limit


bp = Blueprint("quiz", __name__, url_prefix="/api/quizzes")


def _optional_enum(enum_cls, name: str):
	value = request.args.get(name)
	return parse_enum(enum_cls, value, name) if value else None


@bp.get("/role/<role>")
def by_role(role: str):
	quizzes = get_services().quizzes.list_for_role(
		parse_enum(Role, role, "role"),
		difficulty=_optional_enum(Difficulty, "difficulty"),
		category=_optional_enum(Category, "category"),
		limit=parse_limit(request.args.get("limit"), 10, 100),
	)
	return jsonify({"quizzes": quizzes}), 200


@bp.get("/history")
@auth_required
def history():
	items = get_services().quizzes.history(
		g.user_id,
		game_mode=_optional_enum(GameMode, "gameMode"),
		role=_optional_enum(Role, "role"),
		limit=parse_limit(request.args.get("limit"), 20, 100),
	)
	return jsonify({"history": items}), 200


@bp.post("/submit")
@auth_required
def submit_quiz():
	body = get_json(["quizId", "answers", "gameMode", "role", "timeSpent"])
	outcome = get_services().submissions.submit(g.user_id, SubmissionRequest.from_payload(body))
	return jsonify(outcome.to_dict()), 200


@bp.post("/<quiz_id>/submit")
@auth_required
def submit_quiz_by_id(quiz_id: str):
	body = get_json(["answers", "gameMode", "role", "timeSpent"])
	outcome = get_services().submissions.submit(g.user_id, SubmissionRequest.from_payload(body, quiz_id))
	return jsonify(outcome.to_dict()), 200


@bp.post("")
@manager_required
def create_quiz():
	body = get_json(["title", "role", "difficulty", "questions", "category"])
	quiz = get_services().quizzes.create(body, g.user_id)
	return jsonify({"quiz": quiz}), 201


@bp.put("/<quiz_id>")
@manager_required
def update_quiz(quiz_id: str):
	quiz = get_services().quizzes.update(quiz_id, get_json())
	return jsonify({"quiz": quiz}), 200


@bp.get("/<quiz_id>")
def get_quiz(quiz_id: str):
	data = get_services().quizzes.get_quiz_for_client(quiz_id)
	return jsonify({"quiz": data}), 200


@bp.delete("/<quiz_id>")
@manager_required
def deactivate_quiz(quiz_id: str):
	return jsonify(get_services().quizzes.deactivate(quiz_id)), 200
