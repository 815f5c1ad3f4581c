from flask import Blueprint, current_app, jsonify, g, request
from roshdino.extensions import get_services
from roshdino.models import AccountRole
from roshdino.utils.decorators import auth_required
from roshdino.utils.helpers import parse_enum, parse_limit


bp = Blueprint("leaderboard", __name__, url_prefix="/api/leaderboard")


def _limit() -> int:
	return parse_limit(
		request.args.get("limit"),
		current_app.config["DEFAULT_LEADERBOARD_LIMIT"],
		current_app.config["MAX_LEADERBOARD_LIMIT"],
	)


@bp.get("/global")
def global_board():
	role = request.args.get("role")
	items = get_services().leaderboard.get_leaderboard(
		_limit(),
		role=parse_enum(AccountRole, role, "role") if role else None,
	)
	return jsonify({"leaderboard": items}), 200


@bp.get("/quiz/<quiz_id>")
def quiz_board(quiz_id: str):
	items = get_services().leaderboard.get_quiz_leaderboard(quiz_id, _limit())
	return jsonify({"quizId": quiz_id, "leaderboard": items}), 200


@bp.get("/rank")
@auth_required
def rank():
	return jsonify(get_services().leaderboard.get_user_rank(g.user_id)), 200
