from flask import Blueprint, jsonify, g
from roshdino.extensions import get_services
from roshdino.utils.decorators import auth_required, manager_required
from roshdino.utils.helpers import get_json


bp = Blueprint("user", __name__, url_prefix="/api/users")


@bp.get("/me")
@auth_required
def me():
	return jsonify(get_services().users.get_profile(g.user_id)), 200


@bp.get("/me/rewards")
@auth_required
def rewards():
	return jsonify(get_services().users.get_rewards(g.user_id)), 200


@bp.get("/me/stats")
@auth_required
def stats():
	return jsonify(get_services().users.get_stats(g.user_id)), 200


@bp.put("/<user_id>/deactivate")
@manager_required
def deactivate(user_id: str):
	return jsonify(get_services().users.set_active(user_id, False)), 200


@bp.put("/<user_id>/reactivate")
@manager_required
def reactivate(user_id: str):
	return jsonify(get_services().users.set_active(user_id, True)), 200


@bp.put("/<user_id>/points")
@manager_required
def adjust_points(user_id: str):
	body = get_json(["points"])
	return jsonify(get_services().users.adjust_points(user_id, body["points"])), 200
