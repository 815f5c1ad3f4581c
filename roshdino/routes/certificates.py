from flask import Blueprint, jsonify, g
from roshdino.extensions import get_services
from roshdino.utils.decorators import auth_required


bp = Blueprint("certificates", __name__, url_prefix="/api/certificates")


@bp.get("")
@auth_required
def list_certificates():
	certificates = get_services().users.get_rewards(g.user_id)["certificates"]
	return jsonify({"certificates": certificates}), 200


@bp.get("/<result_id>")
@auth_required
def certificate(result_id: str):
	# Rendering the PDF happens downstream; this only returns what it needs
	return jsonify(get_services().users.get_certificate(result_id, g.user)), 200
