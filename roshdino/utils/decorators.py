from functools import wraps

from flask import current_app, request, g
from roshdino.extensions import get_services
from roshdino.models import AccountRole
from roshdino.utils.errors import AuthError, ForbiddenError, NotFoundError

try:
	from firebase_admin import auth as fb_auth
except Exception:  # firebase not initialized yet in tests
	fb_auth = None


def _resolve_identity() -> tuple[str, dict | None]:
	"""Returns the caller's uid and, for Firebase tokens, the verified claims."""
	header = request.headers.get("Authorization", "")
	if not header.startswith("Bearer "):
		# Allow demo token format
		if current_app.config.get("DEMO_MODE") and header.startswith("Demo "):
			uid = header.split(" ", 1)[1].strip()
			if uid:
				return uid, None
		raise AuthError("Missing or invalid Authorization header")
	token = header.split(" ", 1)[1].strip()
	try:
		if fb_auth is None:
			raise AuthError("Auth not available")
		decoded = fb_auth.verify_id_token(token)
		uid = decoded.get("uid")
		if not uid:
			raise AuthError("Invalid token")
		return uid, decoded
	except AuthError:
		raise
	except Exception:
		raise AuthError("Unauthorized")


def auth_required(fn):
	@wraps(fn)
	def wrapper(*args, **kwargs):
		uid, claims = _resolve_identity()
		services = get_services()
		try:
			user = services.store.get_user(uid)
		except NotFoundError:
			# Demo identities are never provisioned
			if claims is None:
				raise AuthError("Invalid or inactive user")
			user = services.users.provision(uid, claims)
		if not user.is_active:
			raise AuthError("Invalid or inactive user")
		g.user_id = uid
		g.user = user
		return fn(*args, **kwargs)

	return wrapper


def manager_required(fn):
	@wraps(fn)
	@auth_required
	def wrapper(*args, **kwargs):
		if g.user.role not in (AccountRole.MANAGER, AccountRole.ADMIN):
			raise ForbiddenError("Insufficient permissions")
		return fn(*args, **kwargs)

	return wrapper
