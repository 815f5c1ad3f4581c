import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException


logger = logging.getLogger(__name__)


class APIError(Exception):

	status_code = 400

	def __init__(self, message: str, status_code: int | None = None):
		super().__init__(message)
		if status_code is not None:
			self.status_code = status_code
		self.message = message

	def to_response(self):
		return jsonify({"error": self.message}), self.status_code


class ValidationError(APIError):

	status_code = 400


class AuthError(APIError):

	status_code = 401


class ForbiddenError(APIError):

	status_code = 403


class NotFoundError(APIError):

	status_code = 404


class TransientError(APIError):
	"""Raised when a write keeps losing races; the client may simply retry."""

	status_code = 503
	retry_after = 1

	def to_response(self):
		body, status = super().to_response()
		body.headers["Retry-After"] = str(self.retry_after)
		return body, status


class ConcurrencyConflict(Exception):
	"""A versioned aggregate changed between read and commit.

	Never reaches a caller: the store retries the unit of work and converts
	exhaustion into TransientError.
	"""

	def __init__(self, key: str, expected: int, actual: int):
		super().__init__(f"{key}: expected version {expected}, found {actual}")
		self.key = key
		self.expected = expected
		self.actual = actual


def register_error_handlers(app):

	@app.errorhandler(APIError)
	def handle_api_error(err: APIError):
		if err.status_code >= 500:
			logger.warning("%s: %s", type(err).__name__, err.message)
		return err.to_response()

	@app.errorhandler(HTTPException)
	def handle_http_error(err: HTTPException):
		messages = {404: "Not found", 405: "Method not allowed"}
		return jsonify({"error": messages.get(err.code, err.name)}), err.code

	@app.errorhandler(Exception)
	def handle_unexpected(err: Exception):
		# Internals stay in the log
		logger.exception("Unhandled error: %s", err)
		return jsonify({"error": "Internal server error"}), 500
