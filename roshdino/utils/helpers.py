from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Type, TypeVar

from flask import request
from roshdino.utils.errors import ValidationError


E = TypeVar("E", bound=Enum)


def utc_now() -> datetime:
	return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
	# Halves round towards +inf, so 12.5 -> 13 (built-in round gives 12)
	return int(math.floor(value + 0.5))


def get_json(required: list[str] | None = None) -> dict:
	data = request.get_json(silent=True)
	if data is None:
		data = {}
	if not isinstance(data, dict):
		raise ValidationError("Request body must be a JSON object")
	if required:
		missing = [k for k in required if k not in data]
		if missing:
			raise ValidationError(f"Missing fields: {', '.join(missing)}")
	return data


def parse_enum(enum_cls: Type[E], value, field: str) -> E:
	if isinstance(value, enum_cls):
		return value
	try:
		return enum_cls(value)
	except ValueError:
		allowed = ", ".join(m.value for m in enum_cls)
		raise ValidationError(f"{field} must be one of: {allowed}")


def parse_limit(value, default: int, maximum: int) -> int:
	if value is None or value == "":
		return default
	try:
		limit = int(value)
	except (TypeError, ValueError):
		raise ValidationError("limit must be an integer")
	if limit < 1:
		raise ValidationError("limit must be positive")
	return min(limit, maximum)
