from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

import requests

from roshdino.utils.helpers import utc_now


logger = logging.getLogger(__name__)


class Events:

	QUIZ_COMPLETED = "quiz.completed"
	BADGE_AWARDED = "badge.awarded"
	TRAINING_COMPLETED = "training.completed"
	CERTIFICATE_ELIGIBLE = "certificate.eligible"


class NotificationService:
	"""Hands events to an external webhook.

	``publish`` only queues the POST on a background worker and returns at
	once, so request handlers never wait on the webhook. Delivery is best
	effort: a failed POST is logged and its future resolves to False.
	"""

	def __init__(self, webhook_url: str = "", timeout: float = 5.0, session: requests.Session | None = None):
		self.webhook_url = webhook_url
		self.timeout = timeout
		self._session = session or requests.Session()
		self._executor: ThreadPoolExecutor | None = None
		self._lock = threading.Lock()

	def _pool(self) -> ThreadPoolExecutor:
		with self._lock:
			if self._executor is None:
				# One worker keeps events in publish order
				self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="roshdino-webhook")
			return self._executor

	def publish(self, event: str, payload: dict) -> Future | None:
		if not self.webhook_url:
			logger.debug("No webhook configured, dropping %s event", event)
			return None
		body = {"event": event, "emittedAt": utc_now().isoformat(), "payload": payload}
		return self._pool().submit(self._deliver, event, body)

	def _deliver(self, event: str, body: dict) -> bool:
		try:
			resp = self._session.post(self.webhook_url, json=body, timeout=self.timeout)
			resp.raise_for_status()
		except requests.RequestException as e:
			logger.warning("Failed to deliver %s event: %s", event, e)
			return False
		return True

	def shutdown(self, wait: bool = True) -> None:
		with self._lock:
			executor, self._executor = self._executor, None
		if executor is not None:
			executor.shutdown(wait=wait)
