import os


class Config:

	SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_key")
	ENV = os.getenv("FLASK_ENV", "production")
	DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"
	FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
	PORT = int(os.getenv("PORT", "5000"))
	LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

	FIREBASE_CREDENTIALS_PATH = os.getenv(
		"FIREBASE_CREDENTIALS_PATH", "./firebase-credentials.json"
	)
	DEMO_MODE = os.getenv("DEMO_MODE", "False").lower() == "true"

	# Optimistic concurrency: attempts per submission before a 503
	MAX_TRANSACTION_ATTEMPTS = int(os.getenv("MAX_TRANSACTION_ATTEMPTS", "5"))
	# "append" issues a badge on every qualifying attempt, "dedupe" once per name
	BADGE_POLICY = os.getenv("BADGE_POLICY", "append").lower()

	DEFAULT_LEADERBOARD_LIMIT = int(os.getenv("DEFAULT_LEADERBOARD_LIMIT", "10"))
	MAX_LEADERBOARD_LIMIT = int(os.getenv("MAX_LEADERBOARD_LIMIT", "100"))

	NOTIFICATIONS_WEBHOOK_URL = os.getenv("NOTIFICATIONS_WEBHOOK_URL", "")
	NOTIFICATIONS_TIMEOUT = float(os.getenv("NOTIFICATIONS_TIMEOUT", "5"))

	CORS_RESOURCES = {r"/api/*": {"origins": [FRONTEND_URL]}}
	CORS_SUPPORTS_CREDENTIALS = True
	CORS_ALLOW_HEADERS = [
		"Content-Type",
		"Authorization",
		"X-Requested-With",
	]
