import logging

from flask import Flask
from flask_cors import CORS
from roshdino.config import Config

from roshdino.extensions import init_services
from roshdino.routes.certificates import bp as certificates_bp
from roshdino.routes.leaderboard import bp as leaderboard_bp
from roshdino.routes.quiz import bp as quiz_bp
from roshdino.routes.user import bp as user_bp
from roshdino.utils.errors import register_error_handlers


def create_app(test_config: dict | None = None, store=None) -> Flask:
	app = Flask(__name__)
	app.config.from_object(Config)
	if test_config:
		app.config.update(test_config)

	logging.basicConfig(
		level=app.config.get("LOG_LEVEL", "INFO"),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)

	CORS(
		app,
		resources=app.config["CORS_RESOURCES"],
		supports_credentials=app.config["CORS_SUPPORTS_CREDENTIALS"],
		allow_headers=app.config["CORS_ALLOW_HEADERS"],
	)

	init_services(app, store)

	# Register blueprints
	app.register_blueprint(quiz_bp)
	app.register_blueprint(user_bp)
	app.register_blueprint(leaderboard_bp)
	app.register_blueprint(certificates_bp)

	# Error handlers
	register_error_handlers(app)

	@app.get("/health")
	def health() -> tuple[dict, int]:
		return {"status": "ok"}, 200

	return app


app = create_app()


if __name__ == "__main__":
	app.run(host="0.0.0.0", port=Config.PORT, debug=Config.DEBUG)
