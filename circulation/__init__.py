from flask import Flask, jsonify

from circulation.config import Config
from circulation.extensions import db, migrate, jwt, mail
from circulation.db_setup import ensure_db_objects


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # 1) models must be imported before metadata is used
    from circulation.models import book, member, librarian, borrow, reservation, payment, notification_log  # noqa: F401

    # 2) db init, then dialect-specific setup
    db.init_app(app)
    ensure_db_objects(app)

    # 3) other extensions
    migrate.init_app(app, db)
    jwt.init_app(app)
    mail.init_app(app)

    # 4) API blueprints
    from circulation.controllers.auth_controller import auth_bp
    from circulation.controllers.borrow_controller import borrow_bp
    from circulation.controllers.reservation_controller import reservation_bp
    from circulation.controllers.payment_controller import payment_bp
    from circulation.controllers.report_controller import report_bp
    app.register_blueprint(payment_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(borrow_bp, url_prefix="/borrow")
    app.register_blueprint(reservation_bp, url_prefix="/reservations")
    app.register_blueprint(report_bp, url_prefix="/reports")

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    # Scheduler (reminders + reservation retry sweep)
    from circulation.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app
