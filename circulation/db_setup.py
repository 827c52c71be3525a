from sqlalchemy import event

from circulation.extensions import db


def _install_sqlite_transaction_hooks(engine):
    """
    pysqlite defers BEGIN and breaks SAVEPOINT; take over transaction control
    so nested transactions (reservation fulfillment) behave like on a server DB.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def ensure_db_objects(app):
    with app.app_context():
        engine = db.engine
        if engine.dialect.name == "sqlite":
            _install_sqlite_transaction_hooks(engine)
            app.logger.info("[db_setup] sqlite transaction hooks installed.")

        if app.config.get("AUTO_CREATE_TABLES"):
            db.create_all()
            app.logger.info("[db_setup] tables ensured.")
