from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy import event

db = SQLAlchemy()
migrate = Migrate()


def use_immediate_transactions(engine):
    """
    Make every SQLite transaction take the write lock at BEGIN.

    pysqlite only opens a transaction before the first DML statement, so a
    check-then-insert would otherwise read outside any transaction. With
    BEGIN IMMEDIATE a second writer waits (up to the busy timeout) until the
    first one commits, which is what ``SELECT ... FOR UPDATE`` gives us on
    server databases.
    """
    if engine.dialect.name != 'sqlite':
        return

    @event.listens_for(engine, 'connect')
    def disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, 'begin')
    def begin_immediate(conn):
        conn.exec_driver_sql('BEGIN IMMEDIATE')
