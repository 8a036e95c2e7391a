def test_get_engine_kwargs_sqlite_has_check_same_thread():
    from taskmanager.database import database as db

    kwargs = db.get_engine_kwargs("sqlite:///./taskmanager.db")
    assert "connect_args" in kwargs
    assert kwargs["connect_args"]["check_same_thread"] is False
    # SQLite should not require pool sizing knobs.
    assert "pool_size" not in kwargs
    assert "max_overflow" not in kwargs
    assert kwargs["pool_pre_ping"] is True


def test_get_engine_kwargs_postgres_has_conservative_pooling(monkeypatch):
    from taskmanager.database import database as db

    monkeypatch.setenv("DB_POOL_SIZE", "7")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "3")
    monkeypatch.setenv("DB_POOL_TIMEOUT_SEC", "15")

    kwargs = db.get_engine_kwargs("postgresql+psycopg://u:p@localhost:5432/db")
    assert "connect_args" not in kwargs
    assert kwargs["pool_pre_ping"] is True
    assert kwargs["pool_size"] == 7
    assert kwargs["max_overflow"] == 3
    assert kwargs["pool_timeout"] == 15


def test_debug_env_enables_echo(monkeypatch):
    from taskmanager.database import database as db

    monkeypatch.setenv("DEBUG", "true")
    assert db.get_engine_kwargs("sqlite:///./taskmanager.db")["echo"] is True


def test_sqlite_pragmas_listener_is_guarded():
    from taskmanager.database import database as db

    assert db._is_sqlite_url("sqlite:///./taskmanager.db") is True
    assert db._is_sqlite_url("postgresql+psycopg://u:p@localhost/db") is False


def test_init_db_creates_tables_for_sqlite(tmp_path, monkeypatch):
    from sqlalchemy import inspect
    from taskmanager.database import database as db

    engine = db.build_engine(f"sqlite:///{tmp_path / 'fresh.db'}")
    monkeypatch.setattr(db, "engine", engine)

    db.init_db()

    assert {"users", "tasks", "google_oauth_tokens"} <= set(inspect(engine).get_table_names())
