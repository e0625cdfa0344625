"""
Tests for engine construction and table creation.
"""

from sqlalchemy import inspect

from fixture_scheduler.database import init_db, make_engine


def test_file_database_directory_is_created(tmp_path):
    db_file = tmp_path / "nested" / "data" / "fixtures.db"

    engine = make_engine(f"sqlite:///{db_file}")
    init_db(engine)

    assert db_file.parent.is_dir()
    assert {"tournament", "team", "tournamentteam", "match"} <= set(inspect(engine).get_table_names())
    engine.dispose()


def test_in_memory_database_touches_no_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    engine = make_engine("sqlite:///:memory:")
    init_db(engine)

    assert list(tmp_path.iterdir()) == []
    assert "match" in inspect(engine).get_table_names()
    engine.dispose()
