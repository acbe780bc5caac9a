"""Tests for migus.data: database, ORM, repositories and services."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest

from migus.data import (
    ORM,
    Database,
    DataError,
    DuplicateEmailError,
    IntegrityError,
    QueryError,
    SessionService,
    User,
    UserService,
    build_where,
    create_schema,
)
from migus.data._mapping import map_row


@pytest.fixture
def db():
    database = Database("sqlite:///:memory:")
    create_schema(database)
    yield database
    database.close()


@dataclass(frozen=True, slots=True)
class Item:
    id: int
    label: str
    price: float | None = None
    active: bool = False


class TestDatabase:
    def test_bad_url(self) -> None:
        with pytest.raises(DataError, match="Unsupported database URL"):
            Database("postgres://localhost/app")

    def test_file_database_creates_parent(self, tmp_path) -> None:
        path = tmp_path / "nested" / "app.db"
        with Database(f"sqlite:///{path}") as database:
            database.connect()
            assert database.connected
        assert path.parent.is_dir()

    def test_lazy_connect(self) -> None:
        database = Database("sqlite:///:memory:")
        assert not database.connected
        assert database.fetch_val("SELECT 1") == 1
        assert database.connected

    def test_fetch_helpers(self, db: Database) -> None:
        db.execute_script("CREATE TABLE items (id INTEGER PRIMARY KEY, label TEXT, price REAL, active INTEGER)")
        new_id = db.insert("INSERT INTO items (label, price, active) VALUES (?, ?, ?)", "pen", 1.5, 1)
        assert db.fetch_row("SELECT label FROM items WHERE id = ?", new_id) == {"label": "pen"}
        assert db.fetch_all("SELECT id FROM items") == [{"id": new_id}]
        item = db.fetch_one(Item, "SELECT * FROM items WHERE id = ?", new_id)
        assert item == Item(new_id, "pen", 1.5, True)
        assert db.fetch(Item, "SELECT * FROM items WHERE id = 99") == []
        assert db.fetch_row("SELECT * FROM items WHERE id = 99") is None

    def test_execute_rowcount(self, db: Database) -> None:
        db.execute_script("CREATE TABLE t (v INTEGER); INSERT INTO t VALUES (1), (2)")
        assert db.execute("UPDATE t SET v = v + 1") == 2

    def test_query_error(self, db: Database) -> None:
        with pytest.raises(QueryError, match="SQL: SELECT nope"):
            db.fetch_all("SELECT nope FROM users")

    def test_integrity_error(self, db: Database) -> None:
        sql = "INSERT INTO users (name, email, password) VALUES (?, ?, ?)"
        db.insert(sql, "A", "a@b.c", "x")
        with pytest.raises(IntegrityError):
            db.insert(sql, "B", "a@b.c", "y")

    def test_transaction_commits(self, db: Database) -> None:
        with db.transaction():
            db.insert("INSERT INTO users (name, email, password) VALUES ('A', 'a@b.c', 'x')")
        assert db.fetch_val("SELECT COUNT(*) FROM users") == 1

    def test_transaction_rolls_back(self, db: Database) -> None:
        with pytest.raises(RuntimeError), db.transaction():
            db.insert("INSERT INTO users (name, email, password) VALUES ('A', 'a@b.c', 'x')")
            msg = "abort"
            raise RuntimeError(msg)
        assert db.fetch_val("SELECT COUNT(*) FROM users") == 0

    def test_nested_transaction_joins_outer(self, db: Database) -> None:
        with pytest.raises(RuntimeError), db.transaction():
            with db.transaction():
                db.insert("INSERT INTO users (name, email, password) VALUES ('A', 'a@b.c', 'x')")
            msg = "abort"
            raise RuntimeError(msg)
        assert db.fetch_val("SELECT COUNT(*) FROM users") == 0

    def test_echo_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        database = Database("sqlite:///:memory:", echo=True)
        with caplog.at_level(logging.DEBUG, logger="migus.data"):
            database.fetch_val("SELECT ?", 5)
        assert "SELECT ?" in caplog.text
        database.close()


class TestMapping:
    def test_coerces_scalars(self) -> None:
        item = map_row(Item, {"id": "3", "label": 7, "price": "2.5", "active": "1", "extra": "ignored"})
        assert item == Item(3, "7", 2.5, True)

    def test_none_kept(self) -> None:
        assert map_row(Item, {"id": 1, "label": "x", "price": None}).price is None

    def test_non_dataclass(self) -> None:
        with pytest.raises(TypeError, match="not a dataclass"):
            map_row(dict, {"a": 1})


class TestORM:
    def test_build_where(self) -> None:
        assert build_where({"a": 1, "b": "x"}) == ("WHERE a = ? AND b = ?", [1, "x"])
        assert build_where({}) == ("", [])

    def test_rejects_bad_identifier(self, db: Database) -> None:
        with pytest.raises(ValueError, match="Invalid SQL identifier"):
            ORM(db).find("users; DROP TABLE users", "id", 1)

    def test_crud(self, db: Database) -> None:
        orm = ORM(db)
        new_id = orm.insert("users", {"name": "Ana", "email": "a@b.c", "password": "x"})
        assert orm.find("users", "id", new_id)["name"] == "Ana"
        assert orm.update("users", "id", new_id, {"name": "Ana María"})
        assert orm.find_by("users", {"email": "a@b.c"})[0]["name"] == "Ana María"
        assert orm.delete("users", "id", new_id)
        assert orm.find("users", "id", new_id) is None
        assert not orm.delete("users", "id", new_id)

    def test_find_by_paging(self, db: Database) -> None:
        orm = ORM(db)
        for n in range(5):
            orm.insert("users", {"name": f"u{n}", "email": f"u{n}@x.y", "password": "x"})
        assert len(orm.find_by("users", limit=2)) == 2
        assert [r["name"] for r in orm.find_by("users", offset=3)] == ["u3", "u4"]
        assert [r["name"] for r in orm.find_by("users", limit=1, offset=1)] == ["u1"]

    def test_empty_insert_and_update(self, db: Database) -> None:
        orm = ORM(db)
        with pytest.raises(ValueError, match="empty row"):
            orm.insert("users", {})
        assert orm.update("users", "id", 1, {}) is False


class TestUserService:
    def test_create_hashes_password(self, db: Database) -> None:
        user = UserService(db).create_user("Ana", "ana@example.com", "secret")
        assert isinstance(user, User)
        assert user.password.startswith("$argon2")
        assert user.role == "user"
        assert user.created_at is not None

    def test_duplicate_email(self, db: Database) -> None:
        users = UserService(db)
        users.create_user("Ana", "ana@example.com", "secret")
        with pytest.raises(DuplicateEmailError, match="Ya existe"):
            users.create_user("Otra", "ana@example.com", "secret")

    def test_login(self, db: Database) -> None:
        users = UserService(db)
        users.create_user("Ana", "ana@example.com", "secret")
        assert users.login("ana@example.com", "secret").name == "Ana"
        assert users.login("ana@example.com", "wrong") is None
        assert users.login("nobody@example.com", "secret") is None

    def test_queries(self, db: Database) -> None:
        users = UserService(db)
        first = users.create_user("A", "a@x.y", "pw")
        second = users.create_user("B", "b@x.y", "pw")
        assert users.count_users() == 2
        assert [u.id for u in users.all_users()] == [second.id, first.id]
        assert users.get_user(first.id).email == "a@x.y"
        assert users.find_by_email("b@x.y").id == second.id
        assert users.get_user(999) is None

    def test_update_password_and_role(self, db: Database) -> None:
        users = UserService(db)
        user = users.create_user("A", "a@x.y", "old")
        assert users.update_password(user.id, "new")
        assert users.login("a@x.y", "new") is not None
        assert users.update_role(user.id, "admin")
        assert users.get_user(user.id).is_admin
        assert not users.update_role(999, "admin")

    def test_user_model(self, db: Database) -> None:
        user = UserService(db).create_user("A", "a@x.y", "pw")
        assert "password" not in user.to_dict()
        assert "password" in user.to_dict(include_password=True)
        assert set(user.session_payload()) == {"id", "name", "email", "role", "created_at"}


class TestSessionService:
    def test_token_round_trip(self, db: Database) -> None:
        user = UserService(db).create_user("A", "a@x.y", "pw")
        sessions = SessionService(db)
        token = sessions.create_session(user.id, "pytest", "127.0.0.1")
        assert len(token) == 64
        assert sessions.find_user_by_token(token).id == user.id

    def test_expired_token(self, db: Database) -> None:
        user = UserService(db).create_user("A", "a@x.y", "pw")
        sessions = SessionService(db)
        past = datetime.now(UTC) - timedelta(minutes=1)
        token = sessions.create_session(user.id, None, None, expires_at=past)
        assert sessions.find_user_by_token(token) is None

    def test_delete(self, db: Database) -> None:
        user = UserService(db).create_user("A", "a@x.y", "pw")
        sessions = SessionService(db)
        first = sessions.create_session(user.id, None, None)
        second = sessions.create_session(user.id, None, None)
        sessions.delete_by_token(first)
        assert sessions.find_user_by_token(first) is None
        assert sessions.find_user_by_token(second) is not None
        sessions.delete_by_user(user.id)
        assert sessions.find_user_by_token(second) is None

    def test_cascade_on_user_delete(self, db: Database) -> None:
        user = UserService(db).create_user("A", "a@x.y", "pw")
        token = SessionService(db).create_session(user.id, None, None)
        db.execute("DELETE FROM users WHERE id = ?", user.id)
        assert db.fetch_val("SELECT COUNT(*) FROM sessions WHERE session_token = ?", token) == 0
