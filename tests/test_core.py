import pytest
from sqlalchemy.exc import OperationalError, ProgrammingError

from chefsite import schemas
from chefsite.crud import events as crud_events
from chefsite.crud import recipes as crud_recipes
from chefsite.database import is_connection_error, normalize_db_url, read
from chefsite.errors import ConnectivityError, NothingToUpdateError, QueryError
from chefsite.local_storage import LocalStorage
from chefsite.result import Err, Ok


def test_normalize_db_url():
    assert normalize_db_url("postgres://u:p@h/db") == "postgresql+psycopg2://u:p@h/db"
    assert normalize_db_url("postgresql://u:p@h/db") == "postgresql+psycopg2://u:p@h/db"
    assert normalize_db_url("sqlite:///:memory:") == "sqlite:///:memory:"


def test_result_helpers():
    ok = Ok(2)
    err = Err(ConnectivityError("down"))

    assert ok.map(lambda v: v * 2).unwrap() == 4
    assert err.map(lambda v: v * 2).is_err()
    assert err.unwrap_or(0) == 0
    assert err.unwrap_or_else(lambda e: str(e)) == "down"
    with pytest.raises(ConnectivityError):
        err.unwrap()


def test_connection_errors_are_told_apart():
    refused = OperationalError("SELECT 1", {}, Exception("connection refused"))

    assert is_connection_error(refused)
    assert is_connection_error(Exception("connect ECONNREFUSED 127.0.0.1:5432"))
    assert not is_connection_error(Exception("syntax error"))


def test_read_converts_store_errors(db_session):
    def broken(session):
        raise OperationalError("SELECT 1", {}, Exception("no such table: nowhere"))

    result = read(db_session, "fetch nothing", broken)
    assert result.is_err()
    assert isinstance(result.error, ConnectivityError)

    def bad_query(session):
        raise ProgrammingError("SELECT", {}, Exception("bad column"))

    assert isinstance(read(db_session, "fetch bad", bad_query).error, QueryError)


def test_nothing_to_update_is_a_value_error():
    error = NothingToUpdateError("recipe")
    assert isinstance(error, ValueError)
    assert str(error) == "No fields to update for recipe"


def test_local_storage_json_helpers():
    storage = LocalStorage.from_export({"events": [{"id": "1"}], "raw": "[1, 2]"})

    assert storage.get_json("events", []) == [{"id": "1"}]
    assert storage.get_json("raw", []) == [1, 2]
    assert storage.get_json("missing", "default") == "default"

    storage.set_json("users", [])
    assert storage.get_item("users") == "[]"
    assert storage.get_item("missing") is None


def test_read_turns_invalid_rows_into_query_errors(db_session):
    def invalid_row(session):
        return schemas.TestimonialOut.model_validate(
            {"id": "t1", "name": "", "text": "Great", "created_at": "2025-01-01T00:00:00"}
        )

    result = read(db_session, "fetch testimonial", invalid_row)
    assert result.is_err()
    assert isinstance(result.error, QueryError)


def test_empty_update_without_database_is_not_a_connectivity_error():
    with pytest.raises(NothingToUpdateError):
        crud_events.update(None, "any", schemas.EventUpdate())
    with pytest.raises(NothingToUpdateError):
        crud_recipes.update(None, "any", schemas.RecipeUpdate())
    with pytest.raises(ConnectivityError):
        crud_recipes.update(None, "any", schemas.RecipeUpdate(title="Stew"))
