import pytest

from sqlmorph.utils.text import identifier_words, snake_case


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("dbConnection", "db_connection"),
        ("PDOStatement", "pdo_statement"),
        ("legacy-pdo handle", "legacy_pdo_handle"),
        ("__private__", "private"),
        ("", ""),
    ],
)
def test_snake_case(value: str, expected: str) -> None:
    assert snake_case(value) == expected


@pytest.mark.parametrize(
    ("identifier", "expected"),
    [
        ("dbConnection", ("db", "connection")),
        ("db_connection", ("db", "connection")),
        ("_DB_Connection", ("db", "connection")),
        ("userDb", ("user", "db")),
        ("dbh", ("dbh",)),
        ("", ()),
    ],
)
def test_identifier_words(identifier: str, expected: "tuple[str, ...]") -> None:
    assert identifier_words(identifier) == expected
