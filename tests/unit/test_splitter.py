"""Tests for the quote and parenthesis aware predicate splitter."""

import logging

import pytest

from sqlmorph.core.splitter import (
    BooleanOperator,
    Predicate,
    find_closing_parenthesis,
    find_top_level_position,
    is_balanced,
    is_wrapped_in_parentheses,
    iter_top_level_words,
    skip_quoted,
    split_predicates,
    split_respecting_delimiters,
)

AND = BooleanOperator.AND
OR = BooleanOperator.OR


def test_split_simple_and() -> None:
    assert split_predicates("age > :param1 AND name = :param2") == [
        ("age > :param1", None),
        ("name = :param2", AND),
    ]


def test_split_mixed_operators_keep_source_order() -> None:
    assert split_predicates("a = 1 AND b = 2 OR c = 3") == [
        Predicate("a = 1"),
        Predicate("b = 2", AND),
        Predicate("c = 3", OR),
    ]


def test_split_is_case_insensitive() -> None:
    assert split_predicates("a = 1 and b = 2 Or c = 3") == [("a = 1", None), ("b = 2", AND), ("c = 3", OR)]


def test_split_keeps_parenthesized_groups() -> None:
    assert split_predicates("status = 'active' AND (role = 'admin' OR role = 'owner')") == [
        ("status = 'active'", None),
        ("(role = 'admin' OR role = 'owner')", AND),
    ]


def test_split_ignores_operators_inside_quotes() -> None:
    assert split_predicates("title = 'rock AND roll' OR title = \"salt or pepper\"") == [
        ("title = 'rock AND roll'", None),
        ('title = "salt or pepper"', OR),
    ]


def test_split_handles_escaped_quotes() -> None:
    assert split_predicates("name = 'O''Brien AND co' AND x = 'a\\' OR b'") == [
        ("name = 'O''Brien AND co'", None),
        ("x = 'a\\' OR b'", AND),
    ]


def test_split_keeps_between_range_together() -> None:
    assert split_predicates("age BETWEEN 18 AND 65 AND active = 1") == [
        ("age BETWEEN 18 AND 65", None),
        ("active = 1", AND),
    ]


def test_split_keeps_case_block_together() -> None:
    condition = "CASE WHEN a = 1 AND b = 2 THEN 1 ELSE 0 END = 1 OR c = 3"
    assert split_predicates(condition) == [
        ("CASE WHEN a = 1 AND b = 2 THEN 1 ELSE 0 END = 1", None),
        ("c = 3", OR),
    ]


def test_operator_needs_surrounding_whitespace() -> None:
    assert split_predicates("brand = 'x' AND(category = 'y')") == [("brand = 'x' AND(category = 'y')", None)]


def test_identifiers_containing_keywords_are_not_split() -> None:
    assert split_predicates("android = 1 AND orders.oracle = 2") == [("android = 1", None), ("orders.oracle = 2", AND)]


def test_fully_wrapped_expression_is_one_predicate() -> None:
    assert split_predicates("(a = 1 OR b = 2)") == [("(a = 1 OR b = 2)", None)]


def test_single_predicate_is_trimmed() -> None:
    assert split_predicates("  id = :param1 ") == [("id = :param1", None)]


def test_empty_expression_gives_no_predicates() -> None:
    assert split_predicates("   ") == []


@pytest.mark.parametrize(
    "expression",
    [
        "a = 'unterminated AND b = 1",
        "(a = 1 AND b = 2",
        "a = 1) AND (b = 2",
    ],
)
def test_unbalanced_input_is_one_opaque_predicate(expression: str, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="sqlmorph"):
        assert split_predicates(expression) == [(expression, None)]
    assert "Unbalanced" in caplog.text


@pytest.mark.parametrize("expression", ["a = 1 AND ", "AND a = 1 AND b = 2", "a = 1 AND  OR b = 2"])
def test_dangling_operator_is_one_opaque_predicate(expression: str, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="sqlmorph"):
        assert split_predicates(expression) == [(expression.strip(), None)]


def test_skip_quoted() -> None:
    assert skip_quoted("'abc' rest", 0) == 5
    assert skip_quoted("'it''s' x", 0) == 7
    assert skip_quoted("`col` x", 0) == 5
    assert skip_quoted("'never closed", 0) == -1


def test_backslash_does_not_escape_backtick() -> None:
    assert skip_quoted("`a\\` x", 0) == 4


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("f(a, (b))", True),
        ("')' (x)", True),
        ("(a", False),
        ("a)", False),
        (")(", False),
        ("'open", False),
    ],
)
def test_is_balanced(text: str, expected: bool) -> None:
    assert is_balanced(text) is expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("(a OR b)", True),
        (" ((a) AND (b)) ", True),
        ("(a) AND (b)", False),
        ("a AND (b)", False),
        ("(')')", True),
    ],
)
def test_is_wrapped_in_parentheses(text: str, expected: bool) -> None:
    assert is_wrapped_in_parentheses(text) is expected


def test_find_closing_parenthesis() -> None:
    text = "VALUES (a, ')', (b)) tail"
    assert find_closing_parenthesis(text, 7) == 19
    assert find_closing_parenthesis("(open", 0) == -1


def test_find_top_level_position() -> None:
    text = "f(a, b), 'x,y', c"
    assert find_top_level_position(text, ",") == 7
    assert find_top_level_position(text, ",", 8) == 14
    assert find_top_level_position("no delimiter", ",") == -1


def test_split_respecting_delimiters() -> None:
    assert split_respecting_delimiters("id, CONCAT(first, ' ', last), 'a,b'") == [
        "id",
        "CONCAT(first, ' ', last)",
        "'a,b'",
    ]
    assert split_respecting_delimiters("a,,b,") == ["a", "", "b", ""]


def test_iter_top_level_words_skips_nested_and_qualified_words() -> None:
    words = [word for _, _, word in iter_top_level_words("select u.name FROM users u WHERE id IN (SELECT 1) AND :from")]
    assert words == ["SELECT", "U", "FROM", "USERS", "U", "WHERE", "ID", "IN", "AND"]


def test_iter_top_level_words_positions() -> None:
    assert list(iter_top_level_words("a  bc")) == [(0, 1, "A"), (3, 5, "BC")]
