"""
Dynamic UPDATE construction
"""

import pytest

from services.base_service import build_update_query


def test_parameters_follow_clause_order():
    query, params = build_update_query(
        "addresses",
        {"city": "Paris", "postal_code": "75001"},
        keys=[("user_id", 4), ("id", 9)],
        returning=["id", "city"]
    )
    assert query == (
        "UPDATE addresses SET city = $1, postal_code = $2 "
        "WHERE user_id = $3 AND id = $4 RETURNING id, city"
    )
    assert params == ["Paris", "75001", 4, 9]


def test_single_field():
    query, params = build_update_query("addresses", {"country": "FR"}, keys=[("user_id", 1), ("id", 2)], returning=["id"])
    assert "SET country = $1 WHERE user_id = $2 AND id = $3" in query
    assert params == ["FR", 1, 2]


def test_empty_update_is_refused():
    with pytest.raises(ValueError, match="No fields to update"):
        build_update_query("addresses", {}, keys=[("id", 1)], returning=["id"])
