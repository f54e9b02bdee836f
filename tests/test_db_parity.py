from __future__ import annotations

from typing import Any, Dict, List

import pytest

from src.adapters.db_local import LocalTranslator
from src.adapters.db_supabase import RemoteTranslator
from src.domain.query import Gte, Like, OrderBy, QueryOptions

COLUMNS = ["id", "last_name", "email", "status", "risk_score"]

SEED = [
    ("Smith", "active", 10, "smith@fleet.example"),
    ("Goldsmith", "suspended", 45, "goldsmith@fleet.example"),
    ("Jones", "active", 72, None),
    ("Okafor", "on_leave", 91, "okafor@fleet.example"),
    ("Park", "active", 55, "park@fleet.example"),
    ("Novak", "suspended", 88, "novak@fleet.example"),
    ("Éric", "active", 30, "eric@fleet.example"),
]


@pytest.fixture
def translators(sqlite_db, fake_client, make_driver):
    local = LocalTranslator(sqlite_db)
    remote = RemoteTranslator(fake_client)
    rows = [
        make_driver(index, score, last_name=last_name, status=status, email=email)
        for index, (last_name, status, score, email) in enumerate(SEED, start=1)
    ]
    local.insert("drivers", rows)
    remote.insert("drivers", rows)
    return local, remote


def _by_id(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(rows, key=lambda row: row["id"])


@pytest.mark.parametrize(
    "conditions",
    [
        {},
        {"status": "active"},
        {"status": ["active", "suspended"]},
        {"risk_score": {"operator": "gt", "value": 45}},
        {"risk_score": {"operator": "gte", "value": 45}},
        {"risk_score": {"operator": "lt", "value": 55}},
        {"risk_score": {"operator": "lte", "value": 55}},
        {"last_name": {"operator": "like", "value": "SMITH"}},
        {"last_name": {"operator": "like", "value": "éric"}},
        {"last_name": Like("ÉR")},
        {"email": None},
        {"status": "active", "risk_score": Gte(50)},
        {"last_name": Like("o"), "status": ["suspended", "on_leave"]},
    ],
)
def test_translators_return_same_rows(translators, conditions) -> None:
    local, remote = translators
    local_rows = local.select("drivers", COLUMNS, conditions, {"count": True})
    remote_rows = remote.select("drivers", COLUMNS, conditions, {"count": True})

    assert _by_id(local_rows.data) == _by_id(remote_rows.data)
    assert local_rows.count == remote_rows.count == len(local_rows.data)


@pytest.mark.parametrize(
    "options",
    [
        QueryOptions(order_by=OrderBy("risk_score", "desc"), limit=2),
        QueryOptions(order_by=OrderBy("id"), limit=2, offset=2, count=True),
        QueryOptions(order_by=OrderBy("last_name"), offset=1, count=True),
        QueryOptions(order_by=OrderBy("email"), limit=3),
        QueryOptions(order_by=OrderBy("email"), limit=3, offset=4),
        QueryOptions(order_by=OrderBy("email", "desc"), limit=2),
    ],
)
def test_translators_return_same_window(translators, options) -> None:
    local, remote = translators
    local_result = local.select("drivers", COLUMNS, {}, options)
    remote_result = remote.select("drivers", COLUMNS, {}, options)

    assert local_result.data == remote_result.data
    assert local_result.count == remote_result.count


def test_translators_agree_on_count(translators) -> None:
    local, remote = translators
    conditions = {"status": "suspended"}
    assert local.count("drivers", conditions).count == remote.count("drivers", conditions).count == 2


def test_null_sort_values_land_like_postgres(translators) -> None:
    local, remote = translators
    for translator in (local, remote):
        ascending = translator.select("drivers", ["last_name", "email"], {}, {"orderBy": {"column": "email"}}).data
        descending = translator.select(
            "drivers", ["last_name", "email"], {}, {"orderBy": {"column": "email", "direction": "desc"}, "limit": 1}
        ).data
        assert ascending[0]["email"] is not None
        assert ascending[-1] == {"last_name": "Jones", "email": None}
        assert descending == [{"last_name": "Jones", "email": None}]


def test_like_folds_non_ascii_case(translators) -> None:
    local, remote = translators
    for translator in (local, remote):
        rows = translator.select("drivers", ["last_name"], {"last_name": {"operator": "like", "value": "éric"}}).data
        assert rows == [{"last_name": "Éric"}]
