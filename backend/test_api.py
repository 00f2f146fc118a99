"""
Clustering API - Test Scenarios

Exercises the FastAPI app in-process through TestClient.

Run:  python -m backend.test_api
"""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from backend.main import app, default_budget


client = TestClient(app)

_pass = 0
_fail = 0

OPEN_BUDGET = {"min_fun": 1, "max_fun": 10, "min_tokens": 0, "max_tokens": 4000}


def _test(name, fn):
    global _pass, _fail
    try:
        fn()
        print(f"  [PASS] {name}")
        _pass += 1
    except Exception as exc:
        print(f"  [FAIL] {name}: {exc}")
        _fail += 1


def _entity(key: str) -> dict:
    return {"key": key, "language": "python", "file_path": f"src/{key}.py", "name": key}


def _path_request() -> dict:
    return {
        "entities": [_entity(k) for k in ["A", "B", "C"]],
        "edges": [
            {"from_key": "A", "to_key": "B", "edge_type": "call", "frequency": 5},
            {"from_key": "B", "to_key": "C", "edge_type": "call", "frequency": 5},
        ],
        "budget": OPEN_BUDGET,
    }


# ═══════════════════════════════════════════════════════════════
#  TESTS
# ═══════════════════════════════════════════════════════════════

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_cluster_path():
    r = client.post("/cluster", json=_path_request())
    assert r.status_code == 200, r.text
    body = r.json()

    clusters = body["clusters"]["clusters"]
    assert len(clusters) == 1
    assert clusters[0]["contains"] == ["A", "B", "C"]
    assert clusters[0]["metrics"]["cohesion"] == 1.0
    assert body["clusters"]["modularity_global"] == 1.0
    assert body["cluster_edges"] == {"level": "0.5", "edges": []}
    assert len(body["cluster_assignments"]["assignments"]) == 3
    assert body["diagnostics"]["cluster_count"] == 1
    assert len(body["cluster_hash"]) == 64
    assert body["warnings"] == []


def test_cluster_is_deterministic():
    first = client.post("/cluster", json=_path_request()).json()
    second = client.post("/cluster", json=_path_request()).json()
    assert first == second


def test_cluster_with_signals_and_weights():
    req = {
        "entities": [_entity(k) for k in ["A", "B", "C", "D"]],
        "edges": [
            {"from_key": "A", "to_key": "B"},
            {"from_key": "C", "to_key": "D", "edge_type": "write", "frequency": 2},
            {"from_key": "D", "to_key": "ghost"},
        ],
        "signals": {"temporal": [{"a": "B", "b": "A", "value": 0.5}]},
        "weights": {"alpha_dep": 1.0, "beta_data": 0.8, "gamma_temp": 0.6,
                    "delta_sem": 0.4, "max_edge_weight": 5.0},
        "budget": OPEN_BUDGET,
    }
    r = client.post("/cluster", json=req)
    assert r.status_code == 200, r.text
    body = r.json()
    contains = sorted(c["contains"] for c in body["clusters"]["clusters"])
    assert contains == [["A", "B"], ["C", "D"]]
    assert len(body["warnings"]) == 1
    assert "ghost" in body["warnings"][0]


def test_invalid_budget_is_422():
    req = _path_request()
    req["budget"] = {"min_fun": 5, "max_fun": 2, "min_tokens": 0, "max_tokens": 10}
    r = client.post("/cluster", json=req)
    assert r.status_code == 422
    assert "min_fun" in r.json()["detail"]


def test_duplicate_keys_is_400():
    req = _path_request()
    req["entities"].append(_entity("A"))
    r = client.post("/cluster", json=req)
    assert r.status_code == 400
    assert "Duplicate entity keys: A" in r.json()["detail"]


def test_empty_entities_is_400():
    r = client.post("/cluster", json={"entities": [], "budget": OPEN_BUDGET})
    assert r.status_code == 400


def test_unknown_edge_type_rejected_by_schema():
    req = _path_request()
    req["edges"][0]["edge_type"] = "inherits"
    r = client.post("/cluster", json=req)
    assert r.status_code == 422


def test_signal_out_of_range_rejected_by_schema():
    req = _path_request()
    req["signals"] = {"semantic": [{"a": "A", "b": "C", "value": 1.5}]}
    r = client.post("/cluster", json=req)
    assert r.status_code == 422


def test_default_budget_from_environment():
    names = ["CLUSTER_MIN_FUN", "CLUSTER_MAX_FUN", "CLUSTER_MIN_TOKENS", "CLUSTER_MAX_TOKENS"]
    saved = {n: os.environ.get(n) for n in names}
    try:
        os.environ["CLUSTER_MIN_FUN"] = "2"
        os.environ["CLUSTER_MAX_FUN"] = "8"
        for n in names[2:]:
            os.environ.pop(n, None)
        budget = default_budget()
        assert (budget.min_fun, budget.max_fun) == (2, 8)
        assert (budget.min_tokens, budget.max_tokens) == (200, 4000)
    finally:
        for n, value in saved.items():
            if value is None:
                os.environ.pop(n, None)
            else:
                os.environ[n] = value


# ═══════════════════════════════════════════════════════════════
#  RUNNER
# ═══════════════════════════════════════════════════════════════

def main() -> None:
    tests = [
        ("GET /health", test_health),
        ("POST /cluster: path", test_cluster_path),
        ("POST /cluster: deterministic", test_cluster_is_deterministic),
        ("POST /cluster: signals + weights", test_cluster_with_signals_and_weights),
        ("POST /cluster: bad budget -> 422", test_invalid_budget_is_422),
        ("POST /cluster: duplicate keys -> 400", test_duplicate_keys_is_400),
        ("POST /cluster: empty -> 400", test_empty_entities_is_400),
        ("POST /cluster: unknown edge type -> 422", test_unknown_edge_type_rejected_by_schema),
        ("POST /cluster: bad signal -> 422", test_signal_out_of_range_rejected_by_schema),
        ("Config: default budget env", test_default_budget_from_environment),
    ]

    print(f"\nRunning {len(tests)} tests...\n")
    for name, fn in tests:
        _test(name, fn)

    print(f"\n{'='*60}")
    print(f"  {_pass} passed, {_fail} failed out of {_pass + _fail}")
    print(f"{'='*60}")

    if _fail > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
