# file: backend/main.py
"""
FastAPI Backend - Semantic Atom Clustering API v1.

Stateless: every request runs one full clustering job over the
payload it carries. No in-memory state between requests.

Endpoints:
  POST /cluster  - cluster entities + edges, return the three artifacts
  GET  /health   - liveness
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Literal, Optional

from dotenv import load_dotenv

env_path = os.path.join(os.path.dirname(__file__), ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from atom_kernel.diagnostics import compute_quality_summary
from atom_kernel.domain_types import (
    ClusterBudget,
    DependencyEdge,
    EdgeType,
    Entity,
    SignalMaps,
    WeightParameters,
)
from atom_kernel.invariants import ConfigurationError, InvalidInput
from atom_kernel.partition.exporter import (
    build_assignments_document,
    build_cluster_edges_document,
    build_clusters_document,
)
from atom_kernel.partition.service import run_clustering

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def default_budget() -> ClusterBudget:
    """Budget used when a request omits one. Read from the environment."""
    base = ClusterBudget()
    return ClusterBudget(
        min_fun=int(os.environ.get("CLUSTER_MIN_FUN", base.min_fun)),
        max_fun=int(os.environ.get("CLUSTER_MAX_FUN", base.max_fun)),
        min_tokens=int(os.environ.get("CLUSTER_MIN_TOKENS", base.min_tokens)),
        max_tokens=int(os.environ.get("CLUSTER_MAX_TOKENS", base.max_tokens)),
    )


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Semantic Atom Clustering API",
    version="1.0.0",
    description="Deterministic budget-bounded clustering of code entities",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        FRONTEND_URL,
        "http://localhost:3000",
        "http://localhost:3001",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class EntityPayload(BaseModel):
    key: str
    language: str = ""
    file_path: str = ""
    name: str = ""
    lines_of_code: Optional[int] = Field(default=None, ge=0)
    signature_tokens: Optional[int] = Field(default=None, ge=0)


class EdgePayload(BaseModel):
    from_key: str
    to_key: str
    edge_type: Literal["call", "type_use", "read", "write", "other"] = "call"
    frequency: float = Field(default=1.0, ge=0.0)


class SignalPayload(BaseModel):
    a: str
    b: str
    value: float = Field(ge=0.0, le=1.0)


class SignalsPayload(BaseModel):
    temporal: List[SignalPayload] = []
    data: List[SignalPayload] = []
    semantic: List[SignalPayload] = []


class WeightsPayload(BaseModel):
    alpha_dep: float = 1.0
    beta_data: float = 0.8
    gamma_temp: float = 0.6
    delta_sem: float = 0.4
    max_edge_weight: float = 10.0


class BudgetPayload(BaseModel):
    min_fun: int
    max_fun: int
    min_tokens: int
    max_tokens: int


class ClusterRequest(BaseModel):
    entities: List[EntityPayload]
    edges: List[EdgePayload] = []
    signals: Optional[SignalsPayload] = None
    weights: Optional[WeightsPayload] = None
    budget: Optional[BudgetPayload] = None


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def _to_signal_maps(payload: Optional[SignalsPayload]) -> Optional[SignalMaps]:
    if payload is None:
        return None

    def _pairs(items: List[SignalPayload]) -> Dict[tuple, float]:
        return {(s.a, s.b): s.value for s in items}

    return SignalMaps.from_raw(
        temporal=_pairs(payload.temporal),
        data=_pairs(payload.data),
        semantic=_pairs(payload.semantic),
    )


def _cluster(req: ClusterRequest) -> dict:
    entities = [Entity(**e.model_dump()) for e in req.entities]
    edges = [
        DependencyEdge(
            from_key=e.from_key,
            to_key=e.to_key,
            edge_type=EdgeType(e.edge_type),
            frequency=e.frequency,
        )
        for e in req.edges
    ]
    weights = WeightParameters(**req.weights.model_dump()) if req.weights else None
    budget = ClusterBudget(**req.budget.model_dump()) if req.budget else default_budget()

    result = run_clustering(
        entities,
        edges,
        signals=_to_signal_maps(req.signals),
        weights=weights,
        budget=budget,
    )

    return {
        "clusters": build_clusters_document(result),
        "cluster_edges": build_cluster_edges_document(result),
        "cluster_assignments": build_assignments_document(result),
        "diagnostics": compute_quality_summary(result),
        "cluster_hash": result.cluster_hash,
        "warnings": list(result.warnings),
    }


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.post("/cluster")
def cluster(req: ClusterRequest) -> Dict[str, Any]:
    try:
        return _cluster(req)
    except ConfigurationError as e:
        logger.warning("Rejected clustering config: %s", e)
        raise HTTPException(status_code=422, detail=str(e))
    except InvalidInput as e:
        logger.warning("Rejected clustering input: %s", e)
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/health")
def health():
    return {"status": "ok"}
