"""Response envelope helpers shared by the admin routers."""

from dataclasses import asdict
from typing import Any

from pydantic import BaseModel

from ridetrust.services.reputation_service import MutationResult


def dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return value


def ok(data: Any) -> dict:
    return {"ok": True, "data": dump(data)}


def ok_mutation(result: MutationResult) -> dict:
    """Primary result plus the outcome of each best-effort side effect."""
    return {
        "ok": True,
        "data": dump(result.value),
        "sideEffects": [asdict(outcome) for outcome in result.side_effects],
    }
