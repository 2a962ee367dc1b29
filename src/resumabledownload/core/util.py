from __future__ import annotations
from typing import Any, Dict, Iterable

from .model import StepReport


def report_asdict(rep: StepReport, *, fields: Iterable[str] | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict (skip None) optionally filtered."""
    if not rep.success or rep.data is None:
        return {"step": rep.step, "success": False, "error": rep.error, "bytes_fetched": rep.bytes_fetched}
    payload = {k: v for k, v in rep.data.items() if v is not None}
    if fields:
        wanted = set(fields)
        payload = {k: v for k, v in payload.items() if k in wanted}
    payload.update({"step": rep.step, "success": True, "bytes_fetched": rep.bytes_fetched})
    return payload
