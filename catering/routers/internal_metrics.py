from __future__ import annotations

from fastapi import APIRouter, Depends

from catering.core.metrics import request_metrics
from catering.deps import require_admin

router = APIRouter(prefix="/internal/metrics", tags=["internal-metrics"])


@router.get("")
def endpoint_metrics(_admin: str = Depends(require_admin)):
    return {"endpoints": request_metrics.snapshot()}
