"""Internal operational endpoints."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from slotbook.api.deps import CurrentUser, require_admin
from slotbook.schemas.booking import ExpirySweepResponse
from slotbook.services.expiry_service import run_expiry_sweep

router = APIRouter()


@router.post("/expiry-sweep", response_model=ExpirySweepResponse)
async def trigger_expiry_sweep(
    current_user: Annotated[CurrentUser, Depends(require_admin)],
) -> ExpirySweepResponse:
    """Run the booking expiry sweep now (admin only)."""
    ran_at = datetime.now(UTC)
    result = await run_expiry_sweep(ran_at)
    return ExpirySweepResponse(
        cancelled_count=result.cancelled_count,
        completed_count=result.completed_count,
        ran_at=ran_at,
    )
