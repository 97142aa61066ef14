from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from slot_booking.api.v1.schemas import CancelResponseSchema
from slot_booking.application.use_cases.cancel_booking import CancelBookingUseCase
from slot_booking.wiring.dependencies import get_cancel_booking_use_case


router = APIRouter()


@router.get("/cancel", response_model=CancelResponseSchema)
async def cancel_booking(
    event_id: str | None = Query(None),
    email: str | None = Query(None),
    use_case: CancelBookingUseCase = Depends(get_cancel_booking_use_case),
) -> CancelResponseSchema:
    result = await use_case.cancel(event_id, email)
    return CancelResponseSchema(status=result.status, message=result.message)
