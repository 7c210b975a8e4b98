from __future__ import annotations

import logging
import traceback

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from app.api.v1.schemas import (
    AgentRequestSchema,
    BookingResponseSchema,
    BookRequestSchema,
    CancelRequestSchema,
    ConversationRequestSchema,
    ConversationResponseSchema,
    CreateDayRequestSchema,
    CreateDayResponseSchema,
    DayResponseSchema,
)
from app.application.exceptions import LLMContractError, LLMUpstreamError, SchedulingError
from app.application.use_cases.agent_dispatcher import AgentIntentDispatcher
from app.application.use_cases.booking import BookingStateMachine
from app.application.use_cases.conversational_agent import ConversationalAgentUseCase
from app.application.use_cases.schedule_view import ScheduleViewUseCase
from app.application.utils.schedule_times import parse_day
from app.application.utils.serialization import day_to_dict, outcome_to_dict
from app.core.config import settings
from app.domain.entities.message import ChatMessage
from app.wiring.dependencies import (
    get_agent_dispatcher,
    get_booking_state_machine,
    get_conversational_agent,
    get_schedule_view,
)

router = APIRouter(prefix="/schedule")
logger = logging.getLogger(__name__)


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, SchedulingError) and 400 <= e.status_code < 500:
        return HTTPException(status_code=e.status_code, detail=str(e))
    logger.exception("Unexpected error in schedule endpoint", extra={"error": str(e)})
    detail: dict[str, str] = {"message": "Internal server error"}
    if settings.ENV.lower() in {"dev", "local"}:
        detail["error"] = str(e)
        detail["stack"] = traceback.format_exc()
    return HTTPException(status_code=500, detail=detail)


@router.get("", response_model=list[DayResponseSchema])
def list_schedules(view: ScheduleViewUseCase = Depends(get_schedule_view)):
    try:
        return [day_to_dict(day) for day in view.list_days()]
    except Exception as e:
        raise _http_error(e)


@router.get("/{date}", response_model=DayResponseSchema)
def get_schedule_by_date(date: str, view: ScheduleViewUseCase = Depends(get_schedule_view)):
    try:
        return day_to_dict(view.get_day(parse_day(date)))
    except Exception as e:
        raise _http_error(e)


@router.post("/days", response_model=CreateDayResponseSchema)
def create_day(
    req: CreateDayRequestSchema,
    booking: BookingStateMachine = Depends(get_booking_state_machine),
):
    try:
        day, created = booking.create_day(parse_day(req.date), req.blocked_times)
    except Exception as e:
        raise _http_error(e)
    return {**day_to_dict(day), "created": created}


@router.post("/book", response_model=BookingResponseSchema)
def book_slot(
    req: BookRequestSchema,
    booking: BookingStateMachine = Depends(get_booking_state_machine),
):
    try:
        outcome = booking.book(
            parse_day(req.date),
            req.time,
            name=req.name,
            email=req.email,
            company=req.company,
            subject=req.subject,
        )
    except Exception as e:
        raise _http_error(e)
    return outcome_to_dict(outcome)


@router.post("/cancel", response_model=BookingResponseSchema)
def cancel_booking(
    req: CancelRequestSchema,
    booking: BookingStateMachine = Depends(get_booking_state_machine),
):
    try:
        outcome = booking.cancel(parse_day(req.date), req.time)
    except Exception as e:
        raise _http_error(e)
    return outcome_to_dict(outcome)


@router.post("/agent")
def schedule_agent(
    req: AgentRequestSchema,
    dispatcher: AgentIntentDispatcher = Depends(get_agent_dispatcher),
) -> JSONResponse:
    calls = ([req.intent] if req.intent is not None else []) + list(req.intents)
    if not calls:
        raise HTTPException(status_code=400, detail="Provide 'intent' or a non-empty 'intents' list")

    results = dispatcher.dispatch_all(calls)
    if len(results) == 1:
        return JSONResponse(status_code=results[0].status_code, content=results[0].to_envelope())
    return JSONResponse(status_code=200, content={"results": [r.to_envelope() for r in results]})


@router.post("/conversation", response_model=ConversationResponseSchema)
def conversation(
    req: ConversationRequestSchema,
    uc: ConversationalAgentUseCase = Depends(get_conversational_agent),
):
    try:
        reply = uc.respond([ChatMessage(role=m.role, content=m.content) for m in req.messages])
    except (LLMUpstreamError, LLMContractError) as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        raise _http_error(e)
    return ConversationResponseSchema(reply=reply.text, results=reply.envelopes, meta=reply.meta)
