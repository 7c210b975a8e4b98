from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.application.ports.calendar import CalendarPort
from app.application.ports.llm import LLMPort
from app.application.ports.notifier import NotifierPort
from app.application.ports.slot_store import SlotStorePort
from app.application.use_cases.agent_dispatcher import AgentIntentDispatcher
from app.application.use_cases.booking import BookingStateMachine
from app.application.use_cases.conversational_agent import ConversationalAgentUseCase
from app.application.use_cases.schedule_view import ScheduleViewUseCase
from app.application.utils.schedule_times import schedule_zone
from app.infrastructure.calendar.cal_com_client import CalComCalendar
from app.infrastructure.calendar.mock_calendar import MockCalendar
from app.infrastructure.llm.mock_llm import MockLLM
from app.infrastructure.llm.openai_llm import OpenAILLM
from app.infrastructure.notifier.email_client import HttpEmailNotifier
from app.infrastructure.notifier.mock_notifier import MockNotifier
from app.infrastructure.store.json_store import JsonSlotStore
from app.infrastructure.store.memory_store import MemorySlotStore

# Every collaborator below is built once per process and shared by reference.


def _is_local() -> bool:
    return settings.ENV.lower() in {"dev", "local"}


@lru_cache
def get_timezone() -> ZoneInfo:
    return schedule_zone()


@lru_cache
def get_slot_store() -> SlotStorePort:
    provider = (settings.STORE_PROVIDER or ("json" if _is_local() else "memory")).lower()
    if provider == "json":
        return JsonSlotStore(data_dir=settings.STORE_DATA_DIR)
    return MemorySlotStore()


@lru_cache
def get_calendar() -> CalendarPort:
    if not settings.CAL_COM_API_KEY or _is_local():
        return MockCalendar(timezone=get_timezone())
    return CalComCalendar(timezone=get_timezone())


@lru_cache
def get_notifier() -> NotifierPort:
    logger = logging.getLogger(__name__)
    if not settings.NOTIFICATIONS_ENABLED or not settings.NOTIFY_API_KEY:
        logger.info("Using MockNotifier (NOTIFICATIONS_ENABLED=%s)", settings.NOTIFICATIONS_ENABLED)
        return MockNotifier()
    return HttpEmailNotifier(
        api_key=settings.NOTIFY_API_KEY,
        send_endpoint=settings.NOTIFY_SEND_ENDPOINT,
        from_email=settings.NOTIFY_FROM_EMAIL,
        timeout=settings.EXTERNAL_TIMEOUT_SECONDS,
    )


@lru_cache
def get_llm() -> LLMPort:
    if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip():
        return OpenAILLM(timezone=get_timezone())
    return MockLLM()


def get_schedule_view() -> ScheduleViewUseCase:
    return ScheduleViewUseCase(
        store=get_slot_store(),
        calendar=get_calendar(),
        timezone=get_timezone(),
    )


def get_booking_state_machine() -> BookingStateMachine:
    return BookingStateMachine(
        store=get_slot_store(),
        calendar=get_calendar(),
        notifier=get_notifier(),
        timezone=get_timezone(),
        slot_minutes=settings.SLOT_DURATION_MINUTES,
    )


def get_agent_dispatcher() -> AgentIntentDispatcher:
    return AgentIntentDispatcher(
        schedule_view=get_schedule_view(),
        booking=get_booking_state_machine(),
    )


def get_conversational_agent() -> ConversationalAgentUseCase:
    return ConversationalAgentUseCase(llm=get_llm(), dispatcher=get_agent_dispatcher())
