from app.domain.entities.schedule import STANDARD_TIMES

_CONFIRMATION_PROPERTIES = {
    "checkout": {
        "type": "boolean",
        "description": "True only after you have shown the user a summary of exactly what will happen.",
    },
    "confirmation": {
        "type": "boolean",
        "description": "True only after the user explicitly agreed to that summary.",
    },
}

AGENT_TOOLS = [
    {
        "type": "function",
        "function": {
            "name": "getScheduleByDate",
            "description": "Get the schedule for one date, showing which standard slots are available or booked.",
            "parameters": {
                "type": "object",
                "properties": {
                    "date": {"type": "string", "description": "Date in YYYY-MM-DD format."},
                },
                "required": ["date"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "bookSlot",
            "description": (
                "Book one slot. Call first with checkout=false to get a summary, show it to the user, "
                "and call again with checkout=true and confirmation=true only after the user agrees."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "date": {"type": "string", "description": "Date in YYYY-MM-DD format."},
                    "time": {
                        "type": "string",
                        "enum": list(STANDARD_TIMES),
                        "description": "Start time in HH:MM (24h).",
                    },
                    "name": {"type": "string", "description": "Attendee full name."},
                    "email": {"type": "string", "description": "Attendee e-mail for the calendar invite."},
                    "company": {"type": "string", "description": "Attendee company."},
                    "subject": {"type": "string", "description": "Short meeting subject."},
                    **_CONFIRMATION_PROPERTIES,
                },
                "required": ["date", "time", "name", "email", "subject", "checkout", "confirmation"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "cancelBooking",
            "description": (
                "Cancel the booking at one slot. Same confirmation rules as bookSlot: "
                "checkout=true and confirmation=true only after the user agreed."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "date": {"type": "string", "description": "Date in YYYY-MM-DD format."},
                    "time": {
                        "type": "string",
                        "enum": list(STANDARD_TIMES),
                        "description": "Start time in HH:MM (24h).",
                    },
                    **_CONFIRMATION_PROPERTIES,
                },
                "required": ["date", "time", "checkout", "confirmation"],
            },
        },
    },
]


def build_agent_system_prompt(today_iso: str, timezone_name: str) -> str:
    return (
        "You are a scheduling assistant that books and cancels one-hour meetings.\n"
        f"Today is {today_iso}. All times are in {timezone_name}.\n"
        f"Bookable start times are: {', '.join(STANDARD_TIMES)}.\n"
        "Rules:\n"
        "  - Use getScheduleByDate before proposing a time.\n"
        "  - Before booking collect name, email, company and subject.\n"
        "  - Never set confirmation=true unless the user explicitly said yes to your summary.\n"
        "  - Keep answers short and friendly.\n"
    )
