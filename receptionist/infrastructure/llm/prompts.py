from __future__ import annotations

import json
from datetime import datetime


def build_extract_prompt(
    transcript: list[dict],
    bookings: list[dict],
    now: datetime,
    timezone_name: str,
    services: list[str],
) -> str:
    return (
        "You are the slot extractor for a front-desk booking assistant.\n"
        "Return ONLY valid JSON. No markdown. No extra text.\n"
        "Output schema:\n"
        "{\n"
        "  \"intent\": \"schedule\" | \"confirm\" | \"cancel\" | \"unclear\",\n"
        "  \"guestName\": string | null,\n"
        "  \"phoneNumber\": string | null,\n"
        "  \"email\": string | null,\n"
        "  \"service\": string | null,\n"
        "  \"notes\": string | null,\n"
        "  \"startTime\": ISO-8601 datetime with offset | null,\n"
        "  \"durationMinutes\": integer | null,\n"
        "  \"bookingRef\": string | null,\n"
        "  \"requestedDate\": \"YYYY-MM-DD\" | null,\n"
        "  \"requestedTime\": \"HH:MM\" | null,\n"
        "  \"partOfDay\": \"morning\" | \"afternoon\" | \"evening\" | \"night\" | null\n"
        "}\n"
        "Rules:\n"
        "  - intent describes ONLY the latest user message. Use \"unclear\" when it asks for nothing actionable.\n"
        "  - Fields accumulate across the whole transcript; later statements override earlier ones.\n"
        "  - Never invent values. Use null for anything the caller did not say.\n"
        "  - Resolve relative dates (\"tomorrow\", \"next Friday\") against the current time and timezone below.\n"
        "  - startTime is set ONLY when both a day and a clock time were stated; otherwise fill requestedDate,\n"
        "    requestedTime and partOfDay with whatever is known.\n"
        "  - durationMinutes only when the caller stated a length. Never guess it.\n"
        "  - bookingRef only when the caller quoted a booking id or a prefix of one.\n"
        "  - Prefer a service name from the catalog when the caller's wording matches one.\n"
        "  - Questions about an existing booking (\"is it still on?\") are \"unclear\", not \"confirm\".\n"
        "  - Booked details cannot be changed. A request to move or change a booking is \"unclear\".\n"
        "\n"
        f"Current time: {now.isoformat()}\n"
        f"Business timezone: {timezone_name}\n"
        f"Service catalog: {json.dumps(services)}\n"
        f"Existing bookings: {json.dumps(bookings, ensure_ascii=False)}\n"
        f"Transcript: {json.dumps(transcript, ensure_ascii=False)}\n"
    )
