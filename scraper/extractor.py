"""
Token and Form Extractor for Moodle Quiz Pages
==============================================

This module provides pure functions that pull the identifiers the exam workflow
needs out of URLs, raw page text and the question form of a quiz attempt page.
"""

import re
from types import MappingProxyType
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from bs4 import BeautifulSoup

from models.exam_errors import TokenNotFoundError, ValidationError
from models.exam_models import AnswerOption, QuestionData

FORM_FIELD_ALLOW_LIST = ("thispage", "nextpage", "timeup", "mdlscrollto", "slots")
UNANSWERED_SENTINEL = "-1"


def extract_url_param(url: str, name: str) -> Optional[str]:
    """Returns the first value of a query parameter, or None if the URL has no scheme or is malformed."""
    try:
        parts = urlsplit(url)
    except (TypeError, ValueError):
        return None
    if not parts.scheme:
        return None

    values = parse_qs(parts.query, keep_blank_values=True).get(name)
    return values[0] if values else None


def extract_by_regex(text: str, pattern: str, error_message: str) -> str:
    match = re.search(pattern, text)
    if not match or not match.group(1):
        raise TokenNotFoundError(error_message)
    return match.group(1)


def extract_login_token(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    token = soup.find("input", {"name": "logintoken"})
    if not token:
        return None
    return token.get("value")


def parse_question_page(html: str) -> QuestionData:
    """
    Scrapes the hidden and radio inputs of a quiz attempt page.

    Hidden inputs are classified by name:
    - "<questId>:<slot>_:sequencecheck" gives the question id and its sequence check
    - "attempt" and "sesskey" map directly
    - names in FORM_FIELD_ALLOW_LIST are kept as extra form fields

    Radio inputs named "*_answer*" become answer options unless they carry the
    "-1" value Moodle uses for the "clear my choice" entry.
    """
    soup = BeautifulSoup(html, "html.parser")

    quest_id = None
    seq_check = None
    attempt = None
    sesskey = None
    form_fields = {}

    for hidden in soup.select("input[type='hidden']"):
        name = hidden.get("name")
        value = hidden.get("value")
        if not name:
            continue

        if ":sequencecheck" in name:
            quest_id = name.split(":")[0]
            seq_check = value
        elif name == "attempt":
            attempt = value
        elif name == "sesskey":
            sesskey = value
        elif name in FORM_FIELD_ALLOW_LIST:
            form_fields[name] = value if value is not None else ""

    options = []
    for radio in soup.select("input[type='radio']"):
        name = radio.get("name")
        value = radio.get("value")
        # radios without a value attribute have nothing to submit
        if name and "_answer" in name and value is not None and value != UNANSWERED_SENTINEL:
            options.append(AnswerOption(name=name, value=value))

    missing = [
        label for label, present in (
            ("questId", bool(quest_id)),
            ("seqCheck", seq_check is not None),
            ("attempt", bool(attempt)),
            ("sesskey", bool(sesskey)),
            ("options", bool(options)),
        )
        if not present
    ]
    if missing:
        raise ValidationError("Insufficient information on the question page", missing)

    return QuestionData(
        quest_id=quest_id,
        seq_check=seq_check,
        attempt=attempt,
        sesskey=sesskey,
        options=tuple(options),
        form_fields=MappingProxyType(form_fields),
    )
