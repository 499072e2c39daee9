"""
Data Models for Exam Automation
===============================

This module defines the records passed between the steps of the exam workflow.
Every record is a frozen dataclass: a step produces it once and later steps
only read it.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class ExamContext:
    context_id: str
    sess_key: str


@dataclass(frozen=True)
class Attempt:
    attempt_id: str
    redirect_url: str


@dataclass(frozen=True)
class AnswerOption:
    name: str
    value: str


@dataclass(frozen=True)
class QuestionData:
    quest_id: str
    seq_check: str
    attempt: str
    sesskey: str
    options: Tuple[AnswerOption, ...] = ()
    form_fields: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class SubmissionResult:
    redirect_url: str
    attempt_id: str
    sesskey: str
