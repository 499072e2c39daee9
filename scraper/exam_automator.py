"""
ExamAutomator Module
====================

Runs a quiz attempt from start to finish, one request at a time:
1. Read the exam page for the course module id and session key
2. Start an attempt
3. Scrape the question form of the attempt page
4. Submit one of the visible answers
5. Finish the attempt and return where Moodle redirects
"""

import logging
import random
from typing import Optional

from models.exam_models import Attempt, ExamContext, QuestionData, SubmissionResult
from scraper.extractor import extract_by_regex, extract_url_param, parse_question_page
from scraper.request_manager import RequestManager

CONTEXT_ID_PATTERN = r'contextInstanceId":"?(\d+)'
SESSKEY_PATTERN = r'sesskey":"([^"]+)'
ATTEMPT_ID_PATTERN = r"attempt=(\d+)"
FINISH_ATTEMPT_LABEL = "Finalizar tentativa ..."


class ExamAutomator:
    def __init__(self, request_manager: RequestManager, rng: Optional[random.Random] = None,
                 logger: Optional[logging.Logger] = None):
        self.request_manager = request_manager
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(__name__)

    async def fetch_exam_page(self, exam_url: str) -> ExamContext:
        response = await self.request_manager.fetch_with_retry(exam_url)
        page_text = response.text

        context_id = extract_url_param(exam_url, "id") or extract_by_regex(
            page_text, CONTEXT_ID_PATTERN, "Course module id not found")
        sess_key = extract_by_regex(page_text, SESSKEY_PATTERN, "Sesskey not found")
        return ExamContext(context_id=context_id, sess_key=sess_key)

    async def start_exam_attempt(self, context_id: str, sess_key: str) -> Attempt:
        url = self.request_manager.create_url("/mod/quiz/startattempt.php")
        response = await self.request_manager.fetch_with_retry(
            url, method="POST", data={"cmid": context_id, "sesskey": sess_key})

        redirect_url = str(response.url)
        attempt_id = extract_by_regex(redirect_url, ATTEMPT_ID_PATTERN, "Attempt id not found")
        return Attempt(attempt_id=attempt_id, redirect_url=redirect_url)

    async def extract_question_info(self, question_url: str) -> QuestionData:
        response = await self.request_manager.fetch_with_retry(question_url)
        return parse_question_page(response.text)

    async def submit_answer(self, question_data: QuestionData, context_id: str) -> SubmissionResult:
        """
        Posts a uniformly chosen option as the answer and asks Moodle to move on
        to the attempt summary. The form is sent as multipart, like the browser does.
        """
        selected = self.rng.choice(question_data.options)
        self.logger.info("Question %s: answering %s=%s", question_data.quest_id, selected.name, selected.value)

        fields = [
            (f"{question_data.quest_id}:1_:flagged", "0"),
            (f"{question_data.quest_id}:1_:sequencecheck", question_data.seq_check),
            (selected.name, selected.value),
            ("next", FINISH_ATTEMPT_LABEL),
            ("attempt", question_data.attempt),
            ("sesskey", question_data.sesskey),
            ("slots", "1"),
        ]
        fields.extend(question_data.form_fields.items())

        url = self.request_manager.create_url(f"/mod/quiz/processattempt.php?cmid={context_id}")
        # (None, value) parts make httpx send plain multipart fields instead of file uploads
        response = await self.request_manager.fetch_with_retry(
            url, method="POST", files=[(name, (None, value)) for name, value in fields])

        return SubmissionResult(
            redirect_url=str(response.url),
            attempt_id=question_data.attempt,
            sesskey=question_data.sesskey
        )

    async def finish_exam_attempt(self, attempt_id: str, context_id: str, sesskey: str) -> str:
        summary_url = self.request_manager.create_url(
            "/mod/quiz/summary.php", {"attempt": attempt_id, "cmid": context_id})
        await self.request_manager.fetch_with_retry(summary_url)

        payload = {
            "attempt": attempt_id,
            "finishattempt": "1",
            "timeup": "0",
            "slots": "",
            "cmid": context_id,
            "sesskey": sesskey
        }
        url = self.request_manager.create_url("/mod/quiz/processattempt.php")
        response = await self.request_manager.fetch_with_retry(url, method="POST", data=payload)
        return str(response.url)

    async def complete_exam(self, exam_url: str) -> str:
        """Runs every step in order and returns the URL Moodle lands on after finishing."""
        try:
            context = await self.fetch_exam_page(exam_url)
            self.logger.info("Exam %s: cmid=%s", exam_url, context.context_id)

            attempt = await self.start_exam_attempt(context.context_id, context.sess_key)
            self.logger.info("Exam %s: started attempt %s", exam_url, attempt.attempt_id)

            question_data = await self.extract_question_info(attempt.redirect_url)
            result = await self.submit_answer(question_data, context.context_id)

            final_url = await self.finish_exam_attempt(result.attempt_id, context.context_id, result.sesskey)
            self.logger.info("Exam %s: finished, redirected to %s", exam_url, final_url)
            return final_url
        except Exception:
            self.logger.exception("Failed to complete exam %s", exam_url)
            raise
