import asyncio
import logging
import os

import httpx
import streamlit as st

from models.exam_errors import ExamAutomatorError
from scraper.exam_automator import ExamAutomator
from scraper.page_completion import PageCompletionService
from scraper.request_manager import DEFAULT_BASE_URL, RequestManager

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger("exam_runner")


# ==========================================
# ENVIRONMENT & STATE
# ==========================================

def initialize_session_state():
    """Initializes page config and session variables."""
    st.set_page_config(page_title="Moodle Exam Runner", layout="centered")

    if 'results' not in st.session_state:
        st.session_state.results = None


# ==========================================
# UTILS
# ==========================================

def parse_activity_lines(text):
    """Splits a text area into entries, skipping blank lines and # comments."""
    entries = []
    for line in (text or "").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            entries.append(line)
    return entries


async def run_activities_async(settings, exam_urls, page_ids, status_box):
    """
    Marks the resource pages, then completes each exam, strictly one after
    another. A failed exam is reported and the remaining ones still run.
    """
    cookies = {"MoodleSession": settings["session"]} if settings["session"] else None
    results = []

    async with RequestManager(base_url=settings["base_url"], cookies=cookies) as manager:
        if settings["user"] and settings["password"]:
            if not await manager.login(settings["user"], settings["password"]):
                st.error("Login failed! Verify your username and password.")
                return results

        pages = PageCompletionService(manager, logger=logger)
        for page_id in page_ids:
            done = await pages.mark_page_as_completed(page_id)
            status_box.write(f"{'🟢' if done else '🔴'} Page {page_id}")
            results.append({"Activity": f"Page {page_id}", "Result": "Completed" if done else "Error: not marked"})

        automator = ExamAutomator(manager, logger=logger)
        for exam_url in exam_urls:
            status_box.write(f"⚪ {exam_url}")
            try:
                final_url = await automator.complete_exam(exam_url)
            except (ExamAutomatorError, httpx.HTTPError) as e:
                status_box.write(f"🔴 {exam_url}")
                st.error(f"Failed to complete {exam_url}: {e}")
                results.append({"Activity": exam_url, "Result": f"Error: {e}"})
                continue
            status_box.write(f"🟢 {exam_url}")
            results.append({"Activity": exam_url, "Result": final_url})

    return results


def process_activities(settings, exam_urls, page_ids):
    with st.status("Running activities automatically...", expanded=True) as status:
        results = asyncio.run(run_activities_async(settings, exam_urls, page_ids, status))
        st.session_state.results = results

        if results and all(not r["Result"].startswith("Error") for r in results):
            status.update(label="Finished successfully!", state="complete")
        else:
            status.update(label="Some activities could not be completed.", state="error")


# ==========================================
# UI COMPONENTS
# ==========================================

def render_sidebar():
    with st.sidebar:
        st.title("📝 Moodle Exam Runner")
        st.header("Settings")
        base_url = st.text_input("Moodle URL", value=os.getenv("MOODLE_BASE_URL", DEFAULT_BASE_URL))
        user = st.text_input("Moodle User", value=os.getenv("MOODLE_USER", ""))
        pw = st.text_input("Password", type="password", value=os.getenv("MOODLE_PASS", ""))

        st.divider()
        st.caption("Or reuse a browser session instead of logging in.")
        session = st.text_input("MoodleSession cookie", type="password", value=os.getenv("MOODLE_SESSION", ""))

    return {"base_url": base_url, "user": user, "password": pw, "session": session}


def render_results(results):
    st.divider()
    st.subheader("Results")
    for entry in results:
        if entry["Result"].startswith("Error"):
            st.error(f"{entry['Activity']}: {entry['Result']}")
        else:
            st.success(f"{entry['Activity']}: {entry['Result']}")


# ==========================================
# MAIN LOOP
# ==========================================

def run_app():
    initialize_session_state()

    settings = render_sidebar()

    exam_text = st.text_area("Exam URLs (one per line)", height=150)
    page_text = st.text_area("Resource page ids (one per line)", height=100)

    if st.button("🚀 Run"):
        exam_urls = parse_activity_lines(exam_text)
        page_ids = parse_activity_lines(page_text)
        if not exam_urls and not page_ids:
            st.warning("Nothing to run.")
        elif not settings["session"] and not (settings["user"] and settings["password"]):
            st.warning("Provide a username and password or a MoodleSession cookie.")
        else:
            process_activities(settings, exam_urls, page_ids)

    if st.session_state.results:
        render_results(st.session_state.results)
    else:
        st.info("Enter credentials in the sidebar, list the activities and click 'Run'.")


if __name__ == "__main__":
    run_app()
