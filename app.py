"""
TubeAcademy - YouTube-backed e-learning catalog

Streamlit application for browsing courses, watching videos, and tracking
progress. Catalog data is cached locally; progress lives on this machine.

Usage:
    streamlit run app.py
"""

import logging
import time

import streamlit as st

from tubeacademy.classroom import PlaybackController, PolledScheduler
from tubeacademy.client import CatalogAPIError
from tubeacademy.config import load_settings
from tubeacademy.context import AppContext
from tubeacademy.schemas import Video
from tubeacademy.viewer import (
    default_export_filename,
    export_course_csv,
    format_duration,
    format_time,
    status_marker,
)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

st.set_page_config(
    page_title="TubeAcademy",
    page_icon="🎓",
    layout="wide",
    initial_sidebar_state="expanded",
)

DARK_THEME_CSS = """
<style>
    .stApp, [data-testid="stSidebar"] { background-color: #0e1117; color: #fafafa; }
    .stApp h1, .stApp h2, .stApp h3, .stApp p, .stApp label { color: #fafafa; }
</style>
"""


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    if "context" not in st.session_state:
        settings = load_settings()
        logging.basicConfig(
            level=getattr(logging, settings.log_level.upper(), logging.INFO),
            format="%(asctime)s - %(levelname)s - %(message)s"
        )
        context = AppContext.from_settings(settings)
        context.catalog.subscribe(lambda: st.session_state.pop("search_results", None))
        st.session_state.context = context

    if "view_mode" not in st.session_state:
        st.session_state.view_mode = "home"  # home, courses, course, dashboard

    if "course_slug" not in st.session_state:
        st.session_state.course_slug = None

    if "video_index" not in st.session_state:
        st.session_state.video_index = 0


def ctx() -> AppContext:
    return st.session_state.context


def t() -> dict[str, str]:
    return ctx().preferences.translations()


def lang() -> str:
    return ctx().preferences.language


def open_course(slug: str, video_index: int = 0):
    st.session_state.view_mode = "course"
    st.session_state.course_slug = slug
    st.session_state.video_index = video_index
    st.rerun()


def apply_theme():
    if ctx().preferences.theme == "dark":
        st.markdown(DARK_THEME_CSS, unsafe_allow_html=True)


def get_playback(course_id: int, videos: list[Video]) -> PlaybackController:
    """One controller per open course, kept across reruns; due timers fire here."""
    playback = st.session_state.get("playback")
    if playback is None or playback.course_id != course_id:
        close_playback()
        playback = ctx().playback(
            course_id,
            videos,
            scheduler=PolledScheduler(),
            on_video_change=lambda i: st.session_state.update(video_index=i),
        )
        st.session_state.playback = playback
    playback.scheduler.run_due()
    return playback


def close_playback():
    playback = st.session_state.pop("playback", None)
    if playback is not None:
        playback.close()


def render_load_error(error: CatalogAPIError):
    """Retry-capable error state for primary content fetches."""
    st.error(f"{t()['load_failed']} ({error})")
    if st.button(t()["retry"]):
        st.rerun()


# -----------------------------------------------------------------------------
# Sidebar: Navigation, Search, Preferences
# -----------------------------------------------------------------------------

def render_sidebar():
    """Render the sidebar with navigation, search, and preferences."""
    st.sidebar.title("🎓 TubeAcademy")
    tr = t()

    labels = {"home": tr["home"], "courses": tr["courses"], "dashboard": tr["dashboard"]}
    st.sidebar.radio(
        "View",
        list(labels),
        format_func=labels.get,
        key="nav",
        on_change=lambda: st.session_state.update(view_mode=st.session_state.nav),
        label_visibility="collapsed",
    )

    st.sidebar.divider()
    render_search()

    st.sidebar.divider()
    col1, col2 = st.sidebar.columns(2)
    with col1:
        if st.button(f"🌐 {lang().upper()}", help=tr["language"], use_container_width=True):
            ctx().preferences.set_language("tr" if lang() == "en" else "en")
            st.rerun()
    with col2:
        if st.button("🌓", help=tr["theme"], use_container_width=True):
            ctx().preferences.toggle_theme()
            st.rerun()

    if st.sidebar.button(tr["refresh_data"], use_container_width=True):
        ctx().catalog.refresh()
        st.rerun()


def render_search():
    """Search box; submitting the form stands in for keystroke debouncing."""
    tr = t()
    with st.sidebar.form("search", clear_on_submit=False):
        query = st.text_input(tr["search"], placeholder=tr["search_placeholder"])
        submitted = st.form_submit_button(tr["search"])

    if submitted:
        try:
            st.session_state.search_results = ctx().search.search(query, lang=lang())
        except CatalogAPIError as e:
            st.sidebar.error(str(e))
            st.session_state.search_results = []

    results = st.session_state.get("search_results")
    if results is None:
        return
    if not results:
        st.sidebar.caption(tr["no_results"])
        return

    for result in results:
        label = result.title.get(lang())
        if result.type == "video":
            label = f"↳ ▶ {label}"
        caption = result.category_name or result.type
        if st.sidebar.button(f"{label} · {caption}", key=f"search_{result.type}_{result.id}"):
            select_search_result(result)


def select_search_result(result):
    st.session_state.search_results = None
    slug = result.course_slug
    if slug is None:
        st.warning(result.url)
        return
    video_index = 0
    if result.type == "video" and result.course_id is not None:
        videos = ctx().catalog.cached_videos(result.course_id) or []
        for i, video in enumerate(sorted(videos, key=lambda v: v.sequence_order)):
            if video.id == result.id:
                video_index = i
    open_course(slug, video_index)


# -----------------------------------------------------------------------------
# Home & Dashboard
# -----------------------------------------------------------------------------

def render_home_view():
    """Render progress overview and categories."""
    tr = t()
    try:
        courses = ctx().catalog.courses()
        categories = ctx().catalog.categories()
    except CatalogAPIError as e:
        render_load_error(e)
        return

    stats = ctx().progress.get_completion_stats(courses)
    total_videos = sum(c.total_videos for c in courses)
    success_rate = round(stats["completed_videos"] / total_videos * 100) if total_videos else 0

    st.title(tr["your_progress"])
    col1, col2, col3 = st.columns(3)
    col1.metric(tr["watched_videos"], stats["watched_videos"])
    col2.metric(tr["completed_videos"], stats["completed_videos"])
    col3.metric(tr["success_rate"], f"{success_rate}%")
    st.progress(min(success_rate, 100) / 100)

    st.subheader(tr["categories"])
    for category in categories:
        st.markdown(f"**{category.title.get(lang())}**")


def render_dashboard_view():
    """Render per-course completion."""
    tr = t()
    try:
        courses = ctx().catalog.courses()
    except CatalogAPIError as e:
        render_load_error(e)
        return

    stats = ctx().progress.get_completion_stats(courses)
    st.title(tr["dashboard"])
    st.metric(tr["average_progress"], f"%{stats['average_progress']}")

    for course in courses:
        course_progress = stats["courses"][course.id]
        st.markdown(f"**{course.title.get(lang())}** · %{course_progress.progress_percent}")
        st.progress(course_progress.progress_percent / 100)


# -----------------------------------------------------------------------------
# Courses
# -----------------------------------------------------------------------------

def render_courses_view():
    """Render course list grouped by category."""
    tr = t()
    try:
        courses = ctx().catalog.courses()
        categories = ctx().catalog.categories()
    except CatalogAPIError as e:
        render_load_error(e)
        return

    st.title(tr["courses"])
    names = {c.id: c.title.get(lang()) for c in categories}
    for course in courses:
        with st.container(border=True):
            st.markdown(f"### {course.title.get(lang())}")
            st.caption(f"{names.get(course.category_id, '')} · {course.total_videos} {tr['total_videos']}")
            st.write(course.description.get(lang()))
            if st.button(tr["view_course"], key=f"course_{course.id}"):
                open_course(course.slug)


def render_course_view():
    """Render one course: player, video list, documents."""
    tr = t()
    slug = st.session_state.course_slug
    try:
        course = ctx().catalog.course(slug)
        if course is None:
            st.warning(tr["not_found"])
            return
        videos = sorted(ctx().catalog.videos(course.id), key=lambda v: v.sequence_order)
        documents = ctx().catalog.documents(course.id)
    except CatalogAPIError as e:
        render_load_error(e)
        return

    st.title(course.title.get(lang()))

    if not ctx().access.is_unlocked(course):
        render_login(course)
        return

    if not videos:
        st.info(tr["no_results"])
        return

    playback = get_playback(course.id, videos)
    index = min(st.session_state.video_index, len(videos) - 1)
    video = videos[index]
    progress = ctx().progress
    if playback.active_index != index:
        playback.video_activated(index)
        # st.video fires no progress events; opening the video counts as watching it
        progress.mark_video_watched(course.id, video.id)

    st.video(video.youtube_url, start_time=int(playback.session.start_position))
    st.subheader(video.title.get(lang()))

    if playback.is_advance_pending:
        st.info(f"{tr['up_next']}: {videos[index + 1].title.get(lang())}")
        time.sleep(ctx().settings.auto_advance_delay)
        st.rerun()
    elif not progress.is_video_complete(course.id, video.id):
        if st.button(tr["mark_complete"], type="primary"):
            # st.video reports no position; the button stands in for the ended signal
            playback.player_ended()
            st.rerun()
    else:
        st.success(tr["completed"])

    summary = progress.get_course_progress(course.id, course.total_videos or len(videos), videos)
    st.caption(
        f"{tr['total_duration']}: {format_time(summary.total_seconds, lang())} | "
        f"{tr['watched_duration']}: {format_time(summary.watched_seconds, lang())} | "
        f"{tr['remaining_duration']}: {format_time(summary.remaining_seconds, lang())}"
    )

    st.divider()
    st.subheader(tr["course_content"])
    for i, v in enumerate(videos):
        percent = progress.get_video_percent(course.id, v.id, v.duration)
        status = progress.get_video_progress(course.id, v.id).status
        marker = "▶" if i == index else status_marker(status)
        label = f"{marker} {i + 1}. {v.title.get(lang())} · {format_duration(v.duration)} · {percent}%"
        if st.button(label, key=f"video_{v.id}", use_container_width=True):
            st.session_state.video_index = i
            st.rerun()

    st.download_button(
        tr["export_csv"],
        data=export_course_csv(course, videos, progress, lang=lang()).encode("utf-8-sig"),
        file_name=default_export_filename(course),
        mime="text/csv",
    )

    if documents:
        st.divider()
        st.subheader(tr["documents"])
        for doc in documents:
            st.markdown(f"- [{doc.title.get(lang())}]({doc.file_url}) ({doc.file_type})")


def render_login(course):
    """Login form for protected courses."""
    tr = t()
    st.info(tr["login_required"])
    with st.form("login"):
        username = st.text_input(tr["username"])
        password = st.text_input(tr["password"], type="password")
        submitted = st.form_submit_button(tr["login"])
    if submitted:
        try:
            ok = ctx().access.unlock(course, username, password)
        except CatalogAPIError as e:
            st.error(str(e))
            return
        if ok:
            st.rerun()
        st.error(tr["login_failed"])


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()
    apply_theme()
    render_sidebar()

    if st.session_state.view_mode != "course":
        close_playback()

    if st.session_state.view_mode == "home":
        render_home_view()
    elif st.session_state.view_mode == "courses":
        render_courses_view()
    elif st.session_state.view_mode == "course":
        render_course_view()
    elif st.session_state.view_mode == "dashboard":
        render_dashboard_view()


if __name__ == "__main__":
    main()
