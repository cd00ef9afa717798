"""Streamlit UI for Job Copilot."""
from __future__ import annotations

import sys
from pathlib import Path
from urllib.parse import urlparse

import streamlit as st

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from jobcopilot import view
from jobcopilot.client import AIClient
from jobcopilot.config import Settings, load_settings
from jobcopilot.cover_letter import generate_snippet
from jobcopilot.discovery import find_jobs
from jobcopilot.errors import JobCopilotError
from jobcopilot.follow_up import generate_follow_up
from jobcopilot.log import get_logger
from jobcopilot.models import (
    EXPERIENCE_LEVELS,
    ApplicationStatus,
    JobPosting,
    Profile,
    SearchFilters,
)
from jobcopilot.resume_parser import (
    UPLOAD_EXTENSIONS,
    detect_media_type,
    encode_upload,
    extract_profile,
)
from jobcopilot.tracker import ApplicationLedger

log = get_logger(__name__)

# Fatal before anything renders when OPENAI_API_KEY is missing.
SETTINGS: Settings = load_settings()

# ── Constants ────────────────────────────────────────────────────────────

STATUS_OPTIONS: list[str] = [s.value for s in ApplicationStatus]

STATUS_ICONS: dict[ApplicationStatus, str] = {
    ApplicationStatus.WISHLIST: "🟣",
    ApplicationStatus.APPLIED: "🔵",
    ApplicationStatus.INTERVIEWING: "🟡",
    ApplicationStatus.OFFER: "🟢",
    ApplicationStatus.REJECTED: "🔴",
}

_GLASS_CSS = """
<style>
[data-testid="stAppViewContainer"] {
    background: linear-gradient(135deg, #e8eaf6 0%, #e0f2f1 100%);
}
[data-testid="stSidebar"] {
    background: rgba(255,255,255,0.55);
    backdrop-filter: blur(16px);
    -webkit-backdrop-filter: blur(16px);
}
[data-testid="stMetric"] {
    background: rgba(255,255,255,0.6);
    padding: 0.75rem 1rem;
    border-radius: 12px;
    border: 1px solid rgba(255,255,255,0.4);
}
.job-meta { color: #555; font-size: 0.9rem; }
.visa-badge {
    padding: 0.1rem 0.5rem; border-radius: 8px;
    background: rgba(39,174,96,0.12); color: #1e8449; font-size: 0.8rem;
}
</style>
"""

# ── Helpers ──────────────────────────────────────────────────────────────


@st.cache_resource
def _client() -> AIClient:
    return AIClient(SETTINGS)


def _ledger() -> ApplicationLedger:
    if "ledger" not in st.session_state:
        st.session_state["ledger"] = ApplicationLedger()
    return st.session_state["ledger"]


def _profile() -> Profile | None:
    return st.session_state.get("profile")


def _jobs() -> list[JobPosting]:
    return st.session_state.get("jobs", [])


def _fail(action: str, exc: Exception, *, page: str | None = None) -> None:
    """Short toast now; with ``page``, a banner on that page until its next attempt."""
    message = f"{action}: {exc}"
    log.error(message)
    st.toast(message, icon="⚠️")
    if page is not None:
        view.set_banner(st.session_state, page, message)


def _show_banner(page: str) -> None:
    message = view.banner(st.session_state, page)
    if message:
        st.error(message)


def _select_key(job_id: str) -> str:
    return f"select_{job_id}"


def _clear_selection() -> None:
    for key in [k for k in st.session_state if str(k).startswith("select_")]:
        del st.session_state[key]


def _toggle_all() -> None:
    value = st.session_state.get("select_all_box", False)
    for job in _jobs():
        st.session_state[_select_key(job.id)] = value


def _selected_jobs() -> list[JobPosting]:
    return [j for j in _jobs() if st.session_state.get(_select_key(j.id))]


def _host(uri: str) -> str:
    return urlparse(uri).hostname or uri


@st.dialog("Generated text", width="large")
def _show_text(title: str, content: str) -> None:
    st.markdown(f"**{title}**")
    st.text_area(title, value=content, height=260, label_visibility="collapsed")


# ── Page: Upload ─────────────────────────────────────────────────────────


def page_upload() -> None:
    st.header("Job Copilot")
    st.write("Upload your resume to extract your profile, then find matching live job postings.")
    _show_banner("upload")

    uploaded = st.file_uploader(
        "Drop your resume here (image or PDF)",
        type=UPLOAD_EXTENSIONS,
        accept_multiple_files=False,
    )
    if uploaded is None:
        if _profile() is not None:
            st.info("A profile is loaded — head to **Profile** or **Job Finder**.")
        return

    if st.button("Parse Resume", type="primary", use_container_width=True):
        view.clear_banner(st.session_state, "upload")
        with st.spinner("Parsing your resume…"):
            try:
                media = detect_media_type(uploaded.name, uploaded.type)
                profile = extract_profile(_client(), media, encode_upload(uploaded.getvalue()))
            except JobCopilotError as exc:
                _fail("Failed to parse resume", exc, page="upload")
                st.rerun()
            else:
                st.session_state["profile"] = profile
                st.session_state["jobs"] = []
                st.session_state["sources"] = []
                _clear_selection()
                st.toast("Resume parsed successfully!", icon="✅")
                st.switch_page(PAGES["finder"])


# ── Page: Profile ────────────────────────────────────────────────────────


def page_profile() -> None:
    profile = _profile()
    if profile is None:
        st.warning("No profile yet — upload your resume first.")
        return

    c = profile.contact
    st.header(c.name or "Your Profile")
    st.markdown(f"✉️ {c.email}  ·  📞 {c.phone}  ·  📍 {c.location}")
    st.write(profile.summary)

    st.subheader("Experience")
    for exp in profile.experience:
        with st.container(border=True):
            st.markdown(f"**{exp.role}** — {exp.company}")
            st.caption(f"{exp.location} · {exp.dates}")
            st.markdown("\n".join(f"- {line}" for line in exp.description))

    st.subheader("Education")
    for edu in profile.education:
        with st.container(border=True):
            st.markdown(f"**{edu.degree}** — {edu.institution}")
            st.caption(f"{edu.location} · {edu.dates}")

    st.subheader("Skills")
    c1, c2, c3 = st.columns(3)
    c1.markdown("**Programming**\n\n" + ", ".join(profile.skills.programming))
    c2.markdown("**Technical**\n\n" + ", ".join(profile.skills.technical))
    c3.markdown("**Languages**\n\n" + ", ".join(profile.skills.languages))


# ── Page: Job Finder ─────────────────────────────────────────────────────


def _search(filters: SearchFilters) -> None:
    profile = _profile()
    view.clear_banner(st.session_state, "finder")
    st.session_state["jobs"] = []
    st.session_state["sources"] = []
    _clear_selection()
    with st.spinner("Searching live job boards with your filters…"):
        try:
            result = find_jobs(_client(), profile, filters)
        except JobCopilotError as exc:
            _fail("Failed to find jobs", exc, page="finder")
            return
    st.session_state["jobs"] = result.jobs
    st.session_state["sources"] = result.sources
    st.toast(f"Found {len(result.jobs)} job opportunities!", icon="✅")


def _apply_one(job: JobPosting) -> None:
    with st.spinner("Generating cover letter snippet…"):
        try:
            snippet = generate_snippet(_client(), _profile(), job)
        except JobCopilotError as exc:
            _fail("Could not prepare application", exc)
            return
    if _ledger().apply(job, snippet) is not None:
        st.toast(f"Application prepared for {job.title}!", icon="✅")


def _bulk_apply(jobs: list[JobPosting]) -> None:
    ledger = _ledger()
    profile = _profile()
    bar = st.progress(0.0, text=f"Starting bulk apply for {len(jobs)} jobs…")

    def progress(index: int, total: int, job: JobPosting) -> None:
        bar.progress((index - 1) / max(total, 1), text=f"[{index}/{total}] Preparing application for {job.title}…")

    result = ledger.bulk_apply(jobs, lambda job: generate_snippet(_client(), profile, job), progress)
    bar.empty()
    for job, reason in result.failed:
        st.toast(f"Failed to apply for {job.title}. Skipping.", icon="⚠️")
        log.debug("Bulk apply skip reason for %s: %s", job.id, reason)
    if result.succeeded:
        st.toast(f"Successfully applied to {result.succeeded} of {result.attempted} jobs!", icon="✅")
    elif result.attempted:
        st.toast("Bulk apply failed for all selected jobs.", icon="❌")


def _queue_bulk_apply() -> None:
    # Runs as a button callback, before the checkboxes are rebuilt.
    view.queue_bulk_apply(st.session_state, [j.id for j in _selected_jobs()])
    _clear_selection()


def _job_card(job: JobPosting, *, locked: bool = False) -> None:
    ledger = _ledger()
    applied = ledger.has(job.id)
    with st.container(border=True):
        c_sel, c_body, c_score = st.columns([0.06, 0.74, 0.2])
        with c_sel:
            st.checkbox("Select", key=_select_key(job.id), disabled=locked, label_visibility="collapsed")
        with c_body:
            st.markdown(f"#### {job.title}")
            st.markdown(view.job_meta_html(job), unsafe_allow_html=True)
            st.write(job.description)
        with c_score:
            st.metric("Relevance", f"{job.relevance_score:.0f}%")
            if job.has_web_url:
                st.link_button("View posting", job.url, use_container_width=True)

        selected = bool(st.session_state.get(_select_key(job.id)))
        label = "✅ Applied" if applied else "Prepare Application"
        if st.button(
            label,
            key=f"apply_{job.id}",
            disabled=locked or applied or selected,
            help="Deselect to apply individually, or use Bulk Apply" if selected else None,
            use_container_width=True,
        ):
            _apply_one(job)
            st.rerun()


def page_finder() -> None:
    st.header("Job Finder")
    profile = _profile()
    if profile is None:
        st.warning("No profile yet — upload your resume first.")
        return
    _show_banner("finder")
    jobs = _jobs()
    if not jobs:
        view.take_bulk_queue(st.session_state, jobs)
    # A queued bulk apply runs at the end of this pass; nothing may rerun the script before then.
    locked = view.bulk_pending(st.session_state)

    with st.form("filters"):
        c1, c2 = st.columns(2)
        with c1:
            country = st.text_input("Country", placeholder="e.g., USA, Germany")
            remote = st.checkbox("Fully Remote")
        with c2:
            level = st.selectbox("Experience level", EXPERIENCE_LEVELS, index=0)
            visa = st.checkbox("Visa Sponsorship")
        submitted = st.form_submit_button("Find Jobs", type="primary", disabled=locked, use_container_width=True)

    if submitted:
        _search(SearchFilters(country=country, remote_only=remote, visa_sponsorship=visa, experience_level=level))
        st.rerun()

    sources = st.session_state.get("sources", [])
    if sources:
        st.caption("Sources")
        st.markdown(
            "  ·  ".join(f"[{s.title or _host(s.uri)}]({s.uri})" for s in sources)
        )

    if not jobs:
        st.info("No jobs yet. Set your filters and click **Find Jobs**.")
        return

    progress_slot = st.empty()
    selected = _selected_jobs()
    c1, c2 = st.columns([0.6, 0.4])
    with c1:
        st.checkbox("Select All", key="select_all_box", on_change=_toggle_all, disabled=locked)
        st.caption(f"{len(selected)} selected")
    with c2:
        st.button(
            f"Bulk Apply ({len(selected)})",
            type="primary",
            disabled=locked or not selected,
            on_click=_queue_bulk_apply,
            use_container_width=True,
        )

    for job in jobs:
        _job_card(job, locked=locked)

    if locked:
        with progress_slot.container():
            _bulk_apply(view.take_bulk_queue(st.session_state, jobs))
        st.rerun()


# ── Page: Tracker ────────────────────────────────────────────────────────


def _on_status_change(job_id: str) -> None:
    _ledger().set_status(job_id, st.session_state[f"status_{job_id}"])


def page_tracker() -> None:
    st.header("Application Tracker")
    ledger = _ledger()
    if not len(ledger):
        st.info("No applications tracked yet. Prepare one from the **Job Finder**.")
        return

    counts = ledger.counts_by_status()
    cols = st.columns(len(counts))
    for col, (status, n) in zip(cols, counts.items()):
        col.metric(f"{STATUS_ICONS[status]} {status.value}", n)

    import pandas as pd

    df = pd.DataFrame(
        [
            {
                "title": app.job.title,
                "company": app.job.company,
                "status": app.status.value,
                "applied": app.applied_date,
                "url": app.job.url if app.job.has_web_url else None,
            }
            for app in ledger
        ]
    )
    st.dataframe(
        df,
        use_container_width=True,
        column_config={"url": st.column_config.LinkColumn("Posting")},
        hide_index=True,
    )

    st.divider()
    for app in ledger:
        job = app.job
        with st.container(border=True):
            c1, c2, c3, c4 = st.columns([0.4, 0.2, 0.2, 0.2])
            c1.markdown(f"**{job.title}**  \n{job.company} · applied {app.applied_date}")
            c2.selectbox(
                "Status",
                STATUS_OPTIONS,
                index=STATUS_OPTIONS.index(app.status.value),
                key=f"status_{job.id}",
                on_change=_on_status_change,
                args=(job.id,),
                label_visibility="collapsed",
            )
            if c3.button("View snippet", key=f"snippet_{job.id}", disabled=not app.cover_letter_snippet):
                _show_text("Generated Cover Letter Snippet", app.cover_letter_snippet or "")
            if c4.button("Follow-up", key=f"follow_{job.id}"):
                with st.spinner("Drafting follow-up email…"):
                    try:
                        email = generate_follow_up(_client(), job)
                    except JobCopilotError as exc:
                        _fail("Could not generate follow-up email", exc)
                    else:
                        _show_text("Generated Follow-Up Email", email)


# ── Main ─────────────────────────────────────────────────────────────────


def _inject_css() -> None:
    st.markdown(_GLASS_CSS, unsafe_allow_html=True)


def _sidebar_status() -> None:
    with st.sidebar:
        st.divider()
        profile = _profile()
        st.markdown("**Status**")
        st.markdown(("✅" if profile else "⬜") + "  Resume parsed")
        st.markdown(f"🔎  {len(_jobs())} job(s) found")
        st.markdown(f"📋  {len(_ledger())} application(s) tracked")


def _wrap(page_fn):
    def run() -> None:
        _inject_css()
        _sidebar_status()
        page_fn()

    run.__name__ = page_fn.__name__
    return run


st.set_page_config(page_title="Job Copilot", page_icon="💼", layout="wide")

PAGES = {
    "upload": st.Page(_wrap(page_upload), title="Upload", icon="📄", url_path="upload", default=True),
    "profile": st.Page(_wrap(page_profile), title="Profile", icon="👤", url_path="profile"),
    "finder": st.Page(_wrap(page_finder), title="Job Finder", icon="🔎", url_path="finder"),
    "tracker": st.Page(_wrap(page_tracker), title="Tracker", icon="📋", url_path="tracker"),
}

nav = st.navigation(list(PAGES.values()))
nav.run()
