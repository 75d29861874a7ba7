"""Admin dashboard: headline cards and registration charts."""
import streamlit as st

from eventportal.config import get_settings
from eventportal.services.analytics_service import get_dashboard_metrics
from eventportal.services.api_client import get_api_client
from eventportal.services.event_service import public_link, upcoming_events
from eventportal.ui.components import show_admin_exception
from eventportal.utils.exceptions import ApiError
from eventportal.utils.time_utils import format_datetime


def render_dashboard_page() -> None:
    """Render the admin dashboard."""
    st.markdown("## 📊 Dashboard")

    try:
        metrics = get_dashboard_metrics(get_api_client())
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return
    except Exception as error:
        show_admin_exception(error, "Loading dashboard")
        return

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Registrations", metrics.total_registrations)
    col2.metric("Upcoming Meetings", metrics.upcoming_meetings)
    col3.metric("Registrations (7 days)", metrics.registrations_last_7_days)
    col4.metric("Reports (last month)", metrics.reports_last_month)

    st.markdown("### Attendees")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Users", metrics.users_total, delta=f"+{metrics.users_last_7_days} this week")
    col2.metric("Joins", metrics.joins_total, delta=f"+{metrics.joins_last_7_days} this week")
    col3.metric("Joins (30 days)", metrics.joins_last_30_days)
    col4.metric("Live now", metrics.live_now)

    chart_col1, chart_col2 = st.columns(2, gap="large")
    with chart_col1:
        st.markdown("#### Daily registrations")
        if metrics.daily_labels:
            st.line_chart(
                {"Date": metrics.daily_labels, "Registrations": metrics.daily_counts},
                x="Date",
                y="Registrations",
            )
        else:
            st.info("No registrations yet.")
    with chart_col2:
        st.markdown("#### By speciality")
        if metrics.speciality_labels:
            st.bar_chart(
                {"Speciality": metrics.speciality_labels, "Registrations": metrics.speciality_counts},
                x="Speciality",
                y="Registrations",
            )
        else:
            st.info("No speciality data yet.")

    st.markdown("### Upcoming meetings")
    try:
        events = upcoming_events(get_api_client())
    except ApiError as e:
        st.caption(e.message)
        return

    if not events:
        st.caption("No upcoming meetings.")
    base_url = get_settings().public_base_url
    for event in events:
        title_col, when_col = st.columns([3, 2], gap="small")
        with title_col:
            st.markdown(f"**{event.display_title}**")
            st.caption(public_link(base_url, event.code))
        with when_col:
            st.text(format_datetime(event.start_at))
