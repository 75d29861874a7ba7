"""Per-event analytics: attempt counts, trends, breakdowns and logs."""
import streamlit as st

from eventportal.models.analytics import LOG_STATUSES
from eventportal.services.analytics_service import get_event_analytics
from eventportal.services.api_client import get_api_client
from eventportal.services.event_service import list_events
from eventportal.services.export_service import export_filename, logs_to_csv, mime_type
from eventportal.ui.components import show_admin_exception
from eventportal.utils.exceptions import ApiError
from eventportal.utils.time_utils import format_datetime

STATUS_ICONS = {"SUCCESS": "✅", "REFUSED": "⛔", "ERROR": "❌"}


def _select_event_code():
    """Meeting picker; the choice survives page switches."""
    try:
        events = list_events(get_api_client())
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return None

    if not events:
        st.info("📝 No meetings yet")
        return None

    labels = {event.code: f"{event.display_title} ({event.code})" for event in events}
    codes = list(labels)
    current = st.session_state.get("analytics_code")
    index = codes.index(current) if current in codes else 0

    code = st.selectbox("Meeting", codes, index=index, format_func=labels.get)
    st.session_state.analytics_code = code
    return code


def render_analytics_page() -> None:
    """Render analytics for the selected meeting."""
    st.markdown("## 📈 Analytics")

    code = _select_event_code()
    if not code:
        return

    try:
        analytics = get_event_analytics(get_api_client(), code)
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return
    except Exception as error:
        show_admin_exception(error, "Loading analytics")
        return

    trend, positive = analytics.success_trend()
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Registrations", analytics.registrations_total)
    col2.metric("Join attempts", analytics.attempts_total)
    col3.metric(
        "Success rate",
        f"{analytics.success_rate()}%",
        delta=f"{trend}%" if positive else f"-{trend}%",
    )
    col4.metric("Refused / Errors", f"{analytics.attempts_refused} / {analytics.attempts_error}")

    st.markdown("#### Daily join attempts")
    if analytics.daily_labels:
        st.bar_chart(
            {
                "Date": analytics.daily_labels,
                "Success": analytics.daily_success,
                "Refused": analytics.daily_refused,
                "Error": analytics.daily_error,
            },
            x="Date",
            y=["Success", "Refused", "Error"],
        )
    else:
        st.caption("No join attempts recorded.")

    spec_col, hosp_col = st.columns(2, gap="large")
    with spec_col:
        st.markdown("#### By speciality")
        if analytics.speciality:
            st.bar_chart(
                {
                    "Speciality": [name for name, _ in analytics.speciality],
                    "Registrations": [count for _, count in analytics.speciality],
                },
                x="Speciality",
                y="Registrations",
            )
        else:
            st.caption("No data.")
    with hosp_col:
        st.markdown("#### Top hospitals")
        if analytics.hospitals_top10:
            for name, count in analytics.hospitals_top10:
                st.text(f"{name}: {count}")
        else:
            st.caption("No data.")

    st.markdown("#### Recent join attempts")
    status = st.selectbox("Status", ["All", *LOG_STATUSES], key="analytics_status")
    logs = analytics.logs_with_status(None if status == "All" else status)

    st.download_button(
        "⬇️ Download logs CSV",
        data=logs_to_csv(logs),
        file_name=export_filename(f"join_logs_{code}", "csv"),
        mime=mime_type("csv"),
        disabled=not logs,
    )

    if not logs:
        st.caption("No attempts with this status.")
    for log in logs:
        time_col, status_col, message_col, ip_col = st.columns([1.6, 1, 3, 1.2], gap="small")
        time_col.text(format_datetime(log.occurred_at, "%m/%d/%Y, %I:%M:%S %p"))
        status_col.text(f"{STATUS_ICONS.get(log.status, '')} {log.status}")
        message_col.text(log.message or "N/A")
        ip_col.text(log.ip or "N/A")
