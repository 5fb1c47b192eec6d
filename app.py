# app.py
# Streamlit habit timer: daily stretching / skill-practice allowance -> countdown -> history graph
#
# Run:
#   pip install -e .
#   streamlit run app.py
#
# Notes:
# - Each day grants every activity its "minutes per day"; unused time carries over.
# - Sessions of 5 seconds or less are not logged.
# - State lives in useful.db next to this file unless HABIT_TIMER_DB says otherwise.

import time

import plotly.express as px
import streamlit as st

from habit_timer.actions import should_record
from habit_timer.config import ADD_MINUTES_STEP, TICK_INTERVAL, setup_logging
from habit_timer.models import ActivityKind
from habit_timer.series import DEFAULT_WINDOW, WINDOWS, to_frame, window_days
from habit_timer.session import HabitSession


@st.cache_resource
def get_session() -> HabitSession:
    setup_logging()
    session = HabitSession()
    session.load()
    return session


# ---------- Streamlit ----------
st.set_page_config(page_title="Habit Timer", layout="centered")
session = get_session()

st.title("Habit Timer")

if session.load_error is not None:
    st.error(f"Saved data could not be read: {session.load_error}")
    st.caption("Nothing will be saved until the unreadable data is discarded.")
    if st.button("Discard saved data and start fresh"):
        session.discard_unreadable_data()
        st.rerun()

page = st.sidebar.radio("Navigate", ["Timer", "Graph", "Settings"], index=0)
kind = st.sidebar.selectbox("Activity", list(ActivityKind), format_func=lambda k: k.label)

session.update()

# ---------- TIMER ----------
if page == "Timer":
    st.subheader(kind.label)
    running = session.is_running(kind)

    if st.button("Stop" if running else "Start", type="primary"):
        if running:
            session.stop()
        else:
            session.start(kind)
        st.rerun()

    display = st.empty()
    display.markdown(f"# Remaining: `{session.display(kind)}`")

    # Redraw until the countdown stops; pressing Stop reruns the script.
    if running:
        while session.is_running(kind):
            display.markdown(f"# Remaining: `{session.display(kind)}`")
            time.sleep(TICK_INTERVAL)
        st.rerun()

    last = session.last_finished
    if last is not None and last.kind is kind:
        if last.completed:
            st.info(f"Time's up for {kind.label.lower()}!")
        st.caption(f"Last session: {last.elapsed_seconds}s" + ("" if should_record(last.elapsed_seconds) else " (too short to log)"))

# ---------- GRAPH ----------
elif page == "Graph":
    st.subheader(f"Your {kind.label.lower()}")
    window_name = st.radio("Show", list(WINDOWS), index=list(WINDOWS).index(DEFAULT_WINDOW), horizontal=True)
    days = window_days(window_name)

    points = session.series()[kind]
    if not points:
        st.caption("No sessions logged yet. Finish a countdown to start your history.")
    else:
        frame = to_frame(points[-days:])
        fig = px.line(frame, x="date", y="minutes", line_shape="hv", markers=False)
        fig.update_traces(line={"width": 4})
        fig.update_layout(xaxis_title="Date", yaxis_title="Minutes")
        st.plotly_chart(fig, use_container_width=True)

    stats = session.summary(kind, days)
    st.write(f"Showing past {stats.days} days...")
    st.write(f"Days active: {stats.percent_days_active}%")
    st.write(f"Average minutes: {stats.avg_minutes:.1f}")
    st.write(f"Average minutes (when active): {stats.avg_minutes_when_active:.1f}")

# ---------- SETTINGS ----------
elif page == "Settings":
    st.subheader(f"{kind.label} settings")

    current = session.data.settings.minutes_per_day[kind]
    minutes = st.number_input("Minutes / day", min_value=1, value=int(current), step=1)
    if int(minutes) != current:
        session.set_minutes_per_day(kind, int(minutes))
        st.success(f"Minutes / day set to {int(minutes)}")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Reset time"):
            session.reset_allowance(kind)
            st.rerun()
    with col2:
        if st.button(f"Add {ADD_MINUTES_STEP} minutes"):
            session.add_allowance(kind, ADD_MINUTES_STEP)
            st.rerun()

    st.divider()
    st.metric("Calories today", session.data.settings.calories_today)
    with st.form("calories_form", clear_on_submit=True):
        calories = st.number_input("Add calories", min_value=0, value=0, step=50)
        ok = st.form_submit_button("Add")
    if ok and calories > 0:
        session.add_calories(int(calories))
        st.rerun()
