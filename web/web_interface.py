#!/usr/bin/env python3
"""
Streamlit dashboard for the biometric sign-in monitor.
Polls the API server and shows active sessions, activity and statistics.

Run with: pip install -e . && streamlit run web/web_interface.py
"""
import html
import time
from datetime import datetime
from typing import Dict, List

import pandas as pd
import plotly.express as px
import streamlit as st

from ledger import ActiveSession, Event
from utils.config import config
from web.api_client import BiometricAPI, DashboardCache, format_duration

# Page configuration
st.set_page_config(
    page_title="Biometric Sign-In Dashboard",
    page_icon="🔐",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS for activity rows
st.markdown("""
<style>
    .activity-in {
        background-color: #32cd32;
        color: white;
        padding: 0.5rem;
        border-radius: 0.25rem;
        margin: 0.25rem 0;
    }
    .activity-out {
        background-color: #ffa500;
        color: white;
        padding: 0.5rem;
        border-radius: 0.25rem;
        margin: 0.25rem 0;
    }
</style>
""", unsafe_allow_html=True)

# Initialize API client
@st.cache_resource
def get_api_client():
    return BiometricAPI(config.dashboard.api_url, config.dashboard.request_timeout)

api = get_api_client()

def get_cache() -> DashboardCache:
    """Display cache kept across reruns of the script."""
    if "cache" not in st.session_state:
        st.session_state.cache = DashboardCache(config.dashboard.history_limit)
    return st.session_state.cache

def main():
    """Main dashboard application."""
    st.title("🔐 Biometric Sign-In Dashboard")

    health = api.health()
    if "error" in health:
        st.error(f"⚠️ Unable to connect to server: {health['error']}")
        st.info(f"Please ensure the API server is running at {api.base_url}.")
        return

    cache = get_cache()

    # Sidebar controls
    with st.sidebar:
        st.header("🎛️ Monitoring")
        st.markdown(f"**Server:** 🟢 {api.base_url}")
        st.caption(f"Uptime {format_duration(int(health.get('uptime', 0) * 1000))}, "
                   f"{health.get('entriesStored', 0)} entries stored")

        auto_refresh = st.checkbox("🔄 Auto-refresh", value=True)
        refresh_rate = st.selectbox(
            "Refresh Rate (seconds)",
            options=[1, 2, 3, 5, 10, 30],
            index=[1, 2, 3, 5, 10, 30].index(config.dashboard.refresh_interval)
            if config.dashboard.refresh_interval in [1, 2, 3, 5, 10, 30] else 2
        )

        st.divider()
        display_pi_status()

        st.divider()
        st.header("🧹 Data")
        if st.button("Clear display"):
            cache.clear()
            st.success("Activity history cleared (display only)")

        confirm = st.checkbox("I understand server data cannot be recovered")
        if st.button("Clear server data", disabled=not confirm):
            result = api.clear_entries()
            if result.get("success"):
                cache.clear()
                st.success(result.get("message", "Server data cleared"))
            else:
                st.error(f"Failed to clear server data: {result.get('error', 'Unknown error')}")

    # Poll server
    added = cache.merge(api.get_entries())
    stats = api.get_statistics()

    display_statistics(stats, cache)

    st.divider()

    col1, col2 = st.columns([1, 2])
    with col1:
        display_active_sessions(cache.sessions)
    with col2:
        display_activity_feed(cache.history)

    display_hourly_chart(cache.history)

    st.caption(f"Last update {datetime.now().strftime('%H:%M:%S')}, {added} new entries")

    # Auto-refresh mechanism
    if auto_refresh:
        time.sleep(refresh_rate)
        st.rerun()

def display_pi_status():
    """Device command bit toggle."""
    st.header("📟 Device Status")

    status = api.get_pi_status()
    st.markdown(f"**Current value:** {status if status in (0, 1) else 'Unknown'}")

    col1, col2 = st.columns(2)
    for col, value in ((col1, 0), (col2, 1)):
        with col:
            if st.button(f"Set {value}", key=f"pi-status-{value}"):
                result = api.set_pi_status(value)
                if result.get("ok"):
                    st.success(f"Device status set to {result.get('status')}")
                else:
                    st.error(f"Failed to set device status: {result.get('error', 'Unknown error')}")

def display_statistics(stats: Dict, cache: DashboardCache):
    """Key metrics row."""
    col1, col2, col3, col4, col5 = st.columns(5)

    with col1:
        st.metric("👥 Active Now", len(cache.sessions))
    with col2:
        st.metric("🗂️ Total Entries", stats.get("totalEntries", 0))
    with col3:
        st.metric("➡️ Sign-ins Today", stats.get("signInsToday", 0))
    with col4:
        st.metric("⬅️ Sign-outs Today", stats.get("signOutsToday", 0))
    with col5:
        st.metric("🕒 Last 24h", stats.get("entriesLast24h", 0))

    if "error" in stats:
        st.warning(f"Statistics unavailable: {stats['error']}")

def display_active_sessions(sessions: List[ActiveSession]):
    """Names currently signed in with elapsed time."""
    st.subheader("🟢 Active Sessions")

    if not sessions:
        st.info("No one is signed in")
        return

    now_ms = int(time.time() * 1000)
    for session in sessions:
        started = datetime.fromtimestamp(session.start_time / 1000).strftime("%H:%M:%S")
        st.markdown(f"**{session.name}** since {started} ({format_duration(session.duration_ms(now_ms))})")

def display_activity_feed(history: List[Event]):
    """Recent sign-in/sign-out activity, newest first."""
    st.subheader("📋 Recent Activity")

    if not history:
        st.info("No activity yet")
        return

    for event in history[:20]:
        label = "Signed in" if event.action.value == "in" else "Signed out"
        when = event.occurred_at.strftime("%Y-%m-%d %H:%M:%S")
        st.markdown(
            f'<div class="activity-{event.action.value}"><strong>{html.escape(event.name)}</strong> '
            f'{label}<br><small>{when}</small></div>',
            unsafe_allow_html=True
        )

def display_hourly_chart(history: List[Event]):
    """Sign-ins and sign-outs per hour."""
    if not history:
        return

    st.subheader("📈 Activity Timeline")

    df_events = pd.DataFrame([event.to_dict() for event in history])
    # Instants outside the pandas range become NaT and are left out of the chart
    df_events['time'] = pd.to_datetime(df_events['timestamp'], unit='ms', utc=True, errors='coerce')
    df_events = df_events.dropna(subset=['time']).copy()
    if df_events.empty:
        return
    df_events['time'] = df_events['time'].dt.tz_convert(datetime.now().astimezone().tzinfo)
    df_hourly = df_events.groupby([
        df_events['time'].dt.floor('h'),
        'action'
    ]).size().reset_index(name='count')

    fig = px.bar(
        df_hourly,
        x='time',
        y='count',
        color='action',
        title="Entries Per Hour",
        labels={'time': 'Time', 'count': 'Entries', 'action': 'Action'}
    )
    st.plotly_chart(fig, use_container_width=True)

if __name__ == "__main__":
    main()
