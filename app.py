"""
💪 LiftLevel — Strength Stats
Run: streamlit run app.py
"""
import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from liftlevel import store
from liftlevel.config import LEVEL_ORDER, SUPABASE_URL
from liftlevel.history import (
    sets_to_dataframe, exercise_data_from_sets,
    exercise_levels_table, group_levels_table, pr_table,
)
from liftlevel.pr import compute_prs_for_session
from liftlevel.report import DEMO_PROFILE, DEMO_SESSION, demo_rows, demo_fetch_historic_sets
from liftlevel.strength import compute_strength_levels, get_level_color

# ── Page Config ──────────────────────────────────────────────────────
st.set_page_config(page_title="LiftLevel", page_icon="💪", layout="wide")

PL = dict(
    template="plotly_dark", paper_bgcolor="rgba(0,0,0,0)", plot_bgcolor="rgba(0,0,0,0)",
    margin=dict(l=40, r=20, t=40, b=40),
)


# ── Data Loading ─────────────────────────────────────────────────────
@st.cache_data(ttl=300)
def load_data(user_id: str, demo: bool):
    if demo:
        profile, rows = DEMO_PROFILE, demo_rows()
    else:
        profile, rows = store.fetch_profile(user_id), store.fetch_user_sets(user_id)
    exercise_data = exercise_data_from_sets(sets_to_dataframe(rows))
    return {"profile": profile, "exercise_data": exercise_data, "ts": pd.Timestamp.now()}


with st.sidebar:
    st.markdown("# 💪 LiftLevel")
    demo = st.toggle("Demo data", value=not SUPABASE_URL)
    user_id = st.text_input("User ID", value="" if not demo else DEMO_PROFILE["id"], disabled=demo)
    session_id = st.text_input("Session ID (PRs)", value="", disabled=demo)
    if st.button("🔄 Refresh", use_container_width=True):
        st.cache_data.clear()
        st.rerun()

if not demo and not user_id:
    st.info("Enter a user ID to load strength stats.")
    st.stop()

try:
    data = load_data(user_id, demo)
except Exception as e:
    st.error(f"Error loading data: {e}")
    st.stop()

profile, exercise_data = data["profile"], data["exercise_data"]
levels = compute_strength_levels(profile, exercise_data)
overall = levels["overall"]

# ══════════════════════════════════════════════════════════════════════
# 🏅 OVERALL
# ══════════════════════════════════════════════════════════════════════
st.markdown("## 🏅 Strength Level")
if overall is None:
    st.warning("Set gender and body weight in your profile and log a standard lift to get a level.")
    st.stop()

c1, c2, c3 = st.columns(3)
c1.metric("Overall", overall["current_level"], f"{overall['progress']:.0f}% → {overall['next_level'] or 'max'}")
if overall["balanced_level"]:
    c2.metric("Balanced", overall["balanced_level"], f"score {overall['balanced_score']:.2f}")
c3.metric("Lifts tracked", overall["lifts_tracked"])
if overall["weakest_group"]:
    st.warning(f"⚠️ {overall['weakest_group']} is lagging a full level or more behind your strongest group.")

# ══════════════════════════════════════════════════════════════════════
# 📊 GROUPS
# ══════════════════════════════════════════════════════════════════════
groups = group_levels_table(levels)
if not groups.empty:
    st.markdown("### Push / Pull / Lower")
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=groups["group"], y=groups["average_score"],
        marker_color=[get_level_color(lvl) for lvl in groups["level"]],
        text=groups["level"], textposition="outside",
    ))
    fig.update_layout(
        **PL, height=320, showlegend=False,
        yaxis=dict(range=[0, 7], tickvals=list(range(1, 7)), ticktext=LEVEL_ORDER),
    )
    st.plotly_chart(fig, use_container_width=True, key="chart_groups")

table = exercise_levels_table(profile, exercise_data)
if not table.empty:
    st.markdown("### Lifts")
    disp = table[["exercise", "group", "max_1rm", "bw_ratio", "level", "score"]].copy()
    disp.columns = ["Exercise", "Group", "e1RM", "×BW", "Level", "Score"]
    st.dataframe(disp, hide_index=True, use_container_width=True)

# ══════════════════════════════════════════════════════════════════════
# 🏆 SESSION PRs
# ══════════════════════════════════════════════════════════════════════
prs = None
if demo:
    prs = compute_prs_for_session(DEMO_SESSION, fetch_historic_sets=demo_fetch_historic_sets)
elif session_id:
    try:
        ctx = store.fetch_session(session_id)
        if ctx is None:
            st.info(f"Session {session_id} not found.")
        else:
            prs = compute_prs_for_session(ctx)
    except Exception as e:
        st.error(f"Error loading session {session_id}: {e}")

if prs is not None:
    st.markdown(f"### 🏆 Session PRs ({prs['total_prs']})")
    pr_df = pr_table(prs)
    if pr_df.empty:
        st.info("No new PRs in this session.")
    else:
        st.dataframe(pr_df, hide_index=True, use_container_width=True)

st.sidebar.divider()
st.sidebar.caption(f"📡 Loaded {data['ts'].strftime('%H:%M')}")
