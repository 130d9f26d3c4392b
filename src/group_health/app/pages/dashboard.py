from __future__ import annotations

import altair as alt
import pandas as pd
import streamlit as st

from group_health.app.context import AppContext
from group_health.app.widgets import date_range_filter
from group_health.domain.constants import LEVEL_LABELS, STATUS_CRITICAL
from group_health.services.overview import build_overview
from group_health.services.period_aggregation import filter_reports


def _ranking_frame(ranking: list[dict]) -> pd.DataFrame:
    rows = []
    for row in ranking:
        rows.append(
            {
                "Group": row["name"],
                "Score": row["score"],
                "Level": LEVEL_LABELS.get(row["level"], "Not scored"),
                "Status": "Excluded" if row["excluded"] else row["status"],
                "Members": row["member_count"],
                "Messages (latest day)": row["latest_messages"],
                "Risk": row["risk_message"] or "",
            }
        )
    return pd.DataFrame(rows)


def render(ctx: AppContext) -> None:
    st.header("Overview")
    st.caption("Health of enterprise chat groups at a glance.")

    date_from, date_to = date_range_filter("dashboard_range", ctx.data_end())

    reports = filter_reports(ctx.reports.list_reports(), date_from=date_from, date_to=date_to)
    overview = build_overview(ctx.metrics.list_groups(), reports)

    attention = overview["attention_groups"]
    if attention:
        names = ", ".join(row["name"] for row in attention)
        critical = sum(1 for row in attention if row["status"] == STATUS_CRITICAL)
        st.error(f"{len(attention)} groups have a low health score ({critical} critical): {names}")

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Groups", overview["group_count"])
    col2.metric("Members", overview["member_count"])
    col3.metric("Messages (latest day)", overview["latest_messages"])
    col4.metric("Average health score", overview["avg_score"] if overview["avg_score"] is not None else "—")

    st.subheader("Message activity")
    activity = pd.DataFrame(
        [{"date": pd.Timestamp(report.day), "messages": report.message_count} for report in reports]
    )
    if activity.empty:
        st.info("No data in the selected range.")
    else:
        daily = activity.groupby("date", as_index=False)["messages"].sum()
        chart = (
            alt.Chart(daily)
            .mark_area(opacity=0.4, line=True)
            .encode(
                x=alt.X("date:T", title=None),
                y=alt.Y("messages:Q", title="Messages"),
                tooltip=[alt.Tooltip("date:T", title="Day"), alt.Tooltip("messages:Q", title="Messages")],
            )
            .properties(height=280)
        )
        st.altair_chart(chart, use_container_width=True)

    st.subheader("Group health ranking")
    st.dataframe(_ranking_frame(overview["ranking"]), use_container_width=True, hide_index=True)
