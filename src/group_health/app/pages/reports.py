from __future__ import annotations

import math
from typing import Any

import pandas as pd
import streamlit as st

from group_health.app.context import AppContext
from group_health.app.widgets import date_range_filter
from group_health.domain.constants import (
    GRANULARITIES,
    GRANULARITY_DAY,
    GRANULARITY_MONTH,
    GRANULARITY_WEEK,
)
from group_health.domain.models import ReportRow
from group_health.services.period_aggregation import query_report_rows

PAGE_SIZE = 10

GRANULARITY_LABELS = {
    GRANULARITY_DAY: "Daily",
    GRANULARITY_WEEK: "Weekly",
    GRANULARITY_MONTH: "Monthly",
}


def _truncate(text: str, limit: int = 60) -> str:
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def _table_rows(rows: list[ReportRow]) -> list[dict[str, Any]]:
    table: list[dict[str, Any]] = []
    for row in rows:
        risk = row.latest.risk_status
        table.append(
            {
                "Period": row.label,
                "Group": row.group_name,
                "Messages": row.message_count,
                "Active speakers": row.active_speakers,
                "Score": row.overall_score,
                "Flags": "excluded" if row.latest.is_excluded else ((risk.risk_message or "") if risk else ""),
                "Summary": _truncate(row.summary),
                "Report": row.latest.report_id,
            }
        )
    return table


def render(ctx: AppContext) -> None:
    st.header("Reports")
    st.caption("Historical analysis reports for all groups.")

    groups = ctx.metrics.list_groups()
    group_options = ["all"] + [group.group_id for group in groups]
    names = {group.group_id: group.name for group in groups}

    col1, col2, col3 = st.columns([2, 1, 3])
    selected_group = col1.selectbox(
        "Group",
        group_options,
        format_func=lambda value: "All groups" if value == "all" else names.get(value, value),
        key="reports_group",
    )
    granularity = col2.radio(
        "Granularity",
        list(GRANULARITIES),
        format_func=lambda value: GRANULARITY_LABELS[value],
        key="reports_granularity",
    )
    with col3:
        date_from, date_to = date_range_filter("reports_range", ctx.data_end())

    rows = query_report_rows(
        ctx.reports.list_reports(),
        granularity=granularity,
        group_id=selected_group,
        date_from=date_from,
        date_to=date_to,
    )

    if not rows:
        st.info("No analysis reports for the selected filters.")
        return

    filter_key = (selected_group, granularity, date_from, date_to)
    if st.session_state.get("reports_filter_key") != filter_key:
        st.session_state["reports_filter_key"] = filter_key
        st.session_state["reports_page"] = 1

    total_pages = max(1, math.ceil(len(rows) / PAGE_SIZE))
    page = min(st.session_state.get("reports_page", 1), total_pages)
    start = (page - 1) * PAGE_SIZE

    st.dataframe(
        pd.DataFrame(_table_rows(rows[start : start + PAGE_SIZE])),
        use_container_width=True,
        hide_index=True,
    )

    prev_col, info_col, next_col = st.columns([1, 3, 1])
    if prev_col.button("Previous", disabled=page <= 1):
        st.session_state["reports_page"] = page - 1
        st.rerun()
    info_col.caption(f"{len(rows)} records, page {page} / {total_pages}")
    if next_col.button("Next", disabled=page >= total_pages):
        st.session_state["reports_page"] = page + 1
        st.rerun()

    report_ids = [row.latest.report_id for row in rows]
    selected_report = st.selectbox("Open report", report_ids, key="reports_open")
    if st.button("Show in group detail"):
        report = ctx.reports.get(selected_report)
        if report is not None:
            st.session_state["detail_group_select"] = report.group_id
            st.session_state["detail_report_id"] = report.report_id
            st.session_state["nav_to_page"] = "Group detail"
            st.rerun()
