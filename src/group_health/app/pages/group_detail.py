from __future__ import annotations

import altair as alt
import pandas as pd
import streamlit as st

from group_health.app.context import AppContext
from group_health.app.widgets import date_range_filter
from group_health.domain.constants import DIMENSION_LABELS, METRIC_LABELS
from group_health.domain.errors import UnknownGroup
from group_health.domain.models import AnalysisReport
from group_health.services.composite_scoring import dimension_table, score_level_label
from group_health.services.period_aggregation import (
    filter_reports,
    metric_trend_frame,
    score_trend_frame,
    trend_lookback_days,
    trend_window,
)
from group_health.services.risk import insufficient_data_notice
from group_health.services.score_delta import compute_week_over_week

SENTIMENT_COLORS = {"positive": "#10b981", "neutral": "#94a3b8", "negative": "#ef4444"}


def _breakdown_chart(report: AnalysisReport) -> alt.Chart:
    breakdown = report.score_breakdown.to_dict() if report.score_breakdown else {}
    weights = {row["key"]: row["weight"] for row in dimension_table()}
    df = pd.DataFrame(
        [
            {
                "dimension": DIMENSION_LABELS[key],
                "score": value,
                "weight": f"{weights[key] * 100:.0f}%",
            }
            for key, value in breakdown.items()
        ]
    )
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("score:Q", title="Score (0-100)", scale=alt.Scale(domain=[0, 100])),
            y=alt.Y("dimension:N", sort=None, title=None),
            tooltip=[
                alt.Tooltip("dimension:N", title="Dimension"),
                alt.Tooltip("score:Q", title="Score"),
                alt.Tooltip("weight:N", title="Weight"),
            ],
        )
        .properties(height=240)
    )


def _render_score(report: AnalysisReport, reports: list[AnalysisReport]) -> None:
    st.subheader("Health score")
    if report.is_excluded:
        st.info("This group is excluded from analysis; base metrics are still collected.")
        return

    col1, col2, col3 = st.columns(3)
    trend = compute_week_over_week(reports, report.day)
    col1.metric(
        "Overall score",
        report.overall_score,
        delta=trend["delta"],
        help="Change against the previous week's mean score.",
    )
    col2.metric("Level", score_level_label(report.overall_score))
    col3.metric("Scored days (7d)", trend["scored_days"])

    if report.score_downweighted:
        st.warning(report.risk_status.risk_message or "Score downweighted.")
    notice = None
    if report.thresholds is not None:
        notice = insufficient_data_notice(report.risk_status, report.thresholds)
    if notice:
        st.info(f"Provisional score. {notice}")

    st.altair_chart(_breakdown_chart(report), use_container_width=True)


def _render_insight(report: AnalysisReport) -> None:
    insight = report.insight
    if insight.is_empty:
        return
    st.subheader("AI insight")

    if insight.sentiment:
        sentiment = pd.DataFrame(
            [
                {"sentiment": key, "share": insight.sentiment.get(key, 0), "row": "Sentiment"}
                for key in SENTIMENT_COLORS
            ]
        )
        st.altair_chart(
            alt.Chart(sentiment)
            .mark_bar()
            .encode(
                x=alt.X("share:Q", stack="normalize", title=None, axis=alt.Axis(format="%")),
                y=alt.Y("row:N", title=None),
                color=alt.Color(
                    "sentiment:N",
                    scale=alt.Scale(domain=list(SENTIMENT_COLORS), range=list(SENTIMENT_COLORS.values())),
                ),
                tooltip=[alt.Tooltip("sentiment:N"), alt.Tooltip("share:Q", title="%")],
            )
            .properties(height=70),
            use_container_width=True,
        )

    col_topics, col_highlights = st.columns(2)
    with col_topics:
        st.caption("Hot topics")
        topics = pd.DataFrame(list(insight.topics))
        if topics.empty:
            st.caption("No topics.")
        else:
            st.dataframe(topics, use_container_width=True, hide_index=True)
    with col_highlights:
        st.caption("Key highlights")
        for highlight in insight.key_highlights:
            st.markdown(f"- {highlight}")


def render(ctx: AppContext) -> None:
    groups = ctx.metrics.list_groups()
    if not groups:
        st.info("No groups available.")
        return

    group_ids = [group.group_id for group in groups]
    group_id = st.selectbox(
        "Group",
        group_ids,
        format_func=lambda value: ctx.metrics.get_group(value).name,
        key="detail_group_select",
    )
    try:
        group = ctx.metrics.get_group(group_id)
    except UnknownGroup:
        st.error("Group does not exist.")
        return

    st.header(group.name)
    created = group.created_at.isoformat() if group.created_at else "unknown"
    st.caption(f"{group.member_count} members · created {created} · {group.description}")

    date_from, date_to = date_range_filter("detail_range", ctx.data_end())
    all_reports = ctx.reports.list_reports(group_id)
    in_range = filter_reports(all_reports, date_from=date_from, date_to=date_to)

    report = None
    requested = st.session_state.pop("detail_report_id", None)
    if requested:
        report = ctx.reports.get(requested)
        if report is not None and report.group_id != group_id:
            report = None
    if report is None and in_range:
        report = in_range[-1]
    if report is None:
        st.info("No analysis reports in the selected range.")
        return

    st.markdown(f"**Report {report.report_id}** (thresholds v{report.thresholds_version})")
    if report.summary:
        st.write(report.summary)

    _render_score(report, all_reports)
    _render_insight(report)

    st.subheader("Base metrics")
    metrics = report.base_metrics.to_dict()
    cols = st.columns(len(METRIC_LABELS))
    for col, (key, label) in zip(cols, METRIC_LABELS.items()):
        value = metrics.get(key)
        col.metric(label, "—" if value is None else value)

    selected_metric = st.selectbox(
        "Trend metric",
        list(METRIC_LABELS),
        format_func=lambda key: METRIC_LABELS[key],
        key="detail_metric",
    )
    lookback = trend_lookback_days(date_from, date_to)
    window = trend_window(all_reports, report.day, lookback_days=lookback)
    trend_df = metric_trend_frame(window, selected_metric)
    if not trend_df.empty:
        line = (
            alt.Chart(trend_df)
            .mark_line(point=True)
            .encode(
                x=alt.X("date:T", title=None),
                y=alt.Y("value:Q", title=METRIC_LABELS[selected_metric]),
                tooltip=[alt.Tooltip("date:T", title="Day"), alt.Tooltip("value:Q", title="Value")],
            )
            .properties(height=260)
        )
        st.altair_chart(line, use_container_width=True)

    score_df = score_trend_frame(trend_window(all_reports, report.day, lookback_days=lookback))
    if not score_df.empty:
        st.caption("Score trend")
        st.altair_chart(
            alt.Chart(score_df)
            .mark_area(opacity=0.3, line=True)
            .encode(
                x=alt.X("date:T", title=None),
                y=alt.Y("score:Q", scale=alt.Scale(domain=[0, 100]), title="Score"),
            )
            .properties(height=120),
            use_container_width=True,
        )

    col_left, col_right = st.columns(2)
    with col_left:
        st.subheader("Hourly activity")
        hourly = pd.DataFrame(list(report.hourly_activity))
        if hourly.empty:
            st.caption("No hourly data.")
        else:
            st.altair_chart(
                alt.Chart(hourly)
                .mark_bar()
                .encode(x=alt.X("hour:O", title="Hour"), y=alt.Y("count:Q", title="Messages"))
                .properties(height=220),
                use_container_width=True,
            )
    with col_right:
        st.subheader("Top members")
        members = pd.DataFrame(list(report.member_stats))
        if members.empty:
            st.caption("No member data.")
        else:
            st.dataframe(members, use_container_width=True, hide_index=True)
        message_types = pd.DataFrame(list(report.message_types))
        if not message_types.empty:
            st.caption("Message types")
            st.dataframe(message_types, use_container_width=True, hide_index=True)
