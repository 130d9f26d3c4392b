from __future__ import annotations

import pandas as pd
import streamlit as st

from group_health.app.context import AppContext
from group_health.domain.constants import SCORING_MODE_LABELS, SCORING_MODES
from group_health.domain.errors import ConfigurationOutOfRange
from group_health.services.composite_scoring import dimension_table


def _render_thresholds(ctx: AppContext) -> None:
    st.subheader("Scoring thresholds")
    current = ctx.thresholds.get()
    st.caption(f"Current version: v{ctx.thresholds.version}. Changes apply to the next analysis run.")

    with st.form("thresholds_form"):
        col1, col2 = st.columns(2)
        target = col1.number_input(
            "Messages per speaker for full engagement",
            value=float(current.avg_messages_per_speaker_target),
            step=1.0,
        )
        base = col2.number_input(
            "Response speed base (seconds)",
            value=float(current.response_speed_base),
            step=10.0,
        )
        meltdown = col1.number_input(
            "Atmosphere meltdown threshold",
            value=float(current.atmosphere_meltdown_threshold),
            step=1.0,
            help="Atmosphere scores below this value flag a conflict risk.",
        )
        cold_start = col2.number_input(
            "Cold-start message threshold",
            value=int(current.cold_start_message_threshold),
            step=1,
        )
        micro_group = col1.number_input(
            "Micro-group member threshold",
            value=int(current.micro_group_member_threshold),
            step=1,
        )
        submitted = st.form_submit_button("Save thresholds")

    if submitted:
        try:
            ctx.thresholds.update(
                avg_messages_per_speaker_target=float(target),
                response_speed_base=float(base),
                atmosphere_meltdown_threshold=float(meltdown),
                cold_start_message_threshold=int(cold_start),
                micro_group_member_threshold=int(micro_group),
            )
        except ConfigurationOutOfRange as exc:
            st.error(f"{exc} Previous thresholds are kept.")
        else:
            st.success(f"Thresholds saved (v{ctx.thresholds.version}).")

    if st.button("Restore defaults"):
        ctx.thresholds.reset()
        st.rerun()


def _render_participation(ctx: AppContext) -> None:
    st.subheader("Scoring participation")
    config = ctx.scoring.get()
    groups = ctx.metrics.list_groups()
    names = {group.group_id: group.name for group in groups}

    with st.form("participation_form"):
        mode = st.radio(
            "Mode",
            list(SCORING_MODES),
            index=list(SCORING_MODES).index(config.mode),
            format_func=lambda value: SCORING_MODE_LABELS[value],
        )
        selected = st.multiselect(
            "Groups",
            list(names),
            default=sorted(group_id for group_id in config.group_ids if group_id in names),
            format_func=lambda value: names.get(value, value),
        )
        submitted = st.form_submit_button("Save participation")

    if submitted:
        try:
            ctx.scoring.set(mode, selected)
        except ConfigurationOutOfRange as exc:
            st.error(str(exc))
        else:
            st.success("Participation saved. Excluded groups keep their base metrics.")

    excluded = ctx.scoring.excluded_groups(names)
    if excluded:
        st.info("Not scored: " + ", ".join(names[group_id] for group_id in excluded))


def render(ctx: AppContext) -> None:
    st.header("Scoring settings")
    st.caption("Thresholds and participation used by the health-scoring engine.")

    _render_thresholds(ctx)
    _render_participation(ctx)

    st.subheader("Dimension weights")
    weights = pd.DataFrame(
        [
            {
                "Dimension": row["name"],
                "Group": row["group"],
                "Weight": f"{row['weight'] * 100:.0f}%",
                "Formula": row["formula"],
            }
            for row in dimension_table()
        ]
    )
    st.dataframe(weights, use_container_width=True, hide_index=True)

    st.subheader("Analysis")
    col1, col2 = st.columns(2)
    if col1.button("Analyze new days"):
        produced = ctx.analyze_pending()
        st.success(f"Analyzed {len(produced)} new days.")
    if col2.button("Re-run analysis for all days"):
        produced = ctx.rerun_analysis()
        st.success(f"Produced {len(produced)} reports with thresholds v{ctx.thresholds.version}.")
