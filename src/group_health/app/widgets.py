from __future__ import annotations

from datetime import date, timedelta

import streamlit as st


def date_range_filter(key: str, end: date, days: int = 7) -> tuple[date, date]:
    """Date range picker that tolerates the half-selected state."""
    selected = st.date_input(
        "Date range",
        value=(end - timedelta(days=days), end),
        key=key,
    )
    if isinstance(selected, date):
        return selected, selected
    if len(selected) == 2:
        return selected[0], selected[1]
    if len(selected) == 1:
        return selected[0], selected[0]
    return end - timedelta(days=days), end
