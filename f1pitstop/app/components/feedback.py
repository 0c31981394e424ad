import streamlit as st

from f1pitstop.openf1.query_client import QueryResult


def render_error(message: str, detail: Exception | str | None = None) -> None:
    """Error panel shown in place of a section that failed to load."""
    st.error(f"⚠️ {message}")
    if detail:
        st.caption(str(detail))


def render_empty(message: str) -> None:
    st.info(message)


def query_failed(result: QueryResult, message: str) -> bool:
    """Render the error panel for a failed query; True if the caller should stop."""
    if result.is_error:
        render_error(message, result.error)
        return True
    return False
