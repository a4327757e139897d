from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# --- Path bootstrap (keep stable imports no matter how streamlit is launched)
REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.client.form import Attachment, SubmissionForm  # noqa: E402

FIELD_KEYS = ("name", "email", "message")


def _get_form() -> SubmissionForm:
    if "submission_form" not in st.session_state:
        st.session_state.submission_form = SubmissionForm()
    return st.session_state.submission_form


def _field_error(form: SubmissionForm, field: str) -> None:
    if form.errors.get(field):
        st.error(form.errors[field])


def render() -> None:
    st.set_page_config(page_title="Contact", layout="centered")
    st.title("Contact us")

    form = _get_form()

    # Widget values can only be reset before the widgets are drawn
    if st.session_state.pop("clear_fields", False):
        for key in FIELD_KEYS:
            st.session_state[f"field_{key}"] = ""
        st.session_state.uploader_generation = st.session_state.get("uploader_generation", 0) + 1

    form.name = st.text_input("Name", key="field_name")
    _field_error(form, "name")

    form.email = st.text_input("Email", key="field_email")
    _field_error(form, "email")

    form.message = st.text_area("Message", height=150, key="field_message")
    _field_error(form, "message")

    uploaded = st.file_uploader(
        "Attachment (optional)",
        type=["pdf", "jpg", "jpeg", "png"],
        key=f"attachment_{st.session_state.get('uploader_generation', 0)}",
    )
    if uploaded is not None:
        form.set_attachment(Attachment(
            filename=uploaded.name,
            content_type=uploaded.type or "application/octet-stream",
            data=uploaded.getvalue(),
        ))
        st.caption(f"Selected: {uploaded.name}")
    else:
        form.set_attachment(None)
    _field_error(form, "attachment")

    _field_error(form, "form")

    label = "Submitting..." if form.is_submitting else "Submit"
    if st.button(label, disabled=form.is_submitting, type="primary"):
        with st.spinner("Submitting..."):
            ok = form.submit()
        if ok:
            st.session_state.clear_fields = True
        st.rerun()

    if form.is_success:
        st.success("Form submitted successfully!")


render()
