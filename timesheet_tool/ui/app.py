"""Streamlit daily time sheet form.

Calls the same engine as the CLI and API. No business logic here.
"""

from __future__ import annotations

import streamlit as st

from timesheet_tool.attachments import AttachmentLedger
from timesheet_tool.client import ApiError, FormsApiClient
from timesheet_tool.config import Settings
from timesheet_tool.models import EXPENSE_FIELDS, AttachmentRejected, TimesheetValidationError
from timesheet_tool.service import SaveError, open_time_sheet, save_time_sheet
from timesheet_tool.store import TimeSheetDraft


def _state() -> tuple[TimeSheetDraft, AttachmentLedger]:
    if "draft" not in st.session_state:
        st.session_state["draft"] = TimeSheetDraft()
        st.session_state["ledger"] = AttachmentLedger()
    return st.session_state["draft"], st.session_state["ledger"]


def _client(settings: Settings) -> FormsApiClient:
    return FormsApiClient(settings.api_base_url, token=settings.api_token, timeout=settings.api_timeout)


def _header(draft: TimeSheetDraft) -> None:
    sheet = draft.sheet
    col1, col2 = st.columns(2)
    with col1:
        job_number = st.text_input("Job Order *", value=sheet.job_number)
        customer = st.text_input("Customer", value=sheet.customer)
    with col2:
        sheet_date = st.text_input("Date (YYYY-MM-DD)", value=sheet.date)
        address = st.text_input("Address", value=sheet.address)
    draft.set_fields(job_number=job_number, customer=customer, date=sheet_date, address=address)


def _entries(draft: TimeSheetDraft) -> None:
    st.subheader("Time Entries")
    for index, entry in enumerate(list(draft.entries)):
        label = entry.entry_date.isoformat() if entry.entry_date else f"Row {index + 1}"
        with st.expander(f"{label}  {entry.start_time or '--:--'}-{entry.stop_time or '--:--'}", expanded=True):
            changes = {}
            cols = st.columns(4)
            if entry.has_date:
                changes["entry_date"] = cols[0].date_input("Date", value=entry.entry_date, key=f"{entry.id}-date")
            changes["start_time"] = cols[1].text_input("Start (HH:MM)", value=entry.start_time, key=f"{entry.id}-start")
            changes["stop_time"] = cols[2].text_input("Stop (HH:MM)", value=entry.stop_time, key=f"{entry.id}-stop")
            changes["travel_hours"] = cols[3].text_input("Travel Hours", value=entry.travel_hours, key=f"{entry.id}-travel")
            changes["job_description"] = st.text_area(
                "Job Description", value=entry.job_description, key=f"{entry.id}-desc", height=68,
            )

            expense_cols = st.columns(len(EXPENSE_FIELDS))
            for col, name in zip(expense_cols, EXPENSE_FIELDS):
                changes[name] = col.text_input(
                    name.replace("expense_", "").title(), value=getattr(entry, name), key=f"{entry.id}-{name}",
                )
            changes["expense_remarks"] = st.text_input("Remarks", value=entry.expense_remarks, key=f"{entry.id}-remarks")

            draft.update_entry(entry.id, **changes)
            st.caption(f"Total hours: {entry.total_hours or '-'}  |  Expenses: {entry.expense_total}")
            if st.button("Remove row", key=f"{entry.id}-remove", disabled=len(draft.entries) <= 1):
                draft.remove_entry(entry.id)
                st.rerun()

    col_a, col_b = st.columns(2)
    if col_a.button("Add row"):
        draft.add_row()
        st.rerun()
    if col_b.button("Add date row"):
        draft.add_date_row()
        st.rerun()


def _attachments(ledger: AttachmentLedger) -> None:
    st.subheader("Attachments")
    for attachment in list(ledger.existing_attachments):
        col1, col2 = st.columns([4, 1])
        caption = col1.text_input(attachment.file_name, value=attachment.description, key=f"att-{attachment.id}")
        ledger.set_existing_caption(attachment.id, caption)
        if col2.button("Delete", key=f"att-del-{attachment.id}"):
            ledger.mark_for_deletion(attachment.id)
            st.rerun()

    for index, attachment in enumerate(ledger.new_attachments):
        caption = st.text_input(
            f"{attachment.file_name} ({attachment.size / 1024:.2f} KB)",
            value=attachment.description,
            key=f"new-{index}-{attachment.file_name}",
        )
        ledger.set_new_caption(index, caption)

    upload = st.file_uploader("Add photo", type=["png", "jpg", "jpeg", "gif", "webp"], key="upload")
    if upload is not None and st.button("Queue photo"):
        try:
            ledger.add_new(upload.name, upload.getvalue(), upload.type or "")
        except AttachmentRejected as e:
            st.error(str(e))


def main() -> None:
    st.set_page_config(page_title="Daily Time Sheet", layout="wide")
    st.title("Daily Time Sheet")
    settings = Settings.from_env()
    draft, ledger = _state()

    record_id = st.sidebar.text_input("Record ID")
    if st.sidebar.button("Load record", disabled=not record_id):
        try:
            draft, ledger = open_time_sheet(_client(settings), record_id)
        except ApiError as e:
            st.sidebar.error(e.message)
        else:
            st.session_state["draft"], st.session_state["ledger"] = draft, ledger
            st.rerun()
    if st.sidebar.button("Clear form"):
        draft.reset()
        st.session_state["ledger"] = AttachmentLedger()
        st.rerun()

    _header(draft)
    _entries(draft)

    st.subheader("Totals")
    col1, col2 = st.columns(2)
    col1.metric("Total Regular Hours", draft.sheet.total_regular_hours)
    col2.metric("Grand Total Hours", draft.sheet.grand_total_hours)

    _attachments(ledger)

    if st.button("Save", type="primary", disabled=not record_id):
        with st.spinner("Saving..."):
            try:
                outcome = save_time_sheet(
                    _client(settings), draft, ledger, record_id,
                    attachment_retries=settings.attachment_retries,
                    reject_overnight=settings.reject_overnight,
                )
            except TimesheetValidationError as e:
                for err in e.errors:
                    st.error(err)
                return
            except SaveError as e:
                st.error(e.message)
                return

        if outcome.attachments_pending:
            st.warning(f"Time sheet saved, but attachments are still pending: {outcome.error}")
        else:
            st.success("Daily Time Sheet updated successfully!")


if __name__ == "__main__":
    main()
