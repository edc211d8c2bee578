import sys
import os

# Add project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging

import streamlit as st

from app.components import (
    queue_toast, flush_toasts,
    render_header, render_filters, render_loading, render_table, render_pagination,
    confirm_delete_dialog, show_book_modal,
)
from catalog.config import get_settings
from catalog.controller import PageState, FormSession, derive_view
from catalog.errors import CatalogError
from catalog.events import EventBus, NOTIFICATION
from catalog.repository import BookRepository, build_repository
from catalog.services import BookService

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@st.cache_resource
def get_repository() -> BookRepository:
    """One backend client per server process"""
    return build_repository(settings)


def get_service() -> BookService:
    if "book_service" not in st.session_state:
        events = EventBus()
        events.subscribe(NOTIFICATION, queue_toast)
        st.session_state.book_service = BookService(
            get_repository(),
            events=events,
            list_ttl=settings.list_ttl_seconds,
        )
    return st.session_state.book_service


def get_page_state() -> PageState:
    if "page_state" not in st.session_state:
        st.session_state.page_state = PageState()
    return st.session_state.page_state


st.set_page_config(page_title="BookManager", page_icon="📖", layout="wide")

service = get_service()
state = get_page_state()

flush_toasts()
render_header(state)
render_filters(state)

table_slot = st.empty()
with table_slot.container():
    render_loading()

try:
    books = asyncio.run(service.list_books())
except CatalogError as e:
    logger.error(f"Error loading books: {e!r}")
    table_slot.empty()
    st.error("Error loading books. Please try again later.")
    st.stop()

view = derive_view(books, state, settings.page_size)
with table_slot.container():
    render_table(list(view.page.items), state)
render_pagination(view, state)

# Dialogs open only on the run that requested them; later fragment reruns keep them up
if st.session_state.pop("show_book_modal", False) and state.modal.is_open:
    st.session_state.pop("form_errors", None)
    st.session_state.form_session = FormSession(service, state.modal.book)
    show_book_modal(st.session_state.form_session, state)
else:
    state.close_modal()

book_to_delete = st.session_state.pop("confirm_delete", None)
if book_to_delete is not None:
    confirm_delete_dialog(service, book_to_delete)
