import asyncio
import logging
from typing import List

import streamlit as st

from catalog.controller import PageState, PageView, FormSession
from catalog.domain import Book, GENRES, STATUSES, ALL_GENRES, ALL_STATUS, AVAILABLE
from catalog.errors import CatalogError, ValidationError, SubmitInProgress
from catalog.events import Event
from catalog.services import BookService

logger = logging.getLogger(__name__)

COLUMN_WIDTHS = [3, 2.2, 1.8, 0.8, 1.2, 1.2]
GENRE_OPTIONS = [ALL_GENRES] + list(GENRES)
STATUS_OPTIONS = [ALL_STATUS] + list(STATUSES)
OPTION_LABELS = {ALL_GENRES: "All Genres", ALL_STATUS: "All Status"}


# Notifications

def queue_toast(event: Event) -> None:
    """EventBus handler: keep the toast until the next render can show it"""
    st.session_state.setdefault("pending_toasts", []).append(event.payload["notification"])


def flush_toasts() -> None:
    for notification in st.session_state.pop("pending_toasts", []):
        icon = "✅" if notification.success else "❌"
        st.toast(f"**{notification.title}** · {notification.message}", icon=icon)


# Layout

def render_header(state: PageState) -> None:
    st.markdown("### 📖 BookManager")
    st.caption("Library Management System")
    st.divider()

    title_col, button_col = st.columns([4, 1], vertical_alignment="bottom")
    with title_col:
        st.subheader("Book Management")
        st.caption("Manage your library collection")
    with button_col:
        st.button("➕ Add Book", type="primary", use_container_width=True,
                  on_click=_request_modal, args=(state, None))


def _request_modal(state: PageState, book) -> None:
    if book is None:
        state.open_create()
    else:
        state.open_edit(book)
    st.session_state["show_book_modal"] = True


# Filter bar

def render_filters(state: PageState) -> None:
    search_col, genre_col, status_col = st.columns([3, 1.5, 1.5])

    with search_col:
        st.text_input(
            "Search",
            value=state.search_term,
            placeholder="Search by title or author...",
            key="filter_search",
            label_visibility="collapsed",
            on_change=lambda: state.set_search(st.session_state["filter_search"]),
        )
    with genre_col:
        st.selectbox(
            "Genre",
            GENRE_OPTIONS,
            index=GENRE_OPTIONS.index(state.genre_filter),
            format_func=lambda option: OPTION_LABELS.get(option, option),
            key="filter_genre",
            label_visibility="collapsed",
            on_change=lambda: state.set_genre(st.session_state["filter_genre"]),
        )
    with status_col:
        st.selectbox(
            "Status",
            STATUS_OPTIONS,
            index=STATUS_OPTIONS.index(state.status_filter),
            format_func=lambda option: OPTION_LABELS.get(option, option),
            key="filter_status",
            label_visibility="collapsed",
            on_change=lambda: state.set_status(st.session_state["filter_status"]),
        )


# Data table

def render_loading(rows: int = 5) -> None:
    with st.container(border=True):
        for _ in range(rows):
            st.markdown(
                "<div style='height:2.5rem; margin:0.4rem 0; border-radius:0.4rem; "
                "background:rgba(128,128,128,0.15)'></div>",
                unsafe_allow_html=True,
            )


def render_empty() -> None:
    with st.container(border=True):
        st.markdown(
            "<p style='text-align:center; padding:2rem 0; opacity:0.7'>"
            "No books found. Add your first book to get started!</p>",
            unsafe_allow_html=True,
        )


def _status_badge(status: str) -> str:
    color = "green" if status == AVAILABLE else "orange"
    return f":{color}-background[{status}]"


def render_table(books: List[Book], state: PageState) -> None:
    if not books:
        render_empty()
        return

    with st.container(border=True):
        header = st.columns(COLUMN_WIDTHS)
        for col, label in zip(header, ["Title", "Author", "Genre", "Year", "Status", "Actions"]):
            col.markdown(f"**{label}**")

        for book in books:
            title, author, genre, year, status, actions = st.columns(COLUMN_WIDTHS, vertical_alignment="center")
            title.markdown(f"**{book.title}**")
            author.write(book.author)
            genre.markdown(f":blue-background[{book.genre}]")
            year.write(str(book.published_year))
            status.markdown(_status_badge(book.status))

            edit_col, delete_col = actions.columns(2)
            edit_col.button("✏️", key=f"edit_{book.id}", help="Edit",
                            on_click=_request_modal, args=(state, book))
            delete_col.button("🗑️", key=f"delete_{book.id}", help="Delete",
                              on_click=_request_delete, args=(book,))


def _request_delete(book: Book) -> None:
    st.session_state["confirm_delete"] = book


@st.dialog("Delete Book")
def confirm_delete_dialog(service: BookService, book: Book) -> None:
    st.write(f'Are you sure you want to delete "{book.title}"? This action cannot be undone.')

    cancel_col, delete_col = st.columns(2)
    if cancel_col.button("Cancel", use_container_width=True):
        st.rerun()
    if delete_col.button("Delete", type="primary", use_container_width=True):
        try:
            with st.spinner("Deleting..."):
                asyncio.run(service.delete_book(book.id))
        except CatalogError as e:
            logger.error(f"Delete error: {e}")
            flush_toasts()
            return
        st.rerun()


# Pagination control

def render_pagination(view: PageView, state: PageState) -> None:
    if not view.show_pagination:
        return

    page = view.page
    with st.container(border=True):
        info_col, nav_col = st.columns([2, 3], vertical_alignment="center")
        info_col.caption(f"Showing {page.start_item} to {page.end_item} of {page.total_items} books")

        buttons = nav_col.columns(len(view.window) + 2)
        buttons[0].button("‹ Previous", key="page_prev", disabled=not page.has_previous,
                          on_click=state.go_to_page, args=(page.current_page - 1, page.total_pages))
        for col, number in zip(buttons[1:-1], view.window):
            col.button(str(number), key=f"page_{number}",
                       type="primary" if number == page.current_page else "secondary",
                       on_click=state.go_to_page, args=(number, page.total_pages))
        buttons[-1].button("Next ›", key="page_next", disabled=not page.has_next,
                           on_click=state.go_to_page, args=(page.current_page + 1, page.total_pages))


# Create/edit modal

def _field_error(field: str) -> None:
    message = st.session_state.get("form_errors", {}).get(field)
    if message:
        st.caption(f":red[{message}]")


def _option_index(options, value, fallback=None):
    if value in options:
        return options.index(value)
    return fallback


def _book_form_body(session: FormSession, state: PageState) -> None:
    defaults = session.defaults()

    with st.form("book_form", border=False):
        title = st.text_input("Title", value=defaults["title"], placeholder="Enter book title")
        _field_error("title")

        author = st.text_input("Author", value=defaults["author"], placeholder="Enter author name")
        _field_error("author")

        genre = st.selectbox(
            "Genre",
            GENRES,
            index=_option_index(GENRES, defaults["genre"]),
            placeholder="Select a genre",
        )
        _field_error("genre")

        published_year = st.number_input("Published Year", value=int(defaults["published_year"]),
                                         step=1, format="%d", placeholder="Enter published year")
        _field_error("published_year")

        status = st.selectbox("Status", STATUSES, index=_option_index(STATUSES, defaults["status"], 0))
        _field_error("status")

        submitted = st.form_submit_button(session.submit_label, type="primary")

    if st.button("Cancel"):
        _close_modal(state)
        st.rerun()

    if not submitted:
        return

    data = {
        "title": title,
        "author": author,
        "genre": genre,
        "published_year": published_year,
        "status": status,
    }
    try:
        with st.spinner("Saving..."):
            asyncio.run(session.submit(data))
    except ValidationError as e:
        st.session_state["form_errors"] = e.errors
        st.rerun(scope="fragment")
    except SubmitInProgress:
        st.warning("Still saving, please wait.")
    except CatalogError as e:
        # The service already queued the failure toast; the modal stays open
        logger.error(f"Form submission error: {e}")
        st.session_state.pop("form_errors", None)
        flush_toasts()
    else:
        _close_modal(state)
        st.rerun()


def _close_modal(state: PageState) -> None:
    state.close_modal()
    st.session_state.pop("form_errors", None)
    st.session_state.pop("form_session", None)


def show_book_modal(session: FormSession, state: PageState) -> None:
    st.dialog(session.title, width="large")(_book_form_body)(session, state)
