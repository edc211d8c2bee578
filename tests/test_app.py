import asyncio
import pytest
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from streamlit.testing.v1 import AppTest

from app.components import queue_toast
from catalog.controller import PageState
from catalog.domain import Book
from catalog.errors import NetworkError, NotFound
from catalog.events import EventBus, NOTIFICATION
from catalog.repository import InMemoryBookRepository
from catalog.seed import create_sample_books
from catalog.services import BookService

APP_SCRIPT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'app', 'main.py'))


class ScriptedRepository(InMemoryBookRepository):
    """Mock backend whose reads or writes can be told to fail"""

    def __init__(self, books=None, fail_list=False, fail_writes=False):
        super().__init__(create_sample_books() if books is None else books, delay=0)
        self.fail_list = fail_list
        self.fail_writes = fail_writes

    async def list(self):
        if self.fail_list:
            raise NetworkError("backend unreachable")
        return await super().list()

    async def create(self, payload):
        if self.fail_writes:
            raise NetworkError("write rejected")
        return await super().create(payload)

    async def update(self, book_id, payload):
        if self.fail_writes:
            raise NetworkError("write rejected")
        return await super().update(book_id, payload)


def make_service(repo):
    events = EventBus()
    events.subscribe(NOTIFICATION, queue_toast)
    return BookService(repo, events=events)


def run_app(repo):
    at = AppTest.from_file(APP_SCRIPT)
    at.session_state["book_service"] = make_service(repo)
    return at.run()


def button_keys(at):
    return {b.key for b in at.button if b.key}


def book_form_script():
    import streamlit as st
    from app.components import _book_form_body
    from catalog.controller import FormSession

    state = st.session_state.page_state
    if state.modal.is_open:
        if "form_session" not in st.session_state:
            st.session_state.form_session = FormSession(st.session_state.book_service, state.modal.book)
        _book_form_body(st.session_state.form_session, state)
    else:
        st.markdown("modal closed")


def delete_dialog_script():
    import streamlit as st
    from app.components import confirm_delete_dialog

    confirm_delete_dialog(st.session_state.book_service, st.session_state.target)


def open_form(repo, book=None):
    state = PageState()
    if book is None:
        state.open_create()
    else:
        state.open_edit(book)
    at = AppTest.from_function(book_form_script)
    at.session_state["book_service"] = make_service(repo)
    at.session_state["page_state"] = state
    return at.run()


def fill_form(at, **values):
    for widget in at.text_input:
        if widget.label == "Title":
            widget.input(values["title"])
        elif widget.label == "Author":
            widget.input(values["author"])
    next(w for w in at.selectbox if w.label == "Genre").select(values["genre"])
    next(w for w in at.number_input if w.label == "Published Year").set_value(values["published_year"])


def click(at, label):
    next(b for b in at.button if b.label == label).click()
    return at.run()


DUNE = dict(title="Dune", author="Frank Herbert", genre="Science Fiction", published_year=1965)


# ==================== Catalogue page ====================

def test_list_failure_shows_terminal_error():
    at = run_app(ScriptedRepository(fail_list=True))

    assert not at.exception
    assert [e.value for e in at.error] == ["Error loading books. Please try again later."]
    assert not any(key.startswith("edit_") for key in button_keys(at))


def test_pagination_hidden_for_ten_books():
    at = run_app(ScriptedRepository(create_sample_books()[:10]))

    keys = button_keys(at)
    assert len([key for key in keys if key.startswith("edit_")]) == 10
    assert "page_next" not in keys
    assert "page_prev" not in keys


def test_pagination_moves_to_second_page():
    at = run_app(ScriptedRepository())

    assert "Showing 1 to 10 of 12 books" in [c.value for c in at.caption]

    at.button(key="page_2").click().run()

    assert "Showing 11 to 12 of 12 books" in [c.value for c in at.caption]
    assert {key for key in button_keys(at) if key.startswith("edit_")} == {"edit_11", "edit_12"}


# ==================== Create/edit modal ====================

def test_successful_submit_closes_modal():
    repo = ScriptedRepository()
    at = open_form(repo)

    fill_form(at, **DUNE)
    at = click(at, "Add Book")

    assert not at.exception
    assert [m.value for m in at.markdown] == ["modal closed"]
    assert not at.session_state["page_state"].modal.is_open
    assert len(asyncio.run(repo.list())) == 13
    assert at.session_state["pending_toasts"][-1].message == "Book created successfully!"


def test_failed_submit_keeps_modal_open_with_error_toast():
    repo = ScriptedRepository(fail_writes=True)
    at = open_form(repo)

    fill_form(at, **DUNE)
    at = click(at, "Add Book")

    assert not at.exception
    assert at.session_state["page_state"].modal.is_open
    assert "modal closed" not in [m.value for m in at.markdown]
    assert any("Failed to create book. Please try again." in t.value for t in at.toast)
    assert len(asyncio.run(repo.list())) == 12


def test_edit_form_tolerates_unknown_genre_and_status():
    stray = Book("a1", "Emma", "Jane Austen", "Poetry", 1815, "Lost")
    at = open_form(ScriptedRepository(), stray)

    assert not at.exception
    assert next(w for w in at.selectbox if w.label == "Status").value == "Available"
    assert next(w for w in at.selectbox if w.label == "Genre").value is None
    assert next(w for w in at.text_input if w.label == "Title").value == "Emma"


# ==================== Delete confirmation ====================

@pytest.mark.parametrize("choice, remaining", [("Delete", 11), ("Cancel", 12)])
def test_delete_confirmation(choice, remaining):
    repo = ScriptedRepository()
    target = asyncio.run(repo.get("1"))
    at = AppTest.from_function(delete_dialog_script)
    at.session_state["book_service"] = make_service(repo)
    at.session_state["target"] = target
    at.run()

    assert any('Are you sure you want to delete "' in m.value for m in at.markdown)

    at = click(at, choice)

    assert not at.exception
    assert len(asyncio.run(repo.list())) == remaining
    if choice == "Delete":
        with pytest.raises(NotFound):
            asyncio.run(repo.get("1"))
