import httpx
import pytest
from fastapi.testclient import TestClient

from todolist.client.view import TodoFilter, TodoView


@pytest.fixture
def api(app):
    # Same base path the real client uses
    with TestClient(app, base_url="http://testserver/api") as c:
        yield c


@pytest.fixture
def view(api):
    return TodoView(api)


def seed(api, *titles, completed=()):
    ids = []
    for title in titles:
        todo = api.post("/todos", json={"title": title}).json()
        if title in completed:
            api.patch(f"/todos/{todo['id']}", json={"completed": True})
        ids.append(todo["id"])
    return ids


def failing_view(handler):
    return TodoView(httpx.Client(transport=httpx.MockTransport(handler), base_url="http://api.test/api"))


class TestLoad:
    def test_load_replaces_local_state(self, api, view):
        a, b = seed(api, "A", "B")
        assert view.load() is True
        assert [t.id for t in view.todos] == [b, a]
        assert view.loading is False

    def test_loading_flag_is_set_during_request(self):
        seen = []

        def handler(request):
            seen.append(view.loading)
            return httpx.Response(200, json=[])

        view = failing_view(handler)
        view.load()
        assert seen == [True]
        assert view.loading is False


class TestMutations:
    def test_add_prepends_and_clears_buffer(self, api, view):
        seed(api, "Existing")
        view.load()
        view.new_title = "  Buy milk "
        assert view.add() is True
        assert view.new_title == ""
        assert view.todos[0].title == "Buy milk"
        assert view.todos[0].completed is False
        assert len(view.todos) == 2

    @pytest.mark.parametrize("title", ["", "   "])
    def test_add_blank_never_hits_server(self, title):
        def handler(request):
            raise AssertionError("no request expected")

        view = failing_view(handler)
        view.new_title = title
        assert view.add() is False
        assert view.new_title == title

    def test_toggle_twice(self, api, view):
        [tid] = seed(api, "Flip")
        view.load()
        assert view.toggle(tid) is True
        assert view.todos[0].completed is True
        assert api.get("/todos").json()[0]["completed"] is True
        assert view.toggle(tid) is True
        assert view.todos[0].completed is False

    def test_toggle_unknown_id_sends_nothing(self, api, view):
        seed(api, "Only")
        view.load()
        assert view.toggle(999) is False

    def test_delete_removes_locally(self, api, view):
        a, b = seed(api, "Keep", "Drop")
        view.load()
        assert view.delete(b) is True
        assert [t.id for t in view.todos] == [a]
        assert [t["id"] for t in api.get("/todos").json()] == [a]


class TestFailures:
    @pytest.mark.parametrize(
        "handler",
        [
            lambda request: httpx.Response(500, json={"error": "Failed to fetch todos"}),
            lambda request: httpx.Response(200, content=b"<html>"),
            lambda request: httpx.Response(200, json=[{"id": "x"}]),
        ],
        ids=["server-error", "not-json", "bad-shape"],
    )
    def test_load_failure_keeps_state(self, handler, caplog):
        view = failing_view(handler)
        view.todos = []
        with caplog.at_level("ERROR", logger="todolist.client.view"):
            assert view.load() is False
        assert view.todos == []
        assert view.loading is False
        assert any("Failed to load todos" in r.getMessage() for r in caplog.records)

    def test_transport_error_keeps_state(self, api, view):
        [tid] = seed(api, "Stay")
        view.load()
        before = list(view.todos)

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        view._http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://api.test/api")
        view.new_title = "New"
        assert view.add() is False
        assert view.toggle(tid) is False
        assert view.delete(tid) is False
        assert view.todos == before
        assert view.new_title == "New"

    def test_server_404_keeps_state(self, api, view):
        [tid] = seed(api, "Ghost")
        view.load()
        api.delete(f"/todos/{tid}")
        assert view.delete(tid) is False
        assert [t.id for t in view.todos] == [tid]


class TestFilter:
    @pytest.fixture
    def loaded(self, api, view):
        seed(api, "one", "two", "three", completed=("two",))
        view.load()
        return view

    def test_partitions(self, loaded):
        loaded.set_filter(TodoFilter.ACTIVE)
        assert {t.title for t in loaded.visible_todos()} == {"one", "three"}
        assert all(not t.completed for t in loaded.visible_todos())

        loaded.set_filter(TodoFilter.COMPLETED)
        assert [t.title for t in loaded.visible_todos()] == ["two"]

        loaded.set_filter("all")
        assert len(loaded.visible_todos()) == 3

    def test_counts_match_subsets(self, loaded):
        counts = loaded.counts()
        assert counts == {TodoFilter.ALL: 3, TodoFilter.ACTIVE: 2, TodoFilter.COMPLETED: 1}
        for f in TodoFilter:
            loaded.set_filter(f)
            assert len(loaded.visible_todos()) == counts[f]

    def test_filter_makes_no_request(self, loaded):
        def handler(request):
            raise AssertionError("no request expected")

        loaded._http = httpx.Client(transport=httpx.MockTransport(handler))
        loaded.set_filter(TodoFilter.COMPLETED)
        loaded.visible_todos()


class TestRender:
    def test_render_lists_todos_and_counts(self, api, view):
        seed(api, "Write report", "Ship it", completed=("Ship it",))
        view.load()
        text = view.render_text()
        assert "Todo List" in text
        assert "All (2)" in text
        assert "Active (1)" in text
        assert "Completed (1)" in text
        assert "Write report" in text
        assert "Ship it" in text

    def test_render_empty_states(self, view):
        assert "No todos yet. Add one above!" in view.render_text()
        view.set_filter(TodoFilter.COMPLETED)
        assert "No completed todos" in view.render_text()

    def test_render_loading(self, view):
        view.loading = True
        assert "Loading..." in view.render_text()
