import threading

import pytest

from api_client import ApiError
from view_state import FORM, HOME, LIST, MemberController, empty_draft


class FakeApi:
    """메모리에 회원을 보관하는 가짜 API 클라이언트"""

    def __init__(self, fail_on=()):
        self.members = {}
        self.next_id = 1
        self.calls = []
        self.fail_on = set(fail_on)
        self.lock = threading.Lock()

    def _maybe_fail(self, op, member_id=None):
        if op in self.fail_on or (op, member_id) in self.fail_on:
            raise ApiError(f"{op} failed")

    def list_members(self):
        self.calls.append(("list",))
        self._maybe_fail("list")
        return [dict(self.members[i], id=i) for i in sorted(self.members, reverse=True)]

    def create_member(self, fields):
        self.calls.append(("create", dict(fields)))
        self._maybe_fail("create")
        new_id = self.next_id
        self.next_id += 1
        self.members[new_id] = dict(fields)
        return new_id

    def update_member(self, member_id, fields):
        self.calls.append(("update", member_id, dict(fields)))
        self._maybe_fail("update")
        if member_id not in self.members:
            return 0
        self.members[member_id] = dict(fields)
        return 1

    def delete_member(self, member_id):
        with self.lock:
            self.calls.append(("delete", member_id))
        self._maybe_fail("delete", member_id)
        with self.lock:
            return 1 if self.members.pop(member_id, None) is not None else 0


def _valid_draft(**overrides):
    draft = empty_draft()
    draft.update(
        name="Alex Morgan",
        email="alex@example.com",
        membership_type="Monthly",
        country="Australia",
        emergency_phone="0412345678",
    )
    draft.update(overrides)
    return draft


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def controller(api):
    return MemberController(api)


def _seed(api, count):
    for n in range(count):
        api.create_member(_valid_draft(name=f"member {n + 1}"))
    api.calls.clear()


# ── Views ────────────────────────────────────────────────────────────────
class TestViews:
    def test_starts_on_home(self, controller):
        assert controller.state.view == HOME
        assert controller.state.editing_id is None
        assert controller.state.draft == empty_draft()

    def test_entering_list_refetches(self, controller, api):
        _seed(api, 2)
        controller.set_view(LIST)
        assert [m["id"] for m in controller.state.members] == [2, 1]
        assert api.calls == [("list",)]

    def test_set_view_clears_message(self, controller):
        controller.state.message = "old"
        controller.set_view(FORM)
        assert controller.state.message == ""

    def test_leaving_list_clears_selection(self, controller, api):
        _seed(api, 2)
        controller.set_view(LIST)
        controller.toggle_selection(1)
        controller.set_view(HOME)
        assert controller.state.selected == set()

    def test_fetch_failure_keeps_cache(self, controller, api):
        _seed(api, 1)
        controller.fetch_members()
        api.fail_on.add("list")
        controller.set_view(LIST)
        assert len(controller.state.members) == 1
        assert controller.state.message == "Error loading members from the server."

    def test_unknown_view_rejected(self, controller):
        with pytest.raises(ValueError):
            controller.set_view("settings")


# ── Save / edit ──────────────────────────────────────────────────────────
class TestSave:
    def test_create_success(self, controller, api):
        controller.set_view(FORM)
        controller.state.draft = _valid_draft()
        assert controller.save_member() is True

        assert api.calls[0][0] == "create"
        assert controller.state.message == "Member saved successfully."
        assert controller.state.view == LIST
        assert [m["name"] for m in controller.state.members] == ["Alex Morgan"]
        assert controller.state.draft == empty_draft()
        assert controller.state.editing_id is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": ""},
            {"email": "not-an-email"},
            {"membership_type": ""},
            {"age": "abc"},
            {"age": "0"},
            {"age": "-3"},
            {"emergency_phone": "123456789"},
            {"emergency_phone": "1234567890123456"},
        ],
    )
    def test_invalid_form_sends_nothing(self, controller, api, overrides):
        controller.set_view(FORM)
        controller.state.draft = _valid_draft(**overrides)
        assert controller.save_member() is False
        assert api.calls == []
        assert controller.state.message
        assert controller.state.view == FORM

    def test_edit_then_update(self, controller, api):
        _seed(api, 1)
        controller.set_view(LIST)
        record = controller.state.members[0]
        controller.edit_member(record)

        assert controller.state.view == FORM
        assert controller.state.editing_id == record["id"]
        assert controller.state.message == f"Editing member #{record['id']}"

        controller.state.draft["membership_type"] = "Yearly"
        assert controller.save_member() is True
        assert api.calls[-2][0] == "update"
        assert controller.state.message == "Member updated successfully."
        assert controller.state.members[0]["membership_type"] == "Yearly"
        assert controller.state.editing_id is None

    def test_edit_defaults_missing_fields(self, controller):
        controller.edit_member({"id": 5, "name": "Sam", "age": None})
        assert controller.state.draft["name"] == "Sam"
        assert controller.state.draft["age"] == ""
        assert controller.state.draft["allergies"] == ""

    @pytest.mark.parametrize("editing_id, op, message", [
        (None, "create", "Error saving member."),
        (1, "update", "Error updating member."),
    ])
    def test_save_failure_keeps_draft(self, controller, api, editing_id, op, message):
        api.fail_on.add(op)
        controller.set_view(FORM)
        controller.state.editing_id = editing_id
        controller.state.draft = _valid_draft()
        assert controller.save_member() is False
        assert controller.state.message == message
        assert controller.state.view == FORM
        assert controller.state.draft == _valid_draft()
        assert controller.state.editing_id == editing_id

    def test_reset_form(self, controller):
        controller.edit_member({"id": 3, "name": "Sam"})
        controller.reset_form()
        assert controller.state.editing_id is None
        assert controller.state.draft == empty_draft()


# ── Delete / selection ───────────────────────────────────────────────────
class TestDelete:
    def test_delete_member(self, controller, api):
        _seed(api, 2)
        controller.set_view(LIST)
        assert controller.delete_member(1) is True
        assert controller.state.message == "Member deleted."
        assert [m["id"] for m in controller.state.members] == [2]

    def test_delete_member_failure_keeps_cache(self, controller, api):
        _seed(api, 2)
        controller.set_view(LIST)
        api.fail_on.add("delete")
        assert controller.delete_member(1) is False
        assert controller.state.message == "Error deleting member."
        assert [m["id"] for m in controller.state.members] == [2, 1]

    def test_select_all_consistency(self, controller, api):
        _seed(api, 3)
        controller.set_view(LIST)
        for member_id in (1, 2, 3):
            controller.toggle_selection(member_id)
        assert controller.state.select_all is True

        controller.toggle_selection(2)
        assert controller.state.select_all is False

        controller.toggle_select_all()
        assert controller.state.selected == {1, 2, 3}
        assert controller.state.select_all is True

        controller.toggle_select_all()
        assert controller.state.selected == set()
        assert controller.state.select_all is False

    def test_select_all_false_for_empty_list(self, controller):
        controller.set_view(LIST)
        assert controller.state.select_all is False

    def test_delete_selected_requires_selection(self, controller, api):
        _seed(api, 1)
        controller.set_view(LIST)
        api.calls.clear()
        assert controller.delete_selected() is False
        assert controller.state.message == "No members selected to delete."
        assert api.calls == []

    def test_delete_selected_all_succeed(self, controller, api):
        _seed(api, 4)
        controller.set_view(LIST)
        for member_id in (1, 2, 4):
            controller.toggle_selection(member_id)

        assert controller.delete_selected() is True
        assert controller.state.message == "Selected members deleted."
        assert [m["id"] for m in controller.state.members] == [3]
        assert controller.state.selected == set()
        assert sorted(c[1] for c in api.calls if c[0] == "delete") == [1, 2, 4]

    def test_delete_selected_partial_failure(self, controller, api):
        _seed(api, 3)
        controller.set_view(LIST)
        controller.toggle_select_all()
        api.fail_on.add(("delete", 2))

        assert controller.delete_selected() is False
        assert controller.state.message == "Error deleting selected members."
        # 모든 삭제 요청은 시도됨
        assert sorted(c[1] for c in api.calls if c[0] == "delete") == [1, 2, 3]

    def test_delete_selected_runs_concurrently(self, controller, api):
        _seed(api, 3)
        controller.set_view(LIST)
        controller.toggle_select_all()

        # 세 요청이 모두 동시에 진행 중이어야 barrier 를 통과함
        barrier = threading.Barrier(3, timeout=5)
        original = api.delete_member

        def delete_member(member_id):
            barrier.wait()
            return original(member_id)

        api.delete_member = delete_member
        assert controller.delete_selected() is True
        assert controller.state.members == []

    def test_single_delete_drops_deleted_id_from_selection(self, controller, api):
        _seed(api, 3)
        controller.set_view(LIST)
        controller.toggle_select_all()

        assert controller.delete_member(3) is True
        assert controller.state.selected == {1, 2}
        assert controller.state.select_all is True

    def test_refetch_drops_ids_removed_elsewhere(self, controller, api):
        _seed(api, 2)
        controller.set_view(LIST)
        controller.toggle_selection(1)
        controller.toggle_selection(2)
        api.members.pop(2)

        controller.fetch_members()
        assert controller.state.selected == {1}
