"""
화면 상태(ViewState)와 상태 전이(MemberController).

Streamlit 페이지(app.py)는 이 컨트롤러를 세션에 하나 보관하고
버튼 이벤트마다 아래 메서드를 호출한 뒤 state 를 그대로 렌더링한다.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from api_client import ApiError
from models import MEMBER_FIELDS
from validation import validate_member_form

logger = logging.getLogger(__name__)

HOME = "home"
FORM = "form"
LIST = "list"
VIEWS = (HOME, FORM, LIST)


def empty_draft() -> Dict[str, str]:
    return {key: "" for key in MEMBER_FIELDS}


@dataclass
class ViewState:
    view: str = HOME
    message: str = ""
    members: List[Dict[str, Any]] = field(default_factory=list)
    editing_id: Optional[int] = None
    draft: Dict[str, str] = field(default_factory=empty_draft)
    selected: Set[int] = field(default_factory=set)

    @property
    def listed_ids(self) -> Set[int]:
        return {m["id"] for m in self.members}

    @property
    def select_all(self) -> bool:
        # 항상 목록과 비교해서 계산 (따로 저장하지 않음)
        return bool(self.members) and self.selected == self.listed_ids


class MemberController:
    def __init__(self, api, state: Optional[ViewState] = None):
        self.api = api
        self.state = state or ViewState()

    # --- 화면 전환 ---

    def set_view(self, view: str):
        if view not in VIEWS:
            raise ValueError(f"Unknown view: {view}")
        leaving_list = self.state.view == LIST and view != LIST
        self.state.view = view
        self.state.message = ""
        if leaving_list:
            self.state.selected = set()
        if view == LIST:
            self.fetch_members()

    def fetch_members(self):
        """목록 캐시를 서버 데이터로 교체. 실패하면 기존 캐시 유지"""
        try:
            self.state.members = self.api.list_members()
            # 더 이상 목록에 없는 id 는 선택에서 제외
            self.state.selected &= self.state.listed_ids
        except ApiError:
            logger.exception("Error loading members")
            self.state.message = "Error loading members from the server."

    # --- 폼 ---

    def reset_form(self):
        self.state.editing_id = None
        self.state.draft = empty_draft()

    def save_member(self) -> bool:
        """검증 후 생성 또는 수정. 성공하면 목록 화면으로 이동"""
        error = validate_member_form(self.state.draft)
        if error:
            self.state.message = error
            return False

        payload = dict(self.state.draft)
        if self.state.editing_id is not None:
            action, done = "updating", "Member updated successfully."
        else:
            action, done = "saving", "Member saved successfully."
        try:
            if self.state.editing_id is not None:
                self.api.update_member(self.state.editing_id, payload)
            else:
                self.api.create_member(payload)
        except ApiError:
            # 화면과 작성 중인 폼은 그대로 둔다
            logger.exception("Error %s member", action)
            self.state.message = f"Error {action} member."
            return False

        self.state.message = done
        self.fetch_members()
        self.state.view = LIST
        self.reset_form()
        return True

    def edit_member(self, member: Dict[str, Any]):
        self.state.editing_id = member["id"]
        self.state.draft = {key: member.get(key) or "" for key in MEMBER_FIELDS}
        self.state.view = FORM
        self.state.message = f"Editing member #{member['id']}"

    # --- 삭제 ---

    def delete_member(self, member_id: int) -> bool:
        """사용자가 확인한 뒤 호출"""
        try:
            self.api.delete_member(member_id)
        except ApiError:
            logger.exception("Error deleting member #%s", member_id)
            self.state.message = "Error deleting member."
            return False
        self.state.message = "Member deleted."
        self.fetch_members()
        return True

    def toggle_selection(self, member_id: int):
        if member_id in self.state.selected:
            self.state.selected.discard(member_id)
        else:
            self.state.selected.add(member_id)

    def toggle_select_all(self):
        if self.state.select_all:
            self.state.selected = set()
        else:
            self.state.selected = set(self.state.listed_ids)

    def delete_selected(self) -> bool:
        """선택된 회원을 동시에 삭제. 하나라도 실패하면 메시지 하나만 표시"""
        if not self.state.selected:
            self.state.message = "No members selected to delete."
            return False

        ids = sorted(self.state.selected)
        with ThreadPoolExecutor(max_workers=len(ids)) as pool:
            futures = [pool.submit(self.api.delete_member, member_id) for member_id in ids]
        # with 블록을 빠져나오면 모든 요청이 끝난 상태
        failed = [f.exception() for f in futures if f.exception() is not None]
        if failed:
            logger.error("Error deleting selected members: %s", failed[0])
            self.state.message = "Error deleting selected members."
            return False

        self.state.message = "Selected members deleted."
        self.fetch_members()
        self.state.selected = set()
        return True
