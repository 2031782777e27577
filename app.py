import streamlit as st
import os
import pandas as pd

from api_client import MemberApi
from view_state import MemberController, HOME, FORM, LIST

# --- 기본 설정 ---
# FastAPI 백엔드 주소
API_URL = "http://localhost:3000/api"  # 로컬 개발용 기본값

if "API_URL" in os.environ:
    API_URL = os.environ["API_URL"]
else:
    try:
        if "API_URL" in st.secrets:
            API_URL = st.secrets["API_URL"]
    except (FileNotFoundError, st.errors.StreamlitAPIException):
        # secrets.toml 파일이 없으면 기본값 사용
        pass

st.set_page_config(page_title="Gym Membership Management", layout="wide")

SEX_OPTIONS = ["", "Male", "Female", "Other"]
MEMBERSHIP_OPTIONS = ["", "Monthly", "Quarterly", "Yearly"]
PAYMENT_OPTIONS = ["", "Cash", "Credit Card", "Bank Transfer"]

TEXT_AREAS = [
    ("medications", "Current Medications"),
    ("allergies", "Allergies"),
    ("past_injuries", "Past Injuries"),
    ("medical_conditions", "Current Medical Conditions"),
]

# --- 세션 상태 초기화 ---
if 'controller' not in st.session_state:
    st.session_state.controller = MemberController(MemberApi(API_URL))
    # 처음 열 때 기존 회원 목록을 한 번 불러옴
    st.session_state.controller.fetch_members()
if 'form_version' not in st.session_state:
    st.session_state.form_version = 0
if 'editor_version' not in st.session_state:
    st.session_state.editor_version = 0

controller = st.session_state.controller
state = controller.state


def bump(key):
    # 위젯 key 를 바꿔서 이전 입력값이 남지 않게 함
    st.session_state[key] += 1


def with_current(options, value):
    # API 로 직접 저장된 값이 목록에 없으면 선택지에 추가
    return options if value in options else options + [value]


# --- 페이지 로직 ---

def show_header():
    col_title, col_nav = st.columns([2, 1])
    with col_title:
        st.title("Gym Membership Management")
        st.caption("Streamlit frontend with FastAPI + SQLite backend")
    with col_nav:
        c1, c2, c3 = st.columns(3)
        if c1.button("Home", use_container_width=True):
            controller.set_view(HOME)
            st.rerun()
        if c2.button("New Application", use_container_width=True):
            controller.reset_form()
            controller.set_view(FORM)
            bump('form_version')
            st.rerun()
        if c3.button("View Members", use_container_width=True):
            controller.set_view(LIST)
            bump('editor_version')
            st.rerun()

    if state.message:
        st.info(state.message)


# 1. 홈 화면
def show_home():
    st.write(
        "This application lets an admin capture gym membership applications "
        "and manage them in a simple list."
    )
    st.write("Use the buttons above to start a new application or review existing members.")


# 2. 신청서 / 수정 폼
def show_form():
    draft = state.draft
    sex_options = with_current(SEX_OPTIONS, draft["sex"])
    membership_options = with_current(MEMBERSHIP_OPTIONS, draft["membership_type"])
    payment_options = with_current(PAYMENT_OPTIONS, draft["payment_type"])
    st.subheader("Edit Member" if state.editing_id is not None else "New Membership Application")

    with st.form(f"member_form_{st.session_state.form_version}"):
        values = {}
        col1, col2, col3, col4 = st.columns([4, 2, 2, 4])
        values["name"] = col1.text_input("Full Name *", value=draft["name"])
        values["sex"] = col2.selectbox("Sex", sex_options, index=sex_options.index(draft["sex"]))
        values["age"] = col3.text_input("Age", value=draft["age"])
        values["dob"] = col4.text_input("Date of Birth", value=draft["dob"], placeholder="YYYY-MM-DD")

        col1, col2, col3 = st.columns([8, 2, 2])
        values["address"] = col1.text_input("Address", value=draft["address"])
        values["state"] = col2.text_input("State", value=draft["state"])
        values["country"] = col3.text_input("Country *", value=draft["country"])

        col1, col2, col3 = st.columns(3)
        values["email"] = col1.text_input("Email *", value=draft["email"])
        values["emergency_contact"] = col2.text_input("Emergency Contact", value=draft["emergency_contact"])
        values["emergency_phone"] = col3.text_input("Emergency Phone", value=draft["emergency_phone"])

        col1, col2, _ = st.columns(3)
        values["membership_type"] = col1.selectbox(
            "Membership Type *", membership_options,
            index=membership_options.index(draft["membership_type"]),
        )
        values["payment_type"] = col2.selectbox(
            "Payment Type", payment_options,
            index=payment_options.index(draft["payment_type"]),
        )

        for key, label in TEXT_AREAS:
            values[key] = st.text_area(label, value=draft[key], height=70)
        values["medical_contact"] = st.text_input("Medical Contact", value=draft["medical_contact"])
        values["medical_contact_phone"] = st.text_input("Medical Contact Phone", value=draft["medical_contact_phone"])
        values["other_info"] = st.text_area("Other Info", value=draft["other_info"], height=70)

        col_save, col_clear, _ = st.columns([1, 1, 4])
        submitted = col_save.form_submit_button("Update Member" if state.editing_id is not None else "Save Member")
        cleared = col_clear.form_submit_button("Clear Form")

    if submitted:
        state.draft.update(values)
        if controller.save_member():
            bump('form_version')
            bump('editor_version')
        st.rerun()
    if cleared:
        controller.reset_form()
        bump('form_version')
        st.rerun()


# 3. 회원 목록
def show_list():
    st.subheader("Member List")

    col_all, col_delete = st.columns([4, 1])
    with col_all:
        st.checkbox(
            "Select All",
            value=state.select_all,
            key=f"select_all_{st.session_state.editor_version}",
            on_change=lambda: (controller.toggle_select_all(), bump('editor_version')),
        )
    with col_delete:
        if st.button("Delete Selected", type="primary", use_container_width=True):
            if state.selected:
                st.session_state['delete_confirm_targets'] = sorted(state.selected)
            else:
                controller.delete_selected()
            st.rerun()

    # 일괄 삭제 확인
    if st.session_state.get('delete_confirm_targets'):
        targets = st.session_state['delete_confirm_targets']
        st.warning(f"Delete {len(targets)} selected member(s)?")
        col_yes, col_no = st.columns(2)
        with col_yes:
            if st.button("Yes, delete", key="confirm_yes_bulk"):
                del st.session_state['delete_confirm_targets']
                controller.delete_selected()
                bump('editor_version')
                st.rerun()
        with col_no:
            if st.button("Cancel", key="confirm_no_bulk"):
                del st.session_state['delete_confirm_targets']
                st.rerun()

    if not state.members:
        st.caption("No members found.")
        return

    # 데이터프레임 변환 및 선택 컬럼 추가
    df = pd.DataFrame(state.members)
    df = df[["id", "name", "membership_type", "email", "emergency_contact", "country"]]
    df.insert(0, "selected", df["id"].isin(state.selected))

    edited_df = st.data_editor(
        df,
        column_config={
            "selected": st.column_config.CheckboxColumn("", default=False),
            "id": "ID",
            "name": "Name",
            "membership_type": "Membership",
            "email": "Email",
            "emergency_contact": "Emergency Contact",
            "country": "Country",
        },
        disabled=["id", "name", "membership_type", "email", "emergency_contact", "country"],
        hide_index=True,
        use_container_width=True,
        key=f"member_list_editor_{st.session_state.editor_version}",
    )

    # 체크박스 변경분만 컨트롤러에 반영
    for member_id, checked in zip(edited_df["id"], edited_df["selected"]):
        if bool(checked) != (int(member_id) in state.selected):
            controller.toggle_selection(int(member_id))
            bump('editor_version')
            st.rerun()

    st.markdown("---")
    members_by_id = {m["id"]: m for m in state.members}
    target_id = st.selectbox(
        "Member",
        list(members_by_id),
        format_func=lambda mid: f"#{mid} {members_by_id[mid].get('name') or ''}",
    )
    col_edit, col_del, _ = st.columns([1, 1, 4])
    if col_edit.button("Edit", use_container_width=True):
        controller.edit_member(members_by_id[target_id])
        bump('form_version')
        st.rerun()
    if col_del.button("Delete", use_container_width=True):
        st.session_state['delete_confirm_target'] = target_id
        st.rerun()

    # 개별 삭제 확인
    if st.session_state.get('delete_confirm_target') is not None:
        target = st.session_state['delete_confirm_target']
        st.warning(f"Are you sure you want to delete member #{target}?")
        col_yes, col_no = st.columns(2)
        with col_yes:
            if st.button("Yes, delete", key="confirm_yes_single"):
                del st.session_state['delete_confirm_target']
                controller.delete_member(target)
                bump('editor_version')
                st.rerun()
        with col_no:
            if st.button("Cancel", key="confirm_no_single"):
                del st.session_state['delete_confirm_target']
                st.rerun()


# --- 메인 실행 로직 ---
show_header()
if state.view == FORM:
    show_form()
elif state.view == LIST:
    show_list()
else:
    show_home()
