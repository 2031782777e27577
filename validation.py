import re
from typing import Dict, Optional

# local@domain.tld 형태만 확인하는 간단한 패턴
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_PHONE_DIGITS = 10
MAX_PHONE_DIGITS = 15

# 부호와 소수점만 허용하는 ASCII 숫자 텍스트 (nan, inf, 1_0 등은 거부)
AGE_PATTERN = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)$")


def _value(draft: Dict[str, str], field: str) -> str:
    return (draft.get(field) or "").strip()


def phone_digit_count(phone: str) -> int:
    # 공백, '+', '-' 등 숫자가 아닌 문자는 세지 않음
    return len(re.sub(r"[^0-9]", "", phone))


def validate_member_form(draft: Dict[str, str]) -> Optional[str]:
    """
    폼 검증. 첫 번째로 실패한 규칙의 메시지 하나만 반환하고, 모두 통과하면 None
    """
    if not _value(draft, "name"):
        return "Name is required."

    email = _value(draft, "email")
    if not email:
        return "Email is required."
    if not EMAIL_PATTERN.match(email):
        return "Please enter a valid email address."

    if not _value(draft, "membership_type"):
        return "Membership type is required."
    if not _value(draft, "country"):
        return "Country is required."

    age = _value(draft, "age")
    if age:
        if not AGE_PATTERN.match(age):
            return "Age must be a number."
        if float(age) <= 0:
            return "Age must be greater than zero."

    phones = (
        ("emergency_phone", "Emergency phone"),
        ("medical_contact_phone", "Medical contact phone"),
    )
    for field, label in phones:
        phone = _value(draft, field)
        if phone and not MIN_PHONE_DIGITS <= phone_digit_count(phone) <= MAX_PHONE_DIGITS:
            return f"{label} must contain {MIN_PHONE_DIGITS} to {MAX_PHONE_DIGITS} digits."

    return None
