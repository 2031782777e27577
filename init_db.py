import logging

from database import SessionLocal, init_db
from models import Member
import crud

logger = logging.getLogger(__name__)

# 개발용 샘플 회원 (이메일 기준으로 중복 생성하지 않음)
DEMO_MEMBERS = [
    {
        "name": "Alex Morgan",
        "sex": "Female",
        "age": "29",
        "dob": "1997-03-14",
        "address": "12 King Street",
        "state": "NSW",
        "country": "Australia",
        "email": "alex.morgan@example.com",
        "emergency_contact": "Sam Morgan",
        "emergency_phone": "+61 412 345 678",
        "membership_type": "Monthly",
        "payment_type": "Credit Card",
    },
    {
        "name": "Jordan Lee",
        "sex": "Male",
        "age": "41",
        "dob": "1985-08-02",
        "address": "88 Harbour Road",
        "state": "VIC",
        "country": "Australia",
        "email": "jordan.lee@example.com",
        "emergency_contact": "Chris Lee",
        "emergency_phone": "0398765432",
        "membership_type": "Yearly",
        "allergies": "Peanuts",
        "payment_type": "Bank Transfer",
    },
]


def init_db_data(session_factory=SessionLocal, bind=None):
    init_db(bind)
    db = session_factory()

    print("--- 샘플 회원 데이터 초기화 시작 ---")
    created = []
    try:
        for fields in DEMO_MEMBERS:
            if db.query(Member).filter(Member.email == fields["email"]).first():
                print(f"ℹ️ {fields['name']} 회원이 이미 존재합니다.")
                continue
            member_id = crud.insert_member(db, fields)
            created.append(member_id)
            print(f"✅ {fields['name']} 회원 생성됨 (ID: {member_id})")
    finally:
        db.close()
    print("--- 초기화 완료 ---")
    return created


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db_data()
