from sqlalchemy import Column, Integer, String, DateTime, func
from database import Base

# id, created_at 을 제외한 편집 가능한 필드 (폼, API, 시드 데이터가 모두 이 순서를 사용)
MEMBER_FIELDS = (
    "name",
    "sex",
    "age",
    "dob",
    "address",
    "state",
    "country",
    "email",
    "emergency_contact",
    "emergency_phone",
    "membership_type",
    "medications",
    "allergies",
    "past_injuries",
    "medical_conditions",
    "medical_contact",
    "medical_contact_phone",
    "other_info",
    "payment_type",
)


class Member(Base):
    __tablename__ = "members"
    # AUTOINCREMENT: 삭제된 id는 재사용하지 않음
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String)
    sex = Column(String)
    age = Column(String)  # 숫자 형태의 텍스트
    dob = Column(String)
    address = Column(String)
    state = Column(String)
    country = Column(String)
    email = Column(String)
    emergency_contact = Column(String)
    emergency_phone = Column(String)
    membership_type = Column(String)
    medications = Column(String)
    allergies = Column(String)
    past_injuries = Column(String)
    medical_conditions = Column(String)
    medical_contact = Column(String)
    medical_contact_phone = Column(String)
    other_info = Column(String)
    payment_type = Column(String)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    def __repr__(self):
        return f"<Member #{self.id} {self.name}>"
