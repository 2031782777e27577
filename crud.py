import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import Member, MEMBER_FIELDS

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """저장소(DB 엔진) 오류. operation 은 insert / select / update / delete 중 하나"""

    def __init__(self, operation: str, original: Exception):
        super().__init__(f"{operation} failed: {original}")
        self.operation = operation
        self.original = original


def _member_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    # id, created_at, 알 수 없는 키는 무시
    return {key: fields.get(key) for key in MEMBER_FIELDS}


def insert_member(db: Session, fields: Dict[str, Any]) -> int:
    """새 회원 저장 후 DB가 부여한 id 반환"""
    member = Member(**_member_values(fields))
    try:
        db.add(member)
        db.commit()
        new_id = member.id
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error inserting member")
        raise StoreError("insert", e) from e
    logger.info("Inserted member #%s", new_id)
    return new_id


def select_all_members(db: Session) -> List[Member]:
    """전체 회원 목록 (최신 id 순)"""
    try:
        return db.query(Member).order_by(Member.id.desc()).all()
    except SQLAlchemyError as e:
        logger.exception("Error selecting members")
        raise StoreError("select", e) from e


def update_member(db: Session, member_id: int, fields: Dict[str, Any]) -> int:
    """전체 필드 교체. 변경된 행 수(0 또는 1) 반환, created_at 은 건드리지 않음"""
    try:
        changes = (
            db.query(Member)
            .filter(Member.id == member_id)
            .update(_member_values(fields), synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error updating member #%s", member_id)
        raise StoreError("update", e) from e
    logger.info("Updated member #%s (changes=%s)", member_id, changes)
    return changes


def delete_member_by_id(db: Session, member_id: int) -> int:
    """영구 삭제. 없는 id 이면 0 반환 (오류 아님)"""
    try:
        changes = (
            db.query(Member)
            .filter(Member.id == member_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error deleting member #%s", member_id)
        raise StoreError("delete", e) from e
    logger.info("Deleted member #%s (changes=%s)", member_id, changes)
    return changes
