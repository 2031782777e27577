from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional
import json
import logging
import os
import sys

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

# 내부 모듈 임포트
import crud
from crud import StoreError
from database import get_db, init_db

# --- 설정 ---

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- 로깅 (JSON 한 줄 형식) ---

class _JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": "gym-membership-api",
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_obj["exception"] = str(record.exc_info[1])
        return json.dumps(log_obj)


_handler = logging.StreamHandler(sys.stdout)
_handler.setFormatter(_JSONFormatter())
logging.basicConfig(level=LOG_LEVEL, handlers=[_handler])
logger = logging.getLogger("gym-membership-api")

# --- Pydantic 모델 ---

class MemberPayload(BaseModel):
    """생성/수정 요청 본문. 필드 검증은 하지 않음 (클라이언트에서 처리)"""
    # id, created_at 등 알 수 없는 키는 무시, 숫자는 텍스트로 변환
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: Optional[str] = None
    sex: Optional[str] = None
    age: Optional[str] = None
    dob: Optional[str] = None
    address: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    email: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    membership_type: Optional[str] = None
    medications: Optional[str] = None
    allergies: Optional[str] = None
    past_injuries: Optional[str] = None
    medical_conditions: Optional[str] = None
    medical_contact: Optional[str] = None
    medical_contact_phone: Optional[str] = None
    other_info: Optional[str] = None
    payment_type: Optional[str] = None


class MemberInfo(MemberPayload):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None


class CreateResult(BaseModel):
    success: bool = True
    id: int


class ChangeResult(BaseModel):
    success: bool = True
    changes: int

# --- FastAPI 애플리케이션 생성 ---

@asynccontextmanager
async def lifespan(application: FastAPI):
    # 테이블이 없으면 생성 (매 부팅마다 실행해도 안전)
    init_db()
    logger.info("Members table ready")
    yield


app = FastAPI(title="Gym Membership API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    # 세부 내용은 로그에만 남기고 응답은 짧은 메시지로
    logger.error("%s %s -> %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": f"{exc.operation} failed"})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # 본문이 JSON 이 아니거나 경로의 id 가 정수가 아닌 경우도 {"error": ...} 형식으로 응답
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=422, content={"error": "invalid request"})

# --- API 엔드포인트 ---

@app.get("/", response_class=PlainTextResponse)
def read_root():
    return "Gym membership API is running"


@app.post("/api/members", response_model=CreateResult)
def create_member(member: MemberPayload, db_session: Session = Depends(get_db)):
    """
    신규 회원 등록. id 와 created_at 은 서버에서 부여
    """
    new_id = crud.insert_member(db_session, member.model_dump())
    return {"success": True, "id": new_id}


@app.get("/api/members", response_model=List[MemberInfo])
def read_all_members(db_session: Session = Depends(get_db)):
    """
    전체 회원 목록 조회 (최신 id 순)
    """
    return crud.select_all_members(db_session)


@app.put("/api/members/{member_id}", response_model=ChangeResult)
def update_member(member_id: int, member: MemberPayload, db_session: Session = Depends(get_db)):
    # 없는 id 이면 changes = 0 (오류 아님)
    changes = crud.update_member(db_session, member_id, member.model_dump())
    return {"success": True, "changes": changes}


@app.delete("/api/members/{member_id}", response_model=ChangeResult)
def delete_member(member_id: int, db_session: Session = Depends(get_db)):
    changes = crud.delete_member_by_id(db_session, member_id)
    return {"success": True, "changes": changes}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())
