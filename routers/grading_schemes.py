from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config.settings import Settings
from database.db import get_db
from dependencies.security import require_admin_token
from dependencies.settings import get_app_settings
from schemas.grading_schemes import GradingSchemeCreate, GradingSchemeUpdate
from services import grading_scheme_service
from utils.exceptions import ValidationError

router = APIRouter(prefix="/grading-schemes", tags=["등급표"])

ADMIN_USER = "admin"


# ==========================================================
# [1단계] 조회 / 등급 계산
# ==========================================================

# ✅ [READ] 전체 등급표 (min 내림차순)
@router.get("/")
def read_grading_schemes(db: Session = Depends(get_db)):
    result = grading_scheme_service.list_schemes(db)
    return {
        "success": True,
        "data": result.model_dump(by_alias=True),
        "message": "등급표 조회 완료",
    }


# ✅ [CALCULATE] 백분율 → 등급
# /{scheme_id} 보다 먼저 선언해야 경로가 겹치지 않음
@router.get("/calculate/{percentage}")
def calculate_grade(
    percentage: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    try:
        value = float(percentage)
    except ValueError:
        raise ValidationError("Percentage must be a number between 0 and 100")

    result = grading_scheme_service.calculate_grade(
        db, value, default_threshold=settings.DEFAULT_PASSING_THRESHOLD
    )
    return {"success": True, "data": result.model_dump(by_alias=True)}


# ✅ [READ] 특정 등급 구간
@router.get("/{scheme_id}")
def read_grading_scheme(scheme_id: int, db: Session = Depends(get_db)):
    scheme = grading_scheme_service.get_scheme(db, scheme_id)
    return {
        "success": True,
        "data": grading_scheme_service.to_out(scheme).model_dump(by_alias=True),
    }


# ==========================================================
# [2단계] 관리자 전용 (생성/수정/삭제/기본값)
# ==========================================================

# ✅ [CREATE] 등급 구간 추가 (구간 중복 불가)
@router.post("/", status_code=201, dependencies=[Depends(require_admin_token)])
def create_grading_scheme(
    payload: GradingSchemeCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    scheme = grading_scheme_service.create_scheme(
        db, payload, user=ADMIN_USER, default_threshold=settings.DEFAULT_PASSING_THRESHOLD
    )
    return {
        "success": True,
        "data": grading_scheme_service.to_out(scheme).model_dump(by_alias=True),
        "message": "Grading scheme created successfully",
    }


# ✅ [SEED] 기본 등급표 일괄 생성 (비어 있을 때만)
@router.post("/seed", status_code=201, dependencies=[Depends(require_admin_token)])
def seed_grading_schemes(db: Session = Depends(get_db)):
    schemes = grading_scheme_service.seed_default_schemes(db, user=ADMIN_USER)
    return {
        "success": True,
        "data": {
            "schemes": [grading_scheme_service.to_out(s).model_dump(by_alias=True) for s in schemes],
            "total": len(schemes),
        },
        "message": "Default grading schemes created successfully",
    }


# ✅ [UPDATE] 등급 구간 수정 (자기 자신은 중복 검사에서 제외)
@router.put("/{scheme_id}", dependencies=[Depends(require_admin_token)])
def update_grading_scheme(scheme_id: int, payload: GradingSchemeUpdate, db: Session = Depends(get_db)):
    scheme = grading_scheme_service.update_scheme(db, scheme_id, payload, user=ADMIN_USER)
    return {
        "success": True,
        "data": grading_scheme_service.to_out(scheme).model_dump(by_alias=True),
        "message": "Grading scheme updated successfully",
    }


# ✅ [DELETE] 등급 구간 삭제 (물리 삭제)
@router.delete("/{scheme_id}", dependencies=[Depends(require_admin_token)])
def delete_grading_scheme(scheme_id: int, db: Session = Depends(get_db)):
    grading_scheme_service.delete_scheme(db, scheme_id)
    return {"success": True, "message": "Grading scheme deleted successfully"}
