"""
services/grading_scheme_service.py

등급표(grading_schemes) 관리 + 점수별 등급 계산.
구간 검증/판정 규칙은 services/grading.py 의 순수 함수에 위임한다.
"""

import logging
import math
from typing import List, Optional

from sqlalchemy.orm import Session

from models.grading_schemes import GradingScheme as GradingSchemeModel
from schemas.grading_schemes import (
    GradeCalculation,
    GradingSchemeCreate,
    GradingSchemeList,
    GradingSchemeOut,
    GradingSchemeUpdate,
)
from services import grading
from utils.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def to_out(scheme: GradingSchemeModel) -> GradingSchemeOut:
    return GradingSchemeOut(
        id=scheme.id,
        name=scheme.grade_name,
        grade=grading.grade_label(scheme.grade_name),
        min_value=scheme.min_value,
        max_value=scheme.max_value,
        min_percentage=scheme.min_value,
        max_percentage=scheme.max_value,
        passing_marks=scheme.passing_marks,
        created_by=scheme.created_by,
        modified_by=scheme.modified_by,
    )


def load_schemes(db: Session) -> List[GradingSchemeModel]:
    return (
        db.query(GradingSchemeModel)
        .order_by(GradingSchemeModel.min_value.desc())
        .all()
    )


def list_schemes(db: Session) -> GradingSchemeList:
    schemes = [to_out(s) for s in load_schemes(db)]
    return GradingSchemeList(schemes=schemes, total=len(schemes))


def get_scheme(db: Session, scheme_id: int) -> GradingSchemeModel:
    scheme = db.get(GradingSchemeModel, scheme_id)
    if scheme is None:
        raise NotFoundError("Grading scheme not found")
    return scheme


def create_scheme(
    db: Session,
    payload: GradingSchemeCreate,
    user: str = "system",
    default_threshold: int = grading.DEFAULT_PASSING_THRESHOLD,
) -> GradingSchemeModel:
    grade_name = grading.to_grade_name(payload.name, payload.grade)
    if not grade_name:
        raise ValidationError("Name/grade, minValue, and maxValue are required")

    grading.validate_range(payload.lower, payload.upper, load_schemes(db))

    scheme = GradingSchemeModel(
        grade_name=grade_name,
        min_value=payload.lower,
        max_value=payload.upper,
        passing_marks=payload.passing_marks if payload.passing_marks is not None else default_threshold,
        created_by=user,
        modified_by=user,
    )
    db.add(scheme)
    db.commit()
    db.refresh(scheme)
    logger.info(f"등급 구간 생성: {scheme.grade_name} [{scheme.min_value}, {scheme.max_value}] by {user}")
    return scheme


def update_scheme(
    db: Session,
    scheme_id: int,
    payload: GradingSchemeUpdate,
    user: str = "system",
) -> GradingSchemeModel:
    scheme = get_scheme(db, scheme_id)

    # 보내지 않은 경계값은 저장된 값으로 채운 뒤 항상 중복 검사 (자기 자신은 제외)
    new_lower = payload.lower if payload.lower is not None else scheme.min_value
    new_upper = payload.upper if payload.upper is not None else scheme.max_value
    grading.validate_range(new_lower, new_upper, load_schemes(db), exclude_id=scheme.id)

    scheme.grade_name = grading.to_grade_name(payload.name, payload.grade) or scheme.grade_name
    scheme.min_value = new_lower
    scheme.max_value = new_upper
    if payload.passing_marks is not None:
        scheme.passing_marks = payload.passing_marks
    scheme.modified_by = user

    db.commit()
    db.refresh(scheme)
    logger.info(f"등급 구간 수정: id={scheme.id} {scheme.grade_name} [{scheme.min_value}, {scheme.max_value}] by {user}")
    return scheme


def delete_scheme(db: Session, scheme_id: int) -> None:
    scheme = get_scheme(db, scheme_id)
    # is_active 컬럼이 없으므로 물리 삭제
    db.delete(scheme)
    db.commit()
    logger.info(f"등급 구간 삭제: id={scheme_id}")


def seed_default_schemes(db: Session, user: str = "system") -> List[GradingSchemeModel]:
    if db.query(GradingSchemeModel).count() > 0:
        raise ValidationError("Grading schemes already exist")

    schemes = [
        GradingSchemeModel(
            grade_name=band.grade_name,
            min_value=band.min_value,
            max_value=band.max_value,
            passing_marks=band.passing_marks,
            created_by=user,
            modified_by=user,
        )
        for band in grading.DEFAULT_SCHEMES
    ]
    db.add_all(schemes)
    db.commit()
    for s in schemes:
        db.refresh(s)
    logger.info(f"기본 등급표 {len(schemes)}건 생성")
    return schemes


def calculate_grade(
    db: Session,
    percentage: float,
    default_threshold: int = grading.DEFAULT_PASSING_THRESHOLD,
) -> GradeCalculation:
    if math.isnan(percentage) or percentage < 0 or percentage > 100:
        raise ValidationError("Percentage must be a number between 0 and 100")

    result = grading.classify(percentage, load_schemes(db), default_threshold=default_threshold)
    return GradeCalculation(
        percentage=percentage,
        grade=result.grade,
        name=result.name,
        passed=result.passed,
    )


def classify_or_none(
    value: float,
    schemes: List,
    default_threshold: int = grading.DEFAULT_PASSING_THRESHOLD,
) -> Optional[grading.GradeResult]:
    """성적 입력 시 사용. 구간 밖 점수는 '미판정(None)'으로 처리."""
    try:
        return grading.classify(value, schemes, default_threshold=default_threshold)
    except NotFoundError:
        logger.warning(f"등급 판정 불가 (구간 밖 점수): {value}")
        return None
