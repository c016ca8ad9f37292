"""
services/grading.py

등급표(GradingScheme) 기반 점수 → 등급 판정 로직.
DB에 의존하지 않는 순수 함수만 둔다. 등급 구간은 min_value/max_value/passing_marks
속성을 가진 어떤 객체든(ORM 모델, GradeBand) 받을 수 있다.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from utils.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PASSING_THRESHOLD = 40
GRADE_NAME_PREFIX = "Grade "


@dataclass(frozen=True)
class GradeBand:
    grade_name: str
    min_value: int
    max_value: int
    passing_marks: Optional[int] = DEFAULT_PASSING_THRESHOLD
    id: Optional[int] = None


@dataclass(frozen=True)
class GradeResult:
    grade: str          # 접두어 없는 등급 (예: "A+")
    name: str           # 저장된 등급 이름 (예: "Grade A+")
    passed: bool
    value: float


# ✅ 기본 등급표 (seed 용)
DEFAULT_SCHEMES: List[GradeBand] = [
    GradeBand("Grade A+", 90, 100),
    GradeBand("Grade A", 80, 89),
    GradeBand("Grade B+", 75, 79),
    GradeBand("Grade B", 70, 74),
    GradeBand("Grade C+", 65, 69),
    GradeBand("Grade C", 60, 64),
    GradeBand("Grade D+", 55, 59),
    GradeBand("Grade D", 50, 54),
    GradeBand("Grade E", 40, 49),
    GradeBand("Grade F", 0, 39),
]


def grade_label(grade_name: str) -> str:
    """'Grade A+' → 'A+'"""
    if grade_name.startswith(GRADE_NAME_PREFIX):
        return grade_name[len(GRADE_NAME_PREFIX):]
    return grade_name


def to_grade_name(name: Optional[str], grade: Optional[str]) -> Optional[str]:
    """입력값에 name이 있으면 그대로, 없으면 grade에 접두어를 붙인다."""
    if name:
        return name
    if grade:
        return f"{GRADE_NAME_PREFIX}{grade}"
    return None


def passing_threshold(scheme, default: int = DEFAULT_PASSING_THRESHOLD) -> float:
    threshold = getattr(scheme, "passing_marks", None)
    return default if threshold is None else threshold


def order_schemes(schemes: Iterable) -> List:
    # min_value 내림차순. 구간이 겹치는(비정상) 경우 먼저 오는 구간이 이긴다.
    return sorted(schemes, key=lambda s: s.min_value, reverse=True)


def find_band(value: float, schemes: Iterable):
    for scheme in order_schemes(schemes):
        if scheme.min_value <= value <= scheme.max_value:
            return scheme
    return None


def classify(value: float, schemes: Iterable, default_threshold: int = DEFAULT_PASSING_THRESHOLD) -> GradeResult:
    """
    점수를 등급으로 변환한다.
    - 구간 [min_value, max_value]에 value가 포함되는 첫 등급을 반환
    - passed = value >= 해당 구간의 합격 기준점
    - 어느 구간에도 속하지 않으면 NotFoundError
    """
    scheme = find_band(value, schemes)
    if scheme is None:
        raise NotFoundError("No matching grade")
    return GradeResult(
        grade=grade_label(scheme.grade_name),
        name=scheme.grade_name,
        passed=value >= passing_threshold(scheme, default_threshold),
        value=value,
    )


def find_overlap(min_value: int, max_value: int, schemes: Iterable, exclude_id: Optional[int] = None):
    for scheme in schemes:
        if exclude_id is not None and scheme.id == exclude_id:
            continue
        if min_value <= scheme.max_value and max_value >= scheme.min_value:
            return scheme
    return None


def validate_range(min_value, max_value, schemes: Sequence, exclude_id: Optional[int] = None) -> None:
    """등급 구간 생성/수정 전 검증. 문제가 있으면 ValidationError."""
    if min_value is None or max_value is None:
        raise ValidationError("Name/grade, minValue, and maxValue are required")
    if min_value > max_value:
        raise ValidationError("minValue must be less than or equal to maxValue")

    overlapping = find_overlap(min_value, max_value, schemes, exclude_id=exclude_id)
    if overlapping is not None:
        logger.warning(
            f"등급 구간 중복: [{min_value}, {max_value}] ↔ {overlapping.grade_name} "
            f"[{overlapping.min_value}, {overlapping.max_value}]"
        )
        raise ValidationError("Value range overlaps with existing grading scheme")
