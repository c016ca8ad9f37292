from typing import List, Optional

from pydantic import Field, field_validator

from schemas.common import CamelModel


# ✅ 입력용 (POST)
# - minValue/maxValue 또는 minPercentage/maxPercentage 둘 중 하나로 구간 지정
# - name("Grade A+") 또는 grade("A+") 둘 중 하나로 등급 지정
class GradingSchemeCreate(CamelModel):
    name: Optional[str] = None
    grade: Optional[str] = None
    min_value: Optional[int] = None
    max_value: Optional[int] = None
    min_percentage: Optional[int] = None
    max_percentage: Optional[int] = None
    passing_marks: Optional[int] = Field(default=None, ge=0)

    @field_validator("name", "grade")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def lower(self) -> Optional[int]:
        return self.min_value if self.min_value is not None else self.min_percentage

    @property
    def upper(self) -> Optional[int]:
        return self.max_value if self.max_value is not None else self.max_percentage


# ✅ 수정용 (PUT) - 보낸 필드만 반영
class GradingSchemeUpdate(GradingSchemeCreate):
    """모든 필드 선택. 빠진 경계값은 저장된 값을 유지한 채 구간 중복 검사를 거친다."""


# ✅ 출력용
class GradingSchemeOut(CamelModel):
    id: int
    name: str
    grade: str
    min_value: int
    max_value: int
    min_percentage: int
    max_percentage: int
    passing_marks: Optional[int] = None
    created_by: Optional[str] = None
    modified_by: Optional[str] = None


class GradingSchemeList(CamelModel):
    schemes: List[GradingSchemeOut]
    total: int


# ✅ 점수 → 등급 계산 결과
class GradeCalculation(CamelModel):
    percentage: float
    grade: str
    name: str
    passed: bool
