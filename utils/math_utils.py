from typing import Optional, Union

Number = Union[int, float]


def round2(value: Optional[Number]) -> float:
    """소수 둘째 자리 반올림. None은 0으로 취급."""
    if value is None:
        return 0
    return round(float(value), 2)


def safe_percentage(part: Optional[Number], whole: Optional[Number]) -> float:
    """part / whole * 100 (소수 둘째 자리). 분모가 0 또는 None이면 0."""
    if not whole:
        return 0
    return round(float(part or 0) / float(whole) * 100, 2)
