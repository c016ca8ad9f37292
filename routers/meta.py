from fastapi import APIRouter, Depends

from config.settings import Settings
from dependencies.settings import get_app_settings

router = APIRouter(prefix="/meta", tags=["Meta"])

@router.get("/health")
def health():
    return {"status": "ok"}

# ✅ 분석 API 정책값 (프론트 대시보드 표시용)
@router.get("/limits")
def limits(settings: Settings = Depends(get_app_settings)):
    return {
        "success": True,
        "data": {
            "default_passing_threshold": settings.DEFAULT_PASSING_THRESHOLD,
            "top_performers_limit": settings.TOP_PERFORMERS_LIMIT,
            "top_subjects_limit": settings.TOP_SUBJECTS_LIMIT,
            "active_window_days": settings.ACTIVE_WINDOW_DAYS,
            "attendance_trend_days": settings.ATTENDANCE_TREND_DAYS,
            "performance_trend_months": settings.PERFORMANCE_TREND_MONTHS,
        },
    }
