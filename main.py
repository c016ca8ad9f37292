from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from config.settings import Settings, get_settings
from database.db import create_db_engine, make_session_factory

# ✅ 미들웨어 임포트
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers

# ✅ 라우터 임포트
from routers import analytics, grading_schemes, marksheets, meta

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # HTTP 라이브러리 디버그 로그 비활성화
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    앱 팩토리. 실행: uvicorn main:create_app --factory
    - settings/engine 을 넘기면 그대로 사용 (테스트에서 SQLite 엔진 주입)
    - 엔진 정리(dispose)는 lifespan 종료 시점에 수행
    """
    settings = settings or get_settings()
    configure_logging(settings)
    engine = engine or create_db_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{settings.APP_TITLE} 시작 (ENV={settings.ENV})")
        yield
        engine.dispose()
        logger.info("DB 엔진 정리 완료")

    app = FastAPI(
        title=settings.APP_TITLE,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    # ✅ CORS 설정 (프론트엔드 대시보드 연동)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ✅ 요청 지연 측정 미들웨어 (응답 헤더 X-Latency-Ms 추가)
    app.add_middleware(TimingMiddleware)

    # ✅ 전역 에러 핸들러 등록 (일관된 JSON 에러 포맷)
    add_error_handlers(app)

    # ✅ /v1 프리픽스 라우터 등록
    app.include_router(grading_schemes.router, prefix="/v1")
    app.include_router(analytics.router,       prefix="/v1")
    app.include_router(marksheets.router,      prefix="/v1")
    app.include_router(meta.router,            prefix="/v1")

    # ✅ 헬스체크 엔드포인트
    @app.get("/health")
    def health_check():
        return {"status": "ok", "message": "API is running"}

    # ✅ 루트 엔드포인트
    @app.get("/")
    def root():
        return {"message": f"{settings.APP_TITLE} - 성적 등급 판정 및 분석 대시보드"}

    return app
