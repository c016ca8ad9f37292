from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine                     # SQLAlchemy 엔진 생성 도구
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from config.settings import Settings

# ✅ 모델 정의 시 상속할 Base 클래스 (Declarative 방식 사용)
Base = declarative_base()


# ✅ 설정값으로 엔진 생성 (연결은 실제 쿼리 시점에 열림)
def create_db_engine(settings: Settings) -> Engine:
    url = settings.DATABASE_URL
    kwargs = {"echo": settings.DB_ECHO}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_pre_ping"] = True
    return create_engine(url, **kwargs)


# ✅ 세션 팩토리: DB 연결에 사용할 세션 생성기 정의
def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    # 모든 모델을 import 해야 metadata에 테이블이 등록됨
    from models import (  # noqa: F401
        attendance, enrollments, grading_schemes, marksheets,
        report_cards, sponsors, students, subjects,
    )

    Base.metadata.create_all(bind=engine)


# ✅ 공통 DB 세션 (app.state.session_factory는 main.create_app에서 주입)
def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
