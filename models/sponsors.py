from sqlalchemy import Boolean, Column, Integer, String
from database.db import Base

class Sponsor(Base):
    __tablename__ = "sponsors"  # 후원자 정보 테이블

    id = Column(Integer, primary_key=True, index=True)          # 후원자 고유 ID
    name = Column(String(100), nullable=False)                  # 후원자 이름/기관명
    email = Column(String(200), unique=True)                    # 연락 이메일
    school_id = Column(Integer, index=True)                     # 후원 대상 학교 ID (없으면 전체)
    is_active = Column(Boolean, nullable=False, default=True)   # 활성 여부
