# app/db/session.py
import logging
from pathlib import Path
from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy.engine import url as sa_url  # make_url 사용
from contextlib import contextmanager

from app.core.config import get_settings

log = logging.getLogger(__name__)

DEFAULT_SQLITE_URL = "sqlite:///./data/todos.db"


def _mask(url: str) -> str:
    """로그 출력용 마스킹 (비밀번호 숨김)"""
    if "://" not in url:
        return url
    scheme, rest = url.split("://", 1)
    if "@" in rest and ":" in rest.split("@", 1)[0]:
        creds, tail = rest.split("@", 1)
        user = creds.split(":", 1)[0]
        return f"{scheme}://{user}:***@{tail}"
    return url


def _strip_outer_quotes(s: str) -> str:
    if not s:
        return s
    if (s[0] == s[-1]) and s[0] in ("'", '"', "`"):
        return s[1:-1].strip()
    return s


def _build_db_url() -> str:
    url = _strip_outer_quotes(get_settings().database_url.strip())

    # 1) postgres:// → postgresql+psycopg2:// 로 교정
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg2://", 1)

    # 2) 비어 있으면 로컬 SQLite 파일
    if not url:
        url = DEFAULT_SQLITE_URL

    # 3) 최종 파싱 검증
    try:
        parsed = sa_url.make_url(url)
    except Exception as e:
        raise RuntimeError(f"잘못된 DATABASE_URL 형식: {repr(url)} ({e})")

    # SQLite 파일이면 상위 디렉터리 생성
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    log.info("DB URL 적용: %s", _mask(url))
    return url


def _make_engine(url: str):
    if url.startswith("sqlite"):
        # 스케줄러 스레드와 요청 스레드가 같은 엔진을 공유
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=1800,         # 30분마다 재활성화
        pool_size=5,
        max_overflow=5,
    )


DATABASE_URL = _build_db_url()
engine = _make_engine(DATABASE_URL)


def get_session():
    """FastAPI Depends(get_session)에서 쓰는 generator."""
    with Session(engine) as s:
        yield s


def create_all_tables():
    # 테이블 메타데이터 등록
    from app.models import task, user  # noqa: F401

    SQLModel.metadata.create_all(engine)


@contextmanager
def session_scope():
    """
    백그라운드 작업(리마인더 스캔)처럼 Depends(get_session) 못 쓰는 구간에서 쓰는 세션 컨텍스트.
    """
    s = Session(engine)
    try:
        yield s
    finally:
        s.close()
