"""
공용 DB 베이스/세션 팩토리.
SessionLocal, engine, Base 정의는 app.db.session 한 곳에서 관리한다.
테이블 생성(create_all) 전에 모든 모델 모듈을 import 해서 metadata에 등록한다.
"""
from app.db.session import engine, SessionLocal, Base


def import_models():
    # 순환 import 방지를 위해 함수 안에서 import
    from app.models import (  # noqa: F401
        profile,
        photo,
        forum,
        marketplace,
        message,
        notification,
        report,
        favorite,
        site,
    )


def create_all():
    import_models()
    Base.metadata.create_all(bind=engine)


__all__ = ["engine", "SessionLocal", "Base", "import_models", "create_all"]
