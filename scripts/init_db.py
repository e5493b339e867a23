import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from casinoapi.database.connection import engine
from casinoapi.models import Base


def init_db():
    """데이터베이스 초기화 (테이블 생성)"""
    try:
        Base.metadata.create_all(bind=engine)
        print(f"Database initialized successfully: {', '.join(Base.metadata.tables)}")
    except Exception as e:
        print(f"Database initialization failed: {str(e)}")
        raise


if __name__ == "__main__":
    init_db()
