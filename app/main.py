# app/main.py

# ------------------------
# 환경 변수 로드
# ------------------------
from dotenv import load_dotenv
load_dotenv()

import logging

# ------------------------
# FastAPI, CORS 미들웨어 import
# ------------------------
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.db.base import import_models
from app.services.realtime import install_change_feed

# ------------------------
# 라우터 import
# ------------------------
from app.routers import auth as auth_router
from app.routers import profiles as profiles_router
from app.routers import photos as photos_router
from app.routers import forums as forums_router
from app.routers import marketplace as marketplace_router
from app.routers import messages as messages_router
from app.routers import notifications as notifications_router
from app.routers import favorites as favorites_router
from app.routers import reports as reports_router
from app.routers import admin as admin_router
from app.routers import admin_site as admin_site_router
from app.routers import site as site_router
from app.routers import realtime as realtime_router

# ------------------------
# 0) 로깅
# ------------------------
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# ------------------------
# 1) FastAPI 앱 생성
#    - notifications / messages 변경 피드 리스너 등록
# ------------------------
import_models()
install_change_feed()

app = FastAPI(title="Photo Community API")

# ------------------------
# 2) CORS 미들웨어 추가
#    - CORS_ORIGINS 콤마 구분, 기본 전체 허용
# ------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list or ["*"],
    allow_credentials=False,  # 쿠키 안 쓰면 False
    allow_methods=["*"],
    allow_headers=["*"],
)

# ------------------------
# 3) 라우터 등록
# ------------------------
app.include_router(auth_router.router)
app.include_router(profiles_router.router)
app.include_router(photos_router.router)
app.include_router(forums_router.router)
app.include_router(marketplace_router.router)
app.include_router(messages_router.router)
app.include_router(notifications_router.router)
app.include_router(favorites_router.router)
app.include_router(reports_router.router)
app.include_router(admin_router.router)
app.include_router(admin_site_router.router)
app.include_router(site_router.router)
app.include_router(realtime_router.router)

# ------------------------
# 4) Root 엔드포인트 (health check)
# ------------------------
@app.get("/")
def root():
    return {"ok": True}
