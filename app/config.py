# app/config.py


from dotenv import load_dotenv
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()  # .env 파일 먼저 읽기

BASE_DIR = Path(__file__).resolve().parent.parent

class Settings(BaseSettings):
    # 환경 구분
    app_env: str = "local"
    log_level: str = "INFO"
    cors_origins: str = "*"                  # 콤마 구분

    # Supabase & DB 필수 설정
    database_url: str                        # DATABASE_URL
    supabase_url: str                        # SUPABASE_URL
    supabase_anon_key: str                   # SUPABASE_ANON_KEY
    supabase_issuer: str | None = None       # SUPABASE_ISSUER
    supabase_jwt_audience: str = "authenticated"  # SUPABASE_JWT_AUDIENCE
    supabase_jwt_secret: str | None = None
    supabase_service_role_key: str | None = None

    # Storage 버킷
    photos_bucket: str = "photos"
    avatars_bucket: str = "avatars"
    verification_bucket: str = "verification"

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",                   # 필요 없는 env 무시
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

settings = Settings()

if __name__ == "__main__":
    print("BASE_DIR:", BASE_DIR)
    print("DATABASE_URL:", settings.database_url)
    print("SUPABASE_URL:", settings.supabase_url)
    print("SUPABASE_ANON_KEY 앞 10글자:", settings.supabase_anon_key[:10], "...")
