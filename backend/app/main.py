"""
FastAPI 엔트리포인트

- /api/...      : 트렌드 / 캡션 / 초안 (api/routes.py)
- /trends       : 예전 경로 호환
- /auth/tiktok  : OAuth 자리표시 페이지
- 나머지 GET    : public/ 프론트 (SPA fallback)

에러 -> {ok:false, error, detail?} 변환은 여기 핸들러 한 곳에서만 한다.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.api.pages import router as pages_router
from backend.app.api.routes import alt_router as trends_alt_router
from backend.app.api.routes import router as api_router
from backend.app.core.config import settings
from backend.app.core.errors import AppError, error_body, error_response
from backend.app.core.logger import get_logger
from backend.app.core.rate_limit import rate_limit_middleware
from backend.app.services.storage import upload_dir

logger = get_logger(__name__)

app = FastAPI(title="TikTok Creator Assistant Gateway", version="0.1.0")

# CORS: Streamlit / 정적 프론트 어디서든 부를 수 있게 열어둠
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(rate_limit_middleware)


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s 실패: %s (%s)", request.method, request.url.path, exc.message, exc.detail)
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0].get("msg") if errors else None
    return JSONResponse(status_code=400, content=error_body("Invalid request body", detail))


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("%s %s 처리 중 예기치 못한 에러", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


@app.get("/health")
def health():
    return {"ok": True}


app.include_router(api_router)
app.include_router(trends_alt_router)
# catch-all GET이라 반드시 마지막
app.include_router(pages_router)

# 업로드 폴더는 미리 만들어둔다 (첫 업로드에서 터지지 않게)
upload_dir()

if not settings.OPENAI_API_KEY:
    logger.warning("OPENAI_API_KEY가 없습니다. /api/caption 은 키를 넣기 전까지 실패합니다.")
