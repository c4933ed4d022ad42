from fastapi import FastAPI, APIRouter, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.database import Base, engine
from config.logging_config import get_logger, setup_logging
from config.settings import CORS_ORIGINS

# Registra os models no metadata antes do create_all
from app.models import activity_model, auth_models, baby_model, daily_report_model, media_model, settings_model  # noqa: F401

from app.errors import AppError
from app.dependencies.services import init_services

# Importar os routers
from app.api.endpoints.auth_credentials import router as auth_cred_routes

from app.routes.baby_routes import router as baby_routes
from app.routes.activity_routes import router as activity_routes
from app.routes.media_routes import router as media_routes
from app.routes.analysis_routes import router as analysis_routes
from app.routes.assistant_routes import router as assistant_routes
from app.routes.report_routes import router as report_routes
from app.routes.settings_routes import router as settings_routes
from app.routes.notification_routes import router as notification_routes
from app.routes.social_routes import router as social_routes

setup_logging()
logger = get_logger(__name__)

Base.metadata.create_all(bind=engine)

# Cria a instância do FastAPI
app = FastAPI(
    title="BabyCare API",
    version="0.1.0",
    description="Backend para registro de rotina e acompanhamento de bebês",
)

# Serviços de processo (aprendizado de padrões, limite de análises, notificações...)
init_services(app)

# Configura CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.info("app_error", path=request.url.path, code=exc.code, status=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


# Cria o roteador principal com prefixo /api
routerAPI = APIRouter(prefix="/api")

routerAPI.include_router(auth_cred_routes)
routerAPI.include_router(baby_routes)
routerAPI.include_router(activity_routes)
routerAPI.include_router(media_routes)
routerAPI.include_router(analysis_routes)
routerAPI.include_router(assistant_routes)
routerAPI.include_router(report_routes)
routerAPI.include_router(settings_routes)
routerAPI.include_router(notification_routes)
routerAPI.include_router(social_routes)
# Anexa o roteador à aplicação principal
app.include_router(routerAPI)


@app.get("/", tags=["Root"])
async def read_root():
    return {"status": "BabyCare API está no ar!"}
