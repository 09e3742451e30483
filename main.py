"""
Aplicação FastAPI principal para pesquisa e download de gravações VPI.
"""
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.tenants import TenantRegistry, get_tenant_registry
from app.routers import recordings

# Configurar logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gerencia o ciclo de vida da aplicação.
    Constrói o registo de OPCOs no startup.
    """
    logger.info("Iniciando aplicação...")

    registry = get_tenant_registry()
    enabled = [code for code, active in registry.status().items() if active]
    logger.info(f"OPCOs habilitadas: {', '.join(enabled) or 'nenhuma'}")

    yield

    logger.info("Aplicação parada")


# Criar aplicação FastAPI
app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    debug=settings.debug,
    lifespan=lifespan
)

# Configurar CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Incluir rotas
app.include_router(recordings.router)


@app.get("/")
async def root():
    """Endpoint raiz da API."""
    return {
        "message": "Bem-vindo à VPI Recordings API",
        "version": settings.api_version,
        "docs": "/docs",
        "openapi": "/openapi.json"
    }


@app.get("/health")
async def health_check(registry: TenantRegistry = Depends(get_tenant_registry)):
    """Health check da API."""
    return {
        "status": "ok",
        "tenants": registry.status()
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
