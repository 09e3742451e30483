"""
Módulo routers com as rotas da API.
"""
from app.routers import recordings

__all__ = ["recordings"]
