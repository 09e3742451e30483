"""
Módulo models com os modelos SQLAlchemy.
"""
from app.models.capture import VpiCaptureMixin, VpiUserMixin, TENANT_MODELS, OPCO_CODES

__all__ = [
    "VpiCaptureMixin",
    "VpiUserMixin",
    "TENANT_MODELS",
    "OPCO_CODES"
]
