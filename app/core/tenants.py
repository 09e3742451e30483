"""
Registo de OPCOs: associa cada código à sua fonte de dados (ou a nenhuma, se desabilitada).
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Type
from sqlalchemy.orm import sessionmaker
from app.core.config import settings, Settings
from app.core.database import create_tenant_engine, create_session_factory
from app.core.exceptions import InvalidRequestError
from app.models.capture import TENANT_MODELS
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantBinding:
    """Fonte de dados de uma OPCO habilitada."""
    code: str
    session_factory: sessionmaker
    capture_model: Type
    user_model: Type


class TenantRegistry:
    """Tabela OPCO -> binding (None = OPCO conhecida mas desabilitada)."""

    def __init__(self, allowed_opcos: List[str], bindings: Dict[str, Optional[TenantBinding]]):
        self.allowed_opcos = [code.strip().upper() for code in allowed_opcos]
        self._bindings = {code.upper(): binding for code, binding in bindings.items()}

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "TenantRegistry":
        """Constrói o registo a partir das URLs de banco configuradas."""
        bindings: Dict[str, Optional[TenantBinding]] = {}

        for code in config.allowed_opcos:
            code = code.strip().upper()
            if code not in TENANT_MODELS:
                raise ValueError(f"OPCO sem modelo de dados: {code}")

            database_url = config.database_url_for(code)
            if not database_url:
                logger.warning(f"Datasource {code} desabilitada (URL não configurada)")
                bindings[code] = None
                continue

            capture_model, user_model = TENANT_MODELS[code]
            bindings[code] = TenantBinding(
                code=code,
                session_factory=create_session_factory(create_tenant_engine(database_url)),
                capture_model=capture_model,
                user_model=user_model
            )
            logger.info(f"Datasource {code} habilitada")

        return cls(config.allowed_opcos, bindings)

    @staticmethod
    def normalize(opco: Optional[str]) -> str:
        """Normaliza e valida a presença do código OPCO."""
        if opco is None or not opco.strip():
            raise InvalidRequestError("OPCO é obrigatório")
        return opco.strip().upper()

    def resolve(self, opco: Optional[str]) -> TenantBinding:
        """
        Obtém o binding de uma OPCO.

        Raises:
            InvalidRequestError: OPCO vazia, fora da lista permitida ou desabilitada
        """
        code = self.normalize(opco)

        if code not in self.allowed_opcos:
            raise InvalidRequestError(
                f"OPCO inválida '{opco}'. Valores permitidos: {', '.join(self.allowed_opcos)}"
            )

        binding = self._bindings.get(code)
        if binding is None:
            raise InvalidRequestError(f"Datasource {code} está desabilitada")

        return binding

    def status(self) -> Dict[str, bool]:
        """Estado (habilitada ou não) de cada OPCO."""
        return {code: self._bindings.get(code) is not None for code in self.allowed_opcos}


_registry: Optional[TenantRegistry] = None


def get_tenant_registry() -> TenantRegistry:
    """
    Dependency que devolve o registo de OPCOs (criado no primeiro uso).
    Uso: `registry: TenantRegistry = Depends(get_tenant_registry)`
    """
    global _registry
    if _registry is None:
        _registry = TenantRegistry.from_settings(settings)
    return _registry
