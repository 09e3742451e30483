"""
Validação do bearer token emitido pelo identity provider.
"""
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)

# Esquema de segurança
security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict:
    """Decodifica e valida um token JWT (assinatura, expiração, audience e issuer)."""
    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options=options
        )
        return payload
    except JWTError as e:
        logger.debug(f"Token rejeitado: {type(e).__name__}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido ou expirado"
        )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
):
    """Dependency para obter o utilizador autenticado a partir do token JWT."""
    if not settings.auth_enabled:
        return {"user_id": "anonymous"}

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token em falta"
        )

    payload = decode_token(credentials.credentials)

    user_id = payload.get("sub") or payload.get("oid")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido"
        )

    return {"user_id": user_id}
