"""
Serviço de utilizadores VPI (resolução de nomes por OPCO).
"""
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from uuid import UUID
from typing import Dict, Iterable, List, Set, Type
from app.services.capture_filters import clean_string_list


class UserService:
    """Consultas à tabela de utilizadores de uma OPCO."""

    @staticmethod
    def find_user_ids_by_name(db: Session, user_model: Type, names: Iterable[str]) -> Set[UUID]:
        """
        Obtém os IDs de utilizadores cujo nome completo contém algum dos nomes.

        Comparação por substring, sem distinção de maiúsculas.
        """
        cleaned = clean_string_list(names)
        if not cleaned:
            return set()

        fullname = func.lower(user_model.fullname)
        rows = db.query(user_model.user_id).filter(
            or_(*[fullname.like(f"%{name}%") for name in cleaned])
        ).distinct().all()

        return {row[0] for row in rows}

    @staticmethod
    def get_user_names(db: Session, user_model: Type, user_ids: Iterable[UUID]) -> Dict[UUID, str]:
        """Obtém o mapa user_id -> nome completo para um conjunto de IDs (uma só consulta)."""
        ids: List[UUID] = [user_id for user_id in set(user_ids) if user_id is not None]
        if not ids:
            return {}

        users = db.query(user_model).filter(user_model.user_id.in_(ids)).all()
        return {user.user_id: user.fullname for user in users}
