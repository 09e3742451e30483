"""
Modelos de captura (gravação VPI) e utilizadores, um par de tabelas por OPCO.

Todas as OPCOs partilham o mesmo esquema; as classes concretas são geradas
a partir dos mixins para cada código em OPCO_CODES.
"""
from sqlalchemy import Column, String, DateTime, Integer, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from typing import Dict, Tuple, Type
from app.core.database import Base

OPCO_CODES = ("CMP", "NYSEG", "RGE")


class VpiUserMixin:
    """Colunas da tabela de utilizadores VPI."""
    user_id = Column("userid", Uuid, primary_key=True)
    fullname = Column("fullname", String(255))


class VpiCaptureMixin:
    """Colunas da tabela de capturas VPI (só leitura nesta aplicação)."""

    # Identificadores
    object_id = Column("objectid", Uuid, primary_key=True)
    date_added = Column("dateadded", DateTime, index=True)
    resource_id = Column("resourceid", String(255))
    workstation_id = Column("workstationid", String(255))

    # Tempos
    start_time = Column("starttime", DateTime)
    gmt_offset = Column("gmtoffset", Integer)
    gmt_start_time = Column("gmtstarttime", DateTime)
    duration = Column("duration", Integer)

    # Trigger e classificação
    triggered_by_resource_type_id = Column("triggeredbyresourcetypeid", String(255))
    triggered_by_object_id = Column("triggeredbyobjectid", String(255))
    flag_id = Column("flagid", String(255))
    tags = Column("tags", String(1024))
    sensitivity_level = Column("sensitivitylevel", String(64))
    client_id = Column("clientid", String(255))

    # Canal e extensão
    channel_num = Column("channelnum", Integer)
    channel_name = Column("channelname", String(255))
    extension_num = Column("extensionnum", String(64))
    agent_id = Column("agentid", String(255))
    pbx_dnis = Column("pbxdnis", String(64))
    ani_ali_digits = Column("anialidigits", String(64))
    direction = Column("direction", String(8))

    # Media
    media_file_id = Column("mediafileid", String(255))
    media_manager_id = Column("mediamanagerid", String(255))
    media_retention = Column("mediaretention", String(64))

    # Chamadas
    call_id = Column("callid", String(255))
    previous_call_id = Column("previouscallid", String(255))
    global_call_id = Column("globalcallid", String(255))

    # Plataforma e serviço
    class_of_service = Column("classofservice", String(255))
    class_of_service_date = Column("classofservicedate", DateTime)
    x_platform_ref = Column("xplatformref", String(255))

    # Transcrição e áudio
    transcript_result = Column("transcriptresult", String)
    warehouse_object_key = Column("warehouseobjectkey", String(1024))
    transcript_status = Column("transcriptstatus", String(64))
    audio_channels = Column("audiochannels", Integer)
    has_talkover = Column("hastalkover", Boolean)

    @property
    def user_name(self):
        """Nome completo do utilizador associado (None se não houver)."""
        return self.user.fullname if self.user is not None else None


def _build_tenant_models(opco: str) -> Tuple[Type, Type]:
    """Gera as classes (captura, utilizador) de uma OPCO."""
    suffix = opco.lower()
    users_table = f"vpiusers{suffix}"

    user_model = type(
        f"VpiUsers{opco.capitalize()}",
        (VpiUserMixin, Base),
        {"__tablename__": users_table}
    )

    capture_model = type(
        f"VpiCapture{opco.capitalize()}",
        (VpiCaptureMixin, Base),
        {
            "__tablename__": f"vpicapture{suffix}",
            "user_id": Column("userid", Uuid, ForeignKey(f"{users_table}.userid"), index=True),
            "user": relationship(user_model, lazy="select"),
        }
    )

    return capture_model, user_model


TENANT_MODELS: Dict[str, Tuple[Type, Type]] = {
    opco: _build_tenant_models(opco) for opco in OPCO_CODES
}
