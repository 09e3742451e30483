"""
Projeções de uma captura para os formatos públicos de metadados.
"""
from typing import Any, Dict, Mapping, Optional
from uuid import UUID
from app.utils.date_format import format_datetime


class MetadataProjector:
    """Converte registos de captura em mapas ordenados (a ordem é visível ao cliente)."""

    # (chave pública, atributo do modelo), por grupo
    IDENTIFIER_FIELDS = (
        ("objectId", "object_id"),
        ("dateAdded", "date_added"),
        ("resourceId", "resource_id"),
        ("workstationId", "workstation_id"),
        ("userId", "user_id"),
    )
    TIMING_FIELDS = (
        ("startTime", "start_time"),
        ("gmtOffset", "gmt_offset"),
        ("gmtStartTime", "gmt_start_time"),
        ("duration", "duration"),
    )
    TRIGGER_FIELDS = (
        ("triggeredByResourceTypeId", "triggered_by_resource_type_id"),
        ("triggeredByObjectId", "triggered_by_object_id"),
        ("flagId", "flag_id"),
        ("tags", "tags"),
        ("sensitivityLevel", "sensitivity_level"),
        ("clientId", "client_id"),
    )
    CHANNEL_FIELDS = (
        ("channelNum", "channel_num"),
        ("channelName", "channel_name"),
        ("extensionNum", "extension_num"),
        ("agentId", "agent_id"),
        ("pbxDnis", "pbx_dnis"),
        ("anialidigits", "ani_ali_digits"),
        ("direction", "direction"),
    )
    MEDIA_FIELDS = (
        ("mediaFileId", "media_file_id"),
        ("mediaManagerId", "media_manager_id"),
        ("mediaRetention", "media_retention"),
    )
    CALL_FIELDS = (
        ("callId", "call_id"),
        ("previousCallId", "previous_call_id"),
        ("globalCallId", "global_call_id"),
    )
    SERVICE_FIELDS = (
        ("classOfService", "class_of_service"),
        ("classOfServiceDate", "class_of_service_date"),
        ("xPlatformRef", "x_platform_ref"),
    )
    TRANSCRIPTION_FIELDS = (
        ("transcriptResult", "transcript_result"),
        ("warehouseObjectKey", "warehouse_object_key"),
        ("transcriptStatus", "transcript_status"),
        ("audioChannels", "audio_channels"),
        ("hasTalkover", "has_talkover"),
    )

    FULL_FIELD_GROUPS = (
        IDENTIFIER_FIELDS,
        TIMING_FIELDS,
        TRIGGER_FIELDS,
        CHANNEL_FIELDS,
        MEDIA_FIELDS,
        CALL_FIELDS,
        SERVICE_FIELDS,
        TRANSCRIPTION_FIELDS,
    )

    @classmethod
    def to_full(cls, record) -> Dict[str, Any]:
        """
        Projeção completa: todos os campos, tipos originais (datas não formatadas),
        mais o nome do utilizador associado.
        """
        metadata: Dict[str, Any] = {}
        for group in cls.FULL_FIELD_GROUPS:
            for key, attribute in group:
                metadata[key] = getattr(record, attribute)

        metadata["userName"] = record.user_name
        return metadata

    @staticmethod
    def to_compact(record, opco: str, user_names: Mapping[UUID, str]) -> Dict[str, Any]:
        """
        Projeção resumida para linhas de pesquisa.

        Args:
            record: Captura da OPCO
            opco: Código da OPCO dona do registo
            user_names: Mapa user_id -> nome, resolvido uma vez para a página
        """
        user_name: Optional[str] = user_names.get(record.user_id) if record.user_id else None

        return {
            "objectId": record.object_id,
            "dateAdded": format_datetime(record.date_added),
            "userId": record.user_id,
            "startTime": format_datetime(record.start_time),
            "duration": record.duration,
            "tags": record.tags,
            "channelName": record.channel_name,
            "callId": record.call_id,
            "userName": user_name,
            "agentId": record.agent_id,
            "extensionNum": record.extension_num,
            "aniAliDigits": record.ani_ali_digits,
            "direction": record.direction,
            "opco": opco,
        }
