"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Models Package                                                ║
║                                                                              ║
║  Exports all models for easy import                                          ║
║  from models import PipelineType, ProUpdate, ClientCreate, etc.              ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

# ==================== PIPELINE ====================
from models.pipeline import (
    PipelineType,
    Stage,
    ProStatus,
    ProType,
    STAFF_STAGES,
    CLIENT_STAGES,
    AI_STAGES,
    PIPELINE_STAGES,
    PIPELINE_TABLES,
    QUALIFYING_STAGE,
    get_stages,
    stage_values,
    is_valid_stage,
    get_stage,
    stage_label,
)

# ==================== LEAD (PRO) ====================
from models.lead import (
    PRO_LIST_FIELDS,
    PRO_TEXT_FIELDS,
    compose_full_name,
    ProUpdate,
    ProEditForm,
    StageMove,
)

# ==================== CLIENT ====================
from models.client import (
    CLIENT_LIST_FIELDS,
    CLIENT_PROTECTED_FIELDS,
    is_valid_email_format,
    ClientUpdate,
    ClientEditForm,
    ClientCreate,
    CreditAdjust,
    ClientFilterParams,
)

# ==================== MATCH ====================
from models.match import MATCH_CONTACT_FIELDS

# ==================== AI RECRUITER ====================
from models.ai_recruiter import (
    TaskPriority,
    AITaskCreate,
    AITaskUpdate,
    ViewType,
    CARD_FIELDS,
    CARD_TOGGLE_KEYS,
    CardLayoutSave,
    CardLayoutResponse,
)

# ==================== CUSTOM FIELDS ====================
from models.custom_field import (
    FieldType,
    VALID_FIELD_TYPES,
    DEFAULT_TARGET_TABLE,
    CustomFieldCreate,
    CustomFieldValueSave,
)

# ==================== ACCOUNT ====================
from models.account import (
    ClientReviewSave,
    ZipRadius,
    CityState,
    CountyState,
    CustomPackageSave,
    ZapierKeyCreate,
    ZapierWebhookCreate,
)
