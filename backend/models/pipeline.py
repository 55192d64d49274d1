"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Pipeline Stage Model                                          ║
║                                                                              ║
║  THREE INDEPENDENT STAGE SETS (never mix them):                              ║
║  - staff:       pros.pipeline_stage   (new ... purchased)                    ║
║  - client:      pros.pipeline_stage   (new_recruit ... dead)                 ║
║  - ai_recruiter: ai_leads.stage       (new_lead ... dead)                    ║
║                                                                              ║
║  RULES:                                                                      ║
║  - Sets are closed, ordered for display only                                 ║
║  - Any stage may move to any other stage (no forward-only constraint)        ║
║  - Entering "qualifying" from elsewhere triggers auto-enrichment (once)      ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from enum import Enum
from typing import List, NamedTuple, Optional


class PipelineType(str, Enum):
    STAFF = "staff"
    CLIENT = "client"
    AI_RECRUITER = "ai_recruiter"


class Stage(NamedTuple):
    value: str
    label: str
    color: str


STAFF_STAGES = [
    Stage("new", "New", "bg-blue-500"),
    Stage("qualifying", "Qualifying", "bg-yellow-500"),
    Stage("qualified", "Qualified", "bg-green-500"),
    Stage("match_ready", "Match Ready", "bg-purple-500"),
    Stage("matched", "Matched", "bg-orange-500"),
    Stage("purchased", "Purchased", "bg-emerald-600"),
]

CLIENT_STAGES = [
    Stage("new_recruit", "New Recruit", "bg-blue-500"),
    Stage("hot_recruit", "Hot Recruit", "bg-red-500"),
    Stage("booked_appt", "Booked Appt", "bg-orange-500"),
    Stage("nurture", "Nurture", "bg-yellow-500"),
    Stage("hired", "Hired", "bg-green-500"),
    Stage("dead", "Dead", "bg-gray-500"),
]

AI_STAGES = [
    Stage("new_lead", "New Lead", "bg-blue-500"),
    Stage("contacted", "Contacted", "bg-yellow-500"),
    Stage("interested", "Interested", "bg-purple-500"),
    Stage("appointment_set", "Appointment Set", "bg-green-500"),
    Stage("hired", "Hired", "bg-emerald-600"),
    Stage("dead", "Dead", "bg-gray-500"),
]

PIPELINE_STAGES = {
    PipelineType.STAFF: STAFF_STAGES,
    PipelineType.CLIENT: CLIENT_STAGES,
    PipelineType.AI_RECRUITER: AI_STAGES,
}

# Table and stage column behind each pipeline
PIPELINE_TABLES = {
    PipelineType.STAFF: ("pros", "pipeline_stage"),
    PipelineType.CLIENT: ("pros", "pipeline_stage"),
    PipelineType.AI_RECRUITER: ("ai_leads", "stage"),
}

QUALIFYING_STAGE = "qualifying"


class ProStatus(str, Enum):
    """Free-text temperature category shown next to the stage"""
    NEW = "new"
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"


class ProType(str, Enum):
    REAL_ESTATE_AGENT = "real_estate_agent"
    MORTGAGE_OFFICER = "mortgage_officer"


def get_stages(pipeline_type: PipelineType) -> List[Stage]:
    return PIPELINE_STAGES[PipelineType(pipeline_type)]


def stage_values(pipeline_type: PipelineType) -> List[str]:
    return [s.value for s in get_stages(pipeline_type)]


def is_valid_stage(pipeline_type: PipelineType, stage: str) -> bool:
    return stage in stage_values(pipeline_type)


def get_stage(pipeline_type: PipelineType, stage: str) -> Optional[Stage]:
    for s in get_stages(pipeline_type):
        if s.value == stage:
            return s
    return None


def stage_label(pipeline_type: PipelineType, stage: str) -> str:
    """Display label, falling back to the raw key for unknown stages"""
    found = get_stage(pipeline_type, stage)
    return found.label if found else stage
