from typing import Dict, List

from training_tracker.models.progress import ProgressStatus
from training_tracker.schemas.base_schema import CamelModel

class ProgressRecord(CamelModel):
    user_id: str
    subtopic_id: str
    status: ProgressStatus

class StatusBreakdown(CamelModel):
    counts: Dict[ProgressStatus, int]
    percentages: Dict[ProgressStatus, float]

class TopicUnderstanding(CamelModel):
    topic_id: str
    title: str
    understanding: int # Weighted mean, 0-100
    breakdown: StatusBreakdown

class EmployeeModuleStat(CamelModel):
    user_id: str
    user_name: str
    avatar: str
    percentage: int

class ModuleProgressStats(CamelModel):
    topic_id: str
    title: str
    subtopic_count: int
    overall_percentage: int
    details: List[EmployeeModuleStat]

class DashboardSummary(CamelModel):
    total_modules: int
    total_employees: int
    active_learners: int
    modules: List[ModuleProgressStats]

class SubtopicStatus(CamelModel):
    id: str
    title: str
    status: ProgressStatus
