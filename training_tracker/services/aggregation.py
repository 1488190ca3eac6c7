"""Progress aggregation.

Pure functions over topics, users and progress records. Anything with the
right attributes works (ORM rows, schemas or plain objects): topics expose
``id``, ``title``, ``is_deleted`` and ``subtopics``; users expose ``id``,
``name``, ``role`` and ``avatar``; records expose ``user_id``,
``subtopic_id`` and ``status``. Nothing is cached; every figure is
recomputed from the records passed in.
"""

import math
from typing import Dict, Iterable, List, Sequence

from training_tracker.models.progress import ProgressStatus
from training_tracker.models.user import Role

STATUS_WEIGHTS: Dict[ProgressStatus, int] = {
    ProgressStatus.NOT_ADDRESSED: 0,
    ProgressStatus.BASIC: 33,
    ProgressStatus.GOOD: 66,
    ProgressStatus.FULLY_UNDERSTOOD: 100,
}

# Pie chart order: fully -> good -> basic -> not
DISTRIBUTION_ORDER = (
    ProgressStatus.FULLY_UNDERSTOOD,
    ProgressStatus.GOOD,
    ProgressStatus.BASIC,
    ProgressStatus.NOT_ADDRESSED,
)

def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

def _status(value) -> ProgressStatus:
    return value if isinstance(value, ProgressStatus) else ProgressStatus(value)

def _role(value) -> Role:
    return value if isinstance(value, Role) else Role(value)

def status_index(progress: Iterable, user_id: str) -> Dict[str, ProgressStatus]:
    """Map subtopic id -> status for one user."""
    return {p.subtopic_id: _status(p.status) for p in progress if p.user_id == user_id}

def status_for(progress: Iterable, user_id: str, subtopic_id: str) -> ProgressStatus:
    for p in progress:
        if p.user_id == user_id and p.subtopic_id == subtopic_id:
            return _status(p.status)
    return ProgressStatus.NOT_ADDRESSED

def topic_statuses(topic, progress: Iterable, user_id: str) -> List[ProgressStatus]:
    index = status_index(progress, user_id)
    return [index.get(st.id, ProgressStatus.NOT_ADDRESSED) for st in topic.subtopics]

def topic_understanding(topic, progress: Iterable, user_id: str) -> int:
    """Weighted mean of the user's statuses over the topic's subtopics, 0-100."""
    statuses = topic_statuses(topic, progress, user_id)
    if not statuses:
        return 0
    return round_half_up(sum(STATUS_WEIGHTS[s] for s in statuses) / len(statuses))

def status_distribution(topic, progress: Iterable, user_id: str) -> dict:
    """Counts and percentages per status for one user within one topic."""
    statuses = topic_statuses(topic, progress, user_id)
    counts = {status: 0 for status in DISTRIBUTION_ORDER}
    for status in statuses:
        counts[status] += 1
    total = len(statuses)
    percentages = {
        status: (counts[status] / total * 100) if total else 0.0
        for status in DISTRIBUTION_ORDER
    }
    return {"counts": counts, "percentages": percentages}

def employees(users: Iterable) -> List:
    return [u for u in users if _role(u.role) == Role.EMPLOYEE]

def fully_understood_count(topic, progress: Iterable, user_id: str) -> int:
    return sum(1 for s in topic_statuses(topic, progress, user_id) if s == ProgressStatus.FULLY_UNDERSTOOD)

def employee_topic_percentage(topic, progress: Sequence, user_id: str) -> int:
    if not topic.subtopics:
        return 0
    return round_half_up(fully_understood_count(topic, progress, user_id) / len(topic.subtopics) * 100)

def module_overall_percentage(topic, users: Iterable, progress: Sequence) -> int:
    """round(100 * fully understood / (subtopics * employees)) across non-admin users."""
    staff = employees(users)
    total_possible = len(topic.subtopics) * len(staff)
    if total_possible == 0:
        return 0
    total_fully = sum(fully_understood_count(topic, progress, u.id) for u in staff)
    return round_half_up(total_fully / total_possible * 100)

def module_progress_stats(topic, users: Iterable, progress: Sequence) -> dict:
    staff = employees(users)
    details = [
        {
            "user_id": u.id,
            "user_name": u.name,
            "avatar": u.avatar or "",
            "percentage": employee_topic_percentage(topic, progress, u.id),
        }
        for u in staff
    ]
    return {
        "topic_id": topic.id,
        "title": topic.title,
        "subtopic_count": len(topic.subtopics),
        "overall_percentage": module_overall_percentage(topic, staff, progress),
        "details": details,
    }

def employee_module_detail(topic, progress: Sequence, user_id: str) -> List[dict]:
    return [
        {
            "id": st.id,
            "title": st.title,
            "status": status_for(progress, user_id, st.id),
        }
        for st in topic.subtopics
    ]

def active_topics(topics: Iterable) -> List:
    return [t for t in topics if not t.is_deleted]

def user_topic_understanding(topics: Iterable, progress: Sequence, user_id: str) -> List[dict]:
    result = []
    for topic in active_topics(topics):
        result.append({
            "topic_id": topic.id,
            "title": topic.title,
            "understanding": topic_understanding(topic, progress, user_id),
            "breakdown": status_distribution(topic, progress, user_id),
        })
    return result

def dashboard_summary(topics: Iterable, users: Iterable, progress: Sequence) -> dict:
    topics = active_topics(topics)
    users = list(users)
    return {
        "total_modules": len(topics),
        "total_employees": len(employees(users)),
        "active_learners": len({p.user_id for p in progress}),
        "modules": [module_progress_stats(t, users, progress) for t in topics],
    }
