from types import SimpleNamespace

import pytest

from training_tracker.models.progress import ProgressStatus
from training_tracker.services import aggregation

def _topic(topic_id, subtopic_ids, is_deleted=False):
    return SimpleNamespace(
        id=topic_id,
        title=f"Topic {topic_id}",
        is_deleted=is_deleted,
        subtopics=[SimpleNamespace(id=sid, title=f"Subtopic {sid}") for sid in subtopic_ids],
    )

def _user(user_id, role="employee"):
    return SimpleNamespace(id=user_id, name=user_id.upper(), role=role, avatar=f"https://avatars/{user_id}")

def _record(user_id, subtopic_id, status):
    return SimpleNamespace(user_id=user_id, subtopic_id=subtopic_id, status=status)

USERS = [_user("admin", "admin"), _user("u2"), _user("u3")]

@pytest.mark.parametrize("value, expected", [(0.5, 1), (1.5, 2), (2.5, 3), (66.49, 66), (49.5, 50)])
def test_round_half_up(value, expected):
    assert aggregation.round_half_up(value) == expected

def test_missing_record_defaults_to_not_addressed():
    assert aggregation.status_for([], "u2", "s1") == ProgressStatus.NOT_ADDRESSED

def test_topic_understanding_weighted_mean():
    topic = _topic("t1", ["s1", "s2", "s3"])
    progress = [
        _record("u2", "s1", "fully_understood"),
        _record("u2", "s2", "good"),
        _record("u3", "s3", "fully_understood"), # another user
    ]
    # (100 + 66 + 0) / 3 = 55.33
    assert aggregation.topic_understanding(topic, progress, "u2") == 55

def test_topic_understanding_rounds_half_up():
    topic = _topic("t1", ["s1", "s2"])
    progress = [_record("u2", "s1", "basic")]
    # 33 / 2 = 16.5
    assert aggregation.topic_understanding(topic, progress, "u2") == 17

def test_topic_without_subtopics_is_zero():
    topic = _topic("t1", [])
    assert aggregation.topic_understanding(topic, [], "u2") == 0
    assert aggregation.employee_topic_percentage(topic, [], "u2") == 0
    assert aggregation.module_overall_percentage(topic, USERS, []) == 0

def test_status_distribution_counts_and_order():
    topic = _topic("t1", ["s1", "s2", "s3", "s4"])
    progress = [
        _record("u2", "s1", "fully_understood"),
        _record("u2", "s2", "fully_understood"),
        _record("u2", "s3", "basic"),
    ]
    result = aggregation.status_distribution(topic, progress, "u2")

    assert list(result["counts"]) == [
        ProgressStatus.FULLY_UNDERSTOOD,
        ProgressStatus.GOOD,
        ProgressStatus.BASIC,
        ProgressStatus.NOT_ADDRESSED,
    ]
    assert result["counts"][ProgressStatus.FULLY_UNDERSTOOD] == 2
    assert result["counts"][ProgressStatus.NOT_ADDRESSED] == 1
    assert result["percentages"][ProgressStatus.FULLY_UNDERSTOOD] == 50.0
    assert result["percentages"][ProgressStatus.GOOD] == 0.0

def test_module_overall_percentage_ignores_admins():
    topic = _topic("t1", ["s1", "s2", "s3"])
    progress = [
        _record("admin", "s1", "fully_understood"),
        _record("admin", "s2", "fully_understood"),
        _record("u2", "s1", "fully_understood"),
        _record("u2", "s2", "good"),
        _record("u3", "s3", "fully_understood"),
    ]
    # 2 fully understood out of 3 subtopics x 2 employees
    assert aggregation.module_overall_percentage(topic, USERS, progress) == 33

def test_module_overall_percentage_without_employees():
    topic = _topic("t1", ["s1"])
    assert aggregation.module_overall_percentage(topic, [_user("admin", "admin")], []) == 0

def test_module_progress_stats_details():
    topic = _topic("t1", ["s1", "s2"])
    progress = [_record("u2", "s1", "fully_understood"), _record("u2", "s2", "fully_understood")]

    stats = aggregation.module_progress_stats(topic, USERS, progress)

    assert stats["overall_percentage"] == 50
    assert stats["subtopic_count"] == 2
    assert [(d["user_id"], d["percentage"]) for d in stats["details"]] == [("u2", 100), ("u3", 0)]
    assert stats["details"][0]["avatar"] == "https://avatars/u2"

def test_employee_module_detail_lists_every_subtopic():
    topic = _topic("t1", ["s1", "s2"])
    detail = aggregation.employee_module_detail(topic, [_record("u2", "s2", "good")], "u2")
    assert [(d["id"], d["status"]) for d in detail] == [
        ("s1", ProgressStatus.NOT_ADDRESSED),
        ("s2", ProgressStatus.GOOD),
    ]

def test_dashboard_summary_skips_deleted_topics():
    topics = [_topic("t1", ["s1"]), _topic("t2", ["s2"], is_deleted=True)]
    progress = [_record("u2", "s1", "fully_understood"), _record("u2", "s2", "basic")]

    summary = aggregation.dashboard_summary(topics, USERS, progress)

    assert summary["total_modules"] == 1
    assert summary["total_employees"] == 2
    assert summary["active_learners"] == 1
    assert [m["topic_id"] for m in summary["modules"]] == ["t1"]
    assert summary["modules"][0]["overall_percentage"] == 50

def test_user_topic_understanding():
    topics = [_topic("t1", ["s1", "s2"]), _topic("t2", ["s3"], is_deleted=True)]
    result = aggregation.user_topic_understanding(topics, [_record("u2", "s1", "good")], "u2")
    assert [(r["topic_id"], r["understanding"]) for r in result] == [("t1", 33)]
