import logging
from typing import List

from training_tracker.models.topic import Subtopic, Topic
from training_tracker.models.user import Role, User

logger = logging.getLogger(__name__)

AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"

DEFAULT_USERS = [
    {"id": "u1", "name": "Admin", "email": "admin@oceaninfinity.com", "role": Role.ADMIN},
    {"id": "u2", "name": "May", "email": "may@oceaninfinity.com", "role": Role.EMPLOYEE},
    {"id": "u3", "name": "Adam", "email": "adam@oceaninfinity.com", "role": Role.EMPLOYEE},
    {"id": "u4", "name": "Chris", "email": "chris@oceaninfinity.com", "role": Role.EMPLOYEE},
    {"id": "u5", "name": "Arta", "email": "arta@oceaninfinity.com", "role": Role.EMPLOYEE},
    {"id": "u6", "name": "Enya", "email": "enya@oceaninfinity.com", "role": Role.EMPLOYEE},
]

DEFAULT_USER_IDS = [u["id"] for u in DEFAULT_USERS]

DEFAULT_TOPICS = [
    ("t1", "Safety First", "ShieldCheck", [
        ("st1", "Emergency Procedures", "# Emergency Procedures\n\nIn case of emergency..."),
        ("st2", "PPE Guidelines", "# Personal Protective Equipment\n\nAlways wear..."),
    ]),
    ("t2", "Ocean Navigation", "Compass", [
        ("st3", "Chart Reading", "# Reading Charts\n\nKey symbols include..."),
    ]),
    ("t3", "Equipment Ops", "Wrench", [
        ("st4", "ROV Maintenance", "# ROV Maintenance Checklist\n\n1. Check seals..."),
    ]),
    ("t4", "Data Analysis", "BarChart3", [
        ("st5", "Sonar Interpretation", "# Sonar Data\n\nHow to read sonar..."),
    ]),
    ("t5", "Communication", "Radio", [
        ("st6", "Radio Protocols", "# Radio Etiquette\n\nOver and out."),
    ]),
    ("t6", "Environmental", "Leaf", [
        ("st7", "Marine Life Protection", "# Protecting Marine Life\n\nGuidelines..."),
    ]),
    ("t7", "Vessel Maintenance", "Ship", [
        ("st8", "Engine Checks", "# Engine Maintenance\n\nDaily checks..."),
        ("st9", "Hull Inspection", "# Hull Integrity\n\nRegular inspection..."),
    ]),
    ("t8", "Weather Systems", "Wind", [
        ("st10", "Storm Recognition", "# Storm Systems\n\nIdentifying threats..."),
    ]),
]

def build_default_rows() -> List[object]:
    """ORM rows for the default users and modules, ready for ``session.add_all``."""
    rows: List[object] = [
        User(
            id=u["id"],
            name=u["name"],
            email=u["email"],
            role=u["role"].value,
            avatar=AVATAR_URL.format(seed=u["name"]),
        )
        for u in DEFAULT_USERS
    ]
    for topic_id, title, icon, subtopics in DEFAULT_TOPICS:
        rows.append(Topic(id=topic_id, title=title, icon=icon, is_deleted=False))
        for position, (subtopic_id, sub_title, resources) in enumerate(subtopics):
            rows.append(Subtopic(
                id=subtopic_id,
                topic_id=topic_id,
                title=sub_title,
                resources=resources,
                resource_links=[],
                position=position,
            ))
    return rows

async def seed_defaults(storage) -> bool:
    """Insert default data when no users exist yet. Returns True when data was seeded."""
    if await storage.count_users():
        logger.debug("Users already present, skipping seed")
        return False
    storage.db.add_all(build_default_rows())
    await storage.db.commit()
    logger.info("Seeded %d users and %d modules", len(DEFAULT_USERS), len(DEFAULT_TOPICS))
    return True
