# hackmap/seed.py
"""
Populate a database with sample users and upcoming hackathons.

Usage:
    python -m hackmap.seed

Idempotent: users are matched by email and hackathons by title.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from hackmap import config
from hackmap.auth import hash_password
from hackmap.data_client.database import Database
from hackmap.data_client.models import Hackathon, User
from hackmap.data_client.queries import get_user_by_email
from hackmap.utils import utcnow

logger = logging.getLogger("hackmap.seed")

SAMPLE_PASSWORD = "password123"

ORGANIZER: Dict[str, Any] = {
    "email": "organizer@example.com",
    "name": "Sample Organizer",
    "bio": "Experienced hackathon organizer passionate about innovation and technology.",
    "skills": ["Event Management", "Community Building", "Tech Leadership"],
}

PARTICIPANTS: List[Dict[str, Any]] = [
    {
        "email": "alice@example.com",
        "name": "Alice Johnson",
        "bio": "Full-stack developer with a passion for AI and machine learning.",
        "skills": ["React", "Node.js", "Python", "TensorFlow", "AWS"],
    },
    {
        "email": "bob@example.com",
        "name": "Bob Smith",
        "bio": "UI/UX designer and frontend developer focused on creating amazing user experiences.",
        "skills": ["Figma", "React", "TypeScript", "Tailwind CSS", "Design Systems"],
    },
    {
        "email": "charlie@example.com",
        "name": "Charlie Davis",
        "bio": "Blockchain developer and Web3 enthusiast building the future of decentralized apps.",
        "skills": ["Solidity", "Web3.js", "React", "Smart Contracts", "DeFi"],
    },
]

# (title, description, theme, days until start, max team size, prizes, tags)
HACKATHONS = [
    (
        "AI Innovation Challenge",
        "Build the next generation of AI-powered applications",
        "ai",
        30,
        4,
        ["$10,000 First Prize", "$5,000 Second Prize", "$2,500 Third Prize"],
        ["AI", "Machine Learning", "Innovation"],
    ),
    (
        "Web3 Builder Hackathon",
        "Create decentralized applications that change the world",
        "web3",
        60,
        5,
        ["$15,000 First Prize", "$7,500 Second Prize", "$3,000 Third Prize"],
        ["Blockchain", "DeFi", "NFT", "Smart Contracts"],
    ),
    (
        "FinTech Revolution",
        "Revolutionize financial services with cutting-edge technology",
        "fintech",
        90,
        4,
        ["$12,000 First Prize", "$6,000 Second Prize", "$3,000 Third Prize"],
        ["FinTech", "Banking", "Payments", "Investment"],
    ),
]


def _upsert_user(session: Session, data: Dict[str, Any]) -> User:
    user = get_user_by_email(session, data["email"])
    if user is not None:
        return user
    user = User(password_hash=hash_password(SAMPLE_PASSWORD), **data)
    session.add(user)
    session.flush()
    logger.info("Created user %s", data["email"])
    return user


def seed(session: Session) -> Dict[str, int]:
    """Insert missing sample rows; returns how many of each were created."""
    created = {"users": 0, "hackathons": 0}

    before = session.query(User).count()
    organizer = _upsert_user(session, ORGANIZER)
    for participant in PARTICIPANTS:
        _upsert_user(session, participant)
    created["users"] = session.query(User).count() - before

    now = utcnow()
    for title, description, theme, start_in, max_size, prizes, tags in HACKATHONS:
        if session.query(Hackathon.id).filter(Hackathon.title == title).first() is not None:
            continue
        start = now + timedelta(days=start_in)
        session.add(
            Hackathon(
                title=title,
                description=description,
                theme=theme,
                start_date=start,
                end_date=start + timedelta(days=2),
                registration_deadline=start - timedelta(days=5),
                max_team_size=max_size,
                prizes=prizes,
                tags=tags,
                organizer_id=organizer.id,
            )
        )
        created["hackathons"] += 1

    session.commit()
    return created


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    database = Database(config.DATABASE_URL)
    database.create_all()
    try:
        with database.session_scope() as session:
            created = seed(session)
    finally:
        database.dispose()
    logger.info(
        "Database seeded: %s user(s), %s hackathon(s) created",
        created["users"],
        created["hackathons"],
    )


if __name__ == "__main__":
    main()
