#!/usr/bin/env python3
"""Seed a development database with demo accounts, a firm and open claims.

Usage locally:
    python -m scripts.seed_demo                          # defaults below
    python -m scripts.seed_demo --claims 12              # more open claims
    python -m scripts.seed_demo --password 'S3cure!Pass'  # password for every demo account

Creates (skipping anything that already exists):
    1. admin@example.com       ADMIN
    2. Demo Claims Group       firm, with firmadmin@example.com as FIRM_ADMIN
    3. adjuster@example.com    ADJUSTER, APPROVED connection to the firm
    4. N AVAILABLE claims posted by the firm admin

Safe to re-run: accounts are looked up by email and the firm by name.
"""

import argparse
import logging
import sys
from pathlib import Path

# Ensure the project root is on the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adjusterhub.database import init_db
from adjusterhub.dependencies import get_claim_service, get_container, get_notification_service
from adjusterhub.models.firm import FirmConnectionModel, FirmModel
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.firm_repo import FirmConnectionRepository, FirmRepository
from adjusterhub.repositories.user_repo import UserRepository
from adjusterhub.schemas.claim import ClaimCreate
from adjusterhub.schemas.enums import ClaimType, ConnectionStatus, Priority, Role

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("seed")

FIRM_NAME = "Demo Claims Group"
CLAIM_TEMPLATES = [
    ("Rear-end collision on I-35", ClaimType.AUTO_COLLISION, Priority.HIGH, 8500.0),
    ("Kitchen fire, single family home", ClaimType.FIRE_DAMAGE, Priority.URGENT, 42000.0),
    ("Burst pipe in basement", ClaimType.WATER_DAMAGE, Priority.MEDIUM, 12000.0),
    ("Hail damage to roof", ClaimType.NATURAL_DISASTER, Priority.HIGH, 18000.0),
    ("Storefront vandalism", ClaimType.VANDALISM, Priority.LOW, 3200.0),
    ("Warehouse theft", ClaimType.THEFT, Priority.MEDIUM, 27000.0),
]


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Seed demo data for local development.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--password", default="DemoPass123!", help="Password for every demo account")
    parser.add_argument("--claims", type=int, default=len(CLAIM_TEMPLATES), help="Open claims to post")
    return parser.parse_args()


def ensure_user(users: UserRepository, hasher, email: str, password: str, **fields) -> UserModel:
    user = users.get_by_email(email)
    if user is not None:
        logger.info("User %s already exists, skipping", email)
        return user
    user = users.create(
        UserModel(email=email, password_hash=hasher.hash(password), email_verified=True, **fields)
    )
    logger.info("Created %s (%s)", email, user.role)
    return user


def main():
    args = parse_args()
    container = get_container()
    settings = container.settings()
    if settings.is_production:
        logger.error("Refusing to seed demo data into a production environment")
        sys.exit(1)

    init_db(container.db_engine())
    hasher = container.password_hasher()
    db = container.session_factory()()
    try:
        users = UserRepository(db)
        firms = FirmRepository(db)
        connections = FirmConnectionRepository(db)

        ensure_user(users, hasher, "admin@example.com", args.password,
                    first_name="Ada", last_name="Admin", role=Role.ADMIN.value)

        firm = firms.get_by_name(FIRM_NAME)
        if firm is None:
            firm = firms.create(FirmModel(name=FIRM_NAME, city="Austin", state="TX",
                                          specialties=["Property", "Auto"]))
            logger.info("Created firm %s", FIRM_NAME)

        firm_admin = ensure_user(users, hasher, "firmadmin@example.com", args.password,
                                 first_name="Fran", last_name="Manager",
                                 role=Role.FIRM_ADMIN.value, firm_id=firm.id)
        adjuster = ensure_user(users, hasher, "adjuster@example.com", args.password,
                               first_name="Alex", last_name="Field", role=Role.ADJUSTER.value,
                               specialties=["Auto", "Water"], years_experience=6, state="TX")

        if connections.get_for(adjuster.id, firm.id) is None:
            connections.create(FirmConnectionModel(user_id=adjuster.id, firm_id=firm.id,
                                                   status=ConnectionStatus.APPROVED.value))
        db.commit()

        claims = get_claim_service(db, get_notification_service(db))
        for i in range(args.claims):
            title, claim_type, priority, value = CLAIM_TEMPLATES[i % len(CLAIM_TEMPLATES)]
            claim = claims.create_claim(
                firm_admin,
                ClaimCreate(title=title, type=claim_type, priority=priority, estimated_value=value,
                            adjuster_fee=round(value * 0.08, 2), city="Austin", state="TX"),
            )
            logger.info("Posted claim %s: %s", claim.claim_number, title)
    finally:
        db.close()

    logger.info("Demo data ready. Sign in with any demo account and the chosen password.")


if __name__ == "__main__":
    main()
