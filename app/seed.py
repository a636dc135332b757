"""
Demo data for the dashboard.

Seeded transactions go through the ingestion pipeline so every record
carries the verdict the rules would have produced:
- ~40 regular transactions spread over 15 users
- a handful of high-amount transactions (> 20000)  → Rule1
- 3 bursty users with 5-6 transactions each         → Rule2 from the 4th on
"""
import logging
import random
import uuid

from app.errors import DuplicateKeyError
from app.services.ingestion import IngestionPipeline

logger = logging.getLogger(__name__)

DEVICES = [f"dev_{i:03d}" for i in range(1, 11)]


def _txn_id() -> str:
    return f"tx_{uuid.uuid4().hex[:10]}"


def generate_payloads(rng: random.Random) -> list:
    payloads = []

    # --- 1. Regular traffic, mostly below any threshold ---
    users = [f"user_{i:03d}" for i in range(1, 16)]
    for _ in range(40):
        payloads.append({
            "transaction_id": _txn_id(),
            "user_id": rng.choice(users),
            "amount": round(rng.uniform(5, 5000), 2),
            "device_id": rng.choice(DEVICES),
        })

    # --- 2. High amounts ---
    for _ in range(6):
        payloads.append({
            "transaction_id": _txn_id(),
            "user_id": f"user_{rng.randint(100, 120):03d}",
            "amount": round(rng.uniform(20000.01, 90000), 2),
            "device_id": rng.choice(DEVICES),
        })

    # --- 3. Bursty users ---
    for i in range(3):
        user = f"burst_{i:02d}"
        device = rng.choice(DEVICES)
        for _ in range(rng.randint(5, 6)):
            payloads.append({
                "transaction_id": _txn_id(),
                "user_id": user,
                "amount": round(rng.uniform(10, 800), 2),
                "device_id": device,
            })

    return payloads


def seed_demo_transactions(pipeline: IngestionPipeline, seed: int = 42) -> int:
    """Submit the demo payloads; returns how many were stored."""
    rng = random.Random(seed)
    stored = 0
    for payload in generate_payloads(rng):
        try:
            pipeline.submit(payload)
        except DuplicateKeyError:
            continue
        stored += 1
    logger.info("Seeded %d demo transactions", stored)
    return stored
