"""Entry point for badge evaluation"""
import logging
import os
import sys
import traceback
from typing import List, Optional

from donor_badges.config import settings
from donor_badges.db import db
from donor_badges.evaluator import BadgeEvaluator
from donor_badges.metrics import compute_donation_metrics
from donor_badges.models.response import AchievementEntry, EvaluationResponse, MetricsSummary
from donor_badges.services.storage import StorageService

logger = logging.getLogger(__name__)

def resolve_donor_id(argv: List[str]) -> str:
    """Donor id from the command line, falling back to the DONOR_ID setting"""
    donor_id = argv[0] if argv else settings.DONOR_ID
    if not donor_id:
        raise ValueError("No donor id given and DONOR_ID is not set")
    return donor_id

def evaluate(storage: StorageService, donor_id: str) -> EvaluationResponse:
    """Recompute a donor's badges and build the response"""
    evaluator = BadgeEvaluator(storage)
    achieved = evaluator.recompute(donor_id)
    metrics = evaluator.last_metrics
    if metrics is None:
        # Empty catalog: recompute skipped the donation load
        metrics = compute_donation_metrics(storage.load_donor_donations(donor_id))

    return EvaluationResponse(
        donor_id=donor_id,
        metrics=MetricsSummary(**vars(metrics)),
        achieved=[AchievementEntry(badge_id=a.badge_id, achieved_at=a.achieved_at) for a in achieved],
        badges=storage.list_donor_badges(donor_id)
    )

def run(argv: Optional[List[str]] = None) -> None:
    """Evaluate badges for one donor and write results.json."""
    logging.basicConfig(level=settings.LOG_LEVEL, format='%(message)s')
    try:
        donor_id = resolve_donor_id(sys.argv[1:] if argv is None else argv)

        db.init()
        with db.storage() as storage:
            response = evaluate(storage, donor_id)

        os.makedirs(settings.OUTPUT_DIR, exist_ok=True)
        output_path = os.path.join(settings.OUTPUT_DIR, "results.json")
        with open(output_path, 'w') as f:
            f.write(response.model_dump_json(indent=2))

        logger.info(f"Badge evaluation complete for {donor_id}: "
                    f"{[a.badge_id for a in response.achieved]}")

    except Exception as e:
        logger.error(f"Error during badge evaluation: {e}")
        traceback.print_exc()
        sys.exit(1)
    finally:
        db.dispose()

if __name__ == "__main__":
    run()
