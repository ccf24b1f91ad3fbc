"""
AWS Lambda entrypoint for the activity reconciliation engine

Event-driven handler: reconciles stats on demand or rebuilds the snapshot
artifact on a schedule.
"""

import asyncio
import logging
from typing import Dict, Any, Optional

from activity_stats.jobs.snapshot_build import run_snapshot_build
from activity_stats.orchestrator import ReconciliationOrchestrator
from activity_stats.schemas import ActivityResponse

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Instantiate orchestrator once per Lambda execution environment
orchestrator = ReconciliationOrchestrator()


def lambda_handler(event: Optional[Dict[str, Any]], context: Any) -> Dict[str, Any]:
    """
    Dispatch on `event["action"]`.

    Expected event payloads:
    - {"action": "reconcile", "username": "octocat"}
    - {"action": "build_snapshot"}

    Default action is "reconcile"; username defaults to GITHUB_USERNAME.

    Returns:
        Dictionary with statusCode, action, and result
    """
    payload = event or {}
    action = payload.get("action", "reconcile")
    logger.info(f"Lambda invoked with action: {action}")

    try:
        if action == "reconcile":
            result = asyncio.run(orchestrator.reconcile(payload.get("username")))
            body = ActivityResponse.from_result(result).model_dump(mode="json")

        elif action == "build_snapshot":
            body = asyncio.run(run_snapshot_build(username=payload.get("username")))

        else:
            error_msg = f"Unknown action: {action}"
            logger.error(error_msg)
            raise ValueError(error_msg)

        return {
            "statusCode": 200,
            "action": action,
            "result": body,
        }

    except Exception as e:
        logger.error(f"Lambda execution failed: {e}", exc_info=True)
        return {
            "statusCode": 500,
            "action": action,
            "error": str(e),
        }
