import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Configure Logging to output JSON
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("mudhumeni.audit")

class AuditLog:
    """
    Structured Logger for advisory turns.
    Every completion call and every degraded answer leaves a trace.
    """

    @staticmethod
    def log_event(
        session_id: Optional[str],
        event_type: str,
        details: Dict[str, Any],
        metadata: Dict[str, Any] = None
    ):
        """
        Log an event in a structured JSON format.
        """
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session_id": session_id or "system",
            "event_type": event_type, # e.g., "COMPLETION_START", "FALLBACK", "PARSE_ERROR"
            "details": details,
            "metadata": metadata or {},
            "service": "mudhumeni-ai"
        }

        logger.info(json.dumps(entry, default=str))

    @staticmethod
    def log_decision(
        session_id: Optional[str],
        query: str,
        confidence: float,
        factors: list
    ):
        """
        Specific logger for the final advisory answer of a turn.
        """
        AuditLog.log_event(session_id, "AI_DECISION", {
            "query": query,
            "confidence": confidence,
            "influencing_factors": factors
        })
