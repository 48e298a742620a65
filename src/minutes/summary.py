"""
AI summaries for meeting minutes ("atas").

The summary itself is produced by an external workflow: we POST the minute id to
its webhook, the workflow reads the attached PDF and writes the result back into
the minute's `summary` column, and we read it again afterwards.
"""
import json
import logging
import os

import requests
from sqlalchemy.exc import SQLAlchemyError

from src.db.database import MinuteDB
from src.errors import InvalidInputError, NotFoundError, RemoteFailure

AI_SUMMARY_WEBHOOK_URL = os.getenv(
    "AI_SUMMARY_WEBHOOK_URL",
    "https://n8nwebhook.simplexsolucoes.com.br/webhook/ai-minute-summary"
)
# The workflow reads the whole PDF before answering
REQUEST_TIMEOUT = 120

logger = logging.getLogger(__name__)


def parse_summary(raw):
    """Normalize a stored summary (JSON text or mapping) into a dict, or None."""
    if not raw:
        return None
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Stored minute summary is not valid JSON")
            return None
    if not isinstance(raw, dict):
        return None

    return {
        "summary": raw.get("summary"),
        "decisions": list(raw.get("decisions") or []),
        "pending_items": list(raw.get("pendingItems") or []),
    }


def _get_minute(db, minute_id):
    try:
        minute = db.query(MinuteDB).filter(MinuteDB.id == minute_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error loading minute {minute_id}: {e}")
        raise RemoteFailure("Erro ao carregar ata", str(e)) from e
    if not minute:
        raise NotFoundError("Ata não encontrada", f"No minute with id {minute_id}")
    return minute


def request_summary(db, minute_id):
    """Ask the webhook to summarize a minute and return the refreshed summary."""
    minute = _get_minute(db, minute_id)
    if not minute.pdf_url:
        raise InvalidInputError("PDF necessário", "Anexe um documento antes de gerar o resumo com IA.")

    try:
        response = requests.post(
            AI_SUMMARY_WEBHOOK_URL,
            json={"minute_id": minute.id},
            timeout=REQUEST_TIMEOUT
        )
    except requests.RequestException as e:
        logger.error(f"AI summary webhook failed for minute {minute_id}: {e}")
        raise RemoteFailure("Erro ao gerar resumo", str(e)) from e

    if not response.ok:
        logger.error(f"AI summary webhook returned HTTP {response.status_code} for minute {minute_id}")
        raise RemoteFailure("Erro ao gerar resumo", "Erro ao processar a requisição de IA")

    # The workflow wrote the summary through its own connection
    db.expire_all()
    minute = _get_minute(db, minute_id)
    logger.info(f"AI summary generated for minute {minute_id}")
    return parse_summary(minute.summary)
