"""
Outgoing notifications for leaderboard events.

A score that reaches the leaderboard is POSTed as JSON to SCORE_WEBHOOK_URL
when that variable is set. Delivery is best effort: failures are logged and
reported to the caller as False, never raised.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests


logger = logging.getLogger(__name__)

EVENT_HEADER = 'X-Snake-Event'


def send_webhook(url: str, event: str, data: Dict[str, Any], timeout: int = 10) -> bool:
    """
    POST one event envelope to a webhook URL.

    Args:
        url: Where to deliver the event
        event: Event name, sent in the body and in the X-Snake-Event header
        data: Event payload
        timeout: Request timeout in seconds

    Returns:
        True if the receiver answered with a 2xx status, False otherwise
    """
    if not url:
        logger.warning(f"No webhook URL for '{event}', skipping")
        return False

    envelope = {
        'event': event,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'data': data,
    }

    try:
        response = requests.post(
            url,
            json=envelope,
            timeout=timeout,
            headers={EVENT_HEADER: event},
        )
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.error(f"Webhook '{event}' to {url} failed: {e}")
        return False

    logger.info(f"Webhook '{event}' delivered to {url}")
    return True


def send_score_submitted_webhook(
    entry: Dict[str, Any],
    rank: int,
    webhook_url: Optional[str] = None
) -> bool:
    """
    Announce a leaderboard entry.

    Args:
        entry: The stored leaderboard entry
        rank: 1-based position of the entry within its mode
        webhook_url: Override for the SCORE_WEBHOOK_URL env var

    Returns:
        False when no URL is configured or delivery failed
    """
    url = webhook_url or os.getenv('SCORE_WEBHOOK_URL')
    if not url:
        return False

    payload = {
        'id': entry['id'],
        'username': entry['username'],
        'score': entry['score'],
        'mode': entry['mode'],
        'rank': rank,
    }
    return send_webhook(url, 'score_submitted', payload)
