"""
Slack manager digest job for the venue CRM.

Posts the end-of-day manager digest to Slack. The digest is built from the
Google Sheet records by venue_crm.services.ai_assist.build_manager_digest,
which uses the AI text generator when GROQ_API_KEY is set and the
rule-based digest otherwise. Messages use Slack Block Kit and are delivered
through slack_sdk's WebhookClient.

Environment Requirements:
- SLACK_WEBHOOK_URL: Slack incoming webhook URL for posting the digest
  Format: https://hooks.slack.com/services/xxx/yyy/zzz
- GROQ_API_KEY (optional): AI-written summary instead of the rule-based one

Usage:
    # Digest for today
    result = await send_manager_digest()

    # Digest for a specific date
    result = await send_manager_digest(digest_date=date(2024, 7, 1))

    # From the command line (e.g. cron)
    python -m venue_crm.jobs.manager_digest

Dependencies:
    - slack-sdk (WebhookClient)
    - venue_crm.core.config.get_settings (for SLACK_WEBHOOK_URL)
    - venue_crm.services.sheets.SheetsClient (for the records)
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from slack_sdk.webhook import WebhookClient

from venue_crm.core.config import Settings, get_settings
from venue_crm.models import ManagerDigest
from venue_crm.services.ai_assist import (
    GroqTextGenerator,
    TextGenerator,
    build_manager_digest,
)
from venue_crm.services.sheets import SheetsClient

logger = logging.getLogger(__name__)


# =============================================================================
# Slack Message Formatting
# =============================================================================

def format_slack_message(
    digest_date: date,
    digest: ManagerDigest,
    venue_name: str,
) -> List[Dict[str, Any]]:
    """
    Format a manager digest into Slack Block Kit blocks.

    The message includes:
    - Header with venue name and date
    - Summary paragraph
    - Headline metrics
    - Highlights and recommendations (when present)
    - Footer noting whether the text is AI-written or rule-based

    Returns:
        List of Slack Block Kit block dicts ready to send via WebhookClient.
    """
    blocks: List[Dict[str, Any]] = []

    date_str = digest_date.strftime('%B %d, %Y')
    blocks.append({
        "type": "header",
        "text": {
            "type": "plain_text",
            "text": f"{venue_name} Daily Digest - {date_str}",
            "emoji": True
        }
    })
    blocks.append({"type": "divider"})

    blocks.append({
        "type": "section",
        "text": {"type": "mrkdwn", "text": digest.summary}
    })

    metrics = digest.metrics
    metrics_text = (
        f"*:bar_chart: Today's Numbers*\n\n"
        f"Interactions: *{metrics.totalInteractions:,}*  |  "
        f":fire: Hot Leads: *{metrics.hotLeads:,}*  |  "
        f":warning: At Risk: *{metrics.atRisk:,}*  |  "
        f":x: Cancellations: *{metrics.cancellations:,}*\n"
        f"Average Lead Score: *{metrics.avgQualityScore:.1f}*"
    )
    blocks.append({
        "type": "section",
        "text": {"type": "mrkdwn", "text": metrics_text}
    })

    if digest.highlights:
        highlight_lines = "\n".join(f"• {item}" for item in digest.highlights)
        blocks.append({
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"*:star: Highlights*\n\n{highlight_lines}"}
        })

    if digest.recommendations:
        recommendation_lines = "\n".join(
            f"{i}. {item}" for i, item in enumerate(digest.recommendations, 1)
        )
        blocks.append({
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"*:dart: Recommendations*\n\n{recommendation_lines}"
            }
        })
    else:
        blocks.append({
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": "*:white_check_mark: No Actions Required*\n\nNothing needs attention today."
            }
        })

    blocks.append({"type": "divider"})

    source = "AI summary" if digest.generatedBy == "ai" else "Rule-based summary"
    timestamp = datetime.now().strftime('%Y-%m-%d %H:%M')
    blocks.append({
        "type": "context",
        "elements": [
            {
                "type": "mrkdwn",
                "text": f":calendar: Generated at {timestamp} | {source}"
            }
        ]
    })

    return blocks


# =============================================================================
# Main Entry Point
# =============================================================================

def _default_generator(settings: Settings) -> Optional[TextGenerator]:
    if not settings.groq_api_key:
        return None
    return GroqTextGenerator(
        api_key=settings.groq_api_key,
        model=settings.ai_model,
        temperature=settings.ai_temperature,
        max_tokens=settings.ai_max_tokens,
        venue_name=settings.venue_name,
    )


async def send_manager_digest(
    digest_date: Optional[date] = None,
    settings: Optional[Settings] = None,
    sheets: Optional[SheetsClient] = None,
    generator: Optional[TextGenerator] = None,
) -> Dict[str, Any]:
    """
    Build the manager digest and post it to Slack.

    Steps:
    1. Validate that SLACK_WEBHOOK_URL is configured
    2. Fetch interactions, leads and bookings from the Google Sheet
    3. Build the digest (AI when configured, otherwise rule-based)
    4. Format the Slack message using Block Kit and send it

    Args:
        digest_date: Day to summarize (default: today).
        settings: Settings override (default: get_settings()).
        sheets: Sheets client override (default: built from settings).
        generator: Text generator override (default: Groq when configured).

    Returns:
        Dict with:
        - success: True if the digest was sent
        - date: The digest date as string
        - generated_by, total_interactions, hot_leads, at_risk, cancellations
          (when sent)
        - error: Error message (if failed)

    Raises:
        No exceptions are raised - all errors are captured in the return dict.
    """
    settings = settings or get_settings()

    if not settings.slack_webhook_url:
        return {
            'success': False,
            'error': 'SLACK_WEBHOOK_URL not configured. Set this environment variable to enable the manager digest.'
        }

    target_date = digest_date or date.today()
    sheets = sheets or SheetsClient(
        sheet_id=settings.google_sheet_id,
        cache_seconds=settings.sheet_cache_seconds,
        timeout=settings.sheet_request_timeout,
    )
    if generator is None:
        generator = _default_generator(settings)

    try:
        data = await asyncio.to_thread(sheets.fetch_dashboard)
    except Exception as e:
        logger.error(f"Manager digest could not load sheet data: {e}", exc_info=True)
        return {
            'success': False,
            'error': f'Failed to fetch sheet data: {str(e)}',
            'date': str(target_date)
        }

    digest = await build_manager_digest(
        generator,
        data.interactions,
        data.leads,
        data.bookings,
        today=target_date,
    )
    blocks = format_slack_message(target_date, digest, settings.venue_name)

    try:
        client = WebhookClient(settings.slack_webhook_url)
        response = client.send(text=digest.summary, blocks=blocks)

        if response.status_code == 200:
            logger.info(f"Manager digest sent for {target_date} ({digest.generatedBy})")
            return {
                'success': True,
                'date': str(target_date),
                'generated_by': digest.generatedBy,
                'total_interactions': digest.metrics.totalInteractions,
                'hot_leads': digest.metrics.hotLeads,
                'at_risk': digest.metrics.atRisk,
                'cancellations': digest.metrics.cancellations,
            }
        return {
            'success': False,
            'error': f'Slack API returned status {response.status_code}: {response.body}',
            'date': str(target_date)
        }
    except Exception as e:
        logger.error(f"Failed to send manager digest: {e}", exc_info=True)
        return {
            'success': False,
            'error': f'Failed to send Slack message: {str(e)}',
            'date': str(target_date)
        }


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    print(asyncio.run(send_manager_digest()))
