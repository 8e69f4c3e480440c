"""
Daily Automation Jobs for the venue CRM.

This module provides scheduled job functions for automated daily reporting:
- Slack manager digest (manager_digest.py)

Environment Requirements:
-------------------------
- SLACK_WEBHOOK_URL: Slack incoming webhook URL in format:
  https://hooks.slack.com/services/xxx/yyy/zzz
- GROQ_API_KEY (optional): enables the AI-written digest text

Usage Examples:
---------------
    from venue_crm.jobs import send_manager_digest

    result = await send_manager_digest()
    if not result['success']:
        print(result['error'])
"""

from venue_crm.jobs.manager_digest import (
    # Main job function
    send_manager_digest,
    # Block Kit formatting
    format_slack_message,
)

__all__ = [
    'send_manager_digest',
    'format_slack_message',
]
