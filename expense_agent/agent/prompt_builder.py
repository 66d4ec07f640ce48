"""Prompt assembly for the expense agent.

The system prompt anchors relative dates ("last month", "this month") to a
concrete day so the model can translate them into ``startDate``/``endDate``
arguments, and lists the tools the registry exposes.
"""
from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Optional


def _month_range(day: date) -> tuple[date, date]:
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def _ordinal(value: int) -> str:
    if 10 <= value % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(value % 10, "th")
    return f"{value}{suffix}"


class PromptBuilder:
    """Construct the system prompt for agent runs."""

    APP_HEADER = (
        "You are a highly capable Personal Finance Assistant. Your goal is to help"
        " users analyze their expenses, track spending patterns, and gain insights"
        " into their financial behavior."
    )

    GUIDELINES = (
        "1. **Be Precise:** When users ask for numbers, provide the exact figures returned by your tools.\n"
        "2. **Handle Follow-ups:** You remember previous queries. If a user asks \"What about the month"
        " before?\", refer back to your previous tool results to understand the context.\n"
        "3. **Anomaly Detection:** If a user mentions \"outliers\", \"anomalies\", or \"weird purchases\","
        " use the `excludeAnomalies: true` parameter in your tools.\n"
        "4. **Formatting:** Use Markdown for your responses. Use tables for breakdowns and bold text"
        " for key figures.\n"
        "5. **Conciseness:** Be helpful but concise. Direct answers are preferred."
    )

    def __init__(self, tools_description: str):
        self.tools_description = tools_description.strip()

    def build_system_prompt(self, today: Optional[date] = None) -> str:
        """Build the system prompt anchored on ``today``."""

        today = today or date.today()
        this_start, this_end = _month_range(today)
        last_start, last_end = _month_range(this_start - timedelta(days=1))
        before_start, before_end = _month_range(last_start - timedelta(days=1))

        today_line = f"{today.strftime('%A, %B')} {_ordinal(today.day)}, {today.year}"

        return (
            f"{self.APP_HEADER}\n\n"
            "**Context:**\n"
            f"- Today's date is **{today_line}**.\n"
            f"- \"Last month\" refers to {last_start.strftime('%B %Y')}.\n"
            f"- \"This month\" refers to {this_start.strftime('%B %Y')}.\n"
            "- All amounts are in USD unless otherwise specified.\n\n"
            "**Your Tools:**\n"
            f"{self.tools_description}\n\n"
            "**Guidelines:**\n"
            f"{self.GUIDELINES}\n\n"
            "**Examples of Date Ranges:**\n"
            f"- {before_start.strftime('%B %Y')}: `startDate: \"{before_start.isoformat()}\","
            f" endDate: \"{before_end.isoformat()}\"`\n"
            f"- {last_start.strftime('%B %Y')} (Last month): `startDate: \"{last_start.isoformat()}\","
            f" endDate: \"{last_end.isoformat()}\"`\n"
            f"- {this_start.strftime('%B %Y')} (This month): `startDate: \"{this_start.isoformat()}\","
            f" endDate: \"{this_end.isoformat()}\"`\n\n"
            "Always aim to give the most accurate and insightful financial advice based on"
            " the data provided."
        )
