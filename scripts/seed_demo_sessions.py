#!/usr/bin/env python
"""Seed a database with priced demo chat sessions and print the analytics."""

import asyncio
import json
import os

from dotenv import load_dotenv

from playground_pricing.services.analytics import AnalyticsService
from playground_pricing.services.llm import CostTracker, format_cost
from playground_pricing.services.storage import SessionRepository, create_db_engine

load_dotenv()

DATABASE_URL = os.environ.get("PLAYGROUND_DATABASE_URL", "duckdb:///demo.duckdb")

SEARCH = {"type": "browser_search", "arguments": json.dumps({"action": "search"})}
VISIT = {"type": "browser_search", "arguments": json.dumps({"action": "open"})}
PYTHON = {"type": "code_interpreter", "arguments": json.dumps({"duration": 42})}

# (user, model, [(prompt_tokens, completion_tokens, executed_tools), ...])
CONVERSATIONS = [
    ("alice", "llama-3.3-70b-versatile", [(1200, 400, None), (1800, 650, None)]),
    ("alice", "groq/compound", [(3500, 900, [SEARCH, VISIT]), (5200, 1100, [PYTHON])]),
    ("bob", "openai/gpt-oss-120b", [(900, 2400, None)]),
    ("bob", "qwen/qwen3-32b", [(15000, 700, None), (16200, 820, None)]),
]


async def main() -> None:
    """Record demo conversations and print per-user analytics."""
    engine = create_db_engine(DATABASE_URL)
    sessions = SessionRepository(engine)
    tracker = CostTracker(sessions)

    for user_id, model, turns in CONVERSATIONS:
        session = await sessions.create_session(user_id, f"Demo with {model}", model)
        for prompt_tokens, completion_tokens, tools in turns:
            await sessions.add_message(session.id, "user", "demo prompt", user_id=user_id)
            await tracker.record_message(
                session.id,
                "assistant",
                "demo answer",
                model,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                executed_tools=tools,
                user_id=user_id,
            )

    analytics = AnalyticsService(sessions)
    for user_id in sorted({user for user, _, _ in CONVERSATIONS}):
        report = await analytics.get_user_analytics(user_id)
        print(f"{user_id}: {report.total_sessions} sessions, {format_cost(report.total_cost)}")
        for bucket in report.cost_by_model:
            print(f"  {bucket.model}: {format_cost(bucket.cost)} ({bucket.count} sessions)")

    engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
