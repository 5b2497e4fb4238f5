"""LLM-backed prioritization oracle."""

import json
import logging
import re

from prohub.core.prioritization import (
    OracleRequestFailed,
    OracleTask,
    PrioritizedTask,
    parse_oracle_response,
)
from prohub.ports.llm_service import LLMService

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """You are an AI task prioritization assistant. Analyze the list of tasks below and return a prioritized list with explanations for each task's priority.

Tasks:
{tasks}

Respond with JSON only, no prose, in this shape:
{{"prioritizedTasks": [{{"title": "...", "description": "...", "deadline": "YYYY-MM-DD", "importance": "low|medium|high", "reason": "...", "priority": 1}}]}}

Keep every title exactly as given. Priority numbers start from 1 as highest priority.
"""

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def format_prompt(tasks: list[OracleTask]) -> str:
    lines = []
    for task in tasks:
        lines.append(f"- Title: {task.title}")
        lines.append(f"  Description: {task.description}")
        lines.append(f"  Deadline: {task.deadline}")
        lines.append(f"  Importance: {task.importance}")
    return PROMPT_TEMPLATE.format(tasks="\n".join(lines))


def extract_json(text: str):
    """Decode the JSON document in an LLM reply, tolerating code fences and chatter."""
    fenced = _FENCE_RE.search(text)
    if fenced:
        text = fenced.group(1)
    text = text.strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Fall back to the outermost object or array
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        raise OracleRequestFailed("Oracle reply contains no JSON")
    start = min(starts)
    end = max(text.rfind("}"), text.rfind("]"))
    try:
        return json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise OracleRequestFailed(f"Oracle reply is not valid JSON: {e}")


class LLMPrioritizationOracle:
    """
    Prioritization through a language model.

    Implements PrioritizationOracle protocol on top of any LLMService.
    """

    def __init__(self, llm: LLMService):
        self.llm = llm

    def prioritize(self, tasks: list[OracleTask]) -> list[PrioritizedTask]:
        """Rank tasks. Raises OracleRequestFailed on any failure."""
        prompt = format_prompt(tasks)
        logger.debug(f"Requesting prioritization of {len(tasks)} tasks")
        try:
            reply = self.llm.generate(prompt)
        except RuntimeError as e:
            logger.error(f"Prioritization request failed: {e}")
            raise OracleRequestFailed(str(e)) from e
        return parse_oracle_response(extract_json(reply))
