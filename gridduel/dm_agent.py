"""
Grid Duel — Narrator Agent
Wraps the OpenAI chat API. Receives a BattleLog payload, returns structured narration.

CONTRACT: the narrator is a storyteller, NOT a referee.
- It reads outcomes from the BattleLog payload
- It never changes positions, damage values or the result
- Live game state is never passed to this module
"""

from __future__ import annotations
import json
import logging
import os
import re
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv
from openai import OpenAI
from .config import DEFAULT_MODEL
from .errors import NarrationError

load_dotenv()

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------

DM_SYSTEM_PROMPT = """You are the announcer of Grid Duel, a tactical arena where two fighters face off on a 4x3 grid.

Every round each fighter commits three cards in secret. Cards resolve slot by slot: movement first, then guards, then attacks and energy recovery.

## Rules for your commentary

1. **Never alter outcomes.** The engine has already decided every position, hit, miss and HP value. You describe them, you do not invent them.
2. **Follow the slots in order.** The `slots` array is ordered. Each slot is one beat of the story; its `beats` are what happened.
3. **Make positioning matter.** A dodge that makes an attack miss, or a step into the enemy's reach, is the heart of this game.
4. **Name both fighters** as they appear in the payload.
5. **End with the fighters' HP.** If `battle_result` is set, deliver the conclusion instead.

## Output Format

Return a JSON object with exactly these fields:

```json
{
  "narration": "string, 100-200 words",
  "round_title": "string, 3-6 words",
  "key_moment": "string, one sentence",
  "tone": "string, one of: 'tense', 'devastating', 'triumphant', 'chaotic', 'grim'"
}
```

Return only valid JSON. No preamble, no markdown fences.
"""


# ---------------------------------------------------------------------------
# Structured response
# ---------------------------------------------------------------------------

@dataclass
class DMNarration:
    narration: str
    round_title: str
    key_moment: str
    tone: str
    raw_payload: dict   # The BattleLog that produced this narration

    def display(self):
        """Pretty-print for the simulator."""
        divider = "─" * 60
        print(f"\n{divider}")
        print(f"⚔  {self.round_title.upper()}")
        print(divider)
        print(f"\n{self.narration}\n")
        print(f"📍 Key Moment: {self.key_moment}")
        print(f"🎭 Tone: {self.tone}")
        print(divider)


# ---------------------------------------------------------------------------
# Narrator call
# ---------------------------------------------------------------------------

def narrate_round(
    dm_payload: dict,
    api_key: Optional[str] = None,
    model: str = DEFAULT_MODEL,
    client: Optional[OpenAI] = None,
) -> DMNarration:
    """
    Call the narrator with a BattleLog payload.

    Args:
        dm_payload: The dict produced by battle_log.to_dm_payload()
        api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
        model: OpenAI model to use.
        client: Pre-built client; one is created from api_key when omitted.
    """
    client = client or OpenAI(api_key=api_key or os.environ.get("OPENAI_API_KEY"))

    # The system prompt carries the instructions
    payload_for_dm = {k: v for k, v in dm_payload.items() if k != "instructions"}

    user_message = f"""Narrate this Grid Duel round:

{json.dumps(payload_for_dm, indent=2)}"""

    logger.debug("requesting narration for round %s", dm_payload.get("round"))
    response = client.chat.completions.create(
        model=model,
        max_tokens=1024,
        response_format={"type": "json_object"},
        messages=[
            {"role": "system", "content": DM_SYSTEM_PROMPT},
            {"role": "user", "content": user_message},
        ],
    )

    raw_text = (response.choices[0].message.content or "").strip()
    parsed = _parse_json(raw_text)

    try:
        return DMNarration(
            narration=parsed["narration"],
            round_title=parsed["round_title"],
            key_moment=parsed["key_moment"],
            tone=parsed["tone"],
            raw_payload=dm_payload,
        )
    except KeyError as exc:
        raise NarrationError(raw_text) from exc


def _parse_json(raw_text: str) -> dict:
    try:
        return json.loads(raw_text)
    except json.JSONDecodeError:
        # Model wrapped the object in prose or fences
        match = re.search(r"\{.*\}", raw_text, re.DOTALL)
        if not match:
            raise NarrationError(raw_text)
        try:
            return json.loads(match.group())
        except json.JSONDecodeError as exc:
            raise NarrationError(raw_text) from exc


# ---------------------------------------------------------------------------
# Match-level narrator
# ---------------------------------------------------------------------------

def narrate_match(
    round_payloads: list[dict],
    api_key: Optional[str] = None,
    model: str = DEFAULT_MODEL,
    client: Optional[OpenAI] = None,
) -> list[DMNarration]:
    """Narrate rounds in sequence, stopping after the round that ends the battle."""
    client = client or OpenAI(api_key=api_key or os.environ.get("OPENAI_API_KEY"))
    narrations = []
    for payload in round_payloads:
        narrations.append(narrate_round(payload, model=model, client=client))
        if payload.get("battle_result"):
            break
    return narrations
