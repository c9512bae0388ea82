"""Prompts and response schemas sent to the generation service."""

from typing import Any

from nomad.core.models import SchemaVariant

# =============================================================================
# Survival game
# =============================================================================

SURVIVAL_SYSTEM_INSTRUCTION = """You are a creative game master for a dynamic, text-based survival game.
Your task is to generate a new, unique scenario based on the latest global news, specifically around natural events, technological breakthroughs, or socio-political events.
The output MUST be a single, raw JSON object with no markdown formatting (no ```json).
The JSON object must contain these two fields:
1. "scenario_text": (string) A compelling, short narrative (3-5 sentences) that describes the player's current situation, linking it directly to the information retrieved from the search tool.
2. "options": (array of strings) A list of three distinct, plausible player choices for how to proceed in this new situation.

Example JSON:
{"scenario_text": "The latest reports of a massive solar flare disrupting GPS systems globally have reached your remote cabin. All navigation and satellite communication is down. You hear a distant emergency broadcast on a short-wave radio.", "options": ["Try to repair the old compass you have stored away.", "Venture out to a nearby town to find the source of the broadcast.", "Stay put and wait for official instructions to be transmitted."]}
"""

SURVIVAL_PROMPT = (
    "Using the latest information available from your search tool, generate a brand new, "
    "unique scenario for a text-based survival game. The scenario must be based on a recent "
    "global event, such as a natural disaster, political crisis, or major technology failure."
)

SURVIVAL_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "scenario_text": {
            "type": "STRING",
            "description": "A short narrative describing the player's new situation.",
        },
        "options": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Three distinct player choices.",
        },
    },
    "required": ["scenario_text", "options"],
}

# =============================================================================
# Nomad trail game
# =============================================================================

TRAIL_SYSTEM_INSTRUCTION = (
    'You are the Game Master for a game called "The 2025 Digital Nomad Trail". '
    "Your task is to generate a unique, unpredictable, and highly specific scenario tailored to "
    "a remote worker traveling across the US. The scenario MUST be relevant to CURRENT EVENTS "
    "or timeless digital nomad challenges: tech failure, gig economy paywalls, political "
    "instability, unexpected travel costs, or mental health burnout. You MUST return the output "
    "as a valid JSON object following the provided schema, including exactly two distinct "
    "choices (A and B) with realistic consequences. Do not add any text or explanation outside "
    "the JSON."
)

TRAIL_PROMPT_TEMPLATE = (
    "Generate a new event scenario for a player who is currently a {profession}. "
    "The event should involve a choice between two actions, each with clear impacts on Cash, "
    "Laptop Health (1-100), and Mental Health (1-100). Keep the effects moderate (cash changes "
    "between -200 and +200, laptop health between -30 and +15, mental health between -20 and +10)."
)

TRAIL_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "title": {
            "type": "STRING",
            "description": "A catchy, short title for the event, e.g., 'Server Meltdown' or 'Unexpected Checkpoint'.",
        },
        "description": {
            "type": "STRING",
            "description": "A detailed description of the event unfolding, setting the scene.",
        },
        "choices": {
            "type": "ARRAY",
            "description": "Exactly two distinct choices the player can make, A and B.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "option": {
                        "type": "STRING",
                        "description": "The text for the player's choice (e.g., 'Pay for premium repairs' or 'Attempt DIY fix').",
                    },
                    "effect_cash": {
                        "type": "INTEGER",
                        "description": "Change to player cash. Positive is gain, negative is loss. Range: -200 to 200.",
                    },
                    "effect_laptop": {
                        "type": "INTEGER",
                        "description": "Change to laptop health (1-100). Positive is gain, negative is loss. Range: -30 to 15.",
                    },
                    "effect_mental": {
                        "type": "INTEGER",
                        "description": "Change to mental health (1-100). Positive is gain, negative is loss. Range: -20 to 10.",
                    },
                    "outcome_text": {
                        "type": "STRING",
                        "description": "A brief, narrative consequence of making this choice.",
                    },
                },
                "required": ["option", "effect_cash", "effect_laptop", "effect_mental", "outcome_text"],
            },
        },
    },
    "required": ["title", "description", "choices"],
}


RESPONSE_SCHEMAS: dict[SchemaVariant, dict[str, Any]] = {
    SchemaVariant.SURVIVAL: SURVIVAL_SCHEMA,
    SchemaVariant.NOMAD_TRAIL: TRAIL_SCHEMA,
}

SYSTEM_INSTRUCTIONS: dict[SchemaVariant, str] = {
    SchemaVariant.SURVIVAL: SURVIVAL_SYSTEM_INSTRUCTION,
    SchemaVariant.NOMAD_TRAIL: TRAIL_SYSTEM_INSTRUCTION,
}


def build_prompt(variant: SchemaVariant, profession: str | None = None) -> str:
    """Build the user prompt for a variant."""
    if variant == SchemaVariant.NOMAD_TRAIL:
        if not profession:
            raise ValueError("profession is required for the nomad trail prompt")
        return TRAIL_PROMPT_TEMPLATE.format(profession=profession)
    return SURVIVAL_PROMPT
