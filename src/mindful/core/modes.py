"""
Conversational modes and the keyword classifier.

A session is always in exactly one of four modes. The keyword classifier is
the canonical, always-available way to pick one: it is pure, deterministic
and needs no network or storage access.
"""

from enum import Enum
from typing import Any, Optional


class Mode(str, Enum):
    """Conversational mode of a therapy session."""

    REFLECT = "Reflect"
    RECOVER = "Recover"
    REBUILD = "Rebuild"
    EVOLVE = "Evolve"

    @classmethod
    def parse(cls, value: Any) -> Optional["Mode"]:
        """Case-insensitive lookup by mode name; None when unrecognized."""
        if isinstance(value, Mode):
            return value
        if not isinstance(value, str):
            return None
        wanted = value.strip().lower()
        for mode in cls:
            if mode.value.lower() == wanted:
                return mode
        return None


DEFAULT_MODE = Mode.REFLECT

# Evaluated top to bottom, first match wins. Recover comes first so that
# safety-relevant language wins even when growth or identity words also appear.
# Matching is substring containment on the lower-cased message.
MODE_PRIORITY: tuple[tuple[Mode, tuple[str, ...]], ...] = (
    (Mode.RECOVER, (
        "trauma", "ptsd", "abuse", "hurt", "healing", "recover",
        "grief", "grieving", "self-harm", "self harm", "suicid",
        "kill myself", "assault",
    )),
    (Mode.REBUILD, (
        "who am i", "identity", "rebuild", "start over", "new me",
        "change myself", "relationship", "boundar", "breakup", "divorce",
    )),
    (Mode.EVOLVE, (
        "grow", "better", "improve", "achieve", "goals", "potential",
        "transform", "ambition",
    )),
    (Mode.REFLECT, (
        "feel", "emotion", "thought", "confused", "overwhelm", "stress",
    )),
)


def classify(message: Any) -> Mode:
    """
    Map a message to a conversational mode.

    Args:
        message: Message text; non-string or empty input yields Reflect

    Returns:
        The first mode in MODE_PRIORITY whose keywords occur in the message,
        otherwise Reflect
    """
    if not message or not isinstance(message, str):
        return DEFAULT_MODE

    text = message.lower()
    for mode, keywords in MODE_PRIORITY:
        if any(keyword in text for keyword in keywords):
            return mode
    return DEFAULT_MODE


# ============================================================================
# Prompts
# ============================================================================

SYSTEM_PROMPTS: dict[Mode, str] = {
    Mode.REFLECT: (
        "You are Echo, a warm and intuitive therapy companion in Reflect Mode. "
        "Your purpose is to help users process thoughts and emotions through gentle, "
        "non-judgmental exploration. Use reflection, metaphor, and somatic awareness. "
        "Never diagnose. Guide only by open-ended questions. Keep responses under "
        "300 words and always be empathetic and supportive."
    ),
    Mode.RECOVER: (
        "You are Echo in Recover Mode, a trauma-informed healing companion. Prioritize "
        "emotional safety, validation, grounding, and resilience. Let the user lead the "
        "pace. Don't ask for graphic trauma details. Never diagnose. Always empower. "
        "Keep responses under 300 words and be extra gentle and validating."
    ),
    Mode.REBUILD: (
        "You are Echo in Rebuild Mode. Help the user reconstruct identity, relationships, "
        "and values after challenge. Focus on patterns, boundaries, and self-awareness. "
        "Be empowering, constructive, and values-focused. Never diagnose. Keep responses "
        "under 300 words and be encouraging about their rebuilding journey."
    ),
    Mode.EVOLVE: (
        "You are Echo in Evolve Mode. Inspire future growth, vision, and transformation. "
        "Help users challenge limiting beliefs and envision bold change. Be visionary, "
        "energizing, and grounded in possibility. Never diagnose. Keep responses under "
        "300 words and be motivational while remaining realistic."
    ),
}


def system_prompt_for(mode: Any) -> str:
    """Mode-specific system prompt; Reflect's for any unrecognized key."""
    return SYSTEM_PROMPTS[Mode.parse(mode) or DEFAULT_MODE]


# Fixed opening instructions used when a new session is created.
GREETING_INSTRUCTIONS: dict[bool, str] = {
    True: (
        "Welcome back to your therapy session. How are you feeling today and what "
        "would you like to explore in this session?"
    ),
    False: (
        "Welcome to your therapy session. Take a moment to settle in. "
        "How are you feeling right now?"
    ),
}

GREETING_USER_PROMPT = "Start my new therapy session."

CLASSIFIER_INSTRUCTION = (
    "You are an emotion classification system for therapy sessions. Based on the "
    "user's message, identify which therapy mode they currently need:\n\n"
    "- Reflect: For processing thoughts, self-awareness, and understanding emotions\n"
    "- Recover: For healing from trauma, grief, or difficult experiences\n"
    "- Rebuild: For reconstructing self-esteem, relationships, or life structure after setbacks\n"
    "- Evolve: For personal growth, overcoming limitations, and reaching new potential\n\n"
    "Only return one word: Reflect, Recover, Rebuild, or Evolve."
)

FALLBACK_TITLES: dict[Mode, str] = {
    Mode.REFLECT: "Reflection Session",
    Mode.RECOVER: "Healing Journey",
    Mode.REBUILD: "Inner Work",
    Mode.EVOLVE: "Growth Path",
}

# Mode a newly created session starts in, keyed by is_premium.
TIER_DEFAULT_MODES: dict[bool, Mode] = {
    True: Mode.EVOLVE,
    False: Mode.REFLECT,
}
