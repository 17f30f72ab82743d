"""Personality profile, system prompt construction and response validation."""

import re
from dataclasses import dataclass, field
from typing import ClassVar, Literal

DEFAULT_FORBIDDEN_PATTERNS = [
    "I apologize for any",
    "I cannot assist with",
    "As an AI language model",
    "I do not have personal opinions",
    "!!!!",
    "😀😀😀",
    "🙏🙏🙏",
]

TONE_CHECK_PATTERNS: dict[str, re.Pattern[str]] = {
    "overly_apologetic": re.compile(r"I('m| am) (so )?sorry", re.IGNORECASE),
    "excessive_exclamation": re.compile(r"!{3,}"),
    "excessive_emoji": re.compile(r"[\U0001F600-\U0001F64F]{3,}"),
    "robotic_phrases": re.compile(r"(as an ai|i cannot assist|i do not have personal)", re.IGNORECASE),
}

FormalityLevel = Literal["informal", "normal", "formal"]


@dataclass
class PersonalityProfile:
    """Assistant persona used to build the system prompt and check replies."""

    name: str = "Colleague"
    core_traits: list[str] = field(default_factory=lambda: ["proactive", "witty", "candid", "curious"])
    humor_style: str = "situational_timing"
    communication_tone: str = "casual_respectful"
    values: list[str] = field(default_factory=lambda: ["honesty", "autonomy", "craftsmanship"])
    forbidden_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_FORBIDDEN_PATTERNS))
    example_responses: dict[str, str] = field(default_factory=dict)
    humor_frequency: float = 1.0
    formality: FormalityLevel = "normal"

    FORMALITY_GUIDE: ClassVar[dict[str, str]] = {
        "informal": "friendly and relaxed",
        "normal": "friendly but polite",
        "formal": "formal and courteous",
    }


@dataclass
class ValidationResult:
    """Outcome of checking a reply against a personality profile."""

    is_valid: bool
    failed_checks: list[str] = field(default_factory=list)
    failed_patterns: list[str] = field(default_factory=list)


def build_system_prompt(profile: PersonalityProfile | None = None) -> str:
    """Build the system prompt for a profile."""
    profile = profile or PersonalityProfile()

    prompt = f"""Your name is {profile.name}. You are the user's AI colleague, not just an assistant:
- You make suggestions and share opinions before being asked
- You keep the conversation natural and joke when the timing is right
- You take an interest in personal topics as well as work
- You act autonomously, like a real human colleague

Core traits: {", ".join(profile.core_traits)}
Humor style: {profile.humor_style} (frequency {profile.humor_frequency}x)
Communication tone: {profile.communication_tone}
Formality: {profile.FORMALITY_GUIDE.get(profile.formality, "friendly but polite")}
Core values: {", ".join(profile.values)}

You can use tools. Tools that change files or run commands need the user's approval; \
if a tool call is rejected, acknowledge it and continue without it.
"""

    if profile.forbidden_patterns:
        prompt += "\nNever say:\n" + "\n".join(f"- {pattern}" for pattern in profile.forbidden_patterns) + "\n"

    if profile.example_responses:
        prompt += "\nExample responses:\n" + "\n".join(
            f'- {situation}: "{reply}"' for situation, reply in profile.example_responses.items()
        )
        prompt += "\n"

    if profile.humor_frequency < 0.5:
        prompt += "\nKeep humor to a minimum and focus on practical information.\n"
    elif profile.humor_frequency > 1.5:
        prompt += "\nUse humor and wit often.\n"

    return prompt.strip()


def validate_response(text: str, profile: PersonalityProfile | None = None) -> ValidationResult:
    """Check a reply for forbidden patterns and tone problems."""
    forbidden = profile.forbidden_patterns if profile is not None else DEFAULT_FORBIDDEN_PATTERNS
    lowered = text.lower()

    failed_patterns = [pattern for pattern in forbidden if pattern.lower() in lowered]
    failed_checks: list[str] = []
    if failed_patterns:
        failed_checks.append("forbidden_patterns")

    failed_checks.extend(name for name, regex in TONE_CHECK_PATTERNS.items() if regex.search(text))

    return ValidationResult(
        is_valid=not failed_checks,
        failed_checks=failed_checks,
        failed_patterns=failed_patterns,
    )
