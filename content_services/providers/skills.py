"""
Skill Extraction

Keyword-based skill detection for job titles and descriptions. Providers
such as Adzuna do not return a structured skills list, so required skills
are inferred from the posting text.
"""

from __future__ import annotations

import re

# Canonical skill name -> patterns that indicate it
SKILL_KEYWORDS = {
    "javascript": ["javascript", "js", "ecmascript"],
    "typescript": ["typescript"],
    "python": ["python"],
    "java": ["java"],
    "react": ["react", "react.js", "reactjs"],
    "node": ["node", "node.js", "nodejs"],
    "sql": ["sql", "postgresql", "mysql"],
    "aws": ["aws", "amazon web services"],
    "docker": ["docker"],
    "kubernetes": ["kubernetes", "k8s"],
    "ml": ["ml", "machine learning"],
    "ai": ["ai", "artificial intelligence"],
    "go": ["golang"],
    "rust": ["rust"],
}


def _compile(pattern: str) -> re.Pattern:
    # \b does not match after a trailing "." so use explicit non-word lookarounds
    return re.compile(r"(?<![\w.])" + re.escape(pattern.lower()) + r"(?![\w])")


_COMPILED = {
    skill: [_compile(pattern) for pattern in patterns] for skill, patterns in SKILL_KEYWORDS.items()
}


def extract_skills(*texts: str | None) -> list[str]:
    """
    Extract canonical skill names mentioned in the given texts.

    Args:
        *texts: Title, description or other free text; None values are ignored

    Returns:
        Skill names in SKILL_KEYWORDS order, without duplicates
    """
    combined = " ".join(text for text in texts if text).lower()
    if not combined:
        return []

    found = []
    for skill, patterns in _COMPILED.items():
        if any(pattern.search(combined) for pattern in patterns):
            found.append(skill)
    return found
