from typing import Dict, List

REVIEW_PROMPT_PREFIX = "Please review this code and suggest improvements:\n\n"


def build_review_prompt(code_text: str) -> str:
    return f"{REVIEW_PROMPT_PREFIX}{code_text or ''}"


def build_review_messages(code_text: str) -> List[Dict[str, str]]:
    return [{"role": "user", "content": build_review_prompt(code_text)}]
