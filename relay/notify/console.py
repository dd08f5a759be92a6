"""Console banner, the transport that is always written."""

import sys
from typing import List, Optional, TextIO

RULE = "=" * 40


def format_banner(from_agent: str, prompt: str) -> List[str]:
    return [
        "",
        RULE,
        f"{from_agent.upper()}: CHECK MESSAGES!",
        RULE,
        f"[clipboard] {prompt}",
        "",
    ]


def print_banner(from_agent: str, prompt: str, stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    for line in format_banner(from_agent, prompt):
        print(line, file=out)
    out.flush()
