# brandscan/enhance/__init__.py
"""
Optional AI refinement of the heuristic profile.

Pipeline-facing API:
  - EnhancementClient(cfg).enhance(ctx: EnhancementContext) -> Enhancement

An empty Enhancement means "no opinion": credentials missing, the service
was unreachable, the job failed or timed out, or its output had no JSON.
"""

from .client import (
    TERMINAL_STATUSES,
    Enhancement,
    EnhancementClient,
    EnhancementContext,
    EnhancementJob,
    build_prompt,
    first_json_object,
    join_output,
    parse_enhancement,
)

__all__ = [
    "Enhancement",
    "EnhancementClient",
    "EnhancementContext",
    "EnhancementJob",
    "TERMINAL_STATUSES",
    "build_prompt",
    "first_json_object",
    "join_output",
    "parse_enhancement",
]
