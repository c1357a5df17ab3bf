"""Bootstrap script composition.

Core types and composition functions for the declarative bootstrap DSL.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Final

# =============================================================================
# Core Types
# =============================================================================

type Op = str | Callable[[], str] | list[Op]
"""Operation type: either a literal string or a function returning a string."""


def resolve(op: Op | None) -> str:
    """Resolve an operation to its string representation."""
    match op:
        case str(op):
            return op
        case list(op):
            return "\n".join(map(lambda o: resolve(o), op))
        case None:
            return ""
        case _:
            return op()


# =============================================================================
# Composition
# =============================================================================

HEADER: Final = "#!/bin/bash\n"


def bootstrap(*ops: Op | None, header: str = HEADER) -> str:
    """Compose operations into a complete bootstrap script.

    Args:
        *ops: Operations to compose. ``None`` entries are skipped.
        header: Script header, the shebang by default.

    Example:
        >>> bootstrap(yum("git"), shell("echo done"))
        '#!/bin/bash\\nyum install -y git\\n\\necho done\\n'
    """
    commands = [resolve(op) for op in ops if op is not None]
    return header + "\n\n".join(commands) + "\n"
