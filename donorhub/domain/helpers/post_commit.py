from dataclasses import dataclass, field
from typing import Any, Callable, List, Tuple

import structlog

logger = structlog.get_logger()

Schedule = Callable[..., Any]


def run_best_effort(name: str, func: Callable[..., Any], *args, **kwargs) -> bool:
    """
    Run a post-commit hook. Failures are logged and swallowed so they never
    reach the caller or undo the write that scheduled them.
    Returns True when the hook completed.
    """
    try:
        func(*args, **kwargs)
    except Exception:
        logger.exception("Post-commit hook failed", hook=name, args=args)
        return False
    logger.debug("Post-commit hook completed", hook=name)
    return True


@dataclass
class PostCommitHooks:
    """Hooks collected while handling a write, dispatched only after it commits."""

    hooks: List[Tuple[str, Callable[..., Any], tuple]] = field(default_factory=list)

    def add(self, name: str, func: Callable[..., Any], *args) -> None:
        self.hooks.append((name, func, args))

    def dispatch(self, schedule: Schedule) -> None:
        # schedule is usually BackgroundTasks.add_task: at-most-once, no retries.
        for name, func, args in self.hooks:
            schedule(run_best_effort, name, func, *args)
        self.hooks.clear()


def run_now(func: Callable[..., Any], *args, **kwargs) -> None:
    """Schedule that runs hooks inline (CLI tools and tests)."""
    func(*args, **kwargs)
