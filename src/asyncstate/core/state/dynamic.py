from __future__ import annotations

import logging
from typing import Optional

from ..exceptions import DynamicStateError
from .representations import DynamicState, DynamicTarget

logger = logging.getLogger(__name__)


class DynamicStateResolver:
    """Evaluates dynamic targets.

    Each call invokes the target's resolver exactly once. Results are never
    cached, so two evaluations may legitimately disagree when the resolver
    depends on run-time context.
    """

    async def evaluate(self, target: DynamicTarget) -> Optional[DynamicState]:
        """Run ``target``'s resolver and return its decision.

        Returns:
            The ``DynamicState`` when it allows the transition, or ``None``
            when the resolver declined (``can_transition`` is False).

        Raises:
            DynamicStateError: If the resolver raises or returns something
                other than a ``DynamicState``. Cancellation is not wrapped.
        """
        ctx = {"resolver": target.name}
        try:
            result = await target.resolver()
        except Exception as exc:
            raise DynamicStateError(
                f"Dynamic target resolver '{target.name}' failed: {exc}",
                context=ctx,
            ) from exc

        if not isinstance(result, DynamicState):
            raise DynamicStateError(
                f"Dynamic target resolver '{target.name}' returned "
                f"{type(result).__name__}, expected DynamicState",
                context=ctx,
            )

        if not result.can_transition:
            logger.debug("Resolver %s declined transition to %r", target.name, result.target_state)
            return None
        return result


__all__ = ["DynamicStateResolver"]
