"""
Probe and action plumbing.

Probes are folded to ``False`` on any failure so callers only ever see a
boolean. Actions are normalised so that every failure surfaces as an
``ActionError``.
"""

import asyncio
import logging
from typing import Optional

from ..models.descriptor import Action, Probe
from .errors import ActionError


logger = logging.getLogger(__name__)


async def run_probe(probe: Probe, timeout: Optional[float] = None) -> bool:
    """Invoke a probe, treating exceptions and timeouts as a negative answer."""
    try:
        if timeout is None:
            return bool(await probe())
        return bool(await asyncio.wait_for(probe(), timeout=timeout))
    except asyncio.TimeoutError:
        logger.debug(f"Probe {_name(probe)} timed out after {timeout}s")
        return False
    except Exception as e:
        logger.debug(f"Probe {_name(probe)} failed: {e}")
        return False


async def run_action(action: Action, timeout: Optional[float] = None) -> None:
    """Invoke an action, converting every failure into an ``ActionError``."""
    try:
        if timeout is None:
            await action()
        else:
            await asyncio.wait_for(action(), timeout=timeout)
    except ActionError:
        raise
    except asyncio.TimeoutError:
        raise ActionError(f"{_name(action)} timed out after {timeout} seconds")
    except Exception as e:
        raise ActionError(f"{_name(action)} raised {type(e).__name__}: {e}") from e


def any_of(*probes: Probe) -> Probe:
    """Probe that passes when at least one of the given probes passes."""
    async def probe() -> bool:
        for candidate in probes:
            if await run_probe(candidate):
                return True
        return False
    probe.__name__ = "any_of"
    return probe


def all_of(*probes: Probe) -> Probe:
    """Probe that passes only when every given probe passes."""
    async def probe() -> bool:
        for candidate in probes:
            if not await run_probe(candidate):
                return False
        return True
    probe.__name__ = "all_of"
    return probe


def sequence(*actions: Action) -> Action:
    """Action that runs each action in order, stopping at the first failure."""
    async def action() -> None:
        for step in actions:
            await run_action(step)
    action.__name__ = "sequence"
    return action


def first_successful(*actions: Action, verify: Optional[Probe] = None) -> Action:
    """
    Action that tries alternative install strategies in order.

    A strategy counts as successful when it does not raise and, if given,
    ``verify`` passes afterwards. The last error is raised when every
    strategy fails.
    """
    async def action() -> None:
        errors = []
        for strategy in actions:
            try:
                await run_action(strategy)
            except ActionError as e:
                logger.warning(f"Strategy {_name(strategy)} failed: {e}")
                errors.append(e)
                continue
            if verify is None or await run_probe(verify):
                return
            logger.warning(f"Strategy {_name(strategy)} completed but verification failed")
            errors.append(ActionError(f"{_name(strategy)} did not take effect"))
        if errors:
            raise errors[-1]
        raise ActionError("No install strategy available")
    action.__name__ = "first_successful"
    return action


def _name(fn) -> str:
    return getattr(fn, "__name__", type(fn).__name__)
