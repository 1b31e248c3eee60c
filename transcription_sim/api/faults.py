"""Boundary fault injection: simulated timeouts, failures and slow responses.

These only suspend the calling request and never touch the lifecycle engine.
"""

import asyncio
import logging

from fastapi import HTTPException

from transcription_sim.config import Settings
from transcription_sim.jobs.randomizer import OutcomeRandomizer

logger = logging.getLogger(__name__)


async def simulate_timeout(randomizer: OutcomeRandomizer, config: Settings, route: str) -> None:
    if randomizer.should_timeout(config.timeout_rate):
        logger.info("Simulating gateway timeout on %s (%.0fs stall)", route, config.timeout_delay_seconds)
        await asyncio.sleep(config.timeout_delay_seconds)
        raise HTTPException(status_code=504, detail="Gateway timeout")


def simulate_upload_failure(randomizer: OutcomeRandomizer, config: Settings) -> None:
    if randomizer.should_fail(config.upload_failure_rate):
        error = randomizer.pick_error()
        logger.info("Simulating upload failure: %d %s", error.status_code, error.message)
        raise HTTPException(status_code=error.status_code, detail=error.message)


async def simulate_slow_response(randomizer: OutcomeRandomizer) -> None:
    if randomizer.should_slow_down():
        delay = randomizer.slow_down_seconds()
        logger.debug("Simulating slow response (%.2fs)", delay)
        await asyncio.sleep(delay)
