# fitquest/runtime/launcher.py
from __future__ import annotations
import logging
from typing import Optional, Union

from fitquest.common.config import RuntimeSettings
from fitquest.common.workers import BaseModelWorker
from .registry import get_pipeline_factory

logger = logging.getLogger(__name__)


def get_worker(exercise: str, source: Union[int, str],
               settings: Optional[RuntimeSettings] = None) -> Optional[BaseModelWorker]:
    """UI entry point: a ready (not started) worker for `exercise`, or None if it has no pipeline."""
    factory = get_pipeline_factory(exercise)
    if factory is None:
        logger.warning("no pipeline registered for exercise %r", exercise)
        return None
    return factory(source=source, settings=settings).build_worker()
