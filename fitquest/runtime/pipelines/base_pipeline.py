# fitquest/runtime/pipelines/base_pipeline.py
from __future__ import annotations
from typing import Optional, Union

from fitquest.common.config import RuntimeSettings
from fitquest.common.workers import BaseModelWorker


class BasePipeline:
    """
    يربط مصدر الفيديو والإعدادات بالـ Worker الذي يشغّل الجلسة.
    """
    def __init__(self, source: Union[int, str], settings: Optional[RuntimeSettings] = None):
        self.source = source
        self.settings = settings if settings is not None else RuntimeSettings()

    def build_worker(self) -> BaseModelWorker:
        raise NotImplementedError
