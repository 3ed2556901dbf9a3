"""
콘텐츠 수집기 베이스 클래스
"""

from abc import ABC, abstractmethod
import logging

from ..models.content import ContentDocument

logger = logging.getLogger(__name__)


class BaseCollector(ABC):
    """콘텐츠 수집기 베이스 클래스"""

    source_name: str = "unknown"

    @abstractmethod
    def collect(self) -> list[ContentDocument]:
        """콘텐츠 문서 수집"""
        pass

    def _log_info(self, message: str):
        logger.info(f"[{self.source_name}] {message}")

    def _log_debug(self, message: str):
        logger.debug(f"[{self.source_name}] {message}")

    def _log_warning(self, message: str):
        logger.warning(f"[{self.source_name}] {message}")
