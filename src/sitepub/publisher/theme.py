"""
테마(git submodule) 확인 및 가져오기
"""

import logging
import subprocess
from pathlib import Path

from .github import run_git
from ..errors import RenderFailure

logger = logging.getLogger(__name__)


class ThemeManager:
    """사이트에 vendoring 된 테마가 로컬에 있는지 보장"""

    def __init__(self, site_root: Path, themes_dir: str = "themes"):
        self.site_root = Path(site_root)
        self.themes_path = self.site_root / themes_dir

    def theme_path(self, theme: str) -> Path:
        return self.themes_path / theme

    def is_present(self, theme: str) -> bool:
        path = self.theme_path(theme)
        return path.is_dir() and any(path.iterdir())

    def ensure(self, themes: list[str]) -> list[Path]:
        """없는 테마가 있으면 submodule 로 가져옴 (모두 있으면 아무것도 하지 않음)"""
        missing = [theme for theme in themes if not self.is_present(theme)]
        if themes and not missing:
            logger.debug(f"테마 확인: {', '.join(themes)}")

        if missing and (self.site_root / ".gitmodules").is_file():
            logger.info(f"테마 가져오는 중: {', '.join(missing)} (git submodule)")
            try:
                run_git("submodule", "init", cwd=self.site_root)
                run_git("submodule", "update", cwd=self.site_root)
            except subprocess.CalledProcessError as e:
                message = (e.stderr or str(e)).strip()
                raise RenderFailure(f"테마 submodule 업데이트 실패: {message}") from e

        for theme in missing:
            if not self.is_present(theme):
                raise RenderFailure(f"테마를 찾을 수 없습니다: {self.theme_path(theme)}")

        return [self.theme_path(theme) for theme in themes]
