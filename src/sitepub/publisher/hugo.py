"""
외부 정적 사이트 생성기(Hugo) 실행
"""

import logging
import subprocess
from pathlib import Path

from ..errors import RenderFailure
from ..models.site import SiteConfig

logger = logging.getLogger(__name__)


class HugoGenerator:
    """hugo 를 호출해 Content Source 를 렌더링"""

    def __init__(self, site_root: Path, hugo_bin: str = "hugo", build_drafts: bool = False):
        self.site_root = Path(site_root)
        self.hugo_bin = hugo_bin
        self.build_drafts = build_drafts

    def command(self, output_dir: Path) -> list[str]:
        cmd = [
            self.hugo_bin,
            "--source",
            str(self.site_root),
            "--destination",
            str(output_dir),
        ]
        if self.build_drafts:
            cmd.append("--buildDrafts")
        return cmd

    def generate(self, site: SiteConfig, output_dir: Path) -> Path:
        """hugo 실행, 실패 시 hugo 의 오류 메시지를 그대로 RenderFailure 로 전달"""
        output_dir = Path(output_dir)
        cmd = self.command(output_dir)
        logger.debug(f"실행: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                cwd=self.site_root,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise RenderFailure(f"{self.hugo_bin} 실행 파일을 찾을 수 없습니다") from e
        except subprocess.CalledProcessError as e:
            message = (e.stderr or e.stdout or str(e)).strip()
            raise RenderFailure(message) from e

        if result.stdout:
            logger.debug(result.stdout.strip())

        logger.info(f"hugo 렌더링 완료: {output_dir} ({site.base_url})")
        return output_dir
