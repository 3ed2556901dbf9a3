"""
설정 관리 모듈
"""

from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# .env 파일 로드
load_dotenv()

# 지원하는 렌더러
GENERATOR_HUGO = "hugo"
GENERATOR_BUILTIN = "builtin"


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 사이트 경로 (site_root 기준 상대 경로)
    site_root: Path = Path(".")
    content_dir: str = "content"
    output_dir: str = "public"  # 렌더링 결과 + 배포 브랜치 작업 사본
    static_dir: str = "static"
    layouts_dir: str = "layouts"
    themes_dir: str = "themes"
    site_config: str = "config.toml"

    # 렌더러
    generator: str = GENERATOR_HUGO  # hugo | builtin
    hugo_bin: str = "hugo"
    build_drafts: bool = False
    summary_length: int = 70  # 요약 단어 수

    # 배포 (gh-pages)
    publish_remote_url: str = ""
    publish_remote: str = "origin"
    publish_branch: str = "gh-pages"
    commit_message: str = "Publish site"
    git_user_name: str = ""
    git_user_email: str = ""

    # 로깅
    log_level: str = "INFO"

    class Config:
        env_prefix = "SITEPUB_"
        env_file = ".env"
        env_file_encoding = "utf-8"

    def resolve(self, relative: str) -> Path:
        """site_root 기준 절대 경로"""
        return (Path(self.site_root) / relative).resolve()

    @property
    def content_path(self) -> Path:
        return self.resolve(self.content_dir)

    @property
    def output_path(self) -> Path:
        return self.resolve(self.output_dir)

    @property
    def site_config_path(self) -> Path:
        return self.resolve(self.site_config)


# 전역 설정 인스턴스
settings = Settings()
