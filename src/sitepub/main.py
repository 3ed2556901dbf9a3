"""
사이트 빌드/배포 도구 - 메인 실행 파일
"""

import argparse
import logging
import shutil
import sys
from enum import Enum, auto
from pathlib import Path
from typing import Optional

from .config import settings, Settings, GENERATOR_BUILTIN, GENERATOR_HUGO
from .errors import ConfigurationMissing, PublisherError, PublishStateError
from .models.site import load_site_config
from .publisher.static import StaticSiteGenerator
from .publisher.hugo import HugoGenerator
from .publisher.theme import ThemeManager
from .publisher.github import GitHubPublisher

# 로깅 설정
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# 작업 사본에서 빌드 시 보존할 항목
PRESERVED_ENTRIES = {".git"}


class PublishState(Enum):
    """배포 파이프라인 상태 (실행 단위, 저장하지 않음)"""

    IDLE = auto()
    PULLING = auto()
    BUILDING = auto()
    COMMITTING = auto()
    PUSHING = auto()
    FAILED = auto()


VALID_TRANSITIONS = {
    PublishState.IDLE: {PublishState.PULLING, PublishState.BUILDING},
    PublishState.PULLING: {PublishState.BUILDING, PublishState.IDLE},
    PublishState.BUILDING: {PublishState.COMMITTING, PublishState.IDLE},
    PublishState.COMMITTING: {PublishState.PUSHING},
    PublishState.PUSHING: {PublishState.IDLE},
    PublishState.FAILED: {PublishState.IDLE},
}


def create_generator(config: Settings):
    """설정에 맞는 렌더러 생성"""
    if config.generator == GENERATOR_BUILTIN:
        return StaticSiteGenerator(
            content_dir=config.content_path,
            static_dir=config.resolve(config.static_dir),
            layouts_dir=config.resolve(config.layouts_dir),
            build_drafts=config.build_drafts,
            summary_length=config.summary_length,
        )
    if config.generator == GENERATOR_HUGO:
        return HugoGenerator(
            site_root=config.resolve("."),
            hugo_bin=config.hugo_bin,
            build_drafts=config.build_drafts,
        )
    raise ConfigurationMissing(f"알 수 없는 generator: {config.generator}")


def create_git_publisher(config: Settings) -> GitHubPublisher:
    if not config.publish_remote_url:
        raise ConfigurationMissing("publish_remote_url 이 설정되지 않았습니다")
    return GitHubPublisher(
        repo_path=config.output_path,
        remote_url=config.publish_remote_url,
        remote=config.publish_remote,
        branch=config.publish_branch,
        user_name=config.git_user_name,
        user_email=config.git_user_email,
    )


class SitePublisher:
    """render -> synchronize 2단계 파이프라인"""

    def __init__(self, config: Settings = settings, generator=None, git: Optional[GitHubPublisher] = None):
        self.config = config
        self.generator = generator
        self.git = git
        self.state = PublishState.IDLE

    def _transition(self, target: PublishState):
        if target not in VALID_TRANSITIONS[self.state]:
            raise PublishStateError(self.state, target)
        logger.debug(f"상태 전이: {self.state.name} -> {target.name}")
        self.state = target

    def _fail(self, error: Exception):
        logger.error(f"{self.state.name} 단계 실패: {error}")
        self.state = PublishState.FAILED

    def _get_generator(self):
        if self.generator is None:
            self.generator = create_generator(self.config)
        return self.generator

    def _get_git(self) -> GitHubPublisher:
        if self.git is None:
            self.git = create_git_publisher(self.config)
        return self.git

    def _check_output_target(self, output_dir: Path):
        """사이트 소스(루트, content, static, layouts, themes, config)를 지우지 않도록 확인"""
        source_dirs = {
            self.config.content_path,
            self.config.resolve(self.config.static_dir),
            self.config.resolve(self.config.layouts_dir),
            self.config.resolve(self.config.themes_dir),
        }
        protected = source_dirs | {self.config.resolve("."), self.config.site_config_path}

        # 소스 경로 자체 또는 그 상위 디렉토리
        if output_dir in protected or any(output_dir in p.parents for p in protected):
            raise PublisherError(f"출력 디렉토리로 사용할 수 없는 경로입니다: {output_dir}")
        # 소스 디렉토리 내부
        if any(d in output_dir.parents for d in source_dirs):
            raise PublisherError(f"소스 디렉토리 안에는 출력할 수 없습니다: {output_dir}")

    def _reset_output_dir(self, output_dir: Path):
        """출력 디렉토리 비우기 (.git 보존)"""
        self._check_output_target(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        for entry in output_dir.iterdir():
            if entry.name in PRESERVED_ENTRIES:
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()

    def _build(self) -> Path:
        site = load_site_config(self.config.site_config_path)
        logger.info(f"  -> baseURL: {site.base_url}")

        ThemeManager(self.config.resolve("."), self.config.themes_dir).ensure(site.themes)

        output_dir = self.config.output_path
        self._reset_output_dir(output_dir)
        return self._get_generator().generate(site, output_dir)

    def build(self) -> Path:
        """Content Source -> Rendered Output"""
        self.state = PublishState.IDLE
        self._transition(PublishState.BUILDING)
        try:
            output_dir = self._build()
        except Exception as e:
            self._fail(e)
            raise
        self._transition(PublishState.IDLE)
        return output_dir

    def pull_published(self) -> Optional[str]:
        """배포 브랜치 최신 상태로 작업 사본 리셋"""
        self.state = PublishState.IDLE
        self._transition(PublishState.PULLING)
        try:
            self._check_output_target(self.config.output_path)
            tip = self._get_git().sync()
        except Exception as e:
            self._fail(e)
            raise
        self._transition(PublishState.IDLE)
        return tip

    def publish(self, message: Optional[str] = None) -> str:
        """pull -> build -> commit -> push (순서 고정)"""
        logger.info("=" * 50)
        logger.info("사이트 배포 시작")
        logger.info("=" * 50)

        self.state = PublishState.IDLE
        message = message or self.config.commit_message

        try:
            # 1. 배포 브랜치 동기화
            logger.info("\n[1/4] 배포 브랜치 동기화 중...")
            self._transition(PublishState.PULLING)
            self._check_output_target(self.config.output_path)
            git = self._get_git()
            tip = git.sync()
            logger.info(f"  -> 기준 커밋: {tip[:8] if tip else '(새 브랜치)'}")

            # 2. 사이트 빌드
            logger.info("\n[2/4] 사이트 빌드 중...")
            self._transition(PublishState.BUILDING)
            output_dir = self._build()
            logger.info(f"  -> {output_dir} 생성 완료")

            # 3. 커밋
            logger.info("\n[3/4] 커밋 중...")
            self._transition(PublishState.COMMITTING)
            commit = git.commit(message)

            # 4. 푸시
            logger.info("\n[4/4] 푸시 중...")
            self._transition(PublishState.PUSHING)
            git.push()

        except Exception as e:
            self._fail(e)
            raise

        self._transition(PublishState.IDLE)

        logger.info("\n" + "=" * 50)
        logger.info("배포 완료!")
        logger.info(f"  - 브랜치: {self.config.publish_branch}")
        logger.info(f"  - 커밋: {commit[:8]} {message}")
        logger.info("=" * 50)
        return commit

    def clean(self):
        """Rendered Output / 작업 사본 삭제 (없으면 아무것도 하지 않음)"""
        output_dir = self.config.output_path
        self._check_output_target(output_dir)

        if not output_dir.exists():
            logger.info(f"삭제할 출력 디렉토리 없음: {output_dir}")
            return

        shutil.rmtree(output_dir)
        logger.info(f"출력 디렉토리 삭제: {output_dir}")


def main(argv: Optional[list[str]] = None):
    """CLI 진입점"""
    parser = argparse.ArgumentParser(
        prog="sitepub",
        description="markdown 사이트를 빌드하고 배포 브랜치에 퍼블리시하는 도구",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
예시:
  sitepub build             # content/ -> public/ 렌더링
  sitepub build --drafts    # draft 포함 렌더링
  sitepub pull              # 배포 브랜치를 public/ 에 동기화
  sitepub publish           # 동기화 -> 빌드 -> 커밋 -> 푸시
  sitepub clean             # public/ 삭제
        """,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="상세 로그 출력",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    build_parser = subparsers.add_parser("build", help="사이트 렌더링")
    build_parser.add_argument("--drafts", action="store_true", help="draft 문서 포함")
    subparsers.add_parser("pull", help="배포 브랜치 동기화")
    publish_parser = subparsers.add_parser("publish", help="빌드 후 배포 브랜치에 푸시")
    publish_parser.add_argument("--drafts", action="store_true", help="draft 문서 포함")
    subparsers.add_parser("clean", help="출력 디렉토리 삭제")

    args = parser.parse_args(argv)

    # 상세 로그 모드
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = settings
    if getattr(args, "drafts", False):
        config = settings.model_copy(update={"build_drafts": True})

    publisher = SitePublisher(config)

    try:
        if args.command == "build":
            publisher.build()
        elif args.command == "pull":
            publisher.pull_published()
        elif args.command == "publish":
            publisher.publish()
        elif args.command == "clean":
            publisher.clean()
    except KeyboardInterrupt:
        logger.info("\n중단됨")
        sys.exit(130)
    except Exception as e:
        logger.error(f"오류: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
