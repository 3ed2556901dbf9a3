"""
GitHub 퍼블리셔 - 배포 브랜치 동기화, 커밋 및 푸시
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from ..errors import SyncConflict

logger = logging.getLogger(__name__)


def run_git(*args, cwd: Path, capture: bool = False, config: Optional[dict] = None) -> str:
    """Git 명령 실행 (실패 시 CalledProcessError)"""
    cmd = ["git"]
    for key, value in (config or {}).items():
        cmd += ["-c", f"{key}={value}"]
    cmd += list(args)
    logger.debug(f"실행: {' '.join(cmd)} (cwd={cwd})")

    result = subprocess.run(
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )

    if capture:
        return result.stdout
    return ""


def _git_message(error: subprocess.CalledProcessError) -> str:
    return (error.stderr or error.stdout or str(error)).strip()


class GitHubPublisher:
    """배포 브랜치 작업 사본(clone-and-reset) 관리"""

    def __init__(
        self,
        repo_path: Path,
        remote_url: str,
        remote: str = "origin",
        branch: str = "gh-pages",
        user_name: str = "",
        user_email: str = "",
    ):
        self.repo_path = Path(repo_path)
        self.remote_url = remote_url
        self.remote = remote
        self.branch = branch
        self.identity = {}
        if user_name:
            self.identity["user.name"] = user_name
        if user_email:
            self.identity["user.email"] = user_email

    @property
    def tracking_ref(self) -> str:
        return f"refs/remotes/{self.remote}/{self.branch}"

    def sync(self) -> Optional[str]:
        """원격 배포 브랜치를 받아와 작업 사본을 그 상태로 리셋

        Returns:
            동기화된 커밋 해시. 원격에 브랜치가 아직 없으면 None.
        """
        try:
            self._ensure_repo()

            if not self.remote_branch_exists():
                logger.warning(
                    f"원격에 {self.branch} 브랜치가 없습니다. 첫 배포 시 생성합니다."
                )
                # 이전 배포의 로컬 브랜치가 남아 있으면 그 위에 쌓이지 않도록 삭제
                if self._local_branch_exists():
                    self._run_git("update-ref", "-d", f"refs/heads/{self.branch}")
                self._run_git("symbolic-ref", "HEAD", f"refs/heads/{self.branch}")
                self._run_git("read-tree", "--empty")
                return None

            self._run_git(
                "fetch",
                self.remote,
                f"+refs/heads/{self.branch}:{self.tracking_ref}",
            )
            self._run_git("checkout", "-f", "-B", self.branch, self.tracking_ref)
            self._run_git("reset", "--hard", self.tracking_ref)
            self._run_git("clean", "-ffdx")

            tip = self.head()
            logger.info(f"배포 브랜치 동기화 완료: {self.branch} @ {tip[:8]}")
            return tip

        except subprocess.CalledProcessError as e:
            raise SyncConflict(f"배포 브랜치 동기화 실패: {_git_message(e)}") from e

    def commit(self, message: str) -> str:
        """작업 사본 전체를 스테이징하고 커밋 (변경이 없어도 커밋 생성)

        Returns:
            새 커밋 해시
        """
        try:
            # Git add
            self._run_git("add", "-A")

            if not self._has_changes():
                logger.info("변경사항 없음, 빈 커밋 생성")

            # Git commit
            self._run_git("commit", "--allow-empty", "-m", message)
        except subprocess.CalledProcessError as e:
            raise SyncConflict(f"커밋 실패: {_git_message(e)}") from e

        commit = self.head()
        logger.info(f"커밋 생성: {commit[:8]} {message}")
        return commit

    def push(self):
        """HEAD 를 원격 배포 브랜치로 푸시"""
        try:
            self._run_git("push", self.remote, f"HEAD:refs/heads/{self.branch}")
        except subprocess.CalledProcessError as e:
            raise SyncConflict(f"푸시 실패: {_git_message(e)}") from e

        logger.info(f"GitHub 푸시 완료: {self.remote}/{self.branch}")

    def head(self) -> Optional[str]:
        """현재 HEAD 커밋 해시 (커밋이 없으면 None)"""
        try:
            return self._run_git("rev-parse", "--verify", "HEAD", capture=True).strip()
        except subprocess.CalledProcessError:
            return None

    def remote_branch_exists(self) -> bool:
        # 전체 ref 로 조회 (feature/gh-pages 같은 접미사 일치 방지)
        result = self._run_git(
            "ls-remote", "--heads", self.remote, f"refs/heads/{self.branch}", capture=True
        )
        return bool(result.strip())

    def _local_branch_exists(self) -> bool:
        try:
            self._run_git("rev-parse", "--verify", "--quiet", f"refs/heads/{self.branch}")
        except subprocess.CalledProcessError:
            return False
        return True

    def _has_changes(self) -> bool:
        """스테이징된 변경사항 존재 여부 확인"""
        result = self._run_git("status", "--porcelain", capture=True)
        return bool(result.strip())

    def _ensure_repo(self):
        """작업 사본이 없으면 초기화하고 원격 주소를 맞춤"""
        self.repo_path.mkdir(parents=True, exist_ok=True)

        if not (self.repo_path / ".git").exists():
            self._run_git("init")
            logger.info(f"Git 저장소 초기화: {self.repo_path}")

        remotes = self._run_git("remote", capture=True).split()
        if self.remote in remotes:
            self._run_git("remote", "set-url", self.remote, self.remote_url)
        else:
            self._run_git("remote", "add", self.remote, self.remote_url)

    def _run_git(self, *args, capture: bool = False) -> str:
        return run_git(*args, cwd=self.repo_path, capture=capture, config=self.identity)
