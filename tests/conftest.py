"""
공통 테스트 픽스처 - 예제 사이트와 로컬 git 원격 저장소
"""

import shutil
import subprocess
import sys
from pathlib import Path

import pytest

sys.path.insert(0, "src")

from sitepub.config import Settings

CONFIG_TOML = """\
baseURL = "https://example.org/"
title = "Test Blog"
languageCode = "en-us"

[[menu.main]]
name = "Posts"
url = "/posts/"
weight = 2

[[menu.main]]
name = "About"
url = "/about/"
weight = 1
"""

DOCUMENTS = {
    "_index.md": "---\ntitle: Home\n---\nWelcome.\n",
    "about.md": "---\ntitle: About\n---\nAbout me.\n",
    "posts/_index.md": "---\ntitle: Posts\n---\n",
    "posts/hello.md": (
        "---\n"
        "title: Hello World\n"
        "date: 2020-01-02\n"
        "tags: [scala, types]\n"
        "---\n"
        "First paragraph.\n\n<!--more-->\n\nRest of the post.\n"
    ),
    "posts/secret.md": (
        "---\n"
        "title: Secret Draft\n"
        "date: 2020-03-01\n"
        "draft: true\n"
        "---\n"
        "Not ready.\n"
    ),
    "posts/applicative/index.md": (
        "+++\n"
        'title = "Applicative Boilerplate"\n'
        "date = 2021-05-06T10:00:00Z\n"
        'tags = ["Scala"]\n'
        "+++\n"
        "```scala\nval x = 1\n```\n"
    ),
}

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git 필요")


def git(*args, cwd: Path) -> str:
    """테스트용 git 실행"""
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


@pytest.fixture
def site_root(tmp_path) -> Path:
    """config.toml + content/ + static/ 로 구성된 예제 사이트"""
    root = tmp_path / "site"
    content = root / "content"
    for rel_path, text in DOCUMENTS.items():
        path = content / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    (content / "posts/applicative/diagram.png").write_bytes(b"\x89PNG fake")
    (root / "static/css").mkdir(parents=True)
    (root / "static/css/site.css").write_text("body { margin: 0; }\n")
    (root / "config.toml").write_text(CONFIG_TOML, encoding="utf-8")
    return root


@pytest.fixture
def git_env(monkeypatch, tmp_path):
    """사용자 git 설정과 분리된 환경"""
    global_config = tmp_path / "gitconfig"
    global_config.write_text("")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for role in ("AUTHOR", "COMMITTER"):
        monkeypatch.setenv(f"GIT_{role}_NAME", "Test Author")
        monkeypatch.setenv(f"GIT_{role}_EMAIL", "author@example.org")


@pytest.fixture
def remote_repo(tmp_path, git_env) -> Path:
    """배포용 bare 저장소"""
    path = tmp_path / "remote.git"
    subprocess.run(["git", "init", "--bare", str(path)], capture_output=True, check=True)
    return path


@pytest.fixture
def make_settings(site_root):
    """예제 사이트 기준 Settings 생성"""

    def _make(**overrides) -> Settings:
        values = {
            "site_root": site_root,
            "generator": "builtin",
            "publish_branch": "gh-pages",
            "git_user_name": "Site Publisher",
            "git_user_email": "publisher@example.org",
        }
        values.update(overrides)
        return Settings(**values)

    return _make


def snapshot(directory: Path) -> dict:
    """.git 을 제외한 디렉토리 내용 (상대 경로 -> bytes)"""
    return {
        path.relative_to(directory).as_posix(): path.read_bytes()
        for path in sorted(directory.rglob("*"))
        if path.is_file() and ".git" not in path.relative_to(directory).parts
    }
