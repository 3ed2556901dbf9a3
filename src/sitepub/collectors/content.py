"""
Content Source 수집기 - markdown + front-matter 파싱
"""

import re
import tomllib
from datetime import date, datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Optional

import frontmatter
import yaml
from frontmatter.default_handlers import BaseHandler, YAMLHandler

from .base import BaseCollector
from ..errors import RenderFailure
from ..models.content import ContentDocument

# ContentDocument 필드로 매핑되는 front-matter 키
KNOWN_KEYS = {"title", "date", "tags", "draft", "slug", "description", "weight"}


def _require_mapping(meta) -> dict:
    if meta is None:
        return {}
    if not isinstance(meta, dict):
        raise ValueError("front-matter 는 키-값 매핑이어야 합니다")
    return meta


class MappingYAMLHandler(YAMLHandler):
    """--- 펜스 YAML front-matter (키-값 매핑만 허용)"""

    def load(self, fm: str, **kwargs) -> dict:
        return _require_mapping(super().load(fm, **kwargs))


class TomllibHandler(BaseHandler):
    """+++ 펜스 TOML front-matter"""

    FM_BOUNDARY = re.compile(r"^\+{3,}\s*$", re.MULTILINE)
    START_DELIMITER = END_DELIMITER = "+++"

    def load(self, fm: str, **kwargs) -> dict:
        return tomllib.loads(fm)


HANDLERS = [MappingYAMLHandler(), TomllibHandler()]


def _detect_handler(text: str) -> Optional[BaseHandler]:
    """첫 줄의 펜스로 handler 선택"""
    first_line = text.split("\n", 1)[0]
    for handler in HANDLERS:
        if handler.FM_BOUNDARY.match(first_line):
            return handler
    return None


def split_front_matter(text: str) -> tuple[dict, str]:
    """front-matter 와 본문 분리

    YAML(---) 과 TOML(+++) 펜스를 지원한다. 펜스가 없으면 전체가 본문.
    """
    text = text.lstrip("\ufeff")
    handler = _detect_handler(text)
    if handler is None:
        return {}, text

    # 종료 펜스가 없으면 python-frontmatter 는 전체를 본문으로 돌려주므로 먼저 확인
    if len(handler.FM_BOUNDARY.findall(text)) < 2:
        raise ValueError(f"front-matter 종료 구분자({handler.START_DELIMITER})가 없습니다")

    post = frontmatter.loads(text, handler=handler)
    return dict(post.metadata), post.content


def parse_date(value) -> Optional[datetime]:
    """front-matter 날짜 값 정규화 (naive UTC)"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        raw = str(value).strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        parsed = datetime.fromisoformat(raw)

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def parse_tags(value) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(tag).strip() for tag in value if str(tag).strip()]


def build_document(rel_path: PurePosixPath, meta: dict, body: str) -> ContentDocument:
    """front-matter 딕셔너리로 ContentDocument 생성"""
    title = meta.get("title")
    if not title:
        stem = rel_path.parent.name if rel_path.name in ("index.md", "_index.md") else rel_path.stem
        title = stem.replace("-", " ").replace("_", " ").title()

    return ContentDocument(
        rel_path=rel_path,
        body=body,
        title=str(title),
        date=parse_date(meta.get("date")),
        tags=parse_tags(meta.get("tags")),
        draft=parse_bool(meta.get("draft", False)),
        slug=str(meta["slug"]) if meta.get("slug") else None,
        description=str(meta.get("description") or ""),
        weight=int(meta.get("weight") or 0),
        params={k: v for k, v in meta.items() if k not in KNOWN_KEYS},
    )


class ContentCollector(BaseCollector):
    """content 디렉토리에서 markdown 문서 수집"""

    source_name = "content"

    def __init__(self, content_dir: Path):
        self.content_dir = Path(content_dir)

    def collect(self) -> list[ContentDocument]:
        """모든 .md 문서를 파싱 (경로순 정렬)"""
        if not self.content_dir.is_dir():
            raise RenderFailure(f"콘텐츠 디렉토리가 없습니다: {self.content_dir}")

        documents = []
        for path in sorted(self.content_dir.rglob("*.md")):
            rel_path = PurePosixPath(path.relative_to(self.content_dir).as_posix())
            documents.append(self._parse_file(path, rel_path))

        if not documents:
            self._log_warning(f"수집된 문서가 없습니다: {self.content_dir}")

        drafts = sum(1 for doc in documents if doc.draft)
        self._log_info(f"{len(documents)}건 수집 (draft {drafts}건)")
        return documents

    def _parse_file(self, path: Path, rel_path: PurePosixPath) -> ContentDocument:
        try:
            text = path.read_text(encoding="utf-8")
            meta, body = split_front_matter(text)
            document = build_document(rel_path, meta, body)
        except (ValueError, TypeError, yaml.YAMLError) as e:
            raise RenderFailure(f"{rel_path}: front-matter 파싱 실패: {e}") from e

        self._log_debug(f"파싱: {document}")
        return document
