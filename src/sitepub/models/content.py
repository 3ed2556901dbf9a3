"""
콘텐츠(페이지/포스트) 데이터 모델
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePosixPath
from typing import Optional

SECTION_INDEX = "_index.md"
BUNDLE_INDEX = "index.md"


def slugify(text: str) -> str:
    """URL용 슬러그 생성"""
    text = text.strip().lower()
    text = re.sub(r"[^\w]+", "-", text, flags=re.UNICODE)
    return text.strip("-_").replace("_", "-") or "untitled"


@dataclass
class ContentDocument:
    """front-matter + 본문으로 구성된 콘텐츠 문서"""

    rel_path: PurePosixPath  # content 디렉토리 기준 경로
    body: str
    title: str = ""
    date: Optional[datetime] = None
    tags: list[str] = field(default_factory=list)
    draft: bool = False
    slug: Optional[str] = None
    description: str = ""
    weight: int = 0
    params: dict = field(default_factory=dict)  # 그 외 front-matter 키

    @property
    def is_section_index(self) -> bool:
        """_index.md (섹션/홈 메타데이터)"""
        return self.rel_path.name == SECTION_INDEX

    @property
    def is_bundle(self) -> bool:
        """<dir>/index.md 형태의 페이지 번들"""
        return self.rel_path.name == BUNDLE_INDEX

    @property
    def section(self) -> str:
        """소속 섹션 ("" 는 최상위)"""
        parts = self.rel_path.parent.parts
        if self.is_bundle:
            parts = parts[:-1]
        return "/".join(parts)

    @property
    def section_key(self) -> str:
        """_index.md 가 설명하는 섹션 ("" 는 홈)"""
        return "/".join(self.rel_path.parent.parts)

    @property
    def url_path(self) -> str:
        """pretty URL 경로 (예: /posts/hello/)"""
        if self.is_section_index:
            return f"/{self.section_key}/" if self.section_key else "/"

        if self.slug:
            name = slugify(self.slug)
        elif self.is_bundle:
            name = self.rel_path.parent.name
        else:
            name = self.rel_path.stem

        prefix = f"/{self.section}" if self.section else ""
        return f"{prefix}/{name}/"

    @property
    def output_path(self) -> PurePosixPath:
        """출력 디렉토리 기준 HTML 파일 경로"""
        return PurePosixPath(self.url_path.strip("/")) / "index.html"

    @property
    def date_str(self) -> str:
        return self.date.strftime("%Y-%m-%d") if self.date else ""

    def __str__(self) -> str:
        flag = " [draft]" if self.draft else ""
        return f"{self.rel_path} - {self.title}{flag}"
