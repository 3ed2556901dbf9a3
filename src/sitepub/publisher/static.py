"""
정적 사이트 생성기 - markdown 콘텐츠를 HTML 로 렌더링 (hugo 호환 출력 구조)
"""

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path, PurePosixPath
from typing import Optional

import markdown
from bs4 import BeautifulSoup
from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    TemplateError,
    select_autoescape,
)

from ..collectors.content import ContentCollector
from ..errors import RenderFailure
from ..models.content import ContentDocument, slugify
from ..models.site import SiteConfig

logger = logging.getLogger(__name__)

MORE_MARKER = "<!--more-->"
MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "toc", "footnotes"]
TAGS_SECTION = "tags"


@dataclass
class RenderedPage:
    """렌더링된 단일 페이지"""

    document: ContentDocument
    content: str  # HTML
    summary: str
    permalink: str

    @property
    def title(self) -> str:
        return self.document.title

    @property
    def date(self) -> Optional[datetime]:
        return self.document.date

    @property
    def tags(self) -> list[dict]:
        return [
            {"name": tag, "slug": slugify(tag)} for tag in self.document.tags
        ]


def _rfc822(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return format_datetime(value.replace(tzinfo=timezone.utc))


def _sort_pages(pages: list[RenderedPage]) -> list[RenderedPage]:
    """날짜 내림차순, 같은 날짜는 weight/제목 순"""
    by_title = sorted(pages, key=lambda p: (p.document.weight, p.title, p.permalink))
    return sorted(by_title, key=lambda p: p.date or datetime.min, reverse=True)


class StaticSiteGenerator:
    """Content Source 를 HTML/RSS/sitemap 으로 렌더링"""

    def __init__(
        self,
        content_dir: Path,
        static_dir: Optional[Path] = None,
        layouts_dir: Optional[Path] = None,
        build_drafts: bool = False,
        summary_length: int = 70,
    ):
        self.content_dir = Path(content_dir)
        self.static_dir = Path(static_dir) if static_dir else None
        self.build_drafts = build_drafts
        self.summary_length = summary_length
        self.stats: dict = {}

        # 템플릿 설정 (사이트의 layouts/ 가 기본 템플릿보다 우선)
        loaders = []
        if layouts_dir and Path(layouts_dir).is_dir():
            loaders.append(FileSystemLoader(layouts_dir))
        loaders.append(FileSystemLoader(Path(__file__).parent / "templates"))

        self.jinja_env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html.j2", "xml.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.jinja_env.filters["rfc822"] = _rfc822

    def generate(self, site: SiteConfig, output_dir: Path) -> Path:
        """output_dir 에 사이트 전체를 생성"""
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        documents = ContentCollector(self.content_dir).collect()
        visible = [doc for doc in documents if self.build_drafts or not doc.draft]

        sections = {doc.section_key: doc for doc in visible if doc.is_section_index}
        pages = [
            self._render_page(site, doc) for doc in visible if not doc.is_section_index
        ]
        # _index.md 만 있는 섹션도 목록 페이지를 가짐
        section_names = sorted(
            {p.document.section for p in pages if p.document.section}
            | {key for key in sections if key}
        )
        tagged = self._group_tags(pages)
        self._check_collisions(pages, self._reserved_paths(section_names, tagged))

        try:
            # 1. 단일 페이지
            for page in pages:
                self._write_template(
                    page.document.output_path,
                    "single.html.j2",
                    site=site,
                    page=page,
                )

            # 2. 섹션 목록 / 홈
            for section in section_names:
                members = [p for p in pages if p.document.section == section]
                self._render_list(site, section, sections.get(section), members)

            listed = _sort_pages([p for p in pages if p.document.section])
            self._render_list(site, "", sections.get(""), listed)

            # 3. 태그
            tag_count = self._render_tags(site, tagged)

            # 4. RSS / sitemap / 404
            self._write_template(
                PurePosixPath("index.xml"), "index.xml.j2", site=site, pages=listed
            )
            self._render_sitemap(site, pages, section_names, tag_count > 0)
            self._write_template(PurePosixPath("404.html"), "404.html.j2", site=site)
        except TemplateError as e:
            raise RenderFailure(f"템플릿 렌더링 실패: {e}") from e

        # 5. 정적 파일 및 번들 리소스 복사
        self._copy_static()
        self._copy_bundle_resources(pages)

        self.stats = {
            "pages": len(pages),
            "drafts_skipped": len(documents) - len(visible),
            "sections": len(section_names),
            "tags": tag_count,
        }
        logger.info(
            f"사이트 생성 완료: {self.output_dir} "
            f"(페이지 {self.stats['pages']}건, draft 제외 {self.stats['drafts_skipped']}건)"
        )
        return self.output_dir

    def _render_page(self, site: SiteConfig, doc: ContentDocument) -> RenderedPage:
        content = markdown.markdown(doc.body, extensions=MARKDOWN_EXTENSIONS)
        return RenderedPage(
            document=doc,
            content=content,
            summary=self._summarize(doc, content),
            permalink=site.abs_url(doc.url_path),
        )

    def _summarize(self, doc: ContentDocument, content: str) -> str:
        """<!--more--> 이전 본문 또는 앞부분 N 단어"""
        if doc.description:
            return doc.description

        if MORE_MARKER in doc.body:
            head = doc.body.split(MORE_MARKER, 1)[0]
            content = markdown.markdown(head, extensions=MARKDOWN_EXTENSIONS)
            return BeautifulSoup(content, "html.parser").get_text(" ", strip=True)

        words = BeautifulSoup(content, "html.parser").get_text(" ", strip=True).split()
        return " ".join(words[: self.summary_length])

    def _reserved_paths(
        self, section_names: list[str], tagged: dict[str, dict]
    ) -> dict[PurePosixPath, str]:
        """페이지가 아닌 생성물의 출력 경로 -> 설명"""
        reserved = {
            PurePosixPath("index.html"): "홈 목록",
            PurePosixPath("index.xml"): "RSS 피드",
            PurePosixPath("sitemap.xml"): "sitemap",
            PurePosixPath("404.html"): "404 페이지",
        }
        for section in section_names:
            reserved[PurePosixPath(section) / "index.html"] = f"{section} 섹션 목록"
        if tagged:
            reserved[PurePosixPath(TAGS_SECTION) / "index.html"] = "태그 목록"
            for slug in tagged:
                reserved[PurePosixPath(TAGS_SECTION) / slug / "index.html"] = f"태그 {slug}"
        return reserved

    def _check_collisions(
        self, pages: list[RenderedPage], reserved: dict[PurePosixPath, str]
    ):
        seen = dict(reserved)
        for page in pages:
            key = page.document.output_path
            if key in seen:
                raise RenderFailure(
                    f"URL 충돌: {seen[key]} 와 {page.document.rel_path} -> /{key}"
                )
            seen[key] = str(page.document.rel_path)

    def _render_list(
        self,
        site: SiteConfig,
        section: str,
        index: Optional[ContentDocument],
        members: list[RenderedPage],
    ):
        """섹션 목록 페이지 (section 이 "" 이면 홈)"""
        if index is not None:
            title = index.title
            content = markdown.markdown(index.body, extensions=MARKDOWN_EXTENSIONS)
        else:
            title = site.title if not section else section.split("/")[-1].title()
            content = ""

        path = PurePosixPath(section) / "index.html" if section else PurePosixPath("index.html")
        self._write_template(
            path,
            "list.html.j2",
            site=site,
            title=title,
            content=content,
            pages=_sort_pages(members),
            is_home=not section,
        )

    def _group_tags(self, pages: list[RenderedPage]) -> dict[str, dict]:
        """태그 슬러그 -> {name, pages}"""
        tagged: dict[str, dict] = {}
        for page in pages:
            for tag in page.tags:
                entry = tagged.setdefault(tag["slug"], {"name": tag["name"], "pages": []})
                entry["pages"].append(page)
        return tagged

    def _render_tags(self, site: SiteConfig, tagged: dict[str, dict]) -> int:
        if not tagged:
            return 0

        terms = []
        for slug in sorted(tagged):
            entry = tagged[slug]
            terms.append({"name": entry["name"], "slug": slug, "count": len(entry["pages"])})
            self._write_template(
                PurePosixPath(TAGS_SECTION) / slug / "index.html",
                "list.html.j2",
                site=site,
                title=entry["name"],
                content="",
                pages=_sort_pages(entry["pages"]),
                is_home=False,
            )

        self._write_template(
            PurePosixPath(TAGS_SECTION) / "index.html",
            "terms.html.j2",
            site=site,
            title="Tags",
            terms=terms,
        )
        return len(terms)

    def _render_sitemap(
        self,
        site: SiteConfig,
        pages: list[RenderedPage],
        section_names: list[str],
        has_tags: bool,
    ):
        entries = [{"loc": site.abs_url("/"), "lastmod": None}]
        entries += [{"loc": site.abs_url(f"/{s}/"), "lastmod": None} for s in section_names]
        if has_tags:
            entries.append({"loc": site.abs_url(f"/{TAGS_SECTION}/"), "lastmod": None})
        entries += [
            {"loc": page.permalink, "lastmod": page.document.date_str or None}
            for page in sorted(pages, key=lambda p: p.permalink)
        ]
        self._write_template(
            PurePosixPath("sitemap.xml"), "sitemap.xml.j2", site=site, entries=entries
        )

    def _copy_static(self):
        if self.static_dir and self.static_dir.is_dir():
            shutil.copytree(self.static_dir, self.output_dir, dirs_exist_ok=True)
            logger.debug(f"정적 파일 복사: {self.static_dir}")

    def _copy_bundle_resources(self, pages: list[RenderedPage]):
        """페이지 번들의 이미지 등 리소스를 페이지 옆에 복사"""
        for page in pages:
            if not page.document.is_bundle:
                continue
            source_dir = self.content_dir / page.document.rel_path.parent
            target_dir = self.output_dir / page.document.output_path.parent
            for resource in sorted(source_dir.iterdir()):
                if resource.is_file() and resource.suffix != ".md":
                    shutil.copy2(resource, target_dir / resource.name)

    def _write_template(self, rel_path: PurePosixPath, template_name: str, **context):
        template = self.jinja_env.get_template(template_name)
        context.setdefault("menu", context["site"].menu)
        html_content = template.render(**context)

        path = self.output_dir / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(html_content)
        logger.debug(f"생성: {path}")
