"""
렌더러(builtin/hugo) 및 테마 테스트
"""

import subprocess

import pytest

import sys
sys.path.insert(0, "src")

from sitepub.errors import RenderFailure
from sitepub.models.site import load_site_config
from sitepub.publisher import hugo as hugo_module
from sitepub.publisher import theme as theme_module
from sitepub.publisher.hugo import HugoGenerator
from sitepub.publisher.static import StaticSiteGenerator
from sitepub.publisher.theme import ThemeManager

from conftest import snapshot


@pytest.fixture
def render(site_root, tmp_path):
    """builtin 렌더러로 예제 사이트 생성"""

    def _render(**options):
        generator = StaticSiteGenerator(
            content_dir=site_root / "content",
            static_dir=site_root / "static",
            layouts_dir=site_root / "layouts",
            **options,
        )
        output = tmp_path / "out"
        generator.generate(load_site_config(site_root / "config.toml"), output)
        return output, generator

    return _render


class TestStaticSiteGenerator:
    """builtin 렌더러 테스트"""

    def test_draft_excluded(self, render):
        """draft 문서는 출력되지 않음"""
        output, generator = render()
        assert (output / "posts/hello/index.html").is_file()
        assert not (output / "posts/secret").exists()
        assert "Secret Draft" not in (output / "index.xml").read_text()
        assert generator.stats["drafts_skipped"] == 1

    def test_build_drafts_option(self, render):
        output, _ = render(build_drafts=True)
        assert (output / "posts/secret/index.html").is_file()

    def test_output_layout(self, render):
        output, _ = render()
        for rel_path in [
            "index.html",
            "404.html",
            "index.xml",
            "sitemap.xml",
            "about/index.html",
            "posts/index.html",
            "posts/applicative/index.html",
            "tags/index.html",
            "tags/scala/index.html",
            "tags/types/index.html",
        ]:
            assert (output / rel_path).is_file(), rel_path

    def test_tags_are_merged_by_slug(self, render):
        """"scala" 와 "Scala" 는 같은 태그"""
        output, generator = render()
        scala = (output / "tags/scala/index.html").read_text()
        assert "Hello World" in scala
        assert "Applicative Boilerplate" in scala
        assert generator.stats["tags"] == 2

    def test_home_lists_newest_first(self, render):
        output, _ = render()
        home = (output / "index.html").read_text()
        assert "Welcome." in home
        assert home.index("Applicative Boilerplate") < home.index("Hello World")

    def test_summary_uses_more_marker(self, render):
        output, _ = render()
        listing = (output / "posts/index.html").read_text()
        assert "First paragraph." in listing
        assert "Rest of the post." not in listing

    def test_markdown_rendered(self, render):
        output, _ = render()
        page = (output / "posts/applicative/index.html").read_text()
        assert "<code" in page
        assert "val x = 1" in page

    def test_permalinks_use_base_url(self, render):
        output, _ = render()
        sitemap = (output / "sitemap.xml").read_text()
        assert "<loc>https://example.org/posts/hello/</loc>" in sitemap
        assert "<lastmod>2020-01-02</lastmod>" in sitemap

    def test_static_and_bundle_resources_copied(self, render):
        output, _ = render()
        assert (output / "css/site.css").read_text() == "body { margin: 0; }\n"
        assert (output / "posts/applicative/diagram.png").read_bytes() == b"\x89PNG fake"

    def test_deterministic_output(self, render):
        """같은 입력이면 바이트 단위로 같은 결과"""
        first, _ = render()
        before = snapshot(first)
        second, _ = render()
        assert snapshot(second) == before

    def test_layouts_override(self, site_root, render):
        """사이트 layouts/ 템플릿이 기본 템플릿보다 우선"""
        (site_root / "layouts").mkdir()
        (site_root / "layouts/404.html.j2").write_text("custom {{ site.title }}\n")
        output, _ = render()
        assert (output / "404.html").read_text() == "custom Test Blog\n"

    def test_section_with_only_index(self, site_root, render):
        """_index.md 만 있는 섹션도 목록 페이지가 생성됨"""
        (site_root / "content/projects").mkdir()
        (site_root / "content/projects/_index.md").write_text(
            "---\ntitle: Projects\n---\nThings I built.\n"
        )
        output, _ = render()
        page = (output / "projects/index.html").read_text()
        assert "Things I built." in page
        assert "<loc>https://example.org/projects/</loc>" in (output / "sitemap.xml").read_text()

    def test_page_colliding_with_section_list(self, site_root, render):
        """최상위 posts.md 는 섹션 목록 /posts/ 와 충돌"""
        (site_root / "content/posts.md").write_text("---\ntitle: Posts Page\n---\n")
        with pytest.raises(RenderFailure, match="posts/index.html"):
            render()

    def test_page_colliding_with_tag_list(self, site_root, render):
        (site_root / "content/tags.md").write_text("---\ntitle: Tag Cloud\n---\n")
        with pytest.raises(RenderFailure, match="tags/index.html"):
            render()

    def test_url_collision(self, site_root, render):
        (site_root / "content/posts/other.md").write_text("---\nslug: hello\n---\n")
        with pytest.raises(RenderFailure, match="URL"):
            render()


class TestHugoGenerator:
    """hugo 실행 테스트"""

    @pytest.fixture
    def site(self, site_root):
        return load_site_config(site_root / "config.toml")

    def test_command(self, tmp_path):
        generator = HugoGenerator(tmp_path, build_drafts=True)
        assert generator.command(tmp_path / "public") == [
            "hugo",
            "--source",
            str(tmp_path),
            "--destination",
            str(tmp_path / "public"),
            "--buildDrafts",
        ]

    def test_generate_runs_hugo(self, monkeypatch, tmp_path, site):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, stdout="Total in 10 ms\n", stderr="")

        monkeypatch.setattr(hugo_module.subprocess, "run", fake_run)
        result = HugoGenerator(tmp_path).generate(site, tmp_path / "public")
        assert result == tmp_path / "public"
        assert calls[0][0] == "hugo"
        assert "--buildDrafts" not in calls[0]

    def test_hugo_error_propagates(self, monkeypatch, tmp_path, site):
        """hugo 오류 메시지가 그대로 전달됨"""

        def fake_run(cmd, **kwargs):
            raise subprocess.CalledProcessError(
                255, cmd, output="", stderr="Error: failed to parse front matter\n"
            )

        monkeypatch.setattr(hugo_module.subprocess, "run", fake_run)
        with pytest.raises(RenderFailure, match="failed to parse front matter"):
            HugoGenerator(tmp_path).generate(site, tmp_path / "public")

    def test_missing_hugo_binary(self, tmp_path, site):
        generator = HugoGenerator(tmp_path, hugo_bin="hugo-does-not-exist-xyz")
        with pytest.raises(RenderFailure, match="hugo-does-not-exist-xyz"):
            generator.generate(site, tmp_path / "public")


class TestThemeManager:
    """테마 확인/가져오기 테스트"""

    def test_no_theme(self, tmp_path):
        assert ThemeManager(tmp_path).ensure([]) == []

    def test_present_theme_skips_git(self, monkeypatch, tmp_path):
        """이미 있는 테마는 git 호출 없음"""
        (tmp_path / "themes/hyde").mkdir(parents=True)
        (tmp_path / "themes/hyde/theme.toml").write_text("")

        def fail(*args, **kwargs):
            raise AssertionError("git 이 호출되면 안 됨")

        monkeypatch.setattr(theme_module, "run_git", fail)
        assert ThemeManager(tmp_path).ensure(["hyde"]) == [tmp_path / "themes/hyde"]

    def test_missing_theme_without_submodules(self, tmp_path):
        with pytest.raises(RenderFailure, match="hyde"):
            ThemeManager(tmp_path).ensure(["hyde"])

    def test_every_listed_theme_is_checked(self, tmp_path):
        """theme = ["a", "b"] 형태는 모든 테마를 확인"""
        (tmp_path / "themes/hyde").mkdir(parents=True)
        (tmp_path / "themes/hyde/theme.toml").write_text("")
        with pytest.raises(RenderFailure, match="shortcodes"):
            ThemeManager(tmp_path).ensure(["hyde", "shortcodes"])

    def test_missing_theme_fetched_by_submodule(self, monkeypatch, tmp_path):
        (tmp_path / ".gitmodules").write_text('[submodule "themes/hyde"]\n')
        calls = []

        def fake_run_git(*args, cwd, **kwargs):
            calls.append(args)
            if args[:2] == ("submodule", "update"):
                (cwd / "themes/hyde").mkdir(parents=True)
                (cwd / "themes/hyde/theme.toml").write_text("")
            return ""

        monkeypatch.setattr(theme_module, "run_git", fake_run_git)
        assert ThemeManager(tmp_path).ensure(["hyde"]) == [tmp_path / "themes/hyde"]
        assert calls == [("submodule", "init"), ("submodule", "update")]

    def test_submodule_failure(self, monkeypatch, tmp_path):
        (tmp_path / ".gitmodules").write_text("")

        def fake_run_git(*args, cwd, **kwargs):
            raise subprocess.CalledProcessError(1, ["git", *args], stderr="fatal: no remote\n")

        monkeypatch.setattr(theme_module, "run_git", fake_run_git)
        with pytest.raises(RenderFailure, match="no remote"):
            ThemeManager(tmp_path).ensure(["hyde"])
