from pathlib import Path

import pytest
from jinja2 import DictLoader, Environment

from pagesmith.exceptions import ConfigurationError, ResolutionError
from pagesmith.templating import build_resolution_chain


@pytest.fixture
def dirs(tmp_path: Path) -> tuple[Path, Path]:
    working = tmp_path / "build" / "templates"
    site = tmp_path / "templates"
    site.mkdir()
    return working, site


class TestBuildResolutionChain:
    def test_creates_missing_working_directory(self, dirs: tuple[Path, Path]) -> None:
        working, site = dirs
        assert not working.exists()

        _ = build_resolution_chain(working, site)

        assert working.is_dir()

    def test_fixed_source_order(self, dirs: tuple[Path, Path]) -> None:
        working, site = dirs
        extra = [DictLoader({}), DictLoader({})]

        chain = build_resolution_chain(working, site, extra)

        assert chain.origins == ("working", "site", "bundled", "plugin-0", "plugin-1")

    def test_missing_template_directory_is_fatal(self, tmp_path: Path) -> None:
        missing = tmp_path / "nope"

        with pytest.raises(ConfigurationError) as exc_info:
            _ = build_resolution_chain(tmp_path / "build", missing)

        assert exc_info.value.path == missing

    def test_template_directory_that_is_a_file_is_fatal(self, tmp_path: Path) -> None:
        not_a_dir = tmp_path / "templates"
        _ = not_a_dir.write_text("")

        with pytest.raises(ConfigurationError):
            _ = build_resolution_chain(tmp_path / "build", not_a_dir)

    def test_uncreatable_working_directory_is_fatal(self, tmp_path: Path) -> None:
        blocker = tmp_path / "build"
        _ = blocker.write_text("")
        site = tmp_path / "templates"
        site.mkdir()

        with pytest.raises(ConfigurationError) as exc_info:
            _ = build_resolution_chain(blocker / "templates", site)

        assert exc_info.value.path == blocker / "templates"


class TestResolve:
    def test_working_directory_shadows_site(self, dirs: tuple[Path, Path]) -> None:
        working, site = dirs
        working.mkdir(parents=True)
        _ = (working / "page.j2").write_text("from working")
        _ = (site / "page.j2").write_text("from site")

        resolved = build_resolution_chain(working, site).resolve("page.j2")

        assert resolved.source == "from working"
        assert resolved.origin == "working"

    def test_site_shadows_bundled(self, dirs: tuple[Path, Path]) -> None:
        working, site = dirs
        _ = (site / "sitemap.xml.j2").write_text("custom sitemap")

        resolved = build_resolution_chain(working, site).resolve("sitemap.xml.j2")

        assert resolved.source == "custom sitemap"
        assert resolved.origin == "site"

    def test_bundled_templates_are_a_fallback(self, dirs: tuple[Path, Path]) -> None:
        working, site = dirs

        resolved = build_resolution_chain(working, site).resolve("feed.xml.j2")

        assert resolved.origin == "bundled"
        assert "<feed" in resolved.source

    def test_bundled_shadows_plugins(self, dirs: tuple[Path, Path]) -> None:
        working, site = dirs
        plugin = DictLoader({"feed.xml.j2": "plugin feed"})

        resolved = build_resolution_chain(working, site, [plugin]).resolve(
            "feed.xml.j2"
        )

        assert resolved.origin == "bundled"

    def test_plugin_sources_in_registration_order(
        self, dirs: tuple[Path, Path]
    ) -> None:
        working, site = dirs
        first = DictLoader({"shared.j2": "first", "only-second.j2": "x"})
        second = DictLoader({"shared.j2": "second", "only-second.j2": "second"})
        chain = build_resolution_chain(working, site, [first, second])

        assert chain.resolve("shared.j2").source == "first"
        assert chain.resolve("shared.j2").origin == "plugin-0"

    def test_unknown_name_raises_resolution_error(
        self, dirs: tuple[Path, Path]
    ) -> None:
        working, site = dirs
        chain = build_resolution_chain(working, site)

        with pytest.raises(ResolutionError) as exc_info:
            _ = chain.resolve("missing.j2")

        assert exc_info.value.name == "missing.j2"
        assert isinstance(exc_info.value, LookupError)

    def test_leading_slash_resolves_like_relative_name(
        self, dirs: tuple[Path, Path]
    ) -> None:
        working, site = dirs
        _ = (site / "_post.j2").write_text("layout")

        resolved = build_resolution_chain(working, site).resolve("/_post.j2")

        assert resolved.source == "layout"


class TestAsJinjaLoader:
    def test_environment_loads_through_chain(self, dirs: tuple[Path, Path]) -> None:
        working, site = dirs
        _ = (site / "hello.j2").write_text("Hello {{ name }}")
        env = Environment(loader=build_resolution_chain(working, site))

        assert env.get_template("hello.j2").render(name="World") == "Hello World"

    def test_list_templates_spans_sources(self, dirs: tuple[Path, Path]) -> None:
        working, site = dirs
        _ = (site / "hello.j2").write_text("")
        plugin = DictLoader({"plugin.j2": ""})

        names = build_resolution_chain(working, site, [plugin]).list_templates()

        assert "hello.j2" in names
        assert "plugin.j2" in names
        assert "sitemap.xml.j2" in names
