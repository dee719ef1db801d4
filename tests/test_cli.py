"""Tests for the command line interface."""

import pytest

from wikistore.cli import build_parser, main
from wikistore.config import AppConfig
from wikistore.store import PageTable


@pytest.fixture
def config(temp_db_url) -> AppConfig:
    return AppConfig(
        database_url=temp_db_url,
        home_page_name="home-page",
        listing_cache_minutes=30,
        log_level="WARNING",
    )


@pytest.fixture
def wiki(config):
    """Run a CLI command against the test database."""

    def run(*argv: str) -> int:
        return main(list(argv), config=config)

    return run


def page_id(output: str) -> int:
    # "Created page 1: team-notes"
    return int(output.split("page ", 1)[1].split(":", 1)[0])


class TestParser:
    def test_command_is_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_save_needs_content(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["save", "notes"])

    def test_save_arguments(self) -> None:
        args = build_parser().parse_args(
            ["save", "notes", "--content", "hi", "--id", "3"]
        )
        assert args.command == "save"
        assert args.id == 3
        assert args.content == "hi"


class TestCommands:
    def test_save_and_show(self, wiki, capsys) -> None:
        assert wiki("save", "Team Notes", "--content", "hello") == 0
        assert "Created page" in capsys.readouterr().out

        assert wiki("show", "TEAM-NOTES") == 0
        out = capsys.readouterr().out
        assert out.startswith("Team Notes\n")
        assert "hello" in out

    def test_show_missing_page(self, wiki, capsys) -> None:
        assert wiki("show", "nowhere") == 1
        assert "No page named nowhere" in capsys.readouterr().err

    def test_list(self, wiki, capsys) -> None:
        wiki("save", "Beta", "--content", "b")
        wiki("save", "Alpha", "--content", "a")
        capsys.readouterr()

        assert wiki("list") == 0
        lines = capsys.readouterr().out.splitlines()
        assert [line.split("\t")[1] for line in lines] == ["alpha", "beta"]

    def test_save_from_file(self, wiki, capsys, tmp_path) -> None:
        source = tmp_path / "page.md"
        source.write_text("# From a file\n", encoding="utf-8")

        assert wiki("save", "Imported", "--content-file", str(source)) == 0
        capsys.readouterr()
        wiki("show", "imported")
        assert "# From a file" in capsys.readouterr().out

    def test_update_by_id(self, wiki, capsys) -> None:
        wiki("save", "Notes", "--content", "v1")
        created = page_id(capsys.readouterr().out)

        assert wiki("save", "Notes", "--content", "v2", "--id", str(created)) == 0
        out = capsys.readouterr().out
        assert out.startswith(f"Saved page {created}:")

    def test_validation_errors(self, wiki, capsys) -> None:
        assert wiki("save", "Notes", "--content", "  ") == 1
        assert "Content: Content is required" in capsys.readouterr().err

    def test_home_page_rename_is_rejected(self, wiki, capsys) -> None:
        wiki("save", "home-page", "--content", "welcome")
        home = page_id(capsys.readouterr().out)

        code = wiki("save", "Home-Page", "--content", "x", "--id", str(home))

        assert code == 1
        assert "cannot modify home page name" in capsys.readouterr().err

    def test_duplicate_name_is_reported(self, wiki, capsys) -> None:
        wiki("save", "Notes", "--content", "one")
        assert wiki("save", "NOTES", "--content", "two") == 1
        assert "Failed (conflict)" in capsys.readouterr().err

    def test_new_page_from_title(self, wiki, capsys) -> None:
        assert wiki("new", "Weekly Sync") == 0
        assert wiki("new", "Weekly Sync") == 0
        out = capsys.readouterr().out
        assert out.count("Page ready: weekly-sync") == 2

    def test_delete_page(self, wiki, capsys) -> None:
        wiki("save", "Scratch", "--content", "x")
        scratch = page_id(capsys.readouterr().out)

        assert wiki("delete-page", str(scratch)) == 0
        assert wiki("show", "scratch") == 1

    def test_home_page_is_protected(self, wiki, capsys) -> None:
        wiki("save", "home-page", "--content", "welcome")
        home = page_id(capsys.readouterr().out)

        assert wiki("delete-page", str(home)) == 1
        assert "Failed (home_page_protected)" in capsys.readouterr().err

    def test_attachment_lifecycle(self, wiki, capsys, tmp_path) -> None:
        image = tmp_path / "chart.png"
        image.write_bytes(b"\x89PNG chart")
        wiki("save", "Charts", "--content", "see file", "--attach", str(image))
        charts = page_id(capsys.readouterr().out)

        wiki("show", "charts")
        listing = capsys.readouterr().out.splitlines()[-1]
        assert listing.endswith("chart.png (image/png, image)")
        file_id = listing[1 : listing.index("]")]

        exported = tmp_path / "exported.png"
        assert wiki("get-file", file_id, "-o", str(exported)) == 0
        assert exported.read_bytes() == b"\x89PNG chart"

        assert wiki("delete-attachment", str(charts), file_id) == 0
        assert wiki("get-file", file_id, "-o", str(exported)) == 1
        assert wiki("delete-attachment", str(charts), file_id) == 1
        assert "Failed (not_found)" in capsys.readouterr().err

    def test_partial_attachment_delete_is_explained(
        self, wiki, capsys, tmp_path, monkeypatch
    ) -> None:
        notes = tmp_path / "notes.txt"
        notes.write_text("plain", encoding="utf-8")
        wiki("save", "Docs", "--content", "x", "--attach", str(notes))
        docs = page_id(capsys.readouterr().out)
        wiki("show", "docs")
        listing = capsys.readouterr().out.splitlines()[-1]
        assert listing.endswith("notes.txt (text/plain, file)")
        file_id = listing[1 : listing.index("]")]

        monkeypatch.setattr(PageTable, "update", lambda self, page: False)

        assert wiki("delete-attachment", str(docs), file_id) == 1
        err = capsys.readouterr().err
        assert "Failed (partial)" in err
        assert "page may still list it" in err

    def test_database_option_overrides_config(self, config, tmp_path, capsys):
        other = f"sqlite:///{tmp_path / 'other.db'}"

        assert main(["--database", other, "new", "Elsewhere"], config=config) == 0
        assert main(["show", "elsewhere"], config=config) == 1
        assert main(["--database", other, "show", "elsewhere"], config=config) == 0
