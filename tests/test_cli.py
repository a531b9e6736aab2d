"""Tests for folder_dedup.cli module."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import read_tree
from folder_dedup.cli import main, parse_args, validate_args
from folder_dedup.models import DigestAlgorithm, FilesystemError, StatsSnapshot


class TestParseArgs:
    """Tests for parse_args function."""

    def test_parse_directories(self):
        with patch.object(sys, "argv", ["prog", "dest", "src1", "src2"]):
            args = parse_args()

        assert args.directories == [Path("dest"), Path("src1"), Path("src2")]

    def test_defaults(self):
        args = parse_args(["dest"])

        assert args.keep is False
        assert args.merge is False
        assert args.recursive is False
        assert args.verbose is False
        assert args.dryrun is False
        assert args.progress is False
        assert args.hash == "xxh64"
        assert args.workers >= 1

    def test_short_flags(self):
        args = parse_args(["-k", "-m", "-r", "-v", "-d", "-w", "3", "dest", "src"])

        assert args.keep is True
        assert args.merge is True
        assert args.recursive is True
        assert args.verbose is True
        assert args.dryrun is True
        assert args.workers == 3

    def test_dry_run_alias(self):
        assert parse_args(["--dry-run", "dest"]).dryrun is True
        assert parse_args(["--dryrun", "dest"]).dryrun is True

    def test_hash_option(self):
        assert parse_args(["--hash", "sha256", "dest"]).hash == "sha256"

    def test_directory_required(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args([])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--version"])
        assert exc_info.value.code == 0
        assert "folder-dedup" in capsys.readouterr().out


class TestValidateArgs:
    """Tests for validate_args function."""

    def test_valid(self, sample_folders):
        dest, source = sample_folders
        options = validate_args(parse_args(["--hash", "md5", "-m", str(dest), str(source)]))

        assert options.merge is True
        assert options.algorithm is DigestAlgorithm.MD5

    def test_missing_directory(self, temp_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            validate_args(parse_args([str(temp_dir / "nonexistent")]))
        assert exc_info.value.code == 1
        assert "Error: Cannot access directory" in capsys.readouterr().out

    def test_not_a_directory(self, temp_dir, capsys):
        file_path = temp_dir / "file.txt"
        file_path.write_text("content")

        with pytest.raises(SystemExit) as exc_info:
            validate_args(parse_args([str(temp_dir), str(file_path)]))
        assert exc_info.value.code == 1
        assert "Must be directory" in capsys.readouterr().out

    def test_unknown_hash(self, temp_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            validate_args(parse_args(["--hash", "crc32", str(temp_dir)]))
        assert exc_info.value.code == 1
        assert "Unknown hashing algorithm" in capsys.readouterr().out

    def test_zero_workers(self, temp_dir):
        with pytest.raises(SystemExit) as exc_info:
            validate_args(parse_args(["-w", "0", str(temp_dir)]))
        assert exc_info.value.code == 1


class TestMain:
    """Tests for main function."""

    def test_main_merges(self, sample_folders, capsys):
        dest, source = sample_folders

        main(["--merge", str(dest), str(source)])

        assert (dest / "unique.txt").exists()
        assert not (source / "copy.txt").exists()
        output = capsys.readouterr().out
        assert "Done (hashed 5, moved 2, deleted 1)" in output

    def test_main_verbose(self, sample_folders, capsys):
        dest, source = sample_folders

        main(["-v", "-m", "-w", "1", str(dest), str(source)])

        output = capsys.readouterr().out
        assert f"Destination: {dest}" in output
        assert "dupe-of" in output
        assert "Moving:" in output

    def test_main_dry_run(self, sample_folders, capsys):
        dest, source = sample_folders

        main(["-d", "-m", str(dest), str(source)])

        assert (source / "copy.txt").exists()
        assert not (dest / "unique.txt").exists()
        assert "[DRYRUN] Done" in capsys.readouterr().out

    def test_main_relative_paths(self, sample_folders, monkeypatch):
        dest, source = sample_folders
        monkeypatch.chdir(dest.parent)

        main(["-m", "dest/", "source"])

        assert (dest / "unique.txt").exists()

    def test_main_same_directory_twice(self, temp_dir, monkeypatch):
        target = temp_dir / "d"
        target.mkdir()
        (target / "only.txt").write_text("only")
        (target / "other.txt").write_text("other")
        monkeypatch.chdir(temp_dir)

        main(["--merge", "d", "d/../d"])

        assert read_tree(target) == {"only.txt": b"only", "other.txt": b"other"}

    def test_main_filesystem_error(self, sample_folders, capsys):
        dest, source = sample_folders
        error = FilesystemError("remove", source / "copy.txt", PermissionError("denied"))
        error.stats = StatsSnapshot(hashed=3)

        with patch("folder_dedup.cli.dedup_folders", side_effect=error):
            with pytest.raises(SystemExit) as exc_info:
                main([str(dest), str(source)])

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert f"Error: denied [remove: {source / 'copy.txt'}] (hashed 3)" in err

    def test_main_interrupted(self, sample_folders, capsys):
        dest, _ = sample_folders

        with patch("folder_dedup.cli.dedup_folders", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main([str(dest)])

        assert exc_info.value.code == 1
        assert "Interrupted!" in capsys.readouterr().err
