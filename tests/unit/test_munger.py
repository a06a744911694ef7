"""Unit tests for the per-file munge pipeline."""

from __future__ import annotations

import pytest

from ourpkgversion.core.errors import FileError, InvalidVersionError
from ourpkgversion.core.model import (
    SKIP_DOC_ONLY,
    SKIP_NO_SENTINEL,
    DistFile,
    FileRole,
    ModeFlags,
    Munged,
    Skipped,
)
from ourpkgversion.core.munger import atomic_write_text, munge_file, munge_files, process, read_text


def _munge(text: str, **flags) -> Munged:
    outcome = process(text, FileRole.MODULE, ModeFlags(**{"version": "0.01", **flags}))
    assert isinstance(outcome, Munged)
    return outcome


class TestProcessInsert:
    """Sentinels become ``our $VERSION`` assignments."""

    def test_basic_insert(self):
        outcome = _munge("package Foo;\n# VERSION\n1;\n")

        assert outcome.new_text == "package Foo;\nour $VERSION = '0.01'; # VERSION\n1;\n"
        assert outcome.mutation_count == 1

    def test_double_hash_and_indent(self):
        outcome = _munge("{\n    ## VERSION\n}\n")

        assert outcome.new_text == "{\n    our $VERSION = '0.01'; ## VERSION\n}\n"

    def test_comment_text_is_kept(self):
        outcome = _munge("# VERSION: from dist.ini\n")

        assert outcome.new_text == "our $VERSION = '0.01'; # VERSION: from dist.ini\n"

    def test_every_sentinel_is_rewritten(self):
        outcome = _munge("package A;\n# VERSION\npackage B;\n# VERSION\n")

        assert outcome.new_text == (
            "package A;\nour $VERSION = '0.01'; # VERSION\n"
            "package B;\nour $VERSION = '0.01'; # VERSION\n"
        )
        assert outcome.mutation_count == 2

    def test_inline_sentinel(self):
        outcome = _munge("my $x = 1; # VERSION\n")

        assert outcome.new_text == "my $x = 1; our $VERSION = '0.01'; # VERSION\n"

    def test_trial(self):
        outcome = _munge("# VERSION\n", is_trial=True)

        assert outcome.new_text == "our $VERSION = '0.01'; # TRIAL VERSION\n"

    def test_no_trailing_newline(self):
        outcome = _munge("1;\n# VERSION")

        assert outcome.new_text == "1;\nour $VERSION = '0.01'; # VERSION"

    def test_crlf_preserved(self):
        outcome = _munge("package Foo;\r\n# VERSION\r\n1;\r\n")

        assert outcome.new_text == "package Foo;\r\nour $VERSION = '0.01'; # VERSION\r\n1;\r\n"

    def test_sentinel_after_filetest(self):
        outcome = _munge("my $size = -s $file;\n# VERSION\nmy $x = $y;\n1;\n")

        assert outcome.new_text == "my $size = -s $file;\nour $VERSION = '0.01'; # VERSION\nmy $x = $y;\n1;\n"

    def test_sentinel_inside_sub_named_like_quote_operator(self):
        outcome = _munge("sub y {\n    # VERSION\n}\n")

        assert outcome.new_text == "sub y {\n    our $VERSION = '0.01'; # VERSION\n}\n"

    def test_line_count_unchanged(self):
        text = "package Foo;\n# VERSION\nsub f { 1 } # VERSION\n1;\n"

        assert _munge(text).new_text.count("\n") == text.count("\n")

    def test_rest_of_file_is_untouched(self):
        text = 'package Foo;\nmy $s = "# VERSION";\n# VERSION\n=pod\n\n# VERSION\n\n=cut\n__END__\n# VERSION\n'
        expected = text.replace("\n# VERSION\n=pod", "\nour $VERSION = '0.01'; # VERSION\n=pod", 1)

        assert _munge(text).new_text == expected


class TestProcessOverwrite:
    """Overwrite mode replaces the value of an existing assignment."""

    def test_overwrite_existing_value(self):
        outcome = _munge("our $VERSION = '0.01'; # VERSION\n", version="0.02", overwrite=True)

        assert outcome.new_text == "our $VERSION = '0.02'; # VERSION\n"
        assert outcome.mutation_count == 2

    def test_overwrite_any_value_literal(self):
        outcome = _munge('our $VERSION = "0.01"; # VERSION\n', version="0.02", overwrite=True)

        assert outcome.new_text == "our $VERSION = '0.02'; # VERSION\n"

    def test_without_overwrite_a_second_assignment_is_added(self):
        outcome = _munge("our $VERSION = '0.01'; # VERSION\n", version="0.02")

        assert outcome.new_text == "our $VERSION = '0.01'; our $VERSION = '0.02'; # VERSION\n"
        assert outcome.mutation_count == 1

    def test_overwrite_trial(self):
        outcome = _munge("our $VERSION = '0.01'; # VERSION\n", version="0.02", overwrite=True, is_trial=True)

        assert outcome.new_text == "our $VERSION = '0.02'; # TRIAL VERSION\n"

    def test_overwrite_on_whole_line_sentinel_inserts(self):
        outcome = _munge("# VERSION\n", version="0.02", overwrite=True)

        assert outcome.new_text == "our $VERSION = '0.02'; # VERSION\n"
        assert outcome.mutation_count == 1


class TestUnderscoreEval:
    """Developer versions get ``$VERSION = eval $VERSION;``."""

    def test_whole_line(self):
        outcome = _munge("# VERSION\n", version="1.00_01", underscore_eval_version=True)

        assert outcome.new_text == "our $VERSION = '1.00_01'; $VERSION = eval $VERSION; # VERSION\n"

    def test_inline_overwrite(self):
        outcome = _munge(
            "our $VERSION = '1.00'; # VERSION\n",
            version="1.00_01",
            overwrite=True,
            underscore_eval_version=True,
        )

        assert outcome.new_text == "our $VERSION = '1.00_01'; # VERSION\n$VERSION = eval $VERSION;\n"

    def test_inline_insert(self):
        """An inline sentinel gets the eval on the following line."""
        outcome = _munge("my $x = 1; # VERSION\n", version="1.00_01", underscore_eval_version=True)

        assert outcome.new_text == "my $x = 1; our $VERSION = '1.00_01'; # VERSION\n$VERSION = eval $VERSION;\n"
        assert outcome.mutation_count == 1

    def test_disabled(self):
        outcome = _munge("# VERSION\n", version="1.00_01")

        assert outcome.new_text == "our $VERSION = '1.00_01'; # VERSION\n"


class TestProcessSkip:
    def test_doc_only(self):
        outcome = process("# VERSION\n", FileRole.DOC_ONLY, ModeFlags("0.01"))

        assert outcome == Skipped(reason=SKIP_DOC_ONLY)
        assert outcome.munged is False

    def test_no_sentinel(self):
        assert process("package Foo;\n1;\n", FileRole.MODULE, ModeFlags("0.01")) == Skipped(reason=SKIP_NO_SENTINEL)

    def test_sentinel_only_in_pod(self):
        text = "package Foo;\n=pod\n\n# VERSION\n\n=cut\n"

        assert process(text, FileRole.MODULE, ModeFlags("0.01")) == Skipped(reason=SKIP_NO_SENTINEL)

    def test_executable_is_munged(self):
        outcome = process("#!/usr/bin/perl\n# VERSION\n", FileRole.EXECUTABLE, ModeFlags("0.01"))

        assert outcome.munged is True

    def test_invalid_version_raises(self):
        with pytest.raises(InvalidVersionError):
            process("# VERSION\n", FileRole.MODULE, ModeFlags("1.0-TRIAL"))

    def test_invalid_version_checked_for_doc_only(self):
        with pytest.raises(InvalidVersionError):
            process("", FileRole.DOC_ONLY, ModeFlags("bogus"))

    def test_idempotent_after_rewrite(self):
        first = _munge("# VERSION\n", version="0.02", overwrite=True)
        second = _munge(first.new_text, version="0.02", overwrite=True)

        assert second.new_text == first.new_text


class TestMungeFile:
    """File-level wrapper: read, write, report."""

    def test_writes_file(self, tmp_path, flags, reporter):
        path = tmp_path / "Foo.pm"
        path.write_text("package Foo;\n# VERSION\n1;\n", encoding="utf-8")
        dist_file = DistFile(path=path, name="lib/Foo.pm", role=FileRole.MODULE)

        outcome = munge_file(dist_file, flags, reporter)

        assert outcome.munged is True
        assert path.read_text(encoding="utf-8") == "package Foo;\nour $VERSION = '0.01'; # VERSION\n1;\n"
        assert reporter.munges == [("lib/Foo.pm", 1)]
        assert reporter.skips == []
        assert not (tmp_path / "Foo.pm.tmp").exists()

    def test_dry_run_leaves_file(self, tmp_path, flags, reporter):
        path = tmp_path / "Foo.pm"
        path.write_text("# VERSION\n", encoding="utf-8")

        outcome = munge_file(DistFile(path, "Foo.pm", FileRole.MODULE), flags, reporter, dry_run=True)

        assert outcome.munged is True
        assert path.read_text(encoding="utf-8") == "# VERSION\n"
        assert reporter.munges == [("Foo.pm", 1)]

    def test_skip_leaves_file(self, tmp_path, flags, reporter):
        path = tmp_path / "Plain.pm"
        path.write_text("1;\n", encoding="utf-8")
        mtime = path.stat().st_mtime_ns

        munge_file(DistFile(path, "Plain.pm", FileRole.MODULE), flags, reporter)

        assert path.stat().st_mtime_ns == mtime
        assert reporter.skips == [("Plain.pm", SKIP_NO_SENTINEL)]

    def test_doc_only_is_not_read(self, tmp_path, flags, reporter):
        missing = tmp_path / "Missing.pod"

        outcome = munge_file(DistFile(missing, "Missing.pod", FileRole.DOC_ONLY), flags, reporter)

        assert outcome == Skipped(reason=SKIP_DOC_ONLY)
        assert reporter.skips == [("Missing.pod", SKIP_DOC_ONLY)]

    def test_missing_file_raises_file_error(self, tmp_path, flags):
        with pytest.raises(FileError, match="Cannot read"):
            munge_file(DistFile(tmp_path / "nope.pm", "nope.pm", FileRole.MODULE), flags)

    def test_crlf_file_round_trip(self, tmp_path, flags):
        path = tmp_path / "Win.pm"
        path.write_bytes(b"package Win;\r\n# VERSION\r\n1;\r\n")

        munge_file(DistFile(path, "Win.pm", FileRole.MODULE), flags)

        assert path.read_bytes() == b"package Win;\r\nour $VERSION = '0.01'; # VERSION\r\n1;\r\n"

    def test_preserves_mode(self, tmp_path, flags):
        path = tmp_path / "tool"
        path.write_text("#!/usr/bin/perl\n# VERSION\n", encoding="utf-8")
        path.chmod(0o755)

        munge_file(DistFile(path, "bin/tool", FileRole.EXECUTABLE), flags)

        assert path.stat().st_mode & 0o777 == 0o755


class TestMungeFiles:
    def test_outcomes_in_order(self, sample_dist, flags, reporter):
        files = [
            DistFile(sample_dist / "lib/My/Plain.pm", "lib/My/Plain.pm", FileRole.MODULE),
            DistFile(sample_dist / "lib/My/Module.pm", "lib/My/Module.pm", FileRole.MODULE),
        ]

        results = munge_files(files, flags, reporter)

        assert [(f.name, o.munged) for f, o in results] == [
            ("lib/My/Plain.pm", False),
            ("lib/My/Module.pm", True),
        ]

    def test_invalid_version_before_any_file(self, tmp_path, reporter):
        path = tmp_path / "Foo.pm"
        path.write_text("# VERSION\n", encoding="utf-8")

        with pytest.raises(InvalidVersionError):
            munge_files([DistFile(path, "Foo.pm", FileRole.MODULE)], ModeFlags("x.y"), reporter)

        assert path.read_text(encoding="utf-8") == "# VERSION\n"
        assert reporter.skips == [] and reporter.munges == []


class TestAtomicIO:
    def test_write_then_read(self, tmp_path):
        path = tmp_path / "out.pm"

        atomic_write_text(path, "a\r\nb\n")

        assert read_text(path) == "a\r\nb\n"
