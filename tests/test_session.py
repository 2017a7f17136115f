"""Tests for the two-phase insertion protocol."""

import pytest

from embedgen.config import Settings
from embedgen.errors import ProtocolError
from embedgen.ledger import Ledger, Phase
from embedgen.session import read_targets, resolve_phase, run_invocation, splice_pending

ORIGINAL = [f"line {n}" for n in range(1, 11)]


@pytest.fixture
def inputs(tmp_path):
    a = tmp_path / "a.bin"
    a.write_bytes(b"A")
    b = tmp_path / "b.bin"
    b.write_bytes(bytes(range(0x40, 0x4d)))  # 13 bytes, wraps onto two lines
    return a, b


def _ledger(tmp_path):
    return Ledger(tmp_path / "embedgen.lines")


class TestResolvePhase:
    def test_input_means_encoding(self):
        assert resolve_phase("a.bin", "host.go", 5) is Phase.ENCODING

    def test_input_without_targets_still_encodes(self):
        assert resolve_phase("a.bin", None, None) is Phase.ENCODING

    def test_targets_without_input_finalize(self):
        assert resolve_phase(None, "host.go", 8) is Phase.FINALIZING

    def test_line_zero_is_a_target(self):
        assert resolve_phase(None, "host.go", 0) is Phase.FINALIZING

    @pytest.mark.parametrize("target_file,target_line", [(None, None), ("host.go", None), (None, 3)])
    def test_nothing_is_noop(self, target_file, target_line):
        assert resolve_phase(None, target_file, target_line) is None


class TestReadTargets:
    def test_reads_default_variables(self):
        assert read_targets(Settings(), {"GOFILE": "x.go", "GOLINE": "12"}) == ("x.go", 12)

    def test_custom_variables(self):
        settings = Settings(file_env="TARGET_FILE", line_env="TARGET_LINE")
        env = {"TARGET_FILE": "x.c", "TARGET_LINE": "3", "GOLINE": "99"}
        assert read_targets(settings, env) == ("x.c", 3)

    def test_missing_variables(self):
        assert read_targets(Settings(), {}) == (None, None)

    def test_bad_line(self):
        with pytest.raises(ProtocolError, match="not a line number"):
            read_targets(Settings(), {"GOFILE": "x.go", "GOLINE": "twelve"})


class TestRunInvocation:
    def test_noop_leaves_no_state(self, tmp_path, settings):
        result = run_invocation(None, None, None, settings, base=tmp_path)
        assert result.phase is None
        assert list(tmp_path.iterdir()) == []

    def test_encode_without_target_records_nothing(self, tmp_path, settings, inputs):
        result = run_invocation(inputs[0], None, None, settings, base=tmp_path)
        assert result.fragment.is_file()
        assert result.entry is None
        assert not _ledger(tmp_path).exists()

    def test_encode_records_entry(self, tmp_path, host, settings, inputs):
        result = run_invocation(inputs[0], "host.go", 5, settings, base=tmp_path)
        assert result.phase is Phase.ENCODING
        assert result.fragment == tmp_path / "embedgen-0.code"
        assert _ledger(tmp_path).path.read_text() == "5 embedgen-0.code\n"
        assert _ledger(tmp_path).state() is Phase.AWAITING_MORE

    def test_full_cycle_keeps_directive_lines(self, tmp_path, host, settings, inputs):
        run_invocation(inputs[0], "host.go", 5, settings, base=tmp_path)
        result = run_invocation(None, "host.go", 8, settings, base=tmp_path)

        assert result.phase is Phase.FINALIZING
        assert result.spliced == host
        assert result.plans == 1
        assert host.read_text().splitlines() == ORIGINAL[:5] + [
            "var a_bin = []byte{", "\t0x41,", "}",
        ] + ORIGINAL[7:]
        assert not _ledger(tmp_path).exists()
        assert not (tmp_path / "embedgen-0.code").exists()

    def test_full_cycle_replacing_from_recorded_line(self, tmp_path, host, inputs):
        settings = Settings(formatter=[], keep_directive=False)
        run_invocation(inputs[0], "host.go", 5, settings, base=tmp_path)
        run_invocation(None, "host.go", 8, settings, base=tmp_path)

        assert host.read_text().splitlines() == ORIGINAL[:4] + [
            "var a_bin = []byte{", "\t0x41,", "}",
        ] + ORIGINAL[7:]

    def test_two_fragments_in_one_cycle(self, tmp_path, host, settings, inputs):
        run_invocation(inputs[0], "host.go", 2, settings, base=tmp_path)
        run_invocation(inputs[1], "host.go", 6, settings, base=tmp_path)
        result = run_invocation(None, "host.go", 9, settings, base=tmp_path)

        assert result.plans == 2
        lines = host.read_text().splitlines()
        assert lines[:2] == ORIGINAL[:2]
        assert lines[2] == "var a_bin = []byte{"
        assert lines[5] == "line 6"
        assert lines[6] == "var b_bin = []byte{"
        assert lines[-2:] == ["line 9", "line 10"]

    def test_resplice_replaces_previous_fragment(self, tmp_path, host, inputs):
        settings = Settings(formatter=[], keep_directive=False)
        run_invocation(inputs[0], "host.go", 5, settings, base=tmp_path)
        run_invocation(None, "host.go", 8, settings, base=tmp_path)
        # fragment A now occupies lines 5-7; the terminating line is still 8
        run_invocation(inputs[1], "host.go", 5, settings, base=tmp_path)
        run_invocation(None, "host.go", 8, settings, base=tmp_path)

        lines = host.read_text().splitlines()
        assert "var a_bin = []byte{" not in lines
        assert "\t0x41," not in lines
        assert lines[4] == "var b_bin = []byte{"
        assert lines[:4] == ORIGINAL[:4]
        assert lines[-3:] == ORIGINAL[7:]
        assert len(lines) == 4 + 4 + 3


    def test_deferred_splice(self, tmp_path, host, inputs):
        settings = Settings(formatter=[], defer_splice=True)
        run_invocation(inputs[0], "host.go", 5, settings, base=tmp_path)
        result = run_invocation(None, "host.go", 8, settings, base=tmp_path)

        assert result.spliced is None
        assert host.read_text().splitlines() == ORIGINAL
        ledger = _ledger(tmp_path)
        assert ledger.state() is Phase.FINALIZING

        assert splice_pending(host, ledger, settings) == 1
        assert "var a_bin = []byte{" in host.read_text()
        assert not ledger.exists()

    def test_failed_splice_keeps_ledger(self, tmp_path, host, settings, inputs):
        run_invocation(inputs[0], "host.go", 5, settings, base=tmp_path)
        (tmp_path / "embedgen-0.code").unlink()

        with pytest.raises(ProtocolError, match="missing fragment"):
            run_invocation(None, "host.go", 8, settings, base=tmp_path)

        assert host.read_text().splitlines() == ORIGINAL
        assert _ledger(tmp_path).exists()


class TestSplicePending:
    def test_no_ledger(self, tmp_path, host, settings):
        with pytest.raises(ProtocolError, match="no pending ledger"):
            splice_pending(host, _ledger(tmp_path), settings)

    def test_unterminated_ledger(self, tmp_path, host, settings):
        ledger = _ledger(tmp_path)
        ledger.append(5, "x.code")
        with pytest.raises(ProtocolError, match="sentinel"):
            splice_pending(host, ledger, settings)
        assert host.read_text().splitlines() == ORIGINAL

    def test_sentinel_only_leaves_host_unchanged(self, tmp_path, host, settings):
        original = host.read_bytes()
        ledger = _ledger(tmp_path)
        ledger.append_sentinel(3)
        assert splice_pending(host, ledger, settings) == 0
        assert host.read_bytes() == original


class TestDirectiveHost:
    """Hosts carrying the build directives that drive each invocation."""

    A_DIRECTIVE = "//go:generate embedgen generate a.bin"
    B_DIRECTIVE = "//go:generate embedgen generate b.bin"
    END_DIRECTIVE = "//go:generate embedgen generate"

    def _cycle(self, tmp_path, settings, steps):
        for input_path, line in steps:
            run_invocation(input_path, "host.go", line, settings, base=tmp_path)

    def test_second_cycle_replaces_first(self, tmp_path, settings, inputs):
        host = tmp_path / "host.go"
        host.write_text(f"package x\n{self.A_DIRECTIVE}\n{self.END_DIRECTIVE}\n")

        self._cycle(tmp_path, settings, [(inputs[0], 2), (None, 3)])
        assert host.read_text().splitlines() == [
            "package x", self.A_DIRECTIVE,
            "var a_bin = []byte{", "\t0x41,", "}",
            self.END_DIRECTIVE,
        ]

        # the closing directive moved to line 6
        self._cycle(tmp_path, settings, [(inputs[1], 2), (None, 6)])
        lines = host.read_text().splitlines()
        assert lines[:2] == ["package x", self.A_DIRECTIVE]
        assert lines[2] == "var b_bin = []byte{"
        assert lines[-1] == self.END_DIRECTIVE
        assert "var a_bin = []byte{" not in lines
        assert len(lines) == 2 + 4 + 1

    def test_repeated_cycles_are_stable(self, tmp_path, settings, inputs):
        host = tmp_path / "host.go"
        host.write_text(
            f"package x\n{self.A_DIRECTIVE}\n{self.B_DIRECTIVE}\n{self.END_DIRECTIVE}\n"
        )

        self._cycle(tmp_path, settings, [(inputs[0], 2), (inputs[1], 3), (None, 4)])
        first = host.read_text()
        lines = first.splitlines()
        assert lines[1] == self.A_DIRECTIVE
        assert lines[5] == self.B_DIRECTIVE
        assert lines[10] == self.END_DIRECTIVE

        self._cycle(tmp_path, settings, [(inputs[0], 2), (inputs[1], 6), (None, 11)])
        assert host.read_text() == first
