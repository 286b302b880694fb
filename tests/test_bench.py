# tests/test_bench.py
"""
Tests for the comparison harness: configuration, records, timing,
precision classification, the soundness audit and the CLI.
"""

import json
import logging
import random
from argparse import Namespace

import pytest

from tnum_domain import (
    ContractViolation,
    MulAlgorithm,
    RecordError,
    RecordFormatError,
    RecordMismatchError,
    Tnum,
)
from tnumbench.compare import (
    Precision,
    audit_cases,
    audit_pair,
    classify,
    compare_cases,
    random_pairs,
)
from tnumbench.config import BenchConfig
from tnumbench.main import EXIT_INFRA, EXIT_OK, main, parse_tnum
from tnumbench.records import (
    MethodResult,
    TestCase,
    load_cases,
    merge_reference,
    save_cases,
)
from tnumbench.runner import generate_cases, run_case, time_method, tnum_pair_from_raw


def _case(a, b, **outputs):
    return TestCase(a, b, [MethodResult(m, out, 10.0) for m, out in outputs.items()])


# ── Configuration ────────────────────────────────────────────────

class TestBenchConfig:

    def test_defaults_are_valid(self):
        config = BenchConfig()
        assert config.validate() == []
        assert config.algorithms() == list(MulAlgorithm)

    def test_validate_reports_every_problem(self):
        problems = BenchConfig(cases=0, iterations=-1, methods=["nope"]).validate()
        assert len(problems) == 3
        assert any("nope" in p for p in problems)

    def test_algorithms_registry_order_without_duplicates(self):
        config = BenchConfig(methods=["tnum_mul_rec", "NAIVE", "tnum_mul"])
        assert config.algorithms() == [MulAlgorithm.NAIVE, MulAlgorithm.HALVING]

    def test_from_namespace(self):
        args = Namespace(cases=5, iterations=None, seed=3, method=["tnum_mul"])
        config = BenchConfig.from_namespace(args)
        assert config.cases == 5
        assert config.iterations == 1000
        assert config.seed == 3
        assert config.methods == ["tnum_mul"]


# ── Records ──────────────────────────────────────────────────────

class TestRecords:

    def test_save_load(self, tmp_path):
        cases = [
            TestCase(Tnum(4, 3), Tnum.const(7), [MethodResult("tnum_mul", Tnum(0, 63), 812.5)], 17, 42),
            _case(Tnum.const(1), Tnum.const(2), tnum_mul=Tnum.const(2)),
        ]
        path = save_cases(tmp_path / "out" / "results.json", cases)
        assert path.exists()
        loaded = load_cases(path)
        assert loaded == cases
        raw = json.loads(path.read_text())
        assert raw[0]["raw_input_a"] == 17
        assert "raw_input_a" not in raw[1]
        assert raw[0]["results"][0] == {
            "method": "tnum_mul",
            "output": {"value": 0, "mask": 63},
            "avg_time_ns": 812.5,
        }

    def test_correct_flag_round_trip(self, tmp_path):
        cases = [TestCase(Tnum.const(2), Tnum.const(3), [
            MethodResult("tnum_mul", Tnum.const(6), 1.0, True),
            MethodResult("tnum_mul_rec", Tnum.const(0), 1.0, False),
        ])]
        path = save_cases(tmp_path / "results.json", cases)
        raw = json.loads(path.read_text())
        assert [r["correct"] for r in raw[0]["results"]] == [True, False]
        assert load_cases(path) == cases

    def test_correct_flag_must_be_boolean(self):
        with pytest.raises(RecordFormatError):
            MethodResult.from_dict({"method": "m", "output": {"value": 0, "mask": 0}, "correct": "yes"})

    def test_load_rejects_bad_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("[{")
        with pytest.raises(RecordFormatError):
            load_cases(path)

    @pytest.mark.parametrize("payload", [
        {"input_a": {}},
        [{"input_a": {"value": 0, "mask": 0}}],
        [{"input_a": {"value": 0, "mask": 0}, "input_b": {"value": 0, "mask": 0}, "results": {}}],
        [{"input_a": {"value": 0, "mask": 0}, "input_b": {"value": 0, "mask": 0},
          "results": [{"method": 1, "output": {"value": 0, "mask": 0}}]}],
        ["not a case"],
    ])
    def test_load_rejects_bad_structure(self, tmp_path, payload):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(payload))
        with pytest.raises(RecordFormatError):
            load_cases(path)

    def test_merge_appends_external_results(self):
        ours = [_case(Tnum(4, 3), Tnum.const(7), tnum_mul=Tnum(0, 63))]
        theirs = [_case(Tnum(4, 3), Tnum.const(7), tnum_mul=Tnum.const(0), C_tnum_mul=Tnum(0, 63))]
        merged = merge_reference(ours, theirs)
        assert [r.method for r in merged[0].results] == ["tnum_mul", "C_tnum_mul"]
        # local result wins
        assert merged[0].result_for("tnum_mul").output == Tnum(0, 63)
        assert len(ours[0].results) == 1

    def test_merge_rejects_count_mismatch(self):
        with pytest.raises(RecordMismatchError):
            merge_reference([_case(Tnum.const(1), Tnum.const(1))], [])

    def test_merge_rejects_input_mismatch(self):
        with pytest.raises(RecordMismatchError) as info:
            merge_reference(
                [_case(Tnum.const(1), Tnum.const(1))],
                [_case(Tnum.const(1), Tnum.const(2))],
            )
        assert "case 1" in str(info.value)


# ── Runner ───────────────────────────────────────────────────────

class TestRunner:

    def test_pair_from_raw(self):
        a, b = tnum_pair_from_raw(0b1100, 0b1010)
        assert a == Tnum(0b1100, 0b0010)
        assert b == Tnum(0b1010, 0b0100)

    def test_pair_from_raw_is_always_well_formed(self, rng):
        for _ in range(100):
            a, b = tnum_pair_from_raw(rng.getrandbits(64), rng.getrandbits(64))
            assert not a.value & a.mask
            assert not b.value & b.mask

    def test_time_method_uses_clock(self):
        ticks = iter(range(0, 1000, 5))
        result = time_method(MulAlgorithm.NAIVE, Tnum.const(3), Tnum.const(4), 4, clock=lambda: next(ticks))
        assert result.method == "tnum_mul"
        assert result.output == Tnum.const(12)
        assert result.avg_time_ns == 5.0

    @pytest.mark.parametrize("iterations", [0, -3])
    def test_time_method_rejects_no_iterations(self, iterations):
        with pytest.raises(ContractViolation):
            time_method(MulAlgorithm.NAIVE, Tnum.const(3), Tnum.const(4), iterations)

    def test_run_case_marks_results_against_first_method(self):
        algorithms = [MulAlgorithm.NAIVE, MulAlgorithm.OPT, MulAlgorithm.HALVING]
        results = run_case(algorithms, Tnum.const(2), Tnum(0, 1), 1)
        assert [r.correct for r in results] == [True, True, False]

    def test_generate_is_seeded(self):
        config = BenchConfig(cases=3, iterations=1, seed=11, methods=["tnum_mul", "xtnum_mul_top"])
        first = generate_cases(config)
        second = generate_cases(config)
        assert len(first) == 3
        assert [(c.input_a, c.input_b) for c in first] == [(c.input_a, c.input_b) for c in second]
        for case in first:
            assert [r.method for r in case.results] == ["tnum_mul", "xtnum_mul_top"]
            assert (case.input_a, case.input_b) == tnum_pair_from_raw(case.raw_input_a, case.raw_input_b)


# ── Precision ────────────────────────────────────────────────────

class TestClassify:

    @pytest.mark.parametrize("output,reference,expected", [
        (Tnum(0, 3), Tnum(0, 3), Precision.EQUAL),
        (Tnum(0, 3), Tnum.const(1), Precision.LESS_PRECISE),
        (Tnum.const(1), Tnum(0, 3), Precision.MORE_PRECISE),
        (Tnum.const(1), Tnum.const(2), Precision.INCOMPARABLE),
        (Tnum(0, 1), Tnum(0, 2), Precision.INCOMPARABLE),
    ])
    def test_classify(self, output, reference, expected):
        assert classify(output, reference) is expected

    def test_compare_cases(self):
        cases = [
            _case(Tnum.const(1), Tnum(0, 3), tnum_mul=Tnum(0, 3), tnum_mul_opt=Tnum(0, 3)),
            _case(Tnum.const(1), Tnum.const(1), tnum_mul=Tnum.const(1), tnum_mul_opt=Tnum(0, 1)),
            _case(Tnum.const(2), Tnum.const(2), tnum_mul_opt=Tnum.const(4)),
        ]
        report = compare_cases(cases, "tnum_mul")
        assert report.skipped == 1
        assert [s.method for s in report.stats] == ["tnum_mul", "tnum_mul_opt"]

        opt = report.stats_for("tnum_mul_opt")
        assert opt.counts[Precision.EQUAL] == 1
        assert opt.counts[Precision.LESS_PRECISE] == 1
        assert opt.percent(Precision.LESS_PRECISE) == 50.0
        assert opt.avg_time == 10.0
        assert report.stats_for("tnum_mul").percent(Precision.EQUAL) == 100.0

        assert len(report.inconsistencies) == 1
        item = report.inconsistencies[0].to_dict()
        assert item["case_number"] == 2
        assert item["method"] == "tnum_mul_opt"
        assert item["precision"] == "less precise"

    def test_compare_against_external_reference(self):
        cases = [_case(Tnum.const(1), Tnum.const(1), tnum_mul=Tnum.const(1), C_tnum_mul=Tnum.const(1))]
        report = compare_cases(cases, "C_tnum_mul")
        assert report.stats[0].method == "C_tnum_mul"
        assert not report.inconsistencies

    def test_reference_missing_from_every_case(self):
        cases = [_case(Tnum.const(1), Tnum.const(1), tnum_mul=Tnum.const(1))]
        with pytest.raises(RecordError) as info:
            compare_cases(cases, "tnum_mull")
        assert "tnum_mull" in str(info.value)
        assert "methods present: tnum_mul" in str(info.value)

    def test_unsound_reference_warns(self, caplog):
        cases = [_case(Tnum.const(1), Tnum.const(1), tnum_mul_rec=Tnum.const(1))]
        with caplog.at_level(logging.WARNING, logger="tnumbench"):
            compare_cases(cases, "tnum_mul_rec")
        assert "not sound" in caplog.text


# ── Audit ────────────────────────────────────────────────────────

class TestAudit:

    def test_halving_counterexample(self):
        violation = audit_pair(MulAlgorithm.HALVING, Tnum.const(2), Tnum(0, 1), 4, random.Random(0))
        assert violation is not None
        assert violation.method == "tnum_mul_rec"
        assert violation.output == Tnum.const(0)
        assert not violation.output.contains_value(violation.product)

    def test_sound_algorithms_pass(self):
        pairs = random_pairs(15, seed=5)
        findings = audit_cases(MulAlgorithm.sound_members(), pairs, samples=8, seed=5)
        assert set(findings) == set(MulAlgorithm.idents()) - {"tnum_mul_rec"}
        assert all(not v for v in findings.values())

    def test_random_pairs_seeded(self):
        assert random_pairs(4, seed=9) == random_pairs(4, seed=9)


# ── CLI ──────────────────────────────────────────────────────────

class TestCli:

    def test_parse_tnum(self):
        assert parse_tnum("1x0") == Tnum(4, 2)
        assert parse_tnum("0x10:0x3") == Tnum(16, 3)
        assert parse_tnum("16:3") == Tnum(16, 3)

    def test_methods(self, capsys):
        assert main(["methods"]) == EXIT_OK
        out = capsys.readouterr().out
        for ident in MulAlgorithm.idents():
            assert ident in out
        assert "experimental" in out

    def test_show(self, capsys):
        assert main(["show", "1xx", "111"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "xtnum_mul_high_top" in out
        assert "tnum_mul_rec (unsound)" in out

    def test_show_bad_pattern(self):
        with pytest.raises(SystemExit) as info:
            main(["show", "12", "1"])
        assert info.value.code == 2

    def test_generate_then_compare(self, tmp_path, capsys):
        results = tmp_path / "results.json"
        inconsistencies = tmp_path / "inc.json"
        assert main(["generate", "-n", "4", "-i", "1", "--seed", "2", "-o", str(results)]) == EXIT_OK
        assert len(load_cases(results)) == 4

        assert main(["compare", str(results), "--inconsistencies", str(inconsistencies)]) == EXIT_OK
        out = capsys.readouterr().out
        assert "Analysed 4 case(s)" in out
        assert "tnum_mul *" in out
        if inconsistencies.exists():
            assert isinstance(json.loads(inconsistencies.read_text()), list)

    def test_compare_with_reference_file(self, tmp_path, capsys):
        ours = tmp_path / "ours.json"
        theirs = tmp_path / "theirs.json"
        save_cases(ours, [_case(Tnum.const(3), Tnum.const(5), tnum_mul=Tnum.const(15))])
        save_cases(theirs, [_case(Tnum.const(3), Tnum.const(5), C_tnum_mul=Tnum.const(15))])
        code = main([
            "compare", str(ours), "--reference-file", str(theirs), "--reference", "C_tnum_mul",
            "--inconsistencies", str(tmp_path / "inc.json"),
        ])
        assert code == EXIT_OK
        assert "All methods agree with C_tnum_mul" in capsys.readouterr().out
        assert not (tmp_path / "inc.json").exists()

    def test_compare_unknown_reference_fails(self, tmp_path, capsys):
        results = tmp_path / "results.json"
        assert main(["generate", "-n", "5", "-i", "1", "--seed", "4", "-o", str(results)]) == EXIT_OK
        code = main(["compare", str(results), "--reference", "tnum_mull",
                     "--inconsistencies", str(tmp_path / "inc.json")])
        assert code == EXIT_INFRA
        assert "All methods agree" not in capsys.readouterr().out

    def test_generate_unknown_method(self, tmp_path):
        assert main(["generate", "-n", "1", "-m", "nope", "-o", str(tmp_path / "r.json")]) == EXIT_INFRA

    def test_compare_missing_file(self, tmp_path):
        assert main(["compare", str(tmp_path / "missing.json")]) == EXIT_INFRA

    def test_compare_malformed_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{}")
        assert main(["compare", str(path)]) == EXIT_INFRA

    def test_audit_sound_method(self, capsys):
        assert main(["audit", "-n", "5", "--samples", "4", "--seed", "3", "-m", "tnum_mul"]) == EXIT_OK
        assert "sound on all samples" in capsys.readouterr().out

    def test_audit_experimental_method_is_not_a_failure(self, capsys):
        assert main(["audit", "-n", "20", "--samples", "4", "--seed", "1", "-m", "halving"]) == EXIT_OK
        assert "tnum_mul_rec" in capsys.readouterr().out
