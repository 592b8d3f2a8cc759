import json
import logging
from fractions import Fraction

from osprobe.config import EngineConfig
from osprobe.engine import FusionEngine
from osprobe.hypotheses import UNKNOWN
from osprobe.observation import Observation
from tests.utils_env import obs

HYPS = ("A", "B", "C")


def good():
    return [obs(["A"], 4, "good"), obs(["B"], 1, "also good")]


def boom():
    raise RuntimeError("capability missing")


async def async_boom():
    raise PermissionError("denied")


def _run(sources, **kw):
    return FusionEngine(EngineConfig(hypotheses=HYPS, sources=sources, **kw)).run_sync()


def test_failing_source_does_not_change_result():
    baseline = _run([good])
    with_failures = _run([boom, good, async_boom])
    assert with_failures.result == baseline.result
    assert dict(with_failures.scores) == dict(baseline.scores)
    assert sorted(f["source"] for f in with_failures.failures) == ["async_boom", "boom"]
    assert "RuntimeError: capability missing" in {f["error"] for f in with_failures.failures}


def test_every_source_failing_yields_unknown_not_a_crash():
    report = _run([boom, async_boom])
    assert report.hypothesis == UNKNOWN
    assert report.confidence == 0
    assert len(report.failures) == 2


def test_invalid_observation_dropped_and_logged(caplog):
    def buggy():
        return [
            obs(["A"], 0, "zero weight"),
            obs(["Z"], 3, "unknown hypothesis"),
            obs(["C"], 2, "fine"),
        ]

    with caplog.at_level(logging.WARNING, logger="osprobe.engine"):
        report = _run([buggy])
    assert dict(report.scores) == {"A": 0, "B": 0, "C": 2}
    assert [s.label for s in report.trace] == ["fine"]
    assert sum("dropping invalid observation" in r.getMessage() for r in caplog.records) == 2


def test_unhashable_hypothesis_dropped_and_run_continues(caplog):
    def buggy():
        return [Observation(hypotheses=(["A"],), weight=2, label="bad")]

    with caplog.at_level(logging.WARNING, logger="osprobe.engine"):
        report = _run([good, buggy])
    assert dict(report.scores) == {"A": 4, "B": 1, "C": 0}
    assert [s.label for s in report.trace] == ["good", "also good"]
    assert any("dropping invalid observation from buggy" in r.getMessage() for r in caplog.records)


def test_fraction_weight_is_fused_and_traced():
    def frac():
        return [Observation(hypotheses=("A",), weight=Fraction(3, 2), label="frac")]

    report = _run([frac])
    assert dict(report.scores) == {"A": 1.5, "B": 0, "C": 0}
    assert report.trace[0].weight == 1.5
    json.dumps(report.to_dict())


def test_unserializable_observation_dropped_before_scoring():
    def odd():
        return [Observation(hypotheses=("B",), weight=2, label="odd", condition=object()), obs(["C"], 1, "fine")]

    report = _run([odd])
    assert dict(report.scores) == {"A": 0, "B": 0, "C": 1}
    assert [s.label for s in report.trace] == ["fine"]


def test_non_observation_values_are_dropped():
    def sloppy():
        return [{"weight": 5}, obs(["B"], 1)]

    report = _run([sloppy])
    assert dict(report.scores) == {"A": 0, "B": 1, "C": 0}


def test_wrong_return_type_is_a_probe_failure():
    def scalar():
        return 42

    report = _run([scalar, good])
    assert report.failures[0]["source"] == "scalar"
    assert report.scores["A"] == 4


def test_single_observation_and_none_are_accepted():
    def one():
        return obs(["C"], 2)

    def nothing():
        return None

    report = _run([one, nothing])
    assert report.scores["C"] == 2
    assert report.failures == ()


def test_source_objects_with_probe_method():
    class Probe:
        name = "probe-object"

        def probe(self):
            return [obs(["B"], 7)]

    report = _run([Probe()])
    assert report.hypothesis == "B"
    assert report.trace[0].source == "probe-object"


def test_trace_failures_records_non_firing_steps():
    report = _run([boom, good], run_concurrently=False, trace_failures=True)
    first = report.trace[0]
    assert first.fired is False
    assert first.source == "boom"
    assert first.weight == 0
    assert [s.fired for s in report.trace] == [False, True, True]


def test_failures_left_out_of_trace_by_default():
    report = _run([boom, good], run_concurrently=False)
    assert all(s.fired for s in report.trace)


def test_trace_callback_receives_each_step_and_its_errors_are_contained(caplog):
    seen = []

    def on_step(step):
        seen.append(step.label)
        raise ValueError("reporter broke")

    eng = FusionEngine(EngineConfig(hypotheses=HYPS, sources=[good], run_concurrently=False), on_step=on_step)
    with caplog.at_level(logging.ERROR, logger="osprobe.engine"):
        report = eng.run_sync()
    assert seen == ["good", "also good"]
    assert report.hypothesis == "A"
    assert any("trace callback failed" in r.getMessage() for r in caplog.records)


def test_trace_steps_carry_source_name_and_evidence_id():
    report = _run([good])
    step = report.trace[0]
    assert step.source == "good"
    assert len(step.evidence_id) == 40
    # same signal, same id
    again = _run([good])
    assert again.trace[0].evidence_id == step.evidence_id
