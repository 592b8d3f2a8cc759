from osprobe.config import EngineConfig
from osprobe.engine import FusionEngine
from osprobe.hypotheses import UNKNOWN
from tests.utils_env import obs


def _source(*observations, name="src"):
    def probe():
        return list(observations)
    probe.__name__ = name
    return probe


def _engine(sources, concurrent=True):
    return FusionEngine(EngineConfig(hypotheses=("A", "B", "C"), sources=sources, run_concurrently=concurrent))


def test_weighted_scenario_a_wins_with_64_percent():
    eng = _engine([
        _source(obs(["A"], 8), name="s1"),
        _source(obs(["A", "B"], 6), name="s2"),
        _source(obs(["C"], 2), name="s3"),
    ])
    report = eng.run_sync()
    assert dict(report.scores) == {"A": 14, "B": 6, "C": 2}
    assert report.hypothesis == "A"
    assert report.confidence == 64


def test_nothing_fires_reports_unknown():
    eng = _engine([_source(name="quiet"), _source(name="silent")])
    report = eng.run_sync()
    assert report.hypothesis == UNKNOWN
    assert report.confidence == 0
    assert report.trace == ()
    assert report.to_dict()["result"] == {"hypothesis": UNKNOWN, "confidence": 0}


def test_tie_between_two_sources_names_first_declared():
    eng = _engine([_source(obs(["B"], 5), name="b"), _source(obs(["A"], 5), name="a")])
    report = eng.run_sync()
    assert report.hypothesis == "A"
    assert report.confidence == 50
    confidences = {r["name"]: r["confidence"] for r in report.ranking}
    assert confidences == {"A": 50, "B": 50, "C": 0}
