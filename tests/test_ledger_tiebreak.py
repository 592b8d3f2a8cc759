from osprobe.hypotheses import DEFAULT_HYPOTHESES, MACOS, IOS, IPADOS
from osprobe.ledger import EvidenceLedger
from tests.utils_env import obs


def test_tie_resolves_to_first_declared_hypothesis():
    for _ in range(20):
        led = EvidenceLedger(["A", "B", "C"])
        led.apply(obs(["B"], 5))
        led.apply(obs(["A"], 5))
        assert led.top_hypothesis() == "A"


def test_tie_break_follows_configured_order_not_name():
    led = EvidenceLedger(["C", "B", "A"])
    led.apply(obs(["A"], 5))
    led.apply(obs(["C"], 5))
    assert led.top_hypothesis() == "C"


def test_apple_family_tie_goes_to_macos_in_default_order():
    led = EvidenceLedger(DEFAULT_HYPOTHESES)
    led.apply(obs([IOS, IPADOS, MACOS], 8))
    assert led.top_hypothesis() == MACOS
    assert led.confidence_of(MACOS) == 33


def test_ranking_orders_by_score_then_enumeration():
    led = EvidenceLedger(["A", "B", "C", "D"])
    led.apply(obs(["C", "D"], 2))
    led.apply(obs(["B"], 5))
    assert [h for h, _ in led.ranking()] == ["B", "C", "D", "A"]


def test_strictly_higher_score_beats_earlier_declaration():
    led = EvidenceLedger(["A", "B"])
    led.apply(obs(["A"], 5))
    led.apply(obs(["B"], 5.5))
    assert led.top_hypothesis() == "B"
