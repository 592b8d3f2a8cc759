import asyncio

import pytest

from osprobe.sources.media import HEVC_TYPE, VP9_TYPE, MediaSource
from osprobe.sources.nfc import NFCSource, has_nfc_support, nfc_api_type

UA_ANDROID = "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 Mobile Safari/537.36"
UA_IPHONE_17 = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 Mobile/15E148"
UA_IPHONE_10 = "Mozilla/5.0 (iPhone; CPU iPhone OS 10_3 like Mac OS X) AppleWebKit/603.1.30 Mobile/14E277"


def test_media_reports_supported_codecs(make_env, rule_table):
    env = make_env(navigator=["mediaCapabilities"], decoding={HEVC_TYPE: True, VP9_TYPE: True})
    out = asyncio.run(MediaSource(env, table=rule_table).probe())
    assert [o.condition for o in out] == ["hevc", "vp9"]


def test_media_without_capability_api_is_silent(make_env, rule_table):
    env = make_env(decoding={HEVC_TYPE: True})
    assert asyncio.run(MediaSource(env, table=rule_table).probe()) == []


def test_media_unsupported_codec_does_not_fire(make_env, rule_table):
    env = make_env(navigator=["mediaCapabilities"], decoding={HEVC_TYPE: False, VP9_TYPE: True})
    out = asyncio.run(MediaSource(env, table=rule_table).probe())
    assert [o.condition for o in out] == ["vp9"]


def test_media_query_that_never_settles_hangs_until_cancelled(make_env, rule_table):
    env = make_env(navigator=["mediaCapabilities"], decoding={HEVC_TYPE: None})

    async def bounded():
        return await asyncio.wait_for(MediaSource(env, table=rule_table).probe(), 0.05)

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(bounded())


def test_nfc_api_type(make_env):
    assert nfc_api_type(make_env(window=["NDEFReader"])) == "NDEFReader"
    assert nfc_api_type(make_env(navigator=["nfc"])) == "navigator.nfc"
    assert nfc_api_type(make_env()) is None


@pytest.mark.parametrize("ua,expected", [
    (UA_ANDROID, True),
    (UA_IPHONE_17, True),
    (UA_IPHONE_10, False),
    ("Mozilla/5.0 (X11; Linux x86_64)", False),
])
def test_has_nfc_support_from_platform_string(make_env, ua, expected):
    assert has_nfc_support(make_env(user_agent=ua)) is expected


def test_nfc_on_android_with_web_nfc(make_env, rule_table):
    env = make_env(user_agent=UA_ANDROID, window=["NDEFReader"], nfc_scan=True)
    out = asyncio.run(NFCSource(env, table=rule_table).probe())
    assert [o.condition for o in out] == ["nfc_api", "nfc_android"]
    assert "scan permitted: True" in out[0].detail
    assert sum(o.weight for o in out) == 6


def test_nfc_on_recent_iphone(make_env, rule_table):
    env = make_env(user_agent=UA_IPHONE_17)
    out = asyncio.run(NFCSource(env, table=rule_table).probe())
    assert [o.condition for o in out] == ["nfc_iphone"]
    assert out[0].hypotheses == ("iOS",)


def test_nfc_legacy_navigator_api_skips_permission_query(make_env, rule_table):
    env = make_env(navigator=["nfc"], nfc_scan=None)
    out = asyncio.run(NFCSource(env, table=rule_table).probe())
    assert [o.condition for o in out] == ["nfc_api"]


def test_query_latency_delays_answers(make_env, rule_table):
    env = make_env(user_agent=UA_ANDROID, window=["NDEFReader"], nfc_scan=True, query_latency=0.01)
    out = asyncio.run(NFCSource(env, table=rule_table).probe())
    assert len(out) == 2
