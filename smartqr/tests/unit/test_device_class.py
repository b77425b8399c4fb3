from __future__ import annotations

import pytest

from smartqr.domain.documents import DeviceClass
from smartqr.services.device_class import classify_device


IPAD = "Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X) AppleWebKit/605.1.15 Version/17.0 Safari/604.1"
ANDROID_TABLET = "Mozilla/5.0 (Linux; Android 14; SM-X710) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"
ANDROID_PHONE = "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 Chrome/120.0 Mobile Safari/537.36"
IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 Mobile/15E148"
DESKTOP = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"


@pytest.mark.parametrize(
    ("user_agent", "expected"),
    [
        (IPAD, DeviceClass.TABLET),
        (ANDROID_TABLET, DeviceClass.TABLET),
        (ANDROID_PHONE, DeviceClass.MOBILE),
        (IPHONE, DeviceClass.MOBILE),
        (DESKTOP, DeviceClass.DESKTOP),
    ],
)
def test_classify_known_agents(user_agent: str, expected: DeviceClass) -> None:
    assert classify_device(user_agent) is expected


@pytest.mark.parametrize("user_agent", ["", None, "Unknown", "curl/8.5.0"])
def test_unmatched_agents_default_to_desktop(user_agent: str | None) -> None:
    assert classify_device(user_agent) is DeviceClass.DESKTOP


def test_tablet_rule_runs_before_mobile_rule() -> None:
    # "Silk" is both a tablet and a mobile marker; tablet wins.
    assert classify_device("Mozilla/5.0 (Linux; Android 9; KFTRWI) Silk/120 Mobile") is DeviceClass.TABLET


@pytest.mark.parametrize(
    "user_agent",
    [
        IPHONE.lower(),
        ANDROID_PHONE.lower(),
        "customapp/2.1 (mobile; build 88)",
    ],
)
def test_mobile_markers_match_in_any_case(user_agent: str) -> None:
    assert classify_device(user_agent) is DeviceClass.MOBILE
