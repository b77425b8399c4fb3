from __future__ import annotations

import re
from typing import Callable

from smartqr.domain.documents import DeviceClass


Rule = tuple[Callable[[str], bool], DeviceClass]

_TABLET_RE = re.compile(r"(tablet|ipad|playbook|silk)|(android(?!.*mobi))", re.IGNORECASE)
_MOBILE_RE = re.compile(
    r"mobile|android|ip(hone|od)|iemobile|blackberry|kindle|silk-accelerated|(hpw|web)os|opera m(obi|ini)",
    re.IGNORECASE,
)

# Evaluated in order; the first predicate that matches decides the class.
# Patterns ignore case so lowercased agents still classify as Mobile.
DEVICE_RULES: tuple[Rule, ...] = (
    (lambda ua: bool(_TABLET_RE.search(ua)), DeviceClass.TABLET),
    (lambda ua: bool(_MOBILE_RE.search(ua)), DeviceClass.MOBILE),
)

# Unmatched agents (including empty/"Unknown") count as Desktop. The Other bucket
# exists in summaries but no rule produces it yet.
DEFAULT_DEVICE_CLASS = DeviceClass.DESKTOP


def classify_device(user_agent: str | None) -> DeviceClass:
    ua = user_agent or ""
    for predicate, label in DEVICE_RULES:
        if predicate(ua):
            return label
    return DEFAULT_DEVICE_CLASS
