"""
Best-effort User-Agent classification for the "active sessions" list.

Display only; nothing here is security-relevant. Spoofed or unrecognised
agents degrade to "Unknown" rather than failing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

UNKNOWN = "Unknown"

_CHROME_RE = re.compile(r"Chrome/(\d+)")
_FIREFOX_RE = re.compile(r"Firefox/(\d+)")
_SAFARI_RE = re.compile(r"Version/(\d+)")
_EDGE_RE = re.compile(r"Edg/(\d+)")
_MACOS_RE = re.compile(r"Mac OS X (\d+[._]\d+)")


@dataclass(frozen=True)
class DeviceInfo:
    browser: str
    os: str
    device: str
    summary: str


UNKNOWN_DEVICE = DeviceInfo(
    browser=UNKNOWN, os=UNKNOWN, device=UNKNOWN, summary="Unknown Device"
)


def _versioned(name: str, pattern: re.Pattern[str], ua: str) -> str:
    m = pattern.search(ua)
    return f"{name} {m.group(1)}" if m else name


def _detect_browser(ua: str) -> str:
    # Order matters: Edge and Chrome both advertise "Chrome", Chrome advertises "Safari".
    if "Chrome" in ua and "Edg" not in ua:
        return _versioned("Chrome", _CHROME_RE, ua)
    if "Firefox" in ua:
        return _versioned("Firefox", _FIREFOX_RE, ua)
    if "Safari" in ua and "Chrome" not in ua:
        return _versioned("Safari", _SAFARI_RE, ua)
    if "Edg" in ua:
        return _versioned("Edge", _EDGE_RE, ua)
    return UNKNOWN


def _detect_os(ua: str) -> str:
    if "Windows NT 10" in ua:
        return "Windows 10/11"
    if "Windows" in ua:
        return "Windows"
    if "Mac OS X" in ua:
        m = _MACOS_RE.search(ua)
        return f"macOS {m.group(1).replace('_', '.', 1)}" if m else "macOS"
    if "Linux" in ua:
        return "Linux"
    if "Android" in ua:
        return "Android"
    if "iPhone" in ua or "iPad" in ua:
        return "iOS"
    return UNKNOWN


def _detect_device(ua: str, os_name: str) -> str:
    if "Mobile" in ua or "Android" in ua:
        return "Mobile"
    if "Tablet" in ua or "iPad" in ua:
        return "Tablet"
    # iPhone agent without a "Mobile" token.
    if os_name == "iOS":
        return "Mobile"
    return "Desktop"


def parse_user_agent(user_agent: str | None) -> DeviceInfo:
    if not user_agent:
        return UNKNOWN_DEVICE

    browser = _detect_browser(user_agent)
    os_name = _detect_os(user_agent)
    return DeviceInfo(
        browser=browser,
        os=os_name,
        device=_detect_device(user_agent, os_name),
        summary=f"{browser} on {os_name}",
    )
