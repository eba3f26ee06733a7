"""Container health probe: exit 0 when the bot token is accepted by Telegram."""

from __future__ import annotations

import sys

import requests

from libs.core.settings import get_settings


def check(token: str, timeout: float = 5) -> bool:
    try:
        resp = requests.get(f"https://api.telegram.org/bot{token}/getMe", timeout=timeout)
    except requests.RequestException as exc:
        print(exc, file=sys.stderr)
        return False
    return resp.ok and bool(resp.json().get("ok"))


def main() -> None:
    settings = get_settings()
    token = settings.telegram_bot_token
    if not token:
        print("Missing TELEGRAM_BOT_TOKEN", file=sys.stderr)
        sys.exit(1)
    sys.exit(0 if check(token) else 1)


if __name__ == "__main__":
    main()
