import asyncio
from unittest.mock import AsyncMock

from telegram.error import Forbidden

from libs.core.exceptions import NotificationFailed
from libs.core.i18n import I18n
from libs.core.models import Note
from libs.telegram import TelegramGateway
from libs.usecases import NotifyChat
from libs.usecases.notify import format_note_reply


def _note(**kwargs) -> Note:
    fields = {"tg_chat_id": 1, "title": "淡水老街一日遊", "summary": "走走", "raw_text": "r", "tags": ["旅遊"]}
    fields.update(kwargs)
    return Note(**fields)


def test_reply_lists_title_summary_and_hashtags(i18n):
    reply = format_note_reply(i18n, _note(tags=["旅遊", "美食"]))
    lines = reply.splitlines()
    assert lines[0] == "✅ 已收錄"
    assert lines[1] == "<b>標題：</b>淡水老街一日遊"
    assert lines[2] == "<b>摘要：</b>走走"
    assert lines[3] == "<b>標籤：</b>#旅遊 #美食"


def test_reply_escapes_html_and_marks_images(i18n):
    reply = format_note_reply(i18n, _note(title="<script>", tags=[]), has_image=True)
    assert "&lt;script&gt;" in reply
    assert "（含圖片）" in reply
    assert "（無）" in reply


def test_reply_hints(i18n):
    reply = format_note_reply(
        i18n, _note(), classification_failed=True, attachment_failed=True, persisted=False
    )
    assert i18n.t("hint_classification_failed") in reply
    assert i18n.t("hint_attachment_failed") in reply
    assert i18n.t("hint_persistence_failed") in reply


def test_english_labels():
    reply = format_note_reply(I18n("en"), _note())
    assert "<b>Title: </b>" in reply


def test_send_failure_is_returned_not_raised(i18n):
    gateway = AsyncMock(spec=TelegramGateway)
    gateway.send_message.side_effect = Forbidden("bot was blocked by the user")

    result = asyncio.run(NotifyChat(gateway, i18n).note_saved(1, _note()))

    assert isinstance(result, NotificationFailed)
    assert result.reason == "Forbidden"


def test_gateway_sends_html_without_link_preview():
    bot = AsyncMock()
    gateway = TelegramGateway("token", bot=bot)

    asyncio.run(gateway.send_message(7, "<b>hi</b>"))

    kwargs = bot.send_message.call_args.kwargs
    assert kwargs["chat_id"] == 7
    assert kwargs["parse_mode"] == "HTML"
    assert kwargs["link_preview_options"].is_disabled is True


def test_gateway_downloads_file_bytes():
    tg_file = AsyncMock()
    tg_file.file_path = "https://api.telegram.org/file/botT/photos/file_1.jpg"
    tg_file.download_as_bytearray.return_value = bytearray(b"abc")
    bot = AsyncMock()
    bot.get_file.return_value = tg_file

    downloaded = asyncio.run(TelegramGateway("token", bot=bot).download_file("fid"))

    bot.get_file.assert_awaited_once_with("fid")
    assert downloaded.content == b"abc"
    assert downloaded.file_path.endswith("file_1.jpg")
