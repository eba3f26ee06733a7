from conftest import photo_update, text_update
from libs.core.models import NO_CAPTION_PLACEHOLDER
from libs.core.security import WebhookAuthenticator
from libs.telegram import normalize_update


def test_text_message():
    event = normalize_update(text_update("hello", chat_id=5, user_id=9))
    assert event.chat_id == 5
    assert event.user_id == 9
    assert event.text == "hello"
    assert event.photo is None
    assert event.has_content
    assert event.classification_input == "hello"


def test_largest_photo_is_selected():
    event = normalize_update(photo_update(caption="cap"))
    assert event.photo.file_id == "big"
    assert (event.photo.width, event.photo.height) == (1280, 853)
    assert event.text == "cap"


def test_photo_without_caption_uses_placeholder():
    event = normalize_update(photo_update())
    assert event.text == ""
    assert event.has_content
    assert event.classification_input == NO_CAPTION_PLACEHOLDER


def test_edited_message_is_used_when_message_absent():
    event = normalize_update(text_update("v2", key="edited_message"))
    assert event.text == "v2"


def test_whitespace_only_text_has_no_content():
    event = normalize_update(text_update("   \n"))
    assert event is not None
    assert not event.has_content


def test_unusable_payloads_yield_none():
    assert normalize_update(None) is None
    assert normalize_update([1, 2]) is None
    assert normalize_update({"update_id": 1}) is None
    assert normalize_update({"message": {"text": "no chat"}}) is None
    assert normalize_update({"message": {"chat": {"id": "not-a-number"}}}) is None


def test_authenticator():
    open_door = WebhookAuthenticator("")
    assert open_door.authenticate(None) is None

    guarded = WebhookAuthenticator("s3cret")
    assert guarded.authenticate("s3cret") is None
    assert guarded.authenticate(None).reason == "missing_secret"
    assert guarded.authenticate("wrong").reason == "secret_mismatch"
