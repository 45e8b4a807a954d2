"""Unit tests for CancellationToken and the error types."""

import threading

import pytest

from xcstrings_translator.translation.cancellation import CancellationToken, check_cancelled
from xcstrings_translator.translation.errors import ErrorKind, OllamaError, TranslationCancelled


@pytest.mark.unit
class TestCancellationToken:
    def test_starts_uncancelled(self):
        token = CancellationToken()
        assert token.cancelled is False
        token.raise_if_cancelled()

    def test_cancel_sets_flag(self):
        token = CancellationToken()
        token.cancel()
        assert token.cancelled is True

    def test_raise_if_cancelled(self):
        token = CancellationToken()
        token.cancel("Cancelled by user")

        with pytest.raises(TranslationCancelled) as exc_info:
            token.raise_if_cancelled()

        assert exc_info.value.reason == "Cancelled by user"
        assert str(exc_info.value) == "Cancelled by user"

    def test_default_reason(self):
        token = CancellationToken()
        token.cancel()
        assert token.reason == "Translation cancelled"

    def test_first_reason_wins(self):
        token = CancellationToken()
        token.cancel("first")
        token.cancel("second")
        assert token.reason == "first"

    def test_cancel_from_another_thread(self):
        token = CancellationToken()
        worker = threading.Thread(target=token.cancel)
        worker.start()
        worker.join()
        assert token.cancelled is True


@pytest.mark.unit
class TestCancelCallbacks:
    def test_callback_runs_on_cancel(self):
        token = CancellationToken()
        calls = []
        token.add_callback(lambda: calls.append("woken"))

        assert calls == []
        token.cancel()
        assert calls == ["woken"]

    def test_callback_runs_once(self):
        token = CancellationToken()
        calls = []
        token.add_callback(lambda: calls.append("woken"))

        token.cancel()
        token.cancel()

        assert calls == ["woken"]

    def test_callback_added_after_cancel_runs_immediately(self):
        token = CancellationToken()
        token.cancel()
        calls = []

        token.add_callback(lambda: calls.append("woken"))

        assert calls == ["woken"]

    def test_removed_callback_does_not_run(self):
        token = CancellationToken()
        calls = []

        def callback():
            calls.append("woken")

        token.add_callback(callback)
        token.remove_callback(callback)
        token.cancel()

        assert calls == []

    def test_remove_unknown_callback_is_ignored(self):
        CancellationToken().remove_callback(lambda: None)

    def test_failing_callback_does_not_block_others(self, caplog):
        token = CancellationToken()
        calls = []

        def broken():
            raise RuntimeError("boom")

        token.add_callback(broken)
        token.add_callback(lambda: calls.append("woken"))

        with caplog.at_level("WARNING"):
            token.cancel()

        assert token.cancelled is True
        assert calls == ["woken"]
        assert "cancel callback failed" in caplog.text


@pytest.mark.unit
class TestCheckCancelled:
    def test_none_token_is_noop(self):
        check_cancelled(None)

    def test_live_token_is_noop(self):
        check_cancelled(CancellationToken())

    def test_fired_token_raises(self):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(TranslationCancelled):
            check_cancelled(token)


@pytest.mark.unit
class TestErrors:
    def test_ollama_error_carries_kind(self):
        error = OllamaError("Cannot connect", ErrorKind.CONNECTION_FAILED)
        assert error.kind is ErrorKind.CONNECTION_FAILED
        assert error.message == "Cannot connect"
        assert str(error) == "Cannot connect"

    def test_repr(self):
        error = OllamaError("boom", ErrorKind.GENERATION_FAILED)
        assert repr(error) == "OllamaError('boom', kind=GENERATION_FAILED)"

    def test_kind_values_are_strings(self):
        assert ErrorKind.MODEL_NOT_FOUND == "MODEL_NOT_FOUND"

    def test_cancelled_is_separate_family(self):
        assert not issubclass(TranslationCancelled, OllamaError)
        assert not issubclass(OllamaError, TranslationCancelled)
