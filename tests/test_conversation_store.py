"""ConversationStore: send/clear/switch behaviour and the send state machine."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from lexia_core_lib.core.conversation.store import ConversationStore
from lexia_core_lib.exceptions import ConversationBusyError
from lexia_core_lib.infrastructure.llm.adapter import ProviderAdapter
from lexia_core_lib.infrastructure.llm.providers.base import (
    AIErrorKind,
    AIResult,
    AIRole,
    LLMResponse,
    ProviderConfig,
)
from lexia_core_lib.models.case import Case, ConversationState, FileRef, Sender


def _reply(text):
    return AIResult.success(
        LLMResponse(content=text, provider="openai", model="test-model", tokens_used=1, response_time_ms=0)
    )


@pytest.fixture
def case():
    return Case(case_id="case-1", title="Deposit dispute")


@pytest.fixture
def mock_adapter():
    adapter = AsyncMock(spec=ProviderAdapter)
    adapter.send.return_value = _reply("Art. 1382 establishes fault-based liability.")
    return adapter


@pytest.fixture
def store(case, mock_adapter, session):
    return ConversationStore(case, mock_adapter, session)


class TestSend:
    @pytest.mark.asyncio
    async def test_first_turn_appends_user_then_assistant(self, store):
        turn = await store.send("What does Art. 1382 cover?")

        messages = store.messages
        assert len(messages) == 2
        assert messages[0].sender == Sender.USER
        assert messages[0].content == "What does Art. 1382 cover?"
        assert messages[1].sender == Sender.ASSISTANT
        assert messages[1].content == "Art. 1382 establishes fault-based liability."
        assert all(m.case_id == "case-1" for m in messages)
        assert turn.ok
        assert turn.user_message == messages[0]
        assert turn.assistant_message == messages[1]
        assert store.state == ConversationState.IDLE

    @pytest.mark.asyncio
    async def test_not_configured_keeps_user_message_only(self, store, mock_adapter):
        mock_adapter.send.return_value = AIResult.failure(
            AIErrorKind.NOT_CONFIGURED, "AI service not configured.", "openai"
        )

        turn = await store.send("What does Art. 1382 cover?")

        assert len(store.messages) == 1
        assert store.messages[0].sender == Sender.USER
        assert turn.error.kind == AIErrorKind.NOT_CONFIGURED
        assert turn.assistant_message is None
        assert store.state == ConversationState.IDLE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_input_is_a_no_op(self, store, mock_adapter, text):
        await store.send("first")
        before = store.messages

        assert await store.send(text) is None
        assert store.messages == before
        assert mock_adapter.send.await_count == 1

    @pytest.mark.asyncio
    async def test_request_carries_history_and_system_prompt(self, store, mock_adapter, case):
        await store.send("first question")
        await store.send("second question")

        request, system_prompt, config = mock_adapter.send.await_args.args
        assert [m.content for m in request] == [
            "first question",
            "Art. 1382 establishes fault-based liability.",
            "second question",
        ]
        assert [m.role for m in request] == [AIRole.USER, AIRole.ASSISTANT, AIRole.USER]
        assert system_prompt == case.system_prompt
        assert config.provider == "openai"
        assert config.api_key == "sk-test"

    @pytest.mark.asyncio
    async def test_length_never_decreases_and_replies_follow_questions(self, store, mock_adapter):
        outcomes = [
            _reply("a1"),
            AIResult.failure(AIErrorKind.TRANSPORT_FAILURE, "failed", "openai"),
            _reply("a3"),
        ]
        mock_adapter.send.side_effect = outcomes
        lengths = []

        for text in ["q1", "q2", "q3"]:
            turn = await store.send(text)
            lengths.append(len(store.messages))
            if turn.assistant_message is not None:
                ids = [m.id for m in store.messages]
                assert ids.index(turn.user_message.id) < ids.index(turn.assistant_message.id)

        assert lengths == sorted(lengths)
        assert [m.content for m in store.messages] == ["q1", "a1", "q2", "q3", "a3"]

    @pytest.mark.asyncio
    async def test_attachments_are_kept_on_user_message(self, store):
        turn = await store.send("see attached", attachments=[FileRef(name="lease.pdf", size_bytes=1024)])

        assert turn.user_message.attachments == (FileRef(name="lease.pdf", size_bytes=1024),)

    @pytest.mark.asyncio
    async def test_attachments_cannot_be_changed_after_creation(self, store):
        files = [FileRef(name="lease.pdf")]
        turn = await store.send("see attached", attachments=files)
        files.append(FileRef(name="late.pdf"))

        with pytest.raises(AttributeError):
            turn.user_message.attachments.append(FileRef(name="injected.pdf"))
        assert [f.name for f in store.messages[0].attachments] == ["lease.pdf"]

    @pytest.mark.asyncio
    async def test_history_window_limits_prior_messages(self, case, mock_adapter, session):
        store = ConversationStore(case, mock_adapter, session, max_history_messages=2)
        await store.send("q1")
        await store.send("q2")

        await store.send("q3")

        request = mock_adapter.send.await_args.args[0]
        assert [m.content for m in request] == ["q2", "Art. 1382 establishes fault-based liability.", "q3"]
        assert len(store.messages) == 6


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_second_send_and_clear_rejected_while_awaiting(self, store, mock_adapter):
        release = asyncio.Event()

        async def slow_send(*args, **kwargs):
            await release.wait()
            return _reply("done")

        mock_adapter.send.side_effect = slow_send

        pending = asyncio.create_task(store.send("first"))
        await asyncio.sleep(0)

        assert store.state == ConversationState.AWAITING_RESPONSE
        assert len(store.messages) == 1
        with pytest.raises(ConversationBusyError):
            await store.send("second")
        with pytest.raises(ConversationBusyError):
            store.clear()

        release.set()
        turn = await pending

        assert turn.ok
        assert [m.content for m in store.messages] == ["first", "done"]
        assert store.state == ConversationState.IDLE

    @pytest.mark.asyncio
    async def test_unexpected_provider_failure_is_a_turn_error(self, case, adapter, session, openai_provider):
        openai_provider.error = RuntimeError("unexpected")
        store = ConversationStore(case, adapter, session)

        turn = await store.send("hello")

        assert turn.error.kind == AIErrorKind.TRANSPORT_FAILURE
        assert turn.assistant_message is None
        assert store.state == ConversationState.IDLE
        assert len(store.messages) == 1


class TestClearAndSwitch:
    @pytest.mark.asyncio
    async def test_clear_empties_the_log(self, store):
        await store.send("q1")
        await store.send("q2")

        store.clear()

        assert store.messages == ()
        assert store.case.messages == []

    @pytest.mark.asyncio
    async def test_switch_provider_does_not_touch_history(self, store, mock_adapter, session):
        await store.send("q1")
        snapshot = [(m.id, m.content, m.timestamp) for m in store.messages]

        store.switch_provider("huggingface")

        assert session.provider == "huggingface"
        assert [(m.id, m.content, m.timestamp) for m in store.messages] == snapshot
        assert mock_adapter.send.await_count == 1

        await store.send("q2")
        config = mock_adapter.send.await_args.args[2]
        assert config.provider == "huggingface"
        assert config.api_key == "hf-test"

    def test_switch_provider_with_config_sets_key(self, store, session):
        store.switch_provider(ProviderConfig(provider="huggingface", api_key="hf-new"))

        assert session.provider_config().api_key == "hf-new"

    def test_save_system_prompt_goes_through_composer(self, store, case):
        store.save_system_prompt("Only Belgian tenancy law.")

        assert case.system_prompt == "Only Belgian tenancy law."


@pytest.mark.asyncio
async def test_end_to_end_with_real_adapter(case, adapter, session, openai_provider):
    store = ConversationStore(case, adapter, session)

    await store.send("What does Art. 1382 cover?")

    call = openai_provider.calls[0]
    assert call["system_prompt"] == case.system_prompt
    assert call["temperature"] == 0.7
    assert [m.content for m in call["messages"]] == ["What does Art. 1382 cover?"]
    assert store.messages[-1].content == "Art. 1382 establishes fault-based liability."
