"""Tests for the LangChain-backed completion operation."""

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from engine.agents import CustomerAgent, build_messages
from engine.errors import CompletionError
from engine.manager import NOTICE_SEND_FAILED, ConversationManager
from engine.states import ConversationOutcome, Difficulty, Product, Role, SubmitStatus, Turn


TURNS = (
    Turn(Role.CUSTOMER, "Oi, quero um cartão."),
    Turn(Role.SALESPERSON, "Temos o Black sem anuidade."),
)


def fake_llm(reply=None, error=None):
    llm = MagicMock()
    if error is not None:
        llm.ainvoke = AsyncMock(side_effect=error)
    else:
        llm.ainvoke = AsyncMock(return_value=AIMessage(content=reply))
    return llm


class TestBuildMessages(unittest.TestCase):

    def test_system_directive_precedes_history(self):
        messages = build_messages(TURNS, "REGRAS")
        self.assertIsInstance(messages[0], SystemMessage)
        self.assertEqual(messages[0].content, "REGRAS")
        self.assertIsInstance(messages[1], AIMessage)
        self.assertEqual(messages[1].content, "Oi, quero um cartão.")
        self.assertIsInstance(messages[2], HumanMessage)
        self.assertEqual(messages[2].content, "Temos o Black sem anuidade.")

    def test_terminal_turn_is_not_forwarded(self):
        turns = TURNS + (Turn(Role.CUSTOMER, "Venda fechada", outcome=ConversationOutcome.SOLD),)
        self.assertEqual(len(build_messages(turns, "REGRAS")), 3)


class TestCustomerAgent(unittest.IsolatedAsyncioTestCase):

    async def test_returns_reply_text(self):
        llm = fake_llm("E o limite?")
        agent = CustomerAgent(llm_factory=lambda: llm)

        reply = await agent.complete(TURNS, "REGRAS")

        self.assertEqual(reply, "E o limite?")
        sent = llm.ainvoke.await_args.args[0]
        self.assertIsInstance(sent[0], SystemMessage)
        self.assertEqual(len(sent), 3)

    async def test_missing_credentials(self):
        agent = CustomerAgent(llm_factory=lambda: None)
        with self.assertRaises(CompletionError):
            await agent.complete(TURNS, "REGRAS")

    async def test_client_setup_errors_are_wrapped(self):
        def broken_factory():
            raise ValueError("cannot convert float NaN to integer")

        agent = CustomerAgent(llm_factory=broken_factory)
        with self.assertRaises(CompletionError) as ctx:
            await agent.complete(TURNS, "REGRAS")
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    async def test_client_setup_error_reaches_trainee_as_notice(self):
        def broken_factory():
            raise OverflowError("cannot convert float infinity to integer")

        manager = ConversationManager(CustomerAgent(llm_factory=broken_factory), Difficulty.EASY, Product.LOAN)
        notices = []
        manager.subscribe_notices(notices.append)

        status = await manager.submit_user_turn("Olá")

        self.assertIs(status, SubmitStatus.FAILED)
        self.assertEqual(notices, [NOTICE_SEND_FAILED])
        self.assertIs(manager.turns[-1].role, Role.SALESPERSON)
        self.assertFalse(manager.busy)

    async def test_transport_errors_are_wrapped(self):
        agent = CustomerAgent(llm_factory=lambda: fake_llm(error=TimeoutError("timed out")))
        with self.assertRaises(CompletionError) as ctx:
            await agent.complete(TURNS, "REGRAS")
        self.assertIsInstance(ctx.exception.__cause__, TimeoutError)

    async def test_empty_reply_is_malformed(self):
        agent = CustomerAgent(llm_factory=lambda: fake_llm("   "))
        with self.assertRaises(CompletionError):
            await agent.complete(TURNS, "REGRAS")

    async def test_default_factory_reads_env(self):
        with patch('engine.agents.get_openai_chat', return_value=None) as factory:
            agent = CustomerAgent()
            with self.assertRaises(CompletionError):
                await agent.complete(TURNS, "REGRAS")
        factory.assert_called_once()


class TestGetOpenAIChat(unittest.TestCase):

    def setUp(self):
        from engine.llm import get_openai_chat
        get_openai_chat.cache_clear()
        self.addCleanup(get_openai_chat.cache_clear)

    def test_missing_key_returns_none(self):
        from engine.llm import get_openai_chat
        with patch.dict('os.environ', {}, clear=True):
            self.assertIsNone(get_openai_chat())

    def test_builds_client_from_env(self):
        from engine.llm import get_openai_chat
        env = {
            'OPENAI_API_KEY': 'sk-test',
            'OPENAI_MODEL': 'gpt-4o',
            'OPENAI_BASE_URL': 'https://gateway.example/v1',
            'OPENAI_MAX_TOKENS': '200',
        }
        with patch.dict('os.environ', env, clear=True), patch('engine.llm.ChatOpenAI') as chat_cls:
            get_openai_chat()
        kwargs = chat_cls.call_args.kwargs
        self.assertEqual(kwargs['model'], 'gpt-4o')
        self.assertEqual(kwargs['api_key'], 'sk-test')
        self.assertEqual(kwargs['base_url'], 'https://gateway.example/v1')
        self.assertEqual(kwargs['max_tokens'], 200)
        self.assertEqual(kwargs['max_retries'], 0)

    def test_unusable_max_tokens_falls_back_to_default(self):
        from engine.llm import get_openai_chat
        for raw in ('nan', 'inf', 'lots'):
            get_openai_chat.cache_clear()
            env = {'OPENAI_API_KEY': 'sk-test', 'OPENAI_MAX_TOKENS': raw}
            with patch.dict('os.environ', env, clear=True), patch('engine.llm.ChatOpenAI') as chat_cls:
                get_openai_chat()
            self.assertEqual(chat_cls.call_args.kwargs['max_tokens'], 300, raw)


if __name__ == '__main__':
    unittest.main()
