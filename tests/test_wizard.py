"""Tests for the difficulty -> product -> chat flow."""

import asyncio
import unittest

from engine.errors import SelectionError
from engine.personas import greeting
from engine.states import ConversationPhase, Difficulty, Product, Role, SubmitStatus
from engine.wizard import SelectionStep, TrainingSession

from tests.fakes import ScriptedAgent


class TestNavigation(unittest.TestCase):

    def setUp(self):
        self.agent = ScriptedAgent()
        self.session = TrainingSession(lambda: self.agent, conclusion_delay=0.0)

    def test_starts_on_difficulty(self):
        self.assertIs(self.session.step, SelectionStep.DIFFICULTY)
        self.assertIsNone(self.session.conversation)

    def test_linear_selection(self):
        self.session.select_difficulty(Difficulty.HARD)
        self.assertIs(self.session.step, SelectionStep.PRODUCT)

        conversation = self.session.select_product(Product.INSURANCE)
        self.assertIs(self.session.step, SelectionStep.CHAT)
        self.assertIs(self.session.conversation, conversation)
        self.assertEqual(conversation.turns[0].text, greeting(Difficulty.HARD, Product.INSURANCE))

    def test_out_of_order_selection_raises(self):
        with self.assertRaises(SelectionError):
            self.session.select_product(Product.LOAN)
        self.session.select_difficulty(Difficulty.EASY)
        with self.assertRaises(SelectionError):
            self.session.select_difficulty(Difficulty.MEDIUM)

    def test_go_back_discards_conversation(self):
        self.session.select_difficulty(Difficulty.MEDIUM)
        conversation = self.session.select_product(Product.LOAN)

        self.session.go_back()
        self.assertIs(self.session.step, SelectionStep.PRODUCT)
        self.assertIsNone(self.session.conversation)
        self.assertTrue(conversation.closed)
        self.assertIs(self.session.difficulty, Difficulty.MEDIUM)

        self.session.go_back()
        self.assertIs(self.session.step, SelectionStep.DIFFICULTY)
        self.assertIsNone(self.session.conversation)

    def test_go_back_twice_leaves_no_conversation(self):
        self.session.select_difficulty(Difficulty.EASY)
        self.session.select_product(Product.CREDIT_CARD)

        self.session.go_back()
        once = self.session.conversation
        self.session.go_back()
        self.assertIsNone(once)
        self.assertIsNone(self.session.conversation)

    def test_go_back_on_first_step_is_noop(self):
        self.session.go_back()
        self.session.go_back()
        self.assertIs(self.session.step, SelectionStep.DIFFICULTY)

    def test_new_product_builds_fresh_conversation(self):
        self.session.select_difficulty(Difficulty.EASY)
        first = self.session.select_product(Product.LOAN)
        self.session.go_back()
        second = self.session.select_product(Product.INVESTMENTS)
        self.assertIsNot(first, second)
        self.assertEqual(len(second.turns), 1)


class TestSessionSubmit(unittest.IsolatedAsyncioTestCase):

    async def test_submit_without_conversation_raises(self):
        session = TrainingSession(ScriptedAgent)
        with self.assertRaises(SelectionError):
            await session.submit_user_turn("Olá")

    async def test_hard_insurance_scenario(self):
        agent = ScriptedAgent("Cobertura total? Já ouvi isso antes. Qual é a franquia?")
        session = TrainingSession(lambda: agent, conclusion_delay=0.0)
        session.select_difficulty(Difficulty.HARD)
        session.select_product(Product.INSURANCE)

        status = await session.submit_user_turn("Oferecemos cobertura total.")

        turns = session.conversation.turns
        self.assertIs(status, SubmitStatus.REPLIED)
        self.assertEqual(len(turns), 3)
        self.assertEqual(turns[0].text, greeting(Difficulty.HARD, Product.INSURANCE))
        self.assertEqual([t.role for t in turns], [Role.CUSTOMER, Role.SALESPERSON, Role.CUSTOMER])
        self.assertIs(session.conversation.phase, ConversationPhase.ACTIVE)

    async def test_leaving_during_conclusion_cancels_it(self):
        agent = ScriptedAgent("Tá, fechado. [VENDA_FECHADA]")
        session = TrainingSession(lambda: agent, conclusion_delay=0.05)
        session.select_difficulty(Difficulty.EASY)
        conversation = session.select_product(Product.CHECKING_ACCOUNT)

        await session.submit_user_turn("Conta sem tarifa!")
        session.go_back()
        await asyncio.sleep(0.1)

        self.assertIsNone(conversation.outcome)
        self.assertFalse(any(t.is_terminal for t in conversation.turns))


if __name__ == '__main__':
    unittest.main()
