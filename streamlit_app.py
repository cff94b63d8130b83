from __future__ import annotations

import asyncio
import os
import sys

import streamlit as st
from loguru import logger

from engine.agents import CustomerAgent
from engine.manager import ConversationManager
from engine.personas import (
    DIFFICULTY_DESCRIPTIONS,
    DIFFICULTY_LABELS,
    PRODUCT_DESCRIPTIONS,
    PRODUCT_LABELS,
    difficulty_label,
    product_label,
)
from engine.states import ConversationOutcome, ConversationPhase, Role
from engine.wizard import SelectionStep, TrainingSession


logger.remove()
logger.add(sys.stderr, level=os.getenv("LOG_LEVEL", "INFO"), format="{time:HH:mm:ss} | {level} | {message}")


def _conclusion_delay() -> float:
    try:
        return float(os.getenv("CONCLUSION_DELAY_SECONDS", "0.5"))
    except ValueError:
        return 0.5


def get_session() -> TrainingSession:
    if "session" not in st.session_state:
        st.session_state["session"] = TrainingSession(CustomerAgent, conclusion_delay=_conclusion_delay())
    return st.session_state["session"]


def _queue_notice(notice: str) -> None:
    # Rendered on the next rerun
    st.session_state.setdefault("_notices", []).append(notice)


async def _submit_and_settle(conversation: ConversationManager, text: str) -> None:
    await conversation.submit_user_turn(text)
    await conversation.settle()


st.set_page_config(page_title="Simulador de Vendas Bancário", page_icon="🏦", layout="centered")
session = get_session()

if session.step is SelectionStep.DIFFICULTY:
    st.title("Simulador de Vendas Bancário")
    st.caption("Escolha o nível de dificuldade para iniciar sua simulação")
    cols = st.columns(len(DIFFICULTY_LABELS))
    for col, (difficulty, label) in zip(cols, DIFFICULTY_LABELS.items()):
        with col:
            st.subheader(label)
            st.write(DIFFICULTY_DESCRIPTIONS[difficulty])
            if st.button("Selecionar", key=f"difficulty_{difficulty.value}", use_container_width=True):
                session.select_difficulty(difficulty)
                st.rerun()

elif session.step is SelectionStep.PRODUCT:
    if st.button("← Voltar"):
        session.go_back()
        st.rerun()
    st.title("Qual produto você vai vender?")
    st.caption(f"{difficulty_label(session.difficulty)} · Escolha o produto para simular a venda")
    cols = st.columns(3)
    for i, (product, label) in enumerate(PRODUCT_LABELS.items()):
        with cols[i % 3]:
            st.subheader(label)
            st.write(PRODUCT_DESCRIPTIONS[product])
            if st.button("Selecionar", key=f"product_{product.value}", use_container_width=True):
                conversation = session.select_product(product)
                conversation.subscribe_notices(_queue_notice)
                st.rerun()

else:
    conversation = session.conversation
    snap = conversation.snapshot()
    for notice in st.session_state.pop("_notices", []):
        st.toast(notice, icon="⚠️")
    if st.button("← Voltar"):
        session.go_back()
        st.rerun()
    st.title(difficulty_label(snap.difficulty))
    st.caption(f"Simulação de Vendas · {product_label(snap.product)}")

    for turn in snap.turns:
        if turn.is_terminal:
            if turn.outcome is ConversationOutcome.SOLD:
                st.success(turn.text)
            else:
                st.error(turn.text)
            continue
        role = "user" if turn.role is Role.SALESPERSON else "assistant"
        with st.chat_message(role, avatar="🧑‍💼" if role == "user" else "🙋"):
            st.markdown(turn.text)

    prompt = st.chat_input(
        "Digite sua resposta como vendedor...",
        disabled=snap.phase is not ConversationPhase.ACTIVE,
    )
    if prompt:
        with st.chat_message("user", avatar="🧑‍💼"):
            st.markdown(prompt)
        with st.spinner("Digitando..."):
            asyncio.run(_submit_and_settle(conversation, prompt))
        st.rerun()
