"""Tests for agent implementations (base + debater)."""

from __future__ import annotations

import pytest

from agents.base import (
    AgentResponse,
    AgentRole,
    BaseAgent,
    DebateConfig,
    DebateState,
    Phase,
    Side,
    Utterance,
)
from agents.debater import FAILURE_NOTICE, SURRENDER_MESSAGES, Debater
from agents.errors import EmptyResponse, GatewayTimeout, InvalidConfig
from agents.prompts import build_strategy
from tests.conftest import MockProvider, Stall


@pytest.fixture
def opening_state() -> DebateState:
    config = DebateConfig(topic="Should AI be regulated?", total_rounds=3)
    return DebateState.from_transcript(config, [], Side.PRO, 1)


class TestSide:
    def test_opponent(self):
        assert Side.PRO.opponent is Side.CON
        assert Side.CON.opponent is Side.PRO

    def test_label(self):
        assert Side.PRO.label == "PRO"


class TestPhase:
    @pytest.mark.parametrize(
        "round_number,total,expected",
        [
            (1, 1, Phase.OPENING),
            (1, 3, Phase.OPENING),
            (2, 3, Phase.REBUTTAL),
            (3, 3, Phase.CLOSING),
            (2, 2, Phase.CLOSING),
        ],
    )
    def test_for_round(self, round_number, total, expected):
        assert Phase.for_round(round_number, total) is expected


class TestDebateConfig:
    def test_valid(self):
        config = DebateConfig(topic="Topic", total_rounds=5)
        assert config.total_rounds == 5

    @pytest.mark.parametrize("topic", ["", "   "])
    def test_blank_topic_rejected(self, topic):
        with pytest.raises(InvalidConfig, match="topic"):
            DebateConfig(topic=topic, total_rounds=3)

    @pytest.mark.parametrize("rounds", [0, 6, -1, 2.5, True, "3"])
    def test_bad_round_count_rejected(self, rounds):
        with pytest.raises(InvalidConfig, match="total_rounds"):
            DebateConfig(topic="Topic", total_rounds=rounds)

    def test_immutable(self):
        config = DebateConfig(topic="Topic", total_rounds=2)
        with pytest.raises(AttributeError):
            config.total_rounds = 3  # type: ignore[misc]


class TestUtterance:
    def test_dict_round_trip(self):
        utterance = Utterance(Side.CON, "I yield.", 2, is_concession=True)
        data = utterance.to_dict()
        assert data == {"side": "CON", "text": "I yield.", "round": 2, "isConcession": True}
        assert Utterance.from_dict(data) == utterance


class TestBaseAgent:
    @pytest.mark.asyncio
    async def test_generate_response_returns_agent_response(self, mock_provider):
        agent = BaseAgent(role=AgentRole.PRO, provider=mock_provider)
        resp = await agent.generate_response("instruction", "prompt", round_number=2)
        assert isinstance(resp, AgentResponse)
        assert resp.role == AgentRole.PRO
        assert resp.provider == "mock"
        assert resp.round == 2

    @pytest.mark.asyncio
    async def test_messages_are_system_then_user(self, mock_provider):
        agent = BaseAgent(role=AgentRole.CON, provider=mock_provider)
        await agent.generate_response("the instruction", "the prompt")
        messages = mock_provider.call_log[0]["messages"]
        assert messages == [
            {"role": "system", "content": "the instruction"},
            {"role": "user", "content": "the prompt"},
        ]

    @pytest.mark.asyncio
    async def test_total_tokens_tracked(self, mock_provider):
        agent = BaseAgent(role=AgentRole.PRO, provider=mock_provider)
        await agent.generate_response("i", "p")
        assert agent.total_tokens_used > 0

    def test_agent_id_auto_generated(self, mock_provider):
        agent = BaseAgent(role=AgentRole.PRO, provider=mock_provider)
        assert agent.agent_id.startswith("pro_")
        assert len(agent.agent_id) > len("pro_")

    def test_repr(self, mock_provider):
        r = repr(BaseAgent(role=AgentRole.JUDGE, provider=mock_provider))
        assert "BaseAgent" in r
        assert "judge" in r


class TestDebater:
    @pytest.mark.asyncio
    async def test_turn_uses_strategy_and_normalizes(self, opening_state):
        provider = MockProvider(responses=["PRO: regulation keeps people safe"])
        debater = Debater(Side.PRO, provider)
        resp = await debater.process_turn(opening_state)

        assert resp.content == "Regulation keeps people safe."
        assert resp.role == AgentRole.PRO
        assert resp.metadata["phase"] == "opening"
        system = provider.call_log[0]["messages"][0]
        assert system == {"role": "system", "content": build_strategy(opening_state)}

    @pytest.mark.asyncio
    async def test_sampling_parameters_forwarded(self, opening_state):
        provider = MockProvider()
        debater = Debater(Side.PRO, provider, temperature=0.6, max_tokens=120)
        await debater.process_turn(opening_state)
        assert provider.call_log[0]["temperature"] == 0.6
        assert provider.call_log[0]["max_tokens"] == 120

    @pytest.mark.asyncio
    async def test_wrong_side_rejected(self, mock_provider, opening_state):
        debater = Debater(Side.CON, mock_provider)
        with pytest.raises(ValueError):
            await debater.process_turn(opening_state)

    @pytest.mark.asyncio
    async def test_timeout_propagates(self, opening_state):
        debater = Debater(Side.PRO, MockProvider(responses=[Stall(seconds=1.0)]))
        with pytest.raises(GatewayTimeout):
            await debater.process_turn(opening_state, timeout=0.01)

    @pytest.mark.asyncio
    async def test_label_only_reply_is_empty(self, opening_state):
        debater = Debater(Side.PRO, MockProvider(responses=["PRO:"]))
        with pytest.raises(EmptyResponse):
            await debater.process_turn(opening_state)

    def test_fixed_messages(self, mock_provider):
        pro = Debater(Side.PRO, mock_provider)
        con = Debater(Side.CON, mock_provider)
        assert pro.surrender_message() == SURRENDER_MESSAGES[Side.PRO]
        assert con.surrender_message() == SURRENDER_MESSAGES[Side.CON]
        assert con.failure_notice() == FAILURE_NOTICE.format(side="CON")
