"""
Synthetic inter-agent message traffic.

Populates the communication visualizations with plausible messages.
The output is decorative: timestamps are borrowed from random actions
and nothing here influences actions or metrics.
"""

import logging
import random
from collections.abc import Sequence

from crossarb.config.constants import (
    DEFAULT_MESSAGE_COUNT,
    MESSAGE_LATENCY_MAX_MS,
    MESSAGE_PRICE_RANGE,
    TICK_LIQUIDITY_RANGE,
)
from crossarb.core.types import AgentAction, AgentCommunication, MessageType


logger = logging.getLogger(__name__)

MESSAGE_TYPES: tuple[MessageType, ...] = tuple(MessageType)


class CommunicationSynthesizer:
    """
    Generates non-authoritative agent messages.

    Sender and receiver are drawn uniformly from the agents present in
    the action set (receiver resampled until it differs), message
    timestamps from a uniformly chosen action.
    """

    def __init__(self, rng: random.Random) -> None:
        self._rng = rng

    def _content(self, message_type: MessageType) -> str:
        """Render message text for a type."""
        rng = self._rng
        if message_type is MessageType.PRICE_UPDATE:
            return f"Price update: {rng.uniform(*MESSAGE_PRICE_RANGE)}"
        if message_type is MessageType.VOLUME_INTENT:
            return f"Intent to trade {round(rng.random() * 10)} units"
        if message_type is MessageType.EXECUTION_REPORT:
            return (
                f"Executed {round(rng.random() * 5)} units "
                f"at {rng.uniform(*MESSAGE_PRICE_RANGE)}"
            )
        return f"Current liquidity: {rng.uniform(*TICK_LIQUIDITY_RANGE)}"

    def synthesize(
        self,
        actions: Sequence[AgentAction],
        count: int = DEFAULT_MESSAGE_COUNT,
    ) -> list[AgentCommunication]:
        """
        Generate ``count`` messages for an action set.

        Args:
            actions: Actions providing agents and timestamps.
            count: Number of messages.

        Returns:
            Messages sorted by timestamp. Empty when fewer than two
            distinct agents exist.
        """
        agents = list(dict.fromkeys(a.agent for a in actions))
        if count <= 0 or len(agents) < 2:
            return []

        rng = self._rng
        messages: list[AgentCommunication] = []

        for _ in range(count):
            sender_idx = rng.randrange(len(agents))
            receiver_idx = rng.randrange(len(agents))
            while receiver_idx == sender_idx:
                receiver_idx = rng.randrange(len(agents))

            timestamp = actions[rng.randrange(len(actions))].timestamp
            message_type = rng.choice(MESSAGE_TYPES)

            messages.append(
                AgentCommunication(
                    timestamp=timestamp,
                    sender=agents[sender_idx],
                    receiver=agents[receiver_idx],
                    message_type=message_type,
                    content=self._content(message_type),
                    latency_ms=rng.random() * MESSAGE_LATENCY_MAX_MS,
                )
            )

        messages.sort(key=lambda m: m.timestamp)
        logger.debug(f"Synthesized {len(messages)} messages between {len(agents)} agents")
        return messages
