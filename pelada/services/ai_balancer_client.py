"""
Client for AI-assisted team balancing (Gemini generateContent REST API).

Used only as an alternative input to the balancer: the answer is a proposed
split by player name plus an explanation, and any failure is raised as
ExternalServiceError so the caller can fall back to TeamBalancer.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..models import MatchResult, Player, newest_first
from ..utils import config
from ..utils.constants import AI_HISTORY_MATCHES
from .errors import ExternalServiceError

logger = logging.getLogger(__name__)

BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "teamA": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Every player of Team A (starters and reserves)",
        },
        "teamB": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Every player of Team B (starters and reserves)",
        },
        "reasoning": {
            "type": "STRING",
            "description": "Short explanation of the split",
        },
    },
    "required": ["teamA", "teamB", "reasoning"],
}


@dataclass
class AiTeamProposal:
    """Split proposed by the AI service, by display name."""
    team_a: List[str] = field(default_factory=list)
    team_b: List[str] = field(default_factory=list)
    reasoning: str = ""


def build_prompt(
    players: Sequence[Player],
    players_per_team: int,
    history: Sequence[MatchResult],
    tactical_schema: str,
) -> str:
    """Describe the pool, recent rosters and the balancing rules."""
    player_lines = "\n".join(
        f"- {p.name} (positions: {', '.join(pos.value for pos in p.positions)} | "
        f"rank: {p.stats.points} pts | membership: {p.membership.value})"
        for p in players
    )

    recent = newest_first(list(history))[:AI_HISTORY_MATCHES]
    if recent:
        history_text = "\n".join(
            f"Match {i + 1} ({m.date[:10]}): "
            f"[Team A: {', '.join(p.name for p in m.team_a)}] vs "
            f"[Team B: {', '.join(p.name for p in m.team_b)}]"
            for i, m in enumerate(recent)
        )
    else:
        history_text = "No recent matches."

    return f"""
Act as an experienced football coach. {len(players)} players are present.
Split ALL of them into two squads (Team A and Team B) as evenly as possible.

The on-field limit is {players_per_team} per team, but every available player must be
placed in a squad. Starters are chosen afterwards by arrival order; your job is only to
balance the squads (starters plus reserves).

AVAILABLE PLAYERS:
{player_lines}

RECENT MATCHES:
{history_text}

TARGET SHAPE (Defender-FullBack-Midfielder-Forward): {tactical_schema}

RULES:
1. Every listed name must appear in Team A or Team B, exactly as written.
2. Spread goalkeepers, defenders, midfielders and forwards evenly, and spread the
   highest ranked players evenly.
3. Avoid repeating the squads of the recent matches and split up usual groups.
4. Answer with the JSON object only, plus a brief reasoning.
""".strip()


class AiBalancingClient:
    """Synchronous client for the Gemini generateContent endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self._api_key = api_key if api_key is not None else config.get_gemini_api_key()
        self.model = model or config.get_gemini_model()
        self.timeout = timeout if timeout is not None else config.get_ai_timeout()
        self._session = session

    @property
    def available(self) -> bool:
        return bool(self._api_key)

    def _post(self, url: str, payload: Dict[str, Any]) -> requests.Response:
        poster = self._session.post if self._session is not None else requests.post
        return poster(
            url,
            json=payload,
            headers={"x-goog-api-key": self._api_key or ""},
            timeout=self.timeout,
        )

    def generate_teams(
        self,
        players: Sequence[Player],
        players_per_team: int,
        history: Sequence[MatchResult],
        tactical_schema: str,
    ) -> AiTeamProposal:
        """
        Ask the AI service for a roster split.

        Raises:
            ExternalServiceError: If the key is missing, the request fails or
                times out, or the answer is not the expected JSON object
        """
        if not self._api_key:
            raise ExternalServiceError("GEMINI_API_KEY is not configured")

        payload = {
            "contents": [{"parts": [{"text": build_prompt(players, players_per_team, history, tactical_schema)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }
        url = f"{BASE_URL}/{self.model}:generateContent"

        try:
            response = self._post(url, payload)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.warning("AI balancing request failed: %s", e)
            raise ExternalServiceError(f"AI service request failed: {e}") from e
        except ValueError as e:
            raise ExternalServiceError("AI service returned invalid JSON") from e

        proposal = self._parse_response(data)
        logger.info(
            "AI proposed %s x %s players with model %s",
            len(proposal.team_a), len(proposal.team_b), self.model,
        )
        return proposal

    @staticmethod
    def _parse_response(data: Dict[str, Any]) -> AiTeamProposal:
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ExternalServiceError("No response from AI service") from e
        if not text:
            raise ExternalServiceError("No response from AI service")

        try:
            body = json.loads(text)
        except ValueError as e:
            raise ExternalServiceError("AI answer is not valid JSON") from e

        if not isinstance(body, dict):
            raise ExternalServiceError("AI answer is not a JSON object")
        team_a = body.get("teamA")
        team_b = body.get("teamB")
        if not isinstance(team_a, list) or not isinstance(team_b, list):
            raise ExternalServiceError("AI answer is missing the team lists")

        return AiTeamProposal(
            team_a=[str(name) for name in team_a],
            team_b=[str(name) for name in team_b],
            reasoning=str(body.get("reasoning") or ""),
        )
