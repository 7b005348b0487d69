"""
Civic intelligence features built on the grounded-query executor.

Each method supplies a prompt and a response schema, then validates the parsed
JSON into the models in :mod:`accountable.models.intel`. Unparseable or
off-schema output means "no data" (``None`` / empty list), never an exception;
backend failures propagate from the executor unchanged.

The two maps features talk to the primary backend directly (maps grounding
has no fallback) and degrade to a placeholder on any failure.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Callable, List, Literal, Optional, Sequence, Type, TypeVar, Union, get_args, get_origin

import structlog
from pydantic import BaseModel, ValidationError

from ..core.config import GEMINI_MAPS_MODEL
from ..models import intel_schemas as schemas
from ..models.intel import (
    AssistantReply,
    CivicNotification,
    ElectionIntelligence,
    Insight,
    IntelResult,
    LeaderCandidate,
    LeaderLegalStanding,
    LeaderProfile,
    LiveEvent,
    NationalIntel,
    NearbyService,
    PlaceLookup,
    PoliticalPromise,
    PromiseVerification,
    StateIntel,
    TextAnswer,
)
from ..models.query import QueryResult
from ..utils.error_handling import log_exception
from .gemini_client import extract_map_places, maps_tool, maps_tool_config
from .grounded_query import GroundedQueryExecutor

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

PLACE_LOOKUP_UNAVAILABLE = "Location lookup limited."
ASSISTANT_ERROR_TEXT = (
    "I encountered an error. Please ensure your query is related to civic or political matters."
)

_ASSISTANT_INSTRUCTION = """You are the "Civic & Political Intelligence Assistant" for the Accountable India platform.
Your goal is to empower users like {user_name} with knowledge about governance and accountability.

STRICT SCOPE OF OPERATION:
1. CIVIC COMPLAINTS: Help users understand how to report issues like roads, sanitation, or water.
2. POLITICAL ISSUES: Provide data on representative performance, bills, and policy updates.
3. GENERAL QUERIES: Answer basic factual or general knowledge questions.
4. DASHBOARD HELP: Assist with platform navigation.

REJECTION POLICY:
If the user asks about unrelated topics such as cooking, entertainment gossip, complex software coding, personal life advice, or sports scores (unless related to policy), you MUST politely refuse.
Example refusal: "I am specialized in civic and political matters. I cannot assist with that topic, but I can help you verify a political promise or report a local issue."

Current language: {language}. Respond in {language}.
Tone: Professional, neutral, and data-driven."""


def assistant_instruction(user_name: str, language: str) -> str:
    return _ASSISTANT_INSTRUCTION.format(user_name=user_name, language=language)


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) is Union:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _record_model(annotation: Any) -> Optional[Type[BaseModel]]:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    return None


def _prune_records(model: Type[BaseModel], value: Any, *, feature: str) -> Any:
    """Drop off-schema entries from nested record lists ahead of validation.

    A malformed record is removed from its list; the rest of the payload
    still validates.
    """
    if not isinstance(value, dict):
        return value
    pruned = dict(value)
    for name, info in model.model_fields.items():
        raw = pruned.get(name)
        annotation = _unwrap_optional(info.annotation)
        if isinstance(raw, list) and get_origin(annotation) is list:
            args = get_args(annotation)
            item_model = _record_model(args[0]) if args else None
            if item_model is not None:
                pruned[name] = _validate_many(item_model, raw, feature=f"{feature}.{name}")
        elif isinstance(raw, dict):
            nested = _record_model(annotation)
            if nested is not None:
                pruned[name] = _prune_records(nested, raw, feature=f"{feature}.{name}")
    return pruned


def _validate_one(model: Type[M], value: Any, *, feature: str) -> Optional[M]:
    if value is None:
        return None
    try:
        return model.model_validate(_prune_records(model, value, feature=feature))
    except ValidationError as exc:
        logger.warning("Intel payload failed validation", feature=feature, errors=exc.error_count())
        return None


def _validate_many(model: Type[M], value: Any, *, feature: str) -> List[M]:
    """Validate a JSON array item by item, dropping off-schema entries."""
    if not isinstance(value, list):
        if value is not None:
            logger.warning("Intel payload is not a list", feature=feature)
        return []
    items: List[M] = []
    for raw in value:
        item = _validate_one(model, raw, feature=feature)
        if item is not None:
            items.append(item)
    return items


class IntelligenceService:
    def __init__(
        self,
        executor: GroundedQueryExecutor,
        *,
        maps_model: str = GEMINI_MAPS_MODEL,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.executor = executor
        self.maps_model = maps_model
        self._today = today

    def _date_label(self) -> str:
        return self._today().strftime("%d/%m/%Y")

    # ────────────────────────────────────────────────────────────
    #  Elections & leaders
    # ────────────────────────────────────────────────────────────

    async def fetch_election_intelligence(self) -> IntelResult[ElectionIntelligence]:
        result = await self.executor.execute(
            "Find real-time Indian election updates (Upcoming, Ongoing, Past) and current "
            "sentiment/seat trends for major parties. Provide details for Delhi, UP, and "
            "national level where relevant.",
            schemas.ELECTION_INTELLIGENCE,
            use_grounded_search=True,
        )
        return IntelResult[ElectionIntelligence](
            data=_validate_one(ElectionIntelligence, result.parsed_json, feature="elections"),
            sources=result.sources,
            engine_used=result.engine_used,
        )

    async def discover_batch_leaders(self, excluded_names: Sequence[str]) -> List[LeaderCandidate]:
        result = await self.executor.execute(
            "Find 6 prominent Indian political leaders (MPs or MLAs) who are NOT in this list: "
            f"[{', '.join(excluded_names)}]. Respond with ONLY raw JSON array.",
            schemas.LEADER_BATCH,
            use_grounded_search=True,
        )
        return _validate_many(LeaderCandidate, result.parsed_json, feature="leader_batch")

    async def fetch_leader_legal_standing(
        self, name: str, constituency: str
    ) -> Optional[LeaderLegalStanding]:
        result = await self.executor.execute(
            "Analyze legal standing, criminal history, and corruption allegations for Indian "
            f"leader: {name} ({constituency}). Cite sources.",
            schemas.LEGAL_STANDING,
            use_grounded_search=True,
        )
        standing = _validate_one(LeaderLegalStanding, result.parsed_json, feature="legal_standing")
        if standing is None:
            return None
        return standing.model_copy(
            update={
                "lastUpdated": self._date_label(),
                "verificationSources": list(result.sources),
            }
        )

    async def discover_leader_profile(self, name: str) -> Optional[LeaderProfile]:
        result = await self.executor.execute(
            f"Find official political profile for {name} in India.",
            schemas.LEADER_PROFILE,
            use_grounded_search=True,
        )
        return _validate_one(LeaderProfile, result.parsed_json, feature="leader_profile")

    async def search_leader_info(self, query: str) -> TextAnswer:
        result = await self.executor.execute(query, use_grounded_search=True)
        return self._text_answer(result)

    async def compare_leaders(self, leader1: str, leader2: str) -> TextAnswer:
        result = await self.executor.execute(
            f"Side-by-side comparison of {leader1} and {leader2}.",
            use_grounded_search=True,
        )
        return self._text_answer(result)

    # ────────────────────────────────────────────────────────────
    #  Notifications & dashboard
    # ────────────────────────────────────────────────────────────

    async def fetch_civic_notifications(
        self,
        state: Optional[str] = None,
        mode: Literal["Centre", "State"] = "Centre",
        followed_leaders: Optional[Sequence[str]] = None,
    ) -> List[CivicNotification]:
        # mode only labels the dashboard view; a known state always scopes the prompt
        scope = state or "India"
        prompt = f"Generate 4-5 important civic notifications for {scope}. Date: {self._date_label()}"
        if followed_leaders:
            prompt += f" Include updates involving: {', '.join(followed_leaders)}."
        result = await self.executor.execute(
            prompt, schemas.CIVIC_NOTIFICATIONS, use_grounded_search=True
        )
        notifications = _validate_many(CivicNotification, result.parsed_json, feature="notifications")
        return [
            n.model_copy(update={"id": uuid.uuid4().hex[:9], "read": False})
            for n in notifications
        ]

    async def get_dashboard_insights(self, user_name: str) -> List[Insight]:
        # Not grounded: a primary failure propagates to the caller
        result = await self.executor.execute(
            f"Generate 3 short professional Civic Service Insights for {user_name}.",
            schemas.DASHBOARD_INSIGHTS,
        )
        return _validate_many(Insight, result.parsed_json, feature="insights")

    # ────────────────────────────────────────────────────────────
    #  National / state intelligence
    # ────────────────────────────────────────────────────────────

    async def fetch_national_intelligence(self) -> IntelResult[NationalIntel]:
        result = await self.executor.execute(
            "Real-time insights for Central Government of India TODAY.",
            schemas.NATIONAL_INTEL,
            use_grounded_search=True,
        )
        return IntelResult[NationalIntel](
            data=_validate_one(NationalIntel, result.parsed_json, feature="national"),
            sources=result.sources,
            engine_used=result.engine_used,
        )

    async def fetch_state_intelligence(self, state_name: str) -> IntelResult[StateIntel]:
        result = await self.executor.execute(
            f"State governance updates for {state_name} TODAY.",
            schemas.STATE_INTEL,
            use_grounded_search=True,
        )
        return IntelResult[StateIntel](
            data=_validate_one(StateIntel, result.parsed_json, feature="state"),
            sources=result.sources,
            engine_used=result.engine_used,
        )

    # ────────────────────────────────────────────────────────────
    #  Promises & events
    # ────────────────────────────────────────────────────────────

    async def fetch_and_verify_promises(
        self, query: str = "latest political manifestos India"
    ) -> PromiseVerification:
        result = await self.executor.execute(
            f"Search authentic political promises: {query}",
            schemas.POLITICAL_PROMISES,
            use_grounded_search=True,
        )
        return PromiseVerification(
            promises=_validate_many(PoliticalPromise, result.parsed_json, feature="promises"),
            sources=result.sources,
            engine_used=result.engine_used,
        )

    async def fetch_live_events(self) -> IntelResult[List[LiveEvent]]:
        result = await self.executor.execute(
            "10 significant political events happening TODAY in India. Respond with ONLY raw JSON.",
            schemas.LIVE_EVENTS,
            use_grounded_search=True,
        )
        return IntelResult[List[LiveEvent]](
            data=_validate_many(LiveEvent, result.parsed_json, feature="live_events"),
            sources=result.sources,
            engine_used=result.engine_used,
        )

    # ────────────────────────────────────────────────────────────
    #  Maps grounding (primary only)
    # ────────────────────────────────────────────────────────────

    async def search_place_on_maps(
        self,
        query: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> PlaceLookup:
        try:
            response = await self.executor.primary.generate(
                f"Find official Google Maps details for: {query}.",
                model=self.maps_model,
                tools=[maps_tool()],
                tool_config=maps_tool_config(latitude, longitude),
            )
        except Exception as exc:
            log_exception("Maps place lookup failed", exc, query=query[:80])
            return PlaceLookup(text=PLACE_LOOKUP_UNAVAILABLE, maps_links=[])
        return PlaceLookup(
            text=response.text or "",
            maps_links=extract_map_places(response.payload, default_title="Location"),
        )

    async def find_nearby_civic_services(self, latitude: float, longitude: float) -> List[NearbyService]:
        try:
            response = await self.executor.primary.generate(
                "Find 5 nearest civic services near my location.",
                model=self.maps_model,
                tools=[maps_tool()],
                tool_config=maps_tool_config(latitude, longitude),
            )
        except Exception as exc:
            log_exception("Nearby civic services lookup failed", exc)
            return []
        return [
            NearbyService(name=place.title, link=place.uri)
            for place in extract_map_places(response.payload, default_title="Service")
        ]

    @staticmethod
    def _text_answer(result: QueryResult) -> TextAnswer:
        return TextAnswer(text=result.raw_text, sources=result.sources, engine_used=result.engine_used)

    # ────────────────────────────────────────────────────────────
    #  Civic assistant (primary only, no grounding)
    # ────────────────────────────────────────────────────────────

    async def ask_assistant(
        self, message: str, user_name: str = "Citizen", language: str = "en"
    ) -> AssistantReply:
        """One chat turn with the scoped civic assistant.

        Failures degrade to a fixed apology rather than an HTTP error, so the
        chat window always has something to show.
        """
        try:
            response = await self.executor.primary.generate(
                message,
                model=self.executor.default_model,
                system_instruction=assistant_instruction(user_name, language),
            )
        except Exception as exc:
            log_exception("Civic assistant turn failed", exc, language=language)
            return AssistantReply(text=ASSISTANT_ERROR_TEXT, ok=False)
        return AssistantReply(text=response.text or "")
