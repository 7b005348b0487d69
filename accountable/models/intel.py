"""
Result models for the civic intelligence features.

Field names mirror the JSON the response schemas ask the backends for
(camelCase), so parsed payloads validate without renaming.
"""

from __future__ import annotations

from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .query import Citation, Engine

T = TypeVar("T")


class IntelModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class IntelResult(BaseModel, Generic[T]):
    data: Optional[T] = None
    sources: List[Citation] = Field(default_factory=list)
    engine_used: Optional[Engine] = None


class TextAnswer(BaseModel):
    text: str = ""
    sources: List[Citation] = Field(default_factory=list)
    engine_used: Optional[Engine] = None


# ────────────────────────────────────────────────────────────
#  Elections
# ────────────────────────────────────────────────────────────

class SeatResult(IntelModel):
    party: str
    seats: float
    totalSeats: float
    color: str


class ElectionRecord(IntelModel):
    id: str
    title: str
    status: Literal["Upcoming", "Ongoing", "Past"]
    date: str
    type: str
    location: str
    description: str
    results: Optional[List[SeatResult]] = None


class ElectionTrend(IntelModel):
    party: str
    currentSentiment: float
    predictedSeats: float
    pastSeats: float


class ElectionIntelligence(IntelModel):
    records: List[ElectionRecord]
    trends: List[ElectionTrend]


# ────────────────────────────────────────────────────────────
#  Leaders
# ────────────────────────────────────────────────────────────

class LeaderCandidate(IntelModel):
    name: str
    role: str
    party: str
    constituency: str
    state: str
    sinceYear: Optional[float] = None


class LeaderProfile(LeaderCandidate):
    attendance: Optional[float] = None
    bills: Optional[float] = None
    debates: Optional[float] = None
    questions: Optional[float] = None


class LeaderLegalStanding(IntelModel):
    totalCases: float
    seriousCriminalCases: float
    jailHistory: str
    corruptionAllegations: List[str]
    justification: str
    lastUpdated: str = ""
    verificationSources: List[Citation] = Field(default_factory=list)


# ────────────────────────────────────────────────────────────
#  Notifications, insights, promises, events
# ────────────────────────────────────────────────────────────

class CivicNotification(IntelModel):
    id: str = ""
    title: str
    message: str
    category: str
    urgency: Literal["low", "medium", "high"]
    source: str
    timestamp: str
    read: bool = False


class Insight(IntelModel):
    topic: str
    summary: str


class PoliticalPromise(IntelModel):
    title: str
    description: str
    authority: str
    party: str
    status: str
    category: str
    sourceUrl: str


class PromiseVerification(BaseModel):
    promises: List[PoliticalPromise] = Field(default_factory=list)
    sources: List[Citation] = Field(default_factory=list)
    engine_used: Optional[Engine] = None


class LiveEvent(IntelModel):
    id: Optional[str] = None
    title: str
    description: str
    category: str
    status: str
    date: str
    time: str
    views: Optional[float] = None
    highlights: List[str]


# ────────────────────────────────────────────────────────────
#  National / state intelligence
# ────────────────────────────────────────────────────────────

class Scheme(IntelModel):
    title: str
    status: str
    impact: str


class ParliamentEvent(IntelModel):
    event: str
    description: str
    date: str


class NationalProject(IntelModel):
    project: str
    progress: float
    details: str


class MinistryDecision(IntelModel):
    ministry: str
    decision: str


class ImpactSummary(IntelModel):
    summary: str
    highlights: List[str]


class NationalIntel(IntelModel):
    schemes: List[Scheme]
    parliament: List[ParliamentEvent]
    infrastructure: List[NationalProject]
    decisions: List[MinistryDecision]
    impact: ImpactSummary


class StateInitiative(IntelModel):
    title: str
    status: str
    citizenImpact: str


class DepartmentPerformance(IntelModel):
    department: str
    score: float
    status: str
    summary: str


class StateProject(IntelModel):
    project: str
    progress: float
    delayReason: Optional[str] = None
    impact: str


class SafetyOverview(IntelModel):
    overview: str
    alerts: List[str]


class LocalIssue(IntelModel):
    issue: str
    ward: str
    urgency: str


class StateIntel(IntelModel):
    initiatives: List[StateInitiative]
    performance: DepartmentPerformance
    infrastructure: List[StateProject]
    safety: SafetyOverview
    localIssues: List[LocalIssue]


# ────────────────────────────────────────────────────────────
#  Maps
# ────────────────────────────────────────────────────────────

class PlaceLookup(BaseModel):
    text: str
    maps_links: List[Citation] = Field(default_factory=list)


class NearbyService(BaseModel):
    name: str
    link: str


# ────────────────────────────────────────────────────────────
#  Civic assistant
# ────────────────────────────────────────────────────────────

class AssistantRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    user_name: str = "Citizen"
    language: Literal["en", "hi"] = "en"


class AssistantReply(BaseModel):
    text: str
    ok: bool = True
