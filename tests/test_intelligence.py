from datetime import date

import pytest

from accountable.models.intel import CivicNotification, LeaderLegalStanding
from accountable.models.query import Citation, Engine
from accountable.services.intelligence import ASSISTANT_ERROR_TEXT, PLACE_LOOKUP_UNAVAILABLE, IntelligenceService
from accountable.services.search_apis import SearchResult
from accountable.utils.error_handling import PrimaryBackendError


@pytest.fixture
def service(executor):
    return IntelligenceService(executor, maps_model="gemini-maps-test", today=lambda: date(2025, 1, 26))


def _notification(**overrides):
    data = {
        "title": "Republic Day traffic advisory",
        "message": "Rajpath closed from 6am",
        "category": "Traffic",
        "urgency": "medium",
        "source": "Delhi Traffic Police",
        "timestamp": "2025-01-26T06:00:00Z",
    }
    data.update(overrides)
    return data


@pytest.mark.asyncio
async def test_notifications_get_ids_and_drop_invalid_entries(service, primary):
    primary.respond_json([_notification(), _notification(urgency="catastrophic"), _notification(title="Metro timings")])

    notifications = await service.fetch_civic_notifications("Delhi", "State")

    assert [n.title for n in notifications] == ["Republic Day traffic advisory", "Metro timings"]
    assert all(isinstance(n, CivicNotification) for n in notifications)
    assert all(len(n.id) == 9 and not n.read for n in notifications)
    assert notifications[0].id != notifications[1].id
    call = primary.calls[0]
    assert call["prompt"] == "Generate 4-5 important civic notifications for Delhi. Date: 26/01/2025"
    assert call["tools"] == [{"google_search": {}}]


@pytest.mark.asyncio
async def test_notifications_default_scope_and_followed_leaders(service, primary):
    primary.respond_json([])

    await service.fetch_civic_notifications(followed_leaders=["A. Leader", "B. Leader"])

    prompt = primary.calls[0]["prompt"]
    assert prompt.startswith("Generate 4-5 important civic notifications for India.")
    assert prompt.endswith("Include updates involving: A. Leader, B. Leader.")


@pytest.mark.asyncio
async def test_unparseable_notifications_are_empty(service, primary):
    primary.respond("no json today")

    assert await service.fetch_civic_notifications() == []


@pytest.mark.asyncio
async def test_legal_standing_stamped_with_date_and_sources(service, primary):
    primary.respond_json(
        {
            "totalCases": 2,
            "seriousCriminalCases": 0,
            "jailHistory": "None",
            "corruptionAllegations": ["Land allotment case (closed)"],
            "justification": "Per affidavit filed with ECI",
        },
        [{"web": {"title": "MyNeta", "uri": "https://myneta.info/x"}}],
    )

    standing = await service.fetch_leader_legal_standing("A. Leader", "Varanasi")

    assert isinstance(standing, LeaderLegalStanding)
    assert standing.totalCases == 2
    assert standing.lastUpdated == "26/01/2025"
    assert standing.verificationSources == [Citation(title="MyNeta", uri="https://myneta.info/x")]
    assert "A. Leader (Varanasi)" in primary.calls[0]["prompt"]


@pytest.mark.asyncio
async def test_legal_standing_missing_fields_is_none(service, primary):
    primary.respond_json({"totalCases": 1})

    assert await service.fetch_leader_legal_standing("X", "Y") is None


@pytest.mark.asyncio
async def test_election_intelligence_via_fallback(service, primary, search, fallback_llm):
    primary.error = PrimaryBackendError("unavailable", provider="gemini", status=503)
    search.results = [SearchResult(title="ECI schedule", link="https://eci.gov.in/s")]
    fallback_llm.text = (
        '{"records": [{"id": "dl-2025", "title": "Delhi Assembly", "status": "Upcoming",'
        ' "date": "2025-02-05", "type": "Assembly", "location": "Delhi", "description": "70 seats"}],'
        ' "trends": [{"party": "AAP", "currentSentiment": 41.5, "predictedSeats": 30, "pastSeats": 62}]}'
    )

    result = await service.fetch_election_intelligence()

    assert result.engine_used is Engine.FALLBACK
    assert result.data.records[0].status == "Upcoming"
    assert result.data.trends[0].pastSeats == 62
    assert result.sources == [Citation(title="ECI schedule", uri="https://eci.gov.in/s")]


@pytest.mark.asyncio
async def test_batch_leaders_prompt_lists_exclusions(service, primary):
    primary.respond_json(
        [{"name": "N", "role": "MP", "party": "P", "constituency": "C", "state": "S", "sinceYear": 2019}]
    )

    leaders = await service.discover_batch_leaders(["Old One", "Old Two"])

    assert leaders[0].sinceYear == 2019
    assert "NOT in this list: [Old One, Old Two]" in primary.calls[0]["prompt"]


@pytest.mark.asyncio
async def test_dashboard_insights_are_not_grounded(service, primary, search):
    primary.error = PrimaryBackendError("down", provider="gemini")

    with pytest.raises(PrimaryBackendError):
        await service.get_dashboard_insights("Asha")

    assert primary.calls[0]["tools"] is None
    assert search.calls == []


@pytest.mark.asyncio
async def test_compare_leaders_returns_text_and_sources(service, primary):
    primary.respond("A vs B", [{"web": {"title": "PRS", "uri": "https://prsindia.org"}}])

    answer = await service.compare_leaders("A", "B")

    assert answer.text == "A vs B"
    assert answer.sources[0].title == "PRS"
    assert primary.calls[0]["prompt"] == "Side-by-side comparison of A and B."


@pytest.mark.asyncio
async def test_promises_default_query(service, primary):
    primary.respond_json([])

    verification = await service.fetch_and_verify_promises()

    assert verification.promises == []
    assert primary.calls[0]["prompt"] == "Search authentic political promises: latest political manifestos India"


@pytest.mark.asyncio
async def test_live_events_accept_fenced_json(service, primary):
    primary.respond(
        '```json\n[{"title": "Budget session", "description": "d", "category": "Parliament",'
        ' "status": "Live", "date": "today", "time": "11:00", "highlights": ["Q&A"]}]\n```'
    )

    result = await service.fetch_live_events()

    assert result.data[0].title == "Budget session"
    assert result.data[0].views is None


@pytest.mark.asyncio
async def test_state_intelligence_prompt(service, primary):
    primary.respond("not json")

    result = await service.fetch_state_intelligence("Kerala")

    assert result.data is None
    assert primary.calls[0]["prompt"] == "State governance updates for Kerala TODAY."


@pytest.mark.asyncio
async def test_place_search_uses_maps_model(service, primary):
    primary.respond(
        "The Collectorate is on MG Road.",
        [{"maps": {"title": "District Collectorate", "uri": "https://maps.google.com/?cid=9"}}],
    )

    lookup = await service.search_place_on_maps("Collectorate Pune", 18.52, 73.85)

    assert lookup.text == "The Collectorate is on MG Road."
    assert lookup.maps_links == [Citation(title="District Collectorate", uri="https://maps.google.com/?cid=9")]
    call = primary.calls[0]
    assert call["model"] == "gemini-maps-test"
    assert call["tools"] == [{"google_maps": {}}]
    assert call["tool_config"]["retrievalConfig"]["latLng"] == {"latitude": 18.52, "longitude": 73.85}


@pytest.mark.asyncio
async def test_place_search_failure_degrades(service, primary, search):
    primary.error = PrimaryBackendError("down", provider="gemini")

    lookup = await service.search_place_on_maps("anything")

    assert lookup.text == PLACE_LOOKUP_UNAVAILABLE
    assert lookup.maps_links == []
    assert search.calls == []


@pytest.mark.asyncio
async def test_nearby_services(service, primary):
    primary.respond(
        "Here are services.",
        [
            {"maps": {"uri": "https://maps.google.com/?cid=1"}},
            {"maps": {"title": "Post Office", "uri": "https://maps.google.com/?cid=2"}},
        ],
    )

    services = await service.find_nearby_civic_services(12.97, 77.59)

    assert [(s.name, s.link) for s in services] == [
        ("Service", "https://maps.google.com/?cid=1"),
        ("Post Office", "https://maps.google.com/?cid=2"),
    ]


@pytest.mark.asyncio
async def test_nearby_services_failure_is_empty(service, primary):
    primary.error = RuntimeError("boom")

    assert await service.find_nearby_civic_services(0.0, 0.0) == []


@pytest.mark.asyncio
async def test_national_intelligence(service, primary):
    primary.respond_json(
        {
            "schemes": [{"title": "PM-KISAN", "status": "Active", "impact": "11 crore farmers"}],
            "parliament": [{"event": "Budget Session", "description": "Day 3", "date": "2025-02-03"}],
            "infrastructure": [{"project": "Mumbai-Ahmedabad HSR", "progress": 45, "details": "Viaducts"}],
            "decisions": [{"ministry": "Finance", "decision": "Revised tax slabs"}],
            "impact": {"summary": "Rural focus", "highlights": ["MSP hike"]},
        }
    )

    result = await service.fetch_national_intelligence()

    assert result.engine_used is Engine.PRIMARY
    assert result.data.infrastructure[0].progress == 45
    assert result.data.impact.highlights == ["MSP hike"]


@pytest.mark.asyncio
async def test_search_leader_info_passes_query_verbatim(service, primary):
    primary.respond("Profile text")

    answer = await service.search_leader_info("Who represents Wayanad?")

    assert answer.text == "Profile text"
    assert primary.calls[0]["prompt"] == "Who represents Wayanad?"
    assert primary.calls[0]["tools"] == [{"google_search": {}}]


@pytest.mark.asyncio
async def test_notifications_centre_mode_keeps_user_state(service, primary):
    primary.respond_json([])

    await service.fetch_civic_notifications("Delhi", "Centre")

    assert "civic notifications for Delhi." in primary.calls[0]["prompt"]


def _election_record(**overrides):
    record = {
        "id": "up-2027",
        "title": "Uttar Pradesh Assembly",
        "status": "Upcoming",
        "date": "2027-02-10",
        "type": "Assembly",
        "location": "Uttar Pradesh",
        "description": "403 seats",
    }
    record.update(overrides)
    return record


@pytest.mark.asyncio
async def test_election_off_schema_record_dropped_not_whole_payload(service, primary):
    primary.respond_json(
        {
            "records": [
                _election_record(),
                _election_record(id="bihar-2020", status="Completed"),
                _election_record(
                    id="dl-2025",
                    status="Past",
                    results=[
                        {"party": "BJP", "seats": 48, "totalSeats": 70, "color": "#f97316"},
                        {"party": "AAP", "seats": "many"},
                    ],
                ),
            ],
            "trends": [
                {"party": "INC", "currentSentiment": 22, "predictedSeats": 40, "pastSeats": 52},
                {"party": "Unknown"},
            ],
        }
    )

    result = await service.fetch_election_intelligence()

    assert result.data is not None
    assert [r.id for r in result.data.records] == ["up-2027", "dl-2025"]
    assert [s.party for s in result.data.records[1].results] == ["BJP"]
    assert [t.party for t in result.data.trends] == ["INC"]


@pytest.mark.asyncio
async def test_state_intel_keeps_valid_sections(service, primary):
    primary.respond_json(
        {
            "initiatives": [{"title": "Kudumbashree 2.0", "status": "Active", "citizenImpact": "SHG credit"}, {"title": 5}],
            "performance": {"department": "Health", "score": 82, "status": "Good", "summary": "OPD up"},
            "infrastructure": [{"project": "Vizhinjam port", "progress": 70, "impact": "Trade"}],
            "safety": {"overview": "Monsoon alerts", "alerts": ["Orange alert in Idukki"]},
            "localIssues": [{"issue": "Waterlogging", "ward": "Ward 14", "urgency": "high"}],
        }
    )

    result = await service.fetch_state_intelligence("Kerala")

    assert [i.title for i in result.data.initiatives] == ["Kudumbashree 2.0"]
    assert result.data.infrastructure[0].delayReason is None


@pytest.mark.asyncio
async def test_live_events_with_prose_before_fence(service, primary):
    primary.respond(
        'Here are the events:\n```json\n[{"title": "Question Hour", "description": "d", "category": "Parliament",'
        ' "status": "Live", "date": "today", "time": "11:00", "highlights": []}]\n```\nLet me know if you need more.'
    )

    result = await service.fetch_live_events()

    assert len(result.data) == 1
    assert result.data[0].title == "Question Hour"


@pytest.mark.asyncio
async def test_assistant_sends_scoped_instruction(service, primary):
    primary.respond("File a complaint with your ward office.")

    reply = await service.ask_assistant("How do I report a pothole?", "Asha Verma", "hi")

    assert reply.ok
    assert reply.text == "File a complaint with your ward office."
    call = primary.calls[0]
    assert call["prompt"] == "How do I report a pothole?"
    assert call["model"] == "gemini-test"
    assert call["tools"] is None
    instruction = call["system_instruction"]
    assert "Civic & Political Intelligence Assistant" in instruction
    assert "users like Asha Verma" in instruction
    assert "REJECTION POLICY" in instruction
    assert "Respond in hi." in instruction


@pytest.mark.asyncio
async def test_assistant_failure_degrades_to_apology(service, primary, search):
    primary.error = PrimaryBackendError("quota", provider="gemini", status=429)

    reply = await service.ask_assistant("Who is my MLA?")

    assert not reply.ok
    assert reply.text == ASSISTANT_ERROR_TEXT
    assert search.calls == []
