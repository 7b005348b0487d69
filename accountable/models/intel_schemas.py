"""Response schemas requested by the intelligence features."""

from __future__ import annotations

from .schema import arr, number, obj, string

ELECTION_INTELLIGENCE = obj({
    "records": arr(obj(
        {
            "id": string(),
            "title": string(),
            "status": string(enum=["Upcoming", "Ongoing", "Past"]),
            "date": string(),
            "type": string(),
            "location": string(),
            "description": string(),
            "results": arr(obj({
                "party": string(),
                "seats": number(),
                "totalSeats": number(),
                "color": string(),
            })),
        },
        required=["id", "title", "status", "date", "type", "location", "description"],
    )),
    "trends": arr(obj({
        "party": string(),
        "currentSentiment": number(),
        "predictedSeats": number(),
        "pastSeats": number(),
    })),
})

LEADER_BATCH = arr(obj({
    "name": string(),
    "role": string(),
    "party": string(),
    "constituency": string(),
    "state": string(),
    "sinceYear": number(),
}))

LEGAL_STANDING = obj({
    "totalCases": number(),
    "seriousCriminalCases": number(),
    "jailHistory": string(),
    "corruptionAllegations": arr(string()),
    "justification": string(),
})

CIVIC_NOTIFICATIONS = arr(obj({
    "title": string(),
    "message": string(),
    "category": string(),
    "urgency": string(enum=["low", "medium", "high"]),
    "source": string(),
    "timestamp": string(),
}))

DASHBOARD_INSIGHTS = arr(obj({
    "topic": string(),
    "summary": string(),
}))

NATIONAL_INTEL = obj({
    "schemes": arr(obj({"title": string(), "status": string(), "impact": string()})),
    "parliament": arr(obj({"event": string(), "description": string(), "date": string()})),
    "infrastructure": arr(obj({"project": string(), "progress": number(), "details": string()})),
    "decisions": arr(obj({"ministry": string(), "decision": string()})),
    "impact": obj({"summary": string(), "highlights": arr(string())}),
})

STATE_INTEL = obj({
    "initiatives": arr(obj({"title": string(), "status": string(), "citizenImpact": string()})),
    "performance": obj({
        "department": string(),
        "score": number(),
        "status": string(),
        "summary": string(),
    }),
    "infrastructure": arr(obj(
        {"project": string(), "progress": number(), "delayReason": string(), "impact": string()},
        required=["project", "progress", "impact"],
    )),
    "safety": obj({"overview": string(), "alerts": arr(string())}),
    "localIssues": arr(obj({"issue": string(), "ward": string(), "urgency": string()})),
})

LEADER_PROFILE = obj(
    {
        "name": string(),
        "role": string(),
        "party": string(),
        "constituency": string(),
        "state": string(),
        "attendance": number(),
        "bills": number(),
        "debates": number(),
        "questions": number(),
        "sinceYear": number(),
    },
    required=["name", "role", "party", "constituency", "state"],
)

POLITICAL_PROMISES = arr(obj({
    "title": string(),
    "description": string(),
    "authority": string(),
    "party": string(),
    "status": string(),
    "category": string(),
    "sourceUrl": string(),
}))

LIVE_EVENTS = arr(obj(
    {
        "id": string(),
        "title": string(),
        "description": string(),
        "category": string(),
        "status": string(),
        "date": string(),
        "time": string(),
        "views": number(),
        "highlights": arr(string()),
    },
    required=["title", "description", "category", "status", "date", "time", "highlights"],
))
