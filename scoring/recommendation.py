"""
Personal party recommendations.

Flow:
    1. Expand the requested topics into aggregate topic keys (UI-only
       topics are dropped)
    2. Load aggregate rows for those keys and currently active parties;
       none at all raises AggregatesNotComputed
    3. Min-max normalize per topic across active parties
    4. Average normalized scores across a topic's keys
    5. personal_score = 100 × Σ(weight × avg) / Σweight
    6. Confidence from coverage of topics with at least two bills
    7. Top three parties, each with up to four sourced highlight bills
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from sqlalchemy import case, select

from core.context import PipelineContext
from core.exceptions import AggregatesNotComputed
from models import (
    Bill, LegislatorBillRole, Party, PartyMembership, PartyTopicAggregate, RunStatus,
    SourceLink, SyncRun,
)
from schemas.recommendation import (
    FreeTextSuggestion, HighlightBill, PartySummary, RecommendationMeta,
    RecommendationRequest, RecommendationResponse, RecommendationResult, SourceRef,
    TopicBreakdown, TopicWeight,
)
from scoring.constants import (
    BILL_STATUS_POINTS, FREE_TEXT_KEYWORD_MAP, HIGH_CONFIDENCE_COVERAGE, HIGHLIGHT_CANDIDATES,
    HIGHLIGHT_LIMIT, MEDIUM_CONFIDENCE_COVERAGE, METHODOLOGY_PATH, MIN_BILLS_FOR_COVERAGE,
    SCORING_WARNING, TOP_N_PARTIES, get_topic,
)

logger = logging.getLogger(__name__)

# party_id → topic → value
ScoreTable = Dict[str, Dict[str, float]]


# ============================================================================
# Pure scoring
# ============================================================================

def map_free_text(text: Optional[str]) -> List[FreeTextSuggestion]:
    """One suggestion per topic, for the first of its keywords found in the text."""
    if not text or not text.strip():
        return []

    suggestions = []
    for keywords, topic_id in FREE_TEXT_KEYWORD_MAP:
        topic = get_topic(topic_id)
        for keyword in keywords:
            if keyword in text:
                suggestions.append(FreeTextSuggestion(
                    matched_keyword=keyword,
                    suggested_topic_id=topic_id,
                    label=topic.label,
                ))
                break
    return suggestions


def scoring_topics(topics: Sequence[TopicWeight]) -> List[TopicWeight]:
    """Requested topics that map to at least one aggregate topic."""
    result = []
    for topic_weight in topics:
        topic = get_topic(topic_weight.id)
        if topic is not None and topic.scorable:
            result.append(topic_weight)
    return result


def topic_keys_for(topics: Sequence[TopicWeight]) -> List[str]:
    keys: List[str] = []
    for topic_weight in scoring_topics(topics):
        for key in get_topic(topic_weight.id).topic_keys:
            if key not in keys:
                keys.append(key)
    return keys


def normalize_scores(rows: Iterable[Tuple[str, str, float]]) -> ScoreTable:
    """
    Min-max normalize (party_id, topic, raw_score) rows per topic.

    All zero → 0 for everyone; all equal and non-zero → 1 for everyone.
    Parties with no row for a topic are absent from the result.
    """
    by_topic: Dict[str, List[Tuple[str, float]]] = defaultdict(list)
    for party_id, topic, raw_score in rows:
        by_topic[topic].append((party_id, float(raw_score)))

    normalized: ScoreTable = defaultdict(dict)
    for topic, entries in by_topic.items():
        scores = [score for _, score in entries]
        high, low = max(scores), min(scores)
        for party_id, score in entries:
            if high == 0:
                value = 0.0
            elif high == low:
                value = 1.0
            else:
                value = (score - low) / (high - low)
            normalized[party_id][topic] = value
    return dict(normalized)


def confidence_tier(coverage: float) -> str:
    if coverage >= HIGH_CONFIDENCE_COVERAGE:
        return "high"
    if coverage >= MEDIUM_CONFIDENCE_COVERAGE:
        return "medium"
    return "low"


def compute_personal_score(
    party_id: str,
    topics: Sequence[TopicWeight],
    normalized: ScoreTable,
    bill_counts: Dict[str, Dict[str, int]],
) -> Tuple[float, List[TopicBreakdown], str]:
    """
    Returns:
        (score in [0, 100], per-topic breakdown, confidence tier)
    """
    party_norm = normalized.get(party_id, {})
    party_counts = bill_counts.get(party_id, {})

    weighted_sum = 0.0
    total_weight = 0
    covered = 0
    breakdown = []

    scored = scoring_topics(topics)
    for topic_weight in scored:
        topic = get_topic(topic_weight.id)
        keys = topic.topic_keys

        average = sum(party_norm.get(key, 0.0) for key in keys) / len(keys)
        bill_count = sum(party_counts.get(key, 0) for key in keys)
        if bill_count >= MIN_BILLS_FOR_COVERAGE:
            covered += 1

        weighted_sum += topic_weight.weight * average
        total_weight += topic_weight.weight
        breakdown.append(TopicBreakdown(
            topic_id=topic.id,
            label=topic.label,
            weight=topic_weight.weight,
            normalized_score=average,
            bill_count=bill_count,
        ))

    score = (weighted_sum / total_weight) * 100 if total_weight else 0.0
    coverage = covered / len(scored) if scored else 0.0
    return score, breakdown, confidence_tier(coverage)


# ============================================================================
# Store access
# ============================================================================

def _source_refs(links: Iterable[SourceLink]) -> List[SourceRef]:
    return [SourceRef.model_validate(link) for link in links]


async def load_source_links(session, entity_type: str, entity_ids: List[str]) -> Dict[str, List[SourceLink]]:
    if not entity_ids:
        return {}
    result = await session.execute(
        select(SourceLink)
        .where(SourceLink.entity_type == entity_type, SourceLink.entity_id.in_(entity_ids))
        .order_by(SourceLink.external_source)
    )
    grouped: Dict[str, List[SourceLink]] = defaultdict(list)
    for link in result.scalars().all():
        grouped[link.entity_id].append(link)
    return grouped


async def get_highlights(
    session,
    party_id: str,
    topic_keys: List[str],
    limit: int = HIGHLIGHT_LIMIT,
) -> List[HighlightBill]:
    """
    Initiated bills of current party members, best status first.

    A bill without a source link is dropped, never replaced by an
    unsourced placeholder.
    """
    points = case(BILL_STATUS_POINTS, value=Bill.status, else_=0)
    result = await session.execute(
        select(Bill.id, Bill.title, Bill.status, Bill.topic, LegislatorBillRole.role)
        .select_from(LegislatorBillRole)
        .join(Bill, Bill.id == LegislatorBillRole.bill_id)
        .join(PartyMembership, PartyMembership.legislator_id == LegislatorBillRole.legislator_id)
        .where(
            PartyMembership.party_id == party_id,
            PartyMembership.is_current.is_(True),
            LegislatorBillRole.role == "initiator",
            Bill.topic.in_(topic_keys),
        )
        .order_by(points.desc(), Bill.id)
        .limit(HIGHLIGHT_CANDIDATES)
    )
    candidates = result.all()

    sources = await load_source_links(session, "bill", list({row.id for row in candidates}))

    highlights: List[HighlightBill] = []
    seen = set()
    for row in candidates:
        if len(highlights) >= limit:
            break
        if row.id in seen:
            continue
        seen.add(row.id)

        links = sources.get(row.id)
        if not links:
            continue

        highlights.append(HighlightBill(
            bill_id=row.id,
            title=row.title,
            status=row.status,
            topic=row.topic or "",
            role=row.role,
            sources=_source_refs(links),
        ))

    return highlights


async def latest_completed_at(session):
    result = await session.execute(
        select(SyncRun.completed_at)
        .where(SyncRun.status == RunStatus.COMPLETED, SyncRun.job == "sync")
        .order_by(SyncRun.completed_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_recommendations(
    ctx: PipelineContext,
    request: RecommendationRequest,
) -> RecommendationResponse:
    """
    Rank active parties against the requested topic weights.

    Raises:
        AggregatesNotComputed: No aggregate rows exist for the requested
            topics among active parties
    """
    settings = ctx.settings
    topic_keys = topic_keys_for(request.topics)

    async with ctx.session_factory() as session:
        parties_result = await session.execute(
            select(Party).where(Party.is_active.is_(True)).order_by(Party.name)
        )
        parties = list(parties_result.scalars().all())
        party_ids = [party.id for party in parties]

        results: List[RecommendationResult] = []

        if topic_keys:
            rows_result = await session.execute(
                select(
                    PartyTopicAggregate.party_id,
                    PartyTopicAggregate.topic,
                    PartyTopicAggregate.raw_score,
                    PartyTopicAggregate.bill_count,
                ).where(
                    PartyTopicAggregate.topic.in_(topic_keys),
                    PartyTopicAggregate.party_id.in_(party_ids),
                )
            )
            rows = rows_result.all()
            if not rows:
                raise AggregatesNotComputed(
                    "No aggregate rows for requested topics",
                    context={"topics": ", ".join(topic_keys)}
                )

            normalized = normalize_scores((r.party_id, r.topic, r.raw_score) for r in rows)
            bill_counts: Dict[str, Dict[str, int]] = defaultdict(dict)
            for r in rows:
                bill_counts[r.party_id][r.topic] = r.bill_count

            scored = []
            for party in parties:
                score, breakdown, confidence = compute_personal_score(
                    party.id, request.topics, normalized, bill_counts
                )
                scored.append((party, score, breakdown, confidence))

            # Stable sort keeps name order among equal scores
            scored.sort(key=lambda item: item[1], reverse=True)
            top = scored[:TOP_N_PARTIES]

            party_sources = await load_source_links(session, "party", [p.id for p, *_ in top])

            for rank, (party, score, breakdown, confidence) in enumerate(top, start=1):
                results.append(RecommendationResult(
                    rank=rank,
                    party=PartySummary(
                        id=party.id,
                        name=party.name,
                        abbreviation=party.abbreviation,
                        seat_count=party.seat_count,
                        sources=_source_refs(party_sources.get(party.id, [])),
                    ),
                    personal_score=round(score, 1),
                    confidence=confidence,
                    topic_breakdown=breakdown,
                    highlights=await get_highlights(session, party.id, topic_keys),
                ))
        else:
            logger.info("No scorable topics requested; returning empty ranking")

        data_as_of = await latest_completed_at(session)

    return RecommendationResponse(
        results=results,
        free_text_suggestions=map_free_text(request.free_text) if request.free_text else None,
        meta=RecommendationMeta(
            parties_evaluated=len(parties),
            topics_requested=len(request.topics),
            data_as_of=data_as_of,
            methodology_url=f"{settings.WEB_BASE_URL.rstrip('/')}{METHODOLOGY_PATH}",
            warning=SCORING_WARNING,
        ),
    )
