"""
Strategic Recommendations
Generative recommendations with a deterministic template fallback
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
import json
import logging

from pydantic import ValidationError

from intelligence.llm import BaseLLM, Message
from intelligence.prompts import RECOMMENDATIONS_PROMPT, RECOMMENDATIONS_SYSTEM_PROMPT
from models import (
    CompetitorRecord,
    ContentRecommendation,
    NicheAnalysis,
    StrategicPath,
    StrategicRecommendations,
    VisualComparison,
)
from utils.exceptions import LLMError


logger = logging.getLogger(__name__)


@dataclass
class CompetitorLeadership:
    engagement_leader: Optional[CompetitorRecord] = None
    followers_leader: Optional[CompetitorRecord] = None
    content_quality_leader: Optional[CompetitorRecord] = None
    posting_consistency_leader: Optional[CompetitorRecord] = None


def _engagement(c: CompetitorRecord) -> float:
    return (c.metrics.instagram_engagement_rate or 0.0) if c.metrics else 0.0


def _followers(c: CompetitorRecord) -> int:
    return (c.metrics.instagram_followers or 0) if c.metrics else 0


def _posts_per_week(c: CompetitorRecord) -> float:
    if c.metrics and c.metrics.posting_frequency:
        return c.metrics.posting_frequency.posts_per_week
    return 0.0


def _quality(c: CompetitorRecord) -> float:
    return c.visual_analysis.average_quality_score if c.visual_analysis else 0.0


def analyze_competitor_leadership(competitors: Sequence[CompetitorRecord]) -> CompetitorLeadership:
    """
    Leader of each metric

    Only competitors with metrics compete for the metric-based titles; ties
    go to the earliest competitor.
    """
    if not competitors:
        return CompetitorLeadership()

    with_metrics = [c for c in competitors if c.metrics]

    def leader(candidates, key):
        if not candidates:
            return None
        # max() keeps the first of equal keys
        return max(candidates, key=key)

    return CompetitorLeadership(
        engagement_leader=leader(with_metrics, _engagement),
        followers_leader=leader(with_metrics, _followers),
        content_quality_leader=leader(list(competitors), _quality),
        posting_consistency_leader=leader(with_metrics, _posts_per_week),
    )


def _current_situation(
    niche: str,
    competitors: Sequence[CompetitorRecord],
    leadership: CompetitorLeadership,
) -> str:
    situation = f"Análise de {len(competitors)} concorrentes no nicho de {niche}."
    leader = leadership.engagement_leader
    if leader is not None and _engagement(leader) > 0:
        situation += f" Maior taxa de engajamento: {leader.name} ({_engagement(leader):.2f}%)"
    return situation


def generate_basic_recommendations(
    client_name: str,
    niche: str,
    competitors: Sequence[CompetitorRecord],
    niche_analysis: NicheAnalysis,
) -> StrategicRecommendations:
    """Template recommendations built from the collected data alone"""
    leadership = analyze_competitor_leadership(competitors)
    hashtags = niche_analysis.popular_hashtags[:10]

    return StrategicRecommendations(
        client_name=client_name,
        current_situation=_current_situation(niche, competitors, leadership),
        strategic_paths=[
            StrategicPath(
                name="Diferenciação Visual",
                description="Criar identidade visual única que se destaque dos concorrentes",
                difficulty="medium",
                time_to_results="2-3 meses",
                required_resources=["Designer gráfico", "Paleta de cores única", "Templates personalizados"],
                expected_outcomes=["Reconhecimento de marca", "Consistência visual", "Profissionalismo percebido"],
                action_steps=[
                    "Definir paleta de cores exclusiva",
                    "Criar templates de posts padronizados",
                    "Desenvolver guia de estilo visual",
                    "Implementar em todas as publicações",
                ],
            ),
            StrategicPath(
                name="Domínio de Vídeo",
                description="Focar em conteúdo em vídeo (Reels/TikTok) para maximizar alcance",
                difficulty="medium",
                time_to_results="1-2 meses",
                required_resources=["Equipamento de gravação", "Editor de vídeo", "Roteiros semanais"],
                expected_outcomes=["Aumento de alcance", "Maior engajamento", "Viralização potencial"],
                action_steps=[
                    "Criar calendário de Reels (3-5 por semana)",
                    "Definir formatos que funcionam (tutorial, antes/depois, etc)",
                    "Usar trends de áudio populares",
                    "Otimizar legendas e hashtags para descoberta",
                ],
            ),
            StrategicPath(
                name="Autoridade e Educação",
                description="Posicionar-se como especialista através de conteúdo educativo",
                difficulty="hard",
                time_to_results="3-6 meses",
                required_resources=["Conhecimento especializado", "Pesquisa contínua", "Carrosséis educativos"],
                expected_outcomes=["Autoridade no nicho", "Seguidores qualificados", "Oportunidades de parceria"],
                action_steps=[
                    'Criar série de carrosséis "Como fazer"',
                    "Compartilhar estudos de caso",
                    "Responder dúvidas nos comentários",
                    "Fazer lives educativas semanais",
                ],
            ),
        ],
        content_recommendations=[
            ContentRecommendation(
                type="reels",
                theme="Tutorial rápido",
                frequency="3-4x por semana",
                best_times=["12:00", "18:00", "21:00"],
                hashtags=list(hashtags),
                example_ideas=[
                    f"Tutorial de 30 segundos sobre {niche}",
                    "Antes e depois com transição",
                    "Top 3 erros mais comuns",
                    "Dica rápida do dia",
                ],
            ),
            ContentRecommendation(
                type="carousel",
                theme="Conteúdo educativo",
                frequency="2-3x por semana",
                best_times=["09:00", "13:00", "19:00"],
                hashtags=list(hashtags),
                example_ideas=[
                    "5 passos para...",
                    "Guia completo de...",
                    "O que fazer vs O que não fazer",
                    "Checklist essencial",
                ],
            ),
            ContentRecommendation(
                type="stories",
                theme="Bastidores e interação",
                frequency="Diário",
                best_times=["08:00", "12:00", "17:00", "21:00"],
                hashtags=[],
                example_ideas=[
                    "Enquetes sobre preferências",
                    "Caixinha de perguntas",
                    "Bastidores do trabalho",
                    "Contagem regressiva para lançamentos",
                ],
            ),
        ],
        urgent_actions=[
            "Auditar perfil atual e otimizar bio",
            "Criar primeiros 3 Reels esta semana",
            "Definir paleta de cores e fontes",
            "Pesquisar e listar 30 hashtags relevantes",
        ],
        long_term_goals=[
            "Alcançar 10k seguidores em 6 meses",
            "Estabelecer parcerias com 3 marcas do nicho",
            "Criar produto digital (ebook, curso)",
            "Lançar newsletter ou comunidade",
        ],
    )


def _competitors_context(competitors: Sequence[CompetitorRecord]) -> List[Dict[str, Any]]:
    context = []
    for c in competitors:
        metrics = c.metrics
        visual = c.visual_analysis
        frequency = metrics.posting_frequency if metrics else None
        context.append({
            "nome": c.name,
            "seguidores": metrics.instagram_followers if metrics and metrics.instagram_followers is not None else "desconhecido",
            "engajamento": (
                f"{metrics.instagram_engagement_rate:.2f}"
                if metrics and metrics.instagram_engagement_rate is not None else "desconhecido"
            ),
            "frequenciaPostagem": frequency.posts_per_week if frequency else "desconhecida",
            "estilo": ", ".join(visual.preferred_styles) if visual and visual.preferred_styles else "não analisado",
            "qualidadeVisual": f"{visual.average_quality_score:.1f}" if visual else "não analisada",
        })
    return context


def build_recommendations_prompt(
    client_name: str,
    niche: str,
    competitors: Sequence[CompetitorRecord],
    niche_analysis: NicheAnalysis,
    visual_comparison: Optional[VisualComparison] = None,
) -> str:
    return RECOMMENDATIONS_PROMPT.format(
        client_name=client_name,
        niche=niche,
        competitors_context=json.dumps(_competitors_context(competitors), ensure_ascii=False, indent=2),
        trends=", ".join(niche_analysis.trends),
        content_gaps=", ".join(niche_analysis.content_gaps),
        popular_hashtags=", ".join(niche_analysis.popular_hashtags[:10]),
        visual_leader=f"- Líder visual: {visual_comparison.visual_leader}" if visual_comparison else "",
    )


def parse_recommendations(client_name: str, data: Dict[str, Any]) -> StrategicRecommendations:
    """
    Model JSON (camelCase keys) -> StrategicRecommendations

    Raises:
        LLMError: the reply does not fit the recommendations shape
    """
    try:
        return StrategicRecommendations(
            client_name=client_name,
            current_situation=str(data.get("currentSituation") or ""),
            strategic_paths=[
                StrategicPath(
                    name=p["name"],
                    description=p.get("description") or "",
                    difficulty=p.get("difficulty") or "medium",
                    time_to_results=p.get("timeToResults") or "",
                    required_resources=p.get("requiredResources") or [],
                    expected_outcomes=p.get("expectedOutcomes") or [],
                    action_steps=p.get("actionSteps") or [],
                )
                for p in data.get("strategicPaths") or []
            ],
            content_recommendations=[
                ContentRecommendation(
                    type=r["type"],
                    theme=r.get("theme") or "",
                    frequency=r.get("frequency") or "",
                    best_times=r.get("bestTimes") or [],
                    hashtags=r.get("hashtags") or [],
                    example_ideas=r.get("exampleIdeas") or [],
                )
                for r in data.get("contentRecommendations") or []
            ],
            urgent_actions=data.get("urgentActions") or [],
            long_term_goals=data.get("longTermGoals") or [],
        )
    except (KeyError, TypeError, AttributeError, ValidationError) as exc:
        raise LLMError(f"Unexpected recommendations shape: {exc}") from exc


async def generate_ai_recommendations(
    llm: BaseLLM,
    client_name: str,
    niche: str,
    competitors: Sequence[CompetitorRecord],
    niche_analysis: NicheAnalysis,
    visual_comparison: Optional[VisualComparison] = None,
) -> StrategicRecommendations:
    prompt = build_recommendations_prompt(client_name, niche, competitors, niche_analysis, visual_comparison)
    data = await llm.ajson([
        Message.system(RECOMMENDATIONS_SYSTEM_PROMPT),
        Message.user(prompt),
    ])
    recommendations = parse_recommendations(client_name, data)
    if not recommendations.strategic_paths:
        raise LLMError("Recommendations reply has no strategic paths", provider=llm.provider)
    return recommendations


async def synthesize_recommendations(
    llm: Optional[BaseLLM],
    client_name: str,
    niche: str,
    competitors: Sequence[CompetitorRecord],
    niche_analysis: NicheAnalysis,
    visual_comparison: Optional[VisualComparison] = None,
) -> Tuple[StrategicRecommendations, Optional[str]]:
    """
    Recommendations for the report, never raising for provider problems

    Returns:
        (recommendations, fallback_reason); the reason is None when the
        generative provider produced the result
    """
    if llm is None:
        reason = "no generative provider configured"
    else:
        try:
            recommendations = await generate_ai_recommendations(
                llm, client_name, niche, competitors, niche_analysis, visual_comparison
            )
            return recommendations, None
        except Exception as exc:
            reason = str(exc)
            logger.warning(f"AI recommendations failed, using template: {reason}")

    return generate_basic_recommendations(client_name, niche, competitors, niche_analysis), reason
