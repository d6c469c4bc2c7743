"""
Visual Report
Aggregates per-image analyses into per-competitor reports and compares them
"""
from collections import Counter
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence
import asyncio
import logging

from models import ImageAnalysis, InstagramPost, VisualAnalysisReport, VisualComparison
from processing.batch_analyzer import ProgressCallback, analyze_batch


logger = logging.getLogger(__name__)

AnalyzeImage = Callable[[str, Optional[str]], Awaitable[ImageAnalysis]]


def _top(values: Iterable[str], limit: int) -> List[str]:
    return [value for value, _ in Counter(v for v in values if v).most_common(limit)]


def _percentage(count: int, total: int) -> float:
    return count / total * 100 if total else 0.0


def generate_visual_report(analyses: Sequence[ImageAnalysis], competitor_name: str) -> VisualAnalysisReport:
    """
    Frequency-ranked summary of one competitor's image analyses

    An empty input gives a zeroed report carrying a single explanatory
    recommendation.
    """
    if not analyses:
        return VisualAnalysisReport(
            competitor_name=competitor_name,
            recommendations=["Não foi possível analisar imagens deste concorrente"],
        )

    total = len(analyses)
    palette = _top((color for a in analyses for color in a.dominant_colors), 5)
    styles = _top((a.style for a in analyses), 3)
    compositions = _top((a.composition for a in analyses), 3)
    elements = _top((element for a in analyses for element in a.visual_elements), 10)

    text_pct = _percentage(sum(a.has_text for a in analyses), total)
    product_pct = _percentage(sum(a.has_product for a in analyses), total)
    person_pct = _percentage(sum(a.has_person for a in analyses), total)
    avg_quality = sum(a.quality_score for a in analyses) / total

    branding = [element for a in analyses for element in a.branding_elements]
    unique_branding = set(branding)
    branding_consistency = len(branding) / (len(unique_branding) * total) * 100 if unique_branding else 0.0

    recommendations = []
    if avg_quality >= 7:
        recommendations.append(
            f"O concorrente {competitor_name} tem alta qualidade visual ({avg_quality:.1f}/10). "
            "Invista em produção de qualidade similar."
        )
    elif avg_quality < 5:
        recommendations.append(
            f"O concorrente {competitor_name} tem qualidade visual baixa ({avg_quality:.1f}/10). "
            "Esta é uma oportunidade de diferenciação."
        )
    if styles:
        recommendations.append(
            f"Estilo visual predominante: {', '.join(styles)}. Considere adotar ou diferenciar-se deste estilo."
        )
    if text_pct > 70:
        recommendations.append(
            f"Alto uso de texto nas imagens ({text_pct:.0f}%). Considere se isso funciona para seu público."
        )
    elif text_pct < 30:
        recommendations.append(f"Baixo uso de texto nas imagens ({text_pct:.0f}%). Foco em conteúdo visual puro.")
    if person_pct > 50:
        recommendations.append(
            f"Presença frequente de pessoas ({person_pct:.0f}%). Humanização do conteúdo é importante neste nicho."
        )
    if palette:
        recommendations.append(
            f"Paleta de cores dominante: {', '.join(palette)}. Defina sua própria paleta para diferenciação."
        )

    return VisualAnalysisReport(
        competitor_name=competitor_name,
        total_images_analyzed=total,
        dominant_color_palette=palette,
        preferred_styles=styles,
        common_compositions=compositions,
        text_usage_percentage=text_pct,
        product_presence_percentage=product_pct,
        person_presence_percentage=person_pct,
        average_quality_score=avg_quality,
        common_visual_elements=elements,
        branding_consistency=branding_consistency,
        recommendations=recommendations,
    )


def select_image_posts(posts: Sequence[InstagramPost], max_images: int) -> List[InstagramPost]:
    """Non-video posts that carry a media URL, capped at max_images"""
    return [p for p in posts if p.media_url and p.media_type != "video"][:max_images]


async def analyze_competitor_visuals(
    competitor_name: str,
    posts: Sequence[InstagramPost],
    analyze_image: AnalyzeImage,
    *,
    max_images: int = 9,
    max_concurrent: int = 3,
    delay: float = 1.0,
    on_progress: Optional[ProgressCallback] = None,
    should_stop: Optional[Callable[[], bool]] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> VisualAnalysisReport:
    """
    Analyze a competitor's image posts and aggregate them into a report

    Args:
        competitor_name: competitor
        posts: scraped posts
        analyze_image: vision call (url, context) -> ImageAnalysis
        max_images: cap on analysed images
        max_concurrent: images analysed in parallel
        delay: pause between batches (seconds)
        on_progress: per-image progress callback
        should_stop: cooperative stop check between batches
        sleep: injectable sleep for the batch delay
    """
    image_posts = select_image_posts(posts, max_images)
    if not image_posts:
        logger.info(f"No images to analyze for {competitor_name}")
        return generate_visual_report([], competitor_name)

    logger.info(f"Analyzing {len(image_posts)} images of {competitor_name}")

    async def analyze_post(post: InstagramPost) -> ImageAnalysis:
        context = f"Post de {competitor_name} com {post.likes_count} likes. Caption: {post.caption[:100]}"
        return await analyze_image(post.media_url, context)

    analyses = await analyze_batch(
        image_posts,
        analyze_post,
        max_concurrent,
        on_progress,
        delay=delay,
        sleep=sleep,
        should_stop=should_stop,
    )
    return generate_visual_report(analyses, competitor_name)


def compare_competitor_visuals(reports: Sequence[VisualAnalysisReport]) -> VisualComparison:
    """Visual leader, shared styles and differentiation openings across competitors"""
    if not reports:
        return VisualComparison(
            visual_leader="N/A",
            recommended_strategy="Não foi possível realizar comparação visual.",
        )

    # max() keeps the first of equal scores
    leader = max(reports, key=lambda r: r.average_quality_score)

    style_counts = Counter(style for r in reports for style in r.preferred_styles)
    common_patterns = [style for style, count in style_counts.items() if count > 1]

    opportunities = []
    avg_text = sum(r.text_usage_percentage for r in reports) / len(reports)
    if avg_text < 40:
        opportunities.append("Uso estratégico de texto overlay pode ser diferenciador")
    elif avg_text > 70:
        opportunities.append("Imagens clean sem texto podem se destacar")

    avg_person = sum(r.person_presence_percentage for r in reports) / len(reports)
    if avg_person < 30:
        opportunities.append("Humanizar conteúdo com pessoas pode gerar conexão")

    unique_colors = {color for r in reports for color in r.dominant_color_palette}
    if len(unique_colors) < 10:
        opportunities.append("Paleta de cores diferenciada pode criar identidade única")

    strategy = "\n".join([
        f"Baseado na análise visual dos {len(reports)} concorrentes:",
        f"- Líder visual: {leader.competitor_name} (qualidade {leader.average_quality_score:.1f}/10)",
        f"- Padrões comuns: {', '.join(common_patterns) if common_patterns else 'diversos'}",
        f"- Para se diferenciar: {'; '.join(opportunities) if opportunities else 'foque em qualidade superior'}",
    ])

    return VisualComparison(
        visual_leader=leader.competitor_name,
        common_patterns=common_patterns,
        differentiation_opportunities=opportunities,
        recommended_strategy=strategy,
    )
