"""CLI entrypoint for competitor research runs."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from rich.panel import Panel
from rich.table import Table

from config import CredentialResolver, ResearchCredentials, Settings, get_settings
from models import PhaseState, PipelineStatus, ResearchConfig, ResearchReport
from orchestrator import ResearchPipeline
from utils.logger import console, setup_logger


_STATE_STYLES = {
    PhaseState.COMPLETED: "green",
    PhaseState.FAILED: "red",
}


def _split(text: str) -> list:
    return [item.strip() for item in str(text or "").split(",") if item.strip()]


class StatusPrinter:
    """Prints a line whenever a phase settles"""

    def __init__(self):
        self._seen = {}

    def __call__(self, status: PipelineStatus) -> None:
        for phase, sub_status in status.phases.items():
            if sub_status.status not in _STATE_STYLES or self._seen.get(phase) == sub_status.status:
                continue
            self._seen[phase] = sub_status.status
            style = _STATE_STYLES[sub_status.status]
            message = f" ({sub_status.message})" if sub_status.message else ""
            console.print(
                f"[{style}]{status.progress:>5.0f}% {phase.value}: {sub_status.status.value}{message}[/{style}]"
            )


def _summary(report: ResearchReport) -> Table:
    table = Table(title=f"{report.client_name} - {report.niche}")
    table.add_column("Competitor", style="bold")
    table.add_column("Followers", justify="right")
    table.add_column("Engagement", justify="right")
    table.add_column("Posts/week", justify="right")
    table.add_column("Visual quality", justify="right")

    for record in report.competitors:
        metrics = record.metrics
        frequency = metrics.posting_frequency if metrics else None
        table.add_row(
            record.name,
            f"{metrics.instagram_followers:,}" if metrics and metrics.instagram_followers is not None else "-",
            f"{metrics.instagram_engagement_rate:.2f}%" if metrics and metrics.instagram_engagement_rate is not None else "-",
            f"{frequency.posts_per_week:g}" if frequency else "-",
            f"{record.visual_analysis.average_quality_score:.1f}" if record.visual_analysis else "-",
        )
    return table


async def _research(args, settings: Settings) -> ResearchReport:
    config = ResearchConfig.from_settings(settings)
    competitors = _split(args.competitors)
    if len(competitors) > config.max_competitors:
        console.print(
            f"[yellow]Only the first {config.max_competitors} competitors are analysed[/yellow]"
        )
        competitors = competitors[:config.max_competitors]

    if args.no_images:
        config.enable_image_analysis = False

    credentials = CredentialResolver(ResearchCredentials.from_settings(settings))
    pipeline = ResearchPipeline(credentials, config, StatusPrinter(), settings=settings)
    try:
        return await pipeline.execute(args.client, args.niche, competitors)
    finally:
        await pipeline.close()


def _credentials_table(settings: Settings) -> Table:
    resolver = CredentialResolver(ResearchCredentials.from_settings(settings))
    table = Table(title="Credentials")
    table.add_column("Name")
    table.add_column("Value")
    for name in ResearchCredentials.model_fields:
        value = resolver.masked(name) if resolver.get(name) else "[red]missing[/red]"
        table.add_row(name, value)
    table.add_row("search provider", ", ".join(resolver.available_search_providers()) or "[yellow]none[/yellow]")
    return table


def main() -> None:
    parser = argparse.ArgumentParser(description="Competitor research CLI")
    parser.add_argument("--env-file", default="", help="Path of a .env file to load")
    sub = parser.add_subparsers(dest="command", required=True)

    research = sub.add_parser("research", help="Run the full research pipeline")
    research.add_argument("--client", required=True)
    research.add_argument("--niche", required=True)
    research.add_argument("--competitors", required=True, help="Comma separated competitor names")
    research.add_argument("--output", default="", help="Write the JSON report here instead of stdout")
    research.add_argument("--no-images", action="store_true", help="Skip image analysis")

    sub.add_parser("credentials", help="Show which credentials are configured")

    args = parser.parse_args()
    settings = Settings.load_from_env_file(Path(args.env_file)) if args.env_file else get_settings()
    # root logger, so module loggers and the pipeline log share one handler
    setup_logger("", level=getattr(logging, settings.log_level.upper(), logging.INFO))

    if args.command == "credentials":
        console.print(_credentials_table(settings))
        return

    if args.command == "research":
        console.print(Panel.fit(f"[bold]Competitor research[/bold]\n{args.client} / {args.niche}"))
        report = asyncio.run(_research(args, settings))
        console.print(_summary(report))

        payload = report.model_dump_json(indent=2)
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
            console.print(f"[green]Report written to {args.output}[/green]")
        else:
            print(payload)


if __name__ == "__main__":
    main()
