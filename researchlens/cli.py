import json
import sys

import click
import pandas as pd
from tabulate import tabulate

from .alerts import ALERT_CATEGORIES, SEVERITY_LEVELS, AlertManager
from .compliance import PATHWAYS, ComplianceChecklist, recommend_pathway
from .config import apply_runtime_config
from .evidence import SAMPLE_EVIDENCE, filter_by_quality, find_study
from .export import compliance_csv, compliance_frame, compliance_json, studies_csv, studies_frame, write_export
from .feeds import RegulatoryFeed, fallback_snapshot
from .intelligence import generate_strategic_report, report_headline
from .keywords import load_keyword_tables
from .models import PHASE_FILTERS, QUALITY_FILTERS, TherapeuticArea
from .synthesis import LiteratureAnalyzer
from .utils import clean_query, logger

MIN_QUERY_LENGTH = 5


def _validate_query(ctx, param, value):
    if len(clean_query(value)) < MIN_QUERY_LENGTH:
        raise click.BadParameter(f"research query must be at least {MIN_QUERY_LENGTH} characters")
    return value


def _print_table(rows, title=None):
    if title:
        click.echo(f"\n{title}")
    if not rows:
        click.echo("(none)")
        return
    click.echo(tabulate(pd.DataFrame(rows), headers="keys", tablefmt="psql", showindex=False))


@click.group()
def cli():
    """ResearchLens Regulatory: synthetic literature analysis and regulatory intelligence."""
    pass


@cli.command()
@click.argument('query', callback=_validate_query)
@click.option('--therapeutic', type=click.Choice(['all'] + [a.value for a in TherapeuticArea]), default='all',
              help='Therapeutic area hint used to break ties.')
@click.option('--phase', type=click.Choice(PHASE_FILTERS), default='all', help='Restrict study phases.')
@click.option('--quality', type=click.Choice(QUALITY_FILTERS), default='all', help='Restrict study confidence.')
@click.option('--seed', type=int, envvar='RL_SEED', help='Seed for reproducible reports. Can be set via RL_SEED.')
@click.option('--keywords-file', type=click.Path(exists=True, dir_okay=False), envvar='RL_KEYWORDS_FILE',
              help='JSON keyword table override. Can be set via RL_KEYWORDS_FILE.')
@click.option('--output-json', type=click.Path(), help='Path to save the full analysis as JSON.')
@click.option('--output-csv', type=click.Path(), help='Path to save the evidence table as CSV.')
@click.option('--intelligence/--no-intelligence', default=False, help='Also print the strategic intelligence report.')
@click.option('--display/--no-display', default=True, help='Display results in the terminal.')
def analyze(query, therapeutic, phase, quality, seed, keywords_file, output_json, output_csv, intelligence, display):
    """Classifies a research query and generates a synthetic regulatory report."""
    try:
        tables = load_keyword_tables(keywords_file)
    except (OSError, ValueError) as e:
        logger.log(f"[FATAL] Could not load keyword tables: {e}")
        sys.exit(1)

    analyzer = LiteratureAnalyzer(tables=tables, seed=seed)
    result = analyzer.analyze(query, {"therapeutic": therapeutic, "phase": phase, "quality": quality})

    try:
        if output_json:
            write_export(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), output_json)
        if output_csv:
            write_export(studies_csv(result.studies), output_csv)
    except OSError as e:
        logger.log(f"Error writing analysis output: {e}")
        sys.exit(1)

    if not display:
        return

    click.echo(f"Query: {result.query}")
    click.echo(f"Therapeutic area: {result.therapeutic.value}")
    click.echo(f"Product type: {result.product_type.value}")
    click.echo(f"Key concepts: {', '.join(result.concepts) or '-'}")
    click.echo(f"Regulatory pathway: {result.regulatory_pathway}")
    click.echo(f"Confidence: {result.confidence}%")
    if result.filters.active_count():
        click.echo(f"Active filters: therapeutic={result.filters.therapeutic}, phase={result.filters.phase}, "
                   f"quality={result.filters.quality}")
    click.echo(f"\n{result.summary}")

    table = studies_frame(result.studies)
    click.echo("\nEvidence")
    click.echo(tabulate(table, headers="keys", tablefmt="psql", showindex=False))
    _print_table([{"Factor": r.factor, "Risk": r.risk.value, "Rationale": r.rationale} for r in result.risk_factors],
                 "Risk assessment")
    _print_table([{"Quarter": m.quarter, "Probability": f"{m.probability:.0%}", "Milestone": m.milestone}
                  for m in result.timeline], "Timeline")
    click.echo("\nRecommendations")
    for idx, rec in enumerate(result.recommendations, start=1):
        click.echo(f"{idx}. {rec}")

    if intelligence:
        report = generate_strategic_report(result)
        click.echo("\nStrategic intelligence")
        click.echo(report_headline(result))
        click.echo(f"\n{report['executive_summary']}")
        for rec in report["strategic_recommendations"]:
            click.echo(f"- {rec}")


@cli.command()
@click.option('--offline', is_flag=True, help='Show the bundled sample feed without calling any API.')
@click.option('--timeout', type=float, envvar='RL_FEED_TIMEOUT', help='Per-request timeout in seconds.')
@click.option('--trial-term', envvar='RL_TRIAL_TERM', help='Search term for ClinicalTrials.gov.')
def feed(offline, timeout, trial_term):
    """Shows recent FDA guidance, approvals and clinical trial postings."""
    if offline:
        snapshot = fallback_snapshot()
    else:
        snapshot = RegulatoryFeed(timeout=timeout, trial_term=trial_term).snapshot()
    _print_table(snapshot["guidance"], "Guidance")
    _print_table(snapshot["approvals"], "Approvals")
    _print_table(snapshot["trials"], "Clinical trials")


@cli.command()
@click.option('--category', type=click.Choice(ALERT_CATEGORIES), default='all', help='Alert category filter.')
@click.option('--severity', type=click.Choice(SEVERITY_LEVELS), default='all', help='Alert severity filter.')
def alerts(category, severity):
    """Lists dashboard alerts."""
    manager = AlertManager()
    rows = [
        {"ID": a.id, "Severity": a.severity, "Category": a.category, "Title": a.title, "Time": a.time}
        for a in manager.filter_alerts(category, severity)
    ]
    _print_table(rows, "Alerts")
    summary = manager.summary()
    click.echo(f"\n{summary['total']} total, {summary['unacknowledged']} unacknowledged, "
               f"{summary['high']} high / {summary['medium']} medium / {summary['low']} low")


@cli.command()
@click.option('--csv', 'csv_path', type=click.Path(), help='Path to save the checklist as CSV.')
@click.option('--json', 'json_path', type=click.Path(), help='Path to save the checklist as JSON.')
@click.option('--audit', 'audit_path', type=click.Path(), help='Path to save the audit trail report.')
def compliance(csv_path, json_path, audit_path):
    """Shows the EU MDR compliance checklist."""
    checklist = ComplianceChecklist()
    click.echo("EU MDR compliance")
    click.echo(tabulate(compliance_frame(checklist.items()), headers="keys", tablefmt="psql", showindex=False))
    try:
        if csv_path:
            write_export(compliance_csv(checklist.items()), csv_path)
        if json_path:
            write_export(compliance_json(checklist.items()), json_path)
        if audit_path:
            write_export(checklist.audit_trail(), audit_path)
    except OSError as e:
        logger.log(f"Error writing compliance export: {e}")
        sys.exit(1)


@cli.command()
@click.argument('product_key')
@click.option('--risk-level', default='', help='Risk level noted in the report.')
@click.option('--target-market', default='', help='Target market noted in the report.')
@click.option('--output', type=click.Path(), help='Path to save the pathway report.')
def pathway(product_key, risk_level, target_market, output):
    """Recommends a regulatory pathway for a product type."""
    recommendation = recommend_pathway(product_key, risk_level, target_market)
    if recommendation is None:
        raise click.BadParameter(f"choose one of: {', '.join(PATHWAYS)}", param_hint="PRODUCT_KEY")
    report = recommendation.report()
    click.echo(report)
    if output:
        try:
            write_export(report, output)
        except OSError as e:
            logger.log(f"Error writing pathway report: {e}")
            sys.exit(1)


@cli.command()
@click.option('--quality', type=click.Choice(QUALITY_FILTERS), default='all', help='Evidence quality filter.')
@click.option('--study-id', help='Show and export a single study from the sample evidence table.')
@click.option('--output-csv', type=click.Path(), help='Path to save the evidence table as CSV.')
def evidence(quality, study_id, output_csv):
    """Shows the sample evidence table, or one study from it."""
    if study_id:
        study = find_study(study_id, SAMPLE_EVIDENCE)
        if study is None:
            known = ', '.join(s.id for s in SAMPLE_EVIDENCE)
            raise click.BadParameter(f"unknown study; choose one of: {known}", param_hint="--study-id")
        studies = [study]
        click.echo(f"{study.id}: {study.title}")
        click.echo(f"Phase: {study.phase} | Design: {study.design} | Sample size: {study.sample_size:,}")
        click.echo(f"Confidence: {study.confidence}% ({study.evidence_strength} evidence)")
    else:
        studies = filter_by_quality(SAMPLE_EVIDENCE, quality)
        click.echo(tabulate(studies_frame(studies), headers="keys", tablefmt="psql", showindex=False))
    if output_csv:
        try:
            write_export(studies_csv(studies), output_csv)
        except OSError as e:
            logger.log(f"Error writing evidence table: {e}")
            sys.exit(1)


@cli.command()
@click.option('--keywords-file', type=click.Path(exists=True, dir_okay=False), envvar='RL_KEYWORDS_FILE',
              help='JSON keyword table override. Can be set via RL_KEYWORDS_FILE.')
@click.option('--area', type=click.Choice([a.value for a in TherapeuticArea]), help='Only list this area.')
@click.option('--output', type=click.Path(), help='Write the active tables as JSON, ready to edit as an override.')
def keywords(keywords_file, area, output):
    """Lists the keyword tables the classifier is using."""
    try:
        tables = load_keyword_tables(keywords_file)
    except (OSError, ValueError) as e:
        logger.log(f"[FATAL] Could not load keyword tables: {e}")
        sys.exit(1)

    if area:
        click.echo(', '.join(tables.keywords_for(TherapeuticArea(area))) or '(no keywords)')
    else:
        _print_table([{"Area": a.value, "Keywords": ', '.join(kw)} for a, kw in tables.therapeutic], "Therapeutic areas")
        click.echo(f"\nDevice: {', '.join(tables.device)}")
        click.echo(f"Drug: {', '.join(tables.drug)}")
    if output:
        try:
            write_export(json.dumps(tables.as_json(), indent=2), output)
        except OSError as e:
            logger.log(f"Error writing keyword tables: {e}")
            sys.exit(1)


def main():
    apply_runtime_config()
    cli()


if __name__ == '__main__':
    main()
