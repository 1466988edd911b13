import json
import click

from .config import Settings
from .conclusion import conclude, recommendations
from .logs import configure_logging
from .result import ArtifactKind, VerificationResult
from .verifier import verify_all, verify_path, write_report

def _line(res: VerificationResult) -> str:
    status = "VALID" if res.valid else f"INVALID ({res.error.value})"
    fmt = f" [{res.format.value}]" if res.format is not None else ""
    return f"{res.file}: {status}{fmt}"

@click.group()
@click.option('--root', envvar='TDX_VERIFIER_ROOT', type=click.Path(file_okay=False), help='Directory holding the artifacts (default: cwd)')
@click.option('--report', envvar='TDX_VERIFIER_REPORT', type=click.Path(dir_okay=False), help='Report path (default: <root>/json/tdx-verification-report.json)')
@click.option('--log-file', envvar='TDX_VERIFIER_LOG', type=click.Path(dir_okay=False), help="Log path (default: <root>/log/tdx-verifier.log; '' disables)")
@click.option('--timeout', envvar='TDX_VERIFIER_TIMEOUT', type=click.FloatRange(min=0, min_open=True), help='Per-file JSON parse timeout in seconds')
@click.option('-v', '--verbose', is_flag=True, help='Debug logging')
@click.pass_context
def cli(ctx, root, report, log_file, timeout, verbose):
    settings = Settings.build(root_dir=root, report_path=report, log_path=log_file, parse_timeout=timeout)
    configure_logging(settings.log_path, verbose)
    ctx.obj = settings

@cli.command()
@click.option('-e', '--evidence', type=click.Path(dir_okay=False), help='Verify a TDX evidence file')
@click.option('-t', '--token', type=click.Path(dir_okay=False), help='Verify an attestation token file')
@click.option('-q', '--quote', type=click.Path(dir_okay=False), help='Verify a TDX quote file')
@click.option('-a', '--all', 'verify_everything', is_flag=True, help='Verify every known file under the root and write the report')
@click.pass_context
def verify(ctx, evidence, token, quote, verify_everything):
    """Verify TDX artifacts and print one line plus a JSON record per file."""
    settings = ctx.obj
    if verify_everything:
        ctx.exit(0 if _verify_all(settings) else 1)

    requested = [(k, p) for k, p in ((ArtifactKind.EVIDENCE, evidence),
                                     (ArtifactKind.TOKEN, token),
                                     (ArtifactKind.QUOTE, quote)) if p]
    if not requested:
        raise click.UsageError("No files specified for verification; use --evidence, --token, --quote or --all")

    ok = True
    for kind, path in requested:
        res = verify_path(kind, path, timeout=settings.parse_timeout)
        print(_line(res))
        print(json.dumps(res.to_dict(), ensure_ascii=False))
        ok = ok and res.valid
    ctx.exit(0 if ok else 1)

def _verify_all(settings: Settings) -> bool:
    report = verify_all(settings.search_roots, timeout=settings.parse_timeout)
    try:
        write_report(report, settings.report_path)
    except OSError as e:
        raise click.ClickException(f"Cannot write report {settings.report_path}: {e}")

    s = report.summary
    print(f"Total files: {s.total}, Valid: {s.valid_count}, Invalid: {s.invalid_count}")
    for res in report.results:
        print(_line(res))
    c = conclude(report)
    print()
    print(c.headline)
    for line in c.lines:
        print(f"  {line}")
    print()
    print("Recommendations:")
    for line in recommendations(report):
        print(f"  - {line}")
    print()
    print(f"Verification report: {settings.report_path}")
    return report.succeeded

if __name__ == '__main__':
    cli()
