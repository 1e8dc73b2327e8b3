"""CLI entry point for pactverify."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pactverify import __version__, logger
from pactverify.dependencies import ensure_cli_dependencies_for_verify
from pactverify.exceptions import PackageError, VerificationFailedError
from pactverify.logging import configure_logging
from pactverify.reporting import persist_outcome, render_summary
from pactverify.settings import get_settings
from pactverify.verifier import Verifier


def _pact_header_from_cli(value: str) -> tuple[str, str]:
    """Convert a `--pact-header` CLI value into a header pair.

    Args:
        value (str): CLI value formatted as ``Name: value``.

    Raises:
        argparse.ArgumentTypeError: If value has no name or no colon.

    Returns:
        tuple[str, str]: Header name and value.
    """
    name, separator, header_value = value.partition(":")
    if not separator or not name.strip():
        raise argparse.ArgumentTypeError("--pact-header must look like 'Name: value'")  # noqa: TRY003
    return name.strip(), header_value.strip()


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="pactverify")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    verify_parser = subparsers.add_parser("verify", help="Verify a provider against a consumer pact")
    verify_parser.add_argument("--pact-uri", required=True, dest="pact_uri")
    verify_parser.add_argument("--consumer", required=True)
    verify_parser.add_argument("--provider", required=True)
    verify_parser.add_argument("--provider-base-url", required=True, dest="provider_base_url")
    verify_parser.add_argument("--description", default="")
    verify_parser.add_argument("--state", default="")
    verify_parser.add_argument("--provider-states-setup-url", default=None, dest="provider_states_setup_url")
    verify_parser.add_argument(
        "--pact-header",
        action="append",
        default=[],
        type=_pact_header_from_cli,
        dest="pact_headers",
    )
    verify_parser.add_argument("--report", type=Path, default=None, dest="report_path")

    return parser


def _build_verifier(args: argparse.Namespace) -> Verifier:
    """Build a configured verifier from CLI arguments.

    Args:
        args (argparse.Namespace): Parsed CLI args.

    Returns:
        Verifier: Verifier ready to run.
    """
    verifier = (
        Verifier()
        .honours_pact_with(args.consumer)
        .service_provider(args.provider, base_url=args.provider_base_url)
        .pact_uri(args.pact_uri, headers=dict(args.pact_headers) or None)
        .filter_interactions(description=args.description, state=args.state)
    )
    if args.provider_states_setup_url:
        verifier.provider_states_setup_url(args.provider_states_setup_url)
    return verifier


def main() -> int:
    """Run the CLI.

    Returns:
        int: Exit code (0 when the provider honours the pact, 1 on failure or error).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args()

    if args.command != "verify":
        parser.print_help()
        return 0

    ensure_cli_dependencies_for_verify()
    verifier = _build_verifier(args)

    try:
        verifier.verify()
    except VerificationFailedError:
        logger.warning("Provider does not honour the pact")
    except PackageError:
        logger.exception("Verification could not run")
        return 1
    except KeyboardInterrupt:
        logger.info("Verification aborted by user")
        return 130
    except Exception:
        logger.exception("Unexpected error during verification")
        return 1
    finally:
        settings.close_httpx_clients()

    outcome = verifier.last_outcome
    if outcome is None:
        return 1
    sys.stdout.write(render_summary(outcome) + "\n")
    if args.report_path is not None:
        persist_outcome(outcome, args.report_path)
        logger.info("Verification report written", extra={"report_path": str(args.report_path)})
    return 0 if outcome.passed else 1


if __name__ == "__main__":
    raise SystemExit(main())
