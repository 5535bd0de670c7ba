"""Command-line interface for the batch subtitle translator."""

from __future__ import annotations

import asyncio
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .aws_client import AwsTranslateClient
from .config import TranslatorConfig
from .credentials import resolve_credentials
from .exceptions import RunAbort
from .languages import LANGUAGE_NAMES
from .llm_client import CommandPromptBackend, OpenAIPromptBackend, create_client, DEFAULT_COMMAND_MODEL
from .scheduler import enumerate_jobs, find_source_files, run_all
from .translator import Backend


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    codes = ", ".join(f"{code}={name}" for code, name in LANGUAGE_NAMES.items())
    parser = argparse.ArgumentParser(
        description="Translate every *.en.srt file under a directory into several languages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Supported language codes:
  {codes}

Examples:
  %(prog)s                               # Current directory, Claude CLI (sequential)
  %(prog)s /path/to/videos -s aws        # AWS Translate (concurrent)
  %(prog)s -l es,fr,de                   # Only Spanish, French and German
  %(prog)s -s openai --model gpt-4o-mini # OpenAI-compatible API
  DEBUG=1 %(prog)s /path/to/videos       # Debug logging
        """
    )

    parser.add_argument("directory", nargs='?', default=".", help="Directory to search for source files")

    # Languages / service
    parser.add_argument("-l", "--languages", help="Comma-separated target codes (or set TRANSLATE_LANGUAGES)")
    parser.add_argument("-s", "--service", choices=["claude", "aws", "openai"],
                        help="Translation service (or set TRANSLATE_SERVICE, default: claude)")
    parser.add_argument("--source-suffix", help="Source filename suffix (default: .en.srt)")

    # AWS options
    parser.add_argument("--region", help="AWS region (or set AWS_REGION, default: us-east-1)")
    parser.add_argument("--profile", help="Profile in the shared credentials file (or set AWS_PROFILE)")

    # LLM options
    parser.add_argument("--api-key", help="API key for -s openai (or set LLM_API_KEY)")
    parser.add_argument("--base-url", help="API base URL for -s openai (or set LLM_BASE_URL)")
    parser.add_argument("--model", dest="model_name", help="Model name (or set LLM_MODEL)")

    # Performance
    parser.add_argument("--concurrency", type=int, default=None,
                        help="Worker pool size; 0 = one worker per job (default: 0 for aws, 1 otherwise)")
    parser.add_argument("--chunk-bytes", type=int, default=4000, help="Max bytes per AWS request")
    parser.add_argument("--batch-size", type=int, default=10, help="Subtitle blocks per prompt")
    parser.add_argument("--progress-every", type=int, default=10, help="Log progress every N jobs")
    parser.add_argument("--progress-bar", action="store_true", help="Show a progress bar")

    # Misc
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    return parser.parse_args(argv)


def build_backend(config: TranslatorConfig) -> Backend:
    """
    Create the backend for ``config.service`` after checking its prerequisites.

    Raises:
        CredentialsUnavailable: AWS credentials missing
        PrerequisiteMissing: CLI tool missing
    """
    if config.service == "aws":
        credentials = resolve_credentials(
            access_key=config.aws_access_key_id,
            secret_key=config.aws_secret_access_key,
            session_token=config.aws_session_token,
            profile=config.aws_profile,
        )
        return AwsTranslateClient(
            credentials,
            region=config.region,
            source_language=config.source_language,
            max_payload_bytes=config.chunk_bytes,
        )

    if config.service == "openai":
        client = create_client(config.api_key, config.base_url)
        return OpenAIPromptBackend(client, config.model_name)

    backend = CommandPromptBackend.claude(
        model=config.model_name or DEFAULT_COMMAND_MODEL,
        executable=config.command,
    )
    backend.check_available()
    return backend


async def main_async(config: TranslatorConfig) -> int:
    """Main async workflow."""
    logger = logging.getLogger(__name__)

    error = config.validate()
    if error:
        logger.error(error)
        return 1

    directory = Path(config.directory).expanduser()
    if not directory.is_dir():
        logger.error(f"Directory '{directory}' does not exist")
        return 1

    mode = "concurrent" if config.concurrency != 1 else "sequential"
    logger.info(f"Translation service: {config.service} ({mode})")
    logger.info(f"Target directory: {directory.resolve()}")
    logger.info("Languages: " + ", ".join(f"{name} ({code})" for code, name in config.languages.items()))

    try:
        backend = build_backend(config)
    except RunAbort as e:
        logger.error(str(e))
        return 1

    try:
        files = find_source_files(directory, config.source_suffix)
        if not files:
            logger.error(f"No {config.source_suffix} files found in {directory} and subdirectories")
            return 1

        logger.info(f"Found {len(files)} source subtitle files to translate")
        for f in files:
            logger.debug(f"  - {f}")

        jobs = enumerate_jobs(files, config.languages, config.source_suffix)
        logger.debug(f"Total translation jobs: {len(jobs)} ({len(files)} files x {len(config.languages)} languages)")

        report = await run_all(
            jobs,
            backend,
            concurrency=config.concurrency,
            progress_every=config.progress_every,
            batch_size=config.batch_size,
            show_bar=config.show_progress_bar,
        )
    finally:
        await backend.aclose()

    logger.info("Translation complete!")
    logger.info(f"Jobs processed: {report.processed}/{report.total}")
    logger.info(f"Successful: {report.succeeded}, Skipped: {report.skipped}, Failed: {report.failed}")
    logger.info(f"Total time: {report.elapsed:.1f}s")

    if report.all_ok:
        logger.info("All translations completed successfully!")
    else:
        logger.warning(f"Completed with {report.failed} errors:")
        for result in report.failures():
            logger.warning(f"  {result.job.source} -> {result.job.language}: {result.error}")

    return report.exit_code


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point."""
    args = parse_arguments(argv)
    config = TranslatorConfig.from_args(args)
    setup_logging(config.verbose)

    try:
        exit_code = asyncio.run(main_async(config))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nInterrupted by user. Finished files are kept; re-run to continue.")
        sys.exit(130)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
