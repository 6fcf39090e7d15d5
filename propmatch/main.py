"""Command-line entry point: run one match request against the CRM database."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from propmatch.config.environment import EnvironmentConfig
from propmatch.config.exceptions import ConfigurationError
from propmatch.config.loader import load_config
from propmatch.config.models import AppConfig
from propmatch.logging import get_logger
from propmatch.logging.config import configure_logging
from propmatch.matching.exceptions import NotFoundError, ValidationError
from propmatch.matching.service import MatchingService
from propmatch.matching.utils import build_response_dict, format_summary
from propmatch.persistence.database import close_database, get_session, init_database
from propmatch.persistence.exceptions import PersistenceError
from propmatch.persistence.repositories import (
    ClientRepository,
    ContactHistoryRepository,
    PropertyRepository,
    SqlCandidateRepository,
)

logger = get_logger(__name__, component="cli")

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_VALIDATION_ERROR = 2
EXIT_NOT_FOUND = 3
EXIT_FATAL = 4


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Without --config the usual locations are tried and the built-in
    defaults apply when none exists. Log level priority: CLI > LOG_LEVEL >
    config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path, allow_defaults=config_path is None)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def read_request(source: str) -> Dict[str, Any]:
    """
    Read the JSON match request from a file path, or stdin for "-".

    Raises:
        ValidationError: If the file cannot be read or is not a JSON object
    """
    try:
        if source == "-":
            payload = json.load(sys.stdin)
        else:
            with open(source, "r", encoding="utf-8") as f:
                payload = json.load(f)
    except OSError as e:
        raise ValidationError(f"Cannot read request file: {source}", errors=[str(e)]) from e
    except json.JSONDecodeError as e:
        raise ValidationError("Request is not valid JSON", errors=[str(e)]) from e

    if not isinstance(payload, dict):
        raise ValidationError(
            "Request must be a JSON object", errors=[f"Got {type(payload).__name__}"]
        )
    return payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="propmatch",
        description="Rank properties for a client, clients for a property, "
        "or properties for ad-hoc criteria",
    )
    parser.add_argument("--agent-id", required=True, help="Agent whose data is searched")
    parser.add_argument(
        "--request",
        required=True,
        help="Path to a JSON match request, or '-' to read it from stdin",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    parser.add_argument(
        "--output",
        default="json",
        choices=["json", "text"],
        help="Output format (default: json)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run a single match request and print the response to stdout.

    Returns:
        Exit code: 0 success, 1 configuration error, 2 invalid request,
        3 client or property not found, 4 fatal error
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)
    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(
        level=env_config.log_level,
        format_type=app_config.logging.format,
        environment=env_config.environment,
    )

    try:
        request = read_request(args.request)

        init_database(env_config.database_url)
        with get_session() as session:
            service = MatchingService(
                candidate_repository=SqlCandidateRepository(session),
                criteria_provider=ClientRepository(session, agent_id=args.agent_id),
                property_provider=PropertyRepository(session, agent_id=args.agent_id),
                contact_history=ContactHistoryRepository(session),
                config=app_config.matching,
            )
            response = service.match(request, agent_id=args.agent_id)

        if args.output == "text":
            print(format_summary(response, limit=None))
        else:
            print(json.dumps(build_response_dict(response), indent=2, ensure_ascii=False))

        logger.info(
            "Match command completed",
            extra={
                "event": "cli.completed",
                "returned_matches": response.returned_matches,
                "duration_seconds": round(time.time() - start_time, 3),
            },
        )
        return EXIT_OK

    except ValidationError as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        logger.warning(
            f"Match request rejected: {e.message}",
            extra={"event": "cli.request.invalid", "error_count": len(e.errors)},
        )
        return EXIT_VALIDATION_ERROR
    except NotFoundError as e:
        print(f"Not found: {e}", file=sys.stderr)
        logger.warning(
            str(e),
            extra={"event": "cli.reference.not_found", "entity": e.entity, "entity_id": e.entity_id},
        )
        return EXIT_NOT_FOUND
    except PersistenceError as e:
        print(f"Database error: {e}", file=sys.stderr)
        logger.critical(
            "Database failure",
            extra={"event": "cli.database.failed", "error_type": type(e).__name__},
            exc_info=True,
        )
        return EXIT_FATAL
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_FATAL
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during match run",
            extra={"event": "cli.failed", "error_type": type(e).__name__, "error": str(e)},
            exc_info=True,
        )
        return EXIT_FATAL
    finally:
        close_database()


if __name__ == "__main__":
    sys.exit(main())
