#!/usr/bin/env python3
"""
R4R Analyzer
Scores Ethos profiles for review-for-review farming.
"""

import os
import sys
import logging
from dotenv import load_dotenv

from r4r_analyzer.analyzer import R4RAnalyzer, AnalysisError, subject_from_input
from r4r_analyzer.api_client import DEFAULT_API_URL, DEFAULT_ACTIVITY_LIMIT
from r4r_analyzer.cache import DEFAULT_CACHE_FILE
from r4r_analyzer.export import write_batch_csv
from r4r_analyzer.output import OutputFormatter
from r4r_analyzer.scoring import DEFAULT_SCORING_VERSION, SCORING_VERSIONS
from r4r_analyzer.store import LeaderboardStore, DEFAULT_LEADERBOARD_FILE

# Configure logging (can be overridden by LOG_LEVEL environment variable)
log_level = os.environ.get('LOG_LEVEL', 'INFO').upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format='%(asctime)s %(levelname)s: %(message)s',
    datefmt='%m/%d/%Y %I:%M:%S %p'
)


def env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('true', '1', 'yes')


def env_number(name: str, default, cast=int):
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return cast(value)
    except ValueError:
        logging.warning(f"Invalid {name} value '{value}', using default: {default}")
        return default


def read_subjects() -> list:
    """Read subjects from ETHOS_SUBJECTS or prompt for them."""
    subjects_env = os.environ.get('ETHOS_SUBJECTS')
    if subjects_env:
        values = [s.strip() for s in subjects_env.split(',') if s.strip()]
        logging.info(f"Using subjects from environment: {', '.join(values)}")
        return values

    print("\nEnter profiles to analyze (username or userkey, one per line)")
    print("Press Enter on an empty line when done")
    print("Example: service:x.com:username:vitalikbuterin")

    values = []
    while True:
        value = input("Profile: ").strip()
        if not value:
            break
        values.append(value)
    return values


def main():
    """Main entry point for the script."""
    # Load environment variables from .env file if it exists
    load_dotenv()

    print("R4R Analyzer")
    print("="*80)

    subjects = [subject_from_input(value) for value in read_subjects()]
    if not subjects:
        logging.error("At least one profile is required")
        sys.exit(1)

    scoring_version = os.environ.get('SCORING_VERSION', DEFAULT_SCORING_VERSION).strip()
    if scoring_version not in SCORING_VERSIONS:
        logging.warning(f"Invalid SCORING_VERSION value '{scoring_version}', using default: {DEFAULT_SCORING_VERSION}")
        logging.warning(f"Valid options: {', '.join(sorted(SCORING_VERSIONS))}")
        scoring_version = DEFAULT_SCORING_VERSION

    store = LeaderboardStore(os.environ.get('LEADERBOARD_FILE', DEFAULT_LEADERBOARD_FILE))

    analyzer = R4RAnalyzer(
        api_url=os.environ.get('ETHOS_API_URL', DEFAULT_API_URL),
        cache_file=os.environ.get('CACHE_FILE', DEFAULT_CACHE_FILE),
        use_cache=env_flag('USE_CACHE', True),
        cache_max_age_hours=env_number('CACHE_MAX_AGE_HOURS', 6, float),
        activity_limit=env_number('ACTIVITY_LIMIT', DEFAULT_ACTIVITY_LIMIT),
        scoring_version=scoring_version,
        store=store
    )
    output_formatter = OutputFormatter(show_pairs=env_flag('SHOW_PAIRS', True))

    if len(subjects) == 1:
        subject = subjects[0]
        try:
            result = analyzer.analyze_subject(subject)
        except AnalysisError as e:
            output_formatter.print_failure(subject, str(e))
            sys.exit(2)
        store.save_result(result)
        analyzer.save_cache()
        output_formatter.print_analysis(result)
        return

    items = analyzer.analyze_batch(
        subjects,
        batch_size=env_number('BATCH_SIZE', 5),
        delay_between_batches=env_number('DELAY_BETWEEN_BATCHES', 1.0, float)
    )
    analyzer.save_cache()
    output_formatter.print_batch_summary(items)

    export_path = os.environ.get('EXPORT_CSV')
    if export_path:
        write_batch_csv(items, export_path)
        print(f"\nResults exported to {export_path}")


if __name__ == "__main__":
    main()
