"""
Command-line interface for the creator scorer.
"""

import argparse
import json
import os
import sys
from typing import List, Dict, Any, Optional

from loguru import logger

from .engine import CreatorScoringEngine
from .errors import CreatorScoreError
from .models.schemas import CreatorTier
from .storage.supabase_client import SupabaseClient


def setup_logging(log_level: str = "INFO"):
    """Setup logging configuration."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )


def load_creators_from_json(json_path: str) -> List[Dict[str, Any]]:
    """
    Load creator payloads from a JSON file.

    The file holds a list (or a single object) of
    ``{"creator_id": ..., "platforms": [...]}`` entries.

    Args:
        json_path: Path to JSON file

    Returns:
        List of creator payloads
    """
    try:
        with open(json_path, 'r', encoding='utf-8') as file:
            data = json.load(file)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading JSON file {json_path}: {e}")
        return []

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        logger.error(f"Expected a list of creators in {json_path}, got {type(data).__name__}")
        return []

    creators = []
    for entry in data:
        if isinstance(entry, dict) and entry.get('creator_id') and isinstance(entry.get('platforms'), list):
            creators.append(entry)
        else:
            logger.warning(f"Skipping invalid entry: {entry!r:.80}")

    logger.info(f"Loaded {len(creators)} creators from {json_path}")
    return creators


def score_payloads(
    engine: CreatorScoringEngine,
    creators: List[Dict[str, Any]],
    niche_factor: Optional[float] = None,
    persist: bool = False,
) -> Dict[str, Any]:
    """
    Score creator payloads loaded from a file.

    Args:
        engine: Scoring engine
        creators: Creator payloads
        niche_factor: Reach penalty sensitivity for the niche score
        persist: Whether to write scores to the engine's sink

    Returns:
        Dictionary with batch results
    """
    results: Dict[str, Any] = {
        'success': True,
        'total_creators': len(creators),
        'successful': 0,
        'failed': 0,
        'results': [],
    }

    for creator in creators:
        creator_id = str(creator['creator_id'])
        try:
            result = engine.score_platform_data(creator_id, creator['platforms'], niche_factor=niche_factor)
            saved = engine.sink.save_score(result) if persist and engine.sink else None
            results['results'].append({'success': True, 'saved': saved, **result.to_dict()})
            results['successful'] += 1
        except CreatorScoreError as e:
            logger.error(f"Error scoring creator {creator_id}: {e}")
            results['results'].append({'success': False, 'creator_id': creator_id, 'error': str(e)})
            results['failed'] += 1

    results['success'] = results['failed'] == 0
    return results


def check_database_connection() -> bool:
    """Check if database connection is working."""
    try:
        db_client = SupabaseClient()
        return db_client.health_check()
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


def write_output(results: Dict[str, Any], output_file: Optional[str]):
    """Write results as JSON to a file or stdout."""
    text = json.dumps(results, indent=2, default=str)
    if output_file:
        with open(output_file, 'w', encoding='utf-8') as file:
            file.write(text)
        logger.info(f"Saved results for {results['total_creators']} creators to {output_file}")
    else:
        print(text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Creator Scorer - Score creators from their platform metrics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Score creators from a JSON file
  creatorscore --input creators.json

  # Score and store the results in Supabase
  creatorscore --input creators.json --persist

  # Rescore creators stored in Supabase with a harsher niche reach penalty
  creatorscore --creator-id abc123 def456 --niche-factor 8

  # Rescore the top 50 gold creators and store the new scores
  creatorscore --tier gold --limit 50 --persist
        """
    )

    parser.add_argument(
        '--input',
        help='Path to JSON file with creators (list of {creator_id, platforms})'
    )

    parser.add_argument(
        '--creator-id',
        nargs='+',
        help='Score creators stored in Supabase'
    )

    parser.add_argument(
        '--tier',
        choices=[tier.value for tier in CreatorTier],
        help='Rescore creators stored in Supabase under this tier'
    )

    parser.add_argument(
        '--limit',
        type=int,
        default=100,
        help='Maximum number of creators to rescore with --tier (default: 100)'
    )

    parser.add_argument(
        '--niche-factor',
        type=float,
        default=None,
        help='Reach penalty sensitivity for the niche score (default: 5.0)'
    )

    parser.add_argument(
        '--persist',
        action='store_true',
        help='Write scores to Supabase'
    )

    parser.add_argument(
        '--output',
        help='Output file for results (default: stdout)'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Logging level (default: INFO)'
    )

    parser.add_argument(
        '--check-db',
        action='store_true',
        help='Check database connection and exit'
    )

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)

    if args.check_db:
        logger.info("Checking database connection...")
        if check_database_connection():
            logger.info("Database connection successful")
            sys.exit(0)
        else:
            logger.error("Database connection failed")
            sys.exit(1)

    if args.niche_factor is not None and args.niche_factor <= 0:
        logger.error("--niche-factor must be positive")
        sys.exit(1)

    db_client = None
    if args.persist or args.creator_id or args.tier:
        try:
            db_client = SupabaseClient()
        except Exception as e:
            logger.error(f"Database connection failed. Please check your Supabase credentials: {e}")
            sys.exit(1)

    engine = CreatorScoringEngine(source=db_client, sink=db_client if args.persist else None)

    if args.input:
        if not os.path.exists(args.input):
            logger.error(f"Input file not found: {args.input}")
            sys.exit(1)

        creators = load_creators_from_json(args.input)
        if not creators:
            logger.error("No valid creators found in JSON file")
            sys.exit(1)

        results = score_payloads(engine, creators, args.niche_factor, args.persist)

    elif args.creator_id:
        results = engine.score_creators(args.creator_id, niche_factor=args.niche_factor)

    elif args.tier:
        results = engine.score_creators_by_tier(args.tier, limit=args.limit, niche_factor=args.niche_factor)

    else:
        logger.error("One of --input, --creator-id or --tier must be specified")
        sys.exit(1)

    write_output(results, args.output)

    if not results['success']:
        logger.warning(f"{results['failed']} of {results['total_creators']} creators failed to score")
        sys.exit(1)


if __name__ == '__main__':
    main()
