"""
Supabase client: reads creators' platform snapshots and stores their scores.
"""

import os
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
from supabase import create_client, Client
from loguru import logger

from ..models.schemas import CreatorTier, ScoringResult

PLATFORMS_TABLE = 'creator_platforms'
SCORES_TABLE = 'creator_scores'


class SupabaseClient:
    """Client for Supabase database operations."""

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None):
        """
        Initialize Supabase client.

        Args:
            url: Supabase URL (defaults to env var)
            key: Supabase service key (defaults to env var)
        """
        self.url = url or os.getenv('SUPABASE_URL')
        self.key = key or os.getenv('SUPABASE_SERVICE_KEY')

        if not self.url or not self.key:
            raise ValueError("Supabase URL and service key must be provided")

        try:
            self.client: Client = create_client(self.url, self.key)
            logger.info("Supabase client initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize Supabase client: {e}")
            raise

    def get_platform_data(self, creator_id: str) -> List[Dict[str, Any]]:
        """
        Get a creator's raw platform snapshots.

        Each row stores the ingested payload in ``raw``; the row's platform
        and sync time take precedence over whatever the payload carries.

        Args:
            creator_id: Creator identifier

        Returns:
            List of platform payloads, empty if none or on error
        """
        try:
            result = self.client.table(PLATFORMS_TABLE).select('*').eq('creator_id', creator_id).execute()

            payloads = []
            for row in result.data or []:
                payload = dict(row.get('raw') or {})
                payload['platform'] = row.get('platform') or payload.get('platform')
                if row.get('last_updated'):
                    payload['last_updated'] = row['last_updated']
                payloads.append(payload)

            logger.debug(f"Loaded {len(payloads)} platform snapshots for creator {creator_id}")
            return payloads

        except Exception as e:
            logger.error(f"Error getting platform data for creator {creator_id}: {e}")
            return []

    def save_score(self, result: ScoringResult) -> bool:
        """
        Upsert a creator's score.

        Args:
            result: Scoring result to store

        Returns:
            True if successful, False otherwise
        """
        try:
            upsert_data = result.to_dict()
            upsert_data['updated_at'] = datetime.now(timezone.utc).isoformat()

            db_result = self.client.table(SCORES_TABLE).upsert(
                upsert_data, on_conflict='creator_id'
            ).execute()

            if db_result.data:
                logger.info(f"Successfully saved score for creator: {result.creator_id}")
                return True
            else:
                logger.error(f"Failed to save score for creator: {result.creator_id}")
                return False

        except Exception as e:
            logger.error(f"Error saving score for creator {result.creator_id}: {e}")
            return False

    def get_score(self, creator_id: str) -> Optional[Dict[str, Any]]:
        """
        Get the stored score for a creator.

        Args:
            creator_id: Creator identifier

        Returns:
            Score row or None if not found
        """
        try:
            result = self.client.table(SCORES_TABLE).select('*').eq('creator_id', creator_id).execute()

            if result.data:
                return result.data[0]
            return None

        except Exception as e:
            logger.error(f"Error getting score for creator {creator_id}: {e}")
            return None

    def get_creator_ids_by_tier(self, tier: CreatorTier, limit: int = 100) -> List[str]:
        """
        Get ids of creators last scored into a tier, e.g. to rescore them.

        Args:
            tier: Tier to filter on
            limit: Maximum number of results

        Returns:
            List of creator ids
        """
        try:
            result = (
                self.client.table(SCORES_TABLE)
                .select('creator_id')
                .eq('tier', CreatorTier(tier).value)
                .order('overall_score', desc=True)
                .limit(limit)
                .execute()
            )
            return [row['creator_id'] for row in result.data or []]

        except Exception as e:
            logger.error(f"Error getting creators in tier {tier}: {e}")
            return []

    def health_check(self) -> bool:
        """
        Check if database connection is healthy.

        Returns:
            True if healthy, False otherwise
        """
        try:
            self.client.table(SCORES_TABLE).select('creator_id').limit(1).execute()
            logger.info("Database health check passed")
            return True

        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False
