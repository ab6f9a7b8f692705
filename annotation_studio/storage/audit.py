"""
Payload Audit — Redis write barrier for external model output.

Every model-backed stage persists both the RAW payload (model output,
unmodified) and the NORMALIZED payload (validated candidates / resolved
annotations). The normalized payload is only written, and only returned to
the caller, after validation passes.

Key scheme
----------
  run:{run_id}:doc:{document_id}:stage:{stage}:raw         – raw output
  run:{run_id}:doc:{document_id}:stage:{stage}:normalized  – validated+resolved
  run:{run_id}:doc:{document_id}:stage:{stage}:error       – rejection record
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

import redis
from redis.exceptions import RedisError

from annotation_studio.config.settings import AUDIT_TTL_SECONDS, REDIS_URL
from annotation_studio.errors import WriteBarrierValidationError
from annotation_studio.metrics import record_barrier_block, record_validation_error
from annotation_studio.models.validation import ValidationResult

logger = logging.getLogger(__name__)


def stage_key(run_id: str, document_id: str, stage: str, kind: str) -> str:
    return f"run:{run_id}:doc:{_safe_id(document_id)}:stage:{stage}:{kind}"


def _persist(redis_client: Any, key: str, payload: Any, ttl: int, stage: str) -> None:
    """Audit writes never block the stage; failures are logged."""
    try:
        redis_client.set(key, json.dumps(payload, default=str, ensure_ascii=False), ex=ttl)
        logger.debug("WriteBarrier[%s] persisted → %s", stage, key)
    except RedisError as exc:
        logger.warning("WriteBarrier[%s] failed to persist %s: %s", stage, key, exc)


def process_stage_with_barrier(
    *,
    raw_payload: Any,
    validator_fn: Callable[[Any], ValidationResult],
    normalizer_fn: Optional[Callable[[ValidationResult], Any]] = None,
    redis_client: Any,
    run_id: str,
    document_id: str,
    stage: str,
    ttl: int = AUDIT_TTL_SECONDS,
) -> Any:
    """
    Validate a model payload behind a Redis write barrier.

    Flow
    ----
    1. Persist *raw_payload* (``…:raw`` key), even if it later fails.
    2. Call *validator_fn(raw_payload)* → ValidationResult.
       * On failure: persist error record, raise WriteBarrierValidationError.
    3. Call *normalizer_fn(result)* (defaults to ``result.data``).
    4. Persist the normalized payload (``…:normalized`` key) and return it.

    Raises:
        WriteBarrierValidationError: If validation fails.
    """
    key_raw = stage_key(run_id, document_id, stage, "raw")
    key_normalized = stage_key(run_id, document_id, stage, "normalized")
    key_error = stage_key(run_id, document_id, stage, "error")

    _persist(redis_client, key_raw, raw_payload, ttl, stage)

    outcome = validator_fn(raw_payload)

    if not outcome.valid:
        _persist(
            redis_client,
            key_error,
            {
                "stage": stage,
                "document_id": document_id,
                "run_id": run_id,
                "errors": outcome.errors,
                "warnings": outcome.warnings,
            },
            ttl,
            stage,
        )
        record_barrier_block(stage)
        for err in outcome.errors:
            record_validation_error(stage, "schema_mismatch" if "schema" in err.lower() else "generic")
        logger.error(
            "WriteBarrier[%s] validation FAILED — blocking propagation. errors=%s",
            stage, outcome.errors,
        )
        raise WriteBarrierValidationError(stage, outcome.errors)

    normalized = normalizer_fn(outcome) if normalizer_fn is not None else outcome.data

    _persist(redis_client, key_normalized, normalized, ttl, stage)

    logger.info("WriteBarrier[%s] completed OK (warnings=%d)", stage, len(outcome.warnings))
    return normalized


def _safe_id(document_id: str) -> str:
    """Strip/replace characters that are unsafe in Redis key names."""
    return document_id.replace(" ", "_").replace("/", "_").replace(":", "_")


def get_stage_payload(
    redis_client: Any,
    run_id: str,
    document_id: str,
    stage: str,
    kind: str = "normalized",
) -> Optional[Any]:
    """Retrieve a persisted payload (``raw``, ``normalized`` or ``error``), or None."""
    data = redis_client.get(stage_key(run_id, document_id, stage, kind))
    return json.loads(data) if data else None


def build_redis_client(url: Optional[str] = None) -> Any:
    """Build a redis.Redis client from *url*, defaulting to REDIS_URL."""
    target_url = url or REDIS_URL
    client = redis.Redis.from_url(target_url, decode_responses=True)
    logger.debug("Redis client created for URL: %s", target_url)
    return client


class NullRedisClient:
    """
    Drop-in client that discards all writes and returns None on reads.
    Used when auditing is disabled or no Redis server is available.
    """

    def set(self, key: str, value: str, **kwargs: Any) -> None:  # noqa: ARG002
        pass

    def get(self, key: str) -> None:  # noqa: ARG002
        return None

    def exists(self, *keys: str) -> int:
        return 0

    def delete(self, *keys: str) -> int:
        return 0
