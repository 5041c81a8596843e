from __future__ import annotations

import os
from dataclasses import replace
from datetime import UTC, datetime

from supabase import Client

from mediastudio.domain.entities.video_job import VideoJobEntity

# module-level in-memory store for disabled mode
_MEM_JOBS: dict[str, VideoJobEntity] = {}


class VideoJobRepository:
    """Which user started which provider operation.

    Backs the ownership check on the video-status endpoint.
    """

    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"

    def _row_to_entity(self, row: dict) -> VideoJobEntity:
        created_at = row["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return VideoJobEntity(
            operation_name=row["operation_name"],
            user_id=row["user_id"],
            prompt=row.get("prompt", ""),
            created_at=created_at,
            status=row.get("status", "pending"),
            has_start_image=bool(row.get("has_start_image", False)),
        )

    def create(
        self, operation_name: str, user_id: str, prompt: str, has_start_image: bool = False
    ) -> VideoJobEntity:
        entity = VideoJobEntity(
            operation_name=operation_name,
            user_id=user_id,
            prompt=prompt,
            created_at=datetime.now(UTC),
            has_start_image=has_start_image,
        )
        if self.disabled or self.client is None:
            _MEM_JOBS[operation_name] = entity
            return entity
        try:  # pragma: no cover - network
            data = {
                "operation_name": operation_name,
                "user_id": user_id,
                "prompt": prompt,
                "status": entity.status,
                "has_start_image": has_start_image,
                "created_at": entity.created_at.isoformat(),
            }
            res = self.client.table("video_jobs").insert(data).execute()
            return self._row_to_entity(res.data[0])
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB insert video job failed: {exc}") from exc

    def get(self, operation_name: str) -> VideoJobEntity | None:
        if self.disabled or self.client is None:
            return _MEM_JOBS.get(operation_name)
        try:  # pragma: no cover - network
            res = (
                self.client.table("video_jobs")
                .select("*")
                .eq("operation_name", operation_name)
                .limit(1)
                .execute()
            )
            rows = res.data or []
            return self._row_to_entity(rows[0]) if rows else None
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB get video job failed: {exc}") from exc

    def get_for_user(self, operation_name: str, user_id: str) -> VideoJobEntity | None:
        job = self.get(operation_name)
        if job is None or job.user_id != user_id:
            return None
        return job

    def mark_status(self, operation_name: str, status: str) -> None:
        if self.disabled or self.client is None:
            job = _MEM_JOBS.get(operation_name)
            if job is not None:
                _MEM_JOBS[operation_name] = replace(job, status=status)
            return
        try:  # pragma: no cover - network
            self.client.table("video_jobs").update({"status": status}).eq(
                "operation_name", operation_name
            ).execute()
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB update video job failed: {exc}") from exc
