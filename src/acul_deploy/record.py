from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from acul_deploy.assets.hashes import AssetHashSet
from acul_deploy.core.json import atomic_write_json
from acul_deploy.core.time import utc_now_iso


class DeploymentRecord(BaseModel):
    """Summary of a successful deploy, written once at the end of a run."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    timestamp: str = Field(default_factory=utc_now_iso)
    vercel_url: str
    hashes: AssetHashSet
    screens_updated: list[str] = Field(default_factory=list)


def write_deployment_record(path: Path, record: DeploymentRecord) -> Path:
    path = Path(path)
    atomic_write_json(path, record.model_dump(mode="json", by_alias=True))
    return path
