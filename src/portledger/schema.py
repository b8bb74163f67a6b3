from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class BaselineEntryDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    baseline: StrictStr
    port_version: StrictInt = Field(0, alias="port-version", ge=0)


class BaselineFileDTO(BaseModel):
    default: Dict[str, BaselineEntryDTO]


class VersionEntryDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    git_tree: StrictStr = Field(alias="git-tree")
    version: Optional[StrictStr] = None
    version_semver: Optional[StrictStr] = Field(None, alias="version-semver")
    version_date: Optional[StrictStr] = Field(None, alias="version-date")
    version_string: Optional[StrictStr] = Field(None, alias="version-string")
    port_version: StrictInt = Field(0, alias="port-version", ge=0)


class VersionsFileDTO(BaseModel):
    versions: List[VersionEntryDTO]
