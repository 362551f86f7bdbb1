from pydantic import BaseModel, Field
from typing import Annotated, List, Optional

# clips.aspect_ratio column width
FormatTag = Annotated[str, Field(max_length=10)]


class GenerateClipsOptions(BaseModel):
    auto_hook_detection: Optional[bool] = Field(default=None, alias="autoHookDetection")
    speaker_detection: Optional[bool] = Field(default=None, alias="speakerDetection")
    high_energy_moments: Optional[bool] = Field(default=None, alias="highEnergyMoments")
    export_formats: Optional[List[FormatTag]] = Field(default=None, alias="exportFormats")

    class Config:
        populate_by_name = True


class GenerateClipsRequest(BaseModel):
    # Optional here so a missing id is reported by the pipeline, not the schema
    source_media_id: Optional[str] = Field(default=None, alias="sourceMediaId")
    options: Optional[GenerateClipsOptions] = None

    class Config:
        populate_by_name = True


class GenerateClipsResponse(BaseModel):
    success: bool = True
    job_id: str = Field(serialization_alias="jobId")
    status: str
    total_clips: int = Field(serialization_alias="totalClips")
    message: str
