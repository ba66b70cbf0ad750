"""
Fixed default paths for each pipeline stage.

Every path can be overridden by a positional argument of the matching
command; there is no other configuration source.
"""

from pathlib import Path

from pydantic import BaseModel, Field


class PipelinePaths(BaseModel):
    """Default locations of pipeline inputs and outputs, relative to the working directory."""

    sheets_dir: Path = Field(default=Path("./moemon_sprite"), description="4-up sprite sheets, one folder per generation")
    split_dir: Path = Field(default=Path("./moemon-sprites-split"), description="Split sprites (front, back, ...)")
    front_dir: Path = Field(default=Path("./moemon-sprites-split/front"), description="Front sprites scanned for keys")
    raw_mapping: Path = Field(default=Path("./dex-to-moemon-mapping.json"), description="Stage-1 output")
    roster_source: Path = Field(default=Path("./Radical-Red-Pokedex-master/data.js"), description="Roster data file")
    reference_mapping: Path = Field(default=Path("./dex-to-rr-mapping.json"), description="Stage-2 output")
    processed_mapping: Path = Field(default=Path("./dex-to-moemon-mapping-processed.json"), description="Stage-3 output")
    archive_dir: Path = Field(
        default=Path("./moemon_sprite_april_25/Sprite Database"),
        description="Second sprite archive used to fill gaps",
    )
    fill_log: Path = Field(default=Path("./fill-missing-moemon-log.txt"), description="Gap filler run log")
